"""
Request-scoped access to objects created at application startup.
"""

from fastapi import HTTPException, Request, status

from ..config import Settings
from ..vault.services import VaultServices

SKIPPED_HEADER = "X-Skipped-Records"


def get_vault(request: Request) -> VaultServices:
    """Services wired by the lifespan handler (or injected by create_app)."""
    vault = getattr(request.app.state, "vault", None)
    if vault is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Vault services not initialized",
        )
    return vault


def get_settings(request: Request) -> Settings:
    return request.app.state.settings
