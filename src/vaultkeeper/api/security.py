# API Security - Access token gate and secret phrase lookup
#
# Every record endpoint depends on get_current_user (who is calling) and
# get_secret_key (what to encrypt/decrypt with). Both read cookies set at
# register/login time.
#
# A rejected token always yields a bare 401 "unauthorized"; the precise
# reason goes to the server log and the audit trail only.

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException, status

from ..core.audit_log import EventSeverity, EventType, get_audit_logger
from ..core.auth import TokenKind
from ..core.exceptions import MissingToken, TokenError
from ..vault.services import VaultServices
from .dependencies import get_vault

logger = logging.getLogger(__name__)

ACCESS_COOKIE = "accesstoken"
REFRESH_COOKIE = "refreshtoken"
KEY_COOKIE = "key"


@dataclass(frozen=True)
class CurrentUser:
    user_id: int
    username: str


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


async def get_current_user(
    accesstoken: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None),
    vault: VaultServices = Depends(get_vault),
) -> CurrentUser:
    """
    FastAPI dependency resolving the caller from the access token.

    The accesstoken cookie wins; an Authorization: Bearer header is the
    fallback for non-browser clients.

    Raises:
        HTTPException: 401 if the token is missing or fails verification
    """
    token = accesstoken or _bearer_token(authorization)
    try:
        if not token:
            raise MissingToken()
        claims = vault.tokens.verify(token, TokenKind.ACCESS)
    except TokenError as e:
        logger.info(f"Rejected request: {e.reason}")
        get_audit_logger().log_event(
            event_type=EventType.AUTH_REJECTED,
            severity=EventSeverity.ALERT,
            message=f"Access token rejected: {e.reason}",
            details={"reason": e.reason},
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="unauthorized",
        )

    return CurrentUser(user_id=claims.user_id, username=claims.username)


async def get_secret_key(key: Optional[str] = Cookie(None)) -> str:
    """
    FastAPI dependency returning the caller's secret phrase.

    Raises:
        HTTPException: 400 if the key cookie is absent
    """
    if not key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="key not found",
        )
    return key
