# User API - Registration, login, token refresh
#
# Endpoints:
#   POST /api/user/register  - Create account, sign in, return secret phrase
#   POST /api/user/login     - Sign in, return secret phrase
#   POST /api/user/refresh   - New access token from the refresh cookie
#
# Register and login set three HttpOnly cookies: accesstoken, refreshtoken
# and key (the secret phrase). The phrase is also returned as {"hash": ...}.

from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Cookie, Depends, HTTPException, Response, status
from pydantic import BaseModel

from ..config import Settings
from ..core.auth import TokenKind
from ..core.exceptions import MissingToken, VaultError
from ..vault.models import AuthTokens
from ..vault.services import VaultServices
from .dependencies import get_settings, get_vault
from .errors import http_error
from .security import ACCESS_COOKIE, KEY_COOKIE, REFRESH_COOKIE

router = APIRouter(prefix="/api/user", tags=["user"])

REFRESH_COOKIE_MAX_AGE = timedelta(days=60)
KEY_COOKIE_MAX_AGE = timedelta(hours=10000)


# Request/Response Models
class CredentialsRequest(BaseModel):
    username: str
    password: str


class SecretPhraseResponse(BaseModel):
    hash: str


def _set_cookie(response: Response, name: str, value: str, max_age: timedelta, secure: bool):
    response.set_cookie(
        key=name,
        value=value,
        max_age=int(max_age.total_seconds()),
        path="/",
        httponly=True,
        secure=secure,
    )


def _set_auth_cookies(
    response: Response,
    tokens: AuthTokens,
    vault: VaultServices,
    settings: Settings,
):
    _set_cookie(response, ACCESS_COOKIE, tokens.access_token,
                vault.tokens.ttl(TokenKind.ACCESS), settings.cookie_secure)
    _set_cookie(response, REFRESH_COOKIE, tokens.refresh_token,
                REFRESH_COOKIE_MAX_AGE, settings.cookie_secure)
    if tokens.secret_phrase:
        _set_cookie(response, KEY_COOKIE, tokens.secret_phrase,
                    KEY_COOKIE_MAX_AGE, settings.cookie_secure)


def _require_credentials(request: CredentialsRequest):
    if not request.username or not request.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="username and password are required",
        )


# Endpoints

@router.post("/register", response_model=SecretPhraseResponse)
async def register(
    request: CredentialsRequest,
    response: Response,
    vault: VaultServices = Depends(get_vault),
    settings: Settings = Depends(get_settings),
):
    """
    Create an account and sign in.

    Returns the secret phrase the client must present (as the key cookie)
    on every record request.
    """
    _require_credentials(request)
    try:
        tokens = await vault.users.register(request.username, request.password)
    except VaultError as e:
        raise http_error(e)

    _set_auth_cookies(response, tokens, vault, settings)
    return SecretPhraseResponse(hash=tokens.secret_phrase)


@router.post("/login", response_model=SecretPhraseResponse)
async def login(
    request: CredentialsRequest,
    response: Response,
    vault: VaultServices = Depends(get_vault),
    settings: Settings = Depends(get_settings),
):
    """Sign in. The returned phrase is the same one issued at registration."""
    _require_credentials(request)
    try:
        tokens = await vault.users.login(request.username, request.password)
    except VaultError as e:
        raise http_error(e)

    _set_auth_cookies(response, tokens, vault, settings)
    return SecretPhraseResponse(hash=tokens.secret_phrase)


@router.post("/refresh")
async def refresh(
    response: Response,
    refreshtoken: Optional[str] = Cookie(None),
    vault: VaultServices = Depends(get_vault),
    settings: Settings = Depends(get_settings),
):
    """Issue a new access token cookie from a valid refresh token cookie."""
    try:
        if not refreshtoken:
            raise MissingToken()
        tokens = await vault.users.refresh(refreshtoken)
    except VaultError as e:
        raise http_error(e)

    _set_auth_cookies(response, tokens, vault, settings)
    return {"success": True}
