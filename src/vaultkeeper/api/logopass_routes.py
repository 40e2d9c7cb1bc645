# Login/Password API - Encrypted credential storage
#
# Endpoints:
#   POST /api/logopass/                 - Store a login/password pair
#   PUT  /api/logopass/{logopass_id}    - Change username and/or password
#   GET  /api/logopass/                 - List the caller's pairs (decrypted)

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from ..core.exceptions import VaultError
from ..vault.models import LoginPassword
from ..vault.services import VaultServices
from .dependencies import SKIPPED_HEADER, get_vault
from .errors import http_error
from .security import CurrentUser, get_current_user, get_secret_key

router = APIRouter(prefix="/api/logopass", tags=["logopass"])


# Request/Response Models
class LoginPasswordCreateRequest(BaseModel):
    app_name: str = Field(..., min_length=1, max_length=255)
    username: str
    password: str


class LoginPasswordUpdateRequest(BaseModel):
    app_name: Optional[str] = Field(None, min_length=1, max_length=255)
    username: Optional[str] = None
    password: Optional[str] = None


class LoginPasswordResponse(BaseModel):
    id: int
    user_id: int
    app_name: str
    username: str
    password: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Endpoints

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_logopass(
    request: LoginPasswordCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """Encrypt and store a login/password pair. The app name stays readable."""
    record = LoginPassword(user_id=user.user_id, **request.model_dump())
    try:
        record_id = await vault.logopass.create(record, key)
    except VaultError as e:
        raise http_error(e)
    return {"id": record_id}


@router.put("/{logopass_id}")
async def update_logopass(
    logopass_id: int,
    request: LoginPasswordUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    try:
        await vault.logopass.update(
            logopass_id, user.user_id, request.model_dump(exclude_none=True), key
        )
    except VaultError as e:
        raise http_error(e)
    return {"success": True}


@router.get("/", response_model=List[LoginPasswordResponse])
async def list_logopass(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """Decrypted login/password pairs of the caller."""
    try:
        batch = await vault.logopass.get_all_with_report(user.user_id, key)
    except VaultError as e:
        raise http_error(e)

    response.headers[SKIPPED_HEADER] = str(batch.skipped)
    return [
        LoginPasswordResponse.model_validate(record, from_attributes=True)
        for record in batch.records
    ]
