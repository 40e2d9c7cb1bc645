# Binary API - Encrypted file storage
#
# Endpoints:
#   POST /api/binary/              - Upload a file (multipart "file"); title = filename
#   PUT  /api/binary/{binary_id}   - Replace the file and/or the title
#   GET  /api/binary/              - List the caller's files, data base64 encoded
#
# Uploads are limited to MAX_FILE_SIZE bytes.

import base64
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Response, UploadFile, status
from pydantic import BaseModel

from ..core.exceptions import VaultError
from ..vault.models import BinaryData
from ..vault.services import VaultServices
from .dependencies import SKIPPED_HEADER, get_vault
from .errors import http_error
from .security import CurrentUser, get_current_user, get_secret_key

router = APIRouter(prefix="/api/binary", tags=["binary"])

MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MiB


class BinaryResponse(BaseModel):
    id: int
    user_id: int
    title: str
    data: str  # base64
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


async def _read_upload(file: UploadFile) -> bytes:
    """Read an upload, enforcing the size limit."""
    if file.size is not None and file.size > MAX_FILE_SIZE:
        raise HTTPException(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"File too large: {file.size} bytes (max {MAX_FILE_SIZE})",
        )

    content = await file.read()
    if len(content) > MAX_FILE_SIZE:
        raise HTTPException(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            f"File too large: {len(content)} bytes (max {MAX_FILE_SIZE})",
        )
    return content


# Endpoints

@router.post("/", status_code=status.HTTP_201_CREATED)
async def upload_binary(
    file: UploadFile = File(...),
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """
    Encrypt and store an uploaded file.

    The original filename becomes the (encrypted) title.
    """
    content = await _read_upload(file)
    record = BinaryData(user_id=user.user_id, title=file.filename or "", data=content)
    try:
        binary_id = await vault.binaries.create(record, key)
    except VaultError as e:
        raise http_error(e)
    return {"id": binary_id}


@router.put("/{binary_id}")
async def update_binary(
    binary_id: int,
    file: Optional[UploadFile] = File(None),
    title: Optional[str] = Form(None),
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """Replace the stored file, its title, or both."""
    changes = {}
    if title is not None:
        changes["title"] = title
    if file is not None:
        changes["data"] = await _read_upload(file)

    try:
        await vault.binaries.update(binary_id, user.user_id, changes, key)
    except VaultError as e:
        raise http_error(e)
    return {"success": True}


@router.get("/", response_model=List[BinaryResponse])
async def list_binaries(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """Decrypted files of the caller. Payloads are base64 in the JSON body."""
    try:
        batch = await vault.binaries.get_all_with_report(user.user_id, key)
    except VaultError as e:
        raise http_error(e)

    response.headers[SKIPPED_HEADER] = str(batch.skipped)
    return [
        BinaryResponse(
            id=record.id,
            user_id=record.user_id,
            title=record.title,
            data=base64.b64encode(record.data).decode("ascii"),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
        for record in batch.records
    ]
