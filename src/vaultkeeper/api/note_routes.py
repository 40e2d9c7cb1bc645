# Note API - Encrypted free-text notes
#
# Endpoints:
#   POST /api/note/            - Store a note
#   PUT  /api/note/{note_id}   - Change title and/or text
#   GET  /api/note/            - List the caller's notes (decrypted)

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel

from ..core.exceptions import VaultError
from ..vault.models import Note
from ..vault.services import VaultServices
from .dependencies import SKIPPED_HEADER, get_vault
from .errors import http_error
from .security import CurrentUser, get_current_user, get_secret_key

router = APIRouter(prefix="/api/note", tags=["note"])


# Request/Response Models
class NoteCreateRequest(BaseModel):
    title: str
    text_data: str


class NoteUpdateRequest(BaseModel):
    title: Optional[str] = None
    text_data: Optional[str] = None


class NoteResponse(BaseModel):
    id: int
    user_id: int
    title: str
    text_data: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Endpoints

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_note(
    request: NoteCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """Encrypt and store a note. Both title and text are encrypted."""
    note = Note(user_id=user.user_id, **request.model_dump())
    try:
        note_id = await vault.notes.create(note, key)
    except VaultError as e:
        raise http_error(e)
    return {"id": note_id}


@router.put("/{note_id}")
async def update_note(
    note_id: int,
    request: NoteUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    try:
        await vault.notes.update(note_id, user.user_id, request.model_dump(exclude_none=True), key)
    except VaultError as e:
        raise http_error(e)
    return {"success": True}


@router.get("/", response_model=List[NoteResponse])
async def list_notes(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    try:
        batch = await vault.notes.get_all_with_report(user.user_id, key)
    except VaultError as e:
        raise http_error(e)

    response.headers[SKIPPED_HEADER] = str(batch.skipped)
    return [NoteResponse.model_validate(note, from_attributes=True) for note in batch.records]
