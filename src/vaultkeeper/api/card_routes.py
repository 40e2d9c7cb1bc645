# Card API - Encrypted bank card storage
#
# Endpoints:
#   POST /api/card/            - Store a card
#   PUT  /api/card/{card_id}   - Change some fields of a card
#   GET  /api/card/            - List the caller's cards (decrypted)
#
# All endpoints require the accesstoken and key cookies. The card number
# travels as "num" on the wire.

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from ..core.exceptions import VaultError
from ..vault.models import Card
from ..vault.services import VaultServices
from .dependencies import SKIPPED_HEADER, get_vault
from .errors import http_error
from .security import CurrentUser, get_current_user, get_secret_key

router = APIRouter(prefix="/api/card", tags=["card"])


# Request/Response Models
class CardCreateRequest(BaseModel):
    model_config = {"populate_by_name": True}

    bank_name: str
    number: str = Field(..., alias="num")
    cvv: str
    exp_date: str
    card_holder_name: str


class CardUpdateRequest(BaseModel):
    model_config = {"populate_by_name": True}

    bank_name: Optional[str] = None
    number: Optional[str] = Field(None, alias="num")
    cvv: Optional[str] = None
    exp_date: Optional[str] = None
    card_holder_name: Optional[str] = None


class CardResponse(BaseModel):
    model_config = {"populate_by_name": True}

    id: int
    user_id: int
    bank_name: str
    number: str = Field(..., alias="num")
    cvv: str
    exp_date: str
    card_holder_name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# Endpoints

@router.post("/", status_code=status.HTTP_201_CREATED)
async def create_card(
    request: CardCreateRequest,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """Encrypt and store a card for the caller."""
    card = Card(user_id=user.user_id, **request.model_dump())
    try:
        card_id = await vault.cards.create(card, key)
    except VaultError as e:
        raise http_error(e)
    return {"id": card_id}


@router.put("/{card_id}")
async def update_card(
    card_id: int,
    request: CardUpdateRequest,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """Re-encrypt and overwrite only the provided fields."""
    try:
        await vault.cards.update(card_id, user.user_id, request.model_dump(exclude_none=True), key)
    except VaultError as e:
        raise http_error(e)
    return {"success": True}


@router.get("/", response_model=List[CardResponse], response_model_by_alias=True)
async def list_cards(
    response: Response,
    user: CurrentUser = Depends(get_current_user),
    key: str = Depends(get_secret_key),
    vault: VaultServices = Depends(get_vault),
):
    """
    Decrypted cards of the caller.

    Cards that fail to decrypt with the presented key are left out; the
    X-Skipped-Records header says how many.
    """
    try:
        batch = await vault.cards.get_all_with_report(user.user_id, key)
    except VaultError as e:
        raise http_error(e)

    response.headers[SKIPPED_HEADER] = str(batch.skipped)
    return [CardResponse.model_validate(card, from_attributes=True) for card in batch.records]
