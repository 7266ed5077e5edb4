"""Edit an existing loyalty card"""
from typing import Any, Dict, Optional

from pydantic import BaseModel

from ..interfaces.repository import ICardRepository
from ..models.card import BarcodeFormat, LoyaltyCard
from ..models.result import Result

# Fields a card cannot be without; None for these means "leave unchanged"
REQUIRED_FIELDS = ("name", "store_name", "barcode_data", "format")
TRIMMED_FIELDS = ("name", "store_name", "barcode_data")


class UpdateCardRequest(BaseModel):
    """
    Changes to apply to a stored card.

    Only fields that are explicitly set are applied, so an optional field can
    be cleared by passing None for it.
    """
    id: str
    name: Optional[str] = None
    store_name: Optional[str] = None
    barcode_data: Optional[str] = None
    format: Optional[BarcodeFormat] = None
    image_url: Optional[str] = None
    color_hex: Optional[str] = None
    notes: Optional[str] = None
    is_archived: Optional[bool] = None

    def changes(self) -> Dict[str, Any]:
        changes = self.model_dump(exclude_unset=True, exclude={"id"})
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                del changes[field]
        if changes.get("is_archived", False) is None:
            del changes["is_archived"]
        for field in TRIMMED_FIELDS:
            if field in changes:
                changes[field] = changes[field].strip()
        return changes


class UpdateCard:
    def __init__(self, repository: ICardRepository):
        self.repository = repository

    async def execute(self, request: UpdateCardRequest) -> Result[LoyaltyCard]:
        current = await self.repository.get_card_by_id(request.id)
        if current.error_or_none is not None:
            return current

        card = current.data_or_none.model_copy(update=request.changes())
        return await self.repository.update_card(card)
