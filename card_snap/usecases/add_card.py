"""Add a new loyalty card"""
from datetime import datetime
from typing import Callable, Optional

from pydantic import BaseModel, Field

from ..errors import DuplicateCardError, ValidationError
from ..interfaces.repository import ICardRepository
from ..models.card import BarcodeFormat, LoyaltyCard, new_card_id, utc_now
from ..models.result import Failure, Result


class AddCardRequest(BaseModel):
    """Details of a card the user wants to store"""
    name: str = Field(..., description="Display name")
    store_name: str = Field(..., description="Store the card belongs to")
    barcode_data: str = Field(..., description="Raw encoded barcode payload")
    format: BarcodeFormat = Field(..., description="Barcode symbology")
    image_url: Optional[str] = None
    color_hex: Optional[str] = None
    notes: Optional[str] = None

    @property
    def empty_field(self) -> Optional[str]:
        """First required field that is blank, if any"""
        for field in ("name", "store_name", "barcode_data"):
            if not getattr(self, field).strip():
                return field
        return None

    @property
    def is_valid(self) -> bool:
        return self.empty_field is None


class AddCard:
    """
    Creates a card from a request and stores it.

    Rejects blank required fields and a barcode that is already stored for
    the same store.
    """

    def __init__(self, repository: ICardRepository, clock: Callable[[], datetime] = utc_now):
        self.repository = repository
        self._clock = clock

    async def execute(self, request: AddCardRequest) -> Result[LoyaltyCard]:
        if not request.is_valid:
            return Failure(ValidationError("Invalid card data provided", field=request.empty_field))

        existing = await self.repository.get_all_cards()
        cards = existing.data_or_none
        if cards is None:
            return existing

        barcode_data = request.barcode_data.strip()
        store_name = request.store_name.strip()
        if any(
            card.barcode_data == barcode_data
            and card.store_name.lower() == store_name.lower()
            for card in cards
        ):
            return Failure(DuplicateCardError("Card with this barcode already exists", field="barcode_data"))

        now = self._clock()
        card = LoyaltyCard(
            id=new_card_id(),
            name=request.name.strip(),
            store_name=store_name,
            barcode_data=barcode_data,
            format=request.format,
            created_at=now,
            updated_at=now,
            image_url=request.image_url,
            color_hex=request.color_hex,
            notes=request.notes,
        )

        return await self.repository.add_card(card)
