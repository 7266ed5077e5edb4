"""List stored loyalty cards"""
from typing import List, Optional

from pydantic import BaseModel

from ..interfaces.repository import ICardRepository
from ..models.card import LoyaltyCard
from ..models.result import Result, Success


class ListCardsRequest(BaseModel):
    include_archived: bool = True
    query: Optional[str] = None  # matched against card and store names
    store_name: Optional[str] = None


class ListCards:
    """Lists cards in insertion order, optionally filtered"""

    def __init__(self, repository: ICardRepository):
        self.repository = repository

    async def execute(self, request: Optional[ListCardsRequest] = None) -> Result[List[LoyaltyCard]]:
        request = request or ListCardsRequest()

        if request.store_name:
            result = await self.repository.get_cards_by_store(request.store_name)
        elif request.query:
            result = await self.repository.search_cards(request.query)
        else:
            result = await self.repository.get_all_cards()

        if result.is_failure:
            return result

        cards = result.data
        if request.store_name and request.query:
            cards = [card for card in cards if card.matches(request.query)]
        if not request.include_archived:
            cards = [card for card in cards if not card.is_archived]
        return Success(cards)
