"""Look up a single loyalty card"""
from ..interfaces.repository import ICardRepository
from ..models.card import LoyaltyCard
from ..models.result import Result


class GetCard:
    def __init__(self, repository: ICardRepository):
        self.repository = repository

    async def execute(self, card_id: str) -> Result[LoyaltyCard]:
        return await self.repository.get_card_by_id(card_id)
