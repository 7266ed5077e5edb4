"""Remove or archive a loyalty card"""
from pydantic import BaseModel

from ..errors import ValidationError
from ..interfaces.repository import ICardRepository
from ..models.result import Failure, Result


class DeleteCardRequest(BaseModel):
    id: str
    archive: bool = False  # keep the card, flagged as archived


class DeleteCard:
    def __init__(self, repository: ICardRepository):
        self.repository = repository

    async def execute(self, request: DeleteCardRequest) -> Result[None]:
        if not request.id.strip():
            return Failure(ValidationError("Card id must not be empty", field="id"))

        if request.archive:
            result = await self.repository.archive_card(request.id)
            return result.map(lambda _: None)

        return await self.repository.delete_card(request.id)
