from .add_card import AddCard, AddCardRequest
from .update_card import UpdateCard, UpdateCardRequest
from .delete_card import DeleteCard, DeleteCardRequest
from .list_cards import ListCards, ListCardsRequest
from .get_card import GetCard

__all__ = [
    "AddCard",
    "AddCardRequest",
    "UpdateCard",
    "UpdateCardRequest",
    "DeleteCard",
    "DeleteCardRequest",
    "ListCards",
    "ListCardsRequest",
    "GetCard",
]
