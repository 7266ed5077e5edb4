from .card_repository import LocalCardRepository

__all__ = [
    "LocalCardRepository",
]
