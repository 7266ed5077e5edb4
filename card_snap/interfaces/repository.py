"""
Repository interface - abstracts card data access.
"""

from abc import ABC, abstractmethod
from typing import List
from ..models.card import LoyaltyCard
from ..models.result import Result
from ..models.stats import StorageStats


class ICardRepository(ABC):
    """
    Repository interface for card data access.

    Follows Repository Pattern - the only seam the rest of the application
    talks to. Every method returns a Result; no exception crosses it.
    """

    @abstractmethod
    async def get_all_cards(self) -> Result[List[LoyaltyCard]]:
        """
        Get every stored card in insertion order.

        Returns:
            Success with the cards, or Failure(RepositoryError)
        """
        pass

    @abstractmethod
    async def get_card_by_id(self, card_id: str) -> Result[LoyaltyCard]:
        """
        Get a card by id.

        Returns:
            Success with the card, Failure(NotFoundError) if absent,
            or Failure(RepositoryError)
        """
        pass

    @abstractmethod
    async def add_card(self, card: LoyaltyCard) -> Result[LoyaltyCard]:
        """
        Validate and store a new card.

        Returns:
            Success with the stored card, Failure(ValidationError),
            or Failure(RepositoryError)
        """
        pass

    @abstractmethod
    async def update_card(self, card: LoyaltyCard) -> Result[LoyaltyCard]:
        """
        Replace an existing card, refreshing its updated_at.

        Returns:
            Success with the stored card, Failure(ValidationError),
            Failure(NotFoundError), or Failure(RepositoryError)
        """
        pass

    @abstractmethod
    async def delete_card(self, card_id: str) -> Result[None]:
        """
        Remove a card. Removing an absent id succeeds.
        """
        pass

    @abstractmethod
    async def archive_card(self, card_id: str) -> Result[LoyaltyCard]:
        """
        Mark a card archived instead of removing it.
        """
        pass

    @abstractmethod
    async def search_cards(self, query: str) -> Result[List[LoyaltyCard]]:
        """
        Case-insensitive search over card and store names.
        """
        pass

    @abstractmethod
    async def get_cards_by_store(self, store_name: str) -> Result[List[LoyaltyCard]]:
        pass

    @abstractmethod
    async def export_cards(self) -> Result[str]:
        pass

    @abstractmethod
    async def import_cards(self, data: str) -> Result[List[LoyaltyCard]]:
        pass

    @abstractmethod
    async def get_storage_stats(self) -> Result[StorageStats]:
        pass
