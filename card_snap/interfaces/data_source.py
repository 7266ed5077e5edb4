"""
Data source interface - separates store lifecycle and raw record access
from domain semantics.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class ICardDataSource(ABC):
    """
    Interface for durable local persistence of raw card records.

    Records are plain dicts in the persisted field layout, keyed by their
    'id' field. Implementations own the physical store handle.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """
        Open (creating if absent) the local store. Idempotent.

        Raises:
            StorageInitError: if the store cannot be opened
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the store handle. Safe to call more than once."""
        pass

    @property
    @abstractmethod
    def is_initialized(self) -> bool:
        """
        Check if the store is open.

        Returns:
            True if open, False otherwise
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[Dict[str, Any]]:
        """
        Get every stored record in insertion order.

        Corrupt records are skipped and logged.

        Raises:
            StorageReadError: on I/O failure
        """
        pass

    @abstractmethod
    async def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a single record.

        Returns:
            The record, or None if absent

        Raises:
            MalformedRecordError: if the stored record is corrupt
            StorageReadError: on I/O failure
        """
        pass

    @abstractmethod
    async def upsert(self, record: Dict[str, Any]) -> None:
        """
        Insert the record, or replace the one with the same id.

        Raises:
            StorageWriteError: on I/O failure
        """
        pass

    @abstractmethod
    async def insert(self, record: Dict[str, Any]) -> bool:
        """
        Insert the record unless one with the same id exists.

        The existence check and the write happen in one serialised transaction.

        Returns:
            True if stored, False if the id was already taken

        Raises:
            StorageWriteError: on I/O failure
        """
        pass

    @abstractmethod
    async def delete(self, record_id: str) -> None:
        """
        Remove a record. Deleting an absent id succeeds.

        Raises:
            StorageWriteError: on I/O failure
        """
        pass

    @abstractmethod
    async def count(self) -> int:
        """Number of stored records"""
        pass

    @abstractmethod
    async def storage_size_bytes(self) -> int:
        """Total size of the stored payloads in bytes"""
        pass
