"""
Interfaces for the storage layer.

Callers depend on these contracts, not on the SQLite implementation.
"""

from .data_source import ICardDataSource
from .repository import ICardRepository

__all__ = [
    "ICardDataSource",
    "ICardRepository",
]
