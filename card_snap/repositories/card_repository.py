"""
LocalCardRepository implementation using Repository Pattern.

Wraps the local data source, converts raw records to domain cards and turns
every failure into a Result, so nothing above this layer ever sees a storage
exception or a persisted model.
"""

import functools
import json
import logging
from datetime import datetime
from typing import Callable, Iterable, List, Optional

from ..errors import (
    DuplicateCardError,
    MalformedRecordError,
    NotFoundError,
    RepositoryError,
    ValidationError,
)
from ..interfaces.data_source import ICardDataSource
from ..interfaces.repository import ICardRepository
from ..models.card import LoyaltyCard, new_card_id, utc_now
from ..models.converters import domain_to_record, record_to_domain, records_to_domain
from ..models.result import Failure, Result, Success
from ..models.stats import StorageStats

logger = logging.getLogger(__name__)


def returns_result(action: str):
    """Convert any exception escaping a repository method into Failure(RepositoryError)"""
    def decorator(method):
        @functools.wraps(method)
        async def wrapper(self, *args, **kwargs):
            try:
                return await method(self, *args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed to {action}: {e!r} "
                    f"(trace {getattr(e, 'trace_id', 'n/a')})"
                )
                return Failure(RepositoryError(f"Failed to {action}", cause=e))
        return wrapper
    return decorator


class LocalCardRepository(ICardRepository):
    """
    Repository for loyalty cards stored on the device.

    Holds no storage state of its own beyond the data source reference; the
    only other state is the time of the last export.
    """

    def __init__(
        self,
        data_source: ICardDataSource,
        clock: Callable[[], datetime] = utc_now,
        export_indent: Optional[int] = None
    ):
        """
        Initialize repository with its data source.

        Args:
            data_source: Store of raw card records
            clock: Source of the current UTC time
            export_indent: JSON indent for export_cards (None for compact)
        """
        self.data_source = data_source
        self._clock = clock
        self._export_indent = export_indent
        self._last_backup_date: Optional[datetime] = None

    def _validate(self, card: LoyaltyCard, skip: Iterable[str] = ()) -> Optional[ValidationError]:
        errors = [
            (field, message) for field, message in card.validation_errors(now=self._clock())
            if field not in skip
        ]
        if not errors:
            return None
        field, message = errors[0]
        return ValidationError(message, field=field)

    def _next_updated_at(self, stored: LoyaltyCard) -> datetime:
        # Never move updated_at backwards, even if the clock does
        return max(self._clock(), stored.updated_at)

    @returns_result("get all cards")
    async def get_all_cards(self) -> Result[List[LoyaltyCard]]:
        records = await self.data_source.get_all()
        return Success(records_to_domain(records))

    @returns_result("get card by ID")
    async def get_card_by_id(self, card_id: str) -> Result[LoyaltyCard]:
        record = await self.data_source.get_by_id(card_id)
        if record is None:
            return Failure(NotFoundError(card_id))
        return Success(record_to_domain(record))

    @returns_result("add card")
    async def add_card(self, card: LoyaltyCard) -> Result[LoyaltyCard]:
        if not card.id.strip():
            card = card.model_copy(update={"id": new_card_id()})

        error = self._validate(card)
        if error:
            return Failure(error)

        if not await self.data_source.insert(domain_to_record(card)):
            return Failure(DuplicateCardError(f"Card '{card.id}' already exists", field="id"))

        logger.info(f"Added card {card.id}")
        return Success(card)

    @returns_result("update card")
    async def update_card(self, card: LoyaltyCard) -> Result[LoyaltyCard]:
        # Timestamps are owned by the store, not the caller
        error = self._validate(card, skip=("created_at", "updated_at"))
        if error:
            return Failure(error)

        record = await self.data_source.get_by_id(card.id)
        if record is None:
            return Failure(NotFoundError(card.id))

        stored = record_to_domain(record)
        updated = card.model_copy(update={
            "created_at": stored.created_at,
            "updated_at": self._next_updated_at(stored),
        })

        await self.data_source.upsert(domain_to_record(updated))
        logger.info(f"Updated card {card.id}")
        return Success(updated)

    @returns_result("delete card")
    async def delete_card(self, card_id: str) -> Result[None]:
        await self.data_source.delete(card_id)
        return Success(None)

    @returns_result("archive card")
    async def archive_card(self, card_id: str) -> Result[LoyaltyCard]:
        record = await self.data_source.get_by_id(card_id)
        if record is None:
            return Failure(NotFoundError(card_id))

        stored = record_to_domain(record)
        archived = stored.model_copy(update={
            "is_archived": True,
            "updated_at": self._next_updated_at(stored),
        })

        await self.data_source.upsert(domain_to_record(archived))
        logger.info(f"Archived card {card_id}")
        return Success(archived)

    @returns_result("search cards")
    async def search_cards(self, query: str) -> Result[List[LoyaltyCard]]:
        cards = records_to_domain(await self.data_source.get_all())
        return Success([card for card in cards if card.matches(query)])

    @returns_result("get cards by store")
    async def get_cards_by_store(self, store_name: str) -> Result[List[LoyaltyCard]]:
        wanted = store_name.strip().lower()
        cards = records_to_domain(await self.data_source.get_all())
        return Success([card for card in cards if card.store_name.strip().lower() == wanted])

    @returns_result("export cards")
    async def export_cards(self) -> Result[str]:
        cards = records_to_domain(await self.data_source.get_all())
        data = json.dumps(
            [domain_to_record(card) for card in cards],
            indent=self._export_indent,
            ensure_ascii=False
        )
        self._last_backup_date = self._clock()
        logger.info(f"Exported {len(cards)} cards")
        return Success(data)

    @returns_result("import cards")
    async def import_cards(self, data: str) -> Result[List[LoyaltyCard]]:
        try:
            payload = json.loads(data)
        except (TypeError, ValueError) as e:
            return Failure(ValidationError(f"Import data is not valid JSON: {e}", field="data"))

        if not isinstance(payload, list):
            return Failure(ValidationError("Import data must be a JSON array of cards", field="data"))

        # Decode everything before writing anything
        cards = []
        seen_ids = set()
        for index, record in enumerate(payload):
            try:
                card = record_to_domain(record)
            except MalformedRecordError as e:
                return Failure(ValidationError(f"Record {index} is malformed: {e.message}", field=e.field))
            if not card.id.strip():
                return Failure(ValidationError(f"Record {index} has no id", field="id"))
            if card.id in seen_ids:
                return Failure(DuplicateCardError(f"Record {index} repeats id '{card.id}'", field="id"))
            seen_ids.add(card.id)
            error = self._validate(card)
            if error:
                return Failure(error)
            cards.append(card)

        for card in cards:
            await self.data_source.upsert(domain_to_record(card))

        logger.info(f"Imported {len(cards)} cards")
        return Success(cards)

    @returns_result("get storage stats")
    async def get_storage_stats(self) -> Result[StorageStats]:
        cards = records_to_domain(await self.data_source.get_all())
        archived = sum(1 for card in cards if card.is_archived)

        return Success(StorageStats(
            total_cards=len(cards),
            active_cards=len(cards) - archived,
            archived_cards=archived,
            storage_size_bytes=await self.data_source.storage_size_bytes(),
            last_backup_date=self._last_backup_date,
        ))
