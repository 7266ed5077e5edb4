"""SQLAlchemy-based local data source for loyalty card records"""
import asyncio
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import select, delete, func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from ..errors import MalformedRecordError, StorageInitError, StorageReadError, StorageWriteError
from ..interfaces.data_source import ICardDataSource
from ..models.card_orm import CardRecordORM, Base
from ..models.converters import payload_to_record, record_to_payload

logger = logging.getLogger(__name__)


class LocalCardDataSource(ICardDataSource):
    """
    SQLite-backed store of raw card records, accessed through aiosqlite.

    Owns the engine exclusively. Each write runs in its own transaction and
    writes are serialised, since SQLite admits a single writer.
    """

    def __init__(self, db_path: str = "./data/card_snap.db", echo: bool = False):
        # Public: Database path
        self.db_path = db_path
        self.echo = echo

        # Private: SQLAlchemy engine and session factory
        self.__engine: Optional[AsyncEngine] = None
        self.__SessionLocal: Optional[async_sessionmaker] = None
        self.__init_lock = asyncio.Lock()
        self.__write_lock = asyncio.Lock()

    @property
    def is_initialized(self) -> bool:
        return self.__engine is not None

    async def initialize(self) -> None:
        """Open the SQLite file, creating it and the schema if absent"""
        if self.__engine is not None:
            return

        async with self.__init_lock:
            # Another caller may have finished opening while we waited
            if self.__engine is not None:
                return

            engine = None
            try:
                Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
                engine = create_async_engine(
                    f"sqlite+aiosqlite:///{self.db_path}",
                    echo=self.echo
                )
                async with engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)
            except (OSError, SQLAlchemyError) as e:
                if engine is not None:
                    await engine.dispose()
                logger.error(f"Failed to open card store {self.db_path}: {e}")
                raise StorageInitError(
                    "Failed to initialize local storage",
                    technical_details=str(e)
                ) from e

            self.__engine = engine
            self.__SessionLocal = async_sessionmaker(engine, expire_on_commit=False)
            logger.info(f"Connected to card store: {self.db_path}")

    async def close(self) -> None:
        """Dispose the engine; a no-op when already closed"""
        if self.__engine is None:
            return
        engine = self.__engine
        self.__engine = None
        self.__SessionLocal = None
        await engine.dispose()
        logger.info("Disconnected from card store")

    async def _ensure_initialized(self) -> None:
        if self.__engine is None:
            await self.initialize()

    async def get_all(self) -> List[Dict[str, Any]]:
        await self._ensure_initialized()

        try:
            async with self.__SessionLocal() as session:
                result = await session.execute(
                    select(CardRecordORM).order_by(CardRecordORM.position)
                )
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise StorageReadError(
                "Failed to get cards from local storage",
                technical_details=str(e)
            ) from e

        records = []
        for row in rows:
            try:
                records.append(payload_to_record(row.payload, row.id))
            except MalformedRecordError as e:
                logger.warning(f"Skipping corrupt card record {row.id}: {e.message}")
        return records

    async def get_by_id(self, record_id: str) -> Optional[Dict[str, Any]]:
        await self._ensure_initialized()

        try:
            async with self.__SessionLocal() as session:
                row = await session.get(CardRecordORM, record_id)
        except SQLAlchemyError as e:
            raise StorageReadError(
                "Failed to get card by ID from local storage",
                technical_details=str(e)
            ) from e

        if row is None:
            return None
        return payload_to_record(row.payload, row.id)

    async def upsert(self, record: Dict[str, Any]) -> None:
        await self._write(record, replace=True)

    async def insert(self, record: Dict[str, Any]) -> bool:
        """Store a record only if its id is new; returns False when it already exists"""
        return await self._write(record, replace=False)

    async def _write(self, record: Dict[str, Any], replace: bool) -> bool:
        record_id = record.get("id") if isinstance(record, dict) else None
        if not isinstance(record_id, str) or not record_id:
            raise MalformedRecordError("Record has no id", field="id")

        try:
            payload = record_to_payload(record)
        except (TypeError, ValueError) as e:
            raise MalformedRecordError(
                "Record is not JSON serializable",
                record_id=record_id,
                technical_details=str(e)
            ) from e

        await self._ensure_initialized()

        async with self.__write_lock:
            try:
                async with self.__SessionLocal() as session:
                    async with session.begin():
                        row = await session.get(CardRecordORM, record_id)
                        if row is not None and not replace:
                            return False
                        if row is None:
                            last_position = await session.scalar(
                                select(func.max(CardRecordORM.position))
                            )
                            session.add(CardRecordORM(
                                id=record_id,
                                position=(last_position or 0) + 1,
                                payload=payload
                            ))
                        else:
                            row.payload = payload
            except SQLAlchemyError as e:
                raise StorageWriteError(
                    "Failed to save card to local storage",
                    technical_details=str(e)
                ) from e

        logger.debug(f"Saved card record {record_id}")
        return True

    async def delete(self, record_id: str) -> None:
        await self._ensure_initialized()

        async with self.__write_lock:
            try:
                async with self.__SessionLocal() as session:
                    async with session.begin():
                        await session.execute(
                            delete(CardRecordORM).where(CardRecordORM.id == record_id)
                        )
            except SQLAlchemyError as e:
                raise StorageWriteError(
                    "Failed to delete card from local storage",
                    technical_details=str(e)
                ) from e

        logger.debug(f"Deleted card record {record_id}")

    async def count(self) -> int:
        """Get total number of stored records"""
        await self._ensure_initialized()

        try:
            async with self.__SessionLocal() as session:
                count = await session.scalar(select(func.count(CardRecordORM.id)))
        except SQLAlchemyError as e:
            raise StorageReadError(
                "Failed to count cards in local storage",
                technical_details=str(e)
            ) from e
        return count or 0

    async def storage_size_bytes(self) -> int:
        """Get the UTF-8 size of all stored payloads"""
        await self._ensure_initialized()

        try:
            async with self.__SessionLocal() as session:
                result = await session.execute(select(CardRecordORM.payload))
                payloads = result.scalars().all()
        except SQLAlchemyError as e:
            raise StorageReadError(
                "Failed to measure local storage",
                technical_details=str(e)
            ) from e
        return sum(len(payload.encode("utf-8")) for payload in payloads)
