"""Shared fixtures for card storage tests"""

import sqlite3
from datetime import datetime, timedelta, timezone

import pytest

from card_snap.models.card import BarcodeFormat, LoyaltyCard
from card_snap.models.card_model import LoyaltyCardModel
from card_snap.repositories.card_repository import LocalCardRepository
from card_snap.services.local_card_data_source import LocalCardDataSource

BASE_TIME = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


def create_test_card(
    id: str = "card_test",
    name: str = "Test Card",
    store_name: str = "Test Store",
    barcode_data: str = "TEST_123456",
    format: BarcodeFormat = BarcodeFormat.QR_CODE,
    created_at: datetime = BASE_TIME,
    updated_at: datetime = None,
    **extra
) -> LoyaltyCard:
    """Create a domain card with sensible defaults"""
    return LoyaltyCard(
        id=id,
        name=name,
        store_name=store_name,
        barcode_data=barcode_data,
        format=format,
        created_at=created_at,
        updated_at=updated_at or created_at,
        **extra
    )


def create_test_record(id: str = "card_test", **changes) -> dict:
    """Create a raw record in the persisted layout"""
    return LoyaltyCardModel.from_domain(create_test_card(id=id, **changes)).to_json()


class FakeClock:
    """Controllable replacement for utc_now"""

    def __init__(self, start: datetime = BASE_TIME + timedelta(days=1)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "data" / "cards.db")


@pytest.fixture
async def data_source(db_path):
    """Open a data source on a fresh SQLite file"""
    source = LocalCardDataSource(db_path)
    await source.initialize()
    yield source
    await source.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def repository(data_source, clock):
    return LocalCardRepository(data_source, clock=clock)


@pytest.fixture
def sample_card():
    return create_test_card(
        id="card_coffee",
        name="Coffee",
        store_name="Bean Co",
        barcode_data="ABC123",
        format=BarcodeFormat.CODE_128,
        image_url="https://example.com/bean.png",
        color_hex="#6F4E37",
        notes="Stamp card",
    )


def corrupt_payload(db_path: str, record_id: str, payload: str) -> None:
    """Overwrite a stored payload behind the data source's back"""
    conn = sqlite3.connect(db_path)
    try:
        conn.execute("UPDATE loyalty_cards SET payload = ? WHERE id = ?", (payload, record_id))
        conn.commit()
    finally:
        conn.close()
