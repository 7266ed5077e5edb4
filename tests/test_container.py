"""
Tests for the AppContext composition root.
"""

import pytest

from card_snap import config
from card_snap.config import Settings
from card_snap.container import AppContext
from card_snap.models.card import BarcodeFormat
from card_snap.usecases import AddCardRequest, ListCardsRequest


@pytest.mark.asyncio
async def test_context_wires_use_cases_to_one_store(db_path):
    settings = Settings(db_path=db_path, log_level="DEBUG")

    async with AppContext.from_settings(settings) as context:
        assert context.data_source.is_initialized
        assert context.repository.data_source is context.data_source

        added = await context.add_card.execute(AddCardRequest(
            name="Gym", store_name="FitCo", barcode_data="990011", format=BarcodeFormat.EAN_13
        ))
        listed = await context.list_cards.execute(ListCardsRequest())

    assert listed.data == [added.data]
    assert not context.data_source.is_initialized


def test_settings_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("CARD_SNAP_DB_PATH", str(tmp_path / "env.db"))
    monkeypatch.setenv("CARD_SNAP_EXPORT_INDENT", "2")

    settings = Settings()

    assert settings.db_path == str(tmp_path / "env.db")
    assert settings.export_indent == 2
    assert settings.app_name == "Card Snap Wallet"


def test_context_defaults_to_module_settings():
    context = AppContext.from_settings()

    assert context.settings is config.settings
    assert context.data_source.db_path == config.settings.db_path
    assert not context.data_source.is_initialized
