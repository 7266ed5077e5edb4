"""
Integration tests for LocalCardRepository with a real SQLite data source.
"""

import asyncio
import json
from datetime import timedelta

import pytest

from card_snap.errors import (
    DuplicateCardError,
    ErrorCategory,
    MalformedRecordError,
    NotFoundError,
    RepositoryError,
    StorageReadError,
    ValidationError,
)
from card_snap.models.card import BarcodeFormat, LoyaltyCard
from card_snap.models.result import Failure, Success
from card_snap.repositories.card_repository import LocalCardRepository
from card_snap.services.local_card_data_source import LocalCardDataSource
from conftest import BASE_TIME, FakeClock, corrupt_payload, create_test_card, create_test_record


class BrokenDataSource:
    """Data source whose every operation fails"""

    async def get_all(self):
        raise StorageReadError("disk unavailable")

    async def get_by_id(self, record_id):
        raise StorageReadError("disk unavailable")

    async def delete(self, record_id):
        raise StorageReadError("disk unavailable")

    async def storage_size_bytes(self):
        raise StorageReadError("disk unavailable")


@pytest.mark.asyncio
async def test_scenario_add_then_list(repository):
    card = create_test_card(
        id="",
        name="Coffee",
        store_name="Bean Co",
        barcode_data="ABC123",
        format=BarcodeFormat.CODE_128,
    )

    added = await repository.add_card(card)
    result = await repository.get_all_cards()

    assert added.is_success
    assert result.is_success
    assert len(result.data) == 1
    stored = result.data[0]
    assert stored.id == added.data.id
    assert stored.id.startswith("card_")
    assert (stored.name, stored.store_name, stored.barcode_data, stored.format) == (
        "Coffee", "Bean Co", "ABC123", BarcodeFormat.CODE_128
    )
    assert stored.created_at == stored.updated_at


@pytest.mark.asyncio
async def test_scenario_delete_first_of_two(repository):
    first = create_test_card(id="card_1", name="First")
    second = create_test_card(id="card_2", name="Second", notes="keep me")
    await repository.add_card(first)
    await repository.add_card(second)

    deleted = await repository.delete_card("card_1")
    result = await repository.get_all_cards()

    assert deleted == Success(None)
    assert result.data == [second]


@pytest.mark.asyncio
async def test_scenario_update_unknown_id(repository):
    await repository.add_card(create_test_card(id="card_1"))

    result = await repository.update_card(create_test_card(id="never_added"))

    assert result.is_failure
    assert isinstance(result.error, NotFoundError)
    assert len((await repository.get_all_cards()).data) == 1


@pytest.mark.asyncio
async def test_add_returns_stored_card(repository, sample_card):
    result = await repository.add_card(sample_card)

    assert result == Success(sample_card)
    assert (await repository.get_card_by_id(sample_card.id)).data == sample_card


@pytest.mark.asyncio
@pytest.mark.parametrize("changes, field", [
    ({"name": ""}, "name"),
    ({"store_name": "  "}, "store_name"),
    ({"barcode_data": ""}, "barcode_data"),
    ({"color_hex": "red"}, "color_hex"),
])
async def test_add_rejects_invalid_card_without_writing(repository, data_source, changes, field):
    result = await repository.add_card(create_test_card(**changes))

    assert isinstance(result.error, ValidationError)
    assert result.error.field == field
    assert result.error.category == ErrorCategory.VALIDATION
    assert await data_source.count() == 0


@pytest.mark.asyncio
async def test_add_rejects_unrecognised_format(repository, data_source):
    # model_construct skips validation, as a careless caller might
    card = LoyaltyCard.model_construct(**{**create_test_card().model_dump(), "format": "aztec"})

    result = await repository.add_card(card)

    assert isinstance(result.error, ValidationError)
    assert result.error.field == "format"
    assert await data_source.count() == 0


@pytest.mark.asyncio
async def test_add_rejects_existing_id(repository, sample_card):
    await repository.add_card(sample_card)

    result = await repository.add_card(sample_card.model_copy(update={"name": "Other"}))

    assert isinstance(result.error, DuplicateCardError)
    assert (await repository.get_card_by_id(sample_card.id)).data.name == "Coffee"


@pytest.mark.asyncio
async def test_get_card_by_id_not_found_is_distinct(repository):
    result = await repository.get_card_by_id("missing")

    assert isinstance(result, Failure)
    assert isinstance(result.error, NotFoundError)
    assert result.error.category == ErrorCategory.NOT_FOUND
    assert not result.error.retryable
    assert result.error.card_id == "missing"


@pytest.mark.asyncio
async def test_storage_failure_is_not_confused_with_not_found():
    repository = LocalCardRepository(BrokenDataSource())

    result = await repository.get_card_by_id("missing")

    assert isinstance(result.error, RepositoryError)
    assert isinstance(result.error.cause, StorageReadError)
    assert result.error.category == ErrorCategory.STORAGE
    assert result.error.retryable


@pytest.mark.asyncio
async def test_storage_failures_are_wrapped_never_raised():
    repository = LocalCardRepository(BrokenDataSource())

    results = [
        await repository.get_all_cards(),
        await repository.delete_card("card_1"),
        await repository.search_cards("x"),
        await repository.export_cards(),
        await repository.get_storage_stats(),
        await repository.update_card(create_test_card()),
    ]

    for result in results:
        assert isinstance(result.error, RepositoryError)
        assert result.error.cause is not None
        assert result.error.technical_details


@pytest.mark.asyncio
async def test_malformed_single_record_is_a_failure(repository, data_source, db_path):
    await repository.add_card(create_test_card(id="card_1"))
    corrupt_payload(db_path, "card_1", json.dumps({"id": "card_1", "name": "x"}))

    result = await repository.get_card_by_id("card_1")

    assert isinstance(result.error, RepositoryError)
    assert isinstance(result.error.cause, MalformedRecordError)
    assert result.error.cause.field == "store_name"


@pytest.mark.asyncio
async def test_malformed_records_are_skipped_in_lists(repository, db_path):
    await repository.add_card(create_test_card(id="card_1"))
    await repository.add_card(create_test_card(id="card_2"))
    corrupt_payload(db_path, "card_1", json.dumps({"id": "card_1"}))

    result = await repository.get_all_cards()

    assert [card.id for card in result.data] == ["card_2"]


@pytest.mark.asyncio
async def test_update_refreshes_updated_at(repository, clock, sample_card):
    await repository.add_card(sample_card)
    clock.advance(minutes=5)

    stale = sample_card.model_copy(update={"name": "Espresso", "updated_at": BASE_TIME})
    result = await repository.update_card(stale)

    assert result.data.name == "Espresso"
    assert result.data.updated_at == clock.now
    assert result.data.created_at == sample_card.created_at
    assert (await repository.get_card_by_id(sample_card.id)).data == result.data


@pytest.mark.asyncio
async def test_update_never_moves_updated_at_backwards(repository, clock, sample_card):
    await repository.add_card(sample_card)
    first = (await repository.update_card(sample_card)).data

    clock.now = clock.now - timedelta(hours=1)
    second = (await repository.update_card(sample_card)).data

    assert second.updated_at >= first.updated_at
    clock.advance(hours=2)
    third = (await repository.update_card(sample_card)).data
    assert third.updated_at > second.updated_at


@pytest.mark.asyncio
async def test_update_keeps_stored_created_at(repository, sample_card):
    await repository.add_card(sample_card)

    moved = sample_card.model_copy(update={"created_at": BASE_TIME - timedelta(days=30)})
    result = await repository.update_card(moved)

    assert result.data.created_at == sample_card.created_at


@pytest.mark.asyncio
async def test_update_rejects_invalid_card(repository, sample_card):
    await repository.add_card(sample_card)

    result = await repository.update_card(sample_card.model_copy(update={"name": ""}))

    assert isinstance(result.error, ValidationError)
    assert (await repository.get_card_by_id(sample_card.id)).data == sample_card


@pytest.mark.asyncio
async def test_delete_is_idempotent(repository, sample_card):
    await repository.add_card(sample_card)

    assert (await repository.delete_card(sample_card.id)).is_success
    assert (await repository.delete_card(sample_card.id)).is_success
    assert isinstance((await repository.get_card_by_id(sample_card.id)).error, NotFoundError)


@pytest.mark.asyncio
async def test_archive_keeps_card(repository, clock, sample_card):
    await repository.add_card(sample_card)
    clock.advance(seconds=1)

    result = await repository.archive_card(sample_card.id)

    assert result.data.is_archived
    assert result.data.updated_at == clock.now
    cards = (await repository.get_all_cards()).data
    assert [card.id for card in cards] == [sample_card.id]
    assert cards[0].is_archived


@pytest.mark.asyncio
async def test_archive_unknown_card(repository):
    result = await repository.archive_card("missing")

    assert isinstance(result.error, NotFoundError)


@pytest.mark.asyncio
async def test_search_cards(repository):
    await repository.add_card(create_test_card(id="1", name="Coffee Shop", store_name="Coffee"))
    await repository.add_card(create_test_card(id="2", name="Restaurant", store_name="Restaurant"))
    await repository.add_card(create_test_card(id="3", name="Coffee House", store_name="Coffee"))

    assert [c.id for c in (await repository.search_cards("coffee")).data] == ["1", "3"]
    assert [c.id for c in (await repository.search_cards("Restaurant")).data] == ["2"]
    assert (await repository.search_cards("NonExistent")).data == []


@pytest.mark.asyncio
async def test_get_cards_by_store(repository):
    await repository.add_card(create_test_card(id="1", store_name="Coffee"))
    await repository.add_card(create_test_card(id="2", store_name="Coffee Palace"))
    await repository.add_card(create_test_card(id="3", store_name="coffee"))

    result = await repository.get_cards_by_store("COFFEE")

    assert [c.id for c in result.data] == ["1", "3"]


@pytest.mark.asyncio
async def test_export_then_import_into_empty_store(repository, sample_card, tmp_path, clock):
    await repository.add_card(sample_card)
    await repository.add_card(create_test_card(id="card_2", is_archived=True))
    exported = await repository.export_cards()

    other_source = LocalCardDataSource(str(tmp_path / "other.db"))
    other = LocalCardRepository(other_source, clock=clock)
    imported = await other.import_cards(exported.data)

    assert [c.id for c in imported.data] == [sample_card.id, "card_2"]
    assert (await other.get_all_cards()).data == (await repository.get_all_cards()).data
    await other_source.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("data", ["{broken", '{"id": "card_1"}', '[{"id": "card_1"}]'])
async def test_import_rejects_bad_data_without_writing(repository, data_source, data):
    result = await repository.import_cards(data)

    assert isinstance(result.error, ValidationError)
    assert await data_source.count() == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("second_id", ["", "   ", "card_1"])
async def test_import_rejects_missing_or_repeated_ids_without_writing(repository, data_source, second_id):
    data = json.dumps([create_test_record(id="card_1"), create_test_record(id=second_id)])

    result = await repository.import_cards(data)

    assert isinstance(result.error, ValidationError)
    assert result.error.field == "id"
    assert await data_source.count() == 0


@pytest.mark.asyncio
async def test_storage_stats(repository, clock, sample_card):
    await repository.add_card(sample_card)
    await repository.add_card(create_test_card(id="card_2"))
    await repository.archive_card("card_2")

    before = (await repository.get_storage_stats()).data
    await repository.export_cards()
    after = (await repository.get_storage_stats()).data

    assert (before.total_cards, before.active_cards, before.archived_cards) == (2, 1, 1)
    assert before.storage_size_bytes > 0
    assert before.last_backup_date is None
    assert after.last_backup_date == clock.now


@pytest.mark.asyncio
async def test_concurrent_adds_with_same_id_store_only_one(repository):
    first = create_test_card(id="card_x", name="A")
    second = create_test_card(id="card_x", name="B")

    results = await asyncio.gather(repository.add_card(first), repository.add_card(second))

    succeeded = [result.data for result in results if result.is_success]
    failed = [result.error for result in results if result.is_failure]
    assert len(succeeded) == 1
    assert len(failed) == 1
    assert isinstance(failed[0], DuplicateCardError)
    assert (await repository.get_card_by_id("card_x")).data == succeeded[0]


@pytest.mark.asyncio
async def test_creation_time_is_judged_by_injected_clock(data_source):
    ahead = LocalCardRepository(data_source, clock=FakeClock(BASE_TIME + timedelta(days=3650)))
    behind = LocalCardRepository(data_source, clock=FakeClock(BASE_TIME))
    from_the_future = create_test_card(id="card_future", created_at=BASE_TIME + timedelta(days=3000))

    rejected = await behind.add_card(from_the_future)
    accepted = await ahead.add_card(from_the_future)

    assert isinstance(rejected.error, ValidationError)
    assert rejected.error.field == "created_at"
    assert accepted.is_success
