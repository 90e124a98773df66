"""Unit tests for the dataset store implementation."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone

from app.schemas import DatasetRecord, RowErrorPayload, SensorReadingPayload
from datastore.dataset_store import DatasetTable
from services.mock_data import generate_mock_readings


def _sample_record(dataset_id: str = "dataset-123") -> DatasetRecord:
    return DatasetRecord(
        dataset_id=dataset_id,
        filename="readings.csv",
        uploaded_at=datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        readings=[
            SensorReadingPayload.from_domain(r) for r in generate_mock_readings(seed=5, count=3)
        ],
        errors=[RowErrorPayload(row_number=4, reason="missing value")],
    )


def test_put_and_get_round_trip_returns_deep_copy() -> None:
    table = DatasetTable(name="datasets")
    original = _sample_record()

    table.put_item(original)
    fetched = table.get_item(original.dataset_id)

    assert fetched is not None
    assert fetched == original
    assert fetched is not original

    # Mutating the fetched instance should not affect stored data
    fetched.readings.clear()
    fetched_again = table.get_item(original.dataset_id)
    assert fetched_again is not None
    assert len(fetched_again.readings) == 3


def test_get_item_returns_none_when_missing() -> None:
    table = DatasetTable(name="datasets")

    assert table.get_item("missing-id") is None


def test_put_item_persists_to_disk_and_reloads(tmp_path) -> None:
    path = tmp_path / "datasets.json"
    table = DatasetTable(name="datasets", persistence_path=path)
    record = _sample_record()

    table.put_item(record)

    assert path.exists()
    payload = json.loads(path.read_text())
    assert record.dataset_id in payload
    assert payload[record.dataset_id]["readings"][0]["id"] == "mock-000"

    reloaded = DatasetTable(name="datasets", persistence_path=path).get_item(record.dataset_id)
    assert reloaded == record
    assert reloaded.to_readings() == generate_mock_readings(seed=5, count=3)


def test_unreadable_persistence_file_starts_empty(tmp_path) -> None:
    path = tmp_path / "datasets.json"
    path.write_text("{broken")

    table = DatasetTable(name="datasets", persistence_path=path)

    assert table.scan() == []


def test_scan_returns_all_items_as_deep_copies() -> None:
    table = DatasetTable(name="datasets")
    table.put_item(_sample_record(dataset_id="dataset-1"))
    table.put_item(_sample_record(dataset_id="dataset-2"))

    scanned = sorted(table.scan(), key=lambda item: item.dataset_id)
    assert [item.dataset_id for item in scanned] == ["dataset-1", "dataset-2"]

    scanned[0].errors.clear()
    assert all(len(item.errors) == 1 for item in table.scan())


def test_unreadable_persistence_file_logs_store_path(tmp_path, caplog) -> None:
    path = tmp_path / "datasets.json"
    path.write_text("{broken")

    with caplog.at_level(logging.WARNING, logger="datastore.dataset_store"):
        DatasetTable(name="datasets", persistence_path=path)

    [record] = [r for r in caplog.records if r.name == "datastore.dataset_store"]
    assert record.getMessage() == "Ignoring unreadable dataset store"
    assert record.store_path == str(path)
