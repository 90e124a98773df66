from __future__ import annotations
import json
import logging
from functools import lru_cache
from pathlib import Path
from threading import Lock
from typing import Dict, Optional

from pydantic import ValidationError

from app.schemas import DatasetRecord
from settings import get_settings

logger = logging.getLogger(__name__)


class DatasetTable:
    """Keyed store of ingested datasets with optional JSON persistence."""

    def __init__(self, name: str, persistence_path: Optional[Path] = None) -> None:
        self.name = name
        self._items: Dict[str, DatasetRecord] = {}
        self.persistence_path = persistence_path
        self._lock = Lock()
        if persistence_path:
            persistence_path.parent.mkdir(parents=True, exist_ok=True)
            self._load_from_disk()

    def put_item(self, item: DatasetRecord) -> None:
        with self._lock:
            self._items[item.dataset_id] = item.model_copy(deep=True)
            self._persist()

    def get_item(self, key: str) -> Optional[DatasetRecord]:
        with self._lock:
            item = self._items.get(key)
            if item is None:
                return None
            return item.model_copy(deep=True)

    def scan(self) -> list[DatasetRecord]:
        """Return deep copies of all stored datasets."""

        with self._lock:
            return [item.model_copy(deep=True) for item in self._items.values()]

    def _persist(self) -> None:
        if not self.persistence_path:
            return
        payload = {
            dataset_id: item.model_dump(mode="json")
            for dataset_id, item in self._items.items()
        }
        self.persistence_path.write_text(json.dumps(payload, indent=2, sort_keys=True))

    def _load_from_disk(self) -> None:
        if not self.persistence_path or not self.persistence_path.exists():
            return

        try:
            raw = self.persistence_path.read_text() or "{}"
            data = json.loads(raw)
        except (OSError, json.JSONDecodeError):
            logger.warning(
                "Ignoring unreadable dataset store",
                extra={"store_path": str(self.persistence_path)},
            )
            data = {}

        for dataset_id, payload in data.items():
            try:
                self._items[dataset_id] = DatasetRecord.model_validate(payload)
            except ValidationError:
                logger.warning(
                    "Ignoring malformed dataset record",
                    extra={"dataset_id": dataset_id},
                )


@lru_cache
def build_default_table(
    name: Optional[str] = None,
    path: Optional[str] = None,
) -> DatasetTable:
    settings = get_settings()
    table_name = settings.table_name if name is None else name
    table_path = settings.dataset_persistence_path if path is None else path
    persistence = Path(table_path) if table_path else None
    return DatasetTable(name=table_name, persistence_path=persistence)
