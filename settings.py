from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional


_TABLE_NAME_ENV = "SENSORFLOW_TABLE_NAME"
_DATASET_PATH_ENV = "SENSORFLOW_DATASET_PATH"
_MODELS_PATH_ENV = "SENSORFLOW_MODELS_PATH"
_DETAIL_LIMIT_ENV = "SENSORFLOW_REPORT_DETAIL_LIMIT"
_MOCK_SEED_ENV = "SENSORFLOW_MOCK_SEED"
_LOG_LEVEL_ENV = "LOG_LEVEL"


@dataclass(frozen=True)
class Settings:
    table_name: str
    dataset_persistence_path: Optional[str]
    models_path: Optional[str]
    report_detail_limit: int
    mock_seed: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_optional_env(name: str, default: Optional[str]) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or None


def _read_int_env(name: str, default: int, positive: bool = False) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    if positive and parsed <= 0:
        return default
    return parsed


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    return Settings(
        table_name=_read_str_env(_TABLE_NAME_ENV, "datasets"),
        dataset_persistence_path=_read_optional_env(_DATASET_PATH_ENV, None),
        models_path=_read_optional_env(_MODELS_PATH_ENV, None),
        report_detail_limit=_read_int_env(_DETAIL_LIMIT_ENV, 20, positive=True),
        mock_seed=_read_int_env(_MOCK_SEED_ENV, 42),
        log_level=_read_log_level("INFO"),
    )
