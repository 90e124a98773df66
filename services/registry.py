"""Ordered, editable set of calibration models."""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from pathlib import Path
from threading import Lock
from typing import Iterable, Optional

from pydantic import TypeAdapter, ValidationError

from app.schemas import AnalysisModelPayload
from models.defaults import DEFAULT_MODELS
from models.records import AnalysisModel, CalibrationParams
from services.calculation import ConfigurationError, validate_model

logger = logging.getLogger(__name__)

_MODEL_LIST_ADAPTER = TypeAdapter(list[AnalysisModelPayload])


class ModelRegistry:
    """Holds the active models and a revision counter bumped on every edit.

    Callers receive immutable snapshots from ``list_models``; edits replace a
    model's parameter set wholesale so no half-updated model is ever visible.
    """

    def __init__(self, models: Optional[Iterable[AnalysisModel]] = None) -> None:
        self._defaults = tuple(models) if models is not None else DEFAULT_MODELS
        self._check(self._defaults)
        self._models: dict[str, AnalysisModel] = {m.id: m for m in self._defaults}
        self._revision = 0
        self._lock = Lock()

    @property
    def revision(self) -> int:
        with self._lock:
            return self._revision

    def list_models(self) -> tuple[AnalysisModel, ...]:
        with self._lock:
            return tuple(self._models.values())

    def snapshot(self) -> tuple[int, tuple[AnalysisModel, ...]]:
        """Return the revision together with the models it describes."""
        with self._lock:
            return self._revision, tuple(self._models.values())

    def get(self, model_id: str) -> AnalysisModel:
        with self._lock:
            model = self._models.get(model_id)
        if model is None:
            raise KeyError(f"Model {model_id!r} not found.")
        return model

    def update_params(self, model_id: str, params: CalibrationParams) -> AnalysisModel:
        with self._lock:
            current = self._models.get(model_id)
            if current is None:
                raise KeyError(f"Model {model_id!r} not found.")
            updated = replace(current, params=params)
            validate_model(updated)
            self._models[model_id] = updated
            self._revision += 1
            revision = self._revision
        logger.info(
            "Updated model parameters",
            extra={"model_id": model_id, "revision": revision},
        )
        return updated

    def reset(self) -> None:
        with self._lock:
            self._models = {m.id: m for m in self._defaults}
            self._revision += 1
            revision = self._revision
        logger.info("Reset models to defaults", extra={"revision": revision})

    @staticmethod
    def _check(models: Iterable[AnalysisModel]) -> None:
        seen: set[str] = set()
        for model in models:
            if model.id in seen:
                raise ConfigurationError(f"Duplicate model id {model.id!r}.")
            seen.add(model.id)
            validate_model(model)


def load_models_file(path: Path) -> list[AnalysisModel]:
    """Read a JSON list of models, raising ``ConfigurationError`` on bad content."""
    try:
        raw = json.loads(path.read_text())
        payloads = _MODEL_LIST_ADAPTER.validate_python(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise ConfigurationError(f"Could not load models from {path}: {exc}") from exc
    return [payload.to_domain() for payload in payloads]
