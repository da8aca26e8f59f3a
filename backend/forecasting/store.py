# backend/forecasting/store.py
"""
Persistence of the projection bundle.

The bundle lives under one fixed key of a string key-value backend. Saving
overwrites; there is no versioning. Loading turns both "never saved" and
"payload does not parse" into absence for `load()`, while `load_status()`
keeps the two apart for callers that need to tell them apart.
"""

import enum
import json
import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from pydantic import ValidationError

from forecasting.errors import StoreError
from forecasting.schemas import ProjectionResult

logger = logging.getLogger(__name__)

STORAGE_KEY = "finance-projections"


class MemoryBackend:
    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value


class JsonFileBackend:
    """All keys in one JSON object file; writes replace the file atomically."""

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not hold a JSON object")
        return data

    def _read_for_update(self) -> Dict[str, str]:
        try:
            return self._read_all()
        except ValueError as e:
            # unreadable contents are replaced by the next write
            logger.warning("Discarding unreadable store file %s: %s", self.path, e)
            return {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f"Value under '{key}' is not a string")
        return value

    def set_item(self, key: str, value: str) -> None:
        items = self._read_for_update()
        items[key] = value
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=".store-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise


class LoadStatus(enum.Enum):
    ABSENT = "absent"
    CORRUPT = "corrupt"
    PRESENT = "present"


@dataclass(frozen=True)
class LoadOutcome:
    status: LoadStatus
    value: Optional[ProjectionResult] = None
    reason: Optional[str] = None


class ProjectionStore:
    def __init__(self, backend, key: str = STORAGE_KEY):
        self.backend = backend
        self.key = key

    def save(self, result: ProjectionResult) -> None:
        try:
            self.backend.set_item(self.key, result.to_json())
        except (OSError, ValueError, TypeError) as e:
            logger.error("Failed to save projections: %s", e)
            raise StoreError(f"Failed to save projections: {e}") from e
        logger.debug("Saved projections under '%s'", self.key)

    def load_status(self) -> LoadOutcome:
        try:
            payload = self.backend.get_item(self.key)
            if payload is None:
                return LoadOutcome(LoadStatus.ABSENT)
            result = ProjectionResult.from_json(payload)
        except (OSError, ValueError, ValidationError) as e:
            return LoadOutcome(LoadStatus.CORRUPT, reason=str(e))
        return LoadOutcome(LoadStatus.PRESENT, value=result)

    def load(self) -> Optional[ProjectionResult]:
        outcome = self.load_status()
        if outcome.status is LoadStatus.CORRUPT:
            logger.warning("Failed to load projections: %s", outcome.reason)
        return outcome.value
