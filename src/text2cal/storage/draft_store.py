"""Durable storage for the single recoverable draft."""

import json
import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from text2cal.config.constants import DRAFT_STORAGE_KEY
from text2cal.core.event_model import EventDraft
from text2cal.storage.paths import ensure_private_dir, harden_file_permissions

logger = logging.getLogger(__name__)


class DraftStore(ABC):
    """Key-value store holding at most one serialized EventDraft."""

    key = DRAFT_STORAGE_KEY

    @abstractmethod
    def _read(self) -> Optional[Dict[str, Any]]:
        """Return the raw stored mapping, or None when nothing is stored."""

    @abstractmethod
    def _write(self, data: Dict[str, Any]) -> None:
        """Persist the raw mapping."""

    @abstractmethod
    def clear(self) -> None:
        """Remove any stored draft."""

    def save(self, draft: EventDraft) -> None:
        self._write({self.key: draft.to_dict()})
        logger.debug("Persisted recoverable draft '%s'", draft.title)

    def load(self) -> Optional[EventDraft]:
        """Return the stored draft; unreadable data is discarded.

        Returns:
            The recovered EventDraft, or None.
        """
        data = self._read()
        if not data or self.key not in data:
            return None

        try:
            return EventDraft.from_dict(data[self.key])
        except (TypeError, ValueError, KeyError) as e:
            logger.warning("Discarding unreadable recoverable draft: %s", e)
            self.clear()
            return None

    def has_draft(self) -> bool:
        return self.load() is not None


class MemoryDraftStore(DraftStore):
    """In-process store, for tests and embedders without a filesystem."""

    def __init__(self):
        self._data: Optional[Dict[str, Any]] = None

    def _read(self) -> Optional[Dict[str, Any]]:
        return self._data

    def _write(self, data: Dict[str, Any]) -> None:
        # Round-trip through JSON so the same encoding rules apply as on disk
        self._data = json.loads(json.dumps(data))

    def clear(self) -> None:
        self._data = None


class JsonFileDraftStore(DraftStore):
    """Stores the draft as JSON in a user-private file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _read(self) -> Optional[Dict[str, Any]]:
        if not self.path.exists():
            return None
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning("Failed to read draft file (%s): %s", self.path, e)
            return None
        if not isinstance(data, dict):
            logger.warning("Draft file %s does not hold a JSON object", self.path)
            return None
        return data

    def _write(self, data: Dict[str, Any]) -> None:
        ensure_private_dir(self.path.parent)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        harden_file_permissions(tmp_path)
        os.replace(tmp_path, self.path)

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to remove draft file %s: %s", self.path, e)
