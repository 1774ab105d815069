"""Key-value persistence for the learner's story-mode state."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

from ..learner_state import (
    LearnerState,
    LearnerStateDecodeError,
    decode_learner_state,
    dumps_learner_state,
    encode_learner_state,
)

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "learning_state_v1"


class LearnerProgressStore(Protocol):
    def load(self) -> Optional[LearnerState]:
        """Return the saved state, ``None`` when nothing is saved.

        Raises when the saved payload cannot be read or decoded.
        """

    def save(self, state: LearnerState) -> None: ...

    def clear(self) -> None: ...


class JsonFileLearnerProgressStore:
    """Stores learner state under ``key`` in a single JSON document on disk.

    Other keys in the document are preserved. Writes go to a temporary file in
    the same directory that then replaces the target.
    """

    def __init__(self, path: Path, key: str = DEFAULT_STORAGE_KEY) -> None:
        self._path = Path(path).expanduser()
        self._key = key
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def key(self) -> str:
        return self._key

    def _read_document_unlocked(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as handle:
            try:
                document = json.load(handle)
            except ValueError as exc:
                raise LearnerStateDecodeError(f"Progress file {self._path} is not valid JSON: {exc}") from exc
        if not isinstance(document, dict):
            raise LearnerStateDecodeError(f"Progress file {self._path} must hold a JSON object.")
        return document

    def _write_document_unlocked(self, document: Dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=str(self._path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(document, handle, indent=2)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load(self) -> Optional[LearnerState]:
        with self._lock:
            document = self._read_document_unlocked()
        payload = document.get(self._key)
        if payload is None:
            return None
        return decode_learner_state(payload)

    def save(self, state: LearnerState) -> None:
        with self._lock:
            document = self._read_document_unlocked() if self._path.exists() else {}
            document[self._key] = encode_learner_state(state)
            self._write_document_unlocked(document)
        logger.debug("Saved learner state to %s[%s]", self._path, self._key)

    def clear(self) -> None:
        with self._lock:
            if not self._path.exists():
                return
            try:
                document = self._read_document_unlocked()
            except LearnerStateDecodeError:
                # The whole file is unreadable; dropping it is the only way to
                # clear our key.
                logger.warning("Removing unreadable progress file %s", self._path)
                self._path.unlink()
                return
            if document.pop(self._key, None) is None:
                return
            self._write_document_unlocked(document)


class InMemoryLearnerProgressStore:
    """Holds the encoded JSON text in memory; handy for tests and previews."""

    def __init__(self, raw: Optional[str] = None) -> None:
        self.raw = raw
        self.save_count = 0
        self.clear_count = 0

    def load(self) -> Optional[LearnerState]:
        if self.raw is None:
            return None
        return decode_learner_state(self.raw)

    def save(self, state: LearnerState) -> None:
        self.raw = dumps_learner_state(state)
        self.save_count += 1

    def clear(self) -> None:
        self.raw = None
        self.clear_count += 1


__all__ = [
    "DEFAULT_STORAGE_KEY",
    "InMemoryLearnerProgressStore",
    "JsonFileLearnerProgressStore",
    "LearnerProgressStore",
]
