"""
Transcript Store Module

Durable key-value storage for mock-interview transcripts, one JSON file per
career. The interview session reads on open and writes after every change.

Example Usage:
    from future_compass.utils.transcript_store import TranscriptStore, interview_storage_key

    store = TranscriptStore(storage_dir="data/interviews")
    key = interview_storage_key("Data Scientist")  # futurecompass_interview_data_scientist

    store.save(key, turns)
    turns = store.load(key)   # None if missing or corrupted
    store.clear(key)
"""

import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence
from urllib.parse import quote, unquote

import structlog

from future_compass.agents.transcript_codec import (
    deserialize_transcript,
    serialize_transcript,
)
from future_compass.models.interview import InterviewTurn
from future_compass.utils.errors import SchemaError, StorageError

logger = structlog.get_logger(__name__)

STORAGE_KEY_PREFIX = "futurecompass_interview_"


def interview_storage_key(career_title: str) -> str:
    """Derive the storage key for a career: lowercased, whitespace runs -> '_'."""
    return STORAGE_KEY_PREFIX + re.sub(r"\s+", "_", career_title).lower()


class TranscriptStore:
    """Stores interview transcripts as JSON arrays, one file per key."""

    def __init__(self, storage_dir: str | Path = "data/interviews"):
        """
        Initialize TranscriptStore.

        Args:
            storage_dir: Directory for transcript files (created on first write)
        """
        self.storage_dir = Path(storage_dir)

    def _path_for(self, key: str) -> Path:
        return self.storage_dir / f"{quote(key, safe='')}.json"

    def _read_raw(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Failed to read transcript {key}: {e}") from e

    def _write_raw(self, key: str, raw: str) -> None:
        path = self._path_for(key)
        tmp_name = None
        try:
            self.storage_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=self.storage_dir, suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(raw)
            os.replace(tmp_name, path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Failed to save transcript {key}: {e}") from e

    def _delete_raw(self, key: str) -> None:
        try:
            self._path_for(key).unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"Failed to clear transcript {key}: {e}") from e

    def keys(self) -> List[str]:
        """List the keys of all stored transcripts."""
        if not self.storage_dir.exists():
            return []
        return sorted(unquote(path.stem) for path in self.storage_dir.glob("*.json"))

    def load(self, key: str) -> Optional[List[InterviewTurn]]:
        """
        Load the transcript stored under key.

        Args:
            key: Storage key from interview_storage_key()

        Returns:
            List of turns, or None when nothing usable is stored. Corrupted
            content is discarded and reported as None.

        Raises:
            StorageError: If the storage medium cannot be read
        """
        raw = self._read_raw(key)
        if raw is None:
            return None

        try:
            turns = deserialize_transcript(raw)
        except SchemaError as e:
            logger.warning("Discarding corrupted transcript", storage_key=key, error=str(e))
            try:
                self._delete_raw(key)
            except StorageError as delete_error:
                logger.error(
                    "Failed to remove corrupted transcript",
                    storage_key=key,
                    error=str(delete_error),
                )
            return None

        if not turns:
            return None

        logger.debug("Transcript loaded", storage_key=key, turn_count=len(turns))
        return turns

    def save(self, key: str, turns: Sequence[InterviewTurn]) -> None:
        """
        Persist the full transcript under key, replacing what was there.

        Raises:
            StorageError: If the transcript cannot be written
        """
        self._write_raw(key, serialize_transcript(turns))
        logger.debug("Transcript saved", storage_key=key, turn_count=len(turns))

    def clear(self, key: str) -> None:
        """
        Remove the transcript stored under key. Missing keys are ignored.

        Raises:
            StorageError: If the transcript cannot be removed
        """
        self._delete_raw(key)
        logger.debug("Transcript cleared", storage_key=key)


class InMemoryTranscriptStore(TranscriptStore):
    """Same interface as TranscriptStore, kept in a dict for ephemeral runs."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    def _read_raw(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write_raw(self, key: str, raw: str) -> None:
        self._data[key] = raw

    def _delete_raw(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> List[str]:
        return sorted(self._data)

    def raw(self, key: str) -> Optional[str]:
        """Return the serialized transcript exactly as stored."""
        return self._data.get(key)

    def put_raw(self, key: str, raw: str) -> None:
        """Store serialized content verbatim (used to seed or import transcripts)."""
        self._data[key] = raw
