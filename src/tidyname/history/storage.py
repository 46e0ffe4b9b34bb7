"""Persistence of the operation history document."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import time
from pathlib import Path

from pydantic import ValidationError

from .errors import HistoryStorageError
from .models import HistoryStore

LOGGER = logging.getLogger(__name__)

DEFAULT_HISTORY_PATH = Path("~/.tidyname/history.json")


class HistoryRepository:
    """Load and save the history store at a single JSON file."""

    def __init__(self, path: Path | str | None = None) -> None:
        """Initialize the repository.

        Args:
            path: Location of the history file; defaults to ``~/.tidyname/history.json``.
        """
        self._path = Path(path or DEFAULT_HISTORY_PATH).expanduser()

    @property
    def path(self) -> Path:
        """Return the path of the history file.

        Returns:
            Path: Location of the JSON document.
        """
        return self._path

    def load(self) -> HistoryStore:
        """Load the history store.

        A missing file yields an empty store. Unparsable or invalid content is moved aside to
        ``<name>.backup.<epoch ms>`` and an empty store is returned.

        Returns:
            HistoryStore: Loaded or fresh store.

        Raises:
            HistoryStorageError: If the file exists but cannot be read.
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            return HistoryStore()
        except OSError as exc:
            raise HistoryStorageError(f"Unable to read history at {self._path}: {exc}") from exc

        try:
            return HistoryStore.model_validate(json.loads(raw.decode("utf-8")))
        except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as exc:
            LOGGER.warning("History file %s is corrupted (%s); starting fresh.", self._path, exc)
            self._backup_corrupted()
            return HistoryStore()

    def save(self, store: HistoryStore) -> None:
        """Persist ``store`` atomically.

        The document is written to a temporary file in the same directory and renamed over
        the target.

        Args:
            store: Store to persist.

        Raises:
            HistoryStorageError: If the file cannot be written.
        """
        payload = store.model_dump(mode="json", by_alias=True)
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            handle, temp_name = tempfile.mkstemp(
                prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
            )
            try:
                with os.fdopen(handle, "w", encoding="utf-8") as stream:
                    json.dump(payload, stream, indent=2)
                    stream.write("\n")
                os.replace(temp_name, self._path)
            except BaseException:
                Path(temp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise HistoryStorageError(f"Unable to write history at {self._path}: {exc}") from exc

    def _backup_corrupted(self) -> None:
        backup = self._path.with_name(f"{self._path.name}.backup.{int(time.time() * 1000)}")
        try:
            self._path.rename(backup)
        except OSError as exc:
            LOGGER.warning("Unable to back up corrupted history %s: %s", self._path, exc)
        else:
            LOGGER.info("Corrupted history moved to %s", backup)


__all__ = ["DEFAULT_HISTORY_PATH", "HistoryRepository"]
