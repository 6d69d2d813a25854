"""
Key-value storage backends.

A storage backend maps slot names to string values, like a browser's
local storage. The car repository keeps the whole collection in one slot.
"""

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional, Union

from ..exceptions import StorageCorruptedException, StorageWriteException
from ..logging_config import get_logger

logger = get_logger(__name__)


class KeyValueStorage(ABC):
    """
    Abstract interface for slot-based string storage.

    Values are opaque strings; serialization is the caller's concern.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """
        Read a slot.

        Args:
            key: Slot name

        Returns:
            Stored string, or None if the slot has never been written
        """
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Overwrite a slot.

        Args:
            key: Slot name
            value: String to store
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete a slot. Removing a missing slot is a no-op."""
        pass


class MemoryStorage(KeyValueStorage):
    """Dict-backed storage that lives as long as the process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """
    Durable storage backed by a single JSON document on disk.

    The document is an object mapping slot names to string values. Every
    write rewrites the whole document through a temporary file followed by
    an atomic rename, so a crash mid-write never leaves a truncated file.
    """

    def __init__(self, path: Union[str, Path]):
        """
        Initialize file storage.

        Args:
            path: Location of the JSON document; created on first write
        """
        self.path = Path(path)

    def _read_document(self) -> Dict[str, str]:
        """
        Read the whole storage document.

        Returns:
            Slot mapping, empty if the file does not exist yet

        Raises:
            StorageCorruptedException: If the document itself is unreadable
        """
        if not self.path.exists():
            return {}

        try:
            raw = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise StorageCorruptedException(
                str(self.path), f"storage document is not UTF-8: {e}", {"path": str(self.path)}
            ) from e
        if not raw.strip():
            return {}

        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StorageCorruptedException(
                str(self.path), f"invalid JSON document: {e}", {"path": str(self.path)}
            ) from e

        if not isinstance(document, dict) or not all(
            isinstance(value, str) for value in document.values()
        ):
            raise StorageCorruptedException(
                str(self.path),
                "storage document must map slot names to strings",
                {"path": str(self.path)},
            )
        return document

    def _write_document(self, document: Dict[str, str], key: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False, indent=2)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error("Storage write failed", path=str(self.path), key=key, error=str(e))
            raise StorageWriteException(key, str(e)) from e

        logger.debug("Storage document written", path=str(self.path), slots=len(document))

    def get_item(self, key: str) -> Optional[str]:
        return self._read_document().get(key)

    def set_item(self, key: str, value: str) -> None:
        try:
            document = self._read_document()
        except StorageCorruptedException:
            # An unreadable document is replaced rather than merged into
            logger.warning("Overwriting unreadable storage document", path=str(self.path))
            document = {}
        document[key] = value
        self._write_document(document, key)

    def remove_item(self, key: str) -> None:
        document = self._read_document()
        if key in document:
            del document[key]
            self._write_document(document, key)
