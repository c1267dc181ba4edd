"""
Persistence service for the Sideline Lineup application.

This module provides the key-value gateways the match service writes
through to. Each logical key is an independent JSON document; readers get
the caller's fallback whenever a document is missing or unreadable.
"""
import copy
import json
import logging
import os
import tempfile
from typing import Any, Dict, Optional, Protocol

logger = logging.getLogger(__name__)


class PersistenceGateway(Protocol):
    """Contract the core relies on for durable storage."""

    def load(self, key: str, fallback: Any) -> Any:
        ...

    def save(self, key: str, value: Any) -> None:
        ...


class JsonFileStore:
    """
    Gateway storing one ``<key>.json`` file per key in a directory.

    Writes go to a temporary file in the same directory which is then moved
    over the target, so a crash never leaves a half-written document.
    """

    def __init__(self, directory: str):
        """
        Initialize the store.

        Args:
            directory: Folder holding the documents; created on first save
        """
        self.directory = directory

    def path_for(self, key: str) -> str:
        return os.path.join(self.directory, f"{key}.json")

    def load(self, key: str, fallback: Any) -> Any:
        """
        Read a document.

        Args:
            key: Logical storage key
            fallback: Value returned when the document is missing or corrupt

        Returns:
            Decoded value, or a copy of ``fallback``
        """
        file_path = self.path_for(key)
        if not os.path.exists(file_path):
            return copy.deepcopy(fallback)
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                value = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s, using default: %s", file_path, e)
            return copy.deepcopy(fallback)
        return copy.deepcopy(fallback) if value is None else value

    def save(self, key: str, value: Any) -> None:
        """
        Write a document atomically.

        Raises:
            OSError: If the directory or file cannot be written
        """
        if self.directory and not os.path.exists(self.directory):
            os.makedirs(self.directory)

        fd, tmp_path = tempfile.mkstemp(
            prefix=f".{key}.", suffix=".tmp", dir=self.directory or None
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2)
            os.replace(tmp_path, self.path_for(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise


class MemoryStore:
    """
    In-process gateway that keeps serialized JSON strings in a dict.

    Values are encoded on save and decoded on load, so callers observe the
    same copy semantics and corruption handling as with files.
    """

    def __init__(self, documents: Optional[Dict[str, str]] = None):
        self.documents: Dict[str, str] = dict(documents or {})

    def load(self, key: str, fallback: Any) -> Any:
        raw = self.documents.get(key)
        if raw is None:
            return copy.deepcopy(fallback)
        try:
            value = json.loads(raw)
        except (TypeError, json.JSONDecodeError):
            logger.warning("Corrupt document under %s, using default", key)
            return copy.deepcopy(fallback)
        return copy.deepcopy(fallback) if value is None else value

    def save(self, key: str, value: Any) -> None:
        self.documents[key] = json.dumps(value)
