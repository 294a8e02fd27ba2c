"""
Key-value persistence collaborators.

This module provides the durable key-value primitive the result store and the
image store are built on. Values are JSON documents addressed by a string key.
Reads are tolerant: a missing key or a value that fails to parse yields the
caller's default. Writes are best-effort: failures are logged and swallowed.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from thermoscan.models import KeyValueEntry
from thermoscan.utils.timezone_utils import utc_now

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Interface of the key-value persistence collaborator."""

    @abstractmethod
    def get(self, key: str, default: Any) -> Any:
        """Return the stored value for ``key``, or ``default`` if missing or unreadable."""

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        """Store ``value`` under ``key``. Returns False if the write failed."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove ``key``. Returns False if the delete failed."""


class InMemoryKeyValueStore(KeyValueStore):
    """
    Process-local store.

    Values are kept as serialized JSON so that reads return fresh copies and
    non-serializable values fail exactly as they would in the durable store.
    """

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str, default: Any) -> Any:
        raw = self._data.get(key)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f'Error reading from store for key "{key}": {e}')
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            self._data[key] = json.dumps(value)
            return True
        except (TypeError, ValueError) as e:
            logger.error(f'Error writing to store for key "{key}": {e}')
            return False

    def delete(self, key: str) -> bool:
        self._data.pop(key, None)
        return True

    def set_raw(self, key: str, raw: str) -> None:
        """Store an unparsed string, bypassing serialization."""
        self._data[key] = raw


class SQLAlchemyKeyValueStore(KeyValueStore):
    """Durable store keeping one row per key in ``key_value_entries``."""

    def __init__(self, session_factory: Callable[[], Session]):
        self._session_factory = session_factory

    def get(self, key: str, default: Any) -> Any:
        try:
            with self._session_factory() as session:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    return default
                return json.loads(entry.value)
        except (SQLAlchemyError, json.JSONDecodeError) as e:
            logger.error(f'Error reading from store for key "{key}": {e}')
            return default

    def set(self, key: str, value: Any) -> bool:
        try:
            serialized = json.dumps(value)
        except (TypeError, ValueError) as e:
            logger.error(f'Error serializing value for key "{key}": {e}')
            return False

        with self._session_factory() as session:
            try:
                entry = session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=serialized))
                else:
                    entry.value = serialized
                    entry.updated_at = utc_now()
                session.commit()
                return True
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f'Error writing to store for key "{key}": {e}')
                return False

    def delete(self, key: str) -> bool:
        with self._session_factory() as session:
            try:
                entry = session.get(KeyValueEntry, key)
                if entry is not None:
                    session.delete(entry)
                    session.commit()
                return True
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f'Error deleting key "{key}" from store: {e}')
                return False
