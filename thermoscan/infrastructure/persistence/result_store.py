"""
Result store for the analysis history log.

The history log is an ordered list of analysis records, most recent first,
unique by id. It is kept in memory and written through to the key-value
collaborator under a single fixed key after every mutation. The in-memory log
stays authoritative for the session even when a durable write fails.
"""

import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from thermoscan.infrastructure.constants.pipeline_constants import HISTORY_STORAGE_KEY
from thermoscan.infrastructure.persistence.key_value_store import KeyValueStore
from thermoscan.schemas import AnalysisRecord

logger = logging.getLogger(__name__)

_history_adapter = TypeAdapter(List[AnalysisRecord])


class ResultStore:
    """Owns the history log and its persistence."""

    def __init__(self, store: KeyValueStore, key: str = HISTORY_STORAGE_KEY):
        self._store = store
        self._key = key
        self._log: List[AnalysisRecord] = []

    def load(self) -> List[AnalysisRecord]:
        """
        Load the history log from durable storage.

        A missing key yields an empty log. A stored value that does not parse
        as a list of records also yields an empty log and is logged.
        """
        raw = self._store.get(self._key, [])
        try:
            records = _history_adapter.validate_python(raw)
        except ValidationError as e:
            logger.error(
                f'Stored history under "{self._key}" is not a valid record list, '
                f"starting with an empty log: {e.error_count()} validation errors"
            )
            records = []

        self._log = self._dedupe(records)
        logger.info(f"Loaded {len(self._log)} history records")
        return list(self._log)

    def append(self, record: AnalysisRecord) -> List[AnalysisRecord]:
        """Prepend a record and persist the full log."""
        self._log = [record] + [item for item in self._log if item.id != record.id]
        self._persist()
        return list(self._log)

    def remove(self, record_id: str) -> List[AnalysisRecord]:
        """Drop the record with ``record_id`` and persist the full log."""
        self._log = [item for item in self._log if item.id != record_id]
        self._persist()
        return list(self._log)

    def get(self, record_id: str) -> Optional[AnalysisRecord]:
        for record in self._log:
            if record.id == record_id:
                return record
        return None

    @property
    def records(self) -> List[AnalysisRecord]:
        return list(self._log)

    def _persist(self) -> None:
        payload = _history_adapter.dump_python(self._log, mode="json")
        if not self._store.set(self._key, payload):
            logger.warning(
                f"History log could not be persisted; keeping {len(self._log)} records in memory"
            )

    @staticmethod
    def _dedupe(records: List[AnalysisRecord]) -> List[AnalysisRecord]:
        seen = set()
        unique = []
        for record in records:
            if record.id in seen:
                continue
            seen.add(record.id)
            unique.append(record)
        return unique
