"""Record storage for Costeo AI.

Catalogs and saved costings are plain keyed records. RecordStore is the
interface the HTTP layer depends on; InMemoryRecordStore is the only backend
(nothing is persisted across restarts).
"""

import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, Generic, List, Optional, TypeVar
from uuid import uuid4

import structlog
from pydantic import BaseModel

from config.errors import RecordNotFound

logger = structlog.get_logger()

RecordT = TypeVar("RecordT", bound=BaseModel)


class RecordStore(ABC, Generic[RecordT]):
    """Keyed record storage: get / list / put / delete by id."""

    def __init__(self, collection: str):
        self.collection = collection

    @abstractmethod
    def get(self, record_id: str) -> Optional[RecordT]:
        """Fetch a record, or None if missing."""

    @abstractmethod
    def list(self) -> List[RecordT]:
        """All records in insertion order."""

    @abstractmethod
    def put(self, record: RecordT) -> RecordT:
        """Insert or replace a record. Assigns an id when it has none."""

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        """Remove a record. Returns False if it did not exist."""

    def require(self, record_id: str) -> RecordT:
        """Fetch a record or raise RecordNotFound."""
        record = self.get(record_id)
        if record is None:
            raise RecordNotFound(self.collection, record_id)
        return record

    def replace_all(self, records: List[RecordT]) -> int:
        """Drop every record and insert the given ones."""
        for existing in self.list():
            self.delete(existing.id)
        for record in records:
            self.put(record)
        return len(records)


class InMemoryRecordStore(RecordStore[RecordT]):
    """Thread-safe dict-backed store.

    Every operation holds the store lock, which serializes writes per record.
    Records are copied in and out so callers never share mutable state.
    """

    def __init__(self, collection: str):
        super().__init__(collection)
        self._records: Dict[str, RecordT] = {}
        self._lock = threading.Lock()

    def get(self, record_id: str) -> Optional[RecordT]:
        with self._lock:
            record = self._records.get(record_id)
            return record.model_copy(deep=True) if record is not None else None

    def list(self) -> List[RecordT]:
        with self._lock:
            return [r.model_copy(deep=True) for r in self._records.values()]

    def put(self, record: RecordT) -> RecordT:
        record = record.model_copy(deep=True)
        if not getattr(record, "id", None):
            record.id = uuid4().hex[:12]
        if hasattr(record, "updated_at"):
            record.updated_at = datetime.now(timezone.utc)
        with self._lock:
            self._records[record.id] = record
        logger.debug("record_stored", collection=self.collection, record_id=record.id)
        return record.model_copy(deep=True)

    def delete(self, record_id: str) -> bool:
        with self._lock:
            removed = self._records.pop(record_id, None)
        if removed is not None:
            logger.debug("record_deleted", collection=self.collection, record_id=record_id)
        return removed is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
