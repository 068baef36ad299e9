from __future__ import annotations

"""Record caches with TTL-bound entries.

Two independent implementations share one get/put/invalidate contract:

    - MemoryRecordCache keeps records in a process-local dict (rate records,
      short TTL, lost on restart).
    - PersistentRecordCache serializes records as JSON into a KeyValueStore
      (location record, long TTL, survives restarts).

Freshness is judged from each record's ``resolved_at`` against the injected
clock; an expired entry is dropped on read and reported as a miss.
"""
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Generic, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .storage import KeyValueStore

logger = logging.getLogger("currency_localizer.cache")

R = TypeVar("R", bound=BaseModel)
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class RecordCache(ABC, Generic[R]):
    def __init__(self, ttl: timedelta, clock: Optional[Clock] = None):
        if ttl <= timedelta(0):
            raise ValueError("cache ttl must be positive")
        self._ttl = ttl
        self._clock = clock or utc_now

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def is_fresh(self, record: R) -> bool:
        return self._clock() - record.resolved_at < self._ttl  # type: ignore[attr-defined]

    def get(self, key: str) -> Optional[R]:
        record = self._read(key)
        if record is None:
            return None
        if not self.is_fresh(record):
            logger.debug("cache entry %s expired", key)
            self.invalidate(key)
            return None
        return record

    @abstractmethod
    def _read(self, key: str) -> Optional[R]:
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, record: R) -> None:
        raise NotImplementedError

    @abstractmethod
    def invalidate(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError


class MemoryRecordCache(RecordCache[R]):
    def __init__(self, ttl: timedelta, clock: Optional[Clock] = None):
        super().__init__(ttl, clock)
        self._entries: Dict[str, R] = {}

    def _read(self, key: str) -> Optional[R]:
        return self._entries.get(key)

    def put(self, key: str, record: R) -> None:
        self._entries[key] = record

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class PersistentRecordCache(RecordCache[R]):
    """Single-model cache over a KeyValueStore; corrupt values count as misses.

    The last record read or written per key is kept in memory, so repeated
    reads do not hit the (blocking) store on the event loop.
    """

    def __init__(
        self,
        store: KeyValueStore,
        model: Type[R],
        ttl: timedelta,
        clock: Optional[Clock] = None,
    ):
        super().__init__(ttl, clock)
        self._store = store
        self._model = model
        self._loaded: Dict[str, R] = {}

    def _read(self, key: str) -> Optional[R]:
        if key in self._loaded:
            return self._loaded[key]
        raw = self._store.get(key)
        if raw is None:
            return None
        try:
            record = self._model.model_validate_json(raw)
        except ValidationError:
            logger.warning("discarding corrupt cache entry %s", key)
            self._store.delete(key)
            return None
        resolved_at = getattr(record, "resolved_at", None)
        if not isinstance(resolved_at, datetime) or resolved_at.tzinfo is None:
            logger.warning("discarding cache entry %s without aware timestamp", key)
            self._store.delete(key)
            return None
        self._loaded[key] = record
        return record

    def put(self, key: str, record: R) -> None:
        self._store.set(key, record.model_dump_json())
        self._loaded[key] = record

    def invalidate(self, key: str) -> None:
        self._store.delete(key)
        self._loaded.pop(key, None)

    def clear(self) -> None:
        for key in list(self._loaded):
            self.invalidate(key)
