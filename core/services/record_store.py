"""
In-memory record store: five independent keyed collections.

Each collection is an ordered key-value map supporting point lookup,
insert-or-overwrite and key-ordered scans. There are no cross-collection
transactions and no foreign-key enforcement; callers check references.

Each collection carries a re-entrant lock. Operations that must run as a
critical section (validate, insert, then raise an alert) hold the write lock
of every collection they touch.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Generic, TypeVar

import structlog

from core.domain.models import (
    HealthAlert,
    HealthcareProvider,
    HealthMetrics,
    MaternalProfile,
    PrenatalVisit,
    Record,
)

logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", bound=Record)


class Collection(Generic[RecordT]):
    """Dictionary-backed collection, iterated in key order."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._records: dict[str, RecordT] = {}
        self._lock = threading.RLock()
        self.logger = logger.bind(collection=name)

    def get(self, key: str) -> RecordT | None:
        return self._records.get(key)

    def insert(self, key: str, record: RecordT) -> None:
        """Insert or silently overwrite the record stored under `key`."""
        with self._lock:
            replaced = key in self._records
            self._records[key] = record
        self.logger.debug("record_inserted", record_id=key, replaced=replaced)

    def scan(self) -> Iterator[RecordT]:
        with self._lock:
            snapshot = sorted(self._records.items())
        for _, record in snapshot:
            yield record

    @contextmanager
    def write_lock(self) -> Iterator["Collection[RecordT]"]:
        with self._lock:
            yield self

    def __contains__(self, key: object) -> bool:
        return key in self._records

    def __len__(self) -> int:
        return len(self._records)


class RecordStore:
    """Owns the five collections; injected into services, never global."""

    def __init__(self) -> None:
        self.profiles: Collection[MaternalProfile] = Collection("profiles")
        self.providers: Collection[HealthcareProvider] = Collection("providers")
        self.metrics: Collection[HealthMetrics] = Collection("metrics")
        self.visits: Collection[PrenatalVisit] = Collection("visits")
        self.alerts: Collection[HealthAlert] = Collection("alerts")

    def counts(self) -> dict[str, int]:
        return {
            c.name: len(c)
            for c in (self.profiles, self.providers, self.metrics, self.visits, self.alerts)
        }
