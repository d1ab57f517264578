"""
Scan registry - per-scan bean records and visited set.

``ScanRegistry`` is single-threaded. ``ThreadSafeScanRegistry`` guards the
same state with one lock and exposes the atomic operations the concurrent
scheduler relies on: ``visit`` (check-and-insert) and ``register``
(put-if-absent).
"""

import threading
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Set

from ..faults import IdCollision
from .kinds import BeanKind, BeanRecord


@dataclass
class RegistryCounters:
    registrations: int = 0
    lookups: int = 0
    hits: int = 0
    collisions: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "registrations": self.registrations,
            "lookups": self.lookups,
            "hits": self.hits,
            "collisions": self.collisions,
        }


class ScanRegistry:
    """
    Insertion-ordered ``id -> BeanRecord`` plus the visited set.

    A registry lives for exactly one scan.
    """

    def __init__(self):
        self._records: Dict[str, BeanRecord] = {}
        self._by_type: Dict[str, BeanRecord] = {}
        self._visited: Set[str] = set()
        self._visit_order: List[str] = []
        self.counters = RegistryCounters()

    # ------------------------------------------------------------------
    # Visited set
    # ------------------------------------------------------------------

    def visit(self, qualified_name: str) -> bool:
        """
        Mark a type visited.

        Returns:
            True if this call inserted it, False if it was already visited
        """
        if not qualified_name or qualified_name in self._visited:
            return False
        self._visited.add(qualified_name)
        self._visit_order.append(qualified_name)
        return True

    def is_visited(self, qualified_name: str) -> bool:
        return qualified_name in self._visited

    @property
    def visited(self) -> List[str]:
        """Visited qualified names in visit order."""
        return list(self._visit_order)

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def register(self, record: BeanRecord) -> Optional[IdCollision]:
        """
        Put-if-absent by id.

        Returns:
            None if registered (or the same type was already registered
            under this id), an ``IdCollision`` if a different type holds
            the id. The first registration is kept either way.
        """
        existing = self._records.get(record.id)
        if existing is not None:
            if existing.qualified_name == record.qualified_name:
                return None
            self.counters.collisions += 1
            return IdCollision(record.id, existing.qualified_name, record.qualified_name)
        self._records[record.id] = record
        self._by_type.setdefault(record.qualified_name, record)
        self.counters.registrations += 1
        return None

    def get(self, bean_id: str) -> Optional[BeanRecord]:
        self.counters.lookups += 1
        record = self._records.get(bean_id)
        if record is not None:
            self.counters.hits += 1
        return record

    def record_for_type(self, qualified_name: str) -> Optional[BeanRecord]:
        self.counters.lookups += 1
        record = self._by_type.get(qualified_name)
        if record is not None:
            self.counters.hits += 1
        return record

    def records(self, kind: Optional[BeanKind] = None) -> List[BeanRecord]:
        """Records in insertion order, optionally filtered by kind."""
        if kind is None:
            return list(self._records.values())
        return [r for r in self._records.values() if r.kind is kind]

    def __contains__(self, bean_id: str) -> bool:
        return bean_id in self._records

    def __iter__(self) -> Iterator[BeanRecord]:
        return iter(self.records())

    def __len__(self) -> int:
        return len(self._records)


class ThreadSafeScanRegistry(ScanRegistry):
    """Lock-guarded registry shared by concurrent scan workers."""

    def __init__(self):
        super().__init__()
        self._lock = threading.RLock()

    def visit(self, qualified_name: str) -> bool:
        with self._lock:
            return super().visit(qualified_name)

    def is_visited(self, qualified_name: str) -> bool:
        with self._lock:
            return super().is_visited(qualified_name)

    @property
    def visited(self) -> List[str]:
        with self._lock:
            return list(self._visit_order)

    def register(self, record: BeanRecord) -> Optional[IdCollision]:
        with self._lock:
            return super().register(record)

    def get(self, bean_id: str) -> Optional[BeanRecord]:
        with self._lock:
            return super().get(bean_id)

    def record_for_type(self, qualified_name: str) -> Optional[BeanRecord]:
        with self._lock:
            return super().record_for_type(qualified_name)

    def records(self, kind: Optional[BeanKind] = None) -> List[BeanRecord]:
        with self._lock:
            return super().records(kind)

    def __contains__(self, bean_id: str) -> bool:
        with self._lock:
            return bean_id in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)
