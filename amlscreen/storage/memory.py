"""In-memory storage for transaction history and filed SARs.

History is a bounded deque per customer id, pruned by age on every write.
Customers whose whole history has aged out are evicted by a periodic sweep.
All data lives in memory and is lost on restart.
"""

import logging
import threading
from collections import deque
from contextlib import contextmanager
from datetime import datetime, timedelta
from typing import Callable, Deque, Dict, Iterator, List, Optional

from amlscreen.errors import DuplicateSARError
from amlscreen.models import SAR, HistoryEntry, Transaction
from amlscreen.storage.base import SARStore, TransactionHistoryStore

logger = logging.getLogger(__name__)


class MemoryHistoryStore(TransactionHistoryStore):
    """Thread-safe per-customer history with one lock per customer id."""

    def __init__(
        self,
        max_entries_per_customer: int = 1000,
        sweep_interval: int = 256,
    ) -> None:
        self._max_entries = max_entries_per_customer
        self._sweep_interval = sweep_interval
        self._writes = 0
        self._history: Dict[str, Deque[HistoryEntry]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        # Guards the two dicts and the write counter. Never taken while
        # holding a customer lock.
        self._registry_lock = threading.Lock()

    @contextmanager
    def _customer_history(
        self, customer_id: str, create: bool
    ) -> Iterator[Optional[Deque[HistoryEntry]]]:
        """Yield a customer's deque with its lock held, or None if unknown."""
        while True:
            with self._registry_lock:
                lock = self._locks.get(customer_id)
                if lock is None and create:
                    lock = self._locks[customer_id] = threading.Lock()
                    self._history[customer_id] = deque(maxlen=self._max_entries)
            if lock is None:
                yield None
                return
            with lock:
                # A sweep may have evicted the customer between lookup and acquire
                if self._locks.get(customer_id) is lock:
                    yield self._history[customer_id]
                    return

    def count_and_append(
        self,
        customer_id: str,
        transaction: Transaction,
        clock: Callable[[], datetime],
        window: timedelta,
        retention: timedelta,
    ) -> int:
        with self._customer_history(customer_id, create=True) as entries:
            # Read under the lock so entries are appended in time order
            now = clock()
            window_start = now - window
            count = sum(1 for e in entries if e.timestamp > window_start)

            entries.append(HistoryEntry(transaction=transaction, timestamp=now))

            # Stale entries sit at the left
            cutoff = now - retention
            while entries and entries[0].timestamp <= cutoff:
                entries.popleft()

        with self._registry_lock:
            self._writes += 1
            due = self._writes % self._sweep_interval == 0
        if due:
            self.evict_stale(cutoff)
        return count

    def evict_stale(self, cutoff: datetime) -> int:
        """Drop customers whose newest entry is at or before ``cutoff``.

        Customers busy in another thread are skipped until the next sweep.
        Returns the number of customers evicted.
        """
        evicted = 0
        with self._registry_lock:
            for customer_id, lock in list(self._locks.items()):
                if not lock.acquire(blocking=False):
                    continue
                try:
                    entries = self._history[customer_id]
                    if not entries or entries[-1].timestamp <= cutoff:
                        del self._history[customer_id]
                        del self._locks[customer_id]
                        evicted += 1
                finally:
                    lock.release()
        if evicted:
            logger.debug(f"Evicted history for {evicted} inactive customers")
        return evicted

    def get_recent(self, customer_id: str, since: datetime) -> List[HistoryEntry]:
        with self._customer_history(customer_id, create=False) as entries:
            if entries is None:
                return []
            return [e for e in entries if e.timestamp > since]

    def set_max_entries(self, max_entries: int) -> None:
        with self._registry_lock:
            if max_entries == self._max_entries:
                return
            self._max_entries = max_entries
            for customer_id, lock in self._locks.items():
                with lock:
                    # Shrinking keeps the newest entries
                    self._history[customer_id] = deque(
                        self._history[customer_id], maxlen=max_entries
                    )


class MemorySARStore(SARStore):
    """Append-only SAR store keyed by sar_id."""

    def __init__(self) -> None:
        # dicts keep insertion order, which is filing order
        self._sars: Dict[str, SAR] = {}
        self._lock = threading.Lock()

    def add(self, sar: SAR) -> None:
        with self._lock:
            if sar.sar_id in self._sars:
                raise DuplicateSARError(sar.sar_id)
            self._sars[sar.sar_id] = sar

    def get(self, sar_id: str) -> Optional[SAR]:
        return self._sars.get(sar_id)

    def get_all(self) -> List[SAR]:
        with self._lock:
            return list(self._sars.values())
