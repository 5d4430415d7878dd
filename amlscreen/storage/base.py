"""Store interfaces injected into the screening components.

The in-memory implementations live in ``memory.py``; a persistent backend
only has to honour these contracts.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from amlscreen.models import SAR, HistoryEntry, Transaction


class TransactionHistoryStore(ABC):
    """Per-customer sliding window of recently observed transactions."""

    @abstractmethod
    def count_and_append(
        self,
        customer_id: str,
        transaction: Transaction,
        clock: Callable[[], datetime],
        window: timedelta,
        retention: timedelta,
    ) -> int:
        """Count entries newer than ``now - window``, then record the transaction.

        ``now`` is read from ``clock`` once the customer's history is locked,
        so each customer's entries are recorded in time order. The count is
        taken before the append. Entries older than ``now - retention`` are
        pruned afterwards. The whole sequence must be atomic with respect to
        other calls for the same customer.
        """

    @abstractmethod
    def get_recent(self, customer_id: str, since: datetime) -> List[HistoryEntry]:
        """Return a customer's entries with timestamp strictly after ``since``."""

    def set_max_entries(self, max_entries: int) -> None:
        """Change the per-customer entry bound. Unbounded backends ignore it."""


class SARStore(ABC):
    """Append-only keyed store for filed SARs."""

    @abstractmethod
    def add(self, sar: SAR) -> None:
        """Store a SAR. Raises DuplicateSARError if the id is taken."""

    @abstractmethod
    def get(self, sar_id: str) -> Optional[SAR]:
        ...

    @abstractmethod
    def get_all(self) -> List[SAR]:
        """Return every SAR in filing order."""
