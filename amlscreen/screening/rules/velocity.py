"""Transaction amount and velocity monitoring.

Keeps a sliding window of each customer's recent transactions. A single
transaction at or above the suspicious amount threshold raises
LARGE_AMOUNT; a customer who already has rapid_transaction_threshold or
more transactions inside the window raises RAPID_TRANSACTIONS.

The count is taken against history *before* the current transaction is
recorded, and the count-then-append runs atomically per customer so two
concurrent transactions cannot both observe a stale count.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from amlscreen.models import (
    AMLConfig,
    AMLFlag,
    Customer,
    HistoryEntry,
    MonitorResult,
    Transaction,
)
from amlscreen.storage.base import TransactionHistoryStore
from amlscreen.storage.memory import MemoryHistoryStore

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TransactionMonitor:
    """Flags large amounts and bursts of activity per customer."""

    def __init__(
        self,
        config: AMLConfig,
        history: Optional[TransactionHistoryStore] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.config = config
        self.history = history or MemoryHistoryStore(config.history_max_entries)
        self.clock = clock

    @property
    def window(self) -> timedelta:
        return timedelta(minutes=self.config.rapid_transaction_window_minutes)

    def monitor(self, transaction: Transaction, customer: Customer) -> MonitorResult:
        flags: list[AMLFlag] = []

        if transaction.amount >= self.config.suspicious_amount_threshold:
            flags.append(AMLFlag.LARGE_AMOUNT)

        # History is retained for twice the window so a slightly late
        # lookup still sees everything inside the window
        recent_count = self.history.count_and_append(
            customer.customer_id,
            transaction,
            clock=self.clock,
            window=self.window,
            retention=self.window * 2,
        )
        if recent_count >= self.config.rapid_transaction_threshold:
            flags.append(AMLFlag.RAPID_TRANSACTIONS)

        return MonitorResult(
            suspicious=bool(flags),
            flags=flags,
            recent_transaction_count=recent_count,
        )

    def get_recent_transactions(self, customer_id: str) -> List[HistoryEntry]:
        """Return a customer's entries that fall inside the current window."""
        return self.history.get_recent(customer_id, since=self.clock() - self.window)
