"""Suspicious Activity Report generation and retrieval.

The description is an audit artifact: it is built only from the flags and
the transaction/customer identifiers, so the same inputs always give the
same text byte for byte. The filing time lives in filing_date, never in
the description.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from amlscreen.errors import DuplicateSARError
from amlscreen.models import (
    AMLFlag,
    SAR,
    Customer,
    SARMetadata,
    SARStatus,
    Transaction,
    ordered_flags,
)
from amlscreen.storage.base import SARStore
from amlscreen.storage.memory import MemorySARStore

logger = logging.getLogger(__name__)

FLAG_DESCRIPTIONS = {
    AMLFlag.SANCTION_HIT: "Customer or counterparty appears on sanctions list",
    AMLFlag.HIGH_RISK_COUNTRY: "Transaction involves high-risk jurisdiction",
    AMLFlag.STRUCTURING: "Transaction amount suggests potential structuring",
    AMLFlag.LARGE_AMOUNT: "Transaction exceeds large amount threshold",
    AMLFlag.RAPID_TRANSACTIONS: "Multiple rapid transactions detected",
    AMLFlag.UNUSUAL_PATTERN: "Transaction exhibits unusual patterns",
}

# Attempts at drawing a fresh id before giving up on a colliding store
_MAX_ID_ATTEMPTS = 5


def build_description(
    transaction: Transaction,
    customer: Customer,
    flags: Iterable[AMLFlag],
) -> str:
    reasons = "; ".join(
        FLAG_DESCRIPTIONS.get(flag, flag.value) for flag in ordered_flags(flags)
    )
    return (
        f"Suspicious activity detected for customer {customer.customer_id}. "
        f"Transaction {transaction.transaction_id} for "
        f"{transaction.amount} {transaction.currency}. "
        f"Reasons: {reasons}."
    )


class SARGenerator:
    """Builds, files and looks up SARs."""

    def __init__(
        self,
        store: Optional[SARStore] = None,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.store = store or MemorySARStore()
        self.id_factory = id_factory
        self.clock = clock

    def generate(
        self,
        transaction: Transaction,
        customer: Customer,
        flags: Iterable[AMLFlag],
    ) -> SAR:
        flag_list = ordered_flags(flags)
        fields = dict(
            transaction_id=transaction.transaction_id,
            customer_id=customer.customer_id,
            customer_name=customer.personal_info.full_name,
            amount=transaction.amount,
            currency=transaction.currency,
            transaction_type=transaction.transaction_type,
            flags=tuple(flag_list),
            description=build_description(transaction, customer, flag_list),
            filing_date=self.clock(),
            status=SARStatus.FILED,
            metadata=SARMetadata(
                counterparty=(
                    transaction.counterparty.model_copy()
                    if transaction.counterparty is not None
                    else None
                ),
                transaction_description=transaction.description,
            ),
        )

        for _ in range(_MAX_ID_ATTEMPTS):
            sar = SAR(sar_id=self.id_factory(), **fields)
            try:
                self.store.add(sar)
            except DuplicateSARError:
                logger.warning(f"SAR id {sar.sar_id} already on file, drawing a new one")
                continue
            logger.info(
                f"SAR {sar.sar_id} filed for transaction {sar.transaction_id} "
                f"({', '.join(f.value for f in flag_list)})"
            )
            return sar

        raise DuplicateSARError(sar.sar_id)

    def get_sar(self, sar_id: str) -> Optional[SAR]:
        return self.store.get(sar_id)

    def get_all_sars(self) -> List[SAR]:
        return self.store.get_all()
