"""Single-transaction pattern heuristics.

Structuring: amounts just below the reporting threshold (e.g. $9,500
against the $10,000 CTR threshold), the classic sign of splitting a
deposit to avoid a report.

Unusual pattern: large round amounts, or large withdrawals.

Both checks look at the transaction alone; no history is consulted.
"""

from amlscreen.models import (
    AMLConfig,
    AMLFlag,
    Customer,
    PatternResult,
    Transaction,
    TransactionType,
)


class PatternDetector:
    def __init__(self, config: AMLConfig) -> None:
        self.config = config

    def detect(self, transaction: Transaction, customer: Customer) -> PatternResult:
        flags: list[AMLFlag] = []

        if self.is_structuring(transaction):
            flags.append(AMLFlag.STRUCTURING)

        if self.is_unusual_pattern(transaction):
            flags.append(AMLFlag.UNUSUAL_PATTERN)

        return PatternResult(suspicious=bool(flags), flags=flags)

    def is_structuring(self, transaction: Transaction) -> bool:
        """True when the amount is in [threshold * ratio, threshold)."""
        threshold = self.config.suspicious_amount_threshold
        lower_bound = threshold * self.config.structuring_ratio
        return lower_bound <= transaction.amount < threshold

    def is_unusual_pattern(self, transaction: Transaction) -> bool:
        amount = transaction.amount
        is_round_amount = (
            amount % self.config.round_amount_unit == 0
            and amount >= self.config.round_amount_floor
        )
        is_large_withdrawal = (
            transaction.transaction_type == TransactionType.WITHDRAWAL
            and amount > self.config.large_withdrawal_threshold
        )
        return is_round_amount or is_large_withdrawal
