"""Pydantic models for the AML screening core."""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Iterable, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)


class TransactionType(str, Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"
    PAYMENT = "PAYMENT"
    FEE = "FEE"


class AMLFlag(str, Enum):
    """Closed set of AML flags.

    Declaration order is the canonical order used whenever a set of flags
    is rendered as a list (results, SAR descriptions, alert bodies).
    """
    SANCTION_HIT = "SANCTION_HIT"
    HIGH_RISK_COUNTRY = "HIGH_RISK_COUNTRY"
    LARGE_AMOUNT = "LARGE_AMOUNT"
    RAPID_TRANSACTIONS = "RAPID_TRANSACTIONS"
    STRUCTURING = "STRUCTURING"
    UNUSUAL_PATTERN = "UNUSUAL_PATTERN"


_FLAG_ORDER = {flag: index for index, flag in enumerate(AMLFlag)}


def ordered_flags(flags: Iterable[AMLFlag]) -> list[AMLFlag]:
    """Deduplicate flags and return them in canonical order."""
    return sorted(set(flags), key=_FLAG_ORDER.__getitem__)


class Counterparty(BaseModel):
    name: Optional[str] = None
    account_number: Optional[str] = None


class Transaction(BaseModel):
    """A transaction handed to the core by upstream processing.

    The only mutation the core performs is appending AML flags.
    """
    transaction_id: str
    amount: Decimal
    currency: str
    transaction_type: TransactionType
    description: str = ""
    counterparty: Optional[Counterparty] = None
    aml_flags: list[AMLFlag] = Field(default_factory=list)
    fraud_score: float = 0.0

    def add_aml_flag(self, flag: AMLFlag) -> None:
        if flag not in self.aml_flags:
            self.aml_flags.append(flag)


class Address(BaseModel):
    street: str = ""
    city: str = ""
    country: str = ""


class ContactInfo(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None


class PersonalInfo(BaseModel):
    first_name: str
    last_name: str
    date_of_birth: Optional[date] = None
    nationality: str  # ISO 3166-1 alpha-2
    address: Address = Field(default_factory=Address)
    contact_info: ContactInfo = Field(default_factory=ContactInfo)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Customer(BaseModel):
    customer_id: str
    personal_info: PersonalInfo


class AlertStatus(str, Enum):
    QUEUED = "QUEUED"
    DELIVERED = "DELIVERED"
    FAILED = "FAILED"
    TIMED_OUT = "TIMED_OUT"
    DROPPED = "DROPPED"


class AlertDelivery(BaseModel):
    """Observable delivery status of one compliance alert.

    Queued deliveries are updated in place by the alert worker.
    """
    transaction_id: str
    sar_id: Optional[str] = None
    recipient: str
    subject: str
    status: AlertStatus
    attempted_at: Optional[datetime] = None
    error: Optional[str] = None


class ScreeningResult(BaseModel):
    """Outcome of screening a single transaction."""
    success: Literal[True] = True
    screened: bool = True
    transaction_id: str
    suspicious: bool = False
    flags: list[AMLFlag] = Field(default_factory=list)
    risk_score: int = Field(default=0, ge=0, le=100)
    sanction_hit: bool = False
    sar_id: Optional[str] = None
    alert: Optional[AlertDelivery] = None
    message: Optional[str] = None

    @computed_field
    @property
    def requires_review(self) -> bool:
        return self.suspicious


class ScreeningFailure(BaseModel):
    """Screening could not be completed; callers apply their own policy."""
    success: Literal[False] = False
    transaction_id: str
    error: str


ScreeningOutcome = Union[ScreeningResult, ScreeningFailure]


class SARStatus(str, Enum):
    FILED = "FILED"


class SARMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    counterparty: Optional[Counterparty] = None
    transaction_description: str = ""


class SAR(BaseModel):
    """Suspicious Activity Report. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    sar_id: str
    transaction_id: str
    customer_id: str
    customer_name: str
    amount: Decimal
    currency: str
    transaction_type: TransactionType
    flags: tuple[AMLFlag, ...]
    description: str
    filing_date: datetime
    status: SARStatus = SARStatus.FILED
    reported_by: str = "SYSTEM"
    metadata: SARMetadata


class SanctionLists(BaseModel):
    """Immutable sanctions snapshot supplied by an external loader."""
    model_config = ConfigDict(frozen=True)

    individuals: frozenset[str] = frozenset()
    entities: frozenset[str] = frozenset()
    countries: frozenset[str] = frozenset()

    @field_validator("individuals", "entities", "countries", mode="before")
    @classmethod
    def _uppercase(cls, values: Iterable[str]) -> frozenset[str]:
        return frozenset(v.upper() for v in values)


class HistoryEntry(BaseModel):
    """A transaction observed by the monitor, stamped with the time it was seen."""
    transaction: Transaction
    timestamp: datetime


class SanctionResult(BaseModel):
    """Output of the sanctions screener."""
    hit: bool
    flags: list[AMLFlag]
    screened_at: datetime


class MonitorResult(BaseModel):
    """Output of the velocity/amount monitor."""
    suspicious: bool
    flags: list[AMLFlag]
    recent_transaction_count: int


class PatternResult(BaseModel):
    """Output of the single-transaction pattern heuristics."""
    suspicious: bool
    flags: list[AMLFlag]


class RiskPolicy(BaseModel):
    """Versioned risk-weight table used to score flag sets."""
    version: str = "1.0"
    weights: dict[AMLFlag, int] = Field(
        default_factory=lambda: {
            AMLFlag.SANCTION_HIT: 100,
            AMLFlag.HIGH_RISK_COUNTRY: 80,
            AMLFlag.STRUCTURING: 70,
            AMLFlag.LARGE_AMOUNT: 50,
            AMLFlag.RAPID_TRANSACTIONS: 40,
            AMLFlag.UNUSUAL_PATTERN: 30,
        }
    )
    default_weight: int = 20
    critical_flags: frozenset[AMLFlag] = frozenset(
        {AMLFlag.SANCTION_HIT, AMLFlag.STRUCTURING, AMLFlag.HIGH_RISK_COUNTRY}
    )


class AMLConfig(BaseModel):
    """Tunable thresholds for the screening core."""
    enable_real_time_screening: bool = True
    suspicious_amount_threshold: Decimal = Decimal("10000")
    rapid_transaction_threshold: int = 5
    rapid_transaction_window_minutes: int = 60
    structuring_ratio: Decimal = Decimal("0.9")
    round_amount_unit: Decimal = Decimal("1000")
    round_amount_floor: Decimal = Decimal("5000")
    large_withdrawal_threshold: Decimal = Decimal("5000")
    history_max_entries: int = 1000
    name_matching: Literal["exact", "fuzzy"] = "exact"
    fuzzy_match_threshold: int = 85
    compliance_recipient: str = "compliance@securebank.com"
    alert_timeout_seconds: float = 5.0
    alert_queue_size: int = 100
    risk_policy: RiskPolicy = Field(default_factory=RiskPolicy)

    @model_validator(mode="after")
    def _history_covers_velocity_threshold(self) -> "AMLConfig":
        # A shorter history could never reach the velocity threshold
        if self.history_max_entries < self.rapid_transaction_threshold:
            raise ValueError(
                "history_max_entries must be at least rapid_transaction_threshold"
            )
        return self


class AMLStatistics(BaseModel):
    total_transactions_screened: int
    flagged_transactions: int
    sars_generated: int
    sanction_hits: int
    flag_rate: str


class ScreeningRequest(BaseModel):
    """A transaction and its customer, submitted for screening."""
    transaction: Transaction
    customer: Customer


class BatchRequest(BaseModel):
    """A batch of transactions to screen."""
    items: list[ScreeningRequest]


class BatchSummary(BaseModel):
    """Aggregate statistics for a batch screening run."""
    total: int
    suspicious: int
    failed: int
    sars_filed: int
    common_flags: list[AMLFlag]


class BatchResponse(BaseModel):
    """Result of screening a batch of transactions."""
    results: list[ScreeningOutcome]
    summary: BatchSummary
