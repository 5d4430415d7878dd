"""Core AML screening orchestrator.

Runs the three screeners against the same transaction/customer pair:
  1. Sanctions (customer, counterparty, nationality)
  2. Monitor (large amount, rapid transactions over a sliding window)
  3. Patterns (structuring, unusual shapes)

The screeners do not depend on each other and run concurrently. Their
flags are merged, scored, and, when a critical flag is present, a SAR is
filed and compliance is alerted. Counters are updated last.

screen_transaction never raises: any failure while screening or filing
comes back as a ScreeningFailure. A failed alert is reported on the
result's ``alert`` field and does not fail the screening.
"""

import asyncio
import logging
from typing import List, Optional

from amlscreen.models import (
    AMLConfig,
    AMLStatistics,
    SAR,
    Customer,
    HistoryEntry,
    SanctionLists,
    ScreeningFailure,
    ScreeningOutcome,
    ScreeningResult,
    Transaction,
    ordered_flags,
)
from amlscreen.screening.alerts import ComplianceAlerter, ComplianceNotifier, LoggingNotifier
from amlscreen.screening.metrics import EngineMetrics
from amlscreen.screening.rules.patterns import PatternDetector
from amlscreen.screening.rules.sanctions import SanctionScreener, build_name_matcher
from amlscreen.screening.rules.velocity import Clock, TransactionMonitor, utc_now
from amlscreen.screening.sar import SARGenerator
from amlscreen.screening.scorer import calculate_risk_score, should_file_sar
from amlscreen.storage.base import SARStore, TransactionHistoryStore

logger = logging.getLogger(__name__)


class AMLEngine:
    """Orchestrates transaction screening, SAR filing and compliance alerts."""

    def __init__(
        self,
        sanction_lists: SanctionLists,
        config: Optional[AMLConfig] = None,
        history_store: Optional[TransactionHistoryStore] = None,
        sar_store: Optional[SARStore] = None,
        notifier: Optional[ComplianceNotifier] = None,
        clock: Clock = utc_now,
    ) -> None:
        self.config = config or AMLConfig()
        self.sanction_screener = SanctionScreener(
            sanction_lists, matcher=build_name_matcher(self.config), clock=clock
        )
        self.transaction_monitor = TransactionMonitor(
            self.config, history=history_store, clock=clock
        )
        self.transaction_monitor.history.set_max_entries(self.config.history_max_entries)
        self.pattern_detector = PatternDetector(self.config)
        self.sar_generator = SARGenerator(store=sar_store, clock=clock)
        self.alerter = ComplianceAlerter(notifier or LoggingNotifier(), self.config)
        self.metrics = EngineMetrics()

    def update_config(self, config: AMLConfig) -> None:
        """Swap thresholds for every component; later screenings use them."""
        self.config = config
        self.sanction_screener.matcher = build_name_matcher(config)
        self.transaction_monitor.config = config
        self.transaction_monitor.history.set_max_entries(config.history_max_entries)
        self.pattern_detector.config = config
        self.alerter.config = config

    async def screen_transaction(
        self,
        transaction: Transaction,
        customer: Customer,
    ) -> ScreeningOutcome:
        if not self.config.enable_real_time_screening:
            return ScreeningResult(
                transaction_id=transaction.transaction_id,
                screened=False,
                message="Real-time screening is disabled",
            )

        try:
            return await self._screen(transaction, customer)
        except Exception as exc:
            logger.exception(f"Screening failed for transaction {transaction.transaction_id}")
            return ScreeningFailure(
                transaction_id=transaction.transaction_id,
                error=str(exc) or exc.__class__.__name__,
            )

    async def _screen(self, transaction: Transaction, customer: Customer) -> ScreeningResult:
        sanction_result, monitor_result, pattern_result = await asyncio.gather(
            asyncio.to_thread(self.sanction_screener.screen, transaction, customer),
            asyncio.to_thread(self.transaction_monitor.monitor, transaction, customer),
            asyncio.to_thread(self.pattern_detector.detect, transaction, customer),
        )

        suspicious = (
            sanction_result.hit or monitor_result.suspicious or pattern_result.suspicious
        )
        flags = ordered_flags(
            sanction_result.flags + monitor_result.flags + pattern_result.flags
        )
        for flag in flags:
            transaction.add_aml_flag(flag)

        policy = self.config.risk_policy
        risk_score = calculate_risk_score(flags, policy)
        logger.debug(
            f"Transaction {transaction.transaction_id}: flags={[f.value for f in flags]} "
            f"risk_score={risk_score} (policy {policy.version})"
        )

        sar: Optional[SAR] = None
        alert = None
        if should_file_sar(suspicious, flags, policy):
            sar = self.sar_generator.generate(transaction, customer, flags)
            self.metrics.record_sar()
            alert = await self.alerter.dispatch(transaction, customer, flags, sar)

        self.metrics.record_screening(
            suspicious=suspicious, sanction_hit=sanction_result.hit
        )

        return ScreeningResult(
            transaction_id=transaction.transaction_id,
            suspicious=suspicious,
            flags=flags,
            risk_score=risk_score,
            sanction_hit=sanction_result.hit,
            sar_id=sar.sar_id if sar else None,
            alert=alert,
        )

    def get_statistics(self) -> AMLStatistics:
        return self.metrics.snapshot()

    def get_sar(self, sar_id: str) -> Optional[SAR]:
        return self.sar_generator.get_sar(sar_id)

    def get_all_sars(self) -> List[SAR]:
        return self.sar_generator.get_all_sars()

    def get_recent_transactions(self, customer_id: str) -> List[HistoryEntry]:
        return self.transaction_monitor.get_recent_transactions(customer_id)
