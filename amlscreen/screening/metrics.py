"""Aggregate screening counters shared across all calls."""

import threading

from amlscreen.models import AMLStatistics


class EngineMetrics:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.total_transactions_screened = 0
        self.flagged_transactions = 0
        self.sars_generated = 0
        self.sanction_hits = 0

    def record_sar(self) -> None:
        with self._lock:
            self.sars_generated += 1

    def record_screening(self, suspicious: bool, sanction_hit: bool) -> None:
        with self._lock:
            self.total_transactions_screened += 1
            if suspicious:
                self.flagged_transactions += 1
            if sanction_hit:
                self.sanction_hits += 1

    def snapshot(self) -> AMLStatistics:
        with self._lock:
            total = self.total_transactions_screened
            flagged = self.flagged_transactions
            if total > 0:
                flag_rate = f"{flagged / total * 100:.2f}%"
            else:
                flag_rate = "0%"
            return AMLStatistics(
                total_transactions_screened=total,
                flagged_transactions=flagged,
                sars_generated=self.sars_generated,
                sanction_hits=self.sanction_hits,
                flag_rate=flag_rate,
            )
