"""Sanctions list screening.

Checks the customer's full name and the counterparty name against the
individuals/entities lists, and the customer's nationality against the
high-risk country list.

Name matching is delegated to a NameMatcher. The default is a
case-normalised exact match. FuzzyNameMatcher uses thefuzz to catch
transliteration variants like "Mohammad Ahmad" vs "Mohammed Ahmed"; it is
opt-in through AMLConfig.name_matching and never replaces the default
silently.
"""

import re
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import AbstractSet, Callable, Optional

from thefuzz import fuzz

from amlscreen.models import (
    AMLConfig,
    AMLFlag,
    Customer,
    SanctionLists,
    SanctionResult,
    Transaction,
)


def _normalize_name(name: str) -> str:
    """Uppercase, strip, and collapse multiple spaces."""
    return re.sub(r"\s+", " ", name.strip().upper())


class NameMatcher(ABC):
    """Capability for matching a name against a set of listed names."""

    @abstractmethod
    def match(self, name: str, candidates: AbstractSet[str]) -> Optional[str]:
        """Return the listed name that ``name`` matches, or None."""


class ExactNameMatcher(NameMatcher):
    """Uppercase exact equality against an uppercase candidate set."""

    def match(self, name: str, candidates: AbstractSet[str]) -> Optional[str]:
        upper = name.upper()
        return upper if upper in candidates else None


class FuzzyNameMatcher(NameMatcher):
    """Similarity match using the higher of ratio() and token_sort_ratio().

    token_sort_ratio handles reordering ("Ahmad Mohammad" vs
    "Mohammad Ahmad"). Returns the best-scoring candidate at or above the
    threshold.
    """

    def __init__(self, threshold: int = 85) -> None:
        self.threshold = threshold

    def match(self, name: str, candidates: AbstractSet[str]) -> Optional[str]:
        normalized = _normalize_name(name)
        best: Optional[str] = None
        best_score = -1
        # Sorted so ties resolve the same way on every run
        for candidate in sorted(candidates):
            normalized_candidate = _normalize_name(candidate)
            score = max(
                fuzz.ratio(normalized, normalized_candidate),
                fuzz.token_sort_ratio(normalized, normalized_candidate),
            )
            if score >= self.threshold and score > best_score:
                best, best_score = candidate, score
        return best


def build_name_matcher(config: AMLConfig) -> NameMatcher:
    if config.name_matching == "fuzzy":
        return FuzzyNameMatcher(threshold=config.fuzzy_match_threshold)
    return ExactNameMatcher()


class SanctionScreener:
    """Screens a transaction's parties against a sanctions snapshot. Read-only."""

    def __init__(
        self,
        sanction_lists: SanctionLists,
        matcher: Optional[NameMatcher] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.sanction_lists = sanction_lists
        self.matcher = matcher or ExactNameMatcher()
        self.clock = clock

    def screen(self, transaction: Transaction, customer: Customer) -> SanctionResult:
        flags: list[AMLFlag] = []
        lists = self.sanction_lists

        customer_name = customer.personal_info.full_name
        if self.matcher.match(customer_name, lists.individuals) is not None:
            flags.append(AMLFlag.SANCTION_HIT)

        counterparty = transaction.counterparty
        if counterparty is not None and counterparty.name:
            if (
                self.matcher.match(counterparty.name, lists.individuals) is not None
                or self.matcher.match(counterparty.name, lists.entities) is not None
            ):
                if AMLFlag.SANCTION_HIT not in flags:
                    flags.append(AMLFlag.SANCTION_HIT)

        if customer.personal_info.nationality in lists.countries:
            flags.append(AMLFlag.HIGH_RISK_COUNTRY)

        return SanctionResult(
            hit=bool(flags),
            flags=flags,
            screened_at=self.clock(),
        )
