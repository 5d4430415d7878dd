"""Risk scoring and SAR filing decision.

The score is DETERMINISTIC: the same flags always give the same score.
  - risk_score is the highest weight among the raised flags, not a sum
  - flags missing from the policy's weight table count as default_weight
  - no flags -> 0; the result is clamped to 100
A SAR is filed only for suspicious transactions carrying at least one of
the policy's critical flags.
"""

from typing import Iterable

from amlscreen.models import AMLFlag, RiskPolicy


def calculate_risk_score(flags: Iterable[AMLFlag], policy: RiskPolicy) -> int:
    score = 0
    for flag in flags:
        score = max(score, policy.weights.get(flag, policy.default_weight))
    return max(0, min(score, 100))


def should_file_sar(
    suspicious: bool,
    flags: Iterable[AMLFlag],
    policy: RiskPolicy,
) -> bool:
    return suspicious and any(flag in policy.critical_flags for flag in flags)
