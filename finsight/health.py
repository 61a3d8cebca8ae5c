"""Financial health score and its display tiers.

The score blends how much of the month's budget has been spent with the
user's daily login streak:

* no budget at all scores 100;
* otherwise the expense/budget ratio picks a base score from
  :data:`USAGE_BRACKETS` (first bracket whose upper bound is ``>=`` the
  ratio wins);
* one bonus point per streak day is added, at most :data:`MAX_STREAK_BONUS`;
* the result is capped at 100.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

# (upper bound of usage ratio, base score), ascending
USAGE_BRACKETS = [
    (0.50, 100),
    (0.75, 85),
    (0.90, 70),
    (1.00, 55),
    (1.20, 35),
]
OVERSPENT_SCORE = 15
MAX_STREAK_BONUS = 10
MAX_SCORE = 100

GOOD_THRESHOLD = 70
WARNING_THRESHOLD = 40

_BRACKET_BOUNDS = np.array([bound for bound, _ in USAGE_BRACKETS])
_BRACKET_SCORES = [score for _, score in USAGE_BRACKETS] + [OVERSPENT_SCORE]


@dataclass(frozen=True)
class HealthStatus:
    status: str
    color: str
    label: str

    def to_dict(self):
        return {'status': self.status, 'color': self.color, 'label': self.label}


GOOD = HealthStatus('good', '#22c55e', 'สุขภาพดี')
WARNING = HealthStatus('warning', '#f59e0b', 'ระวัง')
CRITICAL = HealthStatus('critical', '#ef4444', 'วิกฤต')


def base_score(usage_ratio: float) -> int:
    """Map a spend/budget ratio onto its bracket score.

    Example:
        >>> base_score(0.5)
        100
        >>> base_score(0.51)
        85
        >>> base_score(3.0)
        15
    """
    # side='left' returns the first bound >= ratio, so a ratio sitting exactly
    # on a bound stays in that bracket.
    index = int(np.searchsorted(_BRACKET_BOUNDS, usage_ratio, side='left'))
    return _BRACKET_SCORES[index]


def calculate_health_score(total_expense: float, total_budget: float, streak_count: int) -> int:
    """Return the 0-100 health score for a month.

    Args:
        total_expense: Sum of the month's expense transactions
        total_budget: Sum of every budget set for the month
        streak_count: Consecutive daily logins as of the latest login

    Example:
        >>> calculate_health_score(1000, 1000, 15)
        65
    """
    if total_budget == 0:
        return MAX_SCORE

    score = base_score(total_expense / total_budget)
    streak_bonus = min(max(int(streak_count), 0), MAX_STREAK_BONUS)
    return min(MAX_SCORE, score + streak_bonus)


def get_health_status(score: int) -> HealthStatus:
    if score >= GOOD_THRESHOLD:
        return GOOD
    if score >= WARNING_THRESHOLD:
        return WARNING
    return CRITICAL
