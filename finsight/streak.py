"""Daily login streak tracking.

A login is classified by the number of calendar days since the previous
one; only dates are compared, so the time of day never matters.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Optional, Union

DateLike = Union[date, datetime]


class LoginState(Enum):
    FIRST_LOGIN = 'first_login'
    SAME_DAY = 'same_day'
    CONSECUTIVE_DAY = 'consecutive_day'
    GAP = 'gap'


def _as_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def classify_login(last_login: Optional[DateLike], today: DateLike) -> LoginState:
    """Classify a login relative to the previous one.

    Example:
        >>> classify_login(date(2024, 3, 1), date(2024, 3, 2))
        <LoginState.CONSECUTIVE_DAY: 'consecutive_day'>
    """
    if last_login is None:
        return LoginState.FIRST_LOGIN

    delta = (_as_date(today) - _as_date(last_login)).days
    # A last login "in the future" (clock skew) counts as today.
    if delta <= 0:
        return LoginState.SAME_DAY
    if delta == 1:
        return LoginState.CONSECUTIVE_DAY
    return LoginState.GAP


def next_streak(streak_count: int, last_login: Optional[DateLike], today: DateLike) -> int:
    """Return the streak after a login on ``today``."""
    state = classify_login(last_login, today)
    if state is LoginState.SAME_DAY:
        return streak_count
    if state is LoginState.CONSECUTIVE_DAY:
        return streak_count + 1
    return 1
