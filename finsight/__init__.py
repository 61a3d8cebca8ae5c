"""Top‑level package for FinSight, a personal finance tracker.

The primary modules are:

* ``aggregation`` – totals and category breakdown for a set of transactions
* ``health`` – the 0–100 financial health score and its display tiers
* ``widgets`` – time-of-day quick-add suggestions
* ``summary`` – the month summary shown on the dashboard
* ``streak`` – daily login streak transitions
* ``db`` – SQLite storage for users, categories, transactions and budgets
* ``assistant`` – natural-language quick add and whisper insights
* ``dashboard`` – request-level flows combining all of the above
"""

from . import aggregation  # noqa: F401  # re-exported for convenience
from . import health  # noqa: F401  # re-exported for convenience
from . import summary  # noqa: F401  # re-exported for convenience
from . import widgets  # noqa: F401  # re-exported for convenience

__all__ = ["aggregation", "health", "summary", "widgets"]
