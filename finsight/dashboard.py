"""Request-level flows that tie storage, the summary engine and insights together.

Each function takes a user id (as supplied by authentication) and returns a
JSON-serializable dict.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from . import db
from .aggregation import aggregate
from .assistant import CompleteFn, build_whisper_prompt, parse_transaction_text, whisper_insight
from .config import RECENT_TRANSACTIONS_LIMIT
from .formatting import format_currency
from .health import calculate_health_score, get_health_status
from .models import User, Widget
from .summary import build_summary
from .widgets import greeting, time_based_widgets


def _require_user(user_id: int) -> User:
    user = db.get_user(user_id)
    if user is None:
        raise ValueError(f"User {user_id} not found")
    return user


def load_dashboard(user_id: int, now: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the home-screen payload for the current month.

    The computed health score is written back to the user record so other
    screens can show it without recomputing.
    """
    now = now or datetime.now()
    user = _require_user(user_id)

    transactions = db.fetch_month_transactions(user_id, now.year, now.month)
    budgets = db.fetch_month_budgets(user_id, now.year, now.month)
    summary = build_summary(transactions, budgets)

    score = calculate_health_score(summary.total_expense, summary.total_budget, user.streak_count)
    if score != user.health_score:
        db.update_health_score(user_id, score)
        user.health_score = score

    recent = db.frame_to_transactions(db.fetch_recent_transactions(user_id, RECENT_TRANSACTIONS_LIMIT))
    payload = summary.to_dict()

    return {
        'user': user.to_dict(),
        'greeting': greeting(now.hour),
        'summary': {k: v for k, v in payload.items() if k != 'categoryBreakdown'},
        'categoryBreakdown': payload['categoryBreakdown'],
        'health': {'score': score, **get_health_status(score).to_dict()},
        'widgets': [widget.to_dict() for widget in time_based_widgets(now)],
        'recentTransactions': [txn.to_dict() for txn in recent],
    }


def refresh_whisper(
    user_id: int,
    now: Optional[datetime] = None,
    complete: Optional[CompleteFn] = None,
) -> Dict[str, Any]:
    """Generate a fresh whisper insight and store the returned persona."""
    now = now or datetime.now()
    user = _require_user(user_id)

    totals = aggregate(db.fetch_month_transactions(user_id, now.year, now.month))
    insight = whisper_insight(build_whisper_prompt(user, totals, now), complete=complete)
    db.update_persona(user_id, insight.persona_name, insight.persona_emoji)

    return {
        **insight.to_dict(),
        'summary': {
            'totalExpense': totals.total_expense,
            'totalIncome': totals.total_income,
            'transactionCount': totals.transaction_count,
            'topCategories': {name: total.amount for name, total in totals.category_breakdown.items()},
        },
    }


def quick_add_text(user_id: int, text: str, complete: Optional[CompleteFn] = None) -> Dict[str, Any]:
    """Record a transaction described in free text, e.g. "ข้าวมันไก่ 50"."""
    if not text or not text.strip():
        raise ValueError("Text is required")

    parsed = parse_transaction_text(text, complete=complete)
    if parsed.error:
        raise ValueError(parsed.error)

    category = db.find_category(parsed.category)
    if category is None:
        raise ValueError(f"Unknown category {parsed.category!r}")

    transaction = db.insert_transaction(
        user_id,
        amount=parsed.amount,
        description=parsed.item,
        txn_type=parsed.type,
        category_id=category.id,
    )
    return {
        'transaction': transaction.to_dict(),
        'parsed': parsed.to_dict(),
        'message': f'บันทึก "{parsed.item}" {format_currency(parsed.amount)} สำเร็จ!',
    }


def quick_add_widget(user_id: int, widget: Widget, amount: Optional[float] = None) -> Dict[str, Any]:
    """Record a one-tap widget as an expense; ``amount`` overrides the preset."""
    if amount is not None and amount <= 0:
        raise ValueError("Override amount must be positive")

    category = db.find_category(widget.category)
    if category is None:
        raise ValueError(f"Unknown category {widget.category!r}")

    transaction = db.insert_transaction(
        user_id,
        amount=widget.amount if amount is None else amount,
        description=widget.label,
        txn_type='expense',
        category_id=category.id,
        is_widget=True,
    )
    return transaction.to_dict()
