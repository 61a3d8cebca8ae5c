"""Assemble the month summary shown on the dashboard."""

from __future__ import annotations

from typing import Dict, Sequence, Union

import pandas as pd

from .aggregation import TransactionsLike, aggregate
from .models import Budget, Summary

BudgetsLike = Union[pd.DataFrame, Sequence[Budget]]


def total_budget(budgets: BudgetsLike) -> float:
    """Sum every budget amount for the period.

    Overall (category-less) and per-category budgets are added together, so a
    user who sets both sees them counted twice.
    """
    if isinstance(budgets, pd.DataFrame):
        if budgets.empty:
            return 0.0
        return float(pd.to_numeric(budgets['Amount'], errors='coerce').fillna(0.0).sum())
    return float(sum(budget.amount for budget in budgets))


def budget_usage(total_expense: float, budget: float) -> float:
    """Percentage of ``budget`` consumed by ``total_expense``; may exceed 100."""
    return (total_expense / budget) * 100 if budget > 0 else 0.0


def build_summary(transactions: TransactionsLike, budgets: BudgetsLike) -> Summary:
    """Build the :class:`Summary` for one month.

    Args:
        transactions: The month's transactions (records or a transaction frame)
        budgets: The same month's budgets (records or a budget frame)

    Returns:
        Summary with totals, balance, budget usage and the category breakdown

    Example:
        >>> build_summary([], []).to_dict()['budgetUsage']
        0.0
    """
    totals = aggregate(transactions)
    budget = total_budget(budgets)
    return Summary(
        total_expense=totals.total_expense,
        total_income=totals.total_income,
        balance=totals.total_income - totals.total_expense,
        total_budget=budget,
        budget_usage=budget_usage(totals.total_expense, budget),
        transaction_count=totals.transaction_count,
        category_breakdown=totals.category_breakdown,
    )


def category_shares(summary: Summary) -> Dict[str, float]:
    """Percentage of total expense taken by each category."""
    if summary.total_expense <= 0:
        return {name: 0.0 for name in summary.category_breakdown}
    return {
        name: total.amount / summary.total_expense * 100
        for name, total in summary.category_breakdown.items()
    }
