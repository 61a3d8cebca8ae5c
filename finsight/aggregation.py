"""Reduce transaction history into totals and a category breakdown.

Transactions arrive either as :class:`~finsight.models.Transaction` records
or as the DataFrame returned by :func:`finsight.db.fetch_transactions`.  Both
are normalised into one frame layout before any arithmetic happens, so the
rest of the module only deals with pandas.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Iterable, List, Sequence, Tuple, Union

import pandas as pd

from .models import (
    UNCATEGORIZED_ICON,
    UNCATEGORIZED_NAME,
    CategoryTotal,
    Transaction,
)

FRAME_COLUMNS = [
    'id',
    'Created At',
    'Description',
    'Type',
    'Amount',
    'Category Id',
    'Category',
    'Icon',
    'Is Widget',
]

TransactionsLike = Union[pd.DataFrame, Sequence[Transaction]]


@dataclass
class Aggregate:
    total_expense: float = 0.0
    total_income: float = 0.0
    transaction_count: int = 0
    category_breakdown: Dict[str, CategoryTotal] = field(default_factory=dict)


def month_bounds(year: int, month: int) -> Tuple[datetime, datetime]:
    """Return the inclusive window of a calendar month.

    Example:
        >>> month_bounds(2024, 2)
        (datetime.datetime(2024, 2, 1, 0, 0), datetime.datetime(2024, 2, 29, 23, 59, 59))
    """
    period = pd.Period(year=year, month=month, freq='M')
    start = period.start_time.to_pydatetime()
    end = period.end_time.floor('s').to_pydatetime()
    return start, end


def _record_row(txn: Transaction) -> Dict[str, object]:
    category = txn.category
    return {
        'id': txn.id,
        'Created At': txn.created_at,
        'Description': txn.description,
        'Type': txn.type,
        'Amount': txn.amount,
        'Category Id': txn.category_id if category is None else category.id,
        'Category': category.name if category is not None else None,
        'Icon': category.icon if category is not None else None,
        'Is Widget': txn.is_widget,
    }


def transactions_frame(transactions: TransactionsLike) -> pd.DataFrame:
    """Normalise transactions into a DataFrame with :data:`FRAME_COLUMNS`."""
    if isinstance(transactions, pd.DataFrame):
        frame = transactions.copy()
        for column in FRAME_COLUMNS:
            if column not in frame.columns:
                frame[column] = None
    else:
        frame = pd.DataFrame([_record_row(txn) for txn in transactions], columns=FRAME_COLUMNS)

    frame['Amount'] = pd.to_numeric(frame['Amount'], errors='coerce').fillna(0.0).astype(float)
    frame['Type'] = frame['Type'].fillna('').astype(str).str.strip().str.lower()

    # Rows without a category share one sentinel bucket; a category without
    # an icon keeps its name but borrows the default icon.
    missing = frame['Category'].isna() | (frame['Category'].astype(str).str.strip() == '')
    frame.loc[missing, 'Category'] = UNCATEGORIZED_NAME
    frame.loc[missing, 'Icon'] = UNCATEGORIZED_ICON
    frame['Icon'] = frame['Icon'].fillna(UNCATEGORIZED_ICON)
    return frame


def aggregate(transactions: TransactionsLike) -> Aggregate:
    """Total income and expense and group expenses by category name.

    Only ``expense`` rows contribute to the breakdown.  Groups keep the order
    in which their first transaction appears, and each group's icon comes from
    that first transaction.
    """
    frame = transactions_frame(transactions)
    if frame.empty:
        return Aggregate()

    expense = frame[frame['Type'] == 'expense']
    income = frame[frame['Type'] == 'income']

    breakdown: Dict[str, CategoryTotal] = {}
    if not expense.empty:
        grouped = expense.groupby('Category', sort=False).agg(
            amount=('Amount', 'sum'),
            icon=('Icon', 'first'),
        )
        breakdown = {
            str(name): CategoryTotal(amount=float(row['amount']), icon=str(row['icon']))
            for name, row in grouped.iterrows()
        }

    # Summing the grouped totals keeps the breakdown and the expense total
    # bit-for-bit consistent.
    total_expense = sum(total.amount for total in breakdown.values())

    return Aggregate(
        total_expense=float(total_expense),
        total_income=float(income['Amount'].sum()),
        transaction_count=len(frame),
        category_breakdown=breakdown,
    )


def transactions_in_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> List[Transaction]:
    """Keep the transactions created inside the given calendar month."""
    start, end = month_bounds(year, month)
    return [txn for txn in transactions if start <= txn.created_at <= end]


def top_categories(breakdown: Dict[str, CategoryTotal], limit: int = 5) -> List[Tuple[str, float]]:
    """Return the ``limit`` largest categories as ``(name, amount)`` pairs."""
    ranked = sorted(breakdown.items(), key=lambda item: item[1].amount, reverse=True)
    return [(name, total.amount) for name, total in ranked[:limit]]
