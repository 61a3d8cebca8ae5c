#!/usr/bin/env python3
"""Print a user's month summary, health score and current widgets."""

from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from finsight import db
from finsight.formatting import format_currency
from finsight.health import calculate_health_score, get_health_status
from finsight.summary import build_summary, category_shares
from finsight.widgets import time_based_widgets


def main(user_id: int, year: int, month: int) -> None:
    user = db.get_user(user_id)
    if user is None:
        print(f"No user with id {user_id}.")
        return

    transactions = db.fetch_month_transactions(user_id, year, month)
    budgets = db.fetch_month_budgets(user_id, year, month)
    summary = build_summary(transactions, budgets)

    print(f"{user.persona_emoji} {user.name or user.email} ({user.persona}) - {year}-{month:02d}")
    print(f"Income:   {format_currency(summary.total_income)}")
    print(f"Expense:  {format_currency(summary.total_expense)}")
    print(f"Balance:  {format_currency(summary.balance)}")
    print(f"Budget:   {format_currency(summary.total_budget)} ({summary.budget_usage:.1f}% used)")
    print(f"Transactions: {summary.transaction_count}")

    if summary.category_breakdown:
        shares = category_shares(summary)
        print("\nBy category:")
        for name, total in summary.category_breakdown.items():
            print(f"  {total.icon} {name}: {format_currency(total.amount)} ({shares[name]:.0f}%)")

    score = calculate_health_score(summary.total_expense, summary.total_budget, user.streak_count)
    status = get_health_status(score)
    print(f"\nHealth: {score} [{status.status}] streak {user.streak_count} days")

    print("\nQuick add:")
    for widget in time_based_widgets():
        print(f"  {widget.icon} {widget.label} {format_currency(widget.amount)} ({widget.category})")


if __name__ == '__main__':
    today = datetime.now()
    parser = argparse.ArgumentParser(description='Show a month summary for one user.')
    parser.add_argument('--user-id', type=int, required=True, help='User to summarise')
    parser.add_argument('--year', type=int, default=today.year, help='Year of the month to show')
    parser.add_argument('--month', type=int, default=today.month, help='Month (1-12) to show')
    args = parser.parse_args()
    main(args.user_id, args.year, args.month)
