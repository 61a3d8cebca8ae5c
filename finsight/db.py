from __future__ import annotations

import math
import sqlite3
from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator, List, Optional

import pandas as pd

from .aggregation import month_bounds
from .config import DB_PATH, RECENT_TRANSACTIONS_LIMIT
from .models import (
    DEFAULT_CATEGORIES,
    DEFAULT_PERSONA,
    DEFAULT_PERSONA_EMOJI,
    TRANSACTION_TYPES,
    Budget,
    Category,
    Transaction,
    User,
)
from .streak import next_streak

DB_PATH_STR = str(DB_PATH)

SCHEMA_SQL = """
PRAGMA journal_mode=WAL;
PRAGMA synchronous=NORMAL;

CREATE TABLE IF NOT EXISTS categories (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    icon TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    email TEXT NOT NULL UNIQUE,
    streak_count INTEGER NOT NULL DEFAULT 0,
    health_score INTEGER NOT NULL DEFAULT 100,
    persona TEXT NOT NULL DEFAULT '{persona}',
    persona_emoji TEXT NOT NULL DEFAULT '{persona_emoji}',
    last_login_date TEXT,
    created_at TEXT
);

CREATE TABLE IF NOT EXISTS transactions (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    amount REAL NOT NULL,
    type TEXT NOT NULL CHECK (type IN ('income', 'expense')),
    category_id INTEGER REFERENCES categories(id),
    description TEXT,
    tags TEXT,
    created_at TEXT NOT NULL,
    is_widget INTEGER NOT NULL DEFAULT 0
);

CREATE INDEX IF NOT EXISTS ix_txn_user_created ON transactions (user_id, created_at);

CREATE TABLE IF NOT EXISTS budgets (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
    category_id INTEGER REFERENCES categories(id),
    month INTEGER NOT NULL CHECK (month BETWEEN 1 AND 12),
    year INTEGER NOT NULL,
    amount REAL NOT NULL
);

-- One budget per (user, category, month); NULL category is the overall budget.
CREATE UNIQUE INDEX IF NOT EXISTS ux_budget_period
    ON budgets (user_id, IFNULL(category_id, 0), month, year);
""".format(persona=DEFAULT_PERSONA, persona_emoji=DEFAULT_PERSONA_EMOJI)

TRANSACTION_SELECT = (
    "SELECT t.id, t.user_id, t.created_at AS 'Created At', t.description AS 'Description', "
    "t.type AS 'Type', t.amount AS 'Amount', t.category_id AS 'Category Id', "
    "c.name AS 'Category', c.icon AS 'Icon', t.tags AS 'Tags', t.is_widget AS 'Is Widget' "
    "FROM transactions t LEFT JOIN categories c ON c.id = t.category_id"
)

USER_SELECT = (
    "SELECT id, name, email, streak_count, health_score, persona, persona_emoji, last_login_date "
    "FROM users"
)


def _ensure_dirs() -> None:
    Path(DB_PATH_STR).parent.mkdir(parents=True, exist_ok=True)


@contextmanager
def connect() -> Iterator[sqlite3.Connection]:
    _ensure_dirs()
    conn = sqlite3.connect(DB_PATH_STR)
    conn.execute("PRAGMA foreign_keys=ON")
    try:
        yield conn
    finally:
        conn.close()


def init_db() -> None:
    with connect() as conn:
        conn.executescript(SCHEMA_SQL)
        seed_categories(conn)
        conn.commit()


def seed_categories(conn: sqlite3.Connection) -> int:
    """Insert any default category that is missing. Returns the number added."""
    before = conn.total_changes
    conn.executemany(
        "INSERT OR IGNORE INTO categories (name, icon) VALUES (?, ?)",
        DEFAULT_CATEGORIES,
    )
    return conn.total_changes - before


def _to_iso_timestamp(value: datetime) -> str:
    return value.replace(microsecond=0).isoformat()


def _optional_int(value: Any) -> Optional[int]:
    if value is None or pd.isna(value):
        return None
    return int(value)


def _prepare_transaction_frame(df: pd.DataFrame) -> pd.DataFrame:
    if not df.empty:
        df['Created At'] = pd.to_datetime(df['Created At'])
        df['Is Widget'] = df['Is Widget'].astype(bool)
    return df


def frame_to_transactions(df: pd.DataFrame) -> List[Transaction]:
    """Convert a frame from :func:`fetch_transactions` back into records."""
    records: List[Transaction] = []
    for row in df.to_dict('records'):
        category_id = _optional_int(row.get('Category Id'))
        category = None
        if category_id is not None and isinstance(row.get('Category'), str):
            category = Category(id=category_id, name=row['Category'], icon=row.get('Icon') or '')
        created_at = row['Created At']
        if hasattr(created_at, 'to_pydatetime'):
            created_at = created_at.to_pydatetime()
        tags = row.get('Tags')
        records.append(Transaction(
            id=_optional_int(row.get('id')),
            user_id=_optional_int(row.get('user_id')),
            amount=float(row['Amount']),
            type=row['Type'],
            created_at=created_at,
            description=row.get('Description') or '',
            category=category,
            category_id=category_id,
            tags=tags if isinstance(tags, str) else None,
            is_widget=bool(row.get('Is Widget')),
        ))
    return records


# -----------------------------
# Categories
# -----------------------------
def fetch_categories() -> List[Category]:
    with connect() as conn:
        rows = conn.execute("SELECT id, name, icon FROM categories ORDER BY id").fetchall()
    return [Category(id=r[0], name=r[1], icon=r[2]) for r in rows]


def find_category(name: str) -> Optional[Category]:
    with connect() as conn:
        row = conn.execute("SELECT id, name, icon FROM categories WHERE name = ?", (name,)).fetchone()
    if row is None:
        return None
    return Category(id=row[0], name=row[1], icon=row[2])


# -----------------------------
# Users
# -----------------------------
def _row_to_user(row: tuple) -> User:
    last_login = row[7]
    return User(
        id=row[0],
        name=row[1],
        email=row[2],
        streak_count=row[3],
        health_score=row[4],
        persona=row[5],
        persona_emoji=row[6],
        last_login_date=date.fromisoformat(last_login) if last_login else None,
    )


def create_user(name: Optional[str], email: str) -> User:
    with connect() as conn:
        cursor = conn.execute(
            "INSERT INTO users (name, email, created_at) VALUES (?, ?, ?)",
            (name, email.strip().lower(), _to_iso_timestamp(datetime.now())),
        )
        conn.commit()
        user_id = cursor.lastrowid
    return get_user(user_id)


def get_user(user_id: int) -> Optional[User]:
    with connect() as conn:
        row = conn.execute(f"{USER_SELECT} WHERE id = ?", (user_id,)).fetchone()
    return _row_to_user(row) if row else None


def record_login(user_id: int, today: Optional[date] = None) -> User:
    """Advance the user's daily streak and stamp the login date."""
    user = get_user(user_id)
    if user is None:
        raise ValueError(f"Unknown user id {user_id}")

    today = today or date.today()
    streak = next_streak(user.streak_count, user.last_login_date, today)
    with connect() as conn:
        conn.execute(
            "UPDATE users SET streak_count = ?, last_login_date = ? WHERE id = ?",
            (streak, today.isoformat(), user_id),
        )
        conn.commit()
    return get_user(user_id)


def update_persona(user_id: int, persona: str, persona_emoji: str) -> bool:
    with connect() as conn:
        cursor = conn.execute(
            "UPDATE users SET persona = ?, persona_emoji = ? WHERE id = ?",
            (persona, persona_emoji, user_id),
        )
        conn.commit()
        return cursor.rowcount > 0


def update_health_score(user_id: int, score: int) -> bool:
    with connect() as conn:
        cursor = conn.execute(
            "UPDATE users SET health_score = ? WHERE id = ?",
            (int(score), user_id),
        )
        conn.commit()
        return cursor.rowcount > 0


# -----------------------------
# Transactions
# -----------------------------
def insert_transaction(
    user_id: int,
    amount: float,
    description: str,
    txn_type: str,
    category_id: Optional[int],
    tags: Optional[str] = None,
    is_widget: bool = False,
    created_at: Optional[datetime] = None,
) -> Transaction:
    if txn_type not in TRANSACTION_TYPES:
        raise ValueError(f"Transaction type must be one of {TRANSACTION_TYPES}, got {txn_type!r}")
    if not math.isfinite(amount) or amount < 0:
        raise ValueError(f"Transaction amount must be a finite, non-negative number, got {amount}")

    created_at = created_at or datetime.now()
    with connect() as conn:
        cursor = conn.execute(
            "INSERT INTO transactions (user_id, amount, type, category_id, description, tags, created_at, is_widget) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (user_id, float(amount), txn_type, category_id, description, tags,
             _to_iso_timestamp(created_at), int(bool(is_widget))),
        )
        conn.commit()
        transaction_id = cursor.lastrowid
    return get_transaction(transaction_id)


def get_transaction(transaction_id: int) -> Optional[Transaction]:
    with connect() as conn:
        df = pd.read_sql_query(f"{TRANSACTION_SELECT} WHERE t.id = ?", conn, params=[transaction_id])
    records = frame_to_transactions(_prepare_transaction_frame(df))
    return records[0] if records else None


def fetch_transactions(
    user_id: int,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    txn_type: Optional[str] = None,
    category_id: Optional[int] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> pd.DataFrame:
    where: List[str] = ["t.user_id = ?"]
    params: List[Any] = [user_id]

    if start:
        where.append("t.created_at >= ?")
        params.append(_to_iso_timestamp(start))
    if end:
        where.append("t.created_at <= ?")
        params.append(_to_iso_timestamp(end))
    if txn_type:
        where.append("t.type = ?")
        params.append(txn_type)
    if category_id is not None:
        where.append("t.category_id = ?")
        params.append(category_id)

    sql = f"{TRANSACTION_SELECT} WHERE " + " AND ".join(where)
    sql += " ORDER BY t.created_at DESC, t.id DESC"
    if limit is not None:
        sql += " LIMIT ? OFFSET ?"
        params.extend([int(limit), int(offset)])

    with connect() as conn:
        df = pd.read_sql_query(sql, conn, params=params)
    return _prepare_transaction_frame(df)


def fetch_month_transactions(user_id: int, year: int, month: int) -> pd.DataFrame:
    start, end = month_bounds(year, month)
    return fetch_transactions(user_id, start=start, end=end)


def fetch_recent_transactions(user_id: int, limit: int = RECENT_TRANSACTIONS_LIMIT) -> pd.DataFrame:
    return fetch_transactions(user_id, limit=limit)


def update_transaction(
    transaction_id: int,
    user_id: int,
    description: Optional[str] = None,
    amount: Optional[float] = None,
    category_id: Optional[int] = None,
    tags: Optional[str] = None,
) -> bool:
    """Update the editable fields of a transaction owned by ``user_id``.

    Returns True if a row was updated.
    """
    updates = []
    params: List[Any] = []

    if description is not None:
        updates.append("description = ?")
        params.append(description)
    if amount is not None:
        if not math.isfinite(amount) or amount < 0:
            raise ValueError(f"Transaction amount must be a finite, non-negative number, got {amount}")
        updates.append("amount = ?")
        params.append(float(amount))
    if category_id is not None:
        updates.append("category_id = ?")
        params.append(category_id)
    if tags is not None:
        updates.append("tags = ?")
        params.append(tags)

    if not updates:
        return False

    params.extend([transaction_id, user_id])
    sql = f"UPDATE transactions SET {', '.join(updates)} WHERE id = ? AND user_id = ?"

    with connect() as conn:
        cursor = conn.execute(sql, params)
        conn.commit()
        return cursor.rowcount > 0


def delete_transaction(transaction_id: int, user_id: int) -> bool:
    with connect() as conn:
        cursor = conn.execute(
            "DELETE FROM transactions WHERE id = ? AND user_id = ?",
            (transaction_id, user_id),
        )
        conn.commit()
        return cursor.rowcount > 0


# -----------------------------
# Budgets
# -----------------------------
def upsert_budget(
    user_id: int,
    amount: float,
    category_id: Optional[int] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> Budget:
    """Create or replace the budget for (user, category, month, year).

    A ``category_id`` of None is the user's overall budget for the month.
    """
    today = date.today()
    month = month or today.month
    year = year or today.year

    if not math.isfinite(amount) or amount < 0:
        raise ValueError(f"Budget amount must be a finite, non-negative number, got {amount}")

    with connect() as conn:
        conn.execute(
            "INSERT INTO budgets (user_id, category_id, month, year, amount) VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT (user_id, IFNULL(category_id, 0), month, year) DO UPDATE SET amount = excluded.amount",
            (user_id, category_id, month, year, float(amount)),
        )
        # lastrowid is not reliable when the conflict branch ran
        budget_id = conn.execute(
            "SELECT id FROM budgets WHERE user_id = ? AND category_id IS ? AND month = ? AND year = ?",
            (user_id, category_id, month, year),
        ).fetchone()[0]
        conn.commit()

    return Budget(
        id=budget_id,
        user_id=user_id,
        category_id=category_id,
        month=month,
        year=year,
        amount=float(amount),
    )


def fetch_month_budgets(user_id: int, year: int, month: int) -> pd.DataFrame:
    sql = (
        "SELECT id, user_id, category_id AS 'Category Id', month AS 'Month', year AS 'Year', "
        "amount AS 'Amount' FROM budgets WHERE user_id = ? AND month = ? AND year = ? ORDER BY id"
    )
    with connect() as conn:
        return pd.read_sql_query(sql, conn, params=[user_id, month, year])
