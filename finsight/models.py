"""Record types shared by the summary engine and the storage layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional

TRANSACTION_TYPES = ('income', 'expense')

UNCATEGORIZED_NAME = 'Uncategorized'
UNCATEGORIZED_ICON = '📌'

# Seeded once at database initialisation; shared by every user.
DEFAULT_CATEGORIES = [
    ('อาหาร', '🍲'),
    ('เดินทาง', '🚗'),
    ('ช้อปปิ้ง', '🛍️'),
    ('บันเทิง', '🎬'),
    ('บิล', '📱'),
    ('สุขภาพ', '💊'),
    ('รายรับ', '💰'),
    ('อื่นๆ', '📌'),
]
CATEGORY_NAMES = [name for name, _ in DEFAULT_CATEGORIES]
OTHER_CATEGORY_NAME = 'อื่นๆ'

DEFAULT_PERSONA = 'ผู้เริ่มต้น'
DEFAULT_PERSONA_EMOJI = '🌱'


@dataclass(frozen=True)
class Category:
    id: Optional[int]
    name: str
    icon: str


@dataclass
class Transaction:
    amount: float
    type: str
    created_at: datetime
    description: str = ''
    category: Optional[Category] = None
    category_id: Optional[int] = None
    id: Optional[int] = None
    user_id: Optional[int] = None
    tags: Optional[str] = None
    is_widget: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'userId': self.user_id,
            'amount': self.amount,
            'type': self.type,
            'categoryId': self.category_id,
            'category': (
                {'id': self.category.id, 'name': self.category.name, 'icon': self.category.icon}
                if self.category is not None
                else None
            ),
            'description': self.description,
            'tags': self.tags,
            'createdAt': self.created_at.isoformat(),
            'isWidget': self.is_widget,
        }


@dataclass
class Budget:
    amount: float
    month: int
    year: int
    category_id: Optional[int] = None
    user_id: Optional[int] = None
    id: Optional[int] = None


@dataclass
class User:
    id: int
    name: Optional[str]
    email: str
    streak_count: int = 0
    health_score: int = 100
    persona: str = DEFAULT_PERSONA
    persona_emoji: str = DEFAULT_PERSONA_EMOJI
    last_login_date: Optional[date] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'email': self.email,
            'streakCount': self.streak_count,
            'healthScore': self.health_score,
            'persona': self.persona,
            'personaEmoji': self.persona_emoji,
        }


@dataclass(frozen=True)
class CategoryTotal:
    amount: float
    icon: str


@dataclass
class Summary:
    """Month summary derived from transactions and budgets."""

    total_expense: float
    total_income: float
    balance: float
    total_budget: float
    budget_usage: float
    transaction_count: int
    category_breakdown: Dict[str, CategoryTotal] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'totalExpense': self.total_expense,
            'totalIncome': self.total_income,
            'balance': self.balance,
            'totalBudget': self.total_budget,
            'budgetUsage': self.budget_usage,
            'transactionCount': self.transaction_count,
            'categoryBreakdown': {
                name: {'amount': total.amount, 'icon': total.icon}
                for name, total in self.category_breakdown.items()
            },
        }


@dataclass(frozen=True)
class Widget:
    icon: str
    label: str
    amount: int
    category: str

    def to_dict(self) -> Dict[str, Any]:
        return {'icon': self.icon, 'label': self.label, 'amount': self.amount, 'category': self.category}
