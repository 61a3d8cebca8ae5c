"""Time-of-day quick-add widgets and greetings."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from .models import Widget

MORNING_WIDGETS = (
    Widget('☕', 'กาแฟ', 60, 'อาหาร'),
    Widget('🚇', 'BTS', 45, 'เดินทาง'),
    Widget('🥐', 'ขนมปัง', 35, 'อาหาร'),
    Widget('🏪', 'เซเว่น', 50, 'อาหาร'),
)
LUNCH_WIDGETS = (
    Widget('🍱', 'ข้าวกล่อง', 60, 'อาหาร'),
    Widget('🍜', 'ก๋วยเตี๋ยว', 50, 'อาหาร'),
    Widget('🧋', 'ชานมไข่มุก', 55, 'อาหาร'),
    Widget('🥤', 'น้ำผลไม้', 35, 'อาหาร'),
)
AFTERNOON_WIDGETS = (
    Widget('🧋', 'ชานมไข่มุก', 55, 'อาหาร'),
    Widget('🍩', 'ขนม', 45, 'อาหาร'),
    Widget('☕', 'กาแฟบ่าย', 60, 'อาหาร'),
    Widget('🚇', 'BTS', 45, 'เดินทาง'),
)
EVENING_WIDGETS = (
    Widget('🍲', 'ข้าวเย็น', 80, 'อาหาร'),
    Widget('🚇', 'BTS กลับบ้าน', 45, 'เดินทาง'),
    Widget('🛒', 'ซื้อของ', 200, 'ช้อปปิ้ง'),
    Widget('🍺', 'สังสรรค์', 300, 'บันเทิง'),
)
NIGHT_WIDGETS = (
    Widget('🌙', 'ของกินดึก', 60, 'อาหาร'),
    Widget('🚕', 'แท็กซี่', 100, 'เดินทาง'),
    Widget('🎬', 'Netflix', 0, 'บันเทิง'),
    Widget('🛒', 'ช้อปออนไลน์', 300, 'ช้อปปิ้ง'),
)

# (start hour inclusive, end hour exclusive, widgets); anything else is night
WIDGET_SCHEDULE = (
    (6, 10, MORNING_WIDGETS),
    (10, 14, LUNCH_WIDGETS),
    (14, 17, AFTERNOON_WIDGETS),
    (17, 21, EVENING_WIDGETS),
)

# (end hour exclusive, greeting)
GREETINGS = (
    (6, 'ดึกแล้วนะ 🌙'),
    (12, 'สวัสดีตอนเช้า ☀️'),
    (17, 'สวัสดีตอนบ่าย 🌤️'),
    (21, 'สวัสดีตอนเย็น 🌅'),
)
LATE_GREETING = 'สวัสดีตอนค่ำ 🌙'


def _check_hour(hour: int) -> int:
    if not 0 <= hour <= 23:
        raise ValueError(f"hour must be between 0 and 23, got {hour}")
    return hour


def select_widgets(hour: int) -> List[Widget]:
    """Return the four quick-add widgets offered at ``hour``.

    Example:
        >>> [w.label for w in select_widgets(8)][:2]
        ['กาแฟ', 'BTS']
    """
    _check_hour(hour)
    for start, end, widgets in WIDGET_SCHEDULE:
        if start <= hour < end:
            return list(widgets)
    return list(NIGHT_WIDGETS)


def time_based_widgets(now: Optional[datetime] = None) -> List[Widget]:
    now = now or datetime.now()
    return select_widgets(now.hour)


def greeting(hour: int) -> str:
    _check_hour(hour)
    for end, text in GREETINGS:
        if hour < end:
            return text
    return LATE_GREETING
