"""Natural-language quick add and whisper insights.

Both features send a short prompt to a chat-completion model and expect a
bare JSON object back.  The model is reached through a ``complete`` callable
``(system_prompt, user_text) -> str``; the default one uses the OpenAI client
configured in :mod:`finsight.config`.  Any failure (network, bad JSON,
missing keys) prints the error and falls back to a fixed answer so callers
never have to handle service errors themselves.
"""

from __future__ import annotations

import json
import math
import re
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from openai import OpenAI

from . import config
from .aggregation import Aggregate, top_categories
from .formatting import format_currency
from .health import CRITICAL, GOOD, WARNING
from .models import CATEGORY_NAMES, OTHER_CATEGORY_NAME, TRANSACTION_TYPES, User

CompleteFn = Callable[[str, str], str]

PARSE_SYSTEM_PROMPT = f"""คุณคือระบบหลังบ้านของแอปบัญชีรายรับรายจ่าย ผู้ใช้จะส่งข้อความภาษาไทยเกี่ยวกับการใช้เงินมา
ให้สกัดข้อมูลแล้วตอบกลับเป็น JSON เท่านั้น ห้ามมีคำอธิบายหรือ Markdown

{{
  "item": "ชื่อรายการ (String)",
  "amount": "จำนวนเงิน (Number)",
  "type": "expense หรือ income",
  "category": "เลือกจาก: {', '.join(CATEGORY_NAMES)}"
}}

ถ้าข้อความไม่เกี่ยวกับการเงิน ให้ตอบ {{"error": "Invalid input"}}"""

WHISPER_SYSTEM_PROMPT = """คุณคือ 'FinSight' ผู้ช่วยการเงินส่วนตัวที่เป็นกันเองเหมือนเพื่อนสนิท
คุณจะได้รับสรุปการใช้เงินของผู้ใช้ 1 คน ให้วิเคราะห์แล้วตอบกลับเป็น JSON เท่านั้น

{
  "persona_name": "ฉายาสั้นๆ ที่สะท้อนพฤติกรรมการใช้เงิน",
  "persona_emoji": "อิโมจิ 1 ตัวที่เข้ากับฉายา",
  "whisper_message": "ข้อความกระซิบ 1-2 ประโยค เตือน ชม หรือแนะนำแบบเพื่อนเตือนเพื่อน",
  "health_status": "good หรือ warning หรือ critical",
  "leak_insight": "1 ประโยค เปรียบเทียบค่าใช้จ่ายที่ไม่จำเป็นกับสิ่งที่ซื้อได้แทน"
}"""

HEALTH_STATUSES = {GOOD.status, WARNING.status, CRITICAL.status}

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*")


@dataclass
class ParsedTransaction:
    item: str
    amount: float
    type: str
    category: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.error is None:
            data.pop('error')
        return data


@dataclass
class WhisperInsight:
    persona_name: str
    persona_emoji: str
    whisper_message: str
    health_status: str
    leak_insight: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def parse_fallback(error: str = 'AI parsing failed') -> ParsedTransaction:
    return ParsedTransaction(item='', amount=0.0, type='expense', category=OTHER_CATEGORY_NAME, error=error)


WHISPER_FALLBACK = WhisperInsight(
    persona_name='ผู้เริ่มต้น',
    persona_emoji='🌱',
    whisper_message='ยินดีต้อนรับ! เริ่มจดบัญชีกันเถอะ',
    health_status='good',
    leak_insight='เริ่มจดบัญชีเพื่อค้นหารอยรั่วของคุณ',
)


def clean_json_response(text: str) -> str:
    """Strip markdown code fences the model sometimes wraps around JSON.

    Example:
        >>> clean_json_response('```json\\n{"a": 1}\\n```')
        '{"a": 1}'
    """
    return _FENCE_PATTERN.sub('', text or '').strip()


def openai_complete(system_prompt: str, user_text: str) -> str:
    """Send one system+user exchange to the configured chat model."""
    if not config.OPENAI_API_KEY:
        raise RuntimeError("OPENAI_API_KEY is not set")

    client = OpenAI(api_key=config.OPENAI_API_KEY, timeout=config.REQUEST_TIMEOUT)
    response = client.chat.completions.create(
        model=config.MODEL,
        messages=[
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_text},
        ],
        temperature=0.3,
    )
    return response.choices[0].message.content or ''


def _request_json(system_prompt: str, user_text: str, complete: Optional[CompleteFn]) -> Dict[str, Any]:
    complete = complete or openai_complete
    raw = complete(system_prompt, user_text)
    data = json.loads(clean_json_response(raw))
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_transaction_text(text: str, complete: Optional[CompleteFn] = None) -> ParsedTransaction:
    """Extract ``{item, amount, type, category}`` from free text.

    The returned object carries ``error`` when the model rejected the text or
    the call failed.
    """
    try:
        data = _request_json(PARSE_SYSTEM_PROMPT, text, complete)
        if data.get('error'):
            return parse_fallback(str(data['error']))

        txn_type = str(data['type']).strip().lower()
        if txn_type not in TRANSACTION_TYPES:
            raise ValueError(f"Unexpected transaction type {txn_type!r}")
        amount = float(data['amount'])
        if not math.isfinite(amount) or amount < 0:
            raise ValueError(f"Amount must be finite and non-negative, got {amount}")

        return ParsedTransaction(
            item=str(data['item']).strip(),
            amount=amount,
            type=txn_type,
            category=str(data.get('category') or OTHER_CATEGORY_NAME).strip(),
        )
    except Exception as e:
        print(f"Transaction parsing failed, using fallback: {e}")
        return parse_fallback()


def whisper_insight(summary_text: str, complete: Optional[CompleteFn] = None) -> WhisperInsight:
    """Ask for the persona, whisper message and leak insight."""
    try:
        data = _request_json(WHISPER_SYSTEM_PROMPT, summary_text, complete)
        status = str(data['health_status']).strip().lower()
        if status not in HEALTH_STATUSES:
            raise ValueError(f"Unexpected health status {status!r}")
        return WhisperInsight(
            persona_name=str(data['persona_name']),
            persona_emoji=str(data['persona_emoji']),
            whisper_message=str(data['whisper_message']),
            health_status=status,
            leak_insight=str(data['leak_insight']),
        )
    except Exception as e:
        print(f"Whisper insight failed, using fallback: {e}")
        return WHISPER_FALLBACK


def build_whisper_prompt(user: User, totals: Aggregate, now: Optional[datetime] = None) -> str:
    """Render the month summary that is sent to the whisper model."""
    now = now or datetime.now()
    top = ", ".join(
        f"{name}: {format_currency(amount)}" for name, amount in top_categories(totals.category_breakdown)
    )
    lines = [
        "ข้อมูลผู้ใช้:",
        f"- ชื่อ: {user.name or 'ไม่ระบุ'}",
        f"- จดบัญชีต่อเนื่อง: {user.streak_count} วัน",
        f"- รายจ่ายเดือนนี้: {format_currency(totals.total_expense)}",
        f"- รายรับเดือนนี้: {format_currency(totals.total_income)}",
        f"- จำนวนรายการ: {totals.transaction_count} รายการ",
        f"- หมวดหมู่หลัก: {top or 'ยังไม่มีข้อมูล'}",
        f"- วันที่ปัจจุบัน: {now.date().isoformat()}",
    ]
    return "\n".join(lines)
