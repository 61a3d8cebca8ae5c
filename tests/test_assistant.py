from datetime import datetime

import pytest

from finsight import assistant
from finsight.aggregation import aggregate
from finsight.models import Category, Transaction, User


def _reply(text):
    def complete(system_prompt, user_text):
        return text
    return complete


def _boom(system_prompt, user_text):
    raise ConnectionError("service unavailable")


def test_clean_json_response_strips_fences():
    assert assistant.clean_json_response('```json\n{"a": 1}\n```') == '{"a": 1}'
    assert assistant.clean_json_response('{"a": 1}') == '{"a": 1}'


def test_parse_transaction_text_reads_fenced_json():
    raw = '```json\n{"item": "ข้าวมันไก่", "amount": 50, "type": "expense", "category": "อาหาร"}\n```'
    parsed = assistant.parse_transaction_text('ข้าวมันไก่ 50', complete=_reply(raw))
    assert parsed.error is None
    assert parsed.item == 'ข้าวมันไก่'
    assert parsed.amount == 50.0
    assert parsed.type == 'expense'
    assert parsed.category == 'อาหาร'


def test_parse_transaction_text_passes_model_error():
    parsed = assistant.parse_transaction_text('hello', complete=_reply('{"error": "Invalid input"}'))
    assert parsed.error == 'Invalid input'


def test_parse_transaction_text_falls_back_on_failure(capsys):
    parsed = assistant.parse_transaction_text('ข้าว 50', complete=_boom)
    assert parsed.error == 'AI parsing failed'
    assert parsed.amount == 0
    assert parsed.category == 'อื่นๆ'
    assert 'service unavailable' in capsys.readouterr().out


def test_parse_transaction_text_rejects_bad_type():
    raw = '{"item": "x", "amount": 5, "type": "transfer", "category": "อื่นๆ"}'
    parsed = assistant.parse_transaction_text('x 5', complete=_reply(raw))
    assert parsed.error == 'AI parsing failed'


@pytest.mark.parametrize('amount', ['NaN', 'Infinity', '-Infinity', '-5'])
def test_parse_transaction_text_rejects_unusable_amount(amount):
    raw = '{"item": "x", "amount": ' + amount + ', "type": "expense", "category": "อาหาร"}'
    parsed = assistant.parse_transaction_text('x', complete=_reply(raw))
    assert parsed.error == 'AI parsing failed'
    assert parsed.amount == 0


def test_whisper_insight_parses_reply():
    raw = (
        '{"persona_name": "ราชาชาบู", "persona_emoji": "🍲", "whisper_message": "ใจเย็นๆ",'
        ' "health_status": "warning", "leak_insight": "ค่าชาบูซื้อรองเท้าได้"}'
    )
    insight = assistant.whisper_insight('summary', complete=_reply(raw))
    assert insight.persona_name == 'ราชาชาบู'
    assert insight.health_status == 'warning'


def test_whisper_insight_fallback_on_missing_keys():
    insight = assistant.whisper_insight('summary', complete=_reply('{"persona_name": "x"}'))
    assert insight == assistant.WHISPER_FALLBACK


def test_whisper_insight_fallback_on_error():
    assert assistant.whisper_insight('summary', complete=_boom) == assistant.WHISPER_FALLBACK


def test_default_completion_requires_api_key(monkeypatch):
    monkeypatch.setattr(assistant.config, 'OPENAI_API_KEY', '')
    insight = assistant.whisper_insight('summary')
    assert insight == assistant.WHISPER_FALLBACK


def test_build_whisper_prompt_lists_top_categories():
    food = Category(id=1, name='อาหาร', icon='🍲')
    fun = Category(id=4, name='บันเทิง', icon='🎬')
    rows = [
        Transaction(amount=300, type='expense', created_at=datetime(2024, 5, 1), category=fun),
        Transaction(amount=1200, type='expense', created_at=datetime(2024, 5, 2), category=food),
        Transaction(amount=20000, type='income', created_at=datetime(2024, 5, 3)),
    ]
    user = User(id=1, name='Ploy', email='ploy@example.com', streak_count=6)
    text = assistant.build_whisper_prompt(user, aggregate(rows), now=datetime(2024, 5, 20))

    assert 'Ploy' in text
    assert '6 วัน' in text
    assert 'อาหาร: ฿1,200, บันเทิง: ฿300' in text
    assert '฿20,000' in text
    assert '3 รายการ' in text
    assert '2024-05-20' in text


def test_build_whisper_prompt_without_data():
    user = User(id=1, name=None, email='a@example.com')
    text = assistant.build_whisper_prompt(user, aggregate([]), now=datetime(2024, 5, 20))
    assert 'ไม่ระบุ' in text
    assert 'ยังไม่มีข้อมูล' in text
