from datetime import date, datetime

import pytest

from finsight import dashboard
from finsight.widgets import select_widgets

NOW = datetime(2024, 5, 20, 8, 30)


def _reply(text):
    def complete(system_prompt, user_text):
        return text
    return complete


def _seed_month(db, user_id):
    food = db.find_category('อาหาร')
    shopping = db.find_category('ช้อปปิ้ง')
    income = db.find_category('รายรับ')
    db.insert_transaction(user_id, 600, 'ชาบู', 'expense', food.id, created_at=datetime(2024, 5, 3, 19, 0))
    db.insert_transaction(user_id, 400, 'รองเท้า', 'expense', shopping.id, created_at=datetime(2024, 5, 10, 13, 0))
    db.insert_transaction(user_id, 25000, 'เงินเดือน', 'income', income.id, created_at=datetime(2024, 5, 1, 9, 0))
    db.insert_transaction(user_id, 999, 'เดือนก่อน', 'expense', food.id, created_at=datetime(2024, 4, 30, 12, 0))
    db.upsert_budget(user_id, 2000, month=5, year=2024)


def test_load_dashboard_payload(temp_db):
    user = temp_db.create_user('Ploy', 'ploy@example.com')
    temp_db.record_login(user.id, date(2024, 5, 19))
    temp_db.record_login(user.id, date(2024, 5, 20))
    _seed_month(temp_db, user.id)

    payload = dashboard.load_dashboard(user.id, now=NOW)

    summary = payload['summary']
    assert summary['totalExpense'] == pytest.approx(1000)
    assert summary['totalIncome'] == pytest.approx(25000)
    assert summary['balance'] == pytest.approx(24000)
    assert summary['totalBudget'] == pytest.approx(2000)
    assert summary['budgetUsage'] == pytest.approx(50)
    assert summary['transactionCount'] == 3
    assert payload['categoryBreakdown'] == {
        'อาหาร': {'amount': 600.0, 'icon': '🍲'},
        'ช้อปปิ้ง': {'amount': 400.0, 'icon': '🛍️'},
    }

    # ratio 0.5 -> 100, streak 2 -> still capped at 100
    assert payload['health']['score'] == 100
    assert payload['health']['status'] == 'good'
    assert payload['widgets'] == [widget.to_dict() for widget in select_widgets(8)]
    assert len(payload['recentTransactions']) == 4
    assert payload['user']['streakCount'] == 2


def test_load_dashboard_persists_health_score(temp_db):
    user = temp_db.create_user('Ploy', 'ploy@example.com')
    _seed_month(temp_db, user.id)
    temp_db.insert_transaction(user.id, 1500, 'ทีวี', 'expense', None, created_at=datetime(2024, 5, 15))

    payload = dashboard.load_dashboard(user.id, now=NOW)

    # 2500 / 2000 = 1.25 -> 15, no streak
    assert payload['health']['score'] == 15
    assert payload['health']['status'] == 'critical'
    assert temp_db.get_user(user.id).health_score == 15


def test_load_dashboard_unknown_user(temp_db):
    with pytest.raises(ValueError):
        dashboard.load_dashboard(42, now=NOW)


def test_refresh_whisper_stores_persona(temp_db):
    user = temp_db.create_user('Ploy', 'ploy@example.com')
    _seed_month(temp_db, user.id)
    captured = {}

    def complete(system_prompt, user_text):
        captured['text'] = user_text
        return (
            '```json\n{"persona_name": "ราชาชาบู", "persona_emoji": "🍲", "whisper_message": "ชาบูอีกแล้ว",'
            ' "health_status": "good", "leak_insight": "ค่าชาบูซื้อหนังสือได้ 3 เล่ม"}\n```'
        )

    result = dashboard.refresh_whisper(user.id, now=NOW, complete=complete)

    assert result['persona_name'] == 'ราชาชาบู'
    assert result['summary']['totalExpense'] == pytest.approx(1000)
    assert result['summary']['transactionCount'] == 3
    assert result['summary']['topCategories']['อาหาร'] == pytest.approx(600)
    assert 'อาหาร: ฿600' in captured['text']
    refreshed = temp_db.get_user(user.id)
    assert (refreshed.persona, refreshed.persona_emoji) == ('ราชาชาบู', '🍲')


def test_refresh_whisper_falls_back(temp_db):
    user = temp_db.create_user('Ploy', 'ploy@example.com')
    result = dashboard.refresh_whisper(user.id, now=NOW, complete=_reply('not json'))
    assert result['persona_name'] == 'ผู้เริ่มต้น'
    assert result['summary']['transactionCount'] == 0


def test_quick_add_text_creates_transaction(temp_db):
    user = temp_db.create_user('Ploy', 'ploy@example.com')
    raw = '{"item": "ข้าวมันไก่", "amount": 50, "type": "expense", "category": "อาหาร"}'

    result = dashboard.quick_add_text(user.id, 'ข้าวมันไก่ 50', complete=_reply(raw))

    assert result['transaction']['description'] == 'ข้าวมันไก่'
    assert result['transaction']['category']['name'] == 'อาหาร'
    assert result['transaction']['isWidget'] is False
    assert result['message'] == 'บันทึก "ข้าวมันไก่" ฿50 สำเร็จ!'


@pytest.mark.parametrize('raw', [
    '{"error": "Invalid input"}',
    '{"item": "x", "amount": 5, "type": "expense", "category": "ไม่มี"}',
    '{"item": "x", "amount": NaN, "type": "expense", "category": "อาหาร"}',
    '{"item": "x", "amount": Infinity, "type": "expense", "category": "อาหาร"}',
])
def test_quick_add_text_rejects_unusable_replies(temp_db, raw):
    user = temp_db.create_user('Ploy', 'ploy@example.com')
    with pytest.raises(ValueError):
        dashboard.quick_add_text(user.id, 'hello', complete=_reply(raw))
    assert temp_db.fetch_transactions(user.id).empty


def test_quick_add_text_requires_text(temp_db):
    user = temp_db.create_user('Ploy', 'ploy@example.com')
    with pytest.raises(ValueError):
        dashboard.quick_add_text(user.id, '   ')


def test_quick_add_widget(temp_db):
    user = temp_db.create_user('Ploy', 'ploy@example.com')
    coffee = select_widgets(8)[0]

    preset = dashboard.quick_add_widget(user.id, coffee)
    edited = dashboard.quick_add_widget(user.id, coffee, amount=75)

    assert preset['amount'] == 60
    assert preset['isWidget'] is True
    assert preset['type'] == 'expense'
    assert edited['amount'] == 75
    with pytest.raises(ValueError):
        dashboard.quick_add_widget(user.id, coffee, amount=0)
