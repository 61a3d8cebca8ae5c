import pytest

from finsight.health import base_score, calculate_health_score, get_health_status


def test_no_budget_scores_full_marks():
    assert calculate_health_score(0, 0, 0) == 100
    assert calculate_health_score(5000, 0, 3) == 100


def test_ratio_on_bracket_bound_stays_in_bracket():
    assert calculate_health_score(500, 1000, 0) == 100
    assert calculate_health_score(501, 1000, 0) == 85
    assert calculate_health_score(750, 1000, 0) == 85
    assert calculate_health_score(900, 1000, 0) == 70
    assert calculate_health_score(1200, 1000, 0) == 35


@pytest.mark.parametrize('ratio, expected', [
    (0.0, 100),
    (0.6, 85),
    (0.8, 70),
    (0.95, 55),
    (1.1, 35),
    (1.21, 15),
])
def test_base_score_brackets(ratio, expected):
    assert base_score(ratio) == expected


def test_streak_bonus_is_capped():
    assert calculate_health_score(1000, 1000, 15) == 65
    assert calculate_health_score(1000, 1000, 4) == 59


def test_overspending_hits_floor():
    assert calculate_health_score(2000, 1000, 0) == 15


def test_score_never_exceeds_100():
    assert calculate_health_score(100, 1000, 10) == 100


def test_score_is_an_int():
    assert isinstance(calculate_health_score(333.3, 1000, 2), int)


def test_status_thresholds():
    assert get_health_status(70).status == 'good'
    assert get_health_status(69).status == 'warning'
    assert get_health_status(40).status == 'warning'
    assert get_health_status(39).status == 'critical'


def test_status_colors_are_fixed():
    assert get_health_status(100).color == '#22c55e'
    assert get_health_status(50).color == '#f59e0b'
    assert get_health_status(0).color == '#ef4444'


def test_repeated_calls_agree():
    scores = [calculate_health_score(750, 1000, 3) for _ in range(3)]
    assert scores == [88, 88, 88]
    assert get_health_status(scores[0]) == get_health_status(scores[-1])
    assert get_health_status(88).status == 'good'
