import datetime
from types import SimpleNamespace

from src.services.badges import BADGE_CATALOG, badge_definitions, evaluate_badges, numeric_score


WEDNESDAY = datetime.date(2025, 3, 5)
SATURDAY = datetime.date(2025, 3, 8)


def _record(type="aptitude", score=None, days_ago=0, today=WEDNESDAY, **ref):
    moment = datetime.datetime.combine(today, datetime.time(12, 0), tzinfo=datetime.timezone.utc)
    return SimpleNamespace(
        type=type,
        score_rating=score,
        timestamp=moment - datetime.timedelta(days=days_ago),
        data_reference=ref,
    )


def test_catalog_has_unique_ids():
    ids = [b.id for b in BADGE_CATALOG]
    assert len(ids) == 19
    assert len(set(ids)) == len(ids)


def test_no_history_no_badges():
    assert evaluate_badges([], streak=0, revision_count=0, today=WEDNESDAY) == set()


def test_streak_badges():
    earned = evaluate_badges([], streak=30, revision_count=0, today=WEDNESDAY)
    assert {"streak-7", "streak-30"} <= earned


def test_ten_aptitude_quizzes_earn_explorer_only():
    history = [_record(score=50.0, topic="Logical Reasoning") for _ in range(10)]
    earned = evaluate_badges(history, streak=1, revision_count=0, today=WEDNESDAY)
    assert "apti-10" in earned
    assert "apti-50" not in earned
    assert "logical-master" not in earned


def test_topic_master_needs_more_than_ninety():
    history = [
        _record(score=90.0, topic="Verbal Ability"),
        _record(score=91.0, topic="Quantitative Aptitude"),
    ]
    earned = evaluate_badges(history, streak=1, revision_count=0, today=WEDNESDAY)
    assert "quant-master" in earned
    assert "verbal-master" not in earned


def test_perfect_score_needs_ten_questions():
    short = evaluate_badges([_record(score=100.0, questions_answered=5)], 1, 0, WEDNESDAY)
    full = evaluate_badges([_record(score=100.0, questions_answered=10)], 1, 0, WEDNESDAY)
    assert "apti-perfect" not in short
    assert "apti-perfect" in full


def test_diagnostic_badges():
    earned = evaluate_badges([_record(score=80.0, quiz_type="Diagnostic")], 1, 0, WEDNESDAY)
    assert {"diagnostic-complete", "diagnostic-high-potential"} <= earned


def test_recommendation_strings_do_not_count_as_scores():
    assert numeric_score("Strong Hire") is None
    assert numeric_score(True) is None
    assert numeric_score(75) == 75.0
    history = [_record(type="mock", score="Strong Hire") for _ in range(3)]
    earned = evaluate_badges(history, 1, 0, WEDNESDAY)
    assert earned == {"mock-star"}


def test_weekend_warrior_requires_newest_record_today_on_weekend():
    on_saturday = evaluate_badges([_record(today=SATURDAY)], 1, 0, SATURDAY)
    stale = evaluate_badges([_record(today=SATURDAY, days_ago=1)], 1, 0, SATURDAY)
    weekday = evaluate_badges([_record()], 1, 0, WEDNESDAY)
    assert "weekend-warrior" in on_saturday
    assert "weekend-warrior" not in stale
    assert "weekend-warrior" not in weekday


def test_well_rounded_and_revisionist():
    history = [
        _record(type="aptitude", score=10.0),
        _record(type="technical"),
        _record(type="hr"),
        _record(type="group_discussion"),
        _record(type="profile_review"),
    ]
    earned = evaluate_badges(history, 1, revision_count=10, today=WEDNESDAY)
    assert {"well-rounded", "profile-auditor", "revisionist"} <= earned


def test_badge_definitions_skip_unknown_ids():
    defs = badge_definitions(["apti-10", "no-such-badge"])
    assert [d.id for d in defs] == ["apti-10"]
