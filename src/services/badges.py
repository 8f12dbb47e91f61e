"""Static badge catalog and the rule evaluator.

``evaluate_badges`` is a pure function: it re-checks every rule over the
user's history and returns all badge ids that currently hold. Persisting
them is an upsert, so once a badge is earned it is never taken away.
"""

from __future__ import annotations

import datetime
from typing import Any, Iterable, Sequence

from src.models.db.interview_history import HistoryTypeEnum
from src.models.schemas.aptitude import AptitudeTopicEnum
from src.models.schemas.progress import BadgeDefinition
from src.services.streak import local_date


BADGE_CATALOG: list[BadgeDefinition] = [
    # Streak & consistency
    BadgeDefinition(id="streak-7", name="Consistent Learner", description="Maintain a 7-day practice streak.", icon="Flame", tier="Bronze"),
    BadgeDefinition(id="streak-30", name="Dedicated Scholar", description="Maintain a 30-day practice streak.", icon="Flame", tier="Silver"),
    BadgeDefinition(id="weekend-warrior", name="Weekend Warrior", description="Complete a practice session on a weekend.", icon="Calendar", tier="Bronze"),
    # Aptitude general
    BadgeDefinition(id="apti-10", name="Aptitude Explorer", description="Complete 10 aptitude quizzes.", icon="Calculator", tier="Bronze"),
    BadgeDefinition(id="apti-50", name="Aptitude Veteran", description="Complete 50 aptitude quizzes.", icon="Calculator", tier="Silver"),
    BadgeDefinition(id="apti-perfect", name="Perfectionist", description="Score 100% on an aptitude quiz with at least 10 questions.", icon="Target", tier="Gold"),
    # Aptitude topics
    BadgeDefinition(id="quant-master", name="Quant Master", description="Score >90% in a Quantitative Aptitude quiz.", icon="Chart", tier="Silver"),
    BadgeDefinition(id="logical-master", name="Logic Wizard", description="Score >90% in a Logical Reasoning quiz.", icon="Brain", tier="Silver"),
    BadgeDefinition(id="verbal-master", name="Verbal Virtuoso", description="Score >90% in a Verbal Ability quiz.", icon="Book", tier="Silver"),
    BadgeDefinition(id="di-detective", name="Data Detective", description="Score over 90% in a Data Interpretation quiz.", icon="Chart", tier="Silver"),
    # Diagnostic
    BadgeDefinition(id="diagnostic-complete", name="Self-Aware", description="Complete your first diagnostic test.", icon="Target", tier="Bronze"),
    BadgeDefinition(id="diagnostic-high-potential", name="High Potential", description="Score over 75% on a diagnostic test.", icon="Target", tier="Silver"),
    # Module completion
    BadgeDefinition(id="tech-5", name="Techie", description="Complete 5 technical interview sessions.", icon="Code", tier="Bronze"),
    BadgeDefinition(id="hr-5", name="Communicator", description="Complete 5 HR interview sessions.", icon="Users", tier="Bronze"),
    BadgeDefinition(id="gd-5", name="Debater", description="Participate in 5 group discussions.", icon="Chat", tier="Bronze"),
    BadgeDefinition(id="mock-star", name="Mock Star", description="Complete 3 full mock interviews.", icon="Briefcase", tier="Silver"),
    # Feature engagement
    BadgeDefinition(id="profile-auditor", name="Auditor", description="Get your profile reviewed for the first time.", icon="Document", tier="Bronze"),
    BadgeDefinition(id="revisionist", name="Revisionist", description="Add 10 or more questions to your Review Hub.", icon="Bookmark", tier="Bronze"),
    BadgeDefinition(id="well-rounded", name="Well-Rounded", description="Try every prep module at least once.", icon="Globe", tier="Gold"),
]

BADGES_BY_ID: dict[str, BadgeDefinition] = {badge.id: badge for badge in BADGE_CATALOG}

TIER_ORDER: tuple[str, ...] = ("Gold", "Silver", "Bronze")

_TOPIC_MASTER_BADGES: dict[str, str] = {
    AptitudeTopicEnum.QUANTITATIVE.value: "quant-master",
    AptitudeTopicEnum.LOGICAL_REASONING.value: "logical-master",
    AptitudeTopicEnum.VERBAL_ABILITY.value: "verbal-master",
    AptitudeTopicEnum.DATA_INTERPRETATION.value: "di-detective",
}

_WELL_ROUNDED_TYPES = {
    HistoryTypeEnum.APTITUDE.value,
    HistoryTypeEnum.TECHNICAL.value,
    HistoryTypeEnum.HR.value,
    HistoryTypeEnum.GROUP_DISCUSSION.value,
    HistoryTypeEnum.PROFILE_REVIEW.value,
}


def numeric_score(score_rating: Any) -> float | None:
    """Numeric score of a history record; recommendation strings and bools do not count."""
    if isinstance(score_rating, bool) or not isinstance(score_rating, (int, float)):
        return None
    return float(score_rating)


def _ref(entry: Any) -> dict[str, Any]:
    return getattr(entry, "data_reference", None) or {}


def _type_of(entry: Any) -> str:
    value = getattr(entry, "type", "")
    return value.value if isinstance(value, HistoryTypeEnum) else str(value)


def evaluate_badges(
    history: Sequence[Any],
    streak: int,
    revision_count: int,
    today: datetime.date,
) -> set[str]:
    """Badge ids satisfied by ``history`` (newest first), ``streak`` and the Review Hub size."""
    earned: set[str] = set()
    aptitude = [h for h in history if _type_of(h) == HistoryTypeEnum.APTITUDE.value]
    diagnostics = [h for h in aptitude if _ref(h).get("quiz_type") == "Diagnostic"]
    type_counts: dict[str, int] = {}
    for h in history:
        type_counts[_type_of(h)] = type_counts.get(_type_of(h), 0) + 1

    if streak >= 7:
        earned.add("streak-7")
    if streak >= 30:
        earned.add("streak-30")
    # Checked at evaluation time: today is a weekend day and the newest record is from today
    if history and today.weekday() >= 5 and local_date(history[0].timestamp) == today:
        earned.add("weekend-warrior")

    if len(aptitude) >= 10:
        earned.add("apti-10")
    if len(aptitude) >= 50:
        earned.add("apti-50")
    for h in aptitude:
        score = numeric_score(h.score_rating)
        if score is None:
            continue
        if score == 100 and (_ref(h).get("questions_answered") or 0) >= 10:
            earned.add("apti-perfect")
        badge_id = _TOPIC_MASTER_BADGES.get(_ref(h).get("topic", ""))
        if badge_id and score > 90:
            earned.add(badge_id)

    if diagnostics:
        earned.add("diagnostic-complete")
    if any((numeric_score(h.score_rating) or 0) > 75 for h in diagnostics):
        earned.add("diagnostic-high-potential")

    if type_counts.get(HistoryTypeEnum.TECHNICAL.value, 0) >= 5:
        earned.add("tech-5")
    if type_counts.get(HistoryTypeEnum.HR.value, 0) >= 5:
        earned.add("hr-5")
    if type_counts.get(HistoryTypeEnum.GROUP_DISCUSSION.value, 0) >= 5:
        earned.add("gd-5")
    if type_counts.get(HistoryTypeEnum.MOCK.value, 0) >= 3:
        earned.add("mock-star")

    if type_counts.get(HistoryTypeEnum.PROFILE_REVIEW.value, 0) > 0:
        earned.add("profile-auditor")
    if revision_count >= 10:
        earned.add("revisionist")
    if _WELL_ROUNDED_TYPES.issubset(type_counts):
        earned.add("well-rounded")

    return earned


def badge_definitions(badge_ids: Iterable[str]) -> list[BadgeDefinition]:
    """Catalog entries for the given ids, in catalog order; unknown ids are skipped."""
    wanted = set(badge_ids)
    return [badge for badge in BADGE_CATALOG if badge.id in wanted]
