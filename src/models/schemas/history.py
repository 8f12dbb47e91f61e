"""Schemas for the unified interview-history log.

Every completed practice session (quiz, interview, discussion, review) is
written once as an ``InterviewHistory`` row. The ``data_reference`` payload
varies with the history type; the models below validate it before it is
stored so readers never see a malformed reference.
"""

from __future__ import annotations

import datetime
from typing import Any, Literal

import pydantic

from src.models.db.interview_history import HistoryTypeEnum
from src.models.schemas.base import BaseSchemaModel


class QAItem(BaseSchemaModel):
    question: str
    answer: str
    feedback_summary: str | None = None


class BaseDataReference(BaseSchemaModel):
    questions_answered: int | None = None
    q_and_a_list: list[QAItem] | None = None


class AptitudeDataReference(BaseDataReference):
    topic: str
    difficulty: str
    quiz_type: Literal["Practice", "Diagnostic"] = "Practice"


class TechnicalDataReference(BaseDataReference):
    role: str
    experience: str | None = None
    tech_stack: list[str] | None = None
    job_description: str | None = None
    full_report: str | None = None


class HrDataReference(BaseDataReference):
    full_report: str | None = None


class MockDataReference(BaseDataReference):
    role: str
    company_tier: str
    full_report: str | None = None


class GDChatMessage(BaseSchemaModel):
    participant: str
    message: str


class GroupDiscussionDataReference(BaseSchemaModel):
    topic: str
    user_turns: int = 0
    chat_log: list[GDChatMessage] | None = None


class ProfileReviewDataReference(BaseSchemaModel):
    target_company_tier: str
    key_recommendations: list[str] = pydantic.Field(default_factory=list)
    full_report: str | None = None


class ReviewHubDataReference(BaseSchemaModel):
    review_items_saved: int | None = None
    review_items_removed: int | None = None


DATA_REFERENCE_MODELS: dict[HistoryTypeEnum, type[BaseSchemaModel]] = {
    HistoryTypeEnum.APTITUDE: AptitudeDataReference,
    HistoryTypeEnum.TECHNICAL: TechnicalDataReference,
    HistoryTypeEnum.HR: HrDataReference,
    HistoryTypeEnum.MOCK: MockDataReference,
    HistoryTypeEnum.GROUP_DISCUSSION: GroupDiscussionDataReference,
    HistoryTypeEnum.PROFILE_REVIEW: ProfileReviewDataReference,
    HistoryTypeEnum.REVIEW_HUB: ReviewHubDataReference,
}


class HistoryCreate(BaseSchemaModel):
    """A completed session, minus the fields the server assigns (id, userId, timestamp)."""

    type: HistoryTypeEnum
    session_id: str = pydantic.Field(min_length=1, max_length=64)
    duration_seconds: float | None = pydantic.Field(default=None, ge=0.0)
    score_rating: float | str | None = None
    summary: str
    data_reference: dict[str, Any] = pydantic.Field(default_factory=dict)

    @pydantic.model_validator(mode="after")
    def _normalize_data_reference(self) -> "HistoryCreate":
        model_cls = DATA_REFERENCE_MODELS[self.type]
        # Accept camelCase or snake_case from callers; store snake_case
        normalized = model_cls.model_validate(self.data_reference).model_dump(exclude_none=True)
        object.__setattr__(self, "data_reference", normalized)
        return self


class HistoryOut(BaseSchemaModel):
    id: int
    user_id: str
    type: str
    session_id: str
    timestamp: datetime.datetime
    duration_seconds: float | None = None
    score_rating: float | str | None = None
    summary: str
    data_reference: dict[str, Any] = pydantic.Field(default_factory=dict)


class HistoryListResponse(BaseSchemaModel):
    items: list[HistoryOut]
    count: int
