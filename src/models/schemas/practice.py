"""Schemas for the standalone practice modules: technical and HR interviews,
group discussion and profile review."""

from __future__ import annotations

from enum import Enum as _Enum
from typing import Literal

import pydantic

from src.models.schemas.base import BaseSchemaModel
from src.models.schemas.history import GDChatMessage, QAItem
from src.models.schemas.mock_interview import TechnicalRoleEnum


class PracticeKindEnum(str, _Enum):
    TECHNICAL = "technical"
    HR = "hr"


class InterviewConfig(BaseSchemaModel):
    role: str = pydantic.Field(default=TechnicalRoleEnum.FULLSTACK.value, min_length=1, max_length=128)
    experience: str = pydantic.Field(default="Intern/Fresher (0-1 years)", max_length=128)
    tech_stack: list[str] = pydantic.Field(default_factory=lambda: ["React", "Node.js", "TypeScript"])
    job_description: str = pydantic.Field(default="", max_length=8000)

    @pydantic.field_validator("tech_stack")
    @classmethod
    def _strip_stack(cls, value: list[str]) -> list[str]:
        return [item.strip() for item in value if item and item.strip()]


class PracticeAnswerRequest(BaseSchemaModel):
    answer: str = pydantic.Field(min_length=1)


class PracticeEndRequest(BaseSchemaModel):
    # Answer typed for the current question but not yet submitted
    answer: str | None = None


class ConversationTurn(BaseSchemaModel):
    question: str
    answer: str


class PracticeStateOut(BaseSchemaModel):
    session_id: str
    kind: PracticeKindEnum
    current_question: str
    turns: list[ConversationTurn] = pydantic.Field(default_factory=list)
    config: InterviewConfig | None = None


class PracticeReport(BaseSchemaModel):
    session_id: str
    kind: PracticeKindEnum
    rating: str
    summary: str
    report: str
    feedback: list[QAItem] = pydantic.Field(default_factory=list)
    duration_seconds: float
    history_id: int | None = None
    saved: bool = True
    save_error: str | None = None


class PracticeEndResponse(BaseSchemaModel):
    """``report`` is empty when the session ended before any question was answered."""

    report: PracticeReport | None = None


class DiscussionTopic(BaseSchemaModel):
    topic: str
    description: str


class DiscussionTopicsResponse(BaseSchemaModel):
    topics: list[DiscussionTopic]


class DiscussionStartRequest(BaseSchemaModel):
    topic: str = pydantic.Field(min_length=1, max_length=256)
    duration_minutes: Literal[5, 10, 15] = 5
    participants: tuple[str, str] = ("Alex", "Ben")

    @pydantic.model_validator(mode="after")
    def _distinct_participants(self) -> "DiscussionStartRequest":
        first, second = (name.strip() for name in self.participants)
        if not first or not second or first == second:
            raise ValueError("participants must be two distinct, non-empty names")
        return self


class DiscussionMessageRequest(BaseSchemaModel):
    message: str = pydantic.Field(min_length=1, max_length=4000)


class DiscussionStateOut(BaseSchemaModel):
    session_id: str
    topic: str
    participants: list[str]
    chat_log: list[GDChatMessage]
    user_turns: int
    time_left_seconds: float
    time_up: bool


class DiscussionEndResponse(BaseSchemaModel):
    saved: bool
    user_turns: int
    duration_seconds: float
    history_id: int | None = None
    save_error: str | None = None


class ProfileReviewRequest(BaseSchemaModel):
    resume_text: str = pydantic.Field(min_length=1, max_length=20000)
    target_role: str = pydantic.Field(default=TechnicalRoleEnum.FULLSTACK.value, min_length=1, max_length=128)
    target_company_tier: str = pydantic.Field(default="", max_length=128)
    linkedin_url: str | None = None
    github_url: str | None = None

    @pydantic.field_validator("resume_text", "target_role")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class ProfileReviewOut(BaseSchemaModel):
    rating: str
    summary: str
    key_recommendations: list[str] = pydantic.Field(default_factory=list)
    feedback: str
    history_id: int | None = None
    saved: bool = True
