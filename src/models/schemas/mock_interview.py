"""Schemas for the three-round mock interview (Aptitude -> Technical -> HR)."""

from __future__ import annotations

from enum import Enum as _Enum
from typing import Annotated, Literal, Union

import pydantic

from src.models.schemas.base import BaseSchemaModel


class RoundTypeEnum(str, _Enum):
    APTITUDE = "Aptitude"
    TECHNICAL = "Technical"
    HR = "HR"


class TechnicalRoleEnum(str, _Enum):
    FRONTEND = "Frontend Developer"
    BACKEND = "Backend Developer"
    FULLSTACK = "Full-Stack Developer"
    DATA_SCIENTIST = "Data Scientist"
    DEVOPS = "DevOps Engineer"


class CompanyTierEnum(str, _Enum):
    FAANG = "FAANG / Top Tier"
    STARTUP = "High-Growth Startup"
    SERVICE = "Service-Based / Consulting"
    CORE = "Core Engineering / Manufacturing"


class HiringRecommendationEnum(str, _Enum):
    STRONG_HIRE = "Strong Hire"
    HIRE = "Hire"
    LEANING_NO = "Leaning No"
    NO_HIRE = "No Hire"


class AptitudeRoundResult(BaseSchemaModel):
    type: Literal["Aptitude"] = "Aptitude"
    score: float = pydantic.Field(ge=0.0, le=100.0)
    total: int
    correct_answers: int


class ConversationRoundResult(BaseSchemaModel):
    type: Literal["Technical", "HR"]
    question: str
    answer: str
    feedback: str


RoundResult = Annotated[Union[AptitudeRoundResult, ConversationRoundResult], pydantic.Field(discriminator="type")]


class MockInterviewStartRequest(BaseSchemaModel):
    role: str = pydantic.Field(default=TechnicalRoleEnum.FULLSTACK.value, min_length=1, max_length=128)
    company_tier: CompanyTierEnum = CompanyTierEnum.STARTUP
    duration_minutes: Literal[45, 60, 90] = 60


class MockAnswerRequest(BaseSchemaModel):
    answer: str


class MockQuestionOut(BaseSchemaModel):
    text: str
    options: list[str] | None = None


class MockInterviewReport(BaseSchemaModel):
    recommendation: str
    summary: str
    report: str
    results: list[RoundResult] = pydantic.Field(default_factory=list)
    ended_by_timeout: bool = False
    duration_seconds: float
    saved: bool = True
    save_error: str | None = None


class MockInterviewStateOut(BaseSchemaModel):
    session_id: str
    phase: Literal["setup", "active", "results", "stopped"]
    role: str
    company_tier: str
    round: RoundTypeEnum | None = None
    round_index: int
    question_index: int
    round_question_count: int
    question: MockQuestionOut | None = None
    current_answer: str | None = None
    time_left_seconds: float
    next_round_ready: bool
    results: list[RoundResult] = pydantic.Field(default_factory=list)
    report: MockInterviewReport | None = None


