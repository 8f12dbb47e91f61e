"""Schemas and catalog data for aptitude quizzes.

Covers the topic / sub-topic catalog, the question shape shared with the
review hub and the mock interview, the saved-quiz snapshot, and the
request/response bodies of the /aptitude endpoints.
"""

from __future__ import annotations

import datetime
from enum import Enum as _Enum
from typing import Literal

import pydantic

from src.models.schemas.base import BaseSchemaModel


class AptitudeTopicEnum(str, _Enum):
    QUANTITATIVE = "Quantitative Aptitude"
    LOGICAL_REASONING = "Logical Reasoning"
    VERBAL_ABILITY = "Verbal Ability"
    DATA_INTERPRETATION = "Data Interpretation"


ALL_TOPICS_LABEL = "All Topics"

APTITUDE_SUB_TOPICS: dict[AptitudeTopicEnum, list[str]] = {
    AptitudeTopicEnum.QUANTITATIVE: [
        "Number System", "HCF & LCM", "Percentage", "Profit & Loss", "Ratio & Proportion", "Time & Work",
        "Time, Speed & Distance", "Boats & Streams", "Simple & Compound Interest", "Area & Volume",
        "Permutation & Combination", "Probability",
    ],
    AptitudeTopicEnum.LOGICAL_REASONING: [
        "Analogy", "Blood Relations", "Calendars & Clocks", "Coding-Decoding", "Direction Sense", "Number Series",
        "Seating Arrangement", "Syllogism", "Statement & Conclusion",
    ],
    AptitudeTopicEnum.VERBAL_ABILITY: [
        "Synonyms & Antonyms", "Idioms & Phrases", "Error Spotting", "Sentence Correction", "Para Jumbles",
        "Reading Comprehension", "Close Test",
    ],
    AptitudeTopicEnum.DATA_INTERPRETATION: ["Tables", "Bar Charts", "Pie Charts", "Line Graphs"],
}

Difficulty = Literal["Easy", "Medium", "Hard", "Mixed"]
QuizType = Literal["Practice", "Diagnostic"]


class AptitudeQuestion(BaseSchemaModel):
    question: str
    options: list[str] = pydantic.Field(default_factory=list)
    correct_answer: str
    explanation: str = ""
    sub_topic: str = "General"


class PracticeQuizRequest(BaseSchemaModel):
    sub_topics: list[str] = pydantic.Field(default_factory=list, description="Selected sub-topics; 'All Topics' is ignored")
    num_questions: int = pydantic.Field(default=5, ge=1, le=30)
    difficulty: Difficulty = "Medium"


class AnswerRequest(BaseSchemaModel):
    answer: str


class SavedQuizState(BaseSchemaModel):
    """Point-in-time snapshot of an in-progress quiz, enough to resume it later."""

    questions: list[AptitudeQuestion]
    user_answers: list[str | None]
    current_question_index: int = pydantic.Field(ge=0)
    time_left: float | None = None
    topic: str
    selected_difficulty: Difficulty
    num_questions: int
    time_per_question: list[float]
    quiz_type: QuizType = "Practice"
    saved_at: datetime.datetime | None = None


class SavedQuizSummary(BaseSchemaModel):
    has_saved_quiz: bool
    topic: str | None = None
    quiz_type: QuizType | None = None
    answered: int = 0
    total: int = 0
    current_question_index: int | None = None
    time_left: float | None = None
    saved_at: datetime.datetime | None = None


class QuizQuestionOut(BaseSchemaModel):
    """A question as shown while the quiz is running (no answer key)."""

    question: str
    options: list[str]
    sub_topic: str


class QuizStateOut(BaseSchemaModel):
    topic: str
    quiz_type: QuizType
    difficulty: Difficulty
    current_question_index: int
    total_questions: int
    question: QuizQuestionOut
    selected_answer: str | None = None
    answered: int
    time_left: float | None = None


class TopicBreakdownItem(BaseSchemaModel):
    sub_topic: str
    correct: int
    total: int
    accuracy: float
    avg_time: float


class SpeedAccuracyMatrix(BaseSchemaModel):
    fast_accurate: list[str] = pydantic.Field(default_factory=list)
    slow_accurate: list[str] = pydantic.Field(default_factory=list)
    fast_inaccurate: list[str] = pydantic.Field(default_factory=list)
    slow_inaccurate: list[str] = pydantic.Field(default_factory=list)


class QuizAnalysis(BaseSchemaModel):
    topic_breakdown: list[TopicBreakdownItem] = pydantic.Field(default_factory=list)
    speed_accuracy: SpeedAccuracyMatrix = pydantic.Field(default_factory=SpeedAccuracyMatrix)
    focus_sub_topics: list[str] = pydantic.Field(default_factory=list)


class QuizResultOut(BaseSchemaModel):
    score: float = pydantic.Field(ge=0.0, le=100.0)
    total: int
    correct_answers: int
    incorrect_answers: int
    topic: str
    difficulty: Difficulty
    quiz_type: QuizType
    questions: list[AptitudeQuestion]
    user_answers: list[str | None]
    time_per_question: list[float]
    recommended_difficulty: Difficulty
    analysis: QuizAnalysis
    saved: bool = True
    save_error: str | None = None


class QuizStepResponse(BaseSchemaModel):
    """Either the next quiz state or, when the quiz ended (last question or time-out), its result."""

    finished: bool
    state: QuizStateOut | None = None
    result: QuizResultOut | None = None


class DiagnosticStatusResponse(BaseSchemaModel):
    has_completed_diagnostic: bool
    saved_quiz: SavedQuizSummary


class ImprovementSuggestionsResponse(BaseSchemaModel):
    suggestions: str


class TopicCatalogItem(BaseSchemaModel):
    topic: AptitudeTopicEnum
    sub_topics: list[str]


class TopicCatalogResponse(BaseSchemaModel):
    topics: list[TopicCatalogItem]
