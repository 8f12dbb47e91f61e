from __future__ import annotations

import datetime

from src.models.schemas.aptitude import AptitudeQuestion
from src.models.schemas.base import BaseSchemaModel


class RevisionQuestionCreate(BaseSchemaModel):
    question: AptitudeQuestion
    quiz_topic: str


class RevisionQuestionOut(BaseSchemaModel):
    id: int
    user_id: str
    question: AptitudeQuestion
    quiz_topic: str
    timestamp: datetime.datetime


class RevisionQuestionsListResponse(BaseSchemaModel):
    items: list[RevisionQuestionOut]
    count: int
