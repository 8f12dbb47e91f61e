import datetime
import typing
from enum import Enum as _Enum

import sqlalchemy
from sqlalchemy.orm import Mapped as SQLAlchemyMapped, mapped_column as sqlalchemy_mapped_column

from src.repository.table import Base, JSONType


class HistoryTypeEnum(str, _Enum):
    """Kinds of completed practice sessions kept in the history log."""

    APTITUDE = "aptitude"
    HR = "hr"
    TECHNICAL = "technical"
    PROFILE_REVIEW = "profile_review"
    GROUP_DISCUSSION = "group_discussion"
    MOCK = "mock"
    REVIEW_HUB = "review_hub"


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class InterviewHistory(Base):  # type: ignore
    __tablename__ = "interview_history"

    id: SQLAlchemyMapped[int] = sqlalchemy_mapped_column(primary_key=True, autoincrement="auto")
    user_id: SQLAlchemyMapped[str] = sqlalchemy_mapped_column(sqlalchemy.String(length=128), nullable=False, index=True)
    type: SQLAlchemyMapped[str] = sqlalchemy_mapped_column(sqlalchemy.String(length=32), nullable=False, index=True)
    session_id: SQLAlchemyMapped[str] = sqlalchemy_mapped_column(sqlalchemy.String(length=64), nullable=False)
    timestamp: SQLAlchemyMapped[datetime.datetime] = sqlalchemy_mapped_column(
        sqlalchemy.DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
    duration_seconds: SQLAlchemyMapped[float | None] = sqlalchemy_mapped_column(sqlalchemy.Float, nullable=True)
    # Number for quizzes, hiring recommendation string for mock interviews
    score_rating: SQLAlchemyMapped[typing.Any] = sqlalchemy_mapped_column(JSONType, nullable=True)
    summary: SQLAlchemyMapped[str] = sqlalchemy_mapped_column(sqlalchemy.Text, nullable=False, default="")
    data_reference: SQLAlchemyMapped[dict] = sqlalchemy_mapped_column(JSONType, nullable=False, default=dict)

    __mapper_args__ = {"eager_defaults": True}
