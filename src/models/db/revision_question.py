import datetime

import sqlalchemy
from sqlalchemy.orm import Mapped as SQLAlchemyMapped, mapped_column as sqlalchemy_mapped_column

from src.repository.table import Base, JSONType


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


class RevisionQuestion(Base):  # type: ignore
    __tablename__ = "revision_question"

    id: SQLAlchemyMapped[int] = sqlalchemy_mapped_column(primary_key=True, autoincrement="auto")
    user_id: SQLAlchemyMapped[str] = sqlalchemy_mapped_column(sqlalchemy.String(length=128), nullable=False, index=True)
    # Embedded aptitude question (question, options, correct_answer, explanation, sub_topic)
    question: SQLAlchemyMapped[dict] = sqlalchemy_mapped_column(JSONType, nullable=False)
    quiz_topic: SQLAlchemyMapped[str] = sqlalchemy_mapped_column(sqlalchemy.String(length=128), nullable=False)
    timestamp: SQLAlchemyMapped[datetime.datetime] = sqlalchemy_mapped_column(
        sqlalchemy.DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )

    __mapper_args__ = {"eager_defaults": True}
