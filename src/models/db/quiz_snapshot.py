import datetime

import sqlalchemy
from sqlalchemy.orm import Mapped as SQLAlchemyMapped, mapped_column as sqlalchemy_mapped_column

from src.repository.table import Base, JSONType


class QuizSnapshot(Base):  # type: ignore
    """Server-side backing for the single named quiz-resume slot of each user."""

    __tablename__ = "quiz_snapshot"

    storage_key: SQLAlchemyMapped[str] = sqlalchemy_mapped_column(sqlalchemy.String(length=256), primary_key=True)
    payload: SQLAlchemyMapped[dict] = sqlalchemy_mapped_column(JSONType, nullable=False)
    updated_at: SQLAlchemyMapped[datetime.datetime] = sqlalchemy_mapped_column(
        sqlalchemy.DateTime(timezone=True), nullable=False
    )
