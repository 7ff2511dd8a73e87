"""SQLAlchemy ORM models for the Quality Assessment response store.

Tables use the ``qa_`` prefix.

Domain model:
  SurveyResponse  one completed submission (scores, results token, stats flag)
  SurveyAnswer    one yes/no answer belonging to a submission

Rows are written once at submission and never updated, except that an
external retention process may set ``deleted_at``.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Declarative base for all quality assessment tables."""


class SurveyResponse(Base):
    """A completed survey submission.

    Table: qa_survey_responses
    """

    __tablename__ = "qa_survey_responses"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Primary key UUID",
    )
    survey_version: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        index=True,
        comment="Survey version the answers were given against (e.g. 1.0)",
    )
    total_score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Number of yes answers",
    )
    max_possible_score: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Survey version max score at submission time",
    )
    results_token: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        unique=True,
        index=True,
        default=uuid.uuid4,
        comment="Opaque token used to look up results",
    )
    respondent_email: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        index=True,
        comment="Normalised respondent email",
    )
    agency_size: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Agency size segment snapshot at submission time",
    )
    role: Mapped[str | None] = mapped_column(
        String(50),
        nullable=True,
        comment="Respondent role snapshot at submission time",
    )
    exclude_from_stats: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="True for test or synthetic submissions; never counted in statistics",
    )
    completed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        comment="Timestamp when the survey was submitted",
    )
    deleted_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Soft-deletion timestamp set by the retention process",
    )

    answers: Mapped[list["SurveyAnswer"]] = relationship(
        back_populates="response",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class SurveyAnswer(Base):
    """One yes/no answer within a submission.

    Table: qa_survey_answers
    """

    __tablename__ = "qa_survey_answers"
    __table_args__ = (
        UniqueConstraint("response_id", "question_id", name="uq_qa_survey_answers_response_question"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        comment="Primary key UUID",
    )
    response_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("qa_survey_responses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        comment="Owning submission",
    )
    question_id: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Stable question identifier from the catalog (e.g. ds_001)",
    )
    answer: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        comment="True for yes, False for no",
    )

    response: Mapped[SurveyResponse] = relationship(back_populates="answers")
