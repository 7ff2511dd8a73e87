"""qa: initial schema: survey responses and answers.

Creates the response store read by population statistics and percentile
ranking. Rows are append-only; retention sets deleted_at.

Revision ID: qa_001_initial
Revises:
Create Date: 2026-01-15 00:00:00.000000
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "qa_001_initial"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create qa_survey_responses and qa_survey_answers."""
    # qa_survey_responses: one row per completed submission
    op.create_table(
        "qa_survey_responses",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "survey_version",
            sa.String(20),
            nullable=False,
            comment="Survey version the answers were given against (e.g. 1.0)",
        ),
        sa.Column(
            "total_score",
            sa.Integer,
            nullable=False,
            comment="Number of yes answers",
        ),
        sa.Column(
            "max_possible_score",
            sa.Integer,
            nullable=False,
            comment="Survey version max score at submission time",
        ),
        sa.Column(
            "results_token",
            postgresql.UUID(as_uuid=True),
            nullable=False,
            server_default=sa.text("gen_random_uuid()"),
            comment="Opaque token used to look up results",
        ),
        sa.Column(
            "respondent_email",
            sa.String(255),
            nullable=True,
            comment="Normalised respondent email",
        ),
        sa.Column(
            "agency_size",
            sa.String(50),
            nullable=True,
            comment="Agency size segment snapshot at submission time",
        ),
        sa.Column(
            "role",
            sa.String(50),
            nullable=True,
            comment="Respondent role snapshot at submission time",
        ),
        sa.Column(
            "exclude_from_stats",
            sa.Boolean,
            nullable=False,
            server_default=sa.false(),
            comment="True for test or synthetic submissions; never counted in statistics",
        ),
        sa.Column(
            "completed_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
            comment="Timestamp when the survey was submitted",
        ),
        sa.Column(
            "deleted_at",
            sa.DateTime(timezone=True),
            nullable=True,
            comment="Soft-deletion timestamp set by the retention process",
        ),
        sa.CheckConstraint("total_score >= 0", name="ck_qa_survey_responses_total_score"),
        sa.CheckConstraint(
            "total_score <= max_possible_score",
            name="ck_qa_survey_responses_score_bounds",
        ),
    )
    op.create_index(
        "ix_qa_survey_responses_results_token",
        "qa_survey_responses",
        ["results_token"],
        unique=True,
    )
    op.create_index(
        "ix_qa_survey_responses_survey_version",
        "qa_survey_responses",
        ["survey_version"],
    )
    op.create_index(
        "ix_qa_survey_responses_respondent_email",
        "qa_survey_responses",
        ["respondent_email"],
    )
    op.create_index(
        "ix_qa_survey_responses_exclude_from_stats",
        "qa_survey_responses",
        ["exclude_from_stats"],
    )

    # qa_survey_answers: one row per answered question
    op.create_table(
        "qa_survey_answers",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "response_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("qa_survey_responses.id", ondelete="CASCADE"),
            nullable=False,
            comment="Owning submission",
        ),
        sa.Column(
            "question_id",
            sa.String(50),
            nullable=False,
            comment="Stable question identifier from the catalog (e.g. ds_001)",
        ),
        sa.Column(
            "answer",
            sa.Boolean,
            nullable=False,
            comment="True for yes, False for no",
        ),
        sa.UniqueConstraint(
            "response_id",
            "question_id",
            name="uq_qa_survey_answers_response_question",
        ),
    )
    op.create_index(
        "ix_qa_survey_answers_response_id",
        "qa_survey_answers",
        ["response_id"],
    )


def downgrade() -> None:
    """Drop qa_ tables."""
    for table in [
        "qa_survey_answers",
        "qa_survey_responses",
    ]:
        op.execute(f"DROP TABLE IF EXISTS {table} CASCADE")
