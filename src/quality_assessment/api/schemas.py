"""Pydantic request/response schemas for the Quality Assessment API.

All API inputs and outputs are typed Pydantic v2 models. Answer values are
accepted as-is and checked by the catalog so that non-boolean answers are
reported by question id rather than rejected by the parser.
"""

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class QuestionSchema(BaseModel):
    """A single catalog question as presented to respondents."""

    id: str
    category_id: str
    text: str
    version_added: str


class CategorySchema(BaseModel):
    """A scoring category with its active questions."""

    id: str
    name: str
    short_name: str
    description: str
    max_score: int
    question_ids: list[str]


class PerformanceTierSchema(BaseModel):
    """One performance tier with its inclusive lower bound."""

    level: str
    label: str
    color: str
    min_percentage: int


class CatalogResponse(BaseModel):
    """Questions, categories, and tier metadata for one survey version.

    Attributes:
        survey_version: Version string (e.g. '1.0').
        max_score: Total achievable score.
        released_at: ISO release date.
        available_versions: Every registered version.
        categories: Categories in catalog order.
        questions: Active questions in catalog order.
        performance_tiers: Classifier tiers, highest first.
    """

    survey_version: str
    max_score: int
    released_at: str
    available_versions: list[str]
    categories: list[CategorySchema]
    questions: list[QuestionSchema]
    performance_tiers: list[PerformanceTierSchema]


# ---------------------------------------------------------------------------
# Scoring
# ---------------------------------------------------------------------------


class ScoreRequest(BaseModel):
    """Answer set to score.

    Attributes:
        answers: Question id to boolean answer; must cover the version exactly.
        survey_version: Version the answers were given against; defaults to
            the current version.
    """

    answers: dict[str, Any] = Field(..., description="Question id to true (yes) / false (no)")
    survey_version: str | None = Field(default=None, max_length=20)


class SubmitResponseRequest(ScoreRequest):
    """Completed survey submission.

    Attributes:
        email: Respondent email; test addresses are excluded from statistics.
        agency_size: Agency size segment used for segmented statistics.
        role: Respondent role.
    """

    email: EmailStr | None = None
    agency_size: str | None = Field(default=None, max_length=50)
    role: str | None = Field(default=None, max_length=50)

    @field_validator("agency_size", "role")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        """Treat blank segment fields as absent.

        Args:
            value: Raw field value.

        Returns:
            Stripped value, or None when blank.
        """
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None


class CategoryScoreSchema(BaseModel):
    category_id: str
    category_name: str
    score: int
    max_score: int
    percentage: int
    level: str
    label: str
    color: str


class ScoreSummarySchema(BaseModel):
    """Total score with its performance classification."""

    total: int
    max_possible: int
    percentage: int
    level: str
    label: str
    color: str
    categories: list[CategoryScoreSchema]


class GapSchema(BaseModel):
    question_id: str
    question_text: str
    category_id: str
    category_name: str


class ScoreResponse(BaseModel):
    """Score, gaps, and gaps grouped by category for an answer set."""

    survey_version: str
    score: ScoreSummarySchema
    gaps: list[GapSchema]
    gaps_by_category: dict[str, list[GapSchema]]


class SubmittedScoreSchema(BaseModel):
    total: int
    max_possible: int
    percentage: int


class SubmitResponseResponse(BaseModel):
    """Acknowledgement of a stored submission.

    Attributes:
        response_id: Stored response UUID.
        results_token: Token for retrieving the results report.
        results_url: Relative link to the results page.
        survey_version: Version the answers were scored against.
        score: Total score and percentage.
        exclude_from_stats: True when the respondent is a test account.
    """

    response_id: uuid.UUID
    results_token: uuid.UUID
    results_url: str
    survey_version: str
    score: SubmittedScoreSchema
    exclude_from_stats: bool


# ---------------------------------------------------------------------------
# Population statistics
# ---------------------------------------------------------------------------


class QuestionStatisticsSchema(BaseModel):
    yes_percentage: int
    total_responses: int


class PopulationStatisticsResponse(BaseModel):
    """Gated population statistics.

    When ``available`` is False every figure is null and only the sample
    size and gate threshold are set.
    """

    available: bool
    survey_version: str
    sample_size: int
    min_required: int
    avg_percentage: int | None = None
    avg_score: float | None = None
    median_score: float | None = None
    p25_score: float | None = None
    p75_score: float | None = None
    category_averages: dict[str, int] | None = None
    category_pooling: str | None = None
    question_stats: dict[str, QuestionStatisticsSchema] | None = None
    distribution: dict[str, int] | None = None


class PercentileResponse(BaseModel):
    """Gated percentile of a score; ``percentile`` is null below the gate."""

    score: int
    survey_version: str
    available: bool
    percentile: int | None
    sample_size: int
    min_required: int
    message: str


class SegmentedStatisticsResponse(BaseModel):
    """Statistics per agency-size segment, each gated independently."""

    survey_version: str
    segments: dict[str, PopulationStatisticsResponse]


class ResultsResponse(ScoreResponse):
    """Full results report for a stored submission."""

    results_token: uuid.UUID
    completed_at: datetime | None
    population: PopulationStatisticsResponse
    percentile: PercentileResponse


class ResultsLookupResponse(BaseModel):
    """Outcome of looking up results by respondent email."""

    found: bool
    results_token: uuid.UUID | None = None
    results_url: str | None = None
    message: str | None = None


# ---------------------------------------------------------------------------
# Errors and health
# ---------------------------------------------------------------------------


class AnswerErrorDetail(BaseModel):
    """Body of a 422 raised for an answer set that does not match its version."""

    message: str
    missing: list[str] = Field(default_factory=list)
    extra: list[str] = Field(default_factory=list)
    invalid: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    service: str
    version: str
