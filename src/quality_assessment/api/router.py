"""FastAPI router for the Quality Assessment API.

All routes are thin: they parse inputs, build the service, delegate to
SurveyService, and serialise responses. No business logic lives here.

API prefix: /api/v1
Auth: None. Respondents are anonymous; results are reachable only by token.
"""

import uuid
from functools import lru_cache
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from pydantic import EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from quality_assessment.adapters.database import get_db_session
from quality_assessment.adapters.repositories import SurveyResponseRepository
from quality_assessment.api.schemas import (
    AnswerErrorDetail,
    CatalogResponse,
    CategorySchema,
    PercentileResponse,
    PerformanceTierSchema,
    PopulationStatisticsResponse,
    QuestionSchema,
    ResultsLookupResponse,
    ResultsResponse,
    ScoreRequest,
    ScoreResponse,
    SegmentedStatisticsResponse,
    SubmitResponseRequest,
    SubmitResponseResponse,
)
from quality_assessment.core.questions import available_versions
from quality_assessment.core.services import SurveyService
from quality_assessment.errors import (
    ResponseNotFoundError,
    UnknownSurveyVersionError,
    ValidationError,
)
from quality_assessment.settings import Settings

logger = structlog.get_logger(__name__)

router = APIRouter(tags=["Quality Assessment"])


# ---------------------------------------------------------------------------
# Dependency factories
# ---------------------------------------------------------------------------


@lru_cache
def get_settings() -> Settings:
    """Return process-wide settings, loaded once from the environment."""
    return Settings()


def get_survey_service(
    session: AsyncSession = Depends(get_db_session),
    settings: Settings = Depends(get_settings),
) -> SurveyService:
    """Build SurveyService with an injected repository.

    Args:
        session: Async SQLAlchemy session from the database pool.
        settings: Service settings.

    Returns:
        Configured SurveyService instance.
    """
    return SurveyService.from_settings(SurveyResponseRepository(session), settings)


def _resolve_version(version: str | None, settings: Settings) -> str:
    return version or settings.current_survey_version


def _http_error(exc: ValidationError) -> HTTPException:
    """Map an answer or version error onto an HTTPException."""
    if isinstance(exc, UnknownSurveyVersionError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    detail = AnswerErrorDetail(
        message=str(exc),
        missing=exc.missing,
        extra=exc.extra,
        invalid=exc.invalid,
    )
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=detail.model_dump(),
    )


VersionQuery = Annotated[
    str | None,
    Query(max_length=20, description="Survey version; defaults to the current version"),
]


# ---------------------------------------------------------------------------
# Catalog and scoring
# ---------------------------------------------------------------------------


@router.get(
    "/catalog",
    response_model=CatalogResponse,
    summary="Questions and categories for a survey version",
)
async def get_catalog(
    version: VersionQuery = None,
    service: SurveyService = Depends(get_survey_service),
    settings: Settings = Depends(get_settings),
) -> CatalogResponse:
    """Return the question catalog and performance tiers for a version."""
    try:
        catalog = service.get_catalog(_resolve_version(version, settings))
    except ValidationError as exc:
        raise _http_error(exc) from exc

    return CatalogResponse(
        survey_version=catalog.version.version,
        max_score=catalog.max_score,
        released_at=catalog.version.released_at,
        available_versions=available_versions(),
        categories=[
            CategorySchema(
                id=category.id,
                name=category.name,
                short_name=category.short_name,
                description=category.description,
                max_score=category.max_score,
                question_ids=[q.id for q in catalog.questions_for_category(category.id)],
            )
            for category in catalog.categories
        ],
        questions=[
            QuestionSchema(
                id=question.id,
                category_id=question.category_id,
                text=question.text,
                version_added=question.version_added,
            )
            for question in catalog.active_questions
        ],
        performance_tiers=[
            PerformanceTierSchema.model_validate(tier) for tier in service.classifier.metadata()
        ],
    )


@router.post(
    "/scores",
    response_model=ScoreResponse,
    summary="Score an answer set without storing it",
)
async def score_answers(
    body: ScoreRequest,
    service: SurveyService = Depends(get_survey_service),
    settings: Settings = Depends(get_settings),
) -> ScoreResponse:
    """Score a complete answer set and list its gaps."""
    try:
        report = service.evaluate(body.answers, _resolve_version(body.survey_version, settings))
    except ValidationError as exc:
        raise _http_error(exc) from exc

    return ScoreResponse.model_validate(report)


@router.post(
    "/responses",
    response_model=SubmitResponseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a completed survey",
)
async def submit_response(
    body: SubmitResponseRequest,
    service: SurveyService = Depends(get_survey_service),
    settings: Settings = Depends(get_settings),
) -> SubmitResponseResponse:
    """Validate, score, and store a completed survey.

    Returns a results token the respondent uses to revisit their report.
    """
    try:
        result = await service.submit_response(
            answers=body.answers,
            survey_version=_resolve_version(body.survey_version, settings),
            email=body.email,
            agency_size=body.agency_size,
            role=body.role,
        )
    except ValidationError as exc:
        logger.info(
            "Survey submission rejected",
            missing=len(exc.missing),
            extra=len(exc.extra),
            invalid=len(exc.invalid),
        )
        raise _http_error(exc) from exc

    return SubmitResponseResponse.model_validate(result)


@router.get(
    "/results/lookup",
    response_model=ResultsLookupResponse,
    summary="Find the latest results link for an email",
)
async def lookup_results(
    email: Annotated[EmailStr, Query(description="Email given at submission")],
    service: SurveyService = Depends(get_survey_service),
) -> ResultsLookupResponse:
    """Return the results token of the respondent's most recent submission."""
    result = await service.lookup_results(email)
    return ResultsLookupResponse.model_validate(result)


@router.get(
    "/results/{results_token}",
    response_model=ResultsResponse,
    summary="Results report for a stored submission",
)
async def get_results(
    results_token: uuid.UUID = Path(..., description="Token returned on submission"),
    service: SurveyService = Depends(get_survey_service),
) -> ResultsResponse:
    """Recompute score, gaps, population comparison, and percentile."""
    try:
        report = await service.get_results(results_token)
    except ResponseNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except ValidationError as exc:
        raise _http_error(exc) from exc

    return ResultsResponse.model_validate(report)


# ---------------------------------------------------------------------------
# Population statistics
# ---------------------------------------------------------------------------


@router.get(
    "/stats",
    response_model=PopulationStatisticsResponse,
    summary="Population statistics for a survey version",
)
async def get_population_statistics(
    version: VersionQuery = None,
    service: SurveyService = Depends(get_survey_service),
    settings: Settings = Depends(get_settings),
) -> PopulationStatisticsResponse:
    """Return gated statistics; figures are null below the minimum sample."""
    try:
        statistics = await service.get_population_statistics(_resolve_version(version, settings))
    except ValidationError as exc:
        raise _http_error(exc) from exc

    return PopulationStatisticsResponse.model_validate(statistics.to_dict())


@router.get(
    "/stats/percentile",
    response_model=PercentileResponse,
    summary="Percentile of a score within the population",
)
async def get_percentile(
    score: Annotated[int, Query(ge=0, description="Total score to rank")],
    version: VersionQuery = None,
    service: SurveyService = Depends(get_survey_service),
    settings: Settings = Depends(get_settings),
) -> PercentileResponse:
    """Return the mid-rank percentile of a score; null below the minimum sample."""
    try:
        result = await service.get_percentile(score, _resolve_version(version, settings))
    except ValidationError as exc:
        raise _http_error(exc) from exc

    return PercentileResponse.model_validate(result.to_dict())


@router.get(
    "/stats/by-agency-size",
    response_model=SegmentedStatisticsResponse,
    summary="Population statistics per agency size",
)
async def get_statistics_by_agency_size(
    version: VersionQuery = None,
    service: SurveyService = Depends(get_survey_service),
    settings: Settings = Depends(get_settings),
) -> SegmentedStatisticsResponse:
    """Return statistics per agency-size segment, each gated on its own sample."""
    survey_version = _resolve_version(version, settings)
    try:
        segments = await service.get_statistics_by_segment(survey_version)
    except ValidationError as exc:
        raise _http_error(exc) from exc

    return SegmentedStatisticsResponse(
        survey_version=survey_version,
        segments={
            key: PopulationStatisticsResponse.model_validate(statistics.to_dict())
            for key, statistics in segments.items()
        },
    )
