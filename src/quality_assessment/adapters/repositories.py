"""Repository for stored survey responses.

Implements IResponseRepository with SQLAlchemy 2.0 async ORM. Submissions are
written once; reads never return soft-deleted rows.
"""

import uuid
from collections.abc import Mapping

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from quality_assessment.core.models import SurveyAnswer, SurveyResponse
from quality_assessment.core.population import ResponseRecord
from quality_assessment.observability import get_logger

logger = get_logger(__name__)


def to_record(response: SurveyResponse) -> ResponseRecord:
    """Map an ORM row onto the engine's read contract."""
    return ResponseRecord(
        id=response.id,
        survey_version=response.survey_version,
        total_score=response.total_score,
        max_possible_score=response.max_possible_score,
        answers={answer.question_id: answer.answer for answer in response.answers},
        completed_at=response.completed_at,
        exclude_from_stats=response.exclude_from_stats,
        agency_size=response.agency_size,
    )


class SurveyResponseRepository:
    """Persistence for SurveyResponse rows and their answers."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialise with an async database session.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    async def create_response(
        self,
        survey_version: str,
        total_score: int,
        max_possible_score: int,
        answers: Mapping[str, bool],
        respondent_email: str | None,
        agency_size: str | None,
        role: str | None,
        exclude_from_stats: bool,
    ) -> SurveyResponse:
        """Persist one submission together with its answers.

        Args:
            survey_version: Version the answers were given against.
            total_score: Number of yes answers.
            max_possible_score: Version max score at submission time.
            answers: Question id to boolean answer.
            respondent_email: Normalised email, optional.
            agency_size: Agency size segment, optional.
            role: Respondent role, optional.
            exclude_from_stats: True for test respondents.

        Returns:
            The persisted SurveyResponse with id and results_token set.
        """
        response = SurveyResponse(
            id=uuid.uuid4(),
            results_token=uuid.uuid4(),
            survey_version=survey_version,
            total_score=total_score,
            max_possible_score=max_possible_score,
            respondent_email=respondent_email,
            agency_size=agency_size,
            role=role,
            exclude_from_stats=exclude_from_stats,
            answers=[
                SurveyAnswer(question_id=question_id, answer=answer)
                for question_id, answer in answers.items()
            ],
        )
        self._session.add(response)
        await self._session.flush()
        await self._session.refresh(response)

        logger.debug(
            "Survey response persisted",
            response_id=str(response.id),
            survey_version=survey_version,
            answer_count=len(answers),
        )
        return response

    async def list_records(self, survey_version: str) -> list[ResponseRecord]:
        """Return all live records for a survey version, oldest first.

        Excluded records are filtered here as well as in the engine.
        """
        result = await self._session.execute(
            select(SurveyResponse)
            .where(
                SurveyResponse.survey_version == survey_version,
                SurveyResponse.deleted_at.is_(None),
                SurveyResponse.exclude_from_stats.is_(False),
            )
            .order_by(SurveyResponse.completed_at)
        )
        return [to_record(response) for response in result.scalars().all()]

    async def get_record_by_token(self, results_token: uuid.UUID) -> ResponseRecord | None:
        """Return the live record for a results token, or None."""
        result = await self._session.execute(
            select(SurveyResponse).where(
                SurveyResponse.results_token == results_token,
                SurveyResponse.deleted_at.is_(None),
            )
        )
        response = result.scalar_one_or_none()
        return to_record(response) if response is not None else None

    async def get_latest_token_by_email(self, respondent_email: str) -> uuid.UUID | None:
        """Return the results token of the newest counted submission for an email.

        Excluded and soft-deleted submissions are never returned.
        """
        result = await self._session.execute(
            select(SurveyResponse.results_token)
            .where(
                SurveyResponse.respondent_email == respondent_email,
                SurveyResponse.deleted_at.is_(None),
                SurveyResponse.exclude_from_stats.is_(False),
            )
            .order_by(SurveyResponse.completed_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
