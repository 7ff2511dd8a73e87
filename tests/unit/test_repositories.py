"""Unit tests for the response repository with a mocked AsyncSession."""

import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from quality_assessment.adapters.repositories import SurveyResponseRepository, to_record
from quality_assessment.core.models import SurveyAnswer, SurveyResponse


def _orm_response(**overrides: object) -> SurveyResponse:
    fields: dict[str, object] = {
        "id": uuid.uuid4(),
        "results_token": uuid.uuid4(),
        "survey_version": "1.0",
        "total_score": 1,
        "max_possible_score": 27,
        "exclude_from_stats": False,
        "agency_size": "small",
        "answers": [
            SurveyAnswer(question_id="ds_001", answer=True),
            SurveyAnswer(question_id="ds_002", answer=False),
        ],
    }
    fields.update(overrides)
    return SurveyResponse(**fields)


@pytest.fixture()
def mock_session() -> AsyncMock:
    session = AsyncMock()
    session.add = MagicMock()
    return session


class TestToRecord:
    def test_maps_row_and_answers(self) -> None:
        response = _orm_response()

        record = to_record(response)

        assert record.id == response.id
        assert record.total_score == 1
        assert record.answers == {"ds_001": True, "ds_002": False}
        assert record.agency_size == "small"
        assert record.exclude_from_stats is False


class TestSurveyResponseRepository:
    @pytest.mark.asyncio()
    async def test_create_response_adds_row_with_answers(self, mock_session: AsyncMock) -> None:
        repository = SurveyResponseRepository(mock_session)

        response = await repository.create_response(
            survey_version="1.0",
            total_score=1,
            max_possible_score=27,
            answers={"ds_001": True, "ds_002": False},
            respondent_email="jane@agency.org",
            agency_size=None,
            role="bcba",
            exclude_from_stats=False,
        )

        mock_session.add.assert_called_once_with(response)
        mock_session.flush.assert_awaited_once()
        assert isinstance(response.results_token, uuid.UUID)
        assert {a.question_id: a.answer for a in response.answers} == {
            "ds_001": True,
            "ds_002": False,
        }

    @pytest.mark.asyncio()
    async def test_list_records_maps_rows(self, mock_session: AsyncMock) -> None:
        result = MagicMock()
        result.scalars.return_value.all.return_value = [_orm_response(), _orm_response()]
        mock_session.execute.return_value = result

        records = await SurveyResponseRepository(mock_session).list_records("1.0")

        assert len(records) == 2
        assert all(record.survey_version == "1.0" for record in records)
        mock_session.execute.assert_awaited_once()

    @pytest.mark.asyncio()
    async def test_get_record_by_token_missing(self, mock_session: AsyncMock) -> None:
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_session.execute.return_value = result

        assert await SurveyResponseRepository(mock_session).get_record_by_token(uuid.uuid4()) is None

    @pytest.mark.asyncio()
    async def test_get_latest_token_by_email(self, mock_session: AsyncMock) -> None:
        token = uuid.uuid4()
        result = MagicMock()
        result.scalar_one_or_none.return_value = token
        mock_session.execute.return_value = result

        found = await SurveyResponseRepository(mock_session).get_latest_token_by_email(
            "jane@agency.org"
        )

        assert found == token
        statement = str(mock_session.execute.await_args.args[0])
        assert "ORDER BY qa_survey_responses.completed_at DESC" in statement
        assert "qa_survey_responses.exclude_from_stats IS" in statement
        assert "deleted_at IS NULL" in statement
        assert "LIMIT" in statement
