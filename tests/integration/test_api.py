"""Integration tests for the Quality Assessment HTTP API.

Exercises every route through the FastAPI app with the service dependency
overridden to use a mocked repository, so no database is needed.
"""

import uuid
from collections.abc import AsyncGenerator, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi import status
from httpx import ASGITransport, AsyncClient

from quality_assessment.api.router import get_survey_service
from quality_assessment.core.population import ResponseRecord
from quality_assessment.core.services import SurveyService
from quality_assessment.main import app

_TOKEN = uuid.UUID("cccccccc-cccc-cccc-cccc-cccccccccccc")
_RESPONSE_ID = uuid.UUID("dddddddd-dddd-dddd-dddd-dddddddddddd")


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_repository() -> AsyncMock:
    """Mock SurveyResponseRepository with an empty population."""
    repository = AsyncMock()
    stored = MagicMock()
    stored.id = _RESPONSE_ID
    stored.results_token = _TOKEN
    repository.create_response.return_value = stored
    repository.list_records.return_value = []
    repository.get_record_by_token.return_value = None
    repository.get_latest_token_by_email.return_value = None
    return repository


@pytest_asyncio.fixture()
async def api_client(mock_repository: AsyncMock) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client with the survey service dependency overridden."""
    app.dependency_overrides[get_survey_service] = lambda: SurveyService(mock_repository)

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture()
def population(make_record: Callable[..., ResponseRecord]) -> list[ResponseRecord]:
    return [make_record(score) for score in (5, 10, 10, 12, 15, 15, 18, 20, 22, 25)]


# ---------------------------------------------------------------------------
# Health and catalog
# ---------------------------------------------------------------------------


class TestHealth:
    @pytest.mark.asyncio()
    async def test_health(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "ok"


class TestCatalog:
    @pytest.mark.asyncio()
    async def test_current_catalog(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/v1/catalog")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["survey_version"] == "1.0"
        assert body["max_score"] == 27
        assert len(body["questions"]) == 27
        assert [c["id"] for c in body["categories"]][0] == "daily_sessions"
        assert body["categories"][0]["question_ids"][0] == "ds_001"
        assert [tier["level"] for tier in body["performance_tiers"]] == [
            "strong",
            "moderate",
            "needs_improvement",
        ]

    @pytest.mark.asyncio()
    async def test_unknown_version_returns_404(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/v1/catalog", params={"version": "9.9"})

        assert response.status_code == status.HTTP_404_NOT_FOUND


# ---------------------------------------------------------------------------
# POST /api/v1/scores
# ---------------------------------------------------------------------------


class TestScores:
    @pytest.mark.asyncio()
    async def test_all_yes(self, api_client: AsyncClient, all_yes: dict[str, bool]) -> None:
        response = await api_client.post("/api/v1/scores", json={"answers": all_yes})

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["score"]["total"] == 27
        assert body["score"]["percentage"] == 100
        assert body["score"]["level"] == "strong"
        assert body["gaps"] == []

    @pytest.mark.asyncio()
    async def test_all_no(self, api_client: AsyncClient, all_no: dict[str, bool]) -> None:
        response = await api_client.post(
            "/api/v1/scores",
            json={"answers": all_no, "survey_version": "1.0"},
        )

        body = response.json()
        assert body["score"]["level"] == "needs_improvement"
        assert len(body["gaps"]) == 27
        assert len(body["gaps_by_category"]["supervision"]) == 4

    @pytest.mark.asyncio()
    async def test_missing_and_extra_answers_return_422(
        self,
        api_client: AsyncClient,
        all_yes: dict[str, bool],
    ) -> None:
        del all_yes["da_004"]
        all_yes["da_999"] = True

        response = await api_client.post("/api/v1/scores", json={"answers": all_yes})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        detail = response.json()["detail"]
        assert detail["missing"] == ["da_004"]
        assert detail["extra"] == ["da_999"]

    @pytest.mark.asyncio()
    async def test_string_answer_reported_as_invalid(
        self,
        api_client: AsyncClient,
        all_yes: dict[str, object],
    ) -> None:
        all_yes["ds_003"] = "yes"

        response = await api_client.post("/api/v1/scores", json={"answers": all_yes})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert response.json()["detail"]["invalid"] == ["ds_003"]

    @pytest.mark.asyncio()
    async def test_unknown_version_returns_404(
        self,
        api_client: AsyncClient,
        all_yes: dict[str, bool],
    ) -> None:
        response = await api_client.post(
            "/api/v1/scores",
            json={"answers": all_yes, "survey_version": "2.0"},
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


# ---------------------------------------------------------------------------
# POST /api/v1/responses and GET /api/v1/results/{token}
# ---------------------------------------------------------------------------


class TestResponses:
    @pytest.mark.asyncio()
    async def test_submit_returns_201(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        answers_with_score: Callable[[int], dict[str, bool]],
    ) -> None:
        response = await api_client.post(
            "/api/v1/responses",
            json={
                "answers": answers_with_score(25),
                "email": "director@agency.org",
                "agency_size": "medium",
                "role": " ",
            },
        )

        assert response.status_code == status.HTTP_201_CREATED
        body = response.json()
        assert body["results_token"] == str(_TOKEN)
        assert body["results_url"] == f"/results/{_TOKEN}"
        assert body["score"] == {"total": 25, "max_possible": 27, "percentage": 93}
        assert body["exclude_from_stats"] is False
        assert mock_repository.create_response.call_args.kwargs["role"] is None

    @pytest.mark.asyncio()
    async def test_test_respondent_flagged(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        all_yes: dict[str, bool],
    ) -> None:
        response = await api_client.post(
            "/api/v1/responses",
            json={"answers": all_yes, "email": "e2e-runner@agency.org"},
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["exclude_from_stats"] is True
        assert mock_repository.create_response.call_args.kwargs["exclude_from_stats"] is True

    @pytest.mark.asyncio()
    async def test_invalid_email_returns_422(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        all_yes: dict[str, bool],
    ) -> None:
        response = await api_client.post(
            "/api/v1/responses",
            json={"answers": all_yes, "email": "not-an-email"},
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        mock_repository.create_response.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_incomplete_submission_not_stored(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
    ) -> None:
        response = await api_client.post("/api/v1/responses", json={"answers": {"ds_001": True}})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        assert len(response.json()["detail"]["missing"]) == 26
        mock_repository.create_response.assert_not_awaited()

    @pytest.mark.asyncio()
    async def test_results_not_found(self, api_client: AsyncClient) -> None:
        response = await api_client.get(f"/api/v1/results/{_TOKEN}")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio()
    async def test_results_report(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        make_record: Callable[..., ResponseRecord],
        population: list[ResponseRecord],
    ) -> None:
        mock_repository.get_record_by_token.return_value = make_record(22)
        mock_repository.list_records.return_value = population

        response = await api_client.get(f"/api/v1/results/{_TOKEN}")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["score"]["total"] == 22
        assert body["score"]["level"] == "moderate"
        assert len(body["gaps"]) == 5
        assert body["population"]["available"] is True
        assert body["population"]["median_score"] == 15.0
        # below=8, at=1 of 10: 17 / 20 = 85%
        assert body["percentile"]["percentile"] == 85

    @pytest.mark.asyncio()
    async def test_malformed_token_returns_422(self, api_client: AsyncClient) -> None:
        response = await api_client.get("/api/v1/results/not-a-uuid")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio()
    async def test_results_for_retired_version_returns_404(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        make_record: Callable[..., ResponseRecord],
    ) -> None:
        mock_repository.get_record_by_token.return_value = make_record(15, survey_version="0.9")

        response = await api_client.get(f"/api/v1/results/{_TOKEN}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "0.9" in response.json()["detail"]

    @pytest.mark.asyncio()
    async def test_lookup_found(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
    ) -> None:
        mock_repository.get_latest_token_by_email.return_value = _TOKEN

        response = await api_client.get(
            "/api/v1/results/lookup",
            params={"email": "Jane@Agency.org"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json() == {
            "found": True,
            "results_token": str(_TOKEN),
            "results_url": f"/results/{_TOKEN}",
            "message": None,
        }
        mock_repository.get_latest_token_by_email.assert_awaited_once_with("jane@agency.org")

    @pytest.mark.asyncio()
    async def test_lookup_not_found(self, api_client: AsyncClient) -> None:
        response = await api_client.get(
            "/api/v1/results/lookup",
            params={"email": "nobody@agency.org"},
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["found"] is False
        assert response.json()["results_token"] is None

    @pytest.mark.asyncio()
    async def test_lookup_invalid_email_returns_422(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
    ) -> None:
        response = await api_client.get("/api/v1/results/lookup", params={"email": "not-an-email"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
        mock_repository.get_latest_token_by_email.assert_not_awaited()


# ---------------------------------------------------------------------------
# GET /api/v1/stats*
# ---------------------------------------------------------------------------


class TestStats:
    @pytest.mark.asyncio()
    async def test_below_gate(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        population: list[ResponseRecord],
    ) -> None:
        mock_repository.list_records.return_value = population[:9]

        response = await api_client.get("/api/v1/stats")

        assert response.status_code == status.HTTP_200_OK
        body = response.json()
        assert body["available"] is False
        assert body["sample_size"] == 9
        assert body["avg_percentage"] is None

    @pytest.mark.asyncio()
    async def test_available(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        population: list[ResponseRecord],
    ) -> None:
        mock_repository.list_records.return_value = population

        response = await api_client.get("/api/v1/stats", params={"version": "1.0"})

        body = response.json()
        assert body["available"] is True
        assert body["avg_percentage"] == 56
        assert body["p25_score"] == 10.5
        assert body["category_pooling"] == "pooled_items"
        assert body["question_stats"]["ds_001"]["total_responses"] == 10

    @pytest.mark.asyncio()
    async def test_percentile(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        population: list[ResponseRecord],
    ) -> None:
        mock_repository.list_records.return_value = population

        response = await api_client.get("/api/v1/stats/percentile", params={"score": 15})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["percentile"] == 50
        assert response.json()["message"] == "Higher than 50% of respondents"

    @pytest.mark.asyncio()
    @pytest.mark.parametrize("score", [-1, 28])
    async def test_percentile_out_of_range(self, api_client: AsyncClient, score: int) -> None:
        response = await api_client.get("/api/v1/stats/percentile", params={"score": score})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    @pytest.mark.asyncio()
    async def test_by_agency_size(
        self,
        api_client: AsyncClient,
        mock_repository: AsyncMock,
        make_record: Callable[..., ResponseRecord],
    ) -> None:
        mock_repository.list_records.return_value = [
            make_record(18, agency_size="large") for _ in range(10)
        ] + [make_record(9, agency_size="small") for _ in range(4)]

        response = await api_client.get("/api/v1/stats/by-agency-size")

        assert response.status_code == status.HTTP_200_OK
        segments = response.json()["segments"]
        assert segments["large"]["available"] is True
        assert segments["large"]["avg_score"] == 18.0
        assert segments["small"] == {
            "available": False,
            "survey_version": "1.0",
            "sample_size": 4,
            "min_required": 10,
            "avg_percentage": None,
            "avg_score": None,
            "median_score": None,
            "p25_score": None,
            "p75_score": None,
            "category_averages": None,
            "category_pooling": None,
            "question_stats": None,
            "distribution": None,
        }
