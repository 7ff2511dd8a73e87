"""Shared fixtures for quality-assessment tests.

Provides the v1.0 catalog, canned answer sets, and a ResponseRecord factory
used by the engine, service, and API tests.
"""

import uuid
from collections.abc import Callable
from datetime import datetime, timezone

import pytest

from quality_assessment.core.catalog import Catalog
from quality_assessment.core.population import ResponseRecord
from quality_assessment.core.questions import get_catalog


@pytest.fixture()
def catalog() -> Catalog:
    """The registered v1.0 catalog (27 questions, 5 categories)."""
    return get_catalog("1.0")


@pytest.fixture()
def answers_with_score(catalog: Catalog) -> Callable[[int], dict[str, bool]]:
    """Factory: complete answer set whose first ``n`` questions are yes."""

    def _build(n: int) -> dict[str, bool]:
        return {qid: index < n for index, qid in enumerate(catalog.version.question_ids)}

    return _build


@pytest.fixture()
def all_yes(answers_with_score: Callable[[int], dict[str, bool]]) -> dict[str, bool]:
    return answers_with_score(27)


@pytest.fixture()
def all_no(answers_with_score: Callable[[int], dict[str, bool]]) -> dict[str, bool]:
    return answers_with_score(0)


@pytest.fixture()
def make_record(
    answers_with_score: Callable[[int], dict[str, bool]],
) -> Callable[..., ResponseRecord]:
    """Factory for stored response records with a consistent answer set.

    Usage: ``make_record(15, exclude_from_stats=True, agency_size="small")``.
    """

    def _build(
        score: int,
        survey_version: str = "1.0",
        exclude_from_stats: bool = False,
        agency_size: str | None = None,
        max_possible_score: int = 27,
    ) -> ResponseRecord:
        return ResponseRecord(
            id=uuid.uuid4(),
            survey_version=survey_version,
            total_score=score,
            max_possible_score=max_possible_score,
            answers=answers_with_score(score),
            completed_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
            exclude_from_stats=exclude_from_stats,
            agency_size=agency_size,
        )

    return _build
