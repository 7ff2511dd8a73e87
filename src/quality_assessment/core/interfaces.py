"""Abstract interfaces (Protocol classes) for the Quality Assessment service.

Services depend on these interfaces, not on concrete implementations, so
they can be tested with in-memory or mock repositories. Concrete
implementations live in ``adapters/repositories.py``.
"""

import uuid
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from quality_assessment.core.population import ResponseRecord


@runtime_checkable
class IResponseStore(Protocol):
    """Read contract the population aggregator needs from the response store."""

    async def list_records(self, survey_version: str) -> list[ResponseRecord]:
        """Return stored, not soft-deleted records for a survey version.

        Implementations may pre-filter excluded records; the engine filters
        again regardless.
        """
        ...


@runtime_checkable
class IResponseRepository(IResponseStore, Protocol):
    """Write and lookup operations for survey submissions."""

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
    ) -> Any:
        """Persist one submission with its answers and return the stored row."""
        ...

    async def get_record_by_token(self, results_token: uuid.UUID) -> ResponseRecord | None:
        """Return the record for a results token, or None if unknown."""
        ...

    async def get_latest_token_by_email(self, respondent_email: str) -> uuid.UUID | None:
        """Return the newest counted submission's results token for an email, or None."""
        ...
