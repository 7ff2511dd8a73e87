"""Percentile Ranker using the mid-rank method.

    percentile = round_half_up((below + 0.5 * at) / total * 100)

``below`` counts scores strictly lower than the target and ``at`` counts
equal scores, so ties share credit: if everyone has the same score, everyone
sits at the 50th percentile. The formula is evaluated exactly as
``(2 * below + at) / (2 * total)``.

``percentile`` is the pure formula and only refuses an empty distribution.
``PercentileRanker.rank`` applies the same inclusion filter and
minimum-sample gate as the population aggregator before ranking.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from quality_assessment.core.population import (
    MIN_RESPONSES,
    ResponseRecord,
    check_min_responses,
    filter_included,
)
from quality_assessment.core.scoring import percentage_of
from quality_assessment.observability import get_logger

logger = get_logger(__name__)


def percentile_from_frequencies(score: int, frequencies: Mapping[int, int]) -> int | None:
    """Mid-rank percentile of ``score`` within a score-to-count distribution.

    Args:
        score: Score to rank.
        frequencies: Mapping of score to number of respondents with that score.

    Returns:
        Percentile 0-100, or None when the distribution is empty.
    """
    total = sum(frequencies.values())
    if total <= 0:
        return None
    below = sum(count for value, count in frequencies.items() if value < score)
    at = frequencies.get(score, 0)
    return percentage_of(2 * below + at, 2 * total)


def percentile(score: int, distribution: Iterable[int]) -> int | None:
    """Mid-rank percentile of ``score`` within a list of scores.

    Args:
        score: Score to rank.
        distribution: One score per included respondent.

    Returns:
        Percentile 0-100, or None when the distribution is empty.
    """
    frequencies: dict[int, int] = {}
    for value in distribution:
        frequencies[value] = frequencies.get(value, 0) + 1
    return percentile_from_frequencies(score, frequencies)


@dataclass(frozen=True)
class PercentileResult:
    """Percentile of one score against the included population."""

    score: int
    survey_version: str
    sample_size: int
    min_required: int
    percentile: int | None = None

    @property
    def available(self) -> bool:
        return self.percentile is not None

    @property
    def message(self) -> str:
        if self.percentile is None:
            return "Not enough responses for percentile calculation"
        return f"Higher than {self.percentile}% of respondents"

    def to_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "survey_version": self.survey_version,
            "available": self.available,
            "percentile": self.percentile,
            "sample_size": self.sample_size,
            "min_required": self.min_required,
            "message": self.message,
        }


class PercentileRanker:
    """Ranks scores against stored responses behind the minimum-sample gate."""

    def __init__(self, min_responses: int = MIN_RESPONSES) -> None:
        self._min_responses = check_min_responses(min_responses)

    @property
    def min_responses(self) -> int:
        return self._min_responses

    def rank(
        self,
        score: int,
        survey_version: str,
        responses: Iterable[ResponseRecord],
    ) -> PercentileResult:
        """Rank a score against the included records of a survey version.

        Args:
            score: Total score to rank.
            survey_version: Version whose population is the reference.
            responses: Records read from the response store.

        Returns:
            PercentileResult; ``percentile`` is None below the gate.
        """
        included = filter_included(survey_version, responses)
        sample_size = len(included)

        if sample_size < self._min_responses:
            logger.debug(
                "Percentile gated",
                survey_version=survey_version,
                sample_size=sample_size,
                min_required=self._min_responses,
            )
            return PercentileResult(
                score=score,
                survey_version=survey_version,
                sample_size=sample_size,
                min_required=self._min_responses,
            )

        rank = percentile(score, (record.total_score for record in included))
        return PercentileResult(
            score=score,
            survey_version=survey_version,
            sample_size=sample_size,
            min_required=self._min_responses,
            percentile=rank,
        )
