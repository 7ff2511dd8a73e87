"""Population Aggregator: live descriptive statistics over stored responses.

Statistics are recomputed from the supplied records on every call; there is
no incremental state, so calling ``aggregate`` twice on the same snapshot
returns identical results.

Processing order is fixed:

1. Inclusion filter. Records flagged ``exclude_from_stats`` (test or synthetic
   data) and records from other survey versions are dropped before anything
   else is computed.
2. Minimum-sample gate. Below ``min_responses`` included records the result
   is ``available=False`` and carries no figures at all.
3. Figures. Percentages are accumulated as exact fractions and rounded
   half-up once, when the statistic is produced.

Category averages support two semantics, chosen by configuration:

    pooled_items     yes answers / all answers in the category, pooled over
                     every included record (default)
    respondent_mean  mean of each record's own category percentage
"""

import math
import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from fractions import Fraction

from quality_assessment.core.catalog import Catalog
from quality_assessment.core.performance import PerformanceClassifier
from quality_assessment.core.questions import get_catalog
from quality_assessment.core.scoring import percentage_of, round_half_up
from quality_assessment.errors import ConfigurationError
from quality_assessment.observability import get_logger

logger = get_logger(__name__)

# Minimum included responses before any population figure is exposed.
MIN_RESPONSES: int = 10


class CategoryPooling(str, Enum):
    """How per-category population averages are computed."""

    POOLED_ITEMS = "pooled_items"
    RESPONDENT_MEAN = "respondent_mean"


@dataclass(frozen=True)
class ResponseRecord:
    """Read contract for one stored survey submission.

    Attributes:
        id: Response identifier.
        survey_version: Version the answers were given against.
        total_score: Number of "yes" answers.
        max_possible_score: Version max score at submission time.
        answers: Question id to boolean answer.
        completed_at: Submission timestamp.
        exclude_from_stats: True for test or synthetic data.
        agency_size: Optional segment used for segmented statistics.
    """

    id: uuid.UUID | str
    survey_version: str
    total_score: int
    max_possible_score: int
    answers: Mapping[str, bool] = field(default_factory=dict)
    completed_at: datetime | None = None
    exclude_from_stats: bool = False
    agency_size: str | None = None

    @property
    def score_fraction(self) -> Fraction:
        return Fraction(self.total_score, self.max_possible_score)


@dataclass(frozen=True)
class QuestionStatistics:
    """Population answer rate for one question."""

    yes_percentage: int
    total_responses: int

    def to_dict(self) -> dict[str, int]:
        return {"yes_percentage": self.yes_percentage, "total_responses": self.total_responses}


@dataclass(frozen=True)
class PopulationStatistics:
    """Snapshot of population statistics for one survey version.

    When ``available`` is False only the version, sample size, and gate
    threshold are populated.
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
    category_averages: Mapping[str, int] = field(default_factory=dict)
    question_stats: Mapping[str, QuestionStatistics] = field(default_factory=dict)
    distribution: Mapping[str, int] = field(default_factory=dict)
    category_pooling: str = CategoryPooling.POOLED_ITEMS.value

    def to_dict(self) -> dict[str, object]:
        base: dict[str, object] = {
            "available": self.available,
            "survey_version": self.survey_version,
            "sample_size": self.sample_size,
            "min_required": self.min_required,
        }
        if not self.available:
            return base
        return {
            **base,
            "avg_percentage": self.avg_percentage,
            "avg_score": self.avg_score,
            "median_score": self.median_score,
            "p25_score": self.p25_score,
            "p75_score": self.p75_score,
            "category_averages": dict(self.category_averages),
            "category_pooling": self.category_pooling,
            "question_stats": {
                qid: stats.to_dict() for qid, stats in self.question_stats.items()
            },
            "distribution": dict(self.distribution),
        }


def is_included(record: ResponseRecord, survey_version: str) -> bool:
    """Return True if a record may influence statistics for ``survey_version``."""
    return (
        not record.exclude_from_stats
        and record.survey_version == survey_version
        and record.max_possible_score > 0
    )


def filter_included(
    survey_version: str,
    responses: Iterable[ResponseRecord],
) -> list[ResponseRecord]:
    """Apply the inclusion filter, preserving input order."""
    return [record for record in responses if is_included(record, survey_version)]


def median(values: Sequence[int]) -> float:
    """Median of integer values; the mean of the two middle values for even counts.

    Raises:
        ValueError: If values is empty.
    """
    if not values:
        raise ValueError("median of an empty sequence")
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 1:
        return float(ordered[middle])
    return float(Fraction(ordered[middle - 1] + ordered[middle], 2))


def quantile(values: Sequence[int], q: float) -> float:
    """Continuous quantile with linear interpolation between closest ranks.

    Matches SQL ``percentile_cont``: position ``q * (n - 1)`` in the sorted values.

    Raises:
        ValueError: If values is empty or q is outside 0-1.
    """
    if not values:
        raise ValueError("quantile of an empty sequence")
    if not 0.0 <= q <= 1.0:
        raise ValueError(f"q must be within 0-1, got {q}")
    ordered = sorted(values)
    position = Fraction(q) * (len(ordered) - 1)
    lower = math.floor(position)
    upper = math.ceil(position)
    weight = position - lower
    value = ordered[lower] + (ordered[upper] - ordered[lower]) * weight
    return float(value)


def check_min_responses(min_responses: int) -> int:
    """Return the gate threshold; a gate below 1 would admit an empty population."""
    if min_responses < 1:
        raise ConfigurationError(f"min_responses must be at least 1, got {min_responses}")
    return min_responses


def _one_decimal(value: Fraction) -> float:
    return round_half_up(value * 10) / 10


class PopulationAggregator:
    """Computes gated population statistics for one survey version.

    Holds only configuration; every call starts from the records it is given.
    """

    def __init__(
        self,
        min_responses: int = MIN_RESPONSES,
        category_pooling: CategoryPooling | str = CategoryPooling.POOLED_ITEMS,
        classifier: PerformanceClassifier | None = None,
        catalog_lookup: Callable[[str], Catalog] = get_catalog,
    ) -> None:
        """Initialise the aggregator.

        Args:
            min_responses: Minimum-sample gate threshold.
            category_pooling: Category averaging semantic.
            classifier: Classifier used for the tier distribution.
            catalog_lookup: Resolves a version string to its Catalog.

        Raises:
            ConfigurationError: If min_responses is below 1.
        """
        self._min_responses = check_min_responses(min_responses)
        self._category_pooling = CategoryPooling(category_pooling)
        self._classifier = classifier or PerformanceClassifier()
        self._catalog_lookup = catalog_lookup

    @property
    def min_responses(self) -> int:
        return self._min_responses

    @property
    def category_pooling(self) -> CategoryPooling:
        return self._category_pooling

    def aggregate(
        self,
        survey_version: str,
        responses: Iterable[ResponseRecord],
    ) -> PopulationStatistics:
        """Compute population statistics for a survey version.

        Args:
            survey_version: Version to aggregate.
            responses: Records read from the response store. May contain
                excluded or other-version records; they are filtered first.

        Returns:
            PopulationStatistics, with ``available=False`` below the gate.

        Raises:
            UnknownSurveyVersionError: If the version has no catalog.
        """
        included = filter_included(survey_version, responses)
        sample_size = len(included)

        if sample_size < self._min_responses:
            logger.debug(
                "Population statistics gated",
                survey_version=survey_version,
                sample_size=sample_size,
                min_required=self._min_responses,
            )
            return PopulationStatistics(
                available=False,
                survey_version=survey_version,
                sample_size=sample_size,
                min_required=self._min_responses,
            )

        catalog = self._catalog_lookup(survey_version)
        scores = [record.total_score for record in included]

        mean_fraction = sum((record.score_fraction for record in included), Fraction(0)) / sample_size
        mean_score = Fraction(sum(scores), sample_size)
        record_percentages = [
            percentage_of(record.total_score, record.max_possible_score) for record in included
        ]

        statistics = PopulationStatistics(
            available=True,
            survey_version=survey_version,
            sample_size=sample_size,
            min_required=self._min_responses,
            avg_percentage=round_half_up(mean_fraction * 100),
            avg_score=_one_decimal(mean_score),
            median_score=median(scores),
            p25_score=quantile(scores, 0.25),
            p75_score=quantile(scores, 0.75),
            category_averages=self._category_averages(included, catalog),
            question_stats=_question_statistics(included, catalog),
            distribution=self._classifier.distribution(record_percentages),
            category_pooling=self._category_pooling.value,
        )

        logger.debug(
            "Population statistics computed",
            survey_version=survey_version,
            sample_size=sample_size,
            avg_percentage=statistics.avg_percentage,
            median_score=statistics.median_score,
        )
        return statistics

    def aggregate_by_segment(
        self,
        survey_version: str,
        responses: Iterable[ResponseRecord],
        segment_of: Callable[[ResponseRecord], str | None] = lambda record: record.agency_size,
    ) -> dict[str, PopulationStatistics]:
        """Aggregate separately for each segment, each behind its own gate.

        Records whose segment is None are left out of every segment.

        Args:
            survey_version: Version to aggregate.
            responses: Records read from the response store.
            segment_of: Extracts the segment key from a record.

        Returns:
            Segment key to statistics, keys sorted.
        """
        groups: dict[str, list[ResponseRecord]] = {}
        for record in filter_included(survey_version, responses):
            key = segment_of(record)
            if key is None:
                continue
            groups.setdefault(key, []).append(record)

        return {
            key: self.aggregate(survey_version, groups[key])
            for key in sorted(groups)
        }

    def _category_averages(
        self,
        records: Sequence[ResponseRecord],
        catalog: Catalog,
    ) -> dict[str, int]:
        # Per category: [yes, answered] pooled, plus per-record fractions.
        pooled: dict[str, list[int]] = {category.id: [0, 0] for category in catalog.categories}
        per_record: dict[str, list[Fraction]] = {category.id: [] for category in catalog.categories}

        for record in records:
            record_counts: dict[str, list[int]] = {}
            for question_id, answer in record.answers.items():
                question = catalog.get_question(question_id)
                if question is None or question.category_id not in pooled:
                    continue
                counts = record_counts.setdefault(question.category_id, [0, 0])
                counts[1] += 1
                if answer is True:
                    counts[0] += 1

            for category_id, (yes, answered) in record_counts.items():
                pooled[category_id][0] += yes
                pooled[category_id][1] += answered
                per_record[category_id].append(Fraction(yes, answered))

        averages: dict[str, int] = {}
        for category in catalog.categories:
            if self._category_pooling is CategoryPooling.POOLED_ITEMS:
                yes, answered = pooled[category.id]
                if answered:
                    averages[category.id] = percentage_of(yes, answered)
            else:
                fractions = per_record[category.id]
                if fractions:
                    averages[category.id] = round_half_up(
                        sum(fractions, Fraction(0)) * 100 / len(fractions)
                    )
        return averages


def _question_statistics(
    records: Sequence[ResponseRecord],
    catalog: Catalog,
) -> dict[str, QuestionStatistics]:
    stats: dict[str, QuestionStatistics] = {}
    for question in catalog.active_questions:
        answers = [
            record.answers[question.id] for record in records if question.id in record.answers
        ]
        if not answers:
            continue
        yes = sum(1 for answer in answers if answer is True)
        stats[question.id] = QuestionStatistics(
            yes_percentage=percentage_of(yes, len(answers)),
            total_responses=len(answers),
        )
    return stats
