"""Service layer orchestrating scoring, persistence, and population comparison.

Workflow:
    1. evaluate()                  score an answer set without storing it
    2. submit_response()           validate, score, and persist a submission
    3. get_results()               recompute a stored submission's full report
    4. lookup_results()            results link of an email's latest submission
    5. get_population_statistics() gated statistics for a survey version
    6. get_percentile()            gated percentile for an arbitrary score
    7. get_statistics_by_segment() gated statistics per agency-size segment

Every population figure comes from exactly one response store read per call.
No SQLAlchemy or FastAPI imports belong here.
"""

import uuid
from collections.abc import Mapping

from quality_assessment.core.catalog import Catalog
from quality_assessment.core.gaps import find_gaps, gaps_by_category
from quality_assessment.core.interfaces import IResponseRepository
from quality_assessment.core.percentile import PercentileRanker, PercentileResult
from quality_assessment.core.performance import PerformanceClassifier
from quality_assessment.core.population import PopulationAggregator, PopulationStatistics
from quality_assessment.core.questions import get_catalog
from quality_assessment.core.respondents import is_test_email, normalize_email
from quality_assessment.core.scoring import calculate_score, score_summary
from quality_assessment.errors import ResponseNotFoundError, ValidationError
from quality_assessment.observability import get_logger
from quality_assessment.settings import Settings

logger = get_logger(__name__)


class SurveyService:
    """Orchestrates the scoring and benchmarking workflow.

    Depends on a repository injected at construction time and on engine
    components built from configuration. Contains no framework-specific code.
    """

    def __init__(
        self,
        repository: IResponseRepository,
        classifier: PerformanceClassifier | None = None,
        aggregator: PopulationAggregator | None = None,
        ranker: PercentileRanker | None = None,
        results_base_path: str = "/results",
    ) -> None:
        """Initialise the service.

        Args:
            repository: Response store implementing IResponseRepository.
            classifier: Performance classifier; defaults to standard thresholds.
            aggregator: Population aggregator; defaults to the standard gate.
            ranker: Percentile ranker; defaults to the standard gate.
            results_base_path: Path prefix for results links.
        """
        self._repository = repository
        self._classifier = classifier or PerformanceClassifier()
        self._aggregator = aggregator or PopulationAggregator(classifier=self._classifier)
        self._ranker = ranker or PercentileRanker(min_responses=self._aggregator.min_responses)
        self._results_base_path = results_base_path.rstrip("/")

    @classmethod
    def from_settings(cls, repository: IResponseRepository, settings: Settings) -> "SurveyService":
        """Build a service whose engine tunables come from Settings."""
        classifier = PerformanceClassifier(
            strong_min=settings.performance_strong_min,
            moderate_min=settings.performance_moderate_min,
            labels=settings.performance_labels,
            colors=settings.performance_colors,
        )
        return cls(
            repository=repository,
            classifier=classifier,
            aggregator=PopulationAggregator(
                min_responses=settings.min_responses,
                category_pooling=settings.category_pooling,
                classifier=classifier,
            ),
            ranker=PercentileRanker(min_responses=settings.min_responses),
            results_base_path=settings.results_base_path,
        )

    @property
    def classifier(self) -> PerformanceClassifier:
        return self._classifier

    def get_catalog(self, survey_version: str) -> Catalog:
        """Return the catalog for a version.

        Raises:
            UnknownSurveyVersionError: If the version is not registered.
        """
        return get_catalog(survey_version)

    def evaluate(
        self,
        answers: Mapping[str, bool],
        survey_version: str,
    ) -> dict[str, object]:
        """Score an answer set and list its gaps without persisting anything.

        Args:
            answers: Complete mapping of question id to boolean answer.
            survey_version: Version the answers were given against.

        Returns:
            Dict with survey_version, score summary, gaps, and gaps_by_category.

        Raises:
            UnknownSurveyVersionError: If the version is not registered.
            ValidationError: If the answers do not match the version.
        """
        catalog = get_catalog(survey_version)
        return self._build_report(answers, catalog)

    async def submit_response(
        self,
        answers: Mapping[str, bool],
        survey_version: str,
        email: str | None = None,
        agency_size: str | None = None,
        role: str | None = None,
    ) -> dict[str, object]:
        """Validate, score, and persist a completed survey.

        Submissions from test respondents are stored with
        ``exclude_from_stats=True``.

        Args:
            answers: Complete mapping of question id to boolean answer.
            survey_version: Version the answers were given against.
            email: Respondent email, optional.
            agency_size: Agency size segment, optional.
            role: Respondent role, optional.

        Returns:
            Dict with response_id, results_token, results_url, score, and
            exclude_from_stats.

        Raises:
            UnknownSurveyVersionError: If the version is not registered.
            ValidationError: If the answers do not match the version.
        """
        catalog = get_catalog(survey_version)
        result = calculate_score(answers, catalog)

        normalized_email = normalize_email(email) if email else None
        exclude_from_stats = bool(normalized_email and is_test_email(normalized_email))

        record = await self._repository.create_response(
            survey_version=survey_version,
            total_score=result.total,
            max_possible_score=result.max_possible,
            answers=dict(answers),
            respondent_email=normalized_email,
            agency_size=agency_size,
            role=role,
            exclude_from_stats=exclude_from_stats,
        )

        logger.info(
            "Survey response submitted",
            response_id=str(record.id),
            survey_version=survey_version,
            total_score=result.total,
            percentage=result.percentage,
            exclude_from_stats=exclude_from_stats,
        )

        return {
            "response_id": record.id,
            "results_token": record.results_token,
            "results_url": f"{self._results_base_path}/{record.results_token}",
            "survey_version": survey_version,
            "score": {
                "total": result.total,
                "max_possible": result.max_possible,
                "percentage": result.percentage,
            },
            "exclude_from_stats": exclude_from_stats,
        }

    async def get_results(self, results_token: uuid.UUID) -> dict[str, object]:
        """Build the full results report for a stored submission.

        Scores are recomputed from the stored answers, never read back from a
        cache. Population statistics and the percentile share one store read.

        Args:
            results_token: Token returned by submit_response.

        Returns:
            Report dict with score, gaps, population, and percentile sections.

        Raises:
            ResponseNotFoundError: If the token is unknown.
            UnknownSurveyVersionError: If the stored version is no longer registered.
        """
        record = await self._repository.get_record_by_token(results_token)
        if record is None:
            raise ResponseNotFoundError(f"No survey results found for token {results_token}.")

        catalog = get_catalog(record.survey_version)
        report = self._build_report(record.answers, catalog)

        population_records = await self._repository.list_records(record.survey_version)
        statistics = self._aggregator.aggregate(record.survey_version, population_records)
        ranking = self._ranker.rank(record.total_score, record.survey_version, population_records)

        logger.info(
            "Results report built",
            survey_version=record.survey_version,
            sample_size=statistics.sample_size,
            population_available=statistics.available,
            percentile=ranking.percentile,
        )

        return {
            **report,
            "results_token": results_token,
            "completed_at": record.completed_at,
            "population": statistics.to_dict(),
            "percentile": ranking.to_dict(),
        }

    async def lookup_results(self, email: str) -> dict[str, object]:
        """Find the results link of a respondent's most recent submission.

        The email is normalised before matching. Test and soft-deleted
        submissions are never returned.

        Args:
            email: Respondent email as entered.

        Returns:
            Dict with found, results_token, results_url, and message.
        """
        results_token = await self._repository.get_latest_token_by_email(normalize_email(email))
        if results_token is None:
            logger.info("Results lookup found nothing")
            return {
                "found": False,
                "results_token": None,
                "results_url": None,
                "message": "No completed survey found for this email.",
            }

        logger.info("Results lookup matched", results_token=str(results_token))
        return {
            "found": True,
            "results_token": results_token,
            "results_url": f"{self._results_base_path}/{results_token}",
            "message": None,
        }

    async def get_population_statistics(self, survey_version: str) -> PopulationStatistics:
        """Return gated population statistics for a version.

        Raises:
            UnknownSurveyVersionError: If the version is not registered.
        """
        get_catalog(survey_version)
        records = await self._repository.list_records(survey_version)
        statistics = self._aggregator.aggregate(survey_version, records)

        logger.info(
            "Population statistics requested",
            survey_version=survey_version,
            sample_size=statistics.sample_size,
            available=statistics.available,
        )
        return statistics

    async def get_percentile(self, score: int, survey_version: str) -> PercentileResult:
        """Return the gated percentile of a score within a version's population.

        Raises:
            UnknownSurveyVersionError: If the version is not registered.
            ValidationError: If the score is outside 0..max_score.
        """
        catalog = get_catalog(survey_version)
        if not 0 <= score <= catalog.max_score:
            raise ValidationError(
                f"Score must be between 0 and {catalog.max_score} for survey version "
                f"{survey_version!r}, got {score}"
            )

        records = await self._repository.list_records(survey_version)
        return self._ranker.rank(score, survey_version, records)

    async def get_statistics_by_segment(
        self,
        survey_version: str,
    ) -> dict[str, PopulationStatistics]:
        """Return statistics per agency-size segment, each gated separately.

        Raises:
            UnknownSurveyVersionError: If the version is not registered.
        """
        get_catalog(survey_version)
        records = await self._repository.list_records(survey_version)
        return self._aggregator.aggregate_by_segment(survey_version, records)

    def _build_report(
        self,
        answers: Mapping[str, bool],
        catalog: Catalog,
    ) -> dict[str, object]:
        result = calculate_score(answers, catalog)
        return {
            "survey_version": catalog.version.version,
            "score": score_summary(result, self._classifier),
            "gaps": [gap.to_dict() for gap in find_gaps(answers, catalog)],
            "gaps_by_category": {
                category_id: [gap.to_dict() for gap in gaps]
                for category_id, gaps in gaps_by_category(answers, catalog).items()
            },
        }
