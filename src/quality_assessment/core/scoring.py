"""Score Calculator for the yes/no quality questionnaire.

Converts one respondent's complete answer set into a total score and a
per-category breakdown. Each "yes" answer is worth one point; a category's
maximum equals its number of active questions.

Percentages use round-half-up on exact rational values, so 12.5 becomes 13
and 0.5 becomes 1 regardless of float representation. Rounding happens once,
at the point a percentage is produced.

This module is intentionally independent of the database and web layers so
that scoring can be unit-tested without any infrastructure.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from fractions import Fraction

from quality_assessment.core.catalog import Catalog, Category
from quality_assessment.core.performance import PerformanceClassifier
from quality_assessment.errors import ConfigurationError
from quality_assessment.observability import get_logger

logger = get_logger(__name__)


def round_half_up(value: Fraction | int | float) -> int:
    """Round a non-negative number to the nearest integer, halves rounding up.

    Args:
        value: Exact or float value to round.

    Returns:
        The rounded integer.
    """
    return math.floor(Fraction(value) + Fraction(1, 2))


def percentage_of(numerator: int | Fraction, denominator: int | Fraction) -> int:
    """Return ``round_half_up(numerator / denominator * 100)`` computed exactly.

    Raises:
        ZeroDivisionError: If denominator is zero. Callers guard against this.
    """
    return round_half_up(Fraction(numerator) * 100 / Fraction(denominator))


@dataclass(frozen=True)
class CategoryScore:
    """Score for a single category."""

    category_id: str
    category_name: str
    score: int
    max_score: int
    percentage: int

    def to_dict(self) -> dict[str, object]:
        return {
            "category_id": self.category_id,
            "category_name": self.category_name,
            "score": self.score,
            "max_score": self.max_score,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class ScoreResult:
    """Total and per-category scores for one answer set.

    Attributes:
        total: Number of "yes" answers.
        max_possible: Version max score.
        percentage: round_half_up(total / max_possible * 100).
        categories: Category scores in catalog order.
    """

    total: int
    max_possible: int
    percentage: int
    categories: tuple[CategoryScore, ...]

    def to_dict(self) -> dict[str, object]:
        return {
            "total": self.total,
            "max_possible": self.max_possible,
            "percentage": self.percentage,
            "categories": [category.to_dict() for category in self.categories],
        }


def _category_score(
    answers: Mapping[str, bool],
    catalog: Catalog,
    category: Category,
) -> CategoryScore:
    if category.max_score <= 0:
        raise ConfigurationError(
            f"Category {category.id!r} has max_score {category.max_score}"
        )

    score = sum(
        1 for question in catalog.questions_for_category(category.id)
        if answers.get(question.id) is True
    )
    return CategoryScore(
        category_id=category.id,
        category_name=category.name,
        score=score,
        max_score=category.max_score,
        percentage=percentage_of(score, category.max_score),
    )


def calculate_score(answers: Mapping[str, bool], catalog: Catalog) -> ScoreResult:
    """Score a complete answer set against its survey version.

    Args:
        answers: Mapping of every active question id to a boolean answer.
        catalog: Catalog of the version the answers were given against.

    Returns:
        ScoreResult with total, percentage, and category breakdown.

    Raises:
        ValidationError: If answers are missing, extra, or non-boolean.
        ConfigurationError: If the catalog max score is not positive.
    """
    catalog.require_valid_answers(answers)

    max_possible = catalog.max_score
    if max_possible <= 0:
        raise ConfigurationError(
            f"Survey version {catalog.version.version!r} has max_score {max_possible}"
        )

    total = sum(1 for qid in catalog.version.question_ids if answers[qid] is True)
    categories = tuple(
        _category_score(answers, catalog, category) for category in catalog.categories
    )

    result = ScoreResult(
        total=total,
        max_possible=max_possible,
        percentage=percentage_of(total, max_possible),
        categories=categories,
    )

    logger.debug(
        "Score calculated",
        survey_version=catalog.version.version,
        total=result.total,
        max_possible=result.max_possible,
        percentage=result.percentage,
    )
    return result


def calculate_category_score(
    answers: Mapping[str, bool],
    catalog: Catalog,
    category_id: str,
) -> CategoryScore | None:
    """Score a single category.

    Only the category's own questions are read, so a partial answer set is
    acceptable here. Unanswered questions earn no point.

    Args:
        answers: Mapping of question id to boolean answer.
        catalog: Catalog of the survey version.
        category_id: Category to score.

    Returns:
        CategoryScore, or None if the category does not exist in the catalog.
    """
    category = catalog.get_category(category_id)
    if category is None:
        return None
    return _category_score(answers, catalog, category)


def score_summary(
    result: ScoreResult,
    classifier: PerformanceClassifier,
) -> dict[str, object]:
    """Decorate a ScoreResult with performance level, label, and colour.

    Args:
        result: Output of calculate_score.
        classifier: Configured performance classifier.

    Returns:
        JSON-serialisable dict for the overall score and each category.
    """
    overall = classifier.describe(result.percentage)
    return {
        "total": result.total,
        "max_possible": result.max_possible,
        "percentage": result.percentage,
        "level": overall.level.value,
        "label": overall.label,
        "color": overall.color,
        "categories": [
            {
                **category.to_dict(),
                **classifier.describe(category.percentage).to_dict(),
            }
            for category in result.categories
        ],
    }
