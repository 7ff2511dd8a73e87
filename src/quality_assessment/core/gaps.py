"""Gap Analyzer: questions answered "no", with their category context.

Gaps are listed in the catalog's question order, never in the order the
answers were supplied, so reports and tests are reproducible.
"""

from collections.abc import Mapping
from dataclasses import dataclass

from quality_assessment.core.catalog import Catalog


@dataclass(frozen=True)
class Gap:
    """A practice the respondent has not yet adopted."""

    question_id: str
    question_text: str
    category_id: str
    category_name: str

    def to_dict(self) -> dict[str, str]:
        return {
            "question_id": self.question_id,
            "question_text": self.question_text,
            "category_id": self.category_id,
            "category_name": self.category_name,
        }


def find_gaps(answers: Mapping[str, object], catalog: Catalog) -> list[Gap]:
    """List the active questions whose answer is exactly ``False``.

    ``True``, missing, or non-boolean values are never gaps. Completeness of
    the answer set is checked upstream by the score calculator.

    Args:
        answers: Mapping of question id to answer.
        catalog: Catalog of the survey version.

    Returns:
        Gaps in catalog order.
    """
    gaps: list[Gap] = []
    for question in catalog.active_questions:
        if answers.get(question.id) is not False:
            continue
        category = catalog.get_category(question.category_id)
        gaps.append(
            Gap(
                question_id=question.id,
                question_text=question.text,
                category_id=question.category_id,
                category_name=category.name if category else question.category_id,
            )
        )
    return gaps


def gaps_by_category(answers: Mapping[str, object], catalog: Catalog) -> dict[str, list[Gap]]:
    """Group gaps by category.

    Args:
        answers: Mapping of question id to answer.
        catalog: Catalog of the survey version.

    Returns:
        Every category id in catalog order, mapped to its (possibly empty) gaps.
    """
    grouped: dict[str, list[Gap]] = {category.id: [] for category in catalog.categories}
    for gap in find_gaps(answers, catalog):
        grouped[gap.category_id].append(gap)
    return grouped
