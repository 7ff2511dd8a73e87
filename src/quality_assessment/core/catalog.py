"""Catalog Reader: immutable question and category definitions per survey version.

A Catalog bundles one SurveyVersion with the categories and questions it
references. Question-to-category membership is an explicit foreign key
(``Question.category_id``); nothing is inferred from id formats.

Catalogs are validated once when they are registered. Any inconsistency
(unknown category, empty category, max scores that do not add up) is a
deployment defect and raises ConfigurationError.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from functools import cached_property

from quality_assessment.errors import ConfigurationError, ValidationError


@dataclass(frozen=True)
class Question:
    """A single yes/no question.

    Attributes:
        id: Stable opaque identifier, never reused across versions (e.g. 'ds_001').
        category_id: Foreign key to the owning Category.
        text: Question text presented to respondents.
        version_added: Survey version that introduced the question.
        version_deprecated: Version in which the question was retired, if any.
        replaced_by: Id of the question that supersedes this one, if reworded.
    """

    id: str
    category_id: str
    text: str
    version_added: str
    version_deprecated: str | None = None
    replaced_by: str | None = None


@dataclass(frozen=True)
class Category:
    """A group of questions scored together.

    Attributes:
        id: Category identifier (e.g. 'daily_sessions').
        name: Display name.
        max_score: Number of active questions in the category for the version.
        short_name: Compact display name for charts.
        description: One-line summary of what the category covers.
    """

    id: str
    name: str
    max_score: int
    short_name: str = ""
    description: str = ""


@dataclass(frozen=True)
class SurveyVersion:
    """A closed, immutable set of active question ids.

    Attributes:
        version: Version string in major.minor form (e.g. '1.0').
        question_ids: Ordered active question ids.
        max_score: Total achievable score; equals len(question_ids).
        released_at: ISO date of release.
        changelog: Optional human-readable change description.
    """

    version: str
    question_ids: tuple[str, ...]
    max_score: int
    released_at: str = ""
    changelog: str = ""


@dataclass(frozen=True)
class AnswerValidation:
    """Outcome of checking an answer set against a version."""

    missing: tuple[str, ...]
    extra: tuple[str, ...]
    invalid: tuple[str, ...]

    @property
    def valid(self) -> bool:
        return not (self.missing or self.extra or self.invalid)


@dataclass(frozen=True)
class Catalog:
    """Read-only view over one survey version's questions and categories."""

    version: SurveyVersion
    categories: tuple[Category, ...]
    questions: tuple[Question, ...]

    @cached_property
    def _questions_by_id(self) -> dict[str, Question]:
        return {question.id: question for question in self.questions}

    @cached_property
    def _categories_by_id(self) -> dict[str, Category]:
        return {category.id: category for category in self.categories}

    @cached_property
    def active_questions(self) -> tuple[Question, ...]:
        """Active questions in the version's declared order."""
        return tuple(self._questions_by_id[qid] for qid in self.version.question_ids)

    @property
    def max_score(self) -> int:
        return self.version.max_score

    def get_question(self, question_id: str) -> Question | None:
        return self._questions_by_id.get(question_id)

    def get_category(self, category_id: str) -> Category | None:
        return self._categories_by_id.get(category_id)

    def questions_for_category(self, category_id: str) -> tuple[Question, ...]:
        """Return the active questions of a category in catalog order."""
        return tuple(q for q in self.active_questions if q.category_id == category_id)

    def category_for_question(self, question_id: str) -> Category | None:
        question = self.get_question(question_id)
        if question is None:
            return None
        return self.get_category(question.category_id)

    def validate(self) -> "Catalog":
        """Check the catalog invariants.

        Returns:
            The catalog itself, so registration can chain the call.

        Raises:
            ConfigurationError: If any invariant is violated.
        """
        version = self.version
        label = f"survey version {version.version!r}"

        if len(self._questions_by_id) != len(self.questions):
            raise ConfigurationError(f"{label}: duplicate question ids in catalog")
        if len(self._categories_by_id) != len(self.categories):
            raise ConfigurationError(f"{label}: duplicate category ids in catalog")
        if len(set(version.question_ids)) != len(version.question_ids):
            raise ConfigurationError(f"{label}: duplicate ids in question_ids")

        unknown = [qid for qid in version.question_ids if qid not in self._questions_by_id]
        if unknown:
            raise ConfigurationError(f"{label}: question_ids not in catalog: {unknown}")

        if version.max_score <= 0:
            raise ConfigurationError(f"{label}: max_score must be positive")
        if version.max_score != len(version.question_ids):
            raise ConfigurationError(
                f"{label}: max_score {version.max_score} does not match "
                f"{len(version.question_ids)} active questions"
            )

        for question in self.active_questions:
            if question.category_id not in self._categories_by_id:
                raise ConfigurationError(
                    f"{label}: question {question.id!r} references unknown "
                    f"category {question.category_id!r}"
                )

        for category in self.categories:
            if category.max_score <= 0:
                raise ConfigurationError(
                    f"{label}: category {category.id!r} has max_score {category.max_score}"
                )
            active_count = len(self.questions_for_category(category.id))
            if category.max_score != active_count:
                raise ConfigurationError(
                    f"{label}: category {category.id!r} max_score {category.max_score} "
                    f"does not match {active_count} active questions"
                )

        category_total = sum(category.max_score for category in self.categories)
        if category_total != version.max_score:
            raise ConfigurationError(
                f"{label}: category max scores sum to {category_total}, "
                f"expected {version.max_score}"
            )
        return self

    def validate_answers(self, answers: Mapping[str, object]) -> AnswerValidation:
        """Compare answer keys and values with the version's active questions.

        Args:
            answers: Mapping of question id to answer.

        Returns:
            AnswerValidation listing missing, extra, and non-boolean entries.
        """
        required = self.version.question_ids
        missing = tuple(qid for qid in required if qid not in answers)
        required_set = set(required)
        extra = tuple(sorted(key for key in answers if key not in required_set))
        invalid = tuple(
            qid for qid in required if qid in answers and not isinstance(answers[qid], bool)
        )
        return AnswerValidation(missing=missing, extra=extra, invalid=invalid)

    def require_valid_answers(self, answers: Mapping[str, object]) -> None:
        """Raise ValidationError unless the answers exactly match the version.

        Raises:
            ValidationError: On missing, extra, or non-boolean answers.
        """
        report = self.validate_answers(answers)
        if report.valid:
            return

        problems: list[str] = []
        if report.missing:
            problems.append(f"missing {len(report.missing)} answer(s): {list(report.missing)}")
        if report.extra:
            problems.append(f"unexpected question id(s): {list(report.extra)}")
        if report.invalid:
            problems.append(f"non-boolean answer(s): {list(report.invalid)}")

        raise ValidationError(
            f"Answers do not match survey version {self.version.version!r}: "
            + "; ".join(problems),
            missing=report.missing,
            extra=report.extra,
            invalid=report.invalid,
        )
