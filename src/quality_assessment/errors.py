"""Exception hierarchy for the Quality Assessment service.

Engine and service code raise these; the API layer maps them onto HTTP
status codes. Insufficient population data is never an error and has no
exception here.
"""

from collections.abc import Iterable


class QualityAssessmentError(Exception):
    """Base class for all service-specific errors."""


class ValidationError(QualityAssessmentError):
    """Raised when an answer set does not match its declared survey version.

    Attributes:
        missing: Question ids required by the version but absent from the answers.
        extra: Answer keys that are not active questions in the version.
        invalid: Question ids whose answer value is not a boolean.
    """

    def __init__(
        self,
        message: str,
        missing: Iterable[str] = (),
        extra: Iterable[str] = (),
        invalid: Iterable[str] = (),
    ) -> None:
        super().__init__(message)
        self.missing: list[str] = list(missing)
        self.extra: list[str] = list(extra)
        self.invalid: list[str] = list(invalid)


class UnknownSurveyVersionError(ValidationError):
    """Raised when a caller references a survey version with no catalog."""

    def __init__(self, version: str) -> None:
        super().__init__(f"Survey version {version!r} is not defined.")
        self.version = version


class ConfigurationError(QualityAssessmentError):
    """Raised when the catalog or classifier configuration is internally inconsistent.

    This is fatal for the deployment and must not be retried per request.
    """


class ResponseNotFoundError(QualityAssessmentError):
    """Raised when no stored response matches a results token."""
