"""Unit tests for Settings validation and environment overrides."""

import pytest
from pydantic import ValidationError as PydanticValidationError

from quality_assessment.settings import Settings


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.min_responses == 10
        assert settings.performance_strong_min == 90
        assert settings.performance_moderate_min == 70
        assert settings.category_pooling == "pooled_items"
        assert settings.current_survey_version == "1.0"

    def test_environment_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("QUALITY_ASSESSMENT_MIN_RESPONSES", "25")
        monkeypatch.setenv("QUALITY_ASSESSMENT_CATEGORY_POOLING", "respondent_mean")

        settings = Settings()

        assert settings.min_responses == 25
        assert settings.category_pooling == "respondent_mean"

    def test_misordered_thresholds_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(performance_strong_min=60, performance_moderate_min=80)

    def test_zero_min_responses_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(min_responses=0)

    def test_unknown_pooling_rejected(self) -> None:
        with pytest.raises(PydanticValidationError):
            Settings(category_pooling="median")
