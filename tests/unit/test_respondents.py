"""Unit tests for test-respondent detection."""

import pytest

from quality_assessment.core.respondents import (
    extract_email_domain,
    is_test_email,
    normalize_email,
)


class TestIsTestEmail:
    @pytest.mark.parametrize(
        "email",
        [
            "qa@playwright.local",
            "someone@test.example.com",
            "runner@E2E.example.com",
            "Test+signup@gmail.com",
            "e2e-user@agency.org",
            "playwright+42@agency.org",
            "cypress-run@agency.org",
        ],
    )
    def test_test_addresses_detected(self, email: str) -> None:
        assert is_test_email(email)

    @pytest.mark.parametrize(
        "email",
        [
            "jane@agency.org",
            "testing@agency.org",
            "e2e@agency.org",
            "bcba@example.com",
        ],
    )
    def test_real_addresses_pass(self, email: str) -> None:
        assert not is_test_email(email)


class TestEmailHelpers:
    def test_normalize(self) -> None:
        assert normalize_email("  Jane.Doe@Agency.ORG ") == "jane.doe@agency.org"

    def test_extract_domain(self) -> None:
        assert extract_email_domain("a@B.com ") == "b.com"

    @pytest.mark.parametrize("email", ["not-an-email", "@agency.org", "jane@", "a@b@c"])
    def test_extract_domain_malformed(self, email: str) -> None:
        assert extract_email_domain(email) is None
