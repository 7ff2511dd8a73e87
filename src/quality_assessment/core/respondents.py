"""Respondent email helpers.

Submissions from automated test runs are stored like any other response but
flagged ``exclude_from_stats`` so they never reach population statistics.
A test respondent is recognised by a reserved domain or a local-part prefix.
"""

TEST_EMAIL_DOMAINS: frozenset[str] = frozenset(
    {
        "playwright.local",
        "test.example.com",
        "e2e.example.com",
        "test.local",
    }
)

TEST_EMAIL_PREFIXES: tuple[str, ...] = (
    "test+",
    "e2e-",
    "e2e+",
    "playwright-",
    "playwright+",
    "cypress-",
    "cypress+",
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def extract_email_domain(email: str) -> str | None:
    """Return the domain part of an email, or None if it is not ``local@domain``."""
    parts = normalize_email(email).split("@")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        return None
    return parts[1]


def is_test_email(email: str) -> bool:
    """Return True if the email belongs to a test or synthetic respondent.

    Args:
        email: Respondent email address.

    Returns:
        True for reserved test domains or test local-part prefixes.
    """
    normalized = normalize_email(email)
    domain = extract_email_domain(normalized)
    if domain is not None and domain in TEST_EMAIL_DOMAINS:
        return True
    local_part = normalized.split("@", 1)[0]
    return local_part.startswith(TEST_EMAIL_PREFIXES)
