"""Quality Assessment scoring and population benchmarking service.

Scores yes/no quality questionnaires, classifies performance tiers, lists
unmet practices, and ranks each respondent against everyone else who has
answered the same survey version.
"""

__version__ = "0.1.0"
