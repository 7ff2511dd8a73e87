"""Performance Classifier: percentage to qualitative tier.

Tiers are evaluated from highest to lowest with inclusive lower bounds.
Default boundaries:

    Tier               Percentage   Label                 Colour
    -----------------  -----------  --------------------  -------
    strong             90-100       Strong Alignment      emerald
    moderate           70-89        Moderate Alignment    amber
    needs_improvement  0-69         Needs Improvement     rose

The boundaries set the tone of every result a respondent sees, so they are
configuration (see Settings.performance_*), never derived at runtime.
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from enum import Enum

from quality_assessment.errors import ConfigurationError


class PerformanceLevel(str, Enum):
    """Qualitative performance tier, ordered from lowest to highest."""

    NEEDS_IMPROVEMENT = "needs_improvement"
    MODERATE = "moderate"
    STRONG = "strong"

    @property
    def rank(self) -> int:
        """Ordinal position; higher means better performance."""
        return _LEVEL_RANKS[self]


_LEVEL_RANKS: dict[PerformanceLevel, int] = {
    PerformanceLevel.NEEDS_IMPROVEMENT: 0,
    PerformanceLevel.MODERATE: 1,
    PerformanceLevel.STRONG: 2,
}

DEFAULT_STRONG_MIN: int = 90
DEFAULT_MODERATE_MIN: int = 70

DEFAULT_LABELS: dict[str, str] = {
    PerformanceLevel.STRONG.value: "Strong Alignment",
    PerformanceLevel.MODERATE.value: "Moderate Alignment",
    PerformanceLevel.NEEDS_IMPROVEMENT.value: "Needs Improvement",
}

DEFAULT_COLORS: dict[str, str] = {
    PerformanceLevel.STRONG.value: "emerald",
    PerformanceLevel.MODERATE.value: "amber",
    PerformanceLevel.NEEDS_IMPROVEMENT.value: "rose",
}


@dataclass(frozen=True)
class PerformanceDescriptor:
    """Tier plus its display metadata."""

    level: PerformanceLevel
    label: str
    color: str

    def to_dict(self) -> dict[str, str]:
        return {"level": self.level.value, "label": self.label, "color": self.color}


class PerformanceClassifier:
    """Maps a 0-100 percentage to a PerformanceLevel.

    Instances are immutable after construction and safe to share between
    concurrent requests.
    """

    def __init__(
        self,
        strong_min: int = DEFAULT_STRONG_MIN,
        moderate_min: int = DEFAULT_MODERATE_MIN,
        labels: Mapping[str, str] | None = None,
        colors: Mapping[str, str] | None = None,
    ) -> None:
        """Initialise the classifier.

        Args:
            strong_min: Lowest percentage classified as strong.
            moderate_min: Lowest percentage classified as moderate.
            labels: Display label per level value. Defaults to DEFAULT_LABELS.
            colors: Display colour per level value. Defaults to DEFAULT_COLORS.

        Raises:
            ConfigurationError: If thresholds are out of order or metadata is incomplete.
        """
        if not (0 <= moderate_min <= strong_min <= 100):
            raise ConfigurationError(
                "Performance thresholds must satisfy 0 <= moderate_min <= strong_min <= 100, "
                f"got moderate_min={moderate_min}, strong_min={strong_min}"
            )

        resolved_labels = {**DEFAULT_LABELS, **(labels or {})}
        resolved_colors = {**DEFAULT_COLORS, **(colors or {})}
        unknown = (set(resolved_labels) | set(resolved_colors)) - {
            level.value for level in PerformanceLevel
        }
        if unknown:
            raise ConfigurationError(f"Unknown performance levels in metadata: {sorted(unknown)}")

        # Highest tier first; the first bound the percentage reaches wins.
        self._thresholds: tuple[tuple[int, PerformanceLevel], ...] = (
            (strong_min, PerformanceLevel.STRONG),
            (moderate_min, PerformanceLevel.MODERATE),
        )
        self._descriptors: dict[PerformanceLevel, PerformanceDescriptor] = {
            level: PerformanceDescriptor(
                level=level,
                label=resolved_labels[level.value],
                color=resolved_colors[level.value],
            )
            for level in PerformanceLevel
        }

    @property
    def strong_min(self) -> int:
        return self._thresholds[0][0]

    @property
    def moderate_min(self) -> int:
        return self._thresholds[1][0]

    def classify(self, percentage: int) -> PerformanceLevel:
        """Return the tier for a percentage.

        Args:
            percentage: Score percentage, normally 0-100.

        Returns:
            The highest tier whose lower bound the percentage reaches.
        """
        for threshold, level in self._thresholds:
            if percentage >= threshold:
                return level
        return PerformanceLevel.NEEDS_IMPROVEMENT

    def describe(self, percentage: int) -> PerformanceDescriptor:
        return self._descriptors[self.classify(percentage)]

    def label(self, percentage: int) -> str:
        return self.describe(percentage).label

    def color(self, percentage: int) -> str:
        return self.describe(percentage).color

    def metadata(self) -> list[dict[str, object]]:
        """Return every tier with its lower bound, highest first."""
        bounds = {
            PerformanceLevel.STRONG: self.strong_min,
            PerformanceLevel.MODERATE: self.moderate_min,
            PerformanceLevel.NEEDS_IMPROVEMENT: 0,
        }
        return [
            {**self._descriptors[level].to_dict(), "min_percentage": bounds[level]}
            for level in sorted(PerformanceLevel, key=lambda lvl: lvl.rank, reverse=True)
        ]

    def distribution(self, percentages: Iterable[int]) -> dict[str, int]:
        """Count how many percentages fall into each tier.

        Args:
            percentages: Percentages to classify.

        Returns:
            Mapping of every level value to its count (zero when absent).
        """
        counts = {level.value: 0 for level in PerformanceLevel}
        for percentage in percentages:
            counts[self.classify(percentage).value] += 1
        return counts
