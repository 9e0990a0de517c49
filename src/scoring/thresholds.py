"""Label bands, display colors and names for readiness scores."""

from __future__ import annotations

from src.scoring.models import DimensionName, ReadinessLabel

# Lower bounds are inclusive; checked top-down.
LABEL_THRESHOLDS: tuple[tuple[int, ReadinessLabel], ...] = (
    (90, "exceptional"),
    (75, "strong"),
    (60, "good"),
    (40, "getting_there"),
)

LABEL_COLORS: dict[ReadinessLabel, str] = {
    "exceptional": "gold",
    "strong": "green",
    "good": "lime",
    "getting_there": "yellow",
    "needs_work": "red",
}

READABLE_LABELS: dict[ReadinessLabel, str] = {
    "exceptional": "Exceptional",
    "strong": "Strong",
    "good": "Good",
    "getting_there": "Getting There",
    "needs_work": "Needs Work",
}

DIMENSION_COLOR_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (85, "gold"),
    (70, "green"),
    (55, "lime"),
    (40, "yellow"),
)

DIMENSION_DISPLAY_NAMES: dict[DimensionName, dict[str, str | int]] = {
    "uniqueness": {
        "name": "Uniqueness",
        "description": "Standing out from other candidates",
        "issue_number": 1,
    },
    "impact": {
        "name": "Impact",
        "description": "Quantified achievements with metrics",
        "issue_number": 2,
    },
    "context_translation": {
        "name": "U.S. Context",
        "description": "Company and experience translation",
        "issue_number": 3,
    },
    "cultural_fit": {
        "name": "Cultural Fit",
        "description": "Soft skills and collaboration evidence",
        "issue_number": 4,
    },
    "customization": {
        "name": "Customization",
        "description": "Job-specific keyword and skill alignment",
        "issue_number": 5,
    },
}


def score_label(score: float) -> ReadinessLabel:
    """Map a 0-100 score to its label band."""
    for minimum, label in LABEL_THRESHOLDS:
        if score >= minimum:
            return label
    return "needs_work"


def label_color(label: ReadinessLabel) -> str:
    return LABEL_COLORS[label]


def readable_label(label: ReadinessLabel) -> str:
    return READABLE_LABELS[label]


def dimension_color(raw: float) -> str:
    """Display color for a raw dimension score."""
    for minimum, color in DIMENSION_COLOR_THRESHOLDS:
        if raw >= minimum:
            return color
    return "red"
