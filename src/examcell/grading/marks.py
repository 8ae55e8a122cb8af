"""Marks -> percentage -> letter grade."""

from __future__ import annotations

COMPONENT_MAX = 100.0

# (minimum percentage, letter), checked top-down
GRADE_BANDS: list[tuple[float, str]] = [
    (90, "A+"),
    (80, "A"),
    (70, "B+"),
    (60, "B"),
    (50, "C+"),
    (45, "C"),
    (40, "D"),
    (0, "F"),
]


def clamp(value: float, low: float = 0.0, high: float = COMPONENT_MAX) -> float:
    return max(low, min(high, value))


def total_marks(internal1: float, internal2: float, external: float) -> tuple[float, float]:
    """Sum the three assessment components.

    Each component is clamped to 0..100.

    Returns:
        Tuple of (obtained, maximum).
    """
    components = (internal1, internal2, external)
    obtained = sum(clamp(c) for c in components)
    return obtained, COMPONENT_MAX * len(components)


def percentage(obtained: float, maximum: float) -> float:
    if maximum <= 0:
        return 0.0
    return clamp(obtained / maximum * 100)


def grade_from_percentage(pct: float) -> str:
    pct = clamp(pct)
    for minimum, letter in GRADE_BANDS:
        if pct >= minimum:
            return letter
    return "F"


def grade_for_components(internal1: float, internal2: float, external: float) -> str:
    obtained, maximum = total_marks(internal1, internal2, external)
    return grade_from_percentage(percentage(obtained, maximum))
