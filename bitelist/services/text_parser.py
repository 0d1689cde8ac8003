from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

INGREDIENT_HEADINGS = (
    "ingredients:",
    "ingredient:",
    "what you'll need:",
    "you'll need:",
    "ingredients list:",
    "ingredient list:",
    "what you need:",
    "needed:",
    "ingredients required:",
    "required ingredients:",
    "ingredients for:",
)
SECTION_TERMINATORS = ("instructions", "directions", "method", "steps")

MEASUREMENT_UNITS = (
    "tablespoons", "tablespoon", "teaspoons", "teaspoon",
    "milliliters", "milliliter", "kilograms", "kilogram",
    "ounces", "ounce", "pounds", "pound", "liters", "liter",
    "grams", "gram", "cups", "cup", "tbsp", "tsp",
    "lbs", "lb", "oz", "kg", "ml", "g", "l",
)

LIST_MARKER_PATTERN = re.compile(r"^(?:[-*•]|\d+[.)](?!\d))\s*")
MEASUREMENT_PATTERN = re.compile(
    r"^\d+(?:\.\d+)?(?:\s*/\s*\d+)?\s*(?:" + "|".join(MEASUREMENT_UNITS) + r")\b\.?\s*",
    re.IGNORECASE,
)


def _contains_any(line: str, phrases: tuple[str, ...]) -> bool:
    lowered = line.lower()
    return any(phrase in lowered for phrase in phrases)


def clean_ingredient_line(line: str) -> str:
    cleaned = LIST_MARKER_PATTERN.sub("", line.strip(), count=1)
    cleaned = MEASUREMENT_PATTERN.sub("", cleaned, count=1)
    return cleaned.strip()


def find_ingredient_section(text: str | None) -> bool:
    if not text:
        return False
    return any(_contains_any(line, INGREDIENT_HEADINGS) for line in text.splitlines())


def extract_ingredients(text: str | None) -> list[str]:
    """
    Pull an ingredient list out of free-form text without calling a model.

    Scanning starts after the first line containing an ingredient heading and
    stops at the first line mentioning instructions/directions/method/steps.
    An empty list means the text was inconclusive, not that it failed.
    """
    if not text:
        return []

    ingredients: list[str] = []
    in_section = False

    for raw_line in text.splitlines():
        line = raw_line.strip()

        if not in_section:
            in_section = _contains_any(line, INGREDIENT_HEADINGS)
            continue

        if not line:
            continue

        if _contains_any(line, SECTION_TERMINATORS):
            break

        cleaned = clean_ingredient_line(line)
        if cleaned:
            ingredients.append(cleaned)

    logger.debug("Structured parse found %d ingredient(s)", len(ingredients))
    return ingredients
