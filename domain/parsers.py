"""Turn raw model output into recipes.

Models answer in one of two shapes: line-tagged text (``DISH_NAME: ...``) or
JSON, often wrapped in commentary. Nothing here talks to a model.
"""

import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from domain.errors import RecipeParseError
from domain.models import Recipe, parse_nutrition


logger = logging.getLogger(__name__)

__all__ = [
    "extract_json_object",
    "parse_complete_dish",
    "parse_nutrition",
    "parse_recipe_json",
    "parse_summary_and_recipe",
]


STEP = re.compile(r"^\d+\.\s*")


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Return the first JSON object embedded in ``text`` or None.

    Commentary before and after the object is ignored. Candidates are tried
    from each ``{`` in turn so a stray brace in the preamble does not hide the
    real payload.
    """
    decoder = json.JSONDecoder()
    idx = text.find("{")
    while idx != -1:
        try:
            value, _ = decoder.raw_decode(text, idx)
        except json.JSONDecodeError:
            pass
        else:
            if isinstance(value, dict):
                return value
        idx = text.find("{", idx + 1)
    return None


def parse_recipe_json(text: str) -> Recipe:
    data = extract_json_object(text)
    if data is None:
        raise RecipeParseError("No recipe JSON found in model output.", raw=text)
    try:
        return Recipe.model_validate(data)
    except ValidationError as e:
        raise RecipeParseError(f"Invalid recipe JSON: {e}", raw=text) from e


def parse_complete_dish(text: str) -> Recipe:
    """Parse the ``DISH_NAME:`` / ``INGREDIENTS:`` / ``NUTRITION:`` format."""
    fields: dict[str, Any] = {
        "ingredients": [],
        "instructions": [],
        "nutrition": {},
    }
    section = ""

    for raw_line in text.splitlines():
        line = raw_line.strip()

        if line.startswith("DISH_NAME:"):
            fields["title"] = line.removeprefix("DISH_NAME:").strip()
        elif line.startswith("DESCRIPTION:"):
            fields["description"] = line.removeprefix("DESCRIPTION:").strip()
        elif line == "INGREDIENTS:":
            section = "ingredients"
        elif line == "INSTRUCTIONS:":
            section = "instructions"
        elif line == "NUTRITION:":
            section = "nutrition"
        elif line.startswith("ESTIMATED_TIME:"):
            fields["estimated_time"] = line.removeprefix("ESTIMATED_TIME:").strip()
        elif line.startswith("NOTES:"):
            fields["notes"] = line.removeprefix("NOTES:").strip()
        elif line.startswith("-") and section == "ingredients":
            fields["ingredients"].append(line[1:].strip())
        elif STEP.match(line) and section == "instructions":
            fields["instructions"].append(STEP.sub("", line).strip())
        elif section == "nutrition" and ":" in line:
            key, value = (part.strip() for part in line.split(":", 1))
            fields["nutrition"][key] = value

    return Recipe.model_validate(fields)


def parse_summary_and_recipe(text: str, *, tag: str) -> tuple[str, Recipe]:
    """Split a ``<tag>: ... RECIPE: {json}`` response.

    Raises:
        RecipeParseError: The RECIPE section is missing or not a valid object.
            Whatever summary was found travels on the error.
    """
    summary_match = re.search(
        rf"{re.escape(tag)}:(.*?)(RECIPE:|\n\{{|\{{)", text, flags=re.DOTALL
    )
    summary = summary_match.group(1).strip() if summary_match else ""

    marker = text.find("RECIPE:")
    if marker == -1:
        logger.warning("No RECIPE section in response: %s", text)
        raise RecipeParseError(
            "No recipe JSON found in response.", raw=text, summary=summary
        )

    segment = text[marker + len("RECIPE:") :].strip()
    try:
        recipe = parse_recipe_json(segment)
    except RecipeParseError as e:
        logger.warning("Could not parse RECIPE section: %s", segment)
        raise RecipeParseError(
            "Failed to parse recipe JSON.", raw=segment, summary=summary
        ) from e
    return summary, recipe
