"""
DinnerSnap - Provider response parsing.

Every provider boundary has an explicit parse step: the raw JSON is
validated and defaulted field by field before a RawCandidate is built.
A response that cannot be parsed at all raises MalformedResponseError; a
single bad item inside an otherwise valid response is skipped.
"""

import json
import logging
import math
import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from dinnersnap.pantry.models import Pantry
from dinnersnap.recipes.admissibility import count_overlap
from dinnersnap.recipes.models import ENERGY_MODES, Badge, RawCandidate, Step

logger = logging.getLogger(__name__)

DEFAULT_WEB_COST = 2.5
DEFAULT_LLM_COST = 2.0
DEFAULT_LLM_TIME = 20


class MalformedResponseError(ValueError):
    """A provider response body that cannot be interpreted."""


# =============================================================================
# Shared normalization helpers
# =============================================================================

def parse_duration(duration: Any) -> int | None:
    """
    Parse a ready time to whole minutes.

    Examples:
        25 -> 25
        "25" -> 25
        "PT1H30M" -> 90
        "soon" -> None
    """
    if duration is None or isinstance(duration, bool):
        return None

    if isinstance(duration, (int, float)):
        return _whole_minutes(finite_or_none(duration))

    text = str(duration).strip()
    if not text:
        return None

    match = re.fullmatch(r"PT(?:(\d+)H)?(?:(\d+)M)?", text)
    if match and (match.group(1) or match.group(2)):
        return int(match.group(1) or 0) * 60 + int(match.group(2) or 0)

    return _whole_minutes(finite_or_none(text))


def _whole_minutes(value: float | None) -> int | None:
    if value is None or value < 0:
        return None
    return int(value)


def finite_or_none(value: Any) -> float | None:
    """A finite float from a number or numeric string, else None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return None
    # "1e999" and "nan" parse as floats but are not quantities
    return number if math.isfinite(number) else None


def infer_energy_mode(texts: list[str], default: str = "hob") -> str:
    """
    Guess the appliance from instruction text.

    Examples:
        ["Preheat the oven to 200C"] -> "oven"
        ["Air fry for 12 minutes"] -> "air fryer"
    """
    joined = " ".join(texts).lower()
    if re.search(r"air[\s-]?fr(y|ier|yer)", joined):
        return "air fryer"
    if "microwave" in joined:
        return "microwave"
    if re.search(r"\b(oven|bake|baking|roast|preheat)\b", joined):
        return "oven"
    return default if default in ENERGY_MODES else "hob"


def _coerce_energy(value: Any) -> str:
    text = str(value or "").strip().lower().replace("-", " ")
    if text in ("airfryer", "air fry"):
        text = "air fryer"
    return text if text in ENERGY_MODES else "hob"


def strip_code_fences(content: str) -> str:
    """Remove a surrounding ```json ... ``` block if the model added one."""
    content = content.strip()
    if content.startswith("```"):
        lines = content.split("\n")
        lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        content = "\n".join(lines)
    return content


# =============================================================================
# Recipe search (Spoonacular complexSearch)
# =============================================================================

class SearchIngredient(BaseModel):
    name: str | None = None


class SearchStep(BaseModel):
    number: int | None = None
    step: str | None = None


class SearchInstructions(BaseModel):
    steps: list[SearchStep] = []


class SearchRecipe(BaseModel):
    """One complexSearch result (addRecipeInformation=true)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | str
    title: str = ""
    ready_in_minutes: Any = Field(default=None, alias="readyInMinutes")
    used_ingredient_count: int = Field(default=0, alias="usedIngredientCount")
    missed_ingredient_count: int = Field(default=0, alias="missedIngredientCount")
    dish_types: list[str] = Field(default_factory=list, alias="dishTypes")
    extended_ingredients: list[SearchIngredient] = Field(
        default_factory=list, alias="extendedIngredients"
    )
    analyzed_instructions: list[SearchInstructions] = Field(
        default_factory=list, alias="analyzedInstructions"
    )
    price_per_serving: float | None = Field(default=None, alias="pricePerServing")
    servings: int | None = None

    @field_validator("price_per_serving", mode="before")
    @classmethod
    def _finite_price(cls, value: Any) -> float | None:
        return finite_or_none(value)

    @field_validator("used_ingredient_count", "missed_ingredient_count", mode="before")
    @classmethod
    def _none_is_zero(cls, value: Any) -> Any:
        return 0 if value is None else value

    @field_validator("dish_types", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("title", mode="before")
    @classmethod
    def _none_is_blank(cls, value: Any) -> Any:
        return "" if value is None else value


def _search_cost(recipe: SearchRecipe) -> float:
    # pricePerServing is in US cents
    servings = finite_or_none(recipe.servings)
    if recipe.price_per_serving and servings:
        total = finite_or_none(recipe.price_per_serving * servings / 100)
        if total is not None:
            return round(total, 2)
    return DEFAULT_WEB_COST


def parse_search_response(payload: Any, energy_default: str = "hob") -> list[RawCandidate]:
    """Build RawCandidates from a complexSearch response body."""
    if not isinstance(payload, dict):
        raise MalformedResponseError("search response is not an object")
    results = payload.get("results")
    if results is None:
        return []
    if not isinstance(results, list):
        raise MalformedResponseError("search 'results' is not a list")

    candidates = []
    for item in results:
        try:
            recipe = SearchRecipe.model_validate(item)
        except ValidationError as e:
            logger.debug(f"Skipping malformed search result: {e.error_count()} errors")
            continue

        steps_raw = recipe.analyzed_instructions[0].steps if recipe.analyzed_instructions else []
        steps = tuple(
            Step(id=f"web-{recipe.id}-s{i}", text=s.step.strip())
            for i, s in enumerate(steps_raw)
            if s.step and s.step.strip()
        )
        candidates.append(RawCandidate(
            source_id=f"web-{recipe.id}",
            source=Badge.WEB,
            title=recipe.title.strip() or "Untitled recipe",
            ingredient_names=tuple(
                i.name.strip().lower() for i in recipe.extended_ingredients if i.name and i.name.strip()
            ),
            dish_types=tuple(d.lower() for d in recipe.dish_types if isinstance(d, str)),
            ready_in_minutes=parse_duration(recipe.ready_in_minutes),
            used_count=max(0, recipe.used_ingredient_count),
            missed_count=max(0, recipe.missed_ingredient_count),
            steps=steps,
            cost=_search_cost(recipe),
            energy=infer_energy_mode([s.text for s in steps], energy_default),
        ))
    return candidates


# =============================================================================
# Generative recipes (chat completion JSON object)
# =============================================================================

class GeneratedIngredient(BaseModel):
    name: str = ""

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return "" if value is None else str(value)


class GeneratedStep(BaseModel):
    id: str | None = None
    text: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("text", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return "" if value is None else str(value)


class GeneratedRecipe(BaseModel):
    """One recipe as the model was asked to shape it."""

    id: str | None = None
    title: str = "Pantry dinner"
    time: int = DEFAULT_LLM_TIME
    cost: float = DEFAULT_LLM_COST
    energy: str = "hob"
    ingredients: list[GeneratedIngredient] = []
    steps: list[GeneratedStep] = []

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        return None if value is None else str(value)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, value: Any) -> str:
        return "Pantry dinner" if value is None else str(value)

    @field_validator("time", mode="before")
    @classmethod
    def _time(cls, value: Any) -> int:
        minutes = parse_duration(value)
        return DEFAULT_LLM_TIME if minutes is None else minutes

    @field_validator("cost", mode="before")
    @classmethod
    def _cost(cls, value: Any) -> float:
        cost = finite_or_none(value)
        return DEFAULT_LLM_COST if cost is None else cost

    @field_validator("energy", mode="before")
    @classmethod
    def _energy(cls, value: Any) -> str:
        return _coerce_energy(value)

    @field_validator("ingredients", mode="before")
    @classmethod
    def _ingredients(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [{"name": v} if isinstance(v, str) else v for v in value]

    @field_validator("steps", mode="before")
    @classmethod
    def _steps(cls, value: Any) -> list:
        if not isinstance(value, list):
            return []
        return [{"text": v} if isinstance(v, str) else v for v in value]


class GeneratedBatch(BaseModel):
    recipes: list[GeneratedRecipe] = []


def parse_generated_recipes(content: str | None, pantry: Pantry) -> list[RawCandidate]:
    """
    Build RawCandidates from the model's JSON content.

    Used/missed counts are computed against the pantry since the model
    does not report them.
    """
    if not content or not content.strip():
        raise MalformedResponseError("empty generative content")

    try:
        data = json.loads(strip_code_fences(content))
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"generative content is not JSON: {e}") from e

    if isinstance(data, list):
        data = {"recipes": data}
    try:
        batch = GeneratedBatch.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"generative JSON has the wrong shape: {e.error_count()} errors") from e

    candidates = []
    for idx, recipe in enumerate(batch.recipes, start=1):
        raw_id = (recipe.id or "").strip() or str(idx)
        source_id = raw_id if raw_id.startswith("llm-") else f"llm-{raw_id}"
        names = tuple(i.name.strip().lower() for i in recipe.ingredients if i.name.strip())
        used, missed = count_overlap(names, pantry)
        candidates.append(RawCandidate(
            source_id=source_id,
            source=Badge.LLM,
            title=recipe.title.strip() or "Pantry dinner",
            ingredient_names=names,
            ready_in_minutes=recipe.time,
            used_count=used,
            missed_count=missed,
            steps=tuple(
                Step(id=s.id or f"{source_id}-s{i}", text=s.text.strip())
                for i, s in enumerate(recipe.steps)
                if s.text.strip()
            ),
            cost=recipe.cost,
            energy=recipe.energy,
        ))
    return candidates
