"""
Request and response models for the analyze endpoint.

JSON keys are camelCase on the wire; unknown or badly typed preference
values fall back to their defaults instead of rejecting the request.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from dinnersnap.orchestrator import AnalyzeRequest, ResultSet
from dinnersnap.recipes.models import DEFAULT_TIME_MINUTES, ENERGY_MODES, PreferenceSet, RecipeCandidate
from dinnersnap.recipes.parsing import finite_or_none

DIETS = ("vegetarian", "vegan", "pescatarian", "none")


def _positive_int(value: Any, default: int) -> int:
    number = finite_or_none(value)
    if number is None or number < 1:
        return default
    return int(number)


# =============================================================================
# Request Models
# =============================================================================

class PrefsIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    time: int = DEFAULT_TIME_MINUTES
    diet: str | None = None
    energy_mode: str | None = Field(default=None, alias="energyMode")
    servings: int = 2
    explore: bool = False
    pantry_only: bool = Field(default=False, alias="pantryOnly")

    @field_validator("time", mode="before")
    @classmethod
    def _time(cls, value: Any) -> int:
        return _positive_int(value, DEFAULT_TIME_MINUTES)

    @field_validator("servings", mode="before")
    @classmethod
    def _servings(cls, value: Any) -> int:
        return _positive_int(value, 2)

    @field_validator("diet", mode="before")
    @classmethod
    def _diet(cls, value: Any) -> str | None:
        text = str(value or "").strip().lower()
        if text == "pescetarian":
            text = "pescatarian"
        return text if text in DIETS else None

    @field_validator("energy_mode", mode="before")
    @classmethod
    def _energy_mode(cls, value: Any) -> str | None:
        text = str(value or "").strip().lower().replace("-", " ")
        if text == "airfryer":
            text = "air fryer"
        return text if text in ENERGY_MODES else None

    @field_validator("explore", "pantry_only", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        # Clients send booleans, 0/1 or "true"/"false"
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)

    def to_preferences(self) -> PreferenceSet:
        return PreferenceSet(
            time=self.time,
            diet=self.diet,
            energy_mode=self.energy_mode,
            servings=self.servings,
            explore=self.explore,
            pantry_only=self.pantry_only,
        )


class AnalyzeRequestIn(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    image_base64: str | None = Field(default=None, alias="imageBase64")
    pantry_override: list[Any] | None = Field(default=None, alias="pantryOverride")
    prefs: PrefsIn = Field(default_factory=PrefsIn)

    @field_validator("prefs", mode="before")
    @classmethod
    def _prefs(cls, value: Any) -> Any:
        return value if isinstance(value, dict) else {}

    @property
    def has_input(self) -> bool:
        return bool((self.image_base64 or "").strip()) or bool(self.pantry_override)

    def to_request(self) -> AnalyzeRequest:
        return AnalyzeRequest(
            image_base64=(self.image_base64 or "").strip() or None,
            pantry_override=tuple(self.pantry_override or ()),
            prefs=self.prefs.to_preferences(),
        )


# =============================================================================
# Response Models
# =============================================================================

class IngredientOut(BaseModel):
    name: str
    have: bool


class StepOut(BaseModel):
    id: str
    text: str


class RecipeOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str
    time: int
    cost: float
    energy: str
    score: float | None = None
    ingredients: list[IngredientOut]
    steps: list[StepOut]
    badges: list[str]
    shopping_list: list[str] = Field(default_factory=list, serialization_alias="shoppingList")

    @classmethod
    def from_candidate(cls, recipe: RecipeCandidate) -> "RecipeOut":
        return cls(
            id=recipe.id,
            title=recipe.title,
            time=recipe.time,
            cost=recipe.cost,
            energy=recipe.energy,
            score=recipe.score,
            ingredients=[IngredientOut(name=i.name, have=i.have) for i in recipe.ingredients],
            steps=[StepOut(id=s.id, text=s.text) for s in recipe.steps],
            badges=[b.value for b in recipe.badges],
            shopping_list=list(recipe.shopping_list),
        )


class AnalyzeResponse(BaseModel):
    pantry: list[str]
    recipes: list[RecipeOut]
    debug: dict[str, Any]

    @classmethod
    def from_result(cls, result: ResultSet) -> "AnalyzeResponse":
        return cls(
            pantry=result.pantry.as_list(),
            recipes=[RecipeOut.from_candidate(r) for r in result.recipes],
            debug=result.diagnostics.as_debug(),
        )
