"""Data models for recipe candidates and user preferences."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

Diet = Literal["vegetarian", "vegan", "pescatarian", "none"]
EnergyMode = Literal["hob", "oven", "air fryer", "microwave"]

ENERGY_MODES: tuple[str, ...] = ("hob", "oven", "air fryer", "microwave")
DEFAULT_TIME_MINUTES = 25


class Badge(str, Enum):
    """Provenance of a recipe."""

    WEB = "web"
    LLM = "llm"
    LOCAL = "local"


@dataclass(frozen=True)
class PreferenceSet:
    """Soft constraints for one request. Every field has a default."""

    time: int = DEFAULT_TIME_MINUTES
    diet: Diet | None = None
    energy_mode: EnergyMode | None = None
    servings: int = 2
    explore: bool = False
    pantry_only: bool = False

    @property
    def time_cap(self) -> int:
        """Ready-time ceiling: 10 minutes of slack, never below 10."""
        return max(10, self.time + 10)


@dataclass(frozen=True)
class Step:
    id: str
    text: str


@dataclass(frozen=True)
class IngredientLine:
    name: str
    have: bool


@dataclass(frozen=True)
class RawCandidate:
    """
    Provider-neutral recipe candidate, before admissibility.

    Built by the parse step at each provider boundary; every field is
    validated and defaulted there.
    """

    source_id: str
    source: Badge
    title: str
    ingredient_names: tuple[str, ...] = ()
    dish_types: tuple[str, ...] = ()
    ready_in_minutes: int | None = None
    used_count: int = 0
    missed_count: int = 0
    steps: tuple[Step, ...] = ()
    cost: float = 2.5
    energy: EnergyMode = "hob"


@dataclass(frozen=True)
class RecipeCandidate:
    """A normalized recipe ready to show the user."""

    id: str
    title: str
    time: int
    cost: float
    energy: EnergyMode
    ingredients: tuple[IngredientLine, ...] = ()
    steps: tuple[Step, ...] = ()
    badges: tuple[Badge, ...] = ()
    score: float | None = None
    shopping_list: tuple[str, ...] = field(default_factory=tuple)

    def has_badge(self, badge: Badge) -> bool:
        return badge in self.badges
