"""Recipe candidates: models, provider parsing, admissibility, emergency fallback."""

from dinnersnap.recipes.admissibility import FilterOutcome, Strictness, filter_candidates, score
from dinnersnap.recipes.emergency import emergency_recipe
from dinnersnap.recipes.models import (
    Badge,
    IngredientLine,
    PreferenceSet,
    RawCandidate,
    RecipeCandidate,
    Step,
)

__all__ = [
    "Badge",
    "FilterOutcome",
    "IngredientLine",
    "PreferenceSet",
    "RawCandidate",
    "RecipeCandidate",
    "Step",
    "Strictness",
    "emergency_recipe",
    "filter_candidates",
    "score",
]
