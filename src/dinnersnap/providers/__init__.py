"""Upstream collaborators: image labeling, recipe search, recipe generation."""

from dinnersnap.providers.base import (
    ProviderError,
    ProviderStatus,
    ProviderTimeout,
    ProviderUnavailable,
    RecipeSource,
    call_with_budget,
)
from dinnersnap.providers.generative import OpenAIRecipeGenerator
from dinnersnap.providers.search import SpoonacularSearch
from dinnersnap.providers.vision import VisionClient, VisionTokens

__all__ = [
    "OpenAIRecipeGenerator",
    "ProviderError",
    "ProviderStatus",
    "ProviderTimeout",
    "ProviderUnavailable",
    "RecipeSource",
    "SpoonacularSearch",
    "VisionClient",
    "VisionTokens",
    "call_with_budget",
]
