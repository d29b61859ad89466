"""
DinnerSnap - Recipe search provider (Spoonacular complexSearch).

Asks for main courses that use the pantry, within the time cap, excluding
alcohol. Returns raw candidates; admissibility is applied by the
orchestrator.
"""

import logging
from typing import Any

import httpx

from dinnersnap.pantry.lexicon import ALCOHOL_WORDS, FISH_PANTRY, MEAT_WORDS
from dinnersnap.pantry.models import Pantry
from dinnersnap.providers.base import (
    ProviderError,
    ProviderUnavailable,
    RecipeSource,
    http_error,
)
from dinnersnap.recipes.models import Badge, PreferenceSet, RawCandidate
from dinnersnap.recipes.parsing import MalformedResponseError, parse_search_response

logger = logging.getLogger(__name__)

SEARCH_URL = "https://api.spoonacular.com/recipes/complexSearch"
RESULT_COUNT = 18

# Spoonacular diet names
_DIETS = {
    "vegetarian": "vegetarian",
    "vegan": "vegan",
    "pescatarian": "pescetarian",
}


def search_diet(pantry: Pantry, prefs: PreferenceSet) -> str | None:
    """
    Diet filter for the search.

    An explicit preference wins; with none stated, a pantry without meat or
    fish asks for vegetarian dishes.
    """
    if prefs.diet == "none":
        return None
    if prefs.diet:
        return _DIETS.get(prefs.diet)
    has_protein = any(p in MEAT_WORDS or p in FISH_PANTRY for p in pantry.items)
    return None if has_protein else "vegetarian"


def build_search_params(pantry: Pantry, prefs: PreferenceSet, api_key: str) -> dict[str, Any]:
    params: dict[str, Any] = {
        "apiKey": api_key,
        "includeIngredients": ",".join(pantry.as_list()),
        "instructionsRequired": "true",
        "addRecipeInformation": "true",
        "fillIngredients": "true",
        "sort": "random" if prefs.explore else "max-used-ingredients",
        "number": str(RESULT_COUNT),
        "ignorePantry": "true",
        "type": "main course",
        "excludeIngredients": ",".join(sorted(ALCOHOL_WORDS)),
        "maxReadyTime": str(prefs.time_cap),
    }
    diet = search_diet(pantry, prefs)
    if diet:
        params["diet"] = diet
    return params


class SpoonacularSearch(RecipeSource):
    """Recipe search via Spoonacular complexSearch."""

    name = "search"
    badge = Badge.WEB

    def __init__(
        self,
        api_key: str | None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._api_key = api_key
        self._transport = transport

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    async def fetch(self, pantry: Pantry, prefs: PreferenceSet) -> list[RawCandidate]:
        if not self.available:
            raise ProviderUnavailable("search: no SPOON_KEY")

        params = build_search_params(pantry, prefs, self._api_key)
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.get(SEARCH_URL, params=params)
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise http_error(self.name, e) from e
        except ValueError as e:
            raise ProviderError(f"search: invalid JSON body: {e}") from e

        try:
            candidates = parse_search_response(payload, prefs.energy_mode or "hob")
        except MalformedResponseError as e:
            raise ProviderError(f"search: {e}") from e

        logger.debug(f"Search returned {len(candidates)} raw candidates")
        return candidates
