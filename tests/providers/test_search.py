"""Tests for the Spoonacular recipe search source."""

import asyncio

import httpx
import pytest

from dinnersnap.pantry import normalize
from dinnersnap.providers.base import ProviderError, ProviderUnavailable
from dinnersnap.providers.search import SEARCH_URL, SpoonacularSearch, build_search_params
from dinnersnap.recipes.models import PreferenceSet


def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


SEARCH_RESPONSE = {
    "results": [
        {
            "id": 101,
            "title": "Chickpea Curry",
            "readyInMinutes": 20,
            "usedIngredientCount": 3,
            "missedIngredientCount": 1,
            "dishTypes": ["main course"],
            "extendedIngredients": [{"name": "chickpeas"}, {"name": "onion"}, {"name": "garlic"}],
            "analyzedInstructions": [{"steps": [{"number": 1, "step": "Bake in the oven."}]}],
        }
    ],
    "totalResults": 1,
}


class TestBuildSearchParams:

    def test_defaults(self, chickpea_pantry):
        params = build_search_params(chickpea_pantry, PreferenceSet(time=25), "k")

        assert params["apiKey"] == "k"
        assert params["includeIngredients"] == "chickpeas,garlic,onion,tomatoes"
        assert params["maxReadyTime"] == "35"
        assert params["type"] == "main course"
        assert params["number"] == "18"
        assert params["sort"] == "max-used-ingredients"
        assert "gin" in params["excludeIngredients"].split(",")
        assert params["diet"] == "vegetarian"

    def test_meat_in_pantry_drops_vegetarian_default(self):
        params = build_search_params(normalize(["chicken", "rice"]), PreferenceSet(), "k")
        assert "diet" not in params

    @pytest.mark.parametrize("diet,expected", [
        ("vegan", "vegan"),
        ("pescatarian", "pescetarian"),
        ("none", None),
    ])
    def test_explicit_diet(self, chickpea_pantry, diet, expected):
        params = build_search_params(chickpea_pantry, PreferenceSet(diet=diet), "k")
        assert params.get("diet") == expected

    def test_explore_randomizes(self, chickpea_pantry):
        params = build_search_params(chickpea_pantry, PreferenceSet(explore=True), "k")
        assert params["sort"] == "random"


class TestSpoonacularSearch:

    def test_fetch(self, chickpea_pantry, prefs):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = f"{request.url.scheme}://{request.url.host}{request.url.path}"
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json=SEARCH_RESPONSE)

        search = SpoonacularSearch("spoon-test", transport=httpx.MockTransport(handler))
        [raw] = _run(search.fetch(chickpea_pantry, prefs))

        assert seen["url"] == SEARCH_URL
        assert seen["params"]["apiKey"] == "spoon-test"
        assert raw.source_id == "web-101"
        assert raw.energy == "oven"

    def test_non_finite_ready_time_is_not_fatal(self, chickpea_pantry, prefs):
        body = b'{"results": [{"id": 7, "title": "Chickpea Stew", "readyInMinutes": 1e999}]}'
        transport = httpx.MockTransport(lambda r: httpx.Response(200, content=body))

        [raw] = _run(SpoonacularSearch("spoon-test", transport=transport).fetch(chickpea_pantry, prefs))

        assert raw.source_id == "web-7"
        assert raw.ready_in_minutes is None

    def test_rate_limited_is_retryable(self, chickpea_pantry, prefs):
        search = SpoonacularSearch("spoon-test", transport=httpx.MockTransport(lambda r: httpx.Response(429)))

        with pytest.raises(ProviderError) as exc_info:
            _run(search.fetch(chickpea_pantry, prefs))
        assert exc_info.value.retryable

    def test_bad_key_is_permanent(self, chickpea_pantry, prefs):
        search = SpoonacularSearch("wrong", transport=httpx.MockTransport(lambda r: httpx.Response(401)))

        with pytest.raises(ProviderError) as exc_info:
            _run(search.fetch(chickpea_pantry, prefs))
        assert not exc_info.value.retryable

    def test_malformed_body(self, chickpea_pantry, prefs):
        transport = httpx.MockTransport(lambda r: httpx.Response(200, json={"results": "nope"}))
        search = SpoonacularSearch("spoon-test", transport=transport)

        with pytest.raises(ProviderError):
            _run(search.fetch(chickpea_pantry, prefs))

    def test_no_key(self, chickpea_pantry, prefs):
        search = SpoonacularSearch(None)

        assert not search.available
        with pytest.raises(ProviderUnavailable):
            _run(search.fetch(chickpea_pantry, prefs))
