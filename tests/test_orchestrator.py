"""
Tests for the Fallback Orchestrator.

Providers are replaced with in-process fakes so the tests control timing
and failures exactly.
"""

import asyncio
from unittest.mock import patch

import pytest

from dinnersnap.orchestrator import AnalyzeRequest, RecipeOrchestrator
from dinnersnap.pantry import Pantry
from dinnersnap.providers.base import ProviderError, RecipeSource
from dinnersnap.providers.vision import VisionTokens
from dinnersnap.recipes.models import Badge, PreferenceSet


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _run(coro):
    """Run an async coroutine synchronously (no pytest-asyncio needed)."""
    return asyncio.run(coro)


class FakeSource(RecipeSource):
    """A recipe source returning canned candidates, optionally slow or failing."""

    def __init__(self, name, badge, candidates=(), *, delay=0.0, errors=(), available=True):
        self.name = name
        self.badge = badge
        self._candidates = list(candidates)
        self._delay = delay
        self._errors = list(errors)
        self._available = available
        self.calls = 0

    @property
    def available(self) -> bool:
        return self._available

    async def fetch(self, pantry, prefs):
        self.calls += 1
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._errors:
            raise self._errors.pop(0)
        return list(self._candidates)


class FakeVision:
    name = "vision"

    def __init__(self, tokens=None, *, delay=0.0, error=None, available=True):
        self._tokens = tokens or VisionTokens()
        self._delay = delay
        self._error = error
        self.available = available

    async def annotate(self, image_base64):
        if self._delay:
            await asyncio.sleep(self._delay)
        if self._error:
            raise self._error
        return self._tokens


def _web(make_raw, n):
    return [make_raw(f"Chickpea Dish {i}", source_id=f"web-{i}", ready=10 + i) for i in range(n)]


def _llm(make_raw, n, start=0):
    return [
        make_raw(f"Chickpea Bowl {i}", source_id=f"llm-{i}", source=Badge.LLM, ready=20)
        for i in range(start, start + n)
    ]


OVERRIDE = AnalyzeRequest(pantry_override=("chickpeas", "tomato", "onion", "garlic"), prefs=PreferenceSet(time=25))


# ---------------------------------------------------------------------------
# Pantry acquisition
# ---------------------------------------------------------------------------

class TestAcquirePantry:

    def test_override(self, settings):
        orchestrator = RecipeOrchestrator(settings)
        pantry, source, pantry_from = _run(orchestrator.acquire_pantry(None, ["Tomato", "brocoli"]))

        assert pantry.as_list() == ["broccoli", "tomatoes"]
        assert source == "pantryOverride"
        assert pantry_from == {}

    def test_vision(self, settings):
        tokens = VisionTokens(ocr=["chickpeas"], labels=["coconut", "milk"], objects=["tin can"])
        orchestrator = RecipeOrchestrator(settings, vision=FakeVision(tokens))

        pantry, source, pantry_from = _run(orchestrator.acquire_pantry("AAAA", None))

        assert pantry.as_list() == ["chickpeas", "coconut milk"]
        assert source == "vision"
        assert pantry_from["labels"] == ["coconut", "milk"]

    def test_vision_failure_gives_empty_pantry(self, settings):
        vision = FakeVision(error=ProviderError("vision: HTTP 403"))
        orchestrator = RecipeOrchestrator(settings, vision=vision)

        pantry, source, pantry_from = _run(orchestrator.acquire_pantry("AAAA", None))

        assert not pantry
        assert source == "vision-failed"
        assert "403" in pantry_from["error"]

    def test_vision_timeout_gives_empty_pantry(self, settings):
        orchestrator = RecipeOrchestrator(settings, vision=FakeVision(delay=5))

        pantry, source, _ = _run(orchestrator.acquire_pantry("AAAA", None))

        assert not pantry
        assert source == "vision-failed"

    def test_vision_without_key(self, settings):
        pantry, source, _ = _run(RecipeOrchestrator(settings).acquire_pantry("AAAA", None))

        assert not pantry
        assert source == "vision-skipped"


# ---------------------------------------------------------------------------
# Suggest: dispatch, merge, fallback
# ---------------------------------------------------------------------------

class TestSuggest:

    def test_no_credentials_gives_emergency_recipe(self, settings, chickpea_pantry, prefs):
        recipes, diagnostics = _run(RecipeOrchestrator(settings).suggest(chickpea_pantry, prefs))

        assert len(recipes) == 1
        assert recipes[0].badges == (Badge.LOCAL,)
        assert diagnostics.providers == {"search": "skipped", "generative": "skipped"}
        assert not diagnostics.used_llm

    def test_search_first_then_generative(self, settings, chickpea_pantry, prefs, make_raw):
        search = FakeSource("search", Badge.WEB, _web(make_raw, 2))
        generator = FakeSource("generative", Badge.LLM, _llm(make_raw, 2))
        orchestrator = RecipeOrchestrator(settings, search=search, generator=generator)

        recipes, diagnostics = _run(orchestrator.suggest(chickpea_pantry, prefs))

        assert [r.id for r in recipes] == ["web-0", "web-1", "llm-0"]
        assert diagnostics.used_llm
        assert diagnostics.providers == {"search": "ok", "generative": "ok"}
        assert diagnostics.filters["search"]["kept"] == 2

    def test_capped_at_three(self, settings, chickpea_pantry, prefs, make_raw):
        search = FakeSource("search", Badge.WEB, _web(make_raw, 5))
        generator = FakeSource("generative", Badge.LLM, _llm(make_raw, 2))
        orchestrator = RecipeOrchestrator(settings, search=search, generator=generator)

        recipes, diagnostics = _run(orchestrator.suggest(chickpea_pantry, prefs))

        assert len(recipes) == 3
        assert all(r.has_badge(Badge.WEB) for r in recipes)
        assert not diagnostics.used_llm

    def test_duplicate_ids_collapse(self, settings, chickpea_pantry, prefs, make_raw):
        duplicates = _llm(make_raw, 1) + _llm(make_raw, 1)
        generator = FakeSource("generative", Badge.LLM, duplicates)
        orchestrator = RecipeOrchestrator(settings, generator=generator)

        recipes, _ = _run(orchestrator.suggest(chickpea_pantry, prefs))

        assert [r.id for r in recipes] == ["llm-0"]

    def test_inadmissible_results_fall_back(self, settings, chickpea_pantry, prefs, make_raw):
        search = FakeSource("search", Badge.WEB, [make_raw("Chocolate Brownies")])
        orchestrator = RecipeOrchestrator(settings, search=search)

        recipes, diagnostics = _run(orchestrator.suggest(chickpea_pantry, prefs))

        assert recipes[0].badges == (Badge.LOCAL,)
        assert diagnostics.providers["search"] == "ok"
        assert diagnostics.filters["search"]["kept"] == 0

    def test_search_timeout_does_not_block_generative(self, settings, chickpea_pantry, prefs, make_raw):
        search = FakeSource("search", Badge.WEB, _web(make_raw, 2), delay=5)
        generator = FakeSource("generative", Badge.LLM, _llm(make_raw, 1))
        orchestrator = RecipeOrchestrator(settings, search=search, generator=generator)

        recipes, diagnostics = _run(orchestrator.suggest(chickpea_pantry, prefs))

        assert [r.id for r in recipes] == ["llm-0"]
        assert diagnostics.providers["search"] == "timeout"
        assert "search" in diagnostics.errors

    def test_provider_error_is_recorded(self, settings, chickpea_pantry, prefs, make_raw):
        search = FakeSource("search", Badge.WEB, errors=[ProviderError("search: HTTP 401")])
        orchestrator = RecipeOrchestrator(settings, search=search)

        recipes, diagnostics = _run(orchestrator.suggest(chickpea_pantry, prefs))

        assert recipes[0].badges == (Badge.LOCAL,)
        assert diagnostics.providers["search"] == "error"
        assert search.calls == 1

    def test_retryable_error_is_retried_once(self, settings, chickpea_pantry, prefs, make_raw):
        search = FakeSource(
            "search",
            Badge.WEB,
            _web(make_raw, 1),
            errors=[ProviderError("search: HTTP 503", retryable=True)],
        )
        orchestrator = RecipeOrchestrator(settings, search=search)

        recipes, diagnostics = _run(orchestrator.suggest(chickpea_pantry, prefs))

        assert [r.id for r in recipes] == ["web-0"]
        assert diagnostics.providers["search"] == "ok"
        assert search.calls == 2

    def test_empty_pantry_skips_providers(self, settings, prefs, make_raw):
        search = FakeSource("search", Badge.WEB, _web(make_raw, 1))
        orchestrator = RecipeOrchestrator(settings, search=search)

        recipes, diagnostics = _run(orchestrator.suggest(Pantry(), prefs))

        assert search.calls == 0
        assert diagnostics.providers["search"] == "skipped"
        assert recipes[0].badges == (Badge.LOCAL,)


# ---------------------------------------------------------------------------
# Full pipeline and watchdog
# ---------------------------------------------------------------------------

class TestRun:

    def test_override_scenario(self, settings):
        result = _run(RecipeOrchestrator(settings).run_with_watchdog(OVERRIDE))

        assert result.pantry.as_list() == ["chickpeas", "garlic", "onion", "tomatoes"]
        assert len(result.recipes) == 1
        recipe = result.recipes[0]
        assert recipe.has_badge(Badge.LOCAL)
        had = {i.name for i in recipe.ingredients if i.have}
        assert set(result.pantry.items) <= had
        assert result.diagnostics.source == "pantryOverride"
        assert result.diagnostics.mode == "standard"

    def test_pantry_only(self, settings, make_raw):
        search = FakeSource("search", Badge.WEB, _web(make_raw, 1))
        orchestrator = RecipeOrchestrator(settings, search=search)
        request = AnalyzeRequest(pantry_override=("chickpeas",), prefs=PreferenceSet(pantry_only=True))

        result = _run(orchestrator.run_with_watchdog(request))

        assert result.pantry.as_list() == ["chickpeas"]
        assert result.recipes == []
        assert result.diagnostics.mode == "pantryOnly"
        assert search.calls == 0

    def test_watchdog_fires(self, settings):
        settings = settings.model_copy(update={"vision_timeout_seconds": 10.0, "watchdog_seconds": 0.2})
        orchestrator = RecipeOrchestrator(settings, vision=FakeVision(delay=5))

        result = _run(orchestrator.run_with_watchdog(AnalyzeRequest(image_base64="AAAA")))

        assert not result.pantry
        assert len(result.recipes) == 1
        assert result.recipes[0].has_badge(Badge.LOCAL)
        assert result.diagnostics.source == "watchdog"
        assert result.diagnostics.watchdog

    def test_unexpected_source_error_spares_the_other_source(self, settings, make_raw):
        search = FakeSource("search", Badge.WEB, errors=[RuntimeError("bug")])
        generator = FakeSource("generative", Badge.LLM, _llm(make_raw, 1))
        orchestrator = RecipeOrchestrator(settings, search=search, generator=generator)

        result = _run(orchestrator.run_with_watchdog(OVERRIDE))

        assert result.diagnostics.source == "pantryOverride"
        assert result.pantry.as_list() == ["chickpeas", "garlic", "onion", "tomatoes"]
        assert [r.id for r in result.recipes] == ["llm-0"]
        assert result.diagnostics.providers == {"search": "error", "generative": "ok"}
        assert "RuntimeError: bug" in result.diagnostics.errors["search"]
        assert search.calls == 1

    def test_unexpected_vision_error_gives_empty_pantry(self, settings):
        orchestrator = RecipeOrchestrator(settings, vision=FakeVision(error=RuntimeError("bug")))

        result = _run(orchestrator.run_with_watchdog(AnalyzeRequest(image_base64="AAAA")))

        assert result.diagnostics.source == "vision-failed"
        assert not result.pantry
        assert result.recipes[0].has_badge(Badge.LOCAL)

    def test_pipeline_error_is_contained(self, settings):
        orchestrator = RecipeOrchestrator(settings)

        with patch.object(RecipeOrchestrator, "suggest", side_effect=RuntimeError("bug")):
            result = _run(orchestrator.run_with_watchdog(OVERRIDE))

        assert result.diagnostics.source == "internal-error"
        assert result.diagnostics.error == "bug"
        assert result.recipes[0].has_badge(Badge.LOCAL)

    def test_explore_mode(self, settings):
        request = AnalyzeRequest(
            pantry_override=("chickpeas",),
            prefs=PreferenceSet(explore=True),
        )

        result = _run(RecipeOrchestrator(settings).run_with_watchdog(request))

        assert result.diagnostics.mode == "explore"
        assert result.recipes[0].id.endswith("-explore")


class TestDiagnostics:

    def test_debug_keys(self, settings):
        result = _run(RecipeOrchestrator(settings).run_with_watchdog(OVERRIDE))
        debug = result.diagnostics.as_debug()

        assert debug["source"] == "pantryOverride"
        assert debug["cleanedPantry"] == ["chickpeas", "garlic", "onion", "tomatoes"]
        assert debug["usedLLM"] is False
        assert isinstance(debug["totalMs"], int)
        assert debug["providers"] == {"search": "skipped", "generative": "skipped"}
        assert "watchdog" not in debug

    @pytest.mark.parametrize("explore", [False, True])
    def test_watchdog_debug(self, settings, explore):
        settings = settings.model_copy(update={"watchdog_seconds": 0.1})
        orchestrator = RecipeOrchestrator(settings, vision=FakeVision(delay=5))
        request = AnalyzeRequest(image_base64="AAAA", prefs=PreferenceSet(explore=explore))

        debug = _run(orchestrator.run_with_watchdog(request)).diagnostics.as_debug()

        assert debug["source"] == "watchdog"
        assert debug["watchdog"] is True
