"""
DinnerSnap - Fallback Orchestrator.

Runs one request end to end:

1. Acquire a pantry (override list, or image -> vision -> normalizer)
2. Dispatch recipe search and generation concurrently, each under its own
   budget, each list through the admissibility filter
3. Merge search first, dedupe by id, cap, backfill with the emergency recipe

The whole pipeline sits under a watchdog; when it fires (or anything
unexpected escapes) the caller still gets an emergency recipe.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Any

from pydantic import SecretStr

from dinnersnap.config import Settings, get_settings
from dinnersnap.pantry.models import Pantry
from dinnersnap.pantry.normalizer import normalize, pantry_from_vision
from dinnersnap.providers.base import (
    ProviderError,
    ProviderStatus,
    ProviderTimeout,
    RecipeSource,
    call_with_budget,
)
from dinnersnap.providers.generative import OpenAIRecipeGenerator
from dinnersnap.providers.search import SpoonacularSearch
from dinnersnap.providers.vision import VisionClient
from dinnersnap.recipes.admissibility import filter_candidates
from dinnersnap.recipes.emergency import emergency_recipe
from dinnersnap.recipes.models import Badge, PreferenceSet, RecipeCandidate

logger = logging.getLogger(__name__)


# =============================================================================
# Request / result types
# =============================================================================

@dataclass(frozen=True)
class AnalyzeRequest:
    """One analyze call, already validated at the web boundary."""

    image_base64: str | None = None
    pantry_override: tuple[str, ...] = ()
    prefs: PreferenceSet = field(default_factory=PreferenceSet)


@dataclass
class Diagnostics:
    """What happened while serving one request. Returned as `debug`."""

    source: str = ""
    pantry_from: dict[str, Any] = field(default_factory=dict)
    cleaned_pantry: list[str] = field(default_factory=list)
    used_llm: bool = False
    total_ms: int = 0
    timings: dict[str, int] = field(default_factory=dict)
    providers: dict[str, str] = field(default_factory=dict)
    errors: dict[str, str] = field(default_factory=dict)
    filters: dict[str, dict[str, Any]] = field(default_factory=dict)
    mode: str | None = None
    watchdog: bool = False
    error: str | None = None

    def record(self, provider: str, status: ProviderStatus, error: str | None = None) -> None:
        self.providers[provider] = status.value
        if error:
            self.errors[provider] = error

    def as_debug(self) -> dict[str, Any]:
        debug: dict[str, Any] = {
            "source": self.source,
            "pantryFrom": self.pantry_from,
            "cleanedPantry": self.cleaned_pantry,
            "usedLLM": self.used_llm,
            "totalMs": self.total_ms,
            "timings": self.timings,
            "providers": self.providers,
        }
        if self.errors:
            debug["errors"] = self.errors
        if self.filters:
            debug["filters"] = self.filters
        if self.mode:
            debug["mode"] = self.mode
        if self.watchdog:
            debug["watchdog"] = True
        if self.error:
            debug["error"] = self.error
        return debug


@dataclass
class ResultSet:
    pantry: Pantry
    recipes: list[RecipeCandidate]
    diagnostics: Diagnostics


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _secret(value: SecretStr | None) -> str | None:
    if value is None:
        return None
    return value.get_secret_value().strip() or None


# =============================================================================
# Orchestrator
# =============================================================================

class RecipeOrchestrator:
    """
    Bounded-time pipeline over three unreliable collaborators.

    Providers default to the real clients built from settings; tests pass
    their own.
    """

    def __init__(
        self,
        settings: Settings,
        vision: VisionClient | None = None,
        search: RecipeSource | None = None,
        generator: RecipeSource | None = None,
    ):
        self.settings = settings
        self.vision = vision or VisionClient(_secret(settings.gcv_key))
        self.search = search or SpoonacularSearch(_secret(settings.spoon_key))
        self.generator = generator or OpenAIRecipeGenerator(
            _secret(settings.openai_api_key),
            model=settings.openai_model,
        )

    async def acquire_pantry(
        self,
        image_base64: str | None,
        pantry_override: list[str] | tuple[str, ...] | None,
    ) -> tuple[Pantry, str, dict[str, Any]]:
        """
        Build the pantry for a request.

        Returns (pantry, source, pantry_from). A vision failure yields an
        empty pantry rather than an error.
        """
        if pantry_override:
            return normalize(pantry_override), "pantryOverride", {}

        if not image_base64:
            return Pantry(), "none", {}

        if not self.vision.available:
            logger.info("Vision skipped: no credential")
            return Pantry(), "vision-skipped", {"error": "no GCV_KEY"}

        try:
            tokens = await call_with_budget(
                self.vision.name,
                lambda: self.vision.annotate(image_base64),
                timeout=self.settings.vision_timeout_seconds,
                retries=self.settings.provider_retries,
            )
        except ProviderError as e:
            logger.warning(f"Vision failed: {e}")
            return Pantry(), "vision-failed", {"error": str(e)}
        except Exception as e:
            logger.exception("Vision raised unexpectedly")
            return Pantry(), "vision-failed", {"error": f"{type(e).__name__}: {e}"}

        pantry = pantry_from_vision(tokens.all())
        logger.info(f"Vision pantry: {pantry.as_list()}")
        return pantry, "vision", tokens.as_dict()

    async def _collect(
        self,
        source: RecipeSource,
        timeout: float,
        pantry: Pantry,
        prefs: PreferenceSet,
        diagnostics: Diagnostics,
    ) -> list[RecipeCandidate]:
        """Fetch and filter one source. Failures become an empty list."""
        if not pantry:
            diagnostics.record(source.name, ProviderStatus.SKIPPED, "empty pantry")
            return []
        if not source.available:
            diagnostics.record(source.name, ProviderStatus.SKIPPED, "no credential")
            return []

        started = time.perf_counter()
        try:
            raws = await call_with_budget(
                source.name,
                lambda: source.fetch(pantry, prefs),
                timeout=timeout,
                retries=self.settings.provider_retries,
            )
        except ProviderTimeout as e:
            logger.warning(f"{source.name} timed out: {e}")
            diagnostics.record(source.name, ProviderStatus.TIMEOUT, str(e))
            return []
        except ProviderError as e:
            logger.warning(f"{source.name} failed: {e}")
            diagnostics.record(source.name, ProviderStatus.ERROR, str(e))
            return []
        except Exception as e:
            logger.exception(f"{source.name} raised unexpectedly")
            diagnostics.record(source.name, ProviderStatus.ERROR, f"{type(e).__name__}: {e}")
            return []
        finally:
            diagnostics.timings[source.name] = _elapsed_ms(started)

        outcome = filter_candidates(raws, pantry, prefs)
        diagnostics.record(source.name, ProviderStatus.OK)
        diagnostics.filters[source.name] = {
            "raw": outcome.raw_count,
            "kept": len(outcome.candidates),
            "timeCap": prefs.time_cap,
            "relaxed": outcome.relaxed,
        }
        logger.info(
            f"{source.name}: {outcome.raw_count} raw, {len(outcome.candidates)} kept "
            f"({outcome.strictness.value}) in {diagnostics.timings[source.name]}ms"
        )
        return outcome.candidates

    async def suggest(
        self,
        pantry: Pantry,
        prefs: PreferenceSet,
        diagnostics: Diagnostics | None = None,
    ) -> tuple[list[RecipeCandidate], Diagnostics]:
        """
        Recipes for a pantry: 1 to max_recipes, never empty.

        Both sources run to completion (or their budget) before merging so
        the result does not depend on which one answered first.
        """
        diagnostics = diagnostics or Diagnostics(cleaned_pantry=pantry.as_list())

        search_list, generated_list = await asyncio.gather(
            self._collect(self.search, self.settings.search_timeout_seconds, pantry, prefs, diagnostics),
            self._collect(self.generator, self.settings.generative_timeout_seconds, pantry, prefs, diagnostics),
        )

        merged: list[RecipeCandidate] = []
        seen: set[str] = set()
        for recipe in [*search_list, *generated_list]:
            if recipe.id in seen:
                continue
            seen.add(recipe.id)
            merged.append(recipe)
        merged = merged[: self.settings.max_recipes]

        if not merged:
            logger.info("No admissible recipes; using emergency recipe")
            merged = [emergency_recipe(pantry, explore=prefs.explore)]

        diagnostics.used_llm = any(r.has_badge(Badge.LLM) for r in merged)
        return merged, diagnostics

    async def run(self, request: AnalyzeRequest) -> ResultSet:
        """Full pipeline without the watchdog."""
        started = time.perf_counter()
        diagnostics = Diagnostics(mode="explore" if request.prefs.explore else "standard")

        pantry, source, pantry_from = await self.acquire_pantry(
            request.image_base64, request.pantry_override
        )
        diagnostics.timings["pantry"] = _elapsed_ms(started)
        diagnostics.source = source
        diagnostics.pantry_from = pantry_from
        diagnostics.cleaned_pantry = pantry.as_list()

        if request.prefs.pantry_only:
            diagnostics.mode = "pantryOnly"
            diagnostics.total_ms = _elapsed_ms(started)
            return ResultSet(pantry=pantry, recipes=[], diagnostics=diagnostics)

        recipes, diagnostics = await self.suggest(pantry, request.prefs, diagnostics)
        diagnostics.total_ms = _elapsed_ms(started)
        logger.info(
            f"Analyze done: source={source} pantry={len(pantry)} recipes={len(recipes)} "
            f"usedLLM={diagnostics.used_llm} in {diagnostics.total_ms}ms"
        )
        return ResultSet(pantry=pantry, recipes=recipes, diagnostics=diagnostics)

    async def run_with_watchdog(self, request: AnalyzeRequest) -> ResultSet:
        """
        Run the pipeline under the request watchdog. Never raises.

        Work still in flight when the watchdog fires is cancelled and its
        results discarded.
        """
        started = time.perf_counter()
        try:
            return await asyncio.wait_for(self.run(request), timeout=self.settings.watchdog_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Watchdog fired after {self.settings.watchdog_seconds:.1f}s")
            return self._fallback("watchdog", started, request.prefs.explore, watchdog=True)
        except Exception as e:
            logger.exception("Analyze pipeline failed")
            return self._fallback("internal-error", started, request.prefs.explore, error=str(e))

    def _fallback(
        self,
        source: str,
        started: float,
        explore: bool,
        *,
        watchdog: bool = False,
        error: str | None = None,
    ) -> ResultSet:
        diagnostics = Diagnostics(
            source=source,
            total_ms=_elapsed_ms(started),
            watchdog=watchdog,
            error=error,
        )
        return ResultSet(
            pantry=Pantry(),
            recipes=[emergency_recipe(Pantry(), explore=explore)],
            diagnostics=diagnostics,
        )


def build_orchestrator(settings: Settings | None = None) -> RecipeOrchestrator:
    """Orchestrator wired to the real providers."""
    return RecipeOrchestrator(settings or get_settings())
