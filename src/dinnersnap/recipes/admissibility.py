"""
DinnerSnap - Candidate Admissibility Filter.

Decides whether a provider's recipe candidate is an acceptable dinner
suggestion for this pantry and these preferences, and scores survivors.

Admissibility is an ordered list of named stages. Each stage applies at one
or more strictness levels:

- STRICT: every stage
- RELAXED: only the hard stages (category, time cap, diet, protein, special
  cases) plus a lower ingredient-overlap bar

When the strict pass rejects every candidate of a non-empty list, the same
stages are re-run at RELAXED - an imperfect suggestion beats silence, but a
dessert never becomes dinner.
"""

import logging
import re
from collections import Counter
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache

from dinnersnap.pantry.lexicon import (
    ALCOHOL_WORDS,
    DAIRY_WORDS,
    DESSERT_WORDS,
    DRINK_WORDS,
    FISH_PANTRY,
    FISH_WORDS,
    GENERIC_STAPLES,
    KITCHEN_STAPLES,
    MAIN_VEGETABLE_WORDS,
    MEAT_WORDS,
    SAVOURY_COMPOUNDS,
)
from dinnersnap.pantry.models import Pantry
from dinnersnap.pantry.normalizer import canonicalize, normalize_name
from dinnersnap.recipes.models import (
    IngredientLine,
    PreferenceSet,
    RawCandidate,
    RecipeCandidate,
)

logger = logging.getLogger(__name__)

# =============================================================================
# Configuration
# =============================================================================

MIN_USED_STRICT = 2
MIN_USED_RELAXED = 1
MIN_SPECIFIC_FOR_GUARD = 2
MAX_MISSING = 2
MIN_HIT_RATIO = 0.6
SCORE_TIME_DEFAULT = 30

EXCLUDED_DISH_TYPES = frozenset({"drink", "beverage", "cocktail", "dessert"})

_MAC_AND_CHEESE = re.compile(r"\bmac(?:aroni)?\s*(?:and|&|n|'n')\s*cheese\b")


class Strictness(str, Enum):
    """How hard the filter leans on ingredient overlap."""

    STRICT = "strict"
    RELAXED = "relaxed"


BOTH = frozenset({Strictness.STRICT, Strictness.RELAXED})
STRICT_ONLY = frozenset({Strictness.STRICT})


# =============================================================================
# Word matching
# =============================================================================

@lru_cache(maxsize=512)
def _word_pattern(word: str) -> re.Pattern:
    """Whole-word match allowing a plural suffix: 'gin' never hits 'ginger'."""
    return re.compile(rf"\b{re.escape(word)}(?:e?s)?\b")


def mentions(text: str, word: str) -> bool:
    return bool(_word_pattern(word).search(text))


def mentions_any(text: str, words: Iterable[str]) -> bool:
    return any(mentions(text, w) for w in words)


def _strip_savoury_compounds(title: str) -> str:
    for compound in SAVOURY_COMPOUNDS:
        title = _word_pattern(compound).sub(" ", title)
    return title


def in_pantry(name: str, pantry: Pantry) -> bool:
    """True iff the normalized ingredient name is a pantry ingredient."""
    term = canonicalize(normalize_name(name)) if name else None
    return term is not None and term in pantry


def uses_pantry_item(name: str, pantry: Pantry) -> bool:
    """Looser test for overlap counting: "canned chickpeas" uses chickpeas."""
    simple = normalize_name(re.sub(r"[^a-zA-Z ]", " ", name))
    if not simple:
        return False
    return in_pantry(simple, pantry) or any(mentions(simple, p) for p in pantry.items)


def count_overlap(names: Iterable[str], pantry: Pantry) -> tuple[int, int]:
    """(used, missed) counts of ingredient names against the pantry."""
    used = missed = 0
    for name in names:
        if uses_pantry_item(name, pantry):
            used += 1
        elif not _is_kitchen_staple(name):
            missed += 1
    return used, missed


def _is_kitchen_staple(name: str) -> bool:
    return mentions_any(normalize_name(name), KITCHEN_STAPLES)


# =============================================================================
# Stages
# =============================================================================

StageCheck = Callable[[RawCandidate, Pantry, PreferenceSet, Strictness], str | None]


@dataclass(frozen=True)
class Stage:
    """A named rejection rule. check() returns a reason to reject, or None."""

    name: str
    check: StageCheck
    levels: frozenset[Strictness]


@dataclass(frozen=True)
class Rejection:
    stage: str
    reason: str


def _title(raw: RawCandidate) -> str:
    return normalize_name(raw.title or "")


def _check_category(raw, pantry, prefs, strictness):
    title = _strip_savoury_compounds(_title(raw))
    for label, words in (
        ("dessert", DESSERT_WORDS),
        ("drink", DRINK_WORDS),
        ("alcohol", ALCOHOL_WORDS),
    ):
        if mentions_any(title, words):
            return f"{label} title"

    for dish in raw.dish_types:
        dish = normalize_name(dish)
        if dish in EXCLUDED_DISH_TYPES or mentions_any(dish, DESSERT_WORDS | DRINK_WORDS):
            return f"dish type '{dish}'"
    return None


def _check_time_cap(raw, pantry, prefs, strictness):
    if raw.ready_in_minutes is None:
        return "no ready time"
    if raw.ready_in_minutes > prefs.time_cap:
        return f"{raw.ready_in_minutes} min over cap {prefs.time_cap}"
    return None


def _check_diet(raw, pantry, prefs, strictness):
    if prefs.diet in (None, "none"):
        return None
    text = " ".join([_title(raw), *(normalize_name(n) for n in raw.ingredient_names)])
    if mentions_any(text, MEAT_WORDS):
        return f"meat in {prefs.diet} request"
    if prefs.diet in ("vegetarian", "vegan") and mentions_any(text, FISH_WORDS):
        return f"fish in {prefs.diet} request"
    return None


def _check_protein(raw, pantry, prefs, strictness):
    if mentions_any(_title(raw), FISH_WORDS) and not (pantry.items & FISH_PANTRY):
        return "fish dish without fish"
    return None


def _check_special_cases(raw, pantry, prefs, strictness):
    if _MAC_AND_CHEESE.search(_title(raw)) and not (pantry.items & DAIRY_WORDS):
        return "mac and cheese without dairy"
    return None


def _check_min_overlap(raw, pantry, prefs, strictness):
    minimum = MIN_USED_STRICT if strictness is Strictness.STRICT else MIN_USED_RELAXED
    if raw.used_count < minimum:
        return f"uses {raw.used_count} pantry items, need {minimum}"
    return None


def _check_specific_use(raw, pantry, prefs, strictness):
    specific = [p for p in pantry.items if p not in GENERIC_STAPLES]
    if len(specific) < MIN_SPECIFIC_FOR_GUARD:
        return None
    text = " ".join([_title(raw), *(normalize_name(n) for n in raw.ingredient_names)])
    canonical = {canonicalize(normalize_name(n)) for n in raw.ingredient_names}
    if any(p in canonical or mentions(text, p) for p in specific):
        return None
    return "uses none of the specific pantry items"


def _check_main_vegetable(raw, pantry, prefs, strictness):
    title = _title(raw)
    for word in MAIN_VEGETABLE_WORDS:
        if mentions(title, word) and not any(word in p for p in pantry.items):
            return f"built around {word}, not in pantry"
    return None


def _check_coverage(raw, pantry, prefs, strictness):
    if not raw.ingredient_names:
        return None
    hit, missing = count_overlap(raw.ingredient_names, pantry)
    if missing > MAX_MISSING:
        return f"{missing} ingredients missing"
    if hit + missing and hit / (hit + missing) < MIN_HIT_RATIO:
        return f"covers {hit}/{hit + missing} ingredients"
    return None


STAGES: tuple[Stage, ...] = (
    Stage("category", _check_category, BOTH),
    Stage("time_cap", _check_time_cap, BOTH),
    Stage("diet", _check_diet, BOTH),
    Stage("protein", _check_protein, BOTH),
    Stage("special_cases", _check_special_cases, BOTH),
    Stage("min_overlap", _check_min_overlap, BOTH),
    Stage("specific_use", _check_specific_use, STRICT_ONLY),
    Stage("main_vegetable", _check_main_vegetable, STRICT_ONLY),
    Stage("coverage", _check_coverage, STRICT_ONLY),
)


def check(
    raw: RawCandidate,
    pantry: Pantry,
    prefs: PreferenceSet,
    strictness: Strictness = Strictness.STRICT,
) -> Rejection | None:
    """First stage that rejects the candidate at this strictness, or None."""
    for stage in STAGES:
        if strictness not in stage.levels:
            continue
        reason = stage.check(raw, pantry, prefs, strictness)
        if reason:
            return Rejection(stage.name, reason)
    return None


# =============================================================================
# Scoring and annotation
# =============================================================================

def score(used: int, missed: int, ready_in_minutes: int | None) -> float:
    """
    Overlap-weighted score with a mild bonus for speed.

    0.7 * used / (used + missed + 1) + 0.3 * (1 - min(time, 60) / 60)
    """
    minutes = SCORE_TIME_DEFAULT if ready_in_minutes is None else max(0, ready_in_minutes)
    used, missed = max(0, used), max(0, missed)
    value = 0.7 * (used / (used + missed + 1)) + 0.3 * (1 - min(minutes, 60) / 60)
    return round(value, 2)


def annotate_ingredients(names: Iterable[str], pantry: Pantry) -> tuple[IngredientLine, ...]:
    """Ingredient lines with have=True when the pantry already satisfies them."""
    lines = []
    for name in names:
        display = normalize_name(name)
        if display:
            lines.append(IngredientLine(name=display, have=in_pantry(display, pantry)))
    return tuple(lines)


def shopping_list(names: Iterable[str], pantry: Pantry) -> tuple[str, ...]:
    """Non-staple ingredients the pantry does not cover."""
    missing = []
    for name in names:
        simple = normalize_name(re.sub(r"[^a-zA-Z ]", " ", name))
        if simple and not uses_pantry_item(simple, pantry) and not _is_kitchen_staple(simple):
            if simple not in missing:
                missing.append(simple)
    return tuple(missing)


def admit(raw: RawCandidate, pantry: Pantry, prefs: PreferenceSet) -> RecipeCandidate:
    """Map an admitted raw candidate into a scored, annotated RecipeCandidate."""
    return RecipeCandidate(
        id=raw.source_id,
        title=raw.title,
        time=raw.ready_in_minutes if raw.ready_in_minutes is not None else SCORE_TIME_DEFAULT,
        cost=raw.cost,
        energy=raw.energy,
        ingredients=annotate_ingredients(raw.ingredient_names, pantry),
        steps=raw.steps,
        badges=(raw.source,),
        score=score(raw.used_count, raw.missed_count, raw.ready_in_minutes),
        shopping_list=shopping_list(raw.ingredient_names, pantry),
    )


# =============================================================================
# Filtering
# =============================================================================

@dataclass
class FilterOutcome:
    """Admitted candidates (best first) plus how they were obtained."""

    candidates: list[RecipeCandidate] = field(default_factory=list)
    strictness: Strictness = Strictness.STRICT
    raw_count: int = 0
    rejections: dict[str, int] = field(default_factory=dict)

    @property
    def relaxed(self) -> bool:
        return self.strictness is Strictness.RELAXED


def _run_pass(
    raws: list[RawCandidate],
    pantry: Pantry,
    prefs: PreferenceSet,
    strictness: Strictness,
) -> tuple[list[RawCandidate], Counter]:
    kept: list[RawCandidate] = []
    rejected: Counter = Counter()
    for raw in raws:
        rejection = check(raw, pantry, prefs, strictness)
        if rejection:
            rejected[rejection.stage] += 1
            logger.debug(f"Rejected '{raw.title}' ({strictness.value}): {rejection.reason}")
        else:
            kept.append(raw)
    return kept, rejected


def filter_candidates(
    raws: Iterable[RawCandidate],
    pantry: Pantry,
    prefs: PreferenceSet,
) -> FilterOutcome:
    """
    Admit and rank candidates, relaxing overlap strictness if nothing survives.

    Never raises; returns an empty outcome for an empty input.
    """
    raws = list(raws)
    strictness = Strictness.STRICT
    kept, rejected = _run_pass(raws, pantry, prefs, strictness)

    if not kept and raws:
        strictness = Strictness.RELAXED
        kept, rejected = _run_pass(raws, pantry, prefs, strictness)
        logger.info(f"Strict filter emptied {len(raws)} candidates; relaxed pass kept {len(kept)}")

    admitted = [admit(raw, pantry, prefs) for raw in kept]
    admitted.sort(key=lambda c: c.score or 0.0, reverse=True)

    return FilterOutcome(
        candidates=admitted,
        strictness=strictness,
        raw_count=len(raws),
        rejections=dict(rejected),
    )
