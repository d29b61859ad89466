"""
Pytest configuration and fixtures for DinnerSnap tests.
"""

import os

import pytest

# Set test environment before importing dinnersnap modules
os.environ["DINNERSNAP_ENV"] = "development"
os.environ["DINNERSNAP_LOG_PROMPTS"] = "0"

from dinnersnap.config import Settings
from dinnersnap.pantry import Pantry, normalize
from dinnersnap.recipes.models import Badge, PreferenceSet, RawCandidate, Step


@pytest.fixture
def settings() -> Settings:
    """Settings with no provider credentials and short budgets."""
    return Settings(
        _env_file=None,
        gcv_key=None,
        spoon_key=None,
        openai_api_key=None,
        vision_timeout_seconds=0.5,
        search_timeout_seconds=0.5,
        generative_timeout_seconds=0.5,
        watchdog_seconds=2.0,
    )


@pytest.fixture
def chickpea_pantry() -> Pantry:
    """The four-item pantry used across scenarios."""
    return normalize(["chickpeas", "tomato", "onion", "garlic"])


@pytest.fixture
def prefs() -> PreferenceSet:
    return PreferenceSet(time=25)


@pytest.fixture
def make_raw():
    """Factory for RawCandidates with sensible defaults for a chickpea pantry."""

    def _make(
        title: str = "Chickpea Curry",
        *,
        source_id: str = "web-1",
        source: Badge = Badge.WEB,
        ingredients: tuple[str, ...] = ("chickpeas", "tomatoes", "onion", "garlic", "cumin"),
        dish_types: tuple[str, ...] = ("main course",),
        ready: int | None = 20,
        used: int = 4,
        missed: int = 1,
    ) -> RawCandidate:
        return RawCandidate(
            source_id=source_id,
            source=source,
            title=title,
            ingredient_names=ingredients,
            dish_types=dish_types,
            ready_in_minutes=ready,
            used_count=used,
            missed_count=missed,
            steps=(Step(id=f"{source_id}-s0", text="Cook everything."),),
        )

    return _make
