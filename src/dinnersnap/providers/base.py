"""
DinnerSnap - Provider base types.

Every upstream collaborator (vision, recipe search, generative text) is an
unreliable remote service. Providers raise only ProviderError subclasses;
the orchestrator catches them per provider and moves on.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

import httpx

from dinnersnap.pantry.models import Pantry
from dinnersnap.recipes.models import Badge, PreferenceSet, RawCandidate

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ProviderStatus(str, Enum):
    """Outcome of one provider call, as recorded in diagnostics."""

    OK = "ok"
    ERROR = "error"
    TIMEOUT = "timeout"
    SKIPPED = "skipped"


class ProviderError(Exception):
    """A provider call failed. retryable=True for transient failures."""

    def __init__(self, message: str, *, retryable: bool = False):
        super().__init__(message)
        self.retryable = retryable


class ProviderTimeout(ProviderError):
    """A provider exceeded its time budget."""


class ProviderUnavailable(ProviderError):
    """A provider has no credential configured; it is skipped, not failed."""


def http_error(name: str, exc: httpx.HTTPError) -> ProviderError:
    """Translate an httpx failure into a ProviderError."""
    if isinstance(exc, httpx.TimeoutException):
        return ProviderError(f"{name}: request timed out", retryable=True)
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return ProviderError(
            f"{name}: HTTP {status}",
            retryable=status == 429 or status >= 500,
        )
    return ProviderError(f"{name}: {type(exc).__name__}: {exc}", retryable=True)


async def call_with_budget(
    name: str,
    attempt: Callable[[], Awaitable[T]],
    *,
    timeout: float,
    retries: int = 1,
) -> T:
    """
    Run a provider call under its own time budget.

    Retryable failures are retried up to `retries` times inside the same
    budget. Exceeding the budget cancels the in-flight request and raises
    ProviderTimeout.
    """

    async def _attempts() -> T:
        for n in range(retries + 1):
            try:
                return await attempt()
            except ProviderError as e:
                if not e.retryable or n == retries:
                    raise
                logger.info(f"{name} attempt {n + 1} failed ({e}); retrying")
        raise ProviderError(f"{name}: no attempts made")

    try:
        return await asyncio.wait_for(_attempts(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise ProviderTimeout(f"{name}: exceeded {timeout:.1f}s budget") from e


class RecipeSource(ABC):
    """A collaborator that proposes recipe candidates for a pantry."""

    name: str
    badge: Badge

    @property
    @abstractmethod
    def available(self) -> bool:
        """False when the credential is missing; the source is then skipped."""

    @abstractmethod
    async def fetch(self, pantry: Pantry, prefs: PreferenceSet) -> list[RawCandidate]:
        """Raw candidates for the pantry. Raises ProviderError on failure."""
