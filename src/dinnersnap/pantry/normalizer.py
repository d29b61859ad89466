"""
DinnerSnap - Pantry Normalizer.

Turns a raw bag of tokens (vision labels, object names, OCR words, or a
user-supplied list) into a Pantry of canonical ingredients.

Per distinct lowercased token:
1. Synonym mapping
2. Exact vocabulary membership
3. Approximate match (tokens of MIN_FUZZY_LENGTH or more)
4. Otherwise dropped - unrecognized tokens are expected, never an error

Optional pre-processing for vision tokens:
- strip_meat_when_seasoning: "beef stock cube" does not mean beef is present
- join_phrases: "coconut" + "milk" -> "coconut milk"
"""

import logging
import re
from collections.abc import Iterable

from dinnersnap.pantry.lexicon import (
    PHRASES,
    SEASONING_MEAT_WORDS,
    SEASONING_PATTERN,
    canonical_form,
    is_canonical,
)
from dinnersnap.pantry.matcher import MIN_FUZZY_LENGTH, nearest_canonical
from dinnersnap.pantry.models import Pantry

logger = logging.getLogger(__name__)

_SEASONING_RE = re.compile(SEASONING_PATTERN)


def normalize_name(name: str) -> str:
    """
    Lowercase, strip and collapse internal whitespace.

    Examples:
        normalize_name("  Coconut   Milk ") -> "coconut milk"
        normalize_name("BROCCOLI") -> "broccoli"
    """
    return " ".join(name.lower().split())


def _lowered(tokens: Iterable[object]) -> list[str]:
    """Normalized string tokens, skipping non-strings and blanks."""
    out = []
    for token in tokens or ():
        if not isinstance(token, str):
            continue
        name = normalize_name(token)
        if name:
            out.append(name)
    return out


def canonicalize(token: str) -> str | None:
    """Canonical ingredient for one normalized token, or None to drop it."""
    term = canonical_form(token)
    if is_canonical(term):
        return term
    if len(term) >= MIN_FUZZY_LENGTH:
        return nearest_canonical(term)
    return None


def normalize(raw_tokens: Iterable[object]) -> Pantry:
    """
    Build a Pantry from raw tokens.

    Never raises: malformed entries are skipped, unknown words dropped.
    """
    accepted: set[str] = set()
    dropped: list[str] = []

    for token in dict.fromkeys(_lowered(raw_tokens)):
        term = canonicalize(token)
        if term:
            accepted.add(term)
        else:
            dropped.append(token)

    if dropped:
        logger.debug(f"Dropped unrecognized tokens: {dropped}")

    return Pantry.of(accepted)


def strip_meat_when_seasoning(tokens: Iterable[object]) -> list[str]:
    """
    Remove bare meat words when any token looks like a seasoning product.

    A "chicken seasoning" or "beef stock" package should not make us believe
    the meat itself is in the cupboard.
    """
    lowered = _lowered(tokens)
    if not any(_SEASONING_RE.search(t) for t in lowered):
        return lowered

    kept = [t for t in lowered if t not in SEASONING_MEAT_WORDS]
    if len(kept) != len(lowered):
        logger.debug("Seasoning context: suppressed bare meat tokens")
    return kept


def join_phrases(tokens: Iterable[object]) -> list[str]:
    """
    Recombine compound food names split across tokens.

    When every word of a known phrase appears as a single-word token, the
    phrase is added and those tokens are dropped, so "coconut", "milk" becomes
    "coconut milk" rather than also "milk". Words inside a multi-word token
    ("coconut water") never take part.
    """
    lowered = _lowered(tokens)
    words = {token for token in lowered if " " not in token}

    phrases: list[str] = []
    superseded: set[str] = set()
    for parts, phrase in PHRASES:
        if all(part in words for part in parts):
            phrases.append(phrase)
            superseded.update(parts)

    if not phrases:
        return lowered

    kept = [t for t in lowered if t not in superseded]
    return kept + [p for p in phrases if p not in kept]


def pantry_from_vision(tokens: Iterable[object]) -> Pantry:
    """Vision path: seasoning meat suppression, phrase joining, normalization."""
    return normalize(join_phrases(strip_meat_when_seasoning(tokens)))
