"""
DinnerSnap - Approximate Matcher.

Snaps a noisy token (typo, OCR misread, plural drift) to the nearest
canonical vocabulary term, but only when it is confidently the same word.

Thresholds are tuned against real label/OCR output:
- "brocoli" -> "broccoli" = distance 1 (accepted)
- short tokens ("xyz", "ham") sit within distance 1 of too many unrelated
  vocabulary words, hence the length gate
- distance 2 snapped unrelated words onto the vocabulary, hence the strict gate
"""

from collections.abc import Iterable

from dinnersnap.pantry.lexicon import VOCABULARY

MIN_FUZZY_LENGTH = 5
MAX_EDIT_DISTANCE = 1


def edit_distance(a: str, b: str) -> int:
    """Levenshtein distance; insertion, deletion and substitution cost 1."""
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            current.append(min(
                previous[j] + 1,
                current[j - 1] + 1,
                previous[j - 1] + (ca != cb),
            ))
        previous = current
    return previous[-1]


def nearest_canonical(
    term: str,
    vocabulary: Iterable[str] = VOCABULARY,
) -> str | None:
    """
    Nearest vocabulary term within MAX_EDIT_DISTANCE, or None.

    Tokens shorter than MIN_FUZZY_LENGTH never match. Ties go to the first
    vocabulary entry reaching the minimum distance.
    """
    if not isinstance(term, str) or len(term) < MIN_FUZZY_LENGTH:
        return None

    best: str | None = None
    best_distance = MAX_EDIT_DISTANCE + 1
    for candidate in vocabulary:
        # Length difference is a lower bound on the distance
        if abs(len(candidate) - len(term)) >= best_distance:
            continue
        distance = edit_distance(term, candidate)
        if distance < best_distance:
            best, best_distance = candidate, distance
            if distance == 0:
                break

    return best if best_distance <= MAX_EDIT_DISTANCE else None
