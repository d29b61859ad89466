"""
DinnerSnap - Pantry normalization.

Lexicon (static vocabulary + synonyms + category sets), approximate matcher
and the normalizer that turns raw tokens into a canonical Pantry.
"""

from dinnersnap.pantry.matcher import edit_distance, nearest_canonical
from dinnersnap.pantry.models import Pantry
from dinnersnap.pantry.normalizer import (
    join_phrases,
    normalize,
    normalize_name,
    pantry_from_vision,
    strip_meat_when_seasoning,
)

__all__ = [
    "Pantry",
    "edit_distance",
    "join_phrases",
    "nearest_canonical",
    "normalize",
    "normalize_name",
    "pantry_from_vision",
    "strip_meat_when_seasoning",
]
