"""
DinnerSnap - Emergency recipe.

A locally synthesized recipe used when neither provider produced anything
admissible, or when the request watchdog fires. A pure function of the
pantry (and the explore flag): no I/O, cannot fail.
"""

import hashlib

from dinnersnap.pantry.lexicon import CHICKPEA_HINTS, COCONUT_HINTS, PASTA_WORDS
from dinnersnap.pantry.models import Pantry
from dinnersnap.recipes.models import Badge, IngredientLine, RecipeCandidate, Step

# (display name, pantry items that already satisfy it)
FLAVOUR_BASE: tuple[tuple[str, frozenset[str]], ...] = (
    ("onion (or onion powder)", frozenset({"onion", "spring onion"})),
    ("garlic (or garlic powder)", frozenset({"garlic"})),
    ("ginger (or ground ginger)", frozenset({"ginger"})),
    ("mixed dried herbs", frozenset({"mixed dried herbs"})),
    ("stock cube", frozenset({"stock cube", "maggi seasoning"})),
    ("lemon or vinegar", frozenset({"lemon", "vinegar"})),
    ("salt & black pepper", frozenset({"salt", "black pepper", "pepper"})),
)


def _title(pantry: Pantry, explore: bool) -> str:
    bits = []
    if pantry.items & CHICKPEA_HINTS:
        bits.append("Chickpea")
    if pantry.items & COCONUT_HINTS:
        bits.append("Coconut")
    pasta = sorted(pantry.items & PASTA_WORDS)
    if pasta:
        bits.append(pasta[0].title())

    lead = " ".join(bits) if bits else "Pantry"
    dish = "Spiced One-Pot Stew" if explore else "Savoury Skillet"
    return f"{lead} {dish}"


def _steps(pantry: Pantry, explore: bool) -> tuple[Step, ...]:
    sample = ", ".join(pantry.as_list()[:4]) or "your pantry items"
    texts = [
        "Heat a splash of oil; add onion, garlic & ginger. Cook 2-3 min.",
        f"Add your pantry ingredients (e.g. {sample}) with the herbs and crumbled stock cube.",
        "Pour in a little water and simmer 6-8 min, stirring, until everything is hot through.",
        "Finish with lemon or vinegar, season with salt & pepper and serve.",
    ]
    if explore:
        texts[1] = f"Toast a pinch of spice, then add your pantry ingredients (e.g. {sample})."
        texts[2] = "Add a mug of water with the stock cube and simmer 10-12 min until thickened."
    return tuple(Step(id=f"s{i}", text=text) for i, text in enumerate(texts, start=1))


def emergency_recipe(pantry: Pantry | None = None, explore: bool = False) -> RecipeCandidate:
    """
    Build the fallback recipe from pantry contents alone.

    Every pantry item is listed as have=True; the flavour base follows as
    have=False for whatever the pantry does not already cover.
    """
    pantry = pantry or Pantry()

    ingredients = [IngredientLine(name=item, have=True) for item in pantry.as_list()]
    for name, satisfied_by in FLAVOUR_BASE:
        if not (pantry.items & satisfied_by):
            ingredients.append(IngredientLine(name=name, have=False))

    digest = hashlib.sha1("|".join(pantry.as_list()).encode()).hexdigest()[:8]
    suffix = "-explore" if explore else ""

    return RecipeCandidate(
        id=f"local-{digest}{suffix}",
        title=_title(pantry, explore),
        time=25 if explore else 15,
        cost=2.0,
        energy="hob",
        ingredients=tuple(ingredients),
        steps=_steps(pantry, explore),
        badges=(Badge.LOCAL,),
    )
