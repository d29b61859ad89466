"""
DinnerSnap - Ingredient Lexicon.

The closed vocabulary of ingredient names the system will ever emit, the
synonym table consulted before it, and the category word sets used to
classify recipe titles and pantry contents.

Pure data. Extending the system means adding entries here; nothing else
needs to change.
"""

from typing import Literal

# =============================================================================
# Canonical vocabulary
# =============================================================================

# Order is priority: approximate matching breaks ties on the first entry, so
# common ingredients come before rarer ones that sit close to them.
VOCABULARY: tuple[str, ...] = (
    "banana",
    "broccoli",
    "chickpeas",
    "beans",
    "kidney beans",
    "red kidney beans",
    "tomatoes",
    "onion",
    "garlic",
    "ginger",
    "olive oil",
    "pasta",
    "spaghetti",
    "courgette",
    "feta",
    "orzo",
    "rice",
    "egg",
    "spring onion",
    "lemon",
    "orange",
    "avocado",
    "coconut milk",
    "coconut cream",
    "butternut squash",
    "squash",
    "carrot",
    "pepper",
    "bell pepper",
    "spinach",
    "potato",
    "sweet potato",
    "mushroom",
    "cheese",
    "cheddar",
    "yogurt",
    "milk",
    "almond milk",
    "cream",
    "chicken",
    "chicken breast",
    "beef",
    "pork",
    "lamb",
    "bacon",
    "fish",
    "salmon",
    "tuna",
    "prawns",
    "bread",
    "tortilla",
    "wrap",
    "lentils",
    "peas",
    "sweetcorn",
    "cucumber",
    "lettuce",
    "cabbage",
    "kale",
    "apple",
    "pear",
    "oats",
    "noodles",
    "flour",
    "sugar",
    "butter",
    "salt",
    "black pepper",
    "vinegar",
    "soy sauce",
    "stock cube",
    "curry powder",
    "mixed dried herbs",
    "garam masala",
    "maggi seasoning",
    "jeera",
    "cumin",
    "cloves",
    "paprika",
    "chilli",
)

VOCABULARY_SET: frozenset[str] = frozenset(VOCABULARY)

# =============================================================================
# Synonyms: spelling variant -> canonical term
# =============================================================================

# Keys are never vocabulary entries themselves, so canonical terms are fixed
# points of normalization.
SYNONYMS: dict[str, str] = {
    "bananas": "banana",
    "chickpea": "chickpeas",
    "garbanzo": "chickpeas",
    "garbanzo bean": "chickpeas",
    "garbanzo beans": "chickpeas",
    "zucchini": "courgette",
    "courgettes": "courgette",
    "zucchinis": "courgette",
    "tomato": "tomatoes",
    "cherry tomatoes": "tomatoes",
    "onions": "onion",
    "red onion": "onion",
    "scallion": "spring onion",
    "scallions": "spring onion",
    "green onion": "spring onion",
    "eggs": "egg",
    "brockley": "broccoli",
    "maggi": "maggi seasoning",
    "jeera powder": "jeera",
    "carrots": "carrot",
    "potatoes": "potato",
    "mushrooms": "mushroom",
    "lemons": "lemon",
    "oranges": "orange",
    "apples": "apple",
    "pears": "pear",
    "avocados": "avocado",
    "peppers": "pepper",
    "capsicum": "bell pepper",
    "lentil": "lentils",
    "shrimp": "prawns",
    "prawn": "prawns",
    "yoghurt": "yogurt",
    "greek yogurt": "yogurt",
    "bouillon": "stock cube",
    "bouillon cube": "stock cube",
    "stock cubes": "stock cube",
    "oxo": "stock cube",
    "corn": "sweetcorn",
    "chili": "chilli",
    "chilies": "chilli",
    "chillies": "chilli",
    "cumin seeds": "cumin",
    "mixed herbs": "mixed dried herbs",
    "dried herbs": "mixed dried herbs",
    "porridge oats": "oats",
    "rolled oats": "oats",
    "noodle": "noodles",
    "tortillas": "tortilla",
    "wraps": "wrap",
    "cheddar cheese": "cheddar",
    "feta cheese": "feta",
    "soya sauce": "soy sauce",
}

# =============================================================================
# Category word sets
# =============================================================================

DESSERT_WORDS: frozenset[str] = frozenset({
    "dessert", "pudding", "ice cream", "smoothie", "shake", "cookie",
    "brownie", "cupcake", "cake", "muffin", "pancake", "waffle", "jam",
    "jelly", "compote", "truffle", "fudge", "sorbet", "parfait", "custard",
    "tart", "shortbread", "licorice", "cobbler", "crumble", "chocolate",
})

# Savoury dishes whose names contain a dessert/drink word
SAVOURY_COMPOUNDS: frozenset[str] = frozenset({
    "fish cake", "crab cake", "salmon cake", "potato cake", "rice cake",
    "soda bread",
})

DRINK_WORDS: frozenset[str] = frozenset({
    "drink", "beverage", "mocktail", "cocktail", "margarita", "mojito",
    "spritzer", "soda", "punch", "toddy", "lemonade",
})

ALCOHOL_WORDS: frozenset[str] = frozenset({
    "brandy", "rum", "vodka", "gin", "whisky", "whiskey", "bourbon",
    "tequila", "wine", "liqueur", "amaretto", "cognac", "port", "sherry",
})

MEAT_WORDS: frozenset[str] = frozenset({
    "chicken", "beef", "pork", "lamb", "bacon", "ham", "turkey", "steak",
    "sausage", "chorizo", "mince", "meatball",
})

FISH_WORDS: frozenset[str] = frozenset({
    "fish", "salmon", "tuna", "cod", "haddock", "shrimp", "prawn",
    "anchovy", "sardine", "mackerel", "crab", "lobster", "mussel",
    "scallop", "squid",
})

# Pantry entries that count as having fish for the protein guard
FISH_PANTRY: frozenset[str] = frozenset({"fish", "salmon", "tuna", "prawns"})

PASTA_WORDS: frozenset[str] = frozenset({
    "pasta", "spaghetti", "macaroni", "penne", "farfalle", "orzo",
    "fusilli", "linguine", "tagliatelle",
})

# Basics that do not make a recipe "use what you have"
GENERIC_STAPLES: frozenset[str] = frozenset({
    "pasta", "rice", "bread", "flour", "sugar", "oil", "olive oil", "salt",
    "pepper", "black pepper", "butter",
})

# Ingredients assumed present in any kitchen when counting missing items
KITCHEN_STAPLES: frozenset[str] = frozenset({"water", "salt", "pepper", "oil"})

DAIRY_WORDS: frozenset[str] = frozenset({
    "cheese", "cheddar", "feta", "milk", "cream", "butter", "yogurt",
})

# A title naming one of these is a dish built around it
MAIN_VEGETABLE_WORDS: frozenset[str] = frozenset({
    "mushroom", "broccoli", "courgette", "spinach",
})

# Bare meat tokens that a seasoning/stock package should not imply
SEASONING_MEAT_WORDS: frozenset[str] = frozenset({
    "beef", "chicken", "lamb", "pork", "ham", "turkey", "steak",
})

SEASONING_PATTERN = r"seasoning|stock|bouillon|gravy"

CHICKPEA_HINTS: frozenset[str] = frozenset({"chickpeas"})
COCONUT_HINTS: frozenset[str] = frozenset({"coconut milk", "coconut cream"})

# Food-ish OCR words worth keeping from label text
FOODISH_OCR_WORDS: frozenset[str] = frozenset({
    "ingredients", "organic", "sauce", "soup", "canned", "tin", "dried",
    "fresh", "frozen", "beans", "peas", "lentils", "broccoli", "banana",
    "tomato", "tomatoes", "onion", "garlic", "squash", "chickpea",
    "chickpeas", "feta", "rice", "pasta", "spaghetti", "oats", "milk",
    "yogurt", "cheese", "lemon", "orange", "pepper", "spinach", "mushroom",
    "potato", "avocado", "coconut", "cream", "seasoning", "kidney", "red",
    "stock", "curry", "butternut", "tuna", "salmon", "noodles",
})

# Compound food names that labeling/OCR decomposes into separate words.
# All parts present among raw tokens -> the phrase replaces the bare parts.
PHRASES: tuple[tuple[tuple[str, ...], str], ...] = (
    (("coconut", "milk"), "coconut milk"),
    (("coconut", "cream"), "coconut cream"),
    (("kidney", "beans"), "kidney beans"),
    (("butternut", "squash"), "butternut squash"),
    (("olive", "oil"), "olive oil"),
    (("almond", "milk"), "almond milk"),
    (("curry", "powder"), "curry powder"),
    (("garam", "masala"), "garam masala"),
    (("stock", "cube"), "stock cube"),
    (("soy", "sauce"), "soy sauce"),
)

Category = Literal[
    "dessert", "drink", "alcohol", "meat", "fish", "pasta", "generic",
    "dairy", "main_vegetable",
]

CATEGORIES: dict[str, frozenset[str]] = {
    "dessert": DESSERT_WORDS,
    "drink": DRINK_WORDS,
    "alcohol": ALCOHOL_WORDS,
    "meat": MEAT_WORDS,
    "fish": FISH_WORDS,
    "pasta": PASTA_WORDS,
    "generic": GENERIC_STAPLES,
    "dairy": DAIRY_WORDS,
    "main_vegetable": MAIN_VEGETABLE_WORDS,
}


# =============================================================================
# Lookups
# =============================================================================

def is_canonical(term: str) -> bool:
    """Exact membership in the canonical vocabulary."""
    return term in VOCABULARY_SET


def synonym_for(term: str) -> str | None:
    """Canonical term for a spelling variant, or None if unmapped."""
    return SYNONYMS.get(term)


def canonical_form(term: str) -> str:
    """Synonym target if one exists, otherwise the term unchanged."""
    return SYNONYMS.get(term, term)


def in_category(term: str, category: Category) -> bool:
    """Exact membership of a term in a category word set."""
    return term in CATEGORIES[category]
