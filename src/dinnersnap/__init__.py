"""
DinnerSnap - pantry photo to dinner suggestions.

Packages:
- pantry: Lexicon, approximate matching, pantry normalization
- recipes: Candidate models, provider parsing, admissibility, emergency recipe
- providers: Vision, recipe search and generative collaborators
- web: FastAPI entry point
"""

__version__ = "1.0.0"
