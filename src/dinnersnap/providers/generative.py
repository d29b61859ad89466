"""
DinnerSnap - Generative recipe provider (OpenAI chat completions).

Asks the model for one or two dinner recipes built from the pantry, as a
JSON object. The reply is parsed at the boundary; anything unparsable is a
provider error, never a crash.
"""

import logging

import httpx
import openai
from openai import AsyncOpenAI

from dinnersnap.observability.prompt_logger import log_prompt
from dinnersnap.pantry.models import Pantry
from dinnersnap.providers.base import ProviderError, ProviderUnavailable, RecipeSource
from dinnersnap.recipes.models import Badge, PreferenceSet, RawCandidate
from dinnersnap.recipes.parsing import MalformedResponseError, parse_generated_recipes

logger = logging.getLogger(__name__)

TEMPERATURE = 0.4
EXPLORE_TEMPERATURE = 0.8
MAX_TOKENS = 700

SYSTEM_PROMPT = (
    "You are DinnerSnap, a world-class savoury dinner chef. You ONLY create "
    "realistic DINNER recipes using the given pantry ingredients plus basic "
    "staples like water, oil, salt and pepper."
)

RESPONSE_SHAPE = """{
  "recipes": [
    {
      "id": "string",
      "title": "string",
      "time": 10-60,
      "cost": 1-5,
      "energy": "hob" | "oven" | "air fryer" | "microwave",
      "ingredients": [{ "name": "string" }],
      "steps": [{ "id": "string", "text": "string" }]
    }
  ]
}"""

_RETRYABLE = (
    openai.APIConnectionError,  # includes APITimeoutError
    openai.RateLimitError,
    openai.InternalServerError,
)


def build_user_prompt(pantry: Pantry, prefs: PreferenceSet) -> str:
    """User message for one request: pantry plus whatever preferences were given."""
    lines = [
        f"Given this pantry: {', '.join(pantry.as_list())}, create 1-2 DINNER recipes "
        f"as a JSON object with this shape:",
        RESPONSE_SHAPE,
        "",
        f"Each recipe must be ready in at most {prefs.time} minutes and serve {prefs.servings}.",
    ]
    if prefs.diet and prefs.diet != "none":
        lines.append(f"Every recipe must be {prefs.diet}.")
    if prefs.energy_mode:
        lines.append(f"Cook with the {prefs.energy_mode} where possible.")
    if prefs.explore:
        lines.append("Be adventurous: pick a cuisine the user might not think of.")
    lines.append(
        "Use ONLY the pantry ingredients plus universal basics. "
        "Do NOT invent totally new ingredients. No desserts, drinks or alcohol."
    )
    return "\n".join(lines)


class OpenAIRecipeGenerator(RecipeSource):
    """Recipe generation via the OpenAI chat completions API."""

    name = "generative"
    badge = Badge.LLM

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "gpt-4o-mini",
        http_client: httpx.AsyncClient | None = None,
    ):
        self._api_key = api_key
        self._model = model
        self._http_client = http_client

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    def _client(self) -> AsyncOpenAI:
        # Retries are handled by call_with_budget within the provider's budget
        return AsyncOpenAI(api_key=self._api_key, max_retries=0, http_client=self._http_client)

    async def fetch(self, pantry: Pantry, prefs: PreferenceSet) -> list[RawCandidate]:
        if not self.available:
            raise ProviderUnavailable("generative: no OPENAI_API_KEY")

        user_prompt = build_user_prompt(pantry, prefs)
        temperature = EXPLORE_TEMPERATURE if prefs.explore else TEMPERATURE

        try:
            response = await self._client().chat.completions.create(
                model=self._model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=temperature,
                max_tokens=MAX_TOKENS,
                response_format={"type": "json_object"},
            )
        except openai.OpenAIError as e:
            log_prompt(
                source=self.name,
                model=self._model,
                system_prompt=SYSTEM_PROMPT,
                user_prompt=user_prompt,
                temperature=temperature,
                error=str(e),
            )
            raise ProviderError(
                f"generative: {type(e).__name__}: {e}",
                retryable=isinstance(e, _RETRYABLE),
            ) from e

        content = response.choices[0].message.content if response.choices else None
        log_prompt(
            source=self.name,
            model=self._model,
            system_prompt=SYSTEM_PROMPT,
            user_prompt=user_prompt,
            temperature=temperature,
            response=content,
        )

        try:
            candidates = parse_generated_recipes(content, pantry)
        except MalformedResponseError as e:
            raise ProviderError(f"generative: {e}") from e

        logger.debug(f"Generative returned {len(candidates)} raw candidates")
        return candidates
