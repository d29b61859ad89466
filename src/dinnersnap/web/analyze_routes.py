"""
Analyze endpoint.

POST only. Client input errors are 4xx with {"error": ...}; everything
past validation is a 200 with at least one recipe.
"""

import json
import logging
from functools import lru_cache

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from dinnersnap.orchestrator import RecipeOrchestrator, build_orchestrator
from dinnersnap.web.schemas import AnalyzeRequestIn, AnalyzeResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analyze"])

ANALYZE_PATHS = ("/api/analyze", "/analyze")


@lru_cache
def get_orchestrator() -> RecipeOrchestrator:
    """Process-wide orchestrator built from settings."""
    return build_orchestrator()


def _error(status: int, message: str, **headers: str) -> JSONResponse:
    return JSONResponse(status_code=status, content={"error": message}, headers=headers or None)


async def analyze(
    request: Request,
    orchestrator: RecipeOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Photo or ingredient list in, pantry and up to three recipes out."""
    max_bytes = orchestrator.settings.max_body_bytes

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        return _error(413, "request body too large")

    body = await request.body()
    if len(body) > max_bytes:
        return _error(413, "request body too large")

    try:
        data = json.loads(body) if body.strip() else {}
    except ValueError as e:
        logger.info(f"Malformed JSON body: {e}")
        return _error(400, "malformed JSON body")

    try:
        payload = AnalyzeRequestIn.model_validate(data)
    except ValidationError as e:
        logger.info(f"Invalid analyze request: {e.error_count()} errors")
        return _error(400, "invalid request body")

    if not payload.has_input and not payload.prefs.pantry_only:
        return _error(400, "imageBase64 required (or pantryOverride)")

    result = await orchestrator.run_with_watchdog(payload.to_request())
    response = AnalyzeResponse.from_result(result)
    return JSONResponse(content=response.model_dump(by_alias=True))


async def method_not_allowed() -> JSONResponse:
    return _error(405, "POST only", Allow="POST")


for _path in ANALYZE_PATHS:
    router.add_api_route(_path, analyze, methods=["POST"])
    router.add_api_route(
        _path,
        method_not_allowed,
        methods=["GET", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
