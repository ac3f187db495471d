"""HTTP boundary: POST /api/review runs the full pipeline for one prompt.

Error response body: ``{"error": "<user-facing message>"}``
- 400: invalid body or prompt validation failure
- 500: configuration, provider or unknown failure
"""

import logging
from collections.abc import Mapping

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config.config_loader import AppConfig
from peer_review.errors import ReviewError, ValidationError
from peer_review.invoker import ProviderInvoker
from peer_review.models import Prompt
from peer_review.pipeline import run_review
from peer_review.providers.base import TextGenerationProvider
from peer_review.providers.factory import build_providers, build_review_roles

logger = logging.getLogger(__name__)

INVALID_BODY_MESSAGE = "Invalid request body. Send JSON with a `prompt` string."


class ReviewRequest(BaseModel):
    prompt: str = ""


def get_status_code_for_error(error: ReviewError) -> int:
    if isinstance(error, ValidationError):
        return 400
    return 500


def _error_response(message: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


async def _review_error_handler(request: Request, exc: ReviewError) -> JSONResponse:
    status_code = get_status_code_for_error(exc)
    if status_code >= 500:
        logger.error("Review failed (%s): %s", exc.kind, exc.user_message)
    return _error_response(exc.user_message, status_code)


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Rejected request body: %s", exc.errors())
    return _error_response(INVALID_BODY_MESSAGE, 400)


def create_app(
    config: AppConfig,
    providers: Mapping[str, TextGenerationProvider] | None = None,
    invoker: ProviderInvoker | None = None,
) -> FastAPI:
    """Build the FastAPI app.

    Args:
        config: Loaded settings.
        providers: Pre-built providers keyed by settings name. When omitted,
            providers are built per request, so a missing key shows up as a
            500 on that request instead of a startup crash.
        invoker: Shared invoker; defaults to one using the configured retry delay.
    """
    app = FastAPI(title="LLM Peer Review")
    shared_invoker = invoker or ProviderInvoker(config.defaults.retry_delay_sec)

    app.add_exception_handler(ReviewError, _review_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/review")
    async def review(body: ReviewRequest) -> dict[str, str]:
        prompt = Prompt.parse(body.prompt, config.defaults.prompt_max_chars)
        active = providers if providers is not None else build_providers(config, config.pipeline_provider_names())
        reviewers, summarizer = build_review_roles(config, active)
        result = await run_review(prompt, reviewers, summarizer, config.prompts, invoker=shared_invoker)
        return result.to_dict()

    return app
