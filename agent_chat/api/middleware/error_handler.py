"""Error handling for the chat API."""

import logging
from typing import Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from agent_chat.api.schemas.common import ErrorResponse
from agent_chat.chat.error_classifier import classify_error
from agent_chat.chat.errors import ChatError, InvalidRequestBodyError, MessageRequiredError

logger = logging.getLogger(__name__)


async def error_handling_middleware(request: Request, call_next: Callable) -> Response:
    """
    Catch exceptions and return the standard JSON error shape.

    Handles different exception types:
    - ChatError → status and text from classify_error
    - HTTPException → passthrough with original status
    - Exception → 500 with the generic retry message

    Args:
        request: Incoming FastAPI request
        call_next: Next middleware/handler in chain

    Returns:
        Response object (either success or error JSON)
    """
    try:
        response: Response = await call_next(request)
        return response

    except ChatError as e:
        request_id = getattr(request.state, "request_id", None)
        outcome = classify_error(e)
        logger.warning(
            "chat_error: path=%s, status=%d, code=%s, request_id=%s",
            request.url.path,
            outcome.status_code,
            outcome.code,
            request_id,
        )
        return outcome.to_response(request_id=request_id)

    except HTTPException as e:
        request_id = getattr(request.state, "request_id", None)
        logger.info(
            "http_exception: path=%s, status=%d, detail=%s, request_id=%s",
            request.url.path,
            e.status_code,
            e.detail,
            request_id,
        )
        error = ErrorResponse(error=str(e.detail), code="http_error", request_id=request_id)
        return JSONResponse(status_code=e.status_code, content=error.model_dump(exclude_none=True))

    except Exception as e:
        request_id = getattr(request.state, "request_id", None)
        logger.exception(
            "internal_error: path=%s, error=%s, request_id=%s",
            request.url.path,
            str(e),
            request_id,
        )
        return classify_error(e).to_response(request_id=request_id)


async def request_validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Map FastAPI validation failures to the chat error table.

    Unparseable JSON becomes "Invalid request body"; anything touching the
    ``message`` field becomes "Message is required".

    Args:
        request: Incoming FastAPI request
        exc: Validation error raised by FastAPI

    Returns:
        400 JSON error response
    """
    request_id = getattr(request.state, "request_id", None)
    errors = exc.errors()

    failure: ChatError = InvalidRequestBodyError()
    if not any(err.get("type") == "json_invalid" for err in errors) and any(
        "message" in err.get("loc", ()) for err in errors
    ):
        failure = MessageRequiredError()

    logger.info(
        "request_validation_error: path=%s, code=%s, errors=%d, request_id=%s",
        request.url.path,
        failure.code,
        len(errors),
        request_id,
    )
    return classify_error(failure).to_response(request_id=request_id)
