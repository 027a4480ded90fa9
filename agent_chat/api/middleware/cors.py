"""CORS configuration for FastAPI."""

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from agent_chat.api.middleware.request_id import REQUEST_ID_HEADER
from agent_chat.chat.orchestrator import CONVERSATION_ID_HEADER

if TYPE_CHECKING:
    from agent_chat.settings import Settings

logger = logging.getLogger(__name__)


def configure_cors(app: FastAPI, settings: "Settings") -> None:
    """
    Add CORS middleware to FastAPI app.

    Reads allowed origins from settings.cors_origins. Allows credentials, all
    methods and headers, and exposes the conversation and request id headers
    so browser clients can read them from streamed responses.

    Args:
        app: FastAPI application instance
        settings: Settings with cors_origins list
    """
    origins = list(settings.cors_origins)

    # allow_credentials=True is incompatible with a wildcard origin.
    if "*" in origins:
        origins.remove("*")
        logger.warning(
            "cors_wildcard_removed: allow_credentials=True is incompatible with "
            "wildcard origin '*'. Removed '*' from allowed origins."
        )

    logger.info("cors_configured: origins=%s, allow_credentials=True", origins)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[CONVERSATION_ID_HEADER, REQUEST_ID_HEADER],
    )
