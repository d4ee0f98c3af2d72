"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from bytebuddy.api.chat_models import MemoryChatRequest, MemoryChatResponse
from bytebuddy.app_logging import configure_logging
from bytebuddy.containers import AppContainer


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/api/chat", response_model=MemoryChatResponse)
    async def memory_chat(request: Request) -> MemoryChatResponse | JSONResponse:
        """Reply to a message using the remote conversation memory."""
        payload = await _read_chat_request(request)
        if payload is None or not payload.is_complete():
            return JSONResponse(
                status_code=status.HTTP_400_BAD_REQUEST,
                content={"error": "Missing required fields"},
            )
        state_container: AppContainer = request.app.state.container
        service = state_container.memory_chat_service
        if service is None:
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": "Memory store is not configured"},
            )
        try:
            reply = await service.reply(
                user_id=payload.user_id,
                conversation_id=payload.conversation_id,
                message=payload.message,
            )
        except Exception as exc:
            logger.exception("Memory chat failed")
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": str(exc) or "Internal Server Error"},
            )
        return MemoryChatResponse(reply=reply)

    @app.api_route(
        "/api/chat", methods=["GET", "HEAD", "OPTIONS", "PUT", "PATCH", "DELETE"]
    )
    async def memory_chat_method_not_allowed() -> JSONResponse:
        """Reject non-POST requests to the chat endpoint."""
        return JSONResponse(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            content={"error": "Method not allowed"},
        )

    return app


async def _read_chat_request(request: Request) -> MemoryChatRequest | None:
    try:
        return MemoryChatRequest.model_validate(await request.json())
    except (ValueError, ValidationError):
        return None
