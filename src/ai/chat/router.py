"""FastAPI router for the streaming chat completion endpoint."""

import traceback
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field

from src.ai.base import ChatMessage, ErrorResponse
from src.ai.chat.service import ChatCompletionService
from src.ai.openai.exceptions import OpenAIConfigurationError, OpenAIError
from src.config import get_app_settings
from src.utils.logger import logger

router = APIRouter(prefix="/openai", tags=["Chat"])


class ChatRequest(BaseModel):
    """Chat request with the full message history."""

    messages: list[ChatMessage] = Field(min_length=1)


# Singleton service instance
_chat_service: ChatCompletionService | None = None


def get_chat_service() -> ChatCompletionService:
    """
    Get or create the chat service singleton.

    Returns:
        ChatCompletionService: The chat service instance
    """
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatCompletionService()
        logger.info("Initialized ChatCompletionService")
    return _chat_service


def error_response(
    status_code: int, error: str, details: dict | None = None
) -> JSONResponse:
    """Build a JSON error response; details are dropped in production."""
    if not get_app_settings().expose_error_details:
        details = None
    body = ErrorResponse(error=error, details=details)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(exclude_none=True)
    )


@router.post("/chat")
async def stream_chat(
    request: ChatRequest,
    chat_service: Annotated[ChatCompletionService, Depends(get_chat_service)],
):
    """
    Stream a chat completion as plain text chunks.

    Args:
        request: Chat request with message history
        chat_service: Chat service dependency

    Returns:
        StreamingResponse: Text chunks in arrival order, or a JSON error body
    """
    logger.info("Chat API request received", message_count=len(request.messages))

    try:
        stream = await chat_service.open_stream(request.messages)
    except OpenAIConfigurationError:
        logger.error("OpenAI API key missing")
        return error_response(500, "OpenAI API key not configured")
    except OpenAIError as e:
        logger.error(
            "OpenAI API request failed",
            error=str(e),
            status_code=e.status_code,
            error_type=type(e.original_error).__name__ if e.original_error else None,
        )
        return error_response(
            500,
            "Failed to get response from OpenAI",
            details={
                "message": e.message,
                "status_code": e.status_code,
                "cause": str(e.original_error) if e.original_error else None,
            },
        )
    except Exception as e:
        logger.exception(
            "Unhandled error in chat API", error=str(e), error_type=type(e).__name__
        )
        return error_response(
            500,
            str(e) or "An error occurred during your request.",
            details={
                "name": type(e).__name__,
                "stack": traceback.format_exc(),
                "cause": repr(e.__cause__) if e.__cause__ else None,
            },
        )

    return StreamingResponse(
        stream,
        media_type="text/plain; charset=utf-8",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",  # Disable nginx buffering
        },
    )
