"""AI production tools proxied through the AI gateway."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from filmacademy import oauth2
from filmacademy.core.config import settings
from filmacademy.core.middleware.rate_limit import limiter
from filmacademy.modules.ai.schemas import (
    AssistantChatRequest,
    AssistantKind,
    CallSheetParseRequest,
    CallSheetParseResult,
    ShotParseRequest,
    ShotParseResult,
)
from filmacademy.modules.ai.service import AIToolsService

router = APIRouter(
    prefix="/ai",
    tags=["AI Tools"],
    dependencies=[Depends(oauth2.get_current_user)],
)


def get_ai_service() -> AIToolsService:
    """Provide an AIToolsService instance via FastAPI dependency injection."""
    return AIToolsService()


@router.post("/call-sheets/parse", response_model=CallSheetParseResult)
@limiter.limit(settings.ai_rate_limit)
def parse_call_sheet(
    request: Request,
    payload: CallSheetParseRequest,
    service: AIToolsService = Depends(get_ai_service),
):
    """Extract structured call sheet data from raw text."""
    return service.parse_call_sheet(payload.text)


@router.post("/shots/parse", response_model=ShotParseResult)
@limiter.limit(settings.ai_rate_limit)
def parse_shot(
    request: Request,
    payload: ShotParseRequest,
    service: AIToolsService = Depends(get_ai_service),
):
    return service.parse_shot_prompt(payload.prompt, payload.existing_shot)


@router.post("/assistants/{kind}/chat")
@limiter.limit(settings.ai_rate_limit)
def assistant_chat(
    request: Request,
    kind: AssistantKind,
    payload: AssistantChatRequest,
    service: AIToolsService = Depends(get_ai_service),
):
    """Relay the assistant's streamed answer as server-sent events."""
    stream = service.stream_assistant(kind, payload.messages, payload.project_details)
    return StreamingResponse(
        stream,
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )
