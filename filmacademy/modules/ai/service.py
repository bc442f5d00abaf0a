"""AI production tools: call-sheet parsing, shot parsing and streamed assistants."""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Optional

from pydantic import ValidationError

from filmacademy.core.config import settings
from filmacademy.core.exceptions import AIServiceException, ValidationException
from filmacademy.modules.utils.text import is_blank

from . import prompts
from .client import AIGatewayClient
from .schemas import (
    AssistantKind,
    CallSheetData,
    CallSheetParseResult,
    ChatMessage,
    ShotDetails,
    ShotParseResult,
)

logger = logging.getLogger(__name__)


def call_sheet_warnings(data: CallSheetData) -> List[str]:
    """Flag critical sections the model left empty."""
    warnings = []
    if not data.production_company:
        warnings.append("Missing production_company")
    if not data.project_name:
        warnings.append("Missing project_name")
    if not data.shoot_date:
        warnings.append("Missing shoot_date")
    if not data.scenes:
        warnings.append("No scenes extracted")
    if not data.cast:
        warnings.append("No cast extracted")
    if not data.crew:
        warnings.append("No crew extracted")
    return warnings


class AIToolsService:
    def __init__(self, client: Optional[AIGatewayClient] = None):
        self.client = client or AIGatewayClient()

    def parse_call_sheet(self, text: str) -> CallSheetParseResult:
        if is_blank(text):
            raise ValidationException("Text must be provided", field="text")

        arguments = self.client.call_tool(
            model=settings.ai_structured_model,
            messages=[
                {"role": "system", "content": prompts.CALL_SHEET_SYSTEM_PROMPT},
                {"role": "user", "content": prompts.call_sheet_user_prompt(text)},
            ],
            tool=prompts.CALL_SHEET_TOOL,
            temperature=0.1,
        )
        try:
            data = CallSheetData.model_validate(arguments)
        except ValidationError as exc:
            logger.error(f"Call sheet extraction did not match schema: {exc}")
            raise AIServiceException("AI returned malformed call sheet data")

        warnings = call_sheet_warnings(data)
        if warnings:
            logger.warning(f"Call sheet extraction warnings: {', '.join(warnings)}")
        return CallSheetParseResult(data=data, warnings=warnings)

    def parse_shot_prompt(
        self, prompt: str, existing_shot: Optional[Dict[str, Any]] = None
    ) -> ShotParseResult:
        """Parse a shot description and merge the mentioned fields over the existing shot."""
        if is_blank(prompt):
            raise ValidationException("Prompt is required", field="prompt")

        existing_json = (
            json.dumps(existing_shot, indent=2, default=str) if existing_shot else None
        )
        arguments = self.client.call_tool(
            model=settings.ai_default_model,
            messages=[
                {"role": "system", "content": prompts.SHOT_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": prompts.shot_user_prompt(prompt, existing_json),
                },
            ],
            tool=prompts.SHOT_TOOL,
        )
        try:
            details = ShotDetails.model_validate(arguments)
        except ValidationError as exc:
            logger.error(f"Shot parsing did not match schema: {exc}")
            raise AIServiceException("AI returned malformed shot data")

        updates = {
            key: value
            for key, value in details.model_dump(by_alias=True).items()
            if value is not None and value != ""
        }
        return ShotParseResult(parsed_shot={**(existing_shot or {}), **updates})

    def stream_assistant(
        self,
        kind: AssistantKind,
        messages: List[ChatMessage],
        project_details: Optional[Dict[str, Any]] = None,
    ) -> Iterator[bytes]:
        if not messages:
            raise ValidationException("At least one message is required", field="messages")

        upstream_messages = [
            {
                "role": "system",
                "content": prompts.assistant_system_prompt(kind, project_details),
            },
            *({"role": m.role, "content": m.content} for m in messages),
        ]
        logger.info(f"Starting {kind.value} assistant chat")
        return self.client.stream_chat(
            model=settings.ai_default_model, messages=upstream_messages
        )


__all__ = ["AIToolsService", "call_sheet_warnings"]
