"""HTTP client for the OpenAI-compatible AI gateway.

Maps upstream failures onto the application's error kinds:
429 -> AIRateLimitedException, 402 -> AIQuotaExhaustedException, anything else
(bad status, timeout, connection error, undecodable body) -> AIServiceException.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterator, List, Optional

import requests

from filmacademy.core.config import settings
from filmacademy.core.exceptions import (
    AIQuotaExhaustedException,
    AIRateLimitedException,
    AIServiceException,
)

logger = logging.getLogger(__name__)


class AIGatewayClient:
    """Thin wrapper over `requests.post` to the chat-completions endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.ai_gateway_api_key
        self.url = url or settings.ai_gateway_url
        self.timeout = timeout or settings.ai_request_timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def _post(self, payload: Dict[str, Any], *, stream: bool = False) -> requests.Response:
        if not self.configured:
            raise AIServiceException("AI service not configured", status_code=503)
        try:
            response = requests.post(
                self.url,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
                stream=stream,
            )
        except requests.Timeout:
            logger.error(f"AI gateway timed out after {self.timeout}s")
            raise AIServiceException("AI service timed out")
        except requests.RequestException as exc:
            logger.error(f"AI gateway request failed: {exc}")
            raise AIServiceException("AI service unreachable")

        if response.status_code >= 400:
            self._raise_for_status(response)
        return response

    def _raise_for_status(self, response: requests.Response) -> None:
        status_code = response.status_code
        try:
            body = response.text[:500]
        finally:
            response.close()

        if status_code == 429:
            logger.warning("AI gateway rate limited the request")
            raise AIRateLimitedException()
        if status_code == 402:
            logger.warning("AI gateway credits exhausted")
            raise AIQuotaExhaustedException()
        logger.error(f"AI gateway error {status_code}: {body}")
        raise AIServiceException(
            f"AI service error: {status_code}", upstream_status=status_code
        )

    def chat_completion(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = self._post(payload)
        try:
            return response.json()
        except ValueError:
            logger.error("AI gateway returned a non-JSON body")
            raise AIServiceException("AI service returned an invalid response")

    def call_tool(
        self,
        *,
        model: str,
        messages: List[Dict[str, str]],
        tool: Dict[str, Any],
        temperature: Optional[float] = None,
    ) -> Dict[str, Any]:
        """Force a single tool call and return its decoded arguments."""
        name = tool["function"]["name"]
        payload: Dict[str, Any] = {
            "model": model,
            "messages": messages,
            "tools": [tool],
            "tool_choice": {"type": "function", "function": {"name": name}},
        }
        if temperature is not None:
            payload["temperature"] = temperature

        data = self.chat_completion(payload)
        try:
            arguments = data["choices"][0]["message"]["tool_calls"][0]["function"][
                "arguments"
            ]
        except (KeyError, IndexError, TypeError):
            logger.error(f"AI gateway response carried no {name} tool call")
            raise AIServiceException("AI did not return structured data")

        if isinstance(arguments, str):
            try:
                arguments = json.loads(arguments)
            except ValueError:
                logger.error(f"{name} arguments are not valid JSON")
                raise AIServiceException("AI returned malformed structured data")
        if not isinstance(arguments, dict):
            raise AIServiceException("AI returned malformed structured data")
        return arguments

    def stream_chat(
        self, *, model: str, messages: List[Dict[str, str]]
    ) -> Iterator[bytes]:
        """Open a streamed completion and return an iterator over the raw SSE bytes.

        The upstream status is checked before this returns, so rate-limit and quota
        errors raise here instead of after the response has started.
        """
        response = self._post(
            {"model": model, "messages": messages, "stream": True}, stream=True
        )

        def _relay() -> Iterator[bytes]:
            try:
                for chunk in response.iter_content(chunk_size=None):
                    if chunk:
                        yield chunk
            finally:
                response.close()

        return _relay()


__all__ = ["AIGatewayClient"]
