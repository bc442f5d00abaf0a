import json

import pytest
import requests

from filmacademy.core.config import settings
from filmacademy.modules.ai import client as ai_client
from filmacademy.modules.ai.prompts import assistant_system_prompt
from filmacademy.modules.ai.schemas import AssistantKind


class FakeResponse:
    def __init__(self, status_code=200, payload=None, chunks=None, text=""):
        self.status_code = status_code
        self._payload = payload
        self._chunks = chunks or []
        self.text = text
        self.closed = False

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def iter_content(self, chunk_size=None):
        yield from self._chunks

    def close(self):
        self.closed = True


def _tool_response(name, arguments):
    return FakeResponse(
        payload={
            "choices": [
                {
                    "message": {
                        "tool_calls": [
                            {
                                "type": "function",
                                "function": {
                                    "name": name,
                                    "arguments": json.dumps(arguments),
                                },
                            }
                        ]
                    }
                }
            ]
        }
    )


@pytest.fixture
def gateway(monkeypatch):
    """Capture calls to the AI gateway and answer with a queued response."""
    monkeypatch.setattr(settings, "ai_gateway_api_key", "test-key")
    calls = []
    state = {"response": FakeResponse(payload={})}

    def fake_post(url, headers=None, json=None, timeout=None, stream=False):
        calls.append({"url": url, "headers": headers, "json": json, "stream": stream})
        if isinstance(state["response"], Exception):
            raise state["response"]
        return state["response"]

    monkeypatch.setattr(ai_client.requests, "post", fake_post)

    def respond(response):
        state["response"] = response

    respond.calls = calls
    return respond


CALL_SHEET = {
    "production_company": "Northlight Pictures",
    "project_name": "Salt Flats",
    "shoot_date": "2025-04-12",
    "scenes": [{"scene_number": "12A", "set_description": "EXT. DESERT - DAWN"}],
    "cast": [{"character_name": "Ada", "actor_name": "Jo Park", "call_time": "06:00"}],
}


def test_parse_call_sheet(client, auth_headers, gateway):
    gateway(_tool_response("extract_call_sheet", CALL_SHEET))

    res = client.post(
        "/ai/call-sheets/parse", json={"text": "CALL SHEET ..."}, headers=auth_headers
    )
    assert res.status_code == 200
    body = res.json()
    assert body["data"]["project_name"] == "Salt Flats"
    assert body["data"]["scenes"][0]["scene_number"] == "12A"
    assert body["warnings"] == ["No crew extracted"]

    sent = gateway.calls[0]
    assert sent["headers"]["Authorization"] == "Bearer test-key"
    assert sent["json"]["model"] == settings.ai_structured_model
    assert sent["json"]["temperature"] == 0.1
    assert sent["json"]["tool_choice"]["function"]["name"] == "extract_call_sheet"
    assert sent["json"]["messages"][0]["role"] == "system"
    assert "CALL SHEET ..." in sent["json"]["messages"][1]["content"]


def test_parse_call_sheet_rejects_blank_text(client, auth_headers, gateway):
    res = client.post("/ai/call-sheets/parse", json={"text": "  "}, headers=auth_headers)
    assert res.status_code == 422
    assert gateway.calls == []


@pytest.mark.parametrize(
    "upstream, status_code, code",
    [
        (429, 429, "ai_rate_limited"),
        (402, 402, "ai_quota_exhausted"),
        (500, 502, "ai_service_error"),
        (400, 502, "ai_service_error"),
    ],
)
def test_gateway_errors_are_mapped(client, auth_headers, gateway, upstream, status_code, code):
    gateway(FakeResponse(status_code=upstream, text="upstream says no"))
    res = client.post(
        "/ai/call-sheets/parse", json={"text": "CALL SHEET"}, headers=auth_headers
    )
    assert res.status_code == status_code
    assert res.json()["error"]["code"] == code


def test_upstream_status_is_reported(client, auth_headers, gateway):
    gateway(FakeResponse(status_code=503, text="down"))
    res = client.post(
        "/ai/call-sheets/parse", json={"text": "CALL SHEET"}, headers=auth_headers
    )
    assert res.json()["error"]["details"]["upstream_status"] == 503


def test_gateway_timeout(client, auth_headers, gateway):
    gateway(requests.Timeout("slow"))
    res = client.post(
        "/ai/call-sheets/parse", json={"text": "CALL SHEET"}, headers=auth_headers
    )
    assert res.status_code == 502
    assert res.json()["error"]["code"] == "ai_service_error"


def test_missing_tool_call(client, auth_headers, gateway):
    gateway(FakeResponse(payload={"choices": [{"message": {"content": "Sure!"}}]}))
    res = client.post(
        "/ai/call-sheets/parse", json={"text": "CALL SHEET"}, headers=auth_headers
    )
    assert res.status_code == 502
    assert res.json()["error"]["code"] == "ai_service_error"


def test_malformed_tool_arguments(client, auth_headers, gateway):
    response = _tool_response("extract_call_sheet", {})
    response._payload["choices"][0]["message"]["tool_calls"][0]["function"][
        "arguments"
    ] = "{not json"
    gateway(response)
    res = client.post(
        "/ai/call-sheets/parse", json={"text": "CALL SHEET"}, headers=auth_headers
    )
    assert res.status_code == 502


def test_gateway_not_configured(client, auth_headers, monkeypatch):
    monkeypatch.setattr(settings, "ai_gateway_api_key", None)
    res = client.post(
        "/ai/call-sheets/parse", json={"text": "CALL SHEET"}, headers=auth_headers
    )
    assert res.status_code == 503
    assert res.json()["error"]["code"] == "ai_service_error"


def test_ai_tools_require_authentication(client, gateway):
    res = client.post("/ai/call-sheets/parse", json={"text": "CALL SHEET"})
    assert res.status_code == 401
    assert gateway.calls == []


def test_parse_shot_merges_existing(client, auth_headers, gateway):
    gateway(
        _tool_response(
            "parse_shot_details",
            {"shotType": "Close-up", "location": "", "characters": ["Ada"]},
        )
    )
    res = client.post(
        "/ai/shots/parse",
        json={
            "prompt": "Tight close-up on Ada",
            "existing_shot": {"shotType": "Wide", "location": "Beach", "id": "shot-1"},
        },
        headers=auth_headers,
    )
    assert res.status_code == 200
    assert res.json()["parsedShot"] == {
        "shotType": "Close-up",
        "location": "Beach",
        "id": "shot-1",
        "characters": ["Ada"],
    }
    sent = gateway.calls[0]["json"]
    assert sent["model"] == settings.ai_default_model
    assert "shot-1" in sent["messages"][1]["content"]


def test_parse_shot_requires_prompt(client, auth_headers, gateway):
    res = client.post("/ai/shots/parse", json={"prompt": ""}, headers=auth_headers)
    assert res.status_code == 422


def test_assistant_chat_streams(client, auth_headers, gateway):
    chunks = [
        b'data: {"choices":[{"delta":{"content":"Hello"}}]}\n\n',
        b"data: [DONE]\n\n",
    ]
    upstream = FakeResponse(chunks=chunks)
    gateway(upstream)

    res = client.post(
        "/ai/assistants/funding/chat",
        json={
            "messages": [{"role": "user", "content": "Where do I find grants?"}],
            "project_details": {"budget": "250k", "genre": "Documentary"},
        },
        headers=auth_headers,
    )
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/event-stream")
    assert res.content == b"".join(chunks)
    assert upstream.closed is True

    sent = gateway.calls[0]
    assert sent["stream"] is True
    assert sent["json"]["stream"] is True
    assert sent["json"]["messages"][0]["role"] == "system"
    assert "Budget: 250k" in sent["json"]["messages"][0]["content"]
    assert sent["json"]["messages"][1] == {
        "role": "user",
        "content": "Where do I find grants?",
    }


def test_assistant_chat_rate_limited(client, auth_headers, gateway):
    gateway(FakeResponse(status_code=429))
    res = client.post(
        "/ai/assistants/contract/chat",
        json={"messages": [{"role": "user", "content": "Review my deal memo"}]},
        headers=auth_headers,
    )
    assert res.status_code == 429
    assert res.json()["error"]["code"] == "ai_rate_limited"


def test_assistant_chat_requires_messages(client, auth_headers, gateway):
    res = client.post(
        "/ai/assistants/distribution/chat", json={"messages": []}, headers=auth_headers
    )
    assert res.status_code == 422


def test_assistant_unknown_kind(client, auth_headers, gateway):
    res = client.post(
        "/ai/assistants/catering/chat",
        json={"messages": [{"role": "user", "content": "Lunch?"}]},
        headers=auth_headers,
    )
    assert res.status_code == 422


def test_assistant_prompt_skips_empty_details():
    prompt = assistant_system_prompt(
        AssistantKind.DISTRIBUTION, {"title": "Salt Flats", "runtime": ""}
    )
    assert "- Title: Salt Flats" in prompt
    assert "- Runtime:" not in prompt
