"""
Unit tests for the HTTP, MCP and AI executors against httpx.MockTransport.
"""

import asyncio
import base64
import json

import httpx
import pytest

from conftest import make_node
from oniflow.common.exceptions import ExternalServiceError, HttpError, NodeExecutionError, RunAborted
from oniflow.Node.Nodes.Ai.AiPrompt.node import AiPrompt, parse_json_content
from oniflow.Node.Nodes.Http.HttpRequest.node import HttpRequest
from oniflow.Node.Nodes.Mcp.McpTool.node import McpTool


# HTTP

@pytest.mark.asyncio
async def test_http_get_interpolates_url_and_decodes_json(make_services, ctx):
    """{{input.path}} is interpolated into the URL and JSON bodies are decoded."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["method"] = request.method
        return httpx.Response(200, json={"user": {"name": "Ada"}})

    node = make_node("http", {"url": "https://api.test/users/{{input.id}}", "responsePath": "user.name"})
    output = await HttpRequest(make_services(handler)).run(ctx, node, {"id": 7})

    assert seen == {"url": "https://api.test/users/7", "method": "GET"}
    assert output == {
        "_http": True,
        "status": 200,
        "statusText": "OK",
        "url": "https://api.test/users/7",
        "method": "GET",
        "data": "Ada",
    }


@pytest.mark.asyncio
async def test_http_post_sends_body_headers_and_bearer_auth(make_services, ctx):
    """POST bodies are interpolated and default to JSON content type."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["headers"] = request.headers
        seen["body"] = request.content.decode()
        return httpx.Response(201, text="created")

    node = make_node(
        "http",
        {
            "method": "post",
            "url": "https://api.test/items",
            "headers": [{"key": "X-Trace", "value": "{{input.trace}}"}, {"key": "", "value": "ignored"}],
            "body": '{"name": "{{input.name}}"}',
            "authType": "bearer",
            "authToken": "secret",
        },
    )
    output = await HttpRequest(make_services(handler)).run(ctx, node, {"trace": "t-1", "name": "box"})

    assert seen["body"] == '{"name": "box"}'
    assert seen["headers"]["content-type"] == "application/json"
    assert seen["headers"]["x-trace"] == "t-1"
    assert seen["headers"]["authorization"] == "Bearer secret"
    assert output["status"] == 201
    assert output["data"] == "created"


@pytest.mark.asyncio
async def test_http_keeps_explicit_content_type(make_services, ctx):
    """A user-supplied Content-Type is not overridden, whatever its case."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["content-type"] = request.headers["content-type"]
        return httpx.Response(200, text="ok")

    node = make_node(
        "http",
        {
            "method": "PUT",
            "url": "https://api.test/doc",
            "headers": {"content-type": "text/plain"},
            "body": "plain {{input}}",
        },
    )
    await HttpRequest(make_services(handler)).run(ctx, node, "text")
    assert seen["content-type"] == "text/plain"


@pytest.mark.asyncio
async def test_http_basic_and_api_key_auth(make_services, ctx):
    """basic auth encodes user:pass, apikey uses the configured header."""
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.headers)
        return httpx.Response(200, text="ok")

    services = make_services(handler)
    basic = make_node("http", {"url": "https://api.test", "authType": "basic", "authUser": "u", "authPass": "p"})
    apikey = make_node("http", {"url": "https://api.test", "authType": "apikey", "authToken": "k", "authHeaderName": "X-Key"})
    await HttpRequest(services).run(ctx, basic, None)
    await HttpRequest(services).run(ctx, apikey, None)

    assert seen[0]["authorization"] == "Basic " + base64.b64encode(b"u:p").decode()
    assert seen[1]["x-key"] == "k"


@pytest.mark.asyncio
async def test_http_non_2xx_raises_with_truncated_body(make_services, ctx):
    """Error responses raise HttpError with the body cut at 200 chars."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="x" * 500)

    node = make_node("http", {"url": "https://api.test/missing"})
    with pytest.raises(NodeExecutionError) as exc_info:
        await HttpRequest(make_services(handler)).run(ctx, node, None)

    cause = exc_info.value.__cause__
    assert isinstance(cause, HttpError)
    assert cause.status_code == 404
    assert exc_info.value.reason == "HTTP 404 Not Found: " + "x" * 200


@pytest.mark.asyncio
async def test_http_timeout_raises(make_services, ctx):
    """Transport timeouts surface as an HttpError naming the timeout."""

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    node = make_node("http", {"url": "https://api.test/slow", "timeout": 2})
    with pytest.raises(NodeExecutionError) as exc_info:
        await HttpRequest(make_services(handler)).run(ctx, node, None)
    assert exc_info.value.reason == "HTTP request timed out after 2s"


@pytest.mark.asyncio
async def test_http_requires_url(make_services, ctx):
    """A node without URL fails."""
    with pytest.raises(NodeExecutionError) as exc_info:
        await HttpRequest(make_services()).run(ctx, make_node("http"), None)
    assert exc_info.value.reason == "No URL configured"


@pytest.mark.asyncio
async def test_http_request_is_cancelled_on_abort(make_services, ctx):
    """Aborting the run cancels an in-flight request."""
    started = asyncio.Event()

    async def handler(request: httpx.Request) -> httpx.Response:
        started.set()
        await asyncio.sleep(30)
        return httpx.Response(200)

    node = make_node("http", {"url": "https://api.test/hang"})
    task = asyncio.ensure_future(HttpRequest(make_services(handler)).run(ctx, node, None))
    await asyncio.wait_for(started.wait(), timeout=1.0)
    ctx.abort()
    with pytest.raises(RunAborted):
        await asyncio.wait_for(task, timeout=1.0)


# MCP

@pytest.mark.asyncio
async def test_mcp_posts_to_proxy_with_interpolated_arguments(make_services, ctx, settings):
    """String argument values are interpolated and the result is unwrapped."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["payload"] = json.loads(request.content)
        return httpx.Response(200, json={"result": {"items": [{"title": "first"}]}})

    node = make_node(
        "mcp",
        {
            "serverName": "github",
            "toolName": "search",
            "inputMapping": '{"query": "{{input.q}}", "limit": 5}',
            "outputPath": "items[0].title",
        },
    )
    output = await McpTool(make_services(handler)).run(ctx, node, {"q": "oniflow"})

    assert seen["url"] == settings.mcp_proxy_url
    assert seen["payload"] == {"server": "github", "tool": "search", "arguments": {"query": "oniflow", "limit": 5}}
    assert output == {"_mcp": True, "server": "github", "tool": "search", "data": "first"}


@pytest.mark.asyncio
async def test_mcp_invalid_mapping_sends_empty_arguments(make_services, ctx):
    """An inputMapping that is not valid JSON becomes {}."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["payload"] = json.loads(request.content)
        return httpx.Response(200, json={"ok": True})

    node = make_node("mcp", {"serverName": "s", "toolName": "t", "inputMapping": "{oops"})
    output = await McpTool(make_services(handler)).run(ctx, node, None)
    assert seen["payload"]["arguments"] == {}
    assert output["data"] == {"ok": True}


@pytest.mark.asyncio
async def test_mcp_error_field_raises(make_services, ctx):
    """An error field in the proxy response fails the node."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"error": "tool not found"})

    node = make_node("mcp", {"serverName": "s", "toolName": "t"})
    with pytest.raises(NodeExecutionError) as exc_info:
        await McpTool(make_services(handler)).run(ctx, node, None)
    assert exc_info.value.reason == "tool not found"
    assert isinstance(exc_info.value.__cause__, ExternalServiceError)


@pytest.mark.asyncio
async def test_mcp_requires_server_and_tool(make_services, ctx):
    """Missing serverName or toolName is a configuration error."""
    with pytest.raises(NodeExecutionError) as exc_info:
        await McpTool(make_services()).run(ctx, make_node("mcp", {"toolName": "t"}), None)
    assert exc_info.value.reason == "No MCP server configured"
    with pytest.raises(NodeExecutionError) as exc_info:
        await McpTool(make_services()).run(ctx, make_node("mcp", {"serverName": "s"}), None)
    assert exc_info.value.reason == "No MCP tool configured"


# AI

def _completion(content: str) -> dict:
    return {"choices": [{"message": {"content": content}}]}


@pytest.mark.asyncio
async def test_ai_transform_sends_chat_request(make_services, ctx, settings):
    """The request carries mode prompt, input, bearer key and json response format."""
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=_completion('{"title": "Hello"}'))

    node = make_node("ai", {"prompt": "Make a title", "apiUrl": "https://llm.test/v1/chat", "apiKey": "sk-1"})
    output = await AiPrompt(make_services(handler)).run(ctx, node, {"text": "hello world"})

    body = seen["body"]
    assert seen["auth"] == "Bearer sk-1"
    assert body["model"] == settings.ai_default_model
    assert body["temperature"] == 0.7
    assert body["response_format"] == {"type": "json_object"}
    assert body["messages"][0]["content"].startswith("You are a data transformation assistant.")
    assert "Make a title\n\nInput data:\n" in body["messages"][1]["content"]
    assert output == {
        "_ai": True,
        "mode": "transform",
        "model": settings.ai_default_model,
        "data": {"title": "Hello"},
        "rawContent": '{"title": "Hello"}',
    }


@pytest.mark.asyncio
async def test_ai_decide_mode_returns_condition_output(make_services, ctx):
    """decide mode yields a routable {_condition, result, reason} output."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion('{"result": false, "reason": "too short"}'))

    node = make_node("ai", {"prompt": "Is it long?", "apiUrl": "https://llm.test", "apiKey": "k", "mode": "decide"})
    executor = AiPrompt(make_services(handler))
    output = await executor.run(ctx, node, "hi")
    assert output["_condition"] is True
    assert output["_ai"] is True
    assert output["result"] is False
    assert output["reason"] == "too short"
    assert executor.routes_branches(node) is True
    assert executor.routes_branches(make_node("ai", {"mode": "transform"})) is False


@pytest.mark.asyncio
async def test_ai_decide_mode_array_answer_is_false(make_services, ctx):
    """A JSON array has no result field, so the verdict is false."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=_completion('["true", "yes"]'))

    node = make_node("ai", {"prompt": "Is it long?", "apiUrl": "https://llm.test", "apiKey": "k", "mode": "decide"})
    output = await AiPrompt(make_services(handler)).run(ctx, node, "hi")
    assert output["result"] is False
    assert output["reason"] is None


@pytest.mark.asyncio
async def test_ai_error_response_raises(make_services, ctx):
    """Non-OK responses raise with the API's error message."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"error": {"message": "bad key"}})

    node = make_node("ai", {"prompt": "x", "apiUrl": "https://llm.test", "apiKey": "k"})
    with pytest.raises(NodeExecutionError) as exc_info:
        await AiPrompt(make_services(handler)).run(ctx, node, None)
    assert exc_info.value.reason == "AI API error (401): bad key"


@pytest.mark.asyncio
async def test_ai_requires_prompt_endpoint_and_key(make_services, ctx):
    """Prompt, endpoint and key are all required."""
    executor = AiPrompt(make_services())
    for config, reason in [
        ({}, "No prompt configured"),
        ({"prompt": "p"}, "No AI API endpoint configured. Set the API URL in the node config."),
        ({"prompt": "p", "apiUrl": "https://llm.test"}, "No API key configured. Set the API Key in the node config."),
    ]:
        with pytest.raises(NodeExecutionError) as exc_info:
            await executor.run(ctx, make_node("ai", config), None)
        assert exc_info.value.reason == reason


def test_parse_json_content_reads_fenced_block():
    """JSON wrapped in a markdown fence is still parsed."""
    assert parse_json_content('Sure:\n```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json_content("not json") == "not json"
