"""
HTTP Request Node

Single Responsibility: Perform an HTTP request (GET, POST, PUT, PATCH, DELETE, etc.)
with configurable URL, headers, body, and auth. Outputs status, status text,
url, method and the decoded body for downstream nodes.
"""

import base64
import json
from typing import Any, Dict, Optional

import httpx
import structlog

from .....common.exceptions import ConfigurationError, HttpError
from .....log_safe import log_safe_output, to_json
from ....Core import BaseNode, WorkflowNode
from ..._shared import interpolate, resolve_path

logger = structlog.get_logger(__name__)

BODY_METHODS = ("POST", "PUT", "PATCH")
DEFAULT_API_KEY_HEADER = "X-API-Key"
ERROR_BODY_LIMIT = 200


def _has_header(headers: Dict[str, str], name: str) -> bool:
    lowered = name.lower()
    return any(key.lower() == lowered for key in headers)


def build_auth_headers(config: Dict[str, Any]) -> Dict[str, str]:
    auth_type = (config.get("authType") or "").strip().lower()
    token = config.get("authToken") or ""

    if auth_type == "bearer" and token:
        return {"Authorization": f"Bearer {token}"}
    if auth_type == "basic" and config.get("authUser"):
        raw = f"{config['authUser']}:{config.get('authPass') or ''}"
        return {"Authorization": f"Basic {base64.b64encode(raw.encode('utf-8')).decode('ascii')}"}
    if auth_type == "apikey" and token:
        return {config.get("authHeaderName") or DEFAULT_API_KEY_HEADER: token}
    return {}


def decode_body(response: httpx.Response) -> Any:
    """JSON when the response says so, otherwise text."""
    content_type = response.headers.get("content-type", "")
    if "application/json" in content_type:
        try:
            return response.json()
        except json.JSONDecodeError:
            return response.text
    return response.text


class HttpRequest(BaseNode):
    """
    Node that performs a single HTTP request.

    Configuration: method, url, headers (list of {key, value} or a mapping),
    body, timeout (seconds), authType (bearer/basic/apikey) with authToken,
    authUser, authPass, authHeaderName, and responsePath.

    {{input}} and {{input.path}} are interpolated into the URL, header keys
    and values, and the body. Non-2xx responses raise HttpError.
    """

    @classmethod
    def identifier(cls) -> str:
        """Unique identifier for this node type."""
        return "http"

    @property
    def label(self) -> str:
        """Human-readable label for UI display."""
        return "HTTP Request"

    @property
    def description(self) -> str:
        """Description of what this node does."""
        return (
            "Makes an HTTP request (GET, POST, PUT, PATCH, DELETE, etc.) "
            "to a URL with configurable headers, body, timeout, and auth."
        )

    def _build_headers(self, config: Dict[str, Any], input: Any) -> Dict[str, str]:
        raw = config.get("headers") or []
        if isinstance(raw, dict):
            pairs = list(raw.items())
        else:
            pairs = [(h.get("key"), h.get("value")) for h in raw if isinstance(h, dict)]

        headers: Dict[str, str] = {}
        for key, value in pairs:
            if not key:
                continue
            headers[interpolate(key, input)] = str(interpolate(value, input) or "")
        headers.update(build_auth_headers(config))
        return headers

    def _timeout(self, config: Dict[str, Any]) -> float:
        try:
            timeout = float(config.get("timeout") or 0)
        except (TypeError, ValueError):
            timeout = 0
        return timeout if timeout > 0 else self.settings.http_timeout

    async def execute(self, ctx, node: WorkflowNode, input: Any) -> Any:
        """
        Perform the HTTP request and return its decoded result.
        """
        config = node.config or {}
        method = (config.get("method") or "GET").upper()
        url = interpolate((config.get("url") or "").strip(), input)
        if not url:
            raise ConfigurationError("No URL configured")

        headers = self._build_headers(config, input)

        content: Optional[str] = None
        body = config.get("body")
        if method in BODY_METHODS and body:
            content = interpolate(body, input) if isinstance(body, str) else to_json(body)
            if not _has_header(headers, "Content-Type"):
                headers["Content-Type"] = "application/json"

        timeout = self._timeout(config)
        client = self.services.get_http_client()

        logger.info("Sending HTTP request", node_id=node.id, method=method, url=url)
        try:
            response = await ctx.guard(
                client.request(method, url, headers=headers, content=content, timeout=timeout)
            )
        except httpx.TimeoutException as e:
            raise HttpError(f"HTTP request timed out after {timeout:g}s") from e
        except httpx.HTTPError as e:
            raise HttpError(f"HTTP request failed: {e}") from e

        data = decode_body(response)

        if not response.is_success:
            preview = data if isinstance(data, str) else to_json(data)
            raise HttpError(
                f"HTTP {response.status_code} {response.reason_phrase}: {preview[:ERROR_BODY_LIMIT]}",
                status_code=response.status_code,
            )

        response_path = config.get("responsePath")
        if response_path and isinstance(data, (dict, list)):
            extracted = resolve_path(data, response_path)
            if extracted is not None:
                data = extracted

        logger.info(
            "HTTP request completed",
            node_id=node.id,
            status=response.status_code,
            body=log_safe_output(data),
        )
        return {
            "_http": True,
            "status": response.status_code,
            "statusText": response.reason_phrase,
            "url": url,
            "method": method,
            "data": data,
        }
