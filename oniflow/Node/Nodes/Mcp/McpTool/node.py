"""
MCP Tool Node

Single Responsibility: Invoke a tool on a connected tool server through the
tool proxy endpoint.
"""

import json
from typing import Any, Dict

import httpx
import structlog

from .....common.exceptions import ConfigurationError, ExternalServiceError
from ....Core import BaseNode, WorkflowNode
from ..._shared import interpolate, resolve_path

logger = structlog.get_logger(__name__)


def parse_input_mapping(raw: Any) -> Dict[str, Any]:
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return {}
    return raw if isinstance(raw, dict) else {}


class McpTool(BaseNode):
    """
    POSTs {server, tool, arguments} to the configured proxy. String values of
    inputMapping are interpolated with {{input}} / {{input.path}}.
    """

    @classmethod
    def identifier(cls) -> str:
        return "mcp"

    @property
    def label(self) -> str:
        return "MCP Tool"

    async def execute(self, ctx, node: WorkflowNode, input: Any) -> Any:
        config = node.config or {}
        server = config.get("serverName")
        tool = config.get("toolName")
        if not server:
            raise ConfigurationError("No MCP server configured")
        if not tool:
            raise ConfigurationError("No MCP tool configured")

        arguments = {
            key: interpolate(value, input) if isinstance(value, str) else value
            for key, value in parse_input_mapping(config.get("inputMapping")).items()
        }

        proxy_url = self.settings.mcp_proxy_url
        client = self.services.get_http_client()
        logger.info("Calling MCP tool", node_id=node.id, server=server, tool=tool)
        try:
            response = await ctx.guard(
                client.post(
                    proxy_url,
                    json={"server": server, "tool": tool, "arguments": arguments},
                    timeout=self.settings.http_timeout,
                )
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"MCP call failed: {e}", service="mcp") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                f"MCP call failed: {response.status_code} (invalid JSON response)", service="mcp"
            ) from e

        error = data.get("error") if isinstance(data, dict) else None
        if not response.is_success or error:
            raise ExternalServiceError(
                str(error) if error else f"MCP call failed: {response.status_code}", service="mcp"
            )

        output = data.get("result") if isinstance(data, dict) and data.get("result") is not None else data

        output_path = config.get("outputPath")
        if output_path and isinstance(output, (dict, list)):
            extracted = resolve_path(output, output_path)
            if extracted is not None:
                output = extracted

        return {"_mcp": True, "server": server, "tool": tool, "data": output}
