"""
AI Prompt Node

Single Responsibility: Send the input plus an instruction to an OpenAI-style
chat completion endpoint and return the parsed answer. In "decide" mode the
answer is a boolean verdict that drives branch routing.
"""

import json
import re
from typing import Any, Dict

import httpx
import structlog

from .....common.exceptions import ConfigurationError, ExternalServiceError
from .....log_safe import log_safe_output, to_json
from ....Core import BaseNode, WorkflowNode
from ..._shared.prompts import DEFAULT_MODE, system_prompt

logger = structlog.get_logger(__name__)

DECIDE_MODE = "decide"
CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def format_input(input: Any) -> str:
    if isinstance(input, str):
        return input
    return json.dumps("" if input is None else input, indent=2, ensure_ascii=False, default=str)


def parse_json_content(content: str) -> Any:
    """Parse content as JSON, falling back to the first fenced block; else keep the text."""
    try:
        return json.loads(content)
    except ValueError:
        pass
    match = CODE_FENCE.search(content)
    if match:
        try:
            return json.loads(match.group(1).strip())
        except ValueError:
            pass
    return content


def extract_error(data: Any) -> str:
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if error:
            return str(error)
    return to_json(data)[:200]


def extract_content(data: Any) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices") or []
    if choices and isinstance(choices[0], dict):
        message = choices[0].get("message") or {}
        if message.get("content"):
            return message["content"]
    return data.get("content") or ""


class AiPrompt(BaseNode):
    """
    Modes: transform, classify, extract, decide, generate, summarize
    (unknown modes behave like transform).
    """

    @classmethod
    def identifier(cls) -> str:
        return "ai"

    @property
    def label(self) -> str:
        return "AI Prompt"

    def routes_branches(self, node: WorkflowNode) -> bool:
        return (node.config or {}).get("mode") == DECIDE_MODE

    def _build_request(self, config: Dict[str, Any], input: Any, model: str, mode: str) -> Dict[str, Any]:
        output_format = config.get("outputFormat") or "json"
        temperature = config.get("temperature")
        body: Dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt(mode, output_format)},
                {"role": "user", "content": f"{config['prompt']}\n\nInput data:\n{format_input(input)}"},
            ],
            "temperature": 0.7 if temperature is None else temperature,
        }
        if output_format == "json":
            body["response_format"] = {"type": "json_object"}
        return body

    async def execute(self, ctx, node: WorkflowNode, input: Any) -> Any:
        config = node.config or {}
        if not config.get("prompt"):
            raise ConfigurationError("No prompt configured")

        api_url = config.get("apiUrl") or ""
        api_key = config.get("apiKey") or ""
        model = config.get("model") or self.settings.ai_default_model
        mode = config.get("mode") or DEFAULT_MODE
        output_format = config.get("outputFormat") or "json"

        if not api_url:
            raise ConfigurationError("No AI API endpoint configured. Set the API URL in the node config.")
        if not api_key:
            raise ConfigurationError("No API key configured. Set the API Key in the node config.")

        client = self.services.get_http_client()
        logger.info("Requesting completion", node_id=node.id, model=model, mode=mode)
        try:
            response = await ctx.guard(
                client.post(
                    api_url,
                    json=self._build_request(config, input, model, mode),
                    headers={"Authorization": f"Bearer {api_key}"},
                    timeout=self.settings.http_timeout,
                )
            )
        except httpx.HTTPError as e:
            raise ExternalServiceError(f"AI API request failed: {e}", service="ai") from e

        try:
            data = response.json()
        except ValueError:
            data = {"error": response.text[:200]}

        if not response.is_success:
            raise ExternalServiceError(
                f"AI API error ({response.status_code}): {extract_error(data)}", service="ai"
            )

        content = extract_content(data)
        parsed: Any = parse_json_content(content) if output_format == "json" else content
        logger.debug("Completion received", node_id=node.id, content=log_safe_output(content))

        if mode == DECIDE_MODE:
            if isinstance(parsed, (dict, list)):
                # arrays carry no verdict
                fields = parsed if isinstance(parsed, dict) else {}
                result = fields.get("result")
                reason = fields.get("reason")
            else:
                result = "true" in str(parsed).lower()
                reason = content
            if isinstance(result, str):
                result = result.strip().lower() in ("true", "yes")
            return {
                "_condition": True,
                "_ai": True,
                "result": bool(result),
                "reason": reason,
                "model": model,
                "mode": mode,
            }

        return {
            "_ai": True,
            "mode": mode,
            "model": model,
            "data": parsed,
            "rawContent": content,
        }
