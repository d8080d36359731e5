"""
Output Node

Single Responsibility: Produce the final message of a branch and optionally
raise it as a notification.
"""

from typing import Any

import structlog

from ....Core import BaseNode, WorkflowNode, now_ms
from ..._shared import replace_whole_input, stringify

logger = structlog.get_logger(__name__)

DEFAULT_MESSAGE = "Workflow complete"


class Output(BaseNode):

    @classmethod
    def identifier(cls) -> str:
        return "output"

    @property
    def label(self) -> str:
        return "Output"

    async def execute(self, ctx, node: WorkflowNode, input: Any) -> Any:
        config = node.config or {}
        action = config.get("action") or "log"
        template = config.get("message")

        if template:
            message = replace_whole_input(template, input)
        else:
            message = stringify(input) or DEFAULT_MESSAGE

        if action == "notify":
            notifications = self.services.notifications
            if notifications is None:
                logger.warning("No notification store, dropping notification", node_id=node.id)
            else:
                notifications.add_notification(message, "info", self.settings.notify_duration_ms)

        return {
            "_output": True,
            "action": action,
            "message": message,
            "rawInput": input,
            "timestamp": now_ms(),
        }
