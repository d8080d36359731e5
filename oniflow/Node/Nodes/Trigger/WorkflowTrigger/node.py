"""
Workflow Trigger Node

Single Responsibility: Originate a run, shaping the payload that flows into
the rest of the graph.
"""

from typing import Any

import structlog

from ....Core import BaseNode, WorkflowNode, now_ms
from ..._shared import is_falsy_scalar

logger = structlog.get_logger(__name__)

# Placeholder payload some callers send for a manual fire
MANUAL_MARKER = "triggered"


class WorkflowTrigger(BaseNode):
    """
    Entry node of a workflow.

    Event triggers wrap the event payload with the event name; manual runs
    without input get a synthetic {"_trigger": "manual"} payload.
    """

    @classmethod
    def identifier(cls) -> str:
        return "trigger"

    @property
    def label(self) -> str:
        return "Trigger"

    @property
    def description(self) -> str:
        return "Starts the workflow manually, on a kernel event or on a schedule"

    async def execute(self, ctx, node: WorkflowNode, input: Any) -> Any:
        config = node.config or {}
        if config.get("triggerType") == "event" and not is_falsy_scalar(input) and input != MANUAL_MARKER:
            event_name = config.get("eventName")
            if isinstance(input, dict):
                return {"_event": event_name, **input}
            return {"_event": event_name, "data": input}

        if input is None:
            return {"_trigger": "manual", "timestamp": now_ms()}
        return input
