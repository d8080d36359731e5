"""
Wait Delay Node

Pauses the branch for config.seconds, returning early when the run is aborted.
"""

import math
from typing import Any, Optional

import structlog

from ....Core import BaseNode, WorkflowNode

logger = structlog.get_logger(__name__)


def parse_seconds(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    try:
        seconds = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(seconds) or seconds <= 0:
        return None
    return seconds


class WaitDelay(BaseNode):

    @classmethod
    def identifier(cls) -> str:
        return "delay"

    @property
    def label(self) -> str:
        return "Delay"

    @property
    def description(self) -> str:
        return "Waits a fixed number of seconds, then passes its input through"

    async def execute(self, ctx, node: WorkflowNode, input: Any) -> Any:
        seconds = parse_seconds((node.config or {}).get("seconds"))
        if seconds is None:
            seconds = self.settings.delay_default_seconds

        logger.debug("Delay started", node_id=node.id, seconds=seconds)
        interrupted = await ctx.sleep(seconds)
        if interrupted:
            logger.info("Delay interrupted by abort", node_id=node.id, workflow_id=ctx.workflow_id)
        return input
