"""
Command Runner Node

Single Responsibility: Run a dot-notation command through the command
registry and hand its output downstream.
"""

from typing import Any

import structlog

from .....common.exceptions import CommandRejectedError, ConfigurationError
from .....log_safe import log_safe_output
from ....Core import BaseNode, WorkflowNode
from ..._shared import replace_whole_input

logger = structlog.get_logger(__name__)


class CommandRunner(BaseNode):
    """
    Executes config.command with {{input}} substituted.

    Strings are inserted verbatim and other values as compact JSON; a None
    input leaves the placeholder untouched.
    """

    @classmethod
    def identifier(cls) -> str:
        return "command"

    @property
    def label(self) -> str:
        return "Command"

    @property
    def description(self) -> str:
        return "Runs a registered command such as browser.openUrl(\"{{input}}\")"

    async def execute(self, ctx, node: WorkflowNode, input: Any) -> Any:
        command = (node.config or {}).get("command") or ""
        if not command:
            raise ConfigurationError("No command configured")

        if input is not None:
            command = replace_whole_input(command, input)

        registry = self.services.command_registry
        if registry is None:
            raise ConfigurationError("No command registry available")

        handle = registry.execute(command, "workflow")
        run = await ctx.guard(handle.wait())

        if run is None:
            raise CommandRejectedError(command, f"No result from: {command}")
        if run.status == "rejected":
            raise CommandRejectedError(command, run.error)

        logger.debug(
            "Command node run finished",
            node_id=node.id,
            run_id=run.run_id,
            output=log_safe_output(run.output),
        )
        return run.output if run.output is not None else f"Done: {command}"
