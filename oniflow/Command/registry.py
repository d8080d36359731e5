"""
Command Registry

Maps "namespace.action" paths to handlers and runs command strings against
them. The workflow engine only relies on execute() returning a RunHandle
whose wait() resolves to a CommandRun.
"""

import asyncio
import inspect
from typing import Any, Callable, Dict, List, Optional, Protocol, TYPE_CHECKING
from uuid import uuid4

import structlog

from ..common.exceptions import CommandNotFoundError, OniflowError, ParseError
from ..log_safe import log_safe_output
from .Data import CommandDescriptor, CommandRun
from .parser import parse_command

if TYPE_CHECKING:
    from ..Workflow.events import EventBus

logger = structlog.get_logger(__name__)

CommandHandler = Callable[..., Any]

COMMAND_EXECUTED = "command:executed"


class RunHandle:
    """
    Handle to an in-flight command run.

    Mirrors the live state of the underlying CommandRun; wait() resolves
    once the run is resolved or rejected.
    """

    def __init__(self, run: CommandRun, task: "asyncio.Task[CommandRun]"):
        self._run = run
        self._task = task

    @property
    def run_id(self) -> str:
        return self._run.run_id

    @property
    def status(self) -> str:
        return self._run.status

    @property
    def output(self) -> Any:
        return self._run.output

    @property
    def chain_id(self) -> Optional[str]:
        return self._run.chain_id

    def done(self) -> bool:
        return self._task.done()

    async def wait(self) -> CommandRun:
        return await self._task


class CommandRegistry(Protocol):
    def execute(self, command: str, source: str = "human") -> RunHandle:
        ...


class InMemoryCommandRegistry:
    """
    Dictionary-backed command registry.

    Handlers are called with the parsed positional args and may be plain
    functions or coroutine functions. Pipe chains run in order, each segment
    receiving the previous output as a trailing argument.
    """

    def __init__(self, events: Optional["EventBus"] = None):
        self._handlers: Dict[str, CommandHandler] = {}
        self._runs: List[CommandRun] = []
        self.events = events

    def register(self, path: str, handler: CommandHandler) -> None:
        if path in self._handlers:
            logger.warning("Replacing command handler", path=path)
        self._handlers[path] = handler
        logger.debug("Command registered", path=path)

    def unregister(self, path: str) -> bool:
        return self._handlers.pop(path, None) is not None

    def has(self, path: str) -> bool:
        return path in self._handlers

    def list_commands(self) -> List[str]:
        return sorted(self._handlers)

    @property
    def history(self) -> List[CommandRun]:
        return list(self._runs)

    def get_run(self, run_id: str) -> Optional[CommandRun]:
        for run in self._runs:
            if run.run_id == run_id:
                return run
        return None

    def execute(self, command: str, source: str = "human") -> RunHandle:
        """
        Start running a command string.

        Must be called while an event loop is running; the handler work is
        scheduled as a task and the returned handle can be awaited.
        """
        parsed = parse_command(command)
        run = CommandRun(command=command, source=source)
        if isinstance(parsed, list):
            run.chain_id = uuid4().hex[:12]
        self._runs.append(run)

        task = asyncio.get_running_loop().create_task(self._run(run, parsed))
        return RunHandle(run, task)

    async def _run(self, run: CommandRun, parsed: Any) -> CommandRun:
        run.status = "running"
        try:
            if not parsed:
                raise ParseError(run.command)
            chain = parsed if isinstance(parsed, list) else [parsed]
            output = None
            for index, descriptor in enumerate(chain):
                args = list(descriptor.args)
                if index > 0 and output is not None:
                    args.append(output)
                output = await self._invoke(descriptor, args)
            run.output = output
            run.status = "resolved"
            logger.info(
                "Command resolved",
                run_id=run.run_id,
                command=run.command,
                source=run.source,
                output=log_safe_output(output),
            )
        except Exception as e:
            run.error = e.message if isinstance(e, OniflowError) else (str(e) or e.__class__.__name__)
            run.status = "rejected"
            logger.warning(
                "Command rejected",
                run_id=run.run_id,
                command=run.command,
                source=run.source,
                error=run.error,
            )

        if self.events:
            self.events.emit(COMMAND_EXECUTED, {
                "runId": run.run_id,
                "command": run.command,
                "source": run.source,
                "status": run.status,
                "error": run.error,
            })
        return run

    async def _invoke(self, descriptor: CommandDescriptor, args: List[Any]) -> Any:
        handler = self._handlers.get(descriptor.path)
        if handler is None:
            raise CommandNotFoundError(descriptor.path)
        result = handler(*args)
        if inspect.isawaitable(result):
            result = await result
        return result
