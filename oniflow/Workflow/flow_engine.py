import asyncio
import threading
from typing import Any, Dict, List, Optional, Set, Tuple, TYPE_CHECKING

import httpx
import structlog

from ..common.exceptions import NoTriggerError, OniflowError, WorkflowNotFoundError
from ..config.settings import EngineSettings
from ..Node.Core import LogEntry, LogLevel, NodeServices, RunStatus, WorkflowRunResult, now_ms
from .execution import ExecutionContext, FlowRunner
from .node_registry import NodeRegistry

if TYPE_CHECKING:
    from ..Command.registry import CommandRegistry
    from .events import EventBus, EventHandler
    from .storage import NotificationStore, WorkflowStore

logger = structlog.get_logger(__name__)


class WorkflowEngine:
    """
    Central coordination system for workflow execution.

    Owns one ExecutionContext per running workflow. Starting a workflow that
    is already running supersedes the older run (last call wins); runs of
    different workflows interleave on the same event loop.
    """

    def __init__(
        self,
        store: "WorkflowStore",
        events: "EventBus",
        command_registry: Optional["CommandRegistry"] = None,
        notifications: Optional["NotificationStore"] = None,
        settings: Optional[EngineSettings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.store = store
        self.events = events
        self.settings = settings or EngineSettings.from_env()
        self.services = NodeServices(
            command_registry=command_registry,
            notifications=notifications,
            settings=self.settings,
            http_client=http_client,
        )
        self.executors = NodeRegistry.create_executors(self.services)

        self._running: Dict[str, ExecutionContext] = {}
        self._lock = threading.Lock()
        self._listeners: Dict[str, List[Tuple[str, "EventHandler"]]] = {}
        self._pending: Set["asyncio.Task[WorkflowRunResult]"] = set()
        self._scheduled: Set[str] = set()

    # Execution log

    def _log(self, ctx: Optional[ExecutionContext], workflow_id: str, level: LogLevel, message: str, **data: Any) -> None:
        if ctx is not None and ctx.superseded:
            return
        self.store.add_log(workflow_id, LogEntry(level=level, message=message, **data))

    def _emit(self, ctx: ExecutionContext, event: str, payload: Dict[str, Any]) -> None:
        if ctx.superseded:
            return
        self.events.emit(event, payload)

    # Run table

    def _start_context(self, workflow_id: str) -> ExecutionContext:
        ctx = ExecutionContext(workflow_id=workflow_id)
        with self._lock:
            previous = self._running.get(workflow_id)
            self._running[workflow_id] = ctx
        if previous is not None:
            previous.supersede()
            logger.info(
                "Superseding running workflow",
                workflow_id=workflow_id,
                previous_run_id=previous.run_id,
                run_id=ctx.run_id,
            )
        return ctx

    def _finish_context(self, ctx: ExecutionContext) -> None:
        with self._lock:
            if self._running.get(ctx.workflow_id) is ctx:
                del self._running[ctx.workflow_id]

    def is_running(self, workflow_id: str) -> bool:
        with self._lock:
            return workflow_id in self._running

    def get_context(self, workflow_id: str) -> Optional[ExecutionContext]:
        with self._lock:
            return self._running.get(workflow_id)

    # Execute

    async def execute(self, workflow_id: str, trigger_input: Any = None) -> WorkflowRunResult:
        """
        Execute a workflow by ID.

        Args:
            workflow_id: Workflow to run
            trigger_input: Input handed to every trigger node (event payload,
                manual input, ...)

        Returns:
            WorkflowRunResult; never raises for workflow-level failures
        """
        workflow = self.store.get_workflow(workflow_id)
        if workflow is None:
            error = WorkflowNotFoundError(workflow_id)
            logger.warning("Workflow not found", workflow_id=workflow_id)
            return WorkflowRunResult(success=False, error=error.message, error_code=error.error_code)

        ctx = self._start_context(workflow_id)
        log = logger.bind(workflow_id=workflow_id, run_id=ctx.run_id)

        try:
            self.store.clear_logs(workflow_id)
            self.store.reset_node_states(workflow_id)
            self.store.update_workflow(workflow_id, last_run_at=now_ms(), last_run_status=RunStatus.RUNNING.value)

            self._log(ctx, workflow_id, LogLevel.INFO, f'▶ Workflow "{workflow.name}" started', node_count=len(workflow.nodes))
            self._emit(ctx, "workflow:started", {"wfId": workflow_id, "name": workflow.name})
            log.info("Workflow started", name=workflow.name, node_count=len(workflow.nodes))

            triggers = workflow.trigger_nodes()
            if not triggers:
                raise NoTriggerError(workflow_id)

            runner = FlowRunner(
                workflow_id,
                ctx,
                self.store,
                self.executors,
                strict_branches=self.settings.strict_branches,
            )
            for trigger in triggers:
                if ctx.aborted:
                    break
                await runner.run_trigger(trigger.id, trigger_input)

            return self._complete(ctx, log)

        except NoTriggerError as e:
            self._log(ctx, workflow_id, LogLevel.ERROR, "✗ No trigger node found, cannot execute")
            return self._fail(ctx, log, e)
        except OniflowError as e:
            self._log(ctx, workflow_id, LogLevel.ERROR, f"✗ Workflow crashed after {ctx.elapsed_ms}ms: {e.message}")
            return self._fail(ctx, log, e)
        except Exception as e:
            error = OniflowError(str(e) or e.__class__.__name__, error_code=e.__class__.__name__)
            self._log(ctx, workflow_id, LogLevel.ERROR, f"✗ Workflow crashed after {ctx.elapsed_ms}ms: {error.message}")
            log.exception("Workflow crashed")
            return self._fail(ctx, log, error)
        finally:
            self._finish_context(ctx)

    def _complete(self, ctx: ExecutionContext, log) -> WorkflowRunResult:
        workflow_id = ctx.workflow_id
        elapsed = ctx.elapsed_ms
        errors = list(ctx.errors)

        if ctx.aborted:
            status = RunStatus.ABORTED
            self._log(ctx, workflow_id, LogLevel.WARN, f"⏹ Workflow aborted after {elapsed}ms")
        elif errors:
            status = RunStatus.COMPLETED_WITH_ERRORS
            self._log(
                ctx, workflow_id, LogLevel.WARN,
                f"⚠ Workflow completed with {len(errors)} error(s) in {elapsed}ms",
                errors=errors,
            )
        else:
            status = RunStatus.COMPLETED
            self._log(ctx, workflow_id, LogLevel.SUCCESS, f"✓ Workflow completed successfully in {elapsed}ms")

        if not ctx.superseded:
            self.store.update_workflow(workflow_id, last_run_status=status.value)
        self._emit(ctx, "workflow:completed", {
            "wfId": workflow_id,
            "status": status.value,
            "errors": [error.model_dump() for error in errors],
        })
        log.info("Workflow finished", status=status.value, errors=len(errors), elapsed_ms=elapsed, superseded=ctx.superseded)

        return WorkflowRunResult(success=not ctx.aborted, status=status.value, errors=errors)

    def _fail(self, ctx: ExecutionContext, log, error: OniflowError) -> WorkflowRunResult:
        workflow_id = ctx.workflow_id
        if not ctx.superseded:
            self.store.update_workflow(workflow_id, last_run_status=RunStatus.ERROR.value)
        self._emit(ctx, "workflow:error", {"wfId": workflow_id, "error": error.message})
        log.error("Workflow failed", error=error.message, error_code=error.error_code)
        return WorkflowRunResult(
            success=False,
            status=RunStatus.ERROR.value,
            errors=list(ctx.errors),
            error=error.message,
            error_code=error.error_code,
        )

    def abort(self, workflow_id: str) -> bool:
        """
        Abort the running context of a workflow. Returns False when nothing runs.
        """
        ctx = self.get_context(workflow_id)
        if ctx is None:
            return False
        ctx.abort()
        self._log(ctx, workflow_id, LogLevel.WARN, "⏹ Abort requested")
        self.store.update_workflow(workflow_id, last_run_status=RunStatus.ABORTED.value)
        self.events.emit("workflow:aborted", {"wfId": workflow_id})
        logger.info("Abort requested", workflow_id=workflow_id, run_id=ctx.run_id)
        return True

    # Event triggers

    def init_listeners(self) -> int:
        """
        Scan enabled workflows for event triggers and subscribe to their events.
        Call on startup and whenever workflows change.

        Returns:
            Number of (workflow, event) subscriptions
        """
        self.stop_listeners()
        for workflow in self.store.list_workflows():
            if not workflow.enabled:
                continue
            for node in workflow.trigger_nodes():
                config = node.config or {}
                event_name = config.get("eventName")
                if config.get("triggerType") == "event" and event_name:
                    self._subscribe_event(workflow.id, event_name)

        count = sum(len(entries) for entries in self._listeners.values())
        if count:
            logger.info(f"Listening to {count} event trigger(s) across {len(self._listeners)} event type(s)")
        return count

    def _subscribe_event(self, workflow_id: str, event_name: str) -> None:
        entries = self._listeners.setdefault(event_name, [])
        if any(wf_id == workflow_id for wf_id, _ in entries):
            return

        def handler(payload: Any) -> None:
            # Don't re-trigger while a run of this workflow is active or queued
            if self.is_running(workflow_id) or workflow_id in self._scheduled:
                logger.debug("Event ignored, workflow already running", workflow_id=workflow_id, event_name=event_name)
                return
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                logger.warning("Event fired outside an event loop, run skipped", workflow_id=workflow_id, event_name=event_name)
                return
            logger.info(f'Event "{event_name}" fired, executing workflow', workflow_id=workflow_id)
            self._scheduled.add(workflow_id)
            task = loop.create_task(self.execute(workflow_id, payload))
            self._pending.add(task)
            task.add_done_callback(lambda t: self._on_scheduled_done(workflow_id, t))

        entries.append((workflow_id, handler))
        self.events.on(event_name, handler)

    def _on_scheduled_done(self, workflow_id: str, task: "asyncio.Task[WorkflowRunResult]") -> None:
        self._pending.discard(task)
        self._scheduled.discard(workflow_id)

    def stop_listeners(self) -> None:
        for event_name, entries in self._listeners.items():
            for _, handler in entries:
                self.events.off(event_name, handler)
        self._listeners.clear()

    async def wait_for_pending(self) -> List[WorkflowRunResult]:
        """Await runs started by event triggers."""
        results: List[WorkflowRunResult] = []
        seen: Set["asyncio.Task[WorkflowRunResult]"] = set()
        while True:
            batch = [task for task in self._pending if task not in seen]
            if not batch:
                return results
            seen.update(batch)
            for outcome in await asyncio.gather(*batch, return_exceptions=True):
                if isinstance(outcome, WorkflowRunResult):
                    results.append(outcome)
                elif isinstance(outcome, BaseException):
                    logger.error("Event-triggered run failed", error=str(outcome))

    async def aclose(self) -> None:
        self.stop_listeners()
        with self._lock:
            contexts = list(self._running.values())
        for ctx in contexts:
            ctx.abort()
        await self.wait_for_pending()
        await self.services.aclose()
