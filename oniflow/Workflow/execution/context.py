"""
Per-run execution context carrying the abort token.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Awaitable, List, TypeVar
from uuid import uuid4

from ...common.exceptions import RunAborted
from ...Node.Core.Data import NodeError

T = TypeVar("T")


@dataclass
class ExecutionContext:
    """
    Ephemeral state of one workflow run.

    aborted flips once and never resets. A superseded context has been
    replaced by a newer run of the same workflow and must not write node
    state or execution logs anymore.
    """

    workflow_id: str
    run_id: str = field(default_factory=lambda: uuid4().hex[:12])
    started_at: float = field(default_factory=time.monotonic)
    errors: List[NodeError] = field(default_factory=list)
    superseded: bool = False
    _abort_event: asyncio.Event = field(default_factory=asyncio.Event, repr=False)

    @property
    def aborted(self) -> bool:
        return self._abort_event.is_set()

    def abort(self) -> None:
        self._abort_event.set()

    def supersede(self) -> None:
        self.superseded = True
        self.abort()

    @property
    def elapsed_ms(self) -> int:
        return int((time.monotonic() - self.started_at) * 1000)

    async def sleep(self, seconds: float) -> bool:
        """
        Wait up to seconds. Returns True when the wait ended because the run
        was aborted.
        """
        if self.aborted:
            return True
        try:
            await asyncio.wait_for(self._abort_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            return False
        return True

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """
        Await awaitable unless the run is aborted first.

        On abort the in-flight work is cancelled and RunAborted is raised.
        """
        if self.aborted:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise RunAborted(self.workflow_id, self.run_id)

        task = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._abort_event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            task.cancel()
            raise
        finally:
            waiter.cancel()

        if task.done():
            return task.result()

        task.cancel()
        await asyncio.gather(task, return_exceptions=True)
        raise RunAborted(self.workflow_id, self.run_id)

    def record_error(self, node_id: str, label: str, error: str) -> None:
        self.errors.append(NodeError(node_id=node_id, label=label, error=error))
