from typing import Any, Dict, Optional, TYPE_CHECKING

import structlog

from ...common.exceptions import NodeExecutionError, RunAborted
from ...log_safe import log_safe_output, summarize
from ...Node.Core import BaseNode, LogEntry, LogLevel, NodeStatus, WorkflowNode
from ..flow_utils import branch_verdict, select_branches
from .context import ExecutionContext

if TYPE_CHECKING:
    from ..storage import WorkflowStore

logger = structlog.get_logger(__name__)

FINISHED = (NodeStatus.RESOLVED, NodeStatus.REJECTED)


class FlowRunner:
    """
    Walks one run of a workflow graph, depth first and strictly sequential.

    Each node runs at most once per run: a node that already resolved or
    rejected returns its stored output. A failing node records a NodeError
    and stops only its own descendants.
    """

    def __init__(
        self,
        workflow_id: str,
        ctx: ExecutionContext,
        store: "WorkflowStore",
        executors: Dict[str, BaseNode],
        strict_branches: bool = False,
    ):
        self.workflow_id = workflow_id
        self.ctx = ctx
        self.store = store
        self.executors = executors
        self.strict_branches = strict_branches

    def log(self, level: LogLevel, message: str, **data: Any) -> None:
        """Append to the workflow's execution log unless this run was superseded."""
        if self.ctx.superseded:
            return
        self.store.add_log(self.workflow_id, LogEntry(level=level, message=message, **data))

    def _update_node(self, node_id: str, **patch: Any) -> None:
        if self.ctx.superseded:
            return
        self.store.update_node(self.workflow_id, node_id, **patch)

    def _get_node(self, node_id: str) -> Optional[WorkflowNode]:
        workflow = self.store.get_workflow(self.workflow_id)
        if workflow is None:
            return None
        return workflow.get_node(node_id)

    async def run_trigger(self, trigger_id: str, trigger_input: Any) -> Any:
        return await self.execute_node(trigger_id, trigger_input)

    async def execute_node(self, node_id: str, input: Any) -> Any:
        """
        Execute a node, then propagate to its downstream nodes.

        Returns the node's output, or None when the run is aborted, the node
        does not exist, or the node failed.
        """
        ctx = self.ctx
        if ctx.aborted:
            return None

        node = self._get_node(node_id)
        if node is None:
            return None

        if node.status in FINISHED:
            return node.output
        if node.status == NodeStatus.RUNNING:
            logger.warning(
                "Cycle detected, skipping node already on the active path",
                workflow_id=self.workflow_id,
                node_id=node_id,
                run_id=ctx.run_id,
            )
            self.log(
                LogLevel.WARN,
                f'↺ [{node.type}] "{node.label}" skipped (cycle)',
                node_id=node_id,
                node_type=node.type,
            )
            return None

        node_start = ctx.elapsed_ms
        self._update_node(node_id, status=NodeStatus.RUNNING, input=input)
        self.log(
            LogLevel.INFO,
            f'→ [{node.type}] "{node.label}" started',
            node_id=node_id,
            node_type=node.type,
            input=summarize(input),
        )
        logger.info(
            "Initiating node execution",
            workflow_id=self.workflow_id,
            node_id=node_id,
            node_type=node.type,
            run_id=ctx.run_id,
        )

        executor = self.executors.get(node.type)
        try:
            if executor is None:
                output = input
            else:
                output = await executor.run(ctx, node, input)
        except RunAborted:
            self._update_node(node_id, status=NodeStatus.REJECTED, output="Aborted")
            logger.info("Node interrupted by abort", workflow_id=self.workflow_id, node_id=node_id)
            return None
        except NodeExecutionError as e:
            elapsed = ctx.elapsed_ms - node_start
            self._update_node(node_id, status=NodeStatus.REJECTED, output=e.reason)
            ctx.record_error(node_id, node.label, e.reason)
            self.log(
                LogLevel.ERROR,
                f'✗ [{node.type}] "{node.label}" failed ({elapsed}ms): {e.reason}',
                node_id=node_id,
                node_type=node.type,
            )
            logger.warning(
                "Error executing node",
                workflow_id=self.workflow_id,
                node_id=node_id,
                node_type=node.type,
                error=e.reason,
            )
            return None

        elapsed = ctx.elapsed_ms - node_start
        self._update_node(node_id, status=NodeStatus.RESOLVED, output=output)
        self.log(
            LogLevel.SUCCESS,
            f'✓ [{node.type}] "{node.label}" resolved ({elapsed}ms)',
            node_id=node_id,
            node_type=node.type,
            output=summarize(output),
        )
        logger.info(
            "Node execution completed",
            workflow_id=self.workflow_id,
            node_id=node_id,
            node_type=node.type,
            output=log_safe_output(output),
        )

        if ctx.aborted:
            return output

        if executor is not None and executor.routes_branches(node):
            # Branch children receive the input the condition node saw
            await self._follow_branches(node_id, output, input)
        else:
            await self._process_next_nodes(node_id, output)

        return output

    async def _process_next_nodes(self, node_id: str, output: Any) -> None:
        for next_node in self.store.get_downstream(self.workflow_id, node_id):
            if self.ctx.aborted:
                break
            await self.execute_node(next_node.id, output)

    async def _follow_branches(self, node_id: str, condition_output: Any, original_input: Any) -> None:
        workflow = self.store.get_workflow(self.workflow_id)
        if workflow is None:
            return

        connections = workflow.outgoing(node_id)
        if not connections:
            return

        nodes_by_id = {node.id: node for node in workflow.nodes}
        result = branch_verdict(condition_output)
        selected = select_branches(connections, nodes_by_id, result, strict=self.strict_branches)
        logger.debug(
            "Routing condition branches",
            workflow_id=self.workflow_id,
            node_id=node_id,
            result=result,
            followed=[conn.target for conn in selected],
        )

        for connection in selected:
            if self.ctx.aborted:
                break
            await self.execute_node(connection.target, original_input)
