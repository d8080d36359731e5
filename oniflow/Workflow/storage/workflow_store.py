"""
Workflow Store

Holds workflow definitions, their per-run node state and execution logs.
The engine talks to it only through the WorkflowStore protocol.
"""

from typing import Any, Dict, List, Optional, Protocol, TYPE_CHECKING

import structlog

from ...common.exceptions import NodeNotFoundError, WorkflowNotFoundError
from ...Node.Core.Data import (
    Connection,
    LogEntry,
    NodeStatus,
    NodeType,
    Workflow,
    WorkflowNode,
    new_id,
    now_ms,
)
from ..flow_builder import FlowBuilder

if TYPE_CHECKING:
    from ..events import EventBus

logger = structlog.get_logger(__name__)


class WorkflowStore(Protocol):
    def get_workflow(self, workflow_id: str) -> Optional[Workflow]: ...

    def list_workflows(self) -> List[Workflow]: ...

    def update_workflow(self, workflow_id: str, **patch: Any) -> Workflow: ...

    def update_node(self, workflow_id: str, node_id: str, **patch: Any) -> WorkflowNode: ...

    def reset_node_states(self, workflow_id: str) -> None: ...

    def clear_logs(self, workflow_id: str) -> None: ...

    def add_log(self, workflow_id: str, entry: LogEntry) -> None: ...

    def get_logs(self, workflow_id: str) -> List[LogEntry]: ...

    def get_downstream(self, workflow_id: str, node_id: str) -> List[WorkflowNode]: ...

    def get_upstream(self, workflow_id: str, node_id: str) -> List[WorkflowNode]: ...


class InMemoryWorkflowStore:
    """
    Dictionary-backed WorkflowStore.

    Returned Workflow objects are the live records; mutate them through the
    store methods so updated_at and lifecycle events stay consistent.
    """

    def __init__(self, events: Optional["EventBus"] = None):
        self._workflows: Dict[str, Workflow] = {}
        self._logs: Dict[str, List[LogEntry]] = {}
        self.events = events

    def _emit(self, event: str, payload: Dict[str, Any]) -> None:
        if self.events:
            self.events.emit(event, payload)

    def _require(self, workflow_id: str) -> Workflow:
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            raise WorkflowNotFoundError(workflow_id)
        return workflow

    # Workflow CRUD

    def get_workflow(self, workflow_id: str) -> Optional[Workflow]:
        return self._workflows.get(workflow_id)

    def list_workflows(self) -> List[Workflow]:
        return list(self._workflows.values())

    def create_workflow(self, name: str = "New Workflow", **fields: Any) -> Workflow:
        """
        Create and store a workflow. Without nodes, a manual "Start" trigger
        is added so the workflow is runnable.
        """
        if not fields.get("nodes"):
            fields["nodes"] = [
                WorkflowNode(type=NodeType.TRIGGER.value, label="Start", config={"triggerType": "manual"})
            ]
        workflow = Workflow(name=name, **fields)
        self._workflows[workflow.id] = workflow
        logger.info("Workflow created", workflow_id=workflow.id, name=workflow.name)
        self._emit("workflow:created", {"id": workflow.id, "name": workflow.name, "nodeCount": len(workflow.nodes)})
        return workflow

    def load_workflow(self, workflow_json: Dict[str, Any]) -> Workflow:
        """Import a workflow from its JSON export, replacing one with the same id."""
        workflow = FlowBuilder(workflow_json).build()
        self._workflows[workflow.id] = workflow
        self._emit("workflow:created", {"id": workflow.id, "name": workflow.name, "nodeCount": len(workflow.nodes)})
        return workflow

    def update_workflow(self, workflow_id: str, **patch: Any) -> Workflow:
        workflow = self._require(workflow_id)
        for key, value in patch.items():
            setattr(workflow, key, value)
        workflow.updated_at = now_ms()
        if "enabled" in patch:
            self._emit("workflow:toggled", {"id": workflow_id, "name": workflow.name, "enabled": workflow.enabled})
        return workflow

    def delete_workflow(self, workflow_id: str) -> bool:
        workflow = self._workflows.pop(workflow_id, None)
        self._logs.pop(workflow_id, None)
        if workflow is None:
            return False
        logger.info("Workflow deleted", workflow_id=workflow_id)
        self._emit("workflow:deleted", {"id": workflow_id, "name": workflow.name})
        return True

    def duplicate_workflow(self, workflow_id: str) -> Workflow:
        """Copy a workflow with fresh node and connection ids and cleared run state."""
        original = self._require(workflow_id)
        copy = original.model_copy(deep=True)
        copy.id = new_id("wf")
        copy.name = f"{original.name} (copy)"
        copy.created_at = copy.updated_at = now_ms()
        copy.last_run_at = None
        copy.last_run_status = None

        id_map = {}
        for node in copy.nodes:
            fresh_id = new_id("node")
            id_map[node.id] = fresh_id
            node.id = fresh_id
            node.status = NodeStatus.IDLE
            node.input = None
            node.output = None
        for connection in copy.connections:
            connection.id = new_id("conn")
            connection.source = id_map.get(connection.source, connection.source)
            connection.target = id_map.get(connection.target, connection.target)

        self._workflows[copy.id] = copy
        return copy

    # Nodes

    def add_node(self, workflow_id: str, type: str, label: Optional[str] = None, **fields: Any) -> WorkflowNode:
        workflow = self._require(workflow_id)
        node = WorkflowNode(type=type, label=label or type, **fields)
        workflow.nodes.append(node)
        workflow.updated_at = now_ms()
        return node

    def update_node(self, workflow_id: str, node_id: str, **patch: Any) -> WorkflowNode:
        workflow = self._require(workflow_id)
        node = workflow.get_node(node_id)
        if node is None:
            raise NodeNotFoundError(node_id, workflow_id)
        for key, value in patch.items():
            setattr(node, key, value)
        workflow.updated_at = now_ms()
        return node

    def delete_node(self, workflow_id: str, node_id: str) -> bool:
        workflow = self._require(workflow_id)
        before = len(workflow.nodes)
        workflow.nodes = [node for node in workflow.nodes if node.id != node_id]
        workflow.connections = [
            conn for conn in workflow.connections if conn.source != node_id and conn.target != node_id
        ]
        workflow.updated_at = now_ms()
        return len(workflow.nodes) != before

    def reset_node_states(self, workflow_id: str) -> None:
        for node in self._require(workflow_id).nodes:
            node.status = NodeStatus.IDLE
            node.input = None
            node.output = None

    # Connections

    def add_connection(
        self, workflow_id: str, source: str, target: str, label: Optional[str] = None
    ) -> Optional[Connection]:
        """
        Connect two nodes. Self-loops and duplicate edges are refused and
        return None.
        """
        workflow = self._require(workflow_id)
        if source == target:
            return None
        if any(conn.source == source and conn.target == target for conn in workflow.connections):
            return None
        connection = Connection(source=source, target=target, label=label)
        workflow.connections.append(connection)
        workflow.updated_at = now_ms()
        return connection

    def delete_connection(self, workflow_id: str, connection_id: str) -> bool:
        workflow = self._require(workflow_id)
        before = len(workflow.connections)
        workflow.connections = [conn for conn in workflow.connections if conn.id != connection_id]
        return len(workflow.connections) != before

    def get_downstream(self, workflow_id: str, node_id: str) -> List[WorkflowNode]:
        """Successor nodes in connection order."""
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            return []
        nodes = [workflow.get_node(conn.target) for conn in workflow.outgoing(node_id)]
        return [node for node in nodes if node is not None]

    def get_upstream(self, workflow_id: str, node_id: str) -> List[WorkflowNode]:
        workflow = self._workflows.get(workflow_id)
        if workflow is None:
            return []
        nodes = [workflow.get_node(conn.source) for conn in workflow.incoming(node_id)]
        return [node for node in nodes if node is not None]

    # Execution logs

    def add_log(self, workflow_id: str, entry: LogEntry) -> None:
        self._logs.setdefault(workflow_id, []).append(entry)

    def clear_logs(self, workflow_id: str) -> None:
        self._logs[workflow_id] = []

    def get_logs(self, workflow_id: str) -> List[LogEntry]:
        return list(self._logs.get(workflow_id, []))
