from typing import Any, Dict, List, Set

import structlog

from ..Node.Core.Data import Connection, Workflow, WorkflowNode
from .flow_utils import BranchKeyNormalizer

logger = structlog.get_logger(__name__)


class FlowBuilder:
    """
    Handles building a Workflow from its JSON export.

    Accepts the native shape ({nodes, connections: [{from, to, label}]}) and
    the graph-editor shape ({nodes, edges: [{source, target, sourceHandle}]}),
    where the source handle becomes the branch label.
    """

    def __init__(self, workflow_json: Dict[str, Any]):
        self.workflow_json = workflow_json
        self._node_ids: Set[str] = set()

    def build(self) -> Workflow:
        logger.info("Loading workflow...", workflow_id=self.workflow_json.get("id"))
        fields = {
            key: value
            for key, value in self.workflow_json.items()
            if key not in ("nodes", "connections", "edges")
        }
        workflow = Workflow.model_validate(fields)
        workflow.nodes = self._add_nodes(self.workflow_json.get("nodes", []))
        workflow.connections = self._connect_nodes(
            self.workflow_json.get("connections", []),
            self.workflow_json.get("edges", []),
        )
        logger.info(
            "Workflow loaded",
            workflow_id=workflow.id,
            node_count=len(workflow.nodes),
            connection_count=len(workflow.connections),
        )
        return workflow

    def _add_nodes(self, nodes: List[Dict[str, Any]]) -> List[WorkflowNode]:
        result = []
        for node_def in nodes:
            node = self._get_node_instance(node_def)
            if node.id in self._node_ids:
                raise ValueError(f"Duplicate node id '{node.id}'")
            self._node_ids.add(node.id)
            result.append(node)
        return result

    def _get_node_instance(self, node_def: Dict[str, Any]) -> WorkflowNode:
        config = node_def.get("config")
        if config is None:
            data = node_def.get("data") or {}
            config = data.get("config") or data.get("form") or {}
        fields = {
            "type": node_def["type"],
            "label": node_def.get("label") or node_def["type"],
            "config": config,
        }
        if node_def.get("id"):
            fields["id"] = node_def["id"]
        return WorkflowNode(**fields)

    def _connect_nodes(self, connections: List[Dict[str, Any]], edges: List[Dict[str, Any]]) -> List[Connection]:
        result: List[Connection] = []
        seen = set()

        candidates = [
            (conn.get("id"), conn.get("from"), conn.get("to"), conn.get("label"))
            for conn in connections
        ] + [
            (
                edge.get("id"),
                edge.get("source"),
                edge.get("target"),
                BranchKeyNormalizer.normalize_to_lowercase(edge.get("sourceHandle")),
            )
            for edge in edges
        ]

        for conn_id, source, target, label in candidates:
            if not source or not target:
                logger.warning("Skipping connection without endpoints", source=source, target=target)
                continue
            if source not in self._node_ids or target not in self._node_ids:
                logger.warning(f"Could not connect {source} -> {target}: unknown node")
                continue
            if source == target or (source, target) in seen:
                logger.warning(f"Could not connect {source} -> {target}: self-loop or duplicate")
                continue
            seen.add((source, target))
            fields = {"source": source, "target": target, "label": label}
            if conn_id:
                fields["id"] = conn_id
            result.append(Connection(**fields))
        return result
