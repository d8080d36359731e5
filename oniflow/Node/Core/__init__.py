from .BaseNode import BaseNode, ConditionalNode
from .services import NodeServices


# Utilities
from .Data import (
    Connection,
    LogEntry,
    LogLevel,
    NodeError,
    NodeStatus,
    NodeType,
    RunStatus,
    Workflow,
    WorkflowNode,
    WorkflowRunResult,
    new_id,
    now_ms,
)


__all__ = ['BaseNode', 'ConditionalNode', 'NodeServices', 'Connection', 'LogEntry', 'LogLevel', 'NodeError', 'NodeStatus', 'NodeType', 'RunStatus', 'Workflow', 'WorkflowNode', 'WorkflowRunResult', 'new_id', 'now_ms']
