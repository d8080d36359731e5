from .events import KNOWN_EVENTS, EventBus
from .execution import ExecutionContext, FlowRunner
from .flow_builder import FlowBuilder
from .flow_engine import WorkflowEngine
from .node_registry import NodeRegistry
from .storage import InMemoryNotificationStore, InMemoryWorkflowStore, NotificationStore, WorkflowStore

__all__ = [
    "KNOWN_EVENTS",
    "EventBus",
    "ExecutionContext",
    "FlowRunner",
    "FlowBuilder",
    "WorkflowEngine",
    "NodeRegistry",
    "InMemoryNotificationStore",
    "InMemoryWorkflowStore",
    "NotificationStore",
    "WorkflowStore",
]
