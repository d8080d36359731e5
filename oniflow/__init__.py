"""
oniflow: dot-notation command parsing and a workflow execution engine.
"""

from .Command import InMemoryCommandRegistry, parse_command
from .config import EngineSettings, setup_logging
from .Workflow import EventBus, InMemoryNotificationStore, InMemoryWorkflowStore, WorkflowEngine

__version__ = "0.1.0"

__all__ = [
    "InMemoryCommandRegistry",
    "parse_command",
    "EngineSettings",
    "setup_logging",
    "EventBus",
    "InMemoryNotificationStore",
    "InMemoryWorkflowStore",
    "WorkflowEngine",
]
