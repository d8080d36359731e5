from .context import ExecutionContext
from .flow_runner import FlowRunner

__all__ = ["ExecutionContext", "FlowRunner"]
