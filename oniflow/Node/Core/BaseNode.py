from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

import structlog

from ...common.exceptions import NodeExecutionError, RunAborted
from .Data import WorkflowNode
from .services import NodeServices

if TYPE_CHECKING:
    from ...Workflow.execution.context import ExecutionContext

logger = structlog.get_logger(__name__)


class BaseNode(ABC):
    """
    Dont Use This Class Directly. Use One of the Subclasses Instead.

    One executor instance serves every node of its type across all runs of
    an engine, so per-node state lives on the WorkflowNode, not here.
    """

    def __init__(self, services: NodeServices):
        self.services = services

    @classmethod
    @abstractmethod
    def identifier(cls) -> str:
        """Node type string this executor handles."""

    @property
    def label(self) -> str:
        return self.__class__.__name__

    @property
    def description(self) -> str:
        return ""

    @property
    def settings(self):
        return self.services.settings

    def routes_branches(self, node: WorkflowNode) -> bool:
        """
        Whether downstream propagation goes through the branch router
        instead of feeding this node's output to every successor.
        """
        return False

    async def run(self, ctx: "ExecutionContext", node: WorkflowNode, input: Any) -> Any:
        """
        Main entry point for node execution.

        Any exception escaping execute() is wrapped in NodeExecutionError so
        the runner can record it against this node only.
        """
        try:
            output = await self.execute(ctx, node, input)
        except (RunAborted, NodeExecutionError):
            raise
        except Exception as e:
            raise NodeExecutionError(node.id, node.type, e) from e
        return output

    @abstractmethod
    async def execute(self, ctx: "ExecutionContext", node: WorkflowNode, input: Any) -> Any:
        """Produce this node's output from its input."""


class ConditionalNode(BaseNode, ABC):
    """
    Base class for nodes whose output carries a boolean verdict used to
    pick which outgoing connections run.
    """

    def routes_branches(self, node: WorkflowNode) -> bool:
        return True
