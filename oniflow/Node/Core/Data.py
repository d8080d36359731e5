import time
from enum import Enum
from typing import Any, Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def now_ms() -> int:
    return int(time.time() * 1000)


def new_id(prefix: str) -> str:
    return f"{prefix}_{uuid4().hex[:10]}"


class NodeType(str, Enum):
    TRIGGER = "trigger"
    COMMAND = "command"
    CONDITION = "condition"
    DELAY = "delay"
    OUTPUT = "output"
    HTTP = "http"
    MCP = "mcp"
    AI = "ai"


class NodeStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class RunStatus(str, Enum):
    RUNNING = "running"
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    ABORTED = "aborted"
    ERROR = "error"


class LogLevel(str, Enum):
    INFO = "info"
    SUCCESS = "success"
    WARN = "warn"
    ERROR = "error"


class WorkflowNode(BaseModel):
    """
    A node placed in a workflow graph.
    """

    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=lambda: new_id("node"), description="Unique identifier for the node")
    type: str = Field(..., description="Node type, one of NodeType or a custom type")
    label: str = Field(default="", description="Display label, also used for branch routing")
    config: Dict[str, Any] = Field(default_factory=dict, description="Type specific configuration")
    status: NodeStatus = Field(default=NodeStatus.IDLE, description="Execution state within the current run")
    input: Any = Field(default=None, description="Input received in the current run")
    output: Any = Field(default=None, description="Output (or error text) of the current run")


class Connection(BaseModel):
    """
    Directed edge between two nodes. Serialized as {id, from, to, label}.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(default_factory=lambda: new_id("conn"))
    source: str = Field(..., alias="from", description="ID of the upstream node")
    target: str = Field(..., alias="to", description="ID of the downstream node")
    label: Optional[str] = Field(default=None, description="Branch label such as 'true' or 'no'")


class Workflow(BaseModel):
    """
    A workflow definition together with the state of its latest run.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(default_factory=lambda: new_id("wf"))
    name: str = "Untitled Workflow"
    description: str = ""
    enabled: bool = True
    nodes: List[WorkflowNode] = Field(default_factory=list)
    connections: List[Connection] = Field(default_factory=list)
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)
    last_run_at: Optional[int] = None
    last_run_status: Optional[str] = None

    def get_node(self, node_id: str) -> Optional[WorkflowNode]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def trigger_nodes(self) -> List[WorkflowNode]:
        return [node for node in self.nodes if node.type == NodeType.TRIGGER.value]

    def outgoing(self, node_id: str) -> List[Connection]:
        return [conn for conn in self.connections if conn.source == node_id]

    def incoming(self, node_id: str) -> List[Connection]:
        return [conn for conn in self.connections if conn.target == node_id]


class NodeError(BaseModel):
    """
    A failure recorded for one node during a run.
    """

    node_id: str
    label: str
    error: str


class LogEntry(BaseModel):
    """
    One row of a workflow's execution log.
    """

    model_config = ConfigDict(use_enum_values=True)

    ts: int = Field(default_factory=now_ms)
    level: LogLevel = LogLevel.INFO
    message: str
    node_id: Optional[str] = None
    node_type: Optional[str] = None
    input: Optional[str] = None
    output: Optional[str] = None
    errors: Optional[List[NodeError]] = None
    node_count: Optional[int] = None


class WorkflowRunResult(BaseModel):
    """
    Outcome of WorkflowEngine.execute().
    """

    success: bool
    status: Optional[str] = None
    errors: List[NodeError] = Field(default_factory=list)
    error: Optional[str] = None
    error_code: Optional[str] = None
