from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, Field

# Parsed argument values. Mirrors what JSON can carry.
Value = Union[str, int, float, bool, None, List["Value"], Dict[str, "Value"]]


class ValueKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"


def value_kind(value: Any) -> ValueKind:
    """
    Classify a parsed value into its ValueKind.
    bool is checked before numbers because bool is an int subclass.
    """
    if value is None:
        return ValueKind.NULL
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    raise TypeError(f"Not a command value: {type(value).__name__}")


class CommandDescriptor(BaseModel):
    """
    One parsed command: namespace.action(args).
    """

    namespace: str = Field(..., description="Everything before the last dot segment")
    action: str = Field(..., description="Last dot segment, 'open' for bare paths")
    args: List[Any] = Field(default_factory=list, description="Coerced argument values in order")
    raw: str = Field(..., description="The command text this descriptor was parsed from")

    @property
    def path(self) -> str:
        return f"{self.namespace}.{self.action}"


RunStatus = Literal["pending", "running", "resolved", "rejected"]


class CommandRun(BaseModel):
    """
    Record of a single command execution.
    """

    run_id: str = Field(default_factory=lambda: uuid4().hex[:12])
    command: str
    source: str = "human"
    status: RunStatus = "pending"
    output: Any = None
    error: Optional[str] = None
    chain_id: Optional[str] = None
