"""Shared configuration helpers and exceptions."""

from .config import get_env_bool, get_env_float, get_env_int, get_env_str
from .exceptions import (
    OniflowError,
    ParseError,
    ConfigurationError,
    NotFoundError,
    WorkflowNotFoundError,
    NodeNotFoundError,
    NodeTypeNotFoundError,
    CommandNotFoundError,
    NoTriggerError,
    NodeExecutionError,
    CommandRejectedError,
    HttpError,
    ExternalServiceError,
    RunAborted,
)

__all__ = [
    "get_env_bool",
    "get_env_float",
    "get_env_int",
    "get_env_str",
    "OniflowError",
    "ParseError",
    "ConfigurationError",
    "NotFoundError",
    "WorkflowNotFoundError",
    "NodeNotFoundError",
    "NodeTypeNotFoundError",
    "CommandNotFoundError",
    "NoTriggerError",
    "NodeExecutionError",
    "CommandRejectedError",
    "HttpError",
    "ExternalServiceError",
    "RunAborted",
]
