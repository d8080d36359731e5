"""
Common exceptions for the workflow runtime.

This module defines the exception taxonomy shared by the command parser,
the node executors and the workflow engine. All exceptions carry a message,
a detail string, an error code and optional extra data, and can be rendered
with to_dict() for run results and execution logs.
"""

from typing import Optional, Dict, Any


class OniflowError(Exception):
    """
    Base exception class for all runtime errors.
    Provides a consistent error format.
    """

    def __init__(
        self,
        message: str,
        detail: Optional[str] = None,
        error_code: Optional[str] = None,
        extra_data: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize the exception.

        Args:
            message: Human-readable error message
            detail: Detailed error information
            error_code: Application-specific error code
            extra_data: Additional error data
        """
        self.message = message
        self.detail = detail or message
        self.error_code = error_code or self.__class__.__name__
        self.extra_data = extra_data or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary.

        Returns:
            Dictionary with error information
        """
        result = {
            'error': self.message,
            'detail': self.detail,
            'error_code': self.error_code,
        }
        if self.extra_data:
            result.update(self.extra_data)
        return result


class ParseError(OniflowError):
    """Malformed command text."""

    def __init__(self, raw: str, detail: Optional[str] = None):
        super().__init__(
            f'Could not parse command: {raw!r}',
            detail,
            extra_data={'raw': raw},
        )
        self.raw = raw


class ConfigurationError(OniflowError):
    """A node or the engine is missing required configuration."""


class NotFoundError(OniflowError):
    """Exception for resource not found errors."""

    def __init__(self, message: str, detail: Optional[str] = None, resource_type: Optional[str] = None):
        extra_data = {'resource_type': resource_type} if resource_type else {}
        super().__init__(message, detail, 'NotFoundError', extra_data)


class WorkflowNotFoundError(NotFoundError):
    """Exception for workflow not found errors."""

    def __init__(self, workflow_id: str):
        super().__init__(
            'Workflow not found',
            f'The workflow with ID "{workflow_id}" does not exist',
            resource_type='Workflow'
        )
        self.workflow_id = workflow_id


class NodeNotFoundError(NotFoundError):
    """Exception for node not found errors."""

    def __init__(self, node_id: str, workflow_id: Optional[str] = None):
        message = f'Node not found: {node_id}'
        if workflow_id:
            message += f' in workflow {workflow_id}'
        super().__init__(message, message, resource_type='Node')
        self.node_id = node_id
        self.workflow_id = workflow_id


class NodeTypeNotFoundError(NotFoundError):
    """Exception for node type not found errors."""

    def __init__(self, node_type: str):
        super().__init__(
            f'Node type not found: {node_type}',
            f'The node type "{node_type}" is not registered in the system',
            resource_type='NodeType'
        )
        self.node_type = node_type


class CommandNotFoundError(NotFoundError):
    """No handler is registered for a command path."""

    def __init__(self, path: str):
        super().__init__(
            f'Unknown command: {path}',
            f'No handler is registered for "{path}"',
            resource_type='Command'
        )
        self.path = path


class NoTriggerError(OniflowError):
    """A workflow was executed without any trigger node."""

    def __init__(self, workflow_id: str):
        super().__init__(
            'No trigger node found',
            f'Workflow "{workflow_id}" has no trigger node and cannot execute',
            extra_data={'workflow_id': workflow_id},
        )
        self.workflow_id = workflow_id


class NodeExecutionError(OniflowError):
    """
    Wraps any exception raised by a node executor.
    Scoped to a single node; the original exception is kept as __cause__.
    """

    def __init__(self, node_id: str, node_type: str, reason: BaseException):
        self.node_id = node_id
        self.node_type = node_type
        self.reason = str(reason) or reason.__class__.__name__
        super().__init__(
            self.reason,
            f'Node {node_id} ({node_type}) failed: {self.reason}',
            extra_data={'node_id': node_id, 'node_type': node_type},
        )


class CommandRejectedError(OniflowError):
    """The command run behind a command node was rejected."""

    def __init__(self, command: str, error: Optional[str] = None):
        super().__init__(error or f'Failed: {command}', extra_data={'command': command})
        self.command = command


class HttpError(OniflowError):
    """Non-2xx response, timeout or network failure of an HTTP call."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        extra_data = {'status_code': status_code} if status_code is not None else {}
        super().__init__(message, extra_data=extra_data)
        self.status_code = status_code


class ExternalServiceError(OniflowError):
    """A tool proxy or completion endpoint answered with an error or malformed data."""

    def __init__(self, message: str, service: Optional[str] = None):
        extra_data = {'service': service} if service else {}
        super().__init__(message, extra_data=extra_data)
        self.service = service


class RunAborted(OniflowError):
    """Raised inside a run whose execution context was aborted."""

    def __init__(self, workflow_id: str, run_id: str):
        super().__init__(
            'Run aborted',
            f'Run {run_id} of workflow {workflow_id} was aborted',
            extra_data={'workflow_id': workflow_id, 'run_id': run_id},
        )
        self.workflow_id = workflow_id
        self.run_id = run_id
