"""
Command Package

Dot-notation command grammar and the registry that runs parsed commands.
"""

from .Data import CommandDescriptor, CommandRun, Value, ValueKind, value_kind
from .parser import (
    coerce_arg,
    format_command,
    format_value,
    parse_args,
    parse_command,
    parse_command_strict,
)
from .registry import CommandRegistry, InMemoryCommandRegistry, RunHandle

__all__ = [
    "CommandDescriptor",
    "CommandRun",
    "Value",
    "ValueKind",
    "value_kind",
    "coerce_arg",
    "format_command",
    "format_value",
    "parse_args",
    "parse_command",
    "parse_command_strict",
    "CommandRegistry",
    "InMemoryCommandRegistry",
    "RunHandle",
]
