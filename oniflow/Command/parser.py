"""
Command Parser

Turns dot-notation command strings into structured descriptors.

    browser.openUrl("youtube.com")
    -> CommandDescriptor(namespace="browser", action="openUrl", args=["youtube.com"])

The same grammar is used by the command bar, the AI tool-calling layer and
workflow command nodes, so parsing must stay identical across all three.
Malformed input never raises: it degrades to a best-effort descriptor or None.
"""

import json
import re
from typing import Any, List, Optional, Union

import structlog

from ..common.exceptions import ParseError
from .Data import CommandDescriptor, Value

logger = structlog.get_logger(__name__)

PIPE = " | "
DEFAULT_ACTION = "open"

# namespace.action(args) or namespace.sub.action(args) or a bare path
COMMAND_PATTERN = re.compile(r"^([A-Za-z_][\w.]*?)(?:\((.*)\))?$", re.DOTALL | re.ASCII)
NUMBER_PATTERN = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
INTEGER_PATTERN = re.compile(r"^[+-]?\d+$")

QUOTES = ('"', "'")
OPENERS = "([{"
CLOSERS = ")]}"

ParseResult = Union[CommandDescriptor, List[CommandDescriptor], None]


def parse_command(raw: Optional[str]) -> ParseResult:
    """
    Parse a raw command string.

    A top-level " | " splits the input into a pipe chain of independently
    parsed commands. The split ignores quoting and nesting, so a literal
    " | " inside an argument also splits.

    Args:
        raw: Command text as typed or generated.

    Returns:
        A CommandDescriptor, a list of them for pipe chains, or None for
        blank or unparseable input.
    """
    if raw is None:
        return None
    text = raw.strip()
    if not text:
        return None

    if PIPE in text:
        chain = [parse_single_command(segment.strip()) for segment in text.split(PIPE)]
        return [descriptor for descriptor in chain if descriptor is not None]

    return parse_single_command(text)


def parse_command_strict(raw: str) -> Union[CommandDescriptor, List[CommandDescriptor]]:
    """Like parse_command, but raises ParseError instead of returning None or an empty chain."""
    result = parse_command(raw)
    if not result:
        raise ParseError(raw or "", "Input is blank or does not match namespace.action(args)")
    return result


def parse_single_command(text: str) -> Optional[CommandDescriptor]:
    match = COMMAND_PATTERN.match(text)
    if not match:
        logger.debug("Command text did not match grammar", raw=text)
        return None

    full_path = match.group(1)
    args = parse_args(match.group(2) or "")

    parts = full_path.split(".")
    if len(parts) < 2:
        return CommandDescriptor(namespace=parts[0], action=DEFAULT_ACTION, args=args, raw=text)

    action = parts.pop()
    return CommandDescriptor(namespace=".".join(parts), action=action, args=args, raw=text)


def parse_args(args_string: str) -> List[Value]:
    """
    Split an argument list on top-level commas and coerce each token.

    Tracks quote state (backslash-escaped quotes do not close a string) and
    bracket depth across ( [ { so commas inside nested literals are kept.
    """
    if not args_string or not args_string.strip():
        return []

    args: List[Value] = []
    current: List[str] = []
    in_string = False
    string_char = ""
    depth = 0
    i = 0
    n = len(args_string)

    while i < n:
        char = args_string[i]
        escaped = i > 0 and args_string[i - 1] == "\\"

        if in_string:
            current.append(char)
            if char == string_char and not escaped:
                in_string = False
        elif char in QUOTES and depth == 0:
            in_string = True
            string_char = char
            current.append(char)
        elif char in QUOTES:
            # Quoted text inside a nested literal: copy it whole so its brackets are not counted
            current.append(char)
            i += 1
            while i < n:
                current.append(args_string[i])
                if args_string[i] == char and args_string[i - 1] != "\\":
                    break
                i += 1
        elif char in OPENERS:
            depth += 1
            current.append(char)
        elif char in CLOSERS:
            depth -= 1
            current.append(char)
        elif char == "," and depth == 0:
            token = "".join(current).strip()
            if token:
                args.append(coerce_arg(token))
            current = []
        else:
            current.append(char)
        i += 1

    token = "".join(current).strip()
    if token:
        args.append(coerce_arg(token))

    return args


def coerce_arg(token: str) -> Value:
    """Strip matching quotes, parse JSON literals, then fall back to scalar coercion."""
    if len(token) >= 2 and token[0] in QUOTES and token[-1] == token[0]:
        return token[1:-1]
    if _is_structured(token):
        try:
            return json.loads(token)
        except ValueError:
            pass
    return coerce_type(token)


def coerce_type(token: str) -> Value:
    if token == "true":
        return True
    if token == "false":
        return False
    if token == "null":
        return None
    if NUMBER_PATTERN.match(token):
        return int(token) if INTEGER_PATTERN.match(token) else float(token)
    return token


def format_value(value: Any) -> str:
    """
    Serialize a value back into argument-token form.

    coerce_arg(format_value(v)) == v for primitives and JSON literals whose
    strings contain no quote characters.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        quote = "'" if '"' in value else '"'
        return f"{quote}{value}{quote}"
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


def format_command(descriptor: CommandDescriptor) -> str:
    """Render a descriptor as command text."""
    args = ", ".join(format_value(arg) for arg in descriptor.args)
    return f"{descriptor.path}({args})"


def _is_structured(token: str) -> bool:
    return (token.startswith("[") and token.endswith("]")) or (
        token.startswith("{") and token.endswith("}")
    )
