from .interpolation import INPUT_PATTERN, interpolate, replace_whole_input, stringify, to_display_string
from .path_utils import is_falsy_scalar, resolve_path, split_path

__all__ = [
    "INPUT_PATTERN",
    "interpolate",
    "replace_whole_input",
    "stringify",
    "to_display_string",
    "is_falsy_scalar",
    "resolve_path",
    "split_path",
]
