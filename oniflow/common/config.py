"""
Common configuration utilities.
Provides shared helpers for reading typed values from the environment.
"""
import os
from typing import Optional


def get_env_str(key: str, default: str = '') -> str:
    """
    Get environment variable as a stripped string.

    Args:
        key: Environment variable key
        default: Default value if key is not set or blank

    Returns:
        String value
    """
    value = os.environ.get(key)
    if value is None or not value.strip():
        return default
    return value.strip()


def get_env_bool(key: str, default: bool = False) -> bool:
    """
    Get environment variable as boolean.

    Args:
        key: Environment variable key
        default: Default value if key is not set

    Returns:
        Boolean value
    """
    value = os.environ.get(key, str(default)).lower()
    return value in ('true', '1', 'yes', 'on')


def get_env_int(key: str, default: int = 0) -> int:
    """
    Get environment variable as integer.

    Args:
        key: Environment variable key
        default: Default value if key is not set

    Returns:
        Integer value
    """
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default


def get_env_float(key: str, default: float = 0.0, minimum: Optional[float] = None) -> float:
    """
    Get environment variable as float.

    Args:
        key: Environment variable key
        default: Default value if key is not set or not numeric
        minimum: Values below this bound fall back to the default

    Returns:
        Float value
    """
    try:
        value = float(os.environ.get(key, str(default)))
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return default
    return value
