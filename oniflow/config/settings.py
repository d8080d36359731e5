"""
Engine settings loaded from the environment (and an optional .env file).
"""

from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv
from pydantic import BaseModel, Field

from ..common.config import get_env_bool, get_env_float, get_env_int, get_env_str

DEFAULT_MCP_PROXY_URL = "http://localhost:5173/api/mcp/call"
DEFAULT_AI_MODEL = "gpt-4o-mini"


class EngineSettings(BaseModel):
    """
    Runtime knobs for the workflow engine and its node executors.
    """

    http_timeout: float = Field(default=30.0, description="Default HTTP node timeout in seconds")
    mcp_proxy_url: str = Field(default=DEFAULT_MCP_PROXY_URL, description="Tool invocation proxy endpoint")
    ai_default_model: str = Field(default=DEFAULT_AI_MODEL, description="Model used when an AI node names none")
    delay_default_seconds: float = Field(default=1.0, description="Delay used when a delay node has no valid duration")
    strict_branches: bool = Field(
        default=False,
        description="Skip unlabeled connections of multi-branch condition nodes instead of following them on both outcomes",
    )
    notify_duration_ms: int = Field(default=6000, description="Lifetime of notifications raised by output nodes")
    log_dir: str = Field(default="logs", description="Directory for JSON log files")
    log_level: str = Field(default="INFO", description="Console log level")

    @classmethod
    def from_env(cls, env_file: Optional[Union[str, Path]] = None) -> "EngineSettings":
        """
        Build settings from ONIFLOW_* environment variables.

        Args:
            env_file: Optional path to a .env file. When omitted, python-dotenv
                searches for one starting at the current directory.
        """
        load_dotenv(env_file or find_dotenv(usecwd=True))
        return cls(
            http_timeout=get_env_float("ONIFLOW_HTTP_TIMEOUT", 30.0, minimum=0.001),
            mcp_proxy_url=get_env_str("ONIFLOW_MCP_PROXY_URL", DEFAULT_MCP_PROXY_URL),
            ai_default_model=get_env_str("ONIFLOW_AI_DEFAULT_MODEL", DEFAULT_AI_MODEL),
            delay_default_seconds=get_env_float("ONIFLOW_DELAY_DEFAULT_SECONDS", 1.0, minimum=0.0),
            strict_branches=get_env_bool("ONIFLOW_STRICT_BRANCHES", False),
            notify_duration_ms=get_env_int("ONIFLOW_NOTIFY_DURATION_MS", 6000),
            log_dir=get_env_str("ONIFLOW_LOG_DIR", "logs"),
            log_level=get_env_str("ONIFLOW_LOG_LEVEL", "INFO"),
        )
