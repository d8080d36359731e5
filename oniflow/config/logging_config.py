"""
Logging configuration for the workflow runtime using structlog.

Configures structlog with:
- Pretty console output (human-readable, colored)
- JSON file output (machine-readable, structured)
- Daily log file rotation (UTC)
- Log files named with UTC date: oniflow.YYYY-MM-DD.jsonl
"""

import logging
import sys
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path
from typing import Optional, Union

import structlog

_configured = False


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FILENAME,
                structlog.processors.CallsiteParameter.LINENO
            ]
        ),
    ]


def setup_logging(
    log_dir: Optional[Union[str, Path]] = None,
    level: Optional[str] = None,
    file_output: bool = True,
) -> None:
    """
    Configure structlog with pretty console and JSON file output.

    This should be called once at application startup. It is idempotent:
    calling it again is a no-op. After calling this, modules can use:
    logger = structlog.get_logger(__name__)

    Args:
        log_dir: Directory for the rotating JSON log file (defaults to ONIFLOW_LOG_DIR)
        level: Console level name (defaults to ONIFLOW_LOG_LEVEL)
        file_output: Set to False to log to the console only
    """
    global _configured
    if _configured:
        return

    from .settings import EngineSettings

    settings = EngineSettings.from_env()
    console_level = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    shared_processors = _shared_processors()

    # Configure structlog to use stdlib integration
    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    # Console handler with pretty output
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(console_level)
    console_handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=structlog.dev.ConsoleRenderer(colors=True),
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger.addHandler(console_handler)

    if file_output:
        logs_dir = Path(log_dir or settings.log_dir)
        logs_dir.mkdir(parents=True, exist_ok=True)

        # File handler with JSON output and daily rotation (UTC)
        file_handler = TimedRotatingFileHandler(
            filename=logs_dir / "oniflow.jsonl",
            when="midnight",
            interval=1,
            backupCount=30,  # Keep 30 days of logs
            encoding="utf-8",
            utc=True,
        )
        file_handler.suffix = "%Y-%m-%d.jsonl"
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared_processors,
            )
        )
        root_logger.addHandler(file_handler)

    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)

    _configured = True
