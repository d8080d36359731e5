from .logging_config import setup_logging
from .settings import EngineSettings

__all__ = ["setup_logging", "EngineSettings"]
