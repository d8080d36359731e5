"""
Collaborators shared by every node executor of one engine.
"""

from dataclasses import dataclass, field
from typing import Optional, TYPE_CHECKING

import httpx
import structlog

from ...config.settings import EngineSettings

if TYPE_CHECKING:
    from ...Command.registry import CommandRegistry
    from ...Workflow.storage import NotificationStore

logger = structlog.get_logger(__name__)


@dataclass
class NodeServices:
    """
    Bundle handed to executors at construction time.

    The HTTP client is created on first use unless one is injected; an
    injected client is never closed here.
    """

    command_registry: Optional["CommandRegistry"] = None
    notifications: Optional["NotificationStore"] = None
    settings: EngineSettings = field(default_factory=EngineSettings)
    http_client: Optional[httpx.AsyncClient] = None
    _owns_client: bool = field(default=False, init=False, repr=False)

    def get_http_client(self) -> httpx.AsyncClient:
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(follow_redirects=True)
            self._owns_client = True
            logger.debug("HTTP client initialized")
        return self.http_client

    async def aclose(self) -> None:
        if self._owns_client and self.http_client is not None:
            await self.http_client.aclose()
            logger.debug("HTTP client closed")
        if self._owns_client:
            self.http_client = None
            self._owns_client = False
