"""
Shared fixtures: in-memory collaborators and an engine wired to them.
"""

import asyncio
from typing import Callable, Optional

import httpx
import pytest

from oniflow.Command.registry import InMemoryCommandRegistry
from oniflow.config.settings import EngineSettings
from oniflow.Node.Core import NodeServices, WorkflowNode
from oniflow.Workflow.events import EventBus
from oniflow.Workflow.execution.context import ExecutionContext
from oniflow.Workflow.flow_engine import WorkflowEngine
from oniflow.Workflow.storage import InMemoryNotificationStore, InMemoryWorkflowStore


@pytest.fixture
def settings():
    return EngineSettings(delay_default_seconds=0.01, http_timeout=5.0, mcp_proxy_url="http://proxy.test/api/mcp/call")


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def store(bus):
    return InMemoryWorkflowStore(events=bus)


@pytest.fixture
def notifications(bus):
    return InMemoryNotificationStore(events=bus)


@pytest.fixture
def registry(bus):
    registry = InMemoryCommandRegistry(events=bus)
    registry.register("echo.say", lambda *args: args[0] if args else None)
    registry.register("math.add", lambda a, b: a + b)
    return registry


@pytest.fixture
def make_engine(store, bus, registry, notifications, settings) -> Callable[..., WorkflowEngine]:
    def _make(handler: Optional[Callable[[httpx.Request], httpx.Response]] = None, **overrides) -> WorkflowEngine:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler)) if handler else None
        engine_settings = settings.model_copy(update=overrides) if overrides else settings
        return WorkflowEngine(
            store,
            bus,
            command_registry=registry,
            notifications=notifications,
            settings=engine_settings,
            http_client=client,
        )

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def make_services(registry, notifications, settings) -> Callable[..., NodeServices]:
    def _make(handler: Optional[Callable[[httpx.Request], httpx.Response]] = None) -> NodeServices:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler)) if handler else None
        return NodeServices(
            command_registry=registry,
            notifications=notifications,
            settings=settings,
            http_client=client,
        )

    return _make


@pytest.fixture
def ctx():
    return ExecutionContext(workflow_id="wf-test")


def make_node(type: str, config: Optional[dict] = None, label: str = "", id: str = "n1") -> WorkflowNode:
    return WorkflowNode(id=id, type=type, label=label or type, config=config or {})


def build_workflow(store, nodes, connections, name="Test Workflow"):
    """
    Create a workflow from (id, type, label, config) tuples and
    (source, target, label) tuples.
    """
    workflow = store.create_workflow(
        name=name,
        nodes=[WorkflowNode(id=i, type=t, label=l, config=c or {}) for i, t, l, c in nodes],
    )
    for source, target, label in connections:
        store.add_connection(workflow.id, source, target, label)
    return workflow


async def wait_until(predicate, timeout=2.0):
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)
