"""
Unit tests for the in-memory workflow and notification stores and FlowBuilder.
"""

import asyncio

import pytest

from conftest import build_workflow, wait_until
from oniflow.common.exceptions import NodeNotFoundError, WorkflowNotFoundError
from oniflow.Node.Core.Data import LogEntry
from oniflow.Workflow.flow_builder import FlowBuilder
from oniflow.Workflow.storage import InMemoryNotificationStore


def _diamond(store):
    return build_workflow(
        store,
        [
            ("t", "trigger", "Start", None),
            ("a", "output", "A", None),
            ("b", "output", "B", None),
        ],
        [("t", "a", None), ("t", "b", None), ("a", "b", "true")],
    )


# Workflows

def test_create_workflow_adds_start_trigger(store, bus):
    """A new empty workflow gets a manual Start trigger and announces itself."""
    created = []
    bus.on("workflow:created", created.append)

    workflow = store.create_workflow()

    assert workflow.name == "New Workflow"
    assert [(n.type, n.label) for n in workflow.nodes] == [("trigger", "Start")]
    assert workflow.nodes[0].config == {"triggerType": "manual"}
    assert created == [{"id": workflow.id, "name": "New Workflow", "nodeCount": 1}]
    assert store.get_workflow(workflow.id) is workflow


def test_update_workflow_toggle_emits_event(store, bus):
    toggled = []
    bus.on("workflow:toggled", toggled.append)
    workflow = store.create_workflow(name="Toggle me")

    store.update_workflow(workflow.id, enabled=False)
    store.update_workflow(workflow.id, name="Renamed")

    assert store.get_workflow(workflow.id).enabled is False
    assert toggled == [{"id": workflow.id, "name": "Toggle me", "enabled": False}]


def test_update_missing_workflow_raises(store):
    with pytest.raises(WorkflowNotFoundError):
        store.update_workflow("wf-nope", name="x")


def test_delete_workflow(store, bus):
    deleted = []
    bus.on("workflow:deleted", deleted.append)
    workflow = store.create_workflow(name="Gone")

    assert store.delete_workflow(workflow.id) is True
    assert store.delete_workflow(workflow.id) is False
    assert store.get_workflow(workflow.id) is None
    assert deleted == [{"id": workflow.id, "name": "Gone"}]


def test_duplicate_workflow_remaps_ids(store):
    """The copy has fresh node ids, connections follow them, run state is cleared."""
    workflow = _diamond(store)
    store.update_node(workflow.id, "a", status="resolved", output="x")
    store.update_workflow(workflow.id, last_run_status="completed")

    copy = store.duplicate_workflow(workflow.id)

    assert copy.id != workflow.id
    assert copy.name == "Test Workflow (copy)"
    assert copy.last_run_status is None
    copy_ids = {node.id for node in copy.nodes}
    assert copy_ids.isdisjoint({"t", "a", "b"})
    assert all(conn.source in copy_ids and conn.target in copy_ids for conn in copy.connections)
    assert [conn.label for conn in copy.connections] == [None, None, "true"]
    assert all(node.status == "idle" and node.output is None for node in copy.nodes)
    # The original is untouched
    assert store.get_workflow(workflow.id).get_node("a").output == "x"


# Nodes and connections

def test_add_and_update_node(store):
    workflow = store.create_workflow()
    node = store.add_node(workflow.id, "output", config={"message": "hi"})
    assert node.label == "output"
    store.update_node(workflow.id, node.id, label="Say hi")
    assert store.get_workflow(workflow.id).get_node(node.id).label == "Say hi"


def test_update_missing_node_raises(store):
    workflow = store.create_workflow()
    with pytest.raises(NodeNotFoundError):
        store.update_node(workflow.id, "node-nope", label="x")


def test_delete_node_drops_its_connections(store):
    workflow = _diamond(store)
    assert store.delete_node(workflow.id, "a") is True
    stored = store.get_workflow(workflow.id)
    assert [(c.source, c.target) for c in stored.connections] == [("t", "b")]
    assert store.delete_node(workflow.id, "a") is False


def test_add_connection_refuses_self_loops_and_duplicates(store):
    workflow = _diamond(store)
    assert store.add_connection(workflow.id, "a", "a") is None
    assert store.add_connection(workflow.id, "t", "a") is None
    connection = store.add_connection(workflow.id, "b", "a", "false")
    assert connection.label == "false"
    assert store.delete_connection(workflow.id, connection.id) is True
    assert store.delete_connection(workflow.id, connection.id) is False


def test_downstream_and_upstream(store):
    workflow = _diamond(store)
    assert [n.id for n in store.get_downstream(workflow.id, "t")] == ["a", "b"]
    assert [n.id for n in store.get_upstream(workflow.id, "b")] == ["t", "a"]
    assert store.get_downstream("wf-nope", "t") == []


def test_reset_node_states(store):
    workflow = _diamond(store)
    store.update_node(workflow.id, "a", status="rejected", input=1, output="boom")
    store.reset_node_states(workflow.id)
    node = store.get_workflow(workflow.id).get_node("a")
    assert (node.status, node.input, node.output) == ("idle", None, None)


def test_logs_append_and_clear(store):
    workflow = store.create_workflow()
    store.add_log(workflow.id, LogEntry(message="one"))
    store.add_log(workflow.id, LogEntry(message="two", level="warn"))
    assert [e.message for e in store.get_logs(workflow.id)] == ["one", "two"]
    store.clear_logs(workflow.id)
    assert store.get_logs(workflow.id) == []


# Import

WORKFLOW_EXPORT = {
    "id": "wf-import",
    "name": "Imported",
    "enabled": False,
    "lastRunStatus": "completed",
    "nodes": [
        {"id": "t", "type": "trigger", "data": {"config": {"triggerType": "manual"}}},
        {"id": "if", "type": "condition", "label": "Check", "config": {"field": "ok"}},
        {"id": "o", "type": "output"},
    ],
    "connections": [{"from": "t", "to": "if"}],
    "edges": [
        {"source": "if", "target": "o", "sourceHandle": "Yes"},
        {"source": "if", "target": "if"},
        {"source": "if", "target": "ghost"},
        {"source": "t", "target": "if"},
    ],
}


def test_load_workflow_accepts_connections_and_edges(store, bus):
    """Edges become connections labeled by their source handle; bad edges are skipped."""
    created = []
    bus.on("workflow:created", created.append)

    workflow = store.load_workflow(WORKFLOW_EXPORT)

    assert workflow.id == "wf-import"
    assert workflow.enabled is False
    assert workflow.last_run_status == "completed"
    assert workflow.get_node("t").config == {"triggerType": "manual"}
    assert workflow.get_node("o").label == "output"
    assert [(c.source, c.target, c.label) for c in workflow.connections] == [
        ("t", "if", None),
        ("if", "o", "yes"),
    ]
    assert store.get_workflow("wf-import") is workflow
    assert created[0]["nodeCount"] == 3


def test_flow_builder_rejects_duplicate_node_ids():
    with pytest.raises(ValueError):
        FlowBuilder({"nodes": [{"id": "x", "type": "output"}, {"id": "x", "type": "output"}]}).build()


@pytest.mark.asyncio
async def test_imported_workflow_runs(engine, store):
    """A loaded export executes like a built one, routing on the edge handle."""
    workflow = store.load_workflow({**WORKFLOW_EXPORT, "id": "wf-run", "enabled": True})
    result = await engine.execute(workflow.id, {"ok": True})
    assert result.status == "completed"
    assert store.get_workflow("wf-run").get_node("o").status == "resolved"


# Notifications

def test_notification_without_loop_stays_until_dismissed(bus):
    created = []
    bus.on("notification:created", created.append)
    notifications = InMemoryNotificationStore(events=bus)

    notification_id = notifications.add_notification("Saved", type="success")

    assert notifications.notifications[0]["message"] == "Saved"
    assert created[0]["id"] == notification_id
    assert notifications.dismiss(notification_id) is True
    assert notifications.dismiss(notification_id) is False


@pytest.mark.asyncio
async def test_notification_expires_after_duration():
    notifications = InMemoryNotificationStore()
    notifications.add_notification("Brief", duration=10)
    notifications.add_notification("Sticky", duration=0)
    await wait_until(lambda: len(notifications.notifications) == 1)
    assert notifications.notifications[0]["message"] == "Sticky"
    notifications.clear_all()
    assert notifications.notifications == []
    await asyncio.sleep(0)
