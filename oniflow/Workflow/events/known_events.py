"""
Catalogue of kernel events a workflow trigger can subscribe to.

Used by trigger pickers; the engine itself accepts any event name.
"""

from typing import Dict, List, NamedTuple, Optional


class EventSpec(NamedTuple):
    name: str
    category: str
    description: str
    payload: str
    example: Optional[str] = None


KNOWN_EVENTS: List[EventSpec] = [
    # Tasks
    EventSpec("task:created", "Tasks", "A task was added", "{ id, title, description, priority, status, dueDate }"),
    EventSpec("task:updated", "Tasks", "A task was edited", "{ id, title, ...updatedFields }"),
    EventSpec("task:deleted", "Tasks", "A task was removed", "{ id, title }"),
    EventSpec("task:completed", "Tasks", "A task was marked done", "{ id, title, completedAt }"),
    EventSpec("task:due", "Tasks", "A task reached its due time", "{ id, title, dueDate }"),
    EventSpec("tasks:overdue", "Tasks", "Overdue tasks were found", "[{ id, title, dueDate }, ...]"),
    # Calendar
    EventSpec("event:created", "Calendar", "A calendar event was added", "{ id, title, start, end }"),
    # Scheduler
    EventSpec(
        "job:created", "Scheduler", "A scheduled job was added", "{ id, name, interval }",
        '{ id: "job1", name: "Backup DB", interval: "1h" }',
    ),
    EventSpec(
        "scheduler:job:fired", "Scheduler", "A scheduled job fired", "{ jobId, name, firedAt }",
        '{ jobId: "job1", name: "Backup DB", firedAt: 1708750000000 }',
    ),
    EventSpec("scheduler:notification", "Scheduler", "The scheduler raised a reminder", "{ message, type }"),
    # Commands
    EventSpec("command:executed", "Commands", "A command finished running", "{ runId, command, source, status, error }"),
    EventSpec("command:error", "Commands", "A command could not be parsed or run", "{ raw, error }"),
    # Runs
    EventSpec("run:created", "Runs", "A command run started", "{ runId, commandPath }"),
    EventSpec("run:resolved", "Runs", "A command run resolved", "{ runId, output }"),
    EventSpec("run:rejected", "Runs", "A command run was rejected", "{ runId, error }"),
    # Documents
    EventSpec(
        "document:opened", "Documents", "A document was opened", "{ path, meta: { name, ext, size, pages } }",
        '{ path: "/Users/me/report.pdf", meta: { name: "report.pdf", pages: 5 } }',
    ),
    # Windows
    EventSpec("window:opened", "Windows", "A window was opened", "{ id, widgetType, title }"),
    EventSpec("window:closed", "Windows", "A window was closed", "{ id, widgetType, title }"),
    EventSpec("window:focused", "Windows", "A window gained focus", "{ id, widgetType, title }"),
    EventSpec("window:minimized", "Windows", "A window was minimized", "{ id, widgetType, title }"),
    EventSpec("window:maximized", "Windows", "A window was maximized", "{ id, widgetType, title }"),
    EventSpec("window:restored", "Windows", "A window was restored", "{ id, widgetType, title }"),
    # Desktops
    EventSpec(
        "desktop:switched", "Desktops", "The active desktop changed", "{ id, name, previousId }",
        '{ id: "desktop-2", name: "Desktop 2", previousId: "desktop-1" }',
    ),
    EventSpec("desktop:added", "Desktops", "A desktop was added", "{ id, name }"),
    EventSpec("desktop:removed", "Desktops", "A desktop was removed", "{ id, name, movedTo }"),
    EventSpec("desktop:renamed", "Desktops", "A desktop was renamed", "{ id, name }"),
    # Notifications
    EventSpec(
        "notification:created", "Notifications", "A notification was shown", "{ id, message, type, timestamp }",
        '{ id: "n1", message: "Task completed!", type: "success", timestamp: 1708750000000 }',
    ),
    # Appearance
    EventSpec("theme:changed", "Appearance", "The theme changed", "{ theme }"),
    EventSpec("wallpaper:changed", "Appearance", "The wallpaper changed", "{ wallpaper }"),
    # Workflows
    EventSpec(
        "workflow:created", "Workflows", "A workflow was created", "{ id, name, nodeCount }",
        '{ id: "wf123", name: "Daily Report", nodeCount: 3 }',
    ),
    EventSpec("workflow:deleted", "Workflows", "A workflow was deleted", "{ id, name }"),
    EventSpec("workflow:toggled", "Workflows", "A workflow was enabled or disabled", "{ id, name, enabled }"),
    EventSpec(
        "workflow:started", "Workflows", "A workflow run started", "{ wfId, name }",
        '{ wfId: "wf123", name: "Daily Report" }',
    ),
    EventSpec("workflow:completed", "Workflows", "A workflow run finished", "{ wfId, status, errors }"),
    EventSpec("workflow:error", "Workflows", "A workflow run crashed", "{ wfId, error }"),
    EventSpec("workflow:aborted", "Workflows", "A workflow run was aborted", "{ wfId }"),
    # System
    EventSpec(
        "system:heartbeat", "System", "Periodic system status snapshot",
        "{ timestamp, uptime, health, pending: { tasks, overdue, dueToday }, "
        "system: { windows, desktops, scheduledJobs, activeWorkflows }, summary }",
    ),
    EventSpec("system:boot", "System", "The desktop finished booting", "{ timestamp, windowCount, workflowCount }"),
]


def events_by_category() -> Dict[str, List[EventSpec]]:
    grouped: Dict[str, List[EventSpec]] = {}
    for spec in KNOWN_EVENTS:
        grouped.setdefault(spec.category, []).append(spec)
    return grouped
