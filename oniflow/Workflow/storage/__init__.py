from .notification_store import InMemoryNotificationStore, NotificationStore
from .workflow_store import InMemoryWorkflowStore, WorkflowStore

__all__ = [
    "InMemoryNotificationStore",
    "NotificationStore",
    "InMemoryWorkflowStore",
    "WorkflowStore",
]
