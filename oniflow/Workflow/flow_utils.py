"""
Utility functions and classes for flow management.
"""

from typing import Any, List, Optional

from ..Node.Core.Data import Connection, WorkflowNode

TRUE_BRANCH = "true"
FALSE_BRANCH = "false"

TRUE_CONNECTION_LABELS = ("true", "yes")
FALSE_CONNECTION_LABELS = ("false", "no")
TRUE_NODE_HINTS = ("true", "yes", "then")
FALSE_NODE_HINTS = ("false", "no", "else")


class BranchKeyNormalizer:
    """
    Utility class for normalizing branch keys between different formats.
    Connection labels are compared in lowercase.
    """

    @staticmethod
    def normalize_to_lowercase(source_handle: Any) -> Optional[str]:
        """
        Normalize an edge key from a sourceHandle to lowercase.

        Args:
            source_handle: Source handle value (Yes/No label or null)

        Returns:
            Lowercase key, or None for an unlabeled handle
        """
        if source_handle:
            return str(source_handle).strip().lower()
        return None


def classify_branch(connection: Connection, target: Optional[WorkflowNode]) -> Optional[str]:
    """
    Decide which verdict a connection of a multi-way condition node belongs to.

    An explicit connection label wins. Otherwise the target node's label is
    searched for hint words, true hints first. Returns TRUE_BRANCH,
    FALSE_BRANCH, or None when neither matches.
    """
    connection_label = BranchKeyNormalizer.normalize_to_lowercase(connection.label) or ""
    if connection_label in TRUE_CONNECTION_LABELS:
        return TRUE_BRANCH
    if connection_label in FALSE_CONNECTION_LABELS:
        return FALSE_BRANCH

    node_label = (target.label if target else "").lower()
    if any(hint in node_label for hint in TRUE_NODE_HINTS):
        return TRUE_BRANCH
    if any(hint in node_label for hint in FALSE_NODE_HINTS):
        return FALSE_BRANCH
    return None


def branch_verdict(condition_output: Any) -> bool:
    """The boolean a condition output routes on; a missing result counts as true."""
    if isinstance(condition_output, dict):
        result = condition_output.get("result")
        return True if result is None else bool(result)
    return True


def select_branches(
    connections: List[Connection],
    nodes_by_id: dict,
    result: bool,
    strict: bool = False,
) -> List[Connection]:
    """
    Pick the outgoing connections to follow for a verdict.

    A single connection is always followed. With two or more, classified
    connections follow their verdict and unclassified ones follow both,
    unless strict is set, in which case they are never followed.
    """
    if len(connections) <= 1:
        return list(connections)

    wanted = TRUE_BRANCH if result else FALSE_BRANCH
    selected = []
    for connection in connections:
        target = nodes_by_id.get(connection.target)
        if target is None:
            continue
        branch = classify_branch(connection, target)
        if branch == wanted or (branch is None and not strict):
            selected.append(connection)
    return selected
