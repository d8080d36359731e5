"""
WorkflowTrigger Node Package

Provides the entry node that starts a workflow run.
"""

from .node import WorkflowTrigger

__all__ = ['WorkflowTrigger']
