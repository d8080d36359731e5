"""
Trigger Nodes Package

Provides workflow entry nodes.
"""

from .WorkflowTrigger import WorkflowTrigger

__all__ = ['WorkflowTrigger']
