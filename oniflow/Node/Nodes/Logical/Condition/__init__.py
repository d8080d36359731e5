"""
Condition Node Package

Provides field comparison for workflow branching.
"""

from .node import Condition

__all__ = ['Condition']
