"""
Logical Nodes Package

Provides conditional and logical operation nodes.
"""

from .Condition import Condition

__all__ = ['Condition']
