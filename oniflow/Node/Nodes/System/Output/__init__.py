"""
Output Node Package

Provides the node that emits a final message or notification.
"""

from .node import Output

__all__ = ['Output']
