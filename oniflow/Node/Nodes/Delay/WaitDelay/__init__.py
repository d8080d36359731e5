"""
WaitDelay Node Package

Provides a fixed, abortable pause.
"""

from .node import WaitDelay

__all__ = ['WaitDelay']
