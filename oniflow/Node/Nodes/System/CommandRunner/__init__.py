"""
CommandRunner Node Package

Provides the node that runs registered commands.
"""

from .node import CommandRunner

__all__ = ['CommandRunner']
