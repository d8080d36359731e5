"""
System Nodes Package

Provides command and output nodes.
"""

from .CommandRunner import CommandRunner
from .Output import Output

__all__ = ['CommandRunner', 'Output']
