"""
Delay Nodes Package

Provides delay nodes.
"""

from .WaitDelay import WaitDelay

__all__ = ['WaitDelay']
