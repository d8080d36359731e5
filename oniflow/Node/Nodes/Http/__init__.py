"""
Http Nodes Package

Provides HTTP nodes.
"""

from .HttpRequest import HttpRequest

__all__ = ['HttpRequest']
