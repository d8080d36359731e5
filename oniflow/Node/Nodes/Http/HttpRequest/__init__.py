"""
HttpRequest Node Package

Provides the node that calls REST/JSON endpoints.
"""

from .node import HttpRequest

__all__ = ['HttpRequest']
