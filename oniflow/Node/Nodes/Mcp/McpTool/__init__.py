"""
McpTool Node Package

Provides the node that invokes tools through the tool proxy.
"""

from .node import McpTool

__all__ = ['McpTool']
