"""
Mcp Nodes Package

Provides tool server nodes.
"""

from .McpTool import McpTool

__all__ = ['McpTool']
