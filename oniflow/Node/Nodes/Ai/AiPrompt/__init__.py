"""
AiPrompt Node Package

Provides the node that queries a chat completion endpoint.
"""

from .node import AiPrompt

__all__ = ['AiPrompt']
