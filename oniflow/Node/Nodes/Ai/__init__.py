"""
Ai Nodes Package

Provides language model nodes.
"""

from .AiPrompt import AiPrompt

__all__ = ['AiPrompt']
