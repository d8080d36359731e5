"""
Node Package

Node data model, the executor base classes and the built-in executors.
"""
