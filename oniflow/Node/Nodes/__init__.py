"""
Node Subpackage

Provides all workflow node executors.

Note: This package does not perform top-level imports to avoid circular import issues.
Executors are discovered by walking this package in NodeRegistry.
"""
