import importlib
import inspect
import pkgutil
from typing import Dict, List, Optional, Type

import structlog

from ..common.exceptions import NodeTypeNotFoundError
from ..Node.Core import BaseNode, ConditionalNode, NodeServices

logger = structlog.get_logger(__name__)


class NodeRegistry:
    """
    Registry class responsible for discovering and creating node executors.
    """

    _node_registry: Optional[Dict[str, Type[BaseNode]]] = None
    _abstract_base_classes = {BaseNode, ConditionalNode}

    @classmethod
    def _discover_node_classes(cls) -> Dict[str, Type[BaseNode]]:
        from ..Node import Nodes
        discovered_classes = []

        def walk_packages(path, prefix):
            for importer, modname, ispkg in pkgutil.iter_modules(path, prefix):
                if ispkg:
                    try:
                        subpackage = importlib.import_module(modname)
                        if hasattr(subpackage, "__path__"):
                            walk_packages(subpackage.__path__, modname + ".")
                    except Exception as e:
                        logger.error(f"Failed to import subpackage '{modname}'", error=str(e))
                        continue
                else:
                    try:
                        module = importlib.import_module(modname)
                        for name, obj in inspect.getmembers(module, inspect.isclass):
                            if obj.__module__ != modname:
                                continue
                            if issubclass(obj, BaseNode) and not inspect.isabstract(obj):
                                if obj not in cls._abstract_base_classes:
                                    discovered_classes.append(obj)
                    except Exception as e:
                        logger.error(f"Failed to import module '{modname}'", error=str(e))
                        continue

        walk_packages(Nodes.__path__, Nodes.__name__ + ".")

        mapping = {}
        for node_class in discovered_classes:
            try:
                identifier = node_class.identifier()
                mapping[identifier] = node_class
            except Exception:
                continue

        logger.info(f"Auto-discovered {len(mapping)} node Types in Nodes Package")
        return mapping

    @classmethod
    def _ensure_registry_loaded(cls) -> None:
        if cls._node_registry is None:
            cls._node_registry = cls._discover_node_classes()

    @classmethod
    def available_types(cls) -> List[str]:
        cls._ensure_registry_loaded()
        return sorted(cls._node_registry)

    @classmethod
    def get_node_class(cls, node_type: str) -> Type[BaseNode]:
        cls._ensure_registry_loaded()
        node_cls = cls._node_registry.get(node_type)
        if node_cls is None:
            raise NodeTypeNotFoundError(node_type)
        return node_cls

    @classmethod
    def create_node(cls, node_type: str, services: NodeServices) -> BaseNode:
        instance = cls.get_node_class(node_type)(services)
        logger.debug("Initialized BaseNode Instance", node_type=node_type)
        return instance

    @classmethod
    def create_executors(cls, services: NodeServices) -> Dict[str, BaseNode]:
        """One executor per discovered node type, sharing services."""
        cls._ensure_registry_loaded()
        return {node_type: node_cls(services) for node_type, node_cls in cls._node_registry.items()}
