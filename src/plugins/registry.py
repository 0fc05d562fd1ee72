"""
Resource Registry - Discovery and registration of resource plugins.

This module provides the central registry mapping resource type names to
resource plugins, handling discovery, registration, and instantiation.
"""

import logging
from importlib.metadata import entry_points
from typing import Any, Dict, Optional, Type

from plugins.base import schema_to_json_schema
from plugins.resources.base import ResourcePlugin
from validation import check_resource_schema

logger = logging.getLogger(__name__)


class ResourceRegistry:
    """
    Central registry for resource plugins.

    Resource plugins are registered as classes and instantiated lazily,
    once per type.
    """

    def __init__(self):
        # Registered plugin classes (not instantiated)
        self._resource_plugins: Dict[str, Type[ResourcePlugin]] = {}

        # Cached plugin metadata to avoid repeated instantiation
        self._resource_plugin_info: Dict[str, Dict[str, Any]] = {}

        # Instantiated plugin instances
        self._resource_instances: Dict[str, ResourcePlugin] = {}

    def register_resource_plugin(self, plugin_class: Type[ResourcePlugin]) -> None:
        """
        Register a resource plugin class.

        Args:
            plugin_class: The ResourcePlugin subclass to register

        Raises:
            ValueError: If the plugin's field declarations do not form a valid schema
        """
        # Create temporary instance to get metadata (only once at registration)
        temp_instance = plugin_class()
        type_name = temp_instance.type_name
        json_schema = schema_to_json_schema(temp_instance.schema)

        is_valid, error = check_resource_schema(json_schema)
        if not is_valid:
            raise ValueError(f"Resource plugin '{type_name}' has {error}")

        if type_name in self._resource_plugins:
            logger.warning(f"Overwriting existing resource plugin: {type_name}")
            self._resource_instances.pop(type_name, None)

        self._resource_plugins[type_name] = plugin_class
        self._resource_plugin_info[type_name] = {
            "type_name": type_name,
            "fields": sorted(temp_instance.schema.keys()),
            "computed": sorted(
                name for name, fs in temp_instance.schema.items() if fs.computed
            ),
        }
        logger.info(f"Registered resource plugin: {type_name}")

    def get_resource_plugin(self, type_name: str) -> ResourcePlugin:
        """
        Get a resource plugin instance.

        Args:
            type_name: The resource type name

        Returns:
            A ResourcePlugin instance

        Raises:
            ValueError: If the resource type is not registered
        """
        if type_name not in self._resource_plugins:
            available = ", ".join(self._resource_plugins.keys()) or "none"
            raise ValueError(
                f"Unknown resource type: {type_name}. "
                f"Available resource types: {available}"
            )

        if type_name not in self._resource_instances:
            self._resource_instances[type_name] = self._resource_plugins[type_name]()
            logger.debug(f"Instantiated resource plugin: {type_name}")

        return self._resource_instances[type_name]

    def list_resource_plugins(self) -> list[str]:
        """List all registered resource type names."""
        return list(self._resource_plugins.keys())

    def has_resource_plugin(self, type_name: str) -> bool:
        """Check if a resource type is registered."""
        return type_name in self._resource_plugins

    def get_resource_plugin_info(self, type_name: str) -> Optional[Dict[str, Any]]:
        """
        Get information about a registered resource plugin.

        Args:
            type_name: The resource type name

        Returns:
            Dictionary with 'type_name', 'fields' and 'computed', or None
        """
        return self._resource_plugin_info.get(type_name)


# Global registry instance
_registry: Optional[ResourceRegistry] = None


def get_registry() -> ResourceRegistry:
    """Get the global resource registry singleton."""
    global _registry
    if _registry is None:
        _registry = ResourceRegistry()
    return _registry


def reset_registry() -> None:
    """Reset the global registry (mainly for testing)."""
    global _registry
    _registry = None


def register_builtin_resources() -> None:
    """
    Register the built-in resources and discover others via entry points.

    Called at CLI startup.
    """
    registry = get_registry()

    from plugins.resources.github_team import GitHubTeamResource

    registry.register_resource_plugin(GitHubTeamResource)

    # Discover and register resource plugins via entry points
    discovered = entry_points(group="teamctl.resources")
    for ep in discovered:
        try:
            resource_class = ep.load()
            registry.register_resource_plugin(resource_class)
        except Exception as e:
            logger.warning(f"Could not load resource plugin {ep.name}: {e}")
