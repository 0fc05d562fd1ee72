"""
Plugin system for teamctl.

This package provides the resource plugin architecture, the GitHub API
clients and the provider context passed to every resource operation.
"""

from plugins.base import FieldSchema, PlanAction, PlanResult, ResourceData
from plugins.provider import Provider
from plugins.registry import ResourceRegistry, get_registry
from plugins.resources.base import ResourcePlugin

__all__ = [
    "FieldSchema",
    "PlanAction",
    "PlanResult",
    "ResourceData",
    "Provider",
    "ResourcePlugin",
    "ResourceRegistry",
    "get_registry",
]
