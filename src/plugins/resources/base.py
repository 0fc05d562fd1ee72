"""
Resource Plugin Base - Abstract interface for resource plugins.

A resource plugin maps one resource type (e.g. ``github_team``) onto the
GitHub API: it declares the schema and implements create, read, update and
delete. Import and plan have default implementations.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from plugins.base import (
    PlanResult,
    ResourceData,
    ResourceSchema,
    diff_resource,
    schema_to_json_schema,
)
from plugins.errors import SchemaValidationError, UnconvertibleIdError
from plugins.provider import Provider
from validation import validate_resource_config

logger = logging.getLogger(__name__)


def parse_id(resource_id: str) -> int:
    """Parse a stored numeric resource ID."""
    try:
        return int(resource_id)
    except (TypeError, ValueError) as e:
        raise UnconvertibleIdError(resource_id, e) from e


class ResourcePlugin(ABC):
    """
    Abstract base class for resource plugins.

    Operations receive the ResourceData being reconciled and the Provider
    holding the API clients. Create and Update finish by reading the
    resource back so the observed state is complete.

    Resource plugins are discovered via Python entry points in the
    'teamctl.resources' group.
    """

    @property
    @abstractmethod
    def type_name(self) -> str:
        """Resource type name, e.g. 'github_team'."""
        pass

    @property
    @abstractmethod
    def schema(self) -> ResourceSchema:
        """Attribute declarations for this resource."""
        pass

    @abstractmethod
    async def create(self, d: ResourceData, provider: Provider) -> None:
        """
        Create the remote object from desired state.

        Must set the resource ID on success.
        """
        pass

    @abstractmethod
    async def read(self, d: ResourceData, provider: Provider) -> None:
        """
        Refresh observed state from the remote object.

        Clears the resource ID when the object no longer exists.
        """
        pass

    @abstractmethod
    async def update(self, d: ResourceData, provider: Provider) -> None:
        """Converge the remote object onto desired state."""
        pass

    @abstractmethod
    async def delete(self, d: ResourceData, provider: Provider) -> None:
        """Delete the remote object."""
        pass

    async def import_state(
        self, resource_id: str, provider: Provider
    ) -> ResourceData:
        """
        Adopt an existing remote object by ID.

        The default is a passthrough: the ID is taken as-is and the object
        is read to populate state. An empty ID afterwards means nothing
        was found.
        """
        d = self.new_resource_data(resource_id=resource_id)
        await self.read(d, provider)
        return d

    def new_resource_data(
        self,
        config: Optional[Dict[str, Any]] = None,
        state: Optional[Dict[str, Any]] = None,
        resource_id: str = "",
        is_new_resource: bool = False,
    ) -> ResourceData:
        """Create a ResourceData bound to this resource's schema."""
        return ResourceData(
            self.schema,
            config=config,
            state=state,
            resource_id=resource_id,
            is_new_resource=is_new_resource,
        )

    def validate(self, config: Dict[str, Any]) -> None:
        """
        Validate desired configuration against the schema.

        Raises:
            SchemaValidationError: If the configuration is invalid.
        """
        is_valid, error = validate_resource_config(
            config, schema_to_json_schema(self.schema)
        )
        if not is_valid:
            raise SchemaValidationError(self.type_name, error or "invalid")

    def plan(
        self,
        prior_state: Optional[Dict[str, Any]],
        config: Optional[Dict[str, Any]],
    ) -> PlanResult:
        """Diff prior state against configuration, then customize the diff."""
        result = diff_resource(self.schema, prior_state, config)
        return self.customize_diff(result)

    def customize_diff(self, result: PlanResult) -> PlanResult:
        """Hook for resources whose computed fields depend on changes."""
        return result
