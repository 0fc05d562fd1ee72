"""
State Store - persisted attributes of managed resources.

Keeps the last observed attributes of each managed resource, keyed by the
resource's name in the configuration, in a JSON document on disk. Also
loads desired-state configuration files (YAML or JSON).
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import yaml

logger = logging.getLogger(__name__)

STATE_VERSION = 1


@dataclass
class ResourceState:
    """Stored state of one managed resource."""

    name: str
    type_name: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def resource_id(self) -> str:
        return str(self.attributes.get("id") or "")

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type_name, "attributes": self.attributes}


@dataclass
class DesiredResource:
    """One resource block from a configuration file."""

    name: str
    type_name: str
    config: Dict[str, Any] = field(default_factory=dict)


class StateStore:
    """JSON-file backed store of resource state."""

    def __init__(self, path: str):
        self.path = path
        self.serial = 0
        self._resources: Dict[str, ResourceState] = {}

    def load(self) -> None:
        """Load state from disk. A missing file is an empty state."""
        if not os.path.exists(self.path):
            logger.debug(f"No state file at {self.path}, starting empty")
            self._resources = {}
            self.serial = 0
            return

        with open(self.path, "r") as f:
            data = json.load(f)

        version = data.get("version", STATE_VERSION)
        if version != STATE_VERSION:
            raise ValueError(
                f"Unsupported state version {version} in {self.path}, "
                f"expected {STATE_VERSION}"
            )

        self.serial = data.get("serial", 0)
        self._resources = {
            name: ResourceState(
                name=name,
                type_name=entry["type"],
                attributes=entry.get("attributes", {}),
            )
            for name, entry in data.get("resources", {}).items()
        }
        logger.debug(f"Loaded {len(self._resources)} resource(s) from {self.path}")

    def save(self) -> None:
        """Write state to disk, replacing the previous file atomically."""
        self.serial += 1
        data = {
            "version": STATE_VERSION,
            "serial": self.serial,
            "resources": {
                name: resource.to_dict()
                for name, resource in sorted(self._resources.items())
            },
        }
        tmp_path = f"{self.path}.tmp"
        with open(tmp_path, "w") as f:
            json.dump(data, f, indent=2, sort_keys=True)
            f.write("\n")
        os.replace(tmp_path, self.path)
        logger.debug(f"Saved state serial {self.serial} to {self.path}")

    def get(self, name: str) -> Optional[ResourceState]:
        return self._resources.get(name)

    def put(self, name: str, type_name: str, attributes: Dict[str, Any]) -> None:
        self._resources[name] = ResourceState(
            name=name, type_name=type_name, attributes=dict(attributes)
        )

    def remove(self, name: str) -> None:
        self._resources.pop(name, None)

    def list(self) -> List[ResourceState]:
        return [self._resources[name] for name in sorted(self._resources)]


def load_desired_resources(path: str) -> List[DesiredResource]:
    """
    Load resource blocks from a YAML or JSON configuration file.

    The file holds a top-level ``resources`` mapping of resource name to
    attributes, each with a ``type`` key naming the resource type.

    Raises:
        ValueError: If the document does not have that shape.
    """
    with open(path, "r") as f:
        if path.endswith(".yaml") or path.endswith(".yml"):
            data = yaml.safe_load(f)
        else:
            data = json.load(f)

    if not isinstance(data, dict) or not isinstance(data.get("resources"), dict):
        raise ValueError(f"{path}: expected a top-level 'resources' mapping")

    resources = []
    for name, block in data["resources"].items():
        if not isinstance(block, dict) or not block.get("type"):
            raise ValueError(f"{path}: resource '{name}' must set 'type'")
        config = {k: v for k, v in block.items() if k != "type"}
        resources.append(
            DesiredResource(name=name, type_name=block["type"], config=config)
        )
    return resources
