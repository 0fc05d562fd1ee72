"""
Core plugin types and dataclasses.

This module contains the schema and per-resource data types shared by
every resource plugin.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

_JSON_TYPES = {"string": "string", "bool": "boolean", "int": "integer"}
_ZERO_VALUES = {"string": "", "bool": False, "int": 0}


@dataclass
class FieldSchema:
    """Declaration of a single resource attribute."""

    type: str = "string"
    required: bool = False
    computed: bool = False
    default: Any = None
    choices: Optional[List[Any]] = None
    description: str = ""

    def __post_init__(self):
        if self.type not in _JSON_TYPES:
            raise ValueError(f"Unsupported field type: {self.type}")
        if self.required and self.computed:
            raise ValueError("A field cannot be both required and computed")

    @property
    def zero_value(self) -> Any:
        return _ZERO_VALUES[self.type]


ResourceSchema = Dict[str, FieldSchema]


def schema_to_json_schema(schema: ResourceSchema) -> Dict[str, Any]:
    """
    Build a Draft 7 JSON Schema describing the configurable fields.

    Computed fields are rejected in configuration; unknown fields are too.
    """
    properties: Dict[str, Any] = {}
    required: List[str] = []

    for name, fs in schema.items():
        if fs.computed:
            continue
        prop: Dict[str, Any] = {"type": _JSON_TYPES[fs.type]}
        if fs.choices:
            prop["enum"] = list(fs.choices)
        if fs.description:
            prop["description"] = fs.description
        properties[name] = prop
        if fs.required:
            required.append(name)

    json_schema: Dict[str, Any] = {
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }
    if required:
        json_schema["required"] = required
    return json_schema


def apply_defaults(schema: ResourceSchema, config: Dict[str, Any]) -> Dict[str, Any]:
    """Return config with schema defaults filled in for unset optional fields."""
    result = dict(config)
    for name, fs in schema.items():
        if fs.computed or name in result:
            continue
        result[name] = fs.default if fs.default is not None else fs.zero_value
    return result


class ResourceData:
    """
    Desired and observed attributes of one resource instance.

    Configurable fields read from the desired configuration; computed
    fields read from the last observed state. ``set`` always writes to the
    observed state, and ``has_change`` compares the two.
    """

    def __init__(
        self,
        schema: ResourceSchema,
        config: Optional[Dict[str, Any]] = None,
        state: Optional[Dict[str, Any]] = None,
        resource_id: str = "",
        is_new_resource: bool = False,
    ):
        self.schema = schema
        self._config = apply_defaults(schema, config or {})
        self._state: Dict[str, Any] = {
            k: v for k, v in (state or {}).items() if k != "id"
        }
        self._id = resource_id
        self._is_new = is_new_resource
        self._observed: set = set()

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, resource_id: str) -> None:
        """Set the resource ID. An empty ID marks the resource as gone."""
        self._id = resource_id

    def is_new_resource(self) -> bool:
        return self._is_new

    def mark_new_resource(self, is_new: bool = True) -> None:
        self._is_new = is_new

    def _field(self, key: str) -> FieldSchema:
        if key not in self.schema:
            raise KeyError(f"Unknown attribute: {key}")
        return self.schema[key]

    def get(self, key: str) -> Any:
        """Get the desired value of a field (observed value for computed ones)."""
        fs = self._field(key)
        if not fs.computed and key in self._config:
            return self._config[key]
        value = self._state.get(key)
        return fs.zero_value if value is None else value

    def get_ok(self, key: str) -> Tuple[Any, bool]:
        """Get a field value and whether it is set to a non-zero value."""
        value = self.get(key)
        return value, value != self._field(key).zero_value

    def set(self, key: str, value: Any) -> None:
        """Record an observed value."""
        self._field(key)
        self._state[key] = value
        self._observed.add(key)

    def apply_config(self) -> None:
        """
        Record desired values for fields the last read did not report.

        Called once create or update has succeeded, so attributes GitHub
        never returns (such as create_default_maintainer) are kept.
        """
        for key, value in self._config.items():
            if key not in self._observed:
                self._state[key] = value

    def get_state(self, key: str) -> Any:
        """Get the last observed value of a field."""
        fs = self._field(key)
        value = self._state.get(key)
        return fs.zero_value if value is None else value

    def has_change(self, key: str) -> bool:
        """Whether the desired value differs from the last observed one."""
        fs = self._field(key)
        if fs.computed:
            return False
        return self.get(key) != self.get_state(key)

    def state(self) -> Dict[str, Any]:
        """Attributes to persist, including the ID."""
        return {"id": self._id, **self._state}

    def config(self) -> Dict[str, Any]:
        """Desired attributes with defaults applied."""
        return dict(self._config)


class PlanAction(Enum):
    """What applying a plan would do to a resource."""

    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


UNKNOWN = "(known after apply)"


@dataclass
class PlanResult:
    """Planned changes for one resource."""

    action: PlanAction = PlanAction.NOOP
    changes: Dict[str, Tuple[Any, Any]] = field(default_factory=dict)
    unknown: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return self.action != PlanAction.NOOP

    def mark_unknown(self, key: str) -> None:
        """Mark a computed field as only known after apply."""
        if key not in self.unknown:
            self.unknown.append(key)


def diff_resource(
    schema: ResourceSchema,
    prior_state: Optional[Dict[str, Any]],
    config: Optional[Dict[str, Any]],
) -> PlanResult:
    """
    Compare prior state against desired configuration.

    Args:
        schema: The resource schema.
        prior_state: Last observed state, or None/empty-ID when absent.
        config: Desired configuration, or None when the resource is removed.

    Returns:
        PlanResult describing the action and per-field changes.
    """
    exists = bool(prior_state and prior_state.get("id"))

    if config is None:
        if exists:
            return PlanResult(action=PlanAction.DELETE)
        return PlanResult()

    desired = apply_defaults(schema, config)

    if not exists:
        result = PlanResult(action=PlanAction.CREATE)
        for key, value in desired.items():
            result.changes[key] = (None, value)
        for name, fs in schema.items():
            if fs.computed:
                result.mark_unknown(name)
        return result

    result = PlanResult()
    for key, value in desired.items():
        old = prior_state.get(key)
        if old is None:
            old = schema[key].zero_value
        if old != value:
            result.changes[key] = (old, value)

    if result.changes:
        result.action = PlanAction.UPDATE
    return result
