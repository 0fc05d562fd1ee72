"""
Resource configuration checks.

A resource plugin declares its attributes with FieldSchema, and the Draft 7
JSON Schema derived from those declarations is checked once when the plugin
is registered. Every resource block loaded from a configuration file is then
checked against that schema before any API call is made, and violations are
reported per attribute.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError, ValidationError

logger = logging.getLogger(__name__)

# How each JSON type is described to someone writing a configuration file
EXPECTED_VALUES = {
    "string": "a string",
    "boolean": "true or false",
    "integer": "a whole number",
    "object": "a mapping",
}


def check_resource_schema(schema: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Check the schema derived from a resource plugin's field declarations.

    Besides being valid Draft 7, it must describe a mapping of attributes,
    and every required attribute must also be declared.

    Args:
        schema: The plugin's JSON Schema

    Returns:
        Tuple of (is_valid, error_message). The message completes the
        sentence "Resource plugin '<type>' has ...".
    """
    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as e:
        return False, f"a schema that is not valid Draft 7: {e.message}"

    if schema.get("type") != "object":
        return False, "a schema that does not describe a mapping of attributes"

    declared = schema.get("properties", {})
    undeclared = [name for name in schema.get("required", []) if name not in declared]
    if undeclared:
        return False, (
            f"required attributes that are not declared: {', '.join(undeclared)}"
        )
    return True, None


def _attribute(error: ValidationError, name: Optional[str] = None) -> str:
    path = [str(p) for p in error.absolute_path]
    if name is not None:
        path.append(name)
    return ".".join(path) or "(resource)"


def describe_config_error(error: ValidationError) -> List[str]:
    """Turn one schema violation into 'attribute: problem' lines."""
    if error.validator == "required":
        return [
            f"{_attribute(error, name)}: required attribute is missing"
            for name in error.validator_value
            if name not in error.instance
        ]
    if error.validator == "additionalProperties":
        declared = error.schema.get("properties", {})
        return [
            f"{_attribute(error, name)}: not a configurable attribute"
            for name in sorted(error.instance)
            if name not in declared
        ]
    if error.validator == "enum":
        choices = ", ".join(str(c) for c in error.validator_value)
        return [f"{_attribute(error)}: {error.instance!r} is not one of {choices}"]
    if error.validator == "type":
        expected = EXPECTED_VALUES.get(error.validator_value, error.validator_value)
        return [f"{_attribute(error)}: expected {expected}, got {error.instance!r}"]
    return [f"{_attribute(error)}: {error.message}"]


def validate_resource_config(
    config: Any, schema: Dict[str, Any]
) -> Tuple[bool, Optional[str]]:
    """
    Validate one resource block's desired attributes.

    Args:
        config: Desired attributes of one resource
        schema: The resource's JSON Schema

    Returns:
        Tuple of (is_valid, error_message). Every violation is reported,
        sorted by attribute and joined with '; '.
    """
    if not isinstance(config, dict):
        return False, "(resource): attributes must be a mapping"

    problems: List[str] = []
    for error in Draft7Validator(schema).iter_errors(config):
        problems.extend(describe_config_error(error))

    if not problems:
        return True, None

    logger.debug(f"Configuration rejected: {problems}")
    return False, "; ".join(sorted(problems))
