"""Unit tests for plugins/registry.py - Resource plugin registry."""

import pytest
from unittest.mock import MagicMock, patch

from plugins.base import FieldSchema
from plugins.registry import (
    ResourceRegistry,
    get_registry,
    register_builtin_resources,
    reset_registry,
)
from plugins.resources.base import ResourcePlugin
from plugins.resources.github_team import GitHubTeamResource


class DummyResource(ResourcePlugin):
    """Minimal resource used to exercise the registry."""

    @property
    def type_name(self):
        return "dummy"

    @property
    def schema(self):
        return {"name": FieldSchema(required=True), "uid": FieldSchema(computed=True)}

    async def create(self, d, provider):
        d.set_id("1")

    async def read(self, d, provider):
        pass

    async def update(self, d, provider):
        pass

    async def delete(self, d, provider):
        d.set_id("")


class TestResourceRegistry:
    """Tests for ResourceRegistry."""

    def test_register_and_get(self):
        registry = ResourceRegistry()
        registry.register_resource_plugin(DummyResource)

        plugin = registry.get_resource_plugin("dummy")
        assert isinstance(plugin, DummyResource)
        assert registry.has_resource_plugin("dummy")
        assert registry.list_resource_plugins() == ["dummy"]

    def test_instance_is_cached(self):
        registry = ResourceRegistry()
        registry.register_resource_plugin(DummyResource)

        assert registry.get_resource_plugin("dummy") is registry.get_resource_plugin(
            "dummy"
        )

    def test_plugin_info(self):
        registry = ResourceRegistry()
        registry.register_resource_plugin(DummyResource)

        info = registry.get_resource_plugin_info("dummy")
        assert info == {
            "type_name": "dummy",
            "fields": ["name", "uid"],
            "computed": ["uid"],
        }
        assert registry.get_resource_plugin_info("missing") is None

    def test_unknown_type(self):
        registry = ResourceRegistry()
        registry.register_resource_plugin(DummyResource)

        with pytest.raises(ValueError, match="Unknown resource type: nope") as exc_info:
            registry.get_resource_plugin("nope")
        assert "dummy" in str(exc_info.value)

    def test_overwrite_drops_cached_instance(self):
        registry = ResourceRegistry()
        registry.register_resource_plugin(DummyResource)
        first = registry.get_resource_plugin("dummy")

        registry.register_resource_plugin(DummyResource)

        assert registry.get_resource_plugin("dummy") is not first

    def test_invalid_schema_rejected(self):
        registry = ResourceRegistry()
        with patch(
            "plugins.registry.check_resource_schema",
            return_value=(False, "a schema that is not valid Draft 7: boom"),
        ):
            with pytest.raises(ValueError, match="not valid Draft 7: boom"):
                registry.register_resource_plugin(DummyResource)
        assert not registry.has_resource_plugin("dummy")


class TestRegistrySingleton:
    """Tests for the global registry."""

    def test_get_registry_singleton(self):
        assert get_registry() is get_registry()

    def test_reset_registry(self):
        first = get_registry()
        reset_registry()
        assert get_registry() is not first


class TestRegisterBuiltinResources:
    """Tests for register_builtin_resources."""

    def test_registers_github_team(self):
        with patch("plugins.registry.entry_points", return_value=[]):
            register_builtin_resources()

        plugin = get_registry().get_resource_plugin("github_team")
        assert isinstance(plugin, GitHubTeamResource)

    def test_discovers_entry_points(self):
        ep = MagicMock()
        ep.name = "dummy"
        ep.load.return_value = DummyResource

        with patch("plugins.registry.entry_points", return_value=[ep]) as eps:
            register_builtin_resources()

        eps.assert_called_once_with(group="teamctl.resources")
        assert get_registry().has_resource_plugin("dummy")

    def test_broken_entry_point_is_skipped(self, caplog):
        ep = MagicMock()
        ep.name = "broken"
        ep.load.side_effect = ImportError("no module")

        with patch("plugins.registry.entry_points", return_value=[ep]):
            register_builtin_resources()

        assert get_registry().list_resource_plugins() == ["github_team"]
        assert "Could not load resource plugin broken" in caplog.text
