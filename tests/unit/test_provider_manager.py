"""Tests for the ProviderManager class and the built-in providers."""

from unittest.mock import Mock, patch

import pytest

from dynvar_resolver.expressions import parse_expression
from dynvar_resolver.interfaces.provider import BaseProvider
from dynvar_resolver.provider_manager import ENTRY_POINT_GROUP, ProviderManager


class LdapProvider(BaseProvider):
    """Provider used to test plug-in registration."""

    required_params = ("url", "attribute")

    def get_type_name(self) -> str:
        return "ldap"


def _build_node(raw, context):
    return parse_expression(str(raw))


class TestProviderManager:
    """Test suite for provider registration and discovery."""

    def test_builtin_providers_are_registered(self, provider_manager):
        for kind in (
            "value",
            "environment",
            "file",
            "configfile",
            "zipfile",
            "jarfile",
            "regkey",
            "regvalue",
            "executable",
            "filter.regex",
            "filter.location",
        ):
            provider = provider_manager.get_provider(kind)
            assert provider is not None, kind
            assert provider.get_type_name() == kind

    def test_aliases(self, provider_manager):
        assert provider_manager.get_provider("jar") is provider_manager.get_provider("jarfile")
        assert provider_manager.get_provider("env") is provider_manager.get_provider("environment")
        assert provider_manager.get_provider("registry") is provider_manager.get_provider("regkey")

    def test_unknown_kind(self, provider_manager):
        assert provider_manager.get_provider("ldap") is None
        assert "ldap" not in provider_manager.type_names

    def test_register(self, provider_manager):
        provider_manager.register(LdapProvider())
        assert isinstance(provider_manager.get_provider("ldap"), LdapProvider)

    @patch("dynvar_resolver.provider_manager.importlib.metadata.entry_points")
    def test_entry_point_discovery(self, mock_entry_points):
        entry_point = Mock()
        entry_point.name = "ldap"
        entry_point.load.return_value = LdapProvider
        mock_entry_points.return_value = [entry_point]

        manager = ProviderManager()

        mock_entry_points.assert_called_once_with(group=ENTRY_POINT_GROUP)
        assert isinstance(manager.get_provider("ldap"), LdapProvider)

    @patch("dynvar_resolver.provider_manager.importlib.metadata.entry_points")
    def test_broken_plugin_is_skipped(self, mock_entry_points, caplog):
        entry_point = Mock()
        entry_point.name = "broken"
        entry_point.load.side_effect = ImportError("no module named broken")
        mock_entry_points.return_value = [entry_point]

        manager = ProviderManager()

        assert manager.get_provider("value") is not None
        assert "Could not load provider 'broken'" in caplog.text

    @patch("dynvar_resolver.provider_manager.importlib.metadata.entry_points")
    def test_discovery_can_be_disabled(self, mock_entry_points):
        ProviderManager(discover=False)
        mock_entry_points.assert_not_called()


class TestBaseProvider:
    """Test suite for the shared provider validation and building."""

    def test_build_keeps_declared_parameter_order(self, provider_manager):
        provider = provider_manager.get_provider("zipfile")
        call = provider.build(
            {"key": "${k}", "type": "ini", "entry": "${e}", "file": "${f}"},
            _build_node,
            "test",
        )
        assert call.kind == "zipfile"
        assert call.param_names == ("file", "entry", "key", "type")

    def test_none_parameters_are_skipped(self, provider_manager):
        provider = provider_manager.get_provider("regkey")
        call = provider.build({"key": "${k}", "value": None}, _build_node, "test")
        assert call.param_names == ("key",)

    def test_single_item_list_parameter(self, provider_manager):
        provider = provider_manager.get_provider("executable")
        call = provider.build({"executable": "ls", "args": "${dir}"}, _build_node, "test")
        assert [arg.source for arg in call.param("args")] == ["${dir}"]

    def test_validation_errors_carry_context(self, provider_manager):
        provider = provider_manager.get_provider("regvalue")
        with pytest.raises(ValueError) as excinfo:
            provider.build({"key": "HKLM"}, _build_node, "Dynamic variable 'reg'")
        assert str(excinfo.value).startswith("Dynamic variable 'reg': ")
        assert "value" in str(excinfo.value)

    def test_validate_reports_all_problems(self, provider_manager):
        provider = provider_manager.get_provider("executable")
        errors = provider.validate({"type": "daemon", "bogus": "1"})
        assert len(errors) == 3
