"""Tests for the configuration context."""

import pytest

from src.catalog.runtime.config.config_data import ConfigData
from src.catalog.runtime.context import get_config, get_context, with_context


class TestWithContext:
    def test_override_only_replaces_set_fields(self):
        original = get_config()
        override = ConfigData()
        override.catalog.asset_version = "42"

        with with_context(override):
            config = get_config()
            assert config.catalog.asset_version == "42"
            assert config.catalog.title == original.catalog.title
            assert config.app.environment == original.app.environment

        assert get_config().catalog.asset_version == original.catalog.asset_version

    def test_nested_overrides_stack(self):
        outer = ConfigData()
        outer.catalog.created_message = "Outer"
        inner = ConfigData()
        inner.catalog.deleted_message = "Gone"

        with with_context(outer):
            with with_context(inner):
                config = get_config()
                assert config.catalog.created_message == "Outer"
                assert config.catalog.deleted_message == "Gone"
            assert get_config().catalog.deleted_message != "Gone"

    def test_none_leaves_context_alone(self):
        before = get_context()
        with with_context(None):
            assert get_context() is before

    def test_rejects_other_types(self):
        with pytest.raises(ValueError):
            with with_context({"catalog": {"title": "x"}}):
                pass

    def test_environment_from_env(self):
        assert get_config().app.environment == "test"
