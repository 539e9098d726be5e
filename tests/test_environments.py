"""Tests for NODE_ENV normalization.

WHAT: Alias table lookups and the NODE_ENV field descriptor
WHY: The canonical name is the environment file name; a wrong mapping loads
    the wrong file silently.

REFERENCES:
  - envschema/environments.py
"""

import pytest

from envschema import (
    ENVIRONMENT_MAP,
    EnvError,
    Environment,
    current_environment,
    environment_names,
    node_env,
    normalize_environment,
)


class TestNormalizeEnvironment:
    """Alias -> canonical environment."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("PRODUCTION", Environment.prod),
            ("production", Environment.prod),
            ("PROD", Environment.prod),
            ("prod", Environment.prod),
            ("TEST", Environment.test),
            ("test", Environment.test),
            ("dev", Environment.dev),
            ("development", Environment.dev),
            ("DEVELOPMENT", Environment.dev),
            ("local", Environment.local),
            ("LOCAL", Environment.local),
        ],
    )
    def test_every_alias_maps_to_its_canonical_name(self, raw, expected):
        assert normalize_environment(raw) is expected

    def test_absent_name_is_unresolved(self):
        assert normalize_environment(None) is None

    def test_unknown_name_is_unresolved(self):
        assert normalize_environment("staging") is None
        assert normalize_environment("") is None

    def test_lookup_is_case_sensitive(self):
        """Only the declared spellings are accepted."""
        assert normalize_environment("Production") is None

    def test_canonical_values_are_file_names(self):
        assert [env.value for env in Environment] == ["prod", "test", "dev", "local"]

    def test_alias_table_is_read_only(self):
        with pytest.raises(TypeError):
            ENVIRONMENT_MAP["staging"] = Environment.prod


class TestCurrentEnvironment:
    def test_reads_node_env_from_given_mapping(self):
        assert current_environment({"NODE_ENV": "DEVELOPMENT"}) is Environment.dev

    def test_missing_node_env(self):
        assert current_environment({}) is None

    def test_defaults_to_process_environment(self, monkeypatch):
        monkeypatch.setenv("NODE_ENV", "LOCAL")
        assert current_environment() is Environment.local


class TestNodeEnvField:
    def test_default_choices_are_every_alias(self):
        field = node_env()
        assert list(field.choices) == environment_names()
        assert environment_names() == list(ENVIRONMENT_MAP.keys())

    def test_restricted_choices(self):
        field = node_env(["prod"])
        assert list(field.choices) == ["prod"]
        assert field.validate("prod") == "prod"

    def test_value_outside_choices_is_rejected(self):
        with pytest.raises(EnvError, match="not in choices"):
            node_env(["prod"]).validate("dev", name="NODE_ENV")

    def test_node_env_is_required(self):
        assert node_env().is_required()
