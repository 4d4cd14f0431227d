"""Unit tests for environment variable overrides (confgen.envoverride)."""

from __future__ import annotations

import logging
import math

import pytest

from confgen.envoverride import (
    EnvOverrideResolver,
    apply,
    convert_array,
    convert_value,
    parse_bool,
    parse_float,
    parse_int,
)
from confgen.errors import OverrideConversionError

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# Parsers
# ---------------------------------------------------------------------------


class TestParsers:
    @pytest.mark.parametrize("text, value", [("42", 42), ("-7", -7), ("+3", 3)])
    def test_parse_int(self, text, value):
        assert parse_int(text) == value

    @pytest.mark.parametrize("text", ["", "1.5", "1_000", " 1", "0x10", "9223372036854775808"])
    def test_parse_int_rejects(self, text):
        with pytest.raises(ValueError):
            parse_int(text)

    @pytest.mark.parametrize("text, value", [("1.5", 1.5), ("2", 2.0), ("1e3", 1000.0), (".5", 0.5)])
    def test_parse_float(self, text, value):
        assert parse_float(text) == value

    def test_parse_float_special(self):
        assert math.isinf(parse_float("inf"))
        assert math.isnan(parse_float("NaN"))

    @pytest.mark.parametrize("text", ["", "abc", "1_0.5", "1e999"])
    def test_parse_float_rejects(self, text):
        with pytest.raises(ValueError):
            parse_float(text)

    @pytest.mark.parametrize(
        "text, value",
        [("true", True), ("1", True), ("T", True), ("FALSE", False), ("0", False), ("f", False)],
    )
    def test_parse_bool(self, text, value):
        assert parse_bool(text) is value

    @pytest.mark.parametrize("text", ["yes", "no", "on", "tRuE", ""])
    def test_parse_bool_rejects(self, text):
        with pytest.raises(ValueError):
            parse_bool(text)


class TestConvert:
    def test_keeps_original_type(self):
        assert convert_value("9", 1) == 9
        assert convert_value("9", 1.5) == 9.0
        assert convert_value("true", False) is True
        assert convert_value("9", "x") == "9"
        assert convert_value("5m", "30s") == "5m"

    def test_array_split_and_trimmed(self):
        assert convert_array(" a , b,c ", "x") == ["a", "b", "c"]
        assert convert_array("1, 2", 0) == [1, 2]

    def test_array_element_error(self):
        with pytest.raises(ValueError):
            convert_array("1, two", 0)


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------


class TestEnvOverrideResolver:
    def test_nested_scalar(self):
        tree = {"server": {"addr": ":8080", "port": 8080}}
        apply(tree, {"CONFIG_SERVER_ADDR": ":9090", "CONFIG_SERVER_PORT": "9090"})
        assert tree == {"server": {"addr": ":9090", "port": 9090}}

    def test_top_level_scalar_and_array(self):
        tree = {"name": "a", "hosts": ["x"]}
        apply(tree, {"CONFIG_NAME": "b", "CONFIG_HOSTS": "y, z"})
        assert tree == {"name": "b", "hosts": ["y", "z"]}

    def test_array_of_tables_by_index(self):
        tree = {"servers": [{"host": "a"}, {"host": "b"}]}
        apply(tree, {"CONFIG_SERVERS_1_HOST": "c"})
        assert tree["servers"] == [{"host": "a"}, {"host": "c"}]

    def test_empty_value_is_unset(self):
        tree = {"name": "a"}
        apply(tree, {"CONFIG_NAME": ""})
        assert tree == {"name": "a"}

    def test_empty_array_ignored(self, caplog):
        tree = {"tags": []}
        with caplog.at_level(logging.WARNING, logger="confgen.envoverride"):
            apply(tree, {"CONFIG_TAGS": "a,b"})
        assert tree == {"tags": []}
        assert "CONFIG_TAGS" in caplog.text

    def test_conversion_failure_names_key(self):
        tree = {"db": {"port": 5432}}
        with pytest.raises(OverrideConversionError) as excinfo:
            apply(tree, {"CONFIG_DB_PORT": "abc"})
        assert excinfo.value.env_key == "CONFIG_DB_PORT"
        assert "CONFIG_DB_PORT" in str(excinfo.value)

    def test_key_normalisation(self):
        tree = {"tls-config": {"cert-file": "a"}}
        apply(tree, {"CONFIG_TLS_CONFIG_CERT_FILE": "b"})
        assert tree["tls-config"]["cert-file"] == "b"

    def test_custom_prefix_and_applied_list(self):
        resolver = EnvOverrideResolver({"APP_NAME": "b", "CONFIG_NAME": "c"}, prefix="APP")
        tree = resolver.apply({"name": "a"})
        assert tree == {"name": "b"}
        assert resolver.applied == ["APP_NAME"]

    def test_reads_process_environment(self, monkeypatch):
        monkeypatch.setenv("CONFIG_DEBUG", "true")
        assert apply({"debug": False}) == {"debug": True}
