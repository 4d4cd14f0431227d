"""Tests for the file-level generation pipeline (confgen.pipeline).

Covers the end-to-end scenarios: baked static values, environment
overrides, embedded files and failing file references, plus atomic output
handling.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from confgen import (
    ConfigParseError,
    FileReadError,
    FileReferenceNotFoundError,
    GenerateOptions,
    GenerationError,
    OverrideConversionError,
    generate,
    generate_from_file,
    generate_with_options,
)


# ---------------------------------------------------------------------------
# In-memory entry points
# ---------------------------------------------------------------------------


class TestGenerate:
    @pytest.mark.unit
    def test_scenario_static_values(self, server_toml: str):
        source = generate(server_toml)
        assert "type ServerConfig struct {" in source
        assert "\tAddr string\n" in source
        assert "\tTimeout time.Duration\n" in source
        assert '\t\tAddr: ":8080",\n' in source
        assert "\t\tTimeout: 30*time.Second,\n" in source

    @pytest.mark.unit
    def test_scenario_env_override(self, server_toml: str, monkeypatch):
        monkeypatch.setenv("CONFIG_SERVER_ADDR", ":9090")
        source = generate(server_toml)
        assert '":9090"' in source
        assert '":8080"' not in source

    @pytest.mark.unit
    def test_env_disabled(self, server_toml: str, monkeypatch):
        monkeypatch.setenv("CONFIG_SERVER_ADDR", ":9090")
        assert '":8080"' in generate(server_toml, enable_env=False)

    @pytest.mark.unit
    def test_with_options(self, config_dir: Path):
        source = generate_with_options(
            'content = "file:data/test.txt"\n',
            package_name="assets",
            input_dir=config_dir,
            mode="getter",
            environ={},
        )
        assert source.startswith("// Code generated by confgen. DO NOT EDIT.\n\npackage assets\n")
        assert "func Content() []byte {" in source


# ---------------------------------------------------------------------------
# generate_from_file
# ---------------------------------------------------------------------------


class TestGenerateFromFile:
    @pytest.mark.integration
    def test_scenario_embedded_file(self, write_toml, tmp_path: Path):
        input_file = write_toml('content = "file:data/test.txt"\n')
        output = tmp_path / "out" / "config" / "config.go"

        written = generate_from_file(GenerateOptions(input_file=input_file, output_file=output))

        assert written == output
        source = output.read_text(encoding="utf-8")
        assert "package config\n" in source
        assert "\tContent []byte = []byte{\n" in source
        # First byte of "Hello\nWorld\n".
        assert "0x48, 0x65" in source

    @pytest.mark.integration
    def test_scenario_missing_reference_writes_nothing(self, write_toml, tmp_path: Path):
        input_file = write_toml('[assets]\nlogo = "file:data/missing.png"\n')
        output = tmp_path / "out" / "config.go"

        with pytest.raises(FileReferenceNotFoundError):
            generate_from_file(GenerateOptions(input_file=input_file, output_file=output))
        assert not output.exists()

    @pytest.mark.integration
    def test_unreadable_reference_writes_nothing(self, write_toml, tmp_path: Path):
        input_file = write_toml('[assets]\nbundle = "file:data"\n')
        output = tmp_path / "out" / "config.go"

        with pytest.raises(FileReadError) as excinfo:
            generate_from_file(GenerateOptions(input_file=input_file, output_file=output))
        assert excinfo.value.path.name == "data"
        assert not output.exists()

    @pytest.mark.integration
    def test_failed_run_keeps_previous_output(self, write_toml, tmp_path: Path, monkeypatch):
        input_file = write_toml("[db]\nport = 5432\n")
        output = tmp_path / "config.go"
        options = GenerateOptions(input_file=input_file, output_file=output)
        generate_from_file(options)
        before = output.read_text(encoding="utf-8")

        monkeypatch.setenv("CONFIG_DB_PORT", "not-a-number")
        with pytest.raises(OverrideConversionError):
            generate_from_file(options)
        assert output.read_text(encoding="utf-8") == before

    @pytest.mark.integration
    def test_missing_input(self, tmp_path: Path):
        options = GenerateOptions(input_file=tmp_path / "nope.toml", output_file=tmp_path / "c.go")
        with pytest.raises(ConfigParseError, match="does not exist"):
            generate_from_file(options)

    @pytest.mark.integration
    def test_package_inferred_from_output(self, write_toml, tmp_path: Path):
        input_file = write_toml("a = 1\n")
        output = tmp_path / "svc" / "internal" / "config.go"
        generate_from_file(GenerateOptions(input_file=input_file, output_file=output))
        assert "package svc\n" in output.read_text(encoding="utf-8")

    @pytest.mark.integration
    def test_explicit_environ(self, write_toml, tmp_path: Path):
        input_file = write_toml('name = "a"\n')
        output = tmp_path / "config.go"
        generate_from_file(
            GenerateOptions(input_file=input_file, output_file=output),
            environ={"CONFIG_NAME": "b"},
        )
        assert '= "b"' in output.read_text(encoding="utf-8")

    @pytest.mark.integration
    def test_gofmt_failure_is_generation_error(self, write_toml, tmp_path: Path):
        input_file = write_toml("a = 1\n")
        output = tmp_path / "config.go"
        options = GenerateOptions(input_file=input_file, output_file=output, format_source=True)
        with patch("confgen.pipeline.format_go_source", side_effect=RuntimeError("gofmt failed")):
            with pytest.raises(GenerationError, match="gofmt failed"):
                generate_from_file(options)
        assert not output.exists()

    @pytest.mark.integration
    def test_unwritable_output(self, write_toml, tmp_path: Path):
        input_file = write_toml("a = 1\n")
        blocker = tmp_path / "blocker"
        blocker.write_text("file, not a directory", encoding="utf-8")
        options = GenerateOptions(input_file=input_file, output_file=blocker / "config.go")
        with pytest.raises(GenerationError, match="failed to write"):
            generate_from_file(options)
