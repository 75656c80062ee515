"""Tests for configuration loading and presets."""

from pathlib import Path

import pytest

from plugin_parity.config import (
    PresetRegistry,
    build_config,
    find_config,
    load_config,
    read_config_table,
)
from plugin_parity.exceptions import ConfigError


class TestPresets:
    """Tests for the preset registry."""

    def test_builtin_presets(self):
        assert PresetRegistry.get("webpack").path_filter == "webpack"
        assert PresetRegistry.get("rspack").path_filter == "@rspack/core"
        assert {p.name for p in PresetRegistry.all()} >= {"webpack", "rspack"}

    def test_unknown_preset(self):
        with pytest.raises(ConfigError) as exc_info:
            PresetRegistry.get("parcel")
        assert "parcel" in str(exc_info.value)


class TestBuildConfig:
    """Tests for merging file values, presets and overrides."""

    def test_defaults_come_from_presets(self, tmp_path):
        config = build_config(
            base_dir=tmp_path,
            reference=Path("webpack.d.ts"),
            candidate=Path("rspack.d.ts"),
        )
        assert config.reference.label == "webpack"
        assert config.reference.path_filter == "webpack"
        assert config.candidate.label == "Rspack"
        assert config.candidate.path_filter == "@rspack/core"
        assert config.compiler.follow_imports is True
        assert config.show_details is False

    def test_file_values(self, tmp_path):
        data = {
            "details": True,
            "reference": {"entry": "types/a.d.ts", "filter": "types/a", "label": "A"},
            "candidate": {"entry": "types/b.d.ts", "preset": "webpack"},
            "compiler": {"follow_imports": False, "type_roots": ["typings"]},
        }
        config = build_config(data, base_dir=tmp_path)

        assert config.reference.entry == tmp_path / "types/a.d.ts"
        assert config.reference.path_filter == "types/a"
        assert config.reference.label == "A"
        assert config.candidate.label == "webpack"
        assert config.candidate.path_filter == "webpack"
        assert config.compiler.follow_imports is False
        assert config.compiler.type_roots == (tmp_path / "typings",)
        assert config.show_details is True

    def test_overrides_win(self, tmp_path):
        data = {
            "reference": {"entry": "a.d.ts", "filter": "from-file"},
            "candidate": {"entry": "b.d.ts"},
        }
        config = build_config(
            data,
            base_dir=tmp_path,
            candidate=Path("/elsewhere/c.d.ts"),
            reference_filter="from-cli",
            candidate_preset="webpack",
            follow_imports=False,
            details=True,
        )
        assert config.reference.path_filter == "from-cli"
        assert config.candidate.entry == Path("/elsewhere/c.d.ts")
        assert config.candidate.path_filter == "webpack"
        assert config.compiler.follow_imports is False
        assert config.show_details is True

    def test_empty_filter_is_kept(self, tmp_path):
        config = build_config(
            {"reference": {"entry": "a.d.ts", "filter": ""}, "candidate": {"entry": "b.d.ts"}},
            base_dir=tmp_path,
        )
        assert config.reference.path_filter == ""

    def test_missing_entry(self, tmp_path):
        with pytest.raises(ConfigError) as exc_info:
            build_config({"reference": {"entry": "a.d.ts"}}, base_dir=tmp_path)
        assert "candidate" in str(exc_info.value)

    @pytest.mark.parametrize("data", [
        {"reference": "a.d.ts"},
        {"reference": {"entry": 1}},
        {"compiler": {"follow_imports": "yes"}},
        {"compiler": {"type_roots": "typings"}},
        {"details": "always"},
    ])
    def test_invalid_values(self, tmp_path, data):
        data = {"reference": {"entry": "a.d.ts"}, "candidate": {"entry": "b.d.ts"}, **data}
        with pytest.raises(ConfigError):
            build_config(data, base_dir=tmp_path)


class TestConfigFiles:
    """Tests for reading configuration files."""

    def test_standalone_file(self, write_file):
        path = write_file("plugin-parity.toml", """
            details = true

            [reference]
            entry = "types/webpack.d.ts"

            [candidate]
            entry = "types/rspack.d.ts"
            filter = "types/rspack"
        """)
        config = load_config(path)

        assert config.reference.entry == path.parent.resolve() / "types/webpack.d.ts"
        assert config.candidate.path_filter == "types/rspack"
        assert config.show_details is True

    def test_pyproject_table(self, write_file):
        path = write_file("pyproject.toml", """
            [project]
            name = "something"

            [tool.plugin-parity.reference]
            entry = "a.d.ts"

            [tool.plugin-parity.candidate]
            entry = "b.d.ts"
        """)
        assert read_config_table(path) == {
            "reference": {"entry": "a.d.ts"},
            "candidate": {"entry": "b.d.ts"},
        }

    def test_pyproject_without_table(self, write_file):
        path = write_file("pyproject.toml", '[project]\nname = "something"\n')
        with pytest.raises(ConfigError):
            read_config_table(path)

    def test_invalid_toml(self, write_file):
        path = write_file("plugin-parity.toml", "[reference\n")
        with pytest.raises(ConfigError) as exc_info:
            read_config_table(path)
        assert "Invalid TOML" in str(exc_info.value)

    def test_find_config_prefers_standalone(self, write_file, tmp_path):
        write_file("pyproject.toml", "[tool.plugin-parity]\ndetails = true\n")
        standalone = write_file("plugin-parity.toml", "details = false\n")
        assert find_config(tmp_path) == standalone

    def test_find_config_pyproject(self, write_file, tmp_path):
        pyproject = write_file("pyproject.toml", "[tool.plugin-parity]\ndetails = true\n")
        assert find_config(tmp_path) == pyproject

    def test_find_config_ignores_unrelated_pyproject(self, write_file, tmp_path):
        write_file("pyproject.toml", '[project]\nname = "something"\n')
        assert find_config(tmp_path) is None

    def test_find_config_ignores_malformed_pyproject(self, write_file, tmp_path, caplog):
        write_file("pyproject.toml", "[project\nname = \n")
        assert find_config(tmp_path) is None
        assert "Ignoring unreadable" in caplog.text
