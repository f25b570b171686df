"""Unit tests for the reader config module."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

import pytest
import yaml

from gotest_events.stream.config import DEFAULT_CONFIG, ConfigError, ReaderConfig


class TestReaderConfigCreate:
    """Tests for creating ReaderConfig instances."""

    def test_no_path_uses_defaults(self):
        """No path gives default config values."""
        cfg = ReaderConfig(None)
        assert cfg.normalize_nested is True
        assert cfg.on_decode_error == "raise"
        assert cfg.skip_blank_lines is True
        assert cfg.config == DEFAULT_CONFIG

    def test_nonexistent_path_uses_defaults(self):
        """Nonexistent file path gives default config values."""
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg = ReaderConfig(Path(tmpdir) / "missing.json")
            assert cfg.config == DEFAULT_CONFIG

    def test_load_from_json(self):
        """Config is loaded from a JSON file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.json"
            path.write_text(json.dumps({
                "normalize_nested": False,
                "on_decode_error": "warn",
            }))
            cfg = ReaderConfig(path)
            assert cfg.normalize_nested is False
            assert cfg.on_decode_error == "warn"
            assert cfg.skip_blank_lines is True  # default

    def test_load_from_yaml(self):
        """Config is loaded from a YAML file by suffix."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.yaml"
            path.write_text("on_decode_error: warn\nskip_blank_lines: false\n")
            cfg = ReaderConfig(path)
            assert cfg.on_decode_error == "warn"
            assert cfg.skip_blank_lines is False
            assert cfg.normalize_nested is True

    def test_corrupted_json_uses_defaults(self):
        """Corrupted JSON file falls back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.json"
            path.write_text("{ invalid json }")
            cfg = ReaderConfig(path)
            assert cfg.config == DEFAULT_CONFIG

    def test_corrupted_yaml_uses_defaults(self):
        """Corrupted YAML file falls back to defaults."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.yml"
            path.write_text("on_decode_error: [unclosed\n")
            cfg = ReaderConfig(path)
            assert cfg.config == DEFAULT_CONFIG

    def test_non_mapping_uses_defaults(self):
        """A file holding a list is ignored."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.json"
            path.write_text("[1, 2]")
            cfg = ReaderConfig(path)
            assert cfg.config == DEFAULT_CONFIG

    def test_invalid_value_in_file(self):
        """A file with an unknown mode is rejected when loaded."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.json"
            path.write_text(json.dumps({"on_decode_error": "ignore"}))
            with pytest.raises(ConfigError, match="on_decode_error"):
                ReaderConfig(path)

    def test_invalid_flag_in_yaml_file(self):
        """A non-boolean flag in a YAML file is rejected when loaded."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.yaml"
            path.write_text("skip_blank_lines: sometimes\n")
            with pytest.raises(ConfigError, match="skip_blank_lines"):
                ReaderConfig(path)

    def test_unknown_keys_ignored(self):
        """Keys the reader does not know about are dropped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.json"
            path.write_text(json.dumps({"color": "auto", "on_decode_error": "warn"}))
            cfg = ReaderConfig(path)
            assert cfg.on_decode_error == "warn"
            assert "color" not in cfg.config


class TestReaderConfigFromDict:
    """Tests for in-memory configs."""

    def test_partial(self):
        cfg = ReaderConfig.from_dict({"on_decode_error": "warn"})
        assert cfg.on_decode_error == "warn"
        assert cfg.normalize_nested is True
        assert cfg.path is None

    def test_invalid_mode(self):
        with pytest.raises(ConfigError, match="must be one of"):
            ReaderConfig.from_dict({"on_decode_error": "skip"})

    def test_invalid_flag(self):
        with pytest.raises(ConfigError, match="normalize_nested must be true or false"):
            ReaderConfig.from_dict({"normalize_nested": "yes"})


class TestReaderConfigSave:
    """Tests for saving config."""

    def test_save_json(self):
        """save() writes JSON for a .json path."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.json"
            cfg = ReaderConfig(path)
            cfg.set_config(on_decode_error="warn")
            cfg.save()

            data = json.loads(path.read_text())
            assert data["on_decode_error"] == "warn"
            assert data["normalize_nested"] is True

    def test_save_yaml(self):
        """save() writes YAML for a .yaml path."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.yaml"
            cfg = ReaderConfig(path)
            cfg.set_config(normalize_nested=False)
            cfg.save()

            data = yaml.safe_load(path.read_text())
            assert data["normalize_nested"] is False

    def test_save_creates_parent_dirs(self):
        """save() creates parent directories if needed."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "sub" / "dir" / "reader.json"
            ReaderConfig(path).save()
            assert path.exists()

    def test_save_roundtrip(self):
        """Saved values load back unchanged."""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "reader.yml"
            cfg = ReaderConfig(path)
            cfg.set_config(on_decode_error="warn", skip_blank_lines=False)
            cfg.save()

            reloaded = ReaderConfig(path)
            assert reloaded.on_decode_error == "warn"
            assert reloaded.skip_blank_lines is False

    def test_save_without_path_raises(self):
        """save() with no path raises ValueError."""
        with pytest.raises(ValueError, match="No config file path"):
            ReaderConfig(None).save()


class TestReaderConfigSet:
    """Tests for set_config validation."""

    def test_none_leaves_values(self):
        cfg = ReaderConfig(None)
        cfg.set_config()
        assert cfg.config == DEFAULT_CONFIG

    def test_invalid_bool(self):
        cfg = ReaderConfig(None)
        with pytest.raises(ConfigError):
            cfg.set_config(skip_blank_lines=1)
