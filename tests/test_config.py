"""
Tests for inscribe.toml loading and translation into runtime objects.
"""

from pathlib import Path

import pytest

from inscribe.audit import FileAuditStorage, SQLiteAuditStorage
from inscribe.config import build_registry_config, create_audit_storage, find_config_file, load_config
from inscribe.exceptions import ConfigError
from inscribe.mutation import CLOJURE, PYTHON, DEFAULT_SOURCE_ROOTS
from inscribe.reload import NOOP


CONFIG_TOML = """
[inscribe]
source_roots = ["src/clj", "dev"]
default_threshold = 400
family = "clojure"
reload = "noop"

[inscribe.formatters]
".clj" = "cljfmt fix {path}"

[inscribe.audit]
backend = "sqlite"
session_id = "agent-1"
"""


class TestLoadConfig:
    """Tests for config discovery and parsing."""

    def test_no_config(self, temp_dir, monkeypatch):
        monkeypatch.setenv("HOME", str(temp_dir))
        assert find_config_file(temp_dir) is None
        assert load_config(temp_dir) is None

    def test_project_config(self, temp_dir):
        (temp_dir / "inscribe.toml").write_text(CONFIG_TOML)

        data = load_config(temp_dir)

        assert data["source_roots"] == ["src/clj", "dev"]
        assert data["formatters"] == {".clj": "cljfmt fix {path}"}
        assert data["_source"] == str(temp_dir / "inscribe.toml")

    def test_env_var_takes_priority(self, temp_dir, monkeypatch):
        (temp_dir / "inscribe.toml").write_text("[inscribe]\ndefault_threshold = 1\n")
        other = temp_dir / "elsewhere.toml"
        other.write_text("[inscribe]\ndefault_threshold = 2\n")
        monkeypatch.setenv("INSCRIBE_CONFIG", str(other))

        assert find_config_file(temp_dir) == other
        assert load_config(temp_dir)["default_threshold"] == 2

    def test_invalid_toml(self, temp_dir):
        (temp_dir / "inscribe.toml").write_text("[inscribe\nbroken = ")

        with pytest.raises(ConfigError):
            load_config(temp_dir)


class TestBuildRegistryConfig:
    """Tests for the [inscribe] table -> RegistryConfig translation."""

    def test_defaults(self, temp_dir):
        config = build_registry_config({}, temp_dir)

        assert config.project_root == str(temp_dir)
        assert config.source_roots == DEFAULT_SOURCE_ROOTS
        assert config.default_threshold is None
        assert config.reload_executor is None
        assert config.source_family is CLOJURE

    def test_full_table(self, temp_dir):
        (temp_dir / "inscribe.toml").write_text(CONFIG_TOML)

        config = build_registry_config(load_config(temp_dir), temp_dir)

        assert config.source_roots == ("src/clj", "dev")
        assert config.default_threshold == 400
        assert config.reload_executor is NOOP
        assert config.formatters[".clj"].command_template == "cljfmt fix {path}"

    def test_relative_root_is_relative_to_config_file(self, temp_dir):
        (temp_dir / "inscribe.toml").write_text('[inscribe]\nproject_root = "app"\n')
        (temp_dir / "app").mkdir()

        config = build_registry_config(load_config(temp_dir))

        assert config.project_root == str(temp_dir / "app")

    def test_python_family(self, temp_dir):
        config = build_registry_config({"family": "python"}, temp_dir)
        assert config.source_family is PYTHON

    def test_unknown_family(self, temp_dir):
        with pytest.raises(ConfigError):
            build_registry_config({"family": "cobol"}, temp_dir)

    def test_unknown_reload_preset(self, temp_dir):
        with pytest.raises(ConfigError):
            build_registry_config({"reload": "nrepl"}, temp_dir)

    def test_invalid_threshold(self, temp_dir):
        with pytest.raises(ConfigError):
            build_registry_config({"default_threshold": -5}, temp_dir)

    def test_env_threshold_override(self, temp_dir, monkeypatch):
        monkeypatch.setenv("INSCRIBE_DEFAULT_THRESHOLD", "120")
        config = build_registry_config({"default_threshold": 400}, temp_dir)
        assert config.default_threshold == 120

    def test_non_integer_env_threshold_is_ignored(self, temp_dir, monkeypatch):
        monkeypatch.setenv("INSCRIBE_DEFAULT_THRESHOLD", "lots")
        config = build_registry_config({"default_threshold": 400}, temp_dir)
        assert config.default_threshold == 400


class TestAuditStorageConfig:
    """Tests for the [inscribe.audit] table."""

    def test_default_is_jsonl_under_dot_dir(self, temp_dir):
        storage = create_audit_storage({}, temp_dir)

        assert isinstance(storage, FileAuditStorage)
        assert storage.path == temp_dir / ".inscribe" / "audit.jsonl"

    def test_sqlite_backend(self, temp_dir):
        storage = create_audit_storage({"audit": {"backend": "sqlite"}}, temp_dir)

        assert isinstance(storage, SQLiteAuditStorage)
        assert (temp_dir / ".inscribe" / "audit.db").exists()

    def test_custom_relative_path(self, temp_dir):
        storage = create_audit_storage({"audit": {"path": "logs/audit.jsonl"}}, temp_dir)
        assert storage.path == temp_dir / "logs" / "audit.jsonl"

    def test_unknown_backend(self, temp_dir):
        with pytest.raises(ConfigError):
            create_audit_storage({"audit": {"backend": "postgres"}}, Path(temp_dir))
