"""Configuration loading and auto-discovery.

Example inscribe.toml:

    [inscribe]
    source_roots = ["src/clj", "dev/src/clj"]
    default_threshold = 400
    family = "clojure"
    reload = "noop"

    [inscribe.formatters]
    ".clj" = "cljfmt fix {path}"

    [inscribe.audit]
    backend = "sqlite"          # or "file"
    session_id = "agent-1"
"""
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Optional

from inscribe.audit import AuditStorage, FileAuditStorage, SQLiteAuditStorage
from inscribe.exceptions import ConfigError
from inscribe.logging_config import logger
from inscribe.mutation import DEFAULT_SOURCE_ROOTS, SOURCE_FAMILIES, RegistryConfig, shell_formatter
from inscribe.paths import get_paths
from inscribe.reload import PRESETS


def _env_int(key: str, default: Optional[int]) -> Optional[int]:
    """Read integer from environment variable."""
    value = os.getenv(key)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring non-integer {key}={value!r}")
        return default


def find_config_file(project_root: Optional[Path] = None) -> Optional[Path]:
    """
    Locate the configuration file.

    Priority:
    1. INSCRIBE_CONFIG environment variable
    2. <project_root>/inscribe.toml (project config)
    3. ~/.config/inscribe/config.toml (user config)
    """
    config_paths = []

    env_config = os.environ.get("INSCRIBE_CONFIG")
    if env_config:
        config_paths.append(Path(env_config))

    config_paths.append(get_paths(project_root).config_file)
    config_paths.append(Path.home() / ".config" / "inscribe" / "config.toml")

    for path in config_paths:
        if path.exists():
            return path
    return None


def load_config(project_root: Optional[Path] = None) -> Optional[Dict[str, Any]]:
    """
    Load the [inscribe] table from the first config file found.

    Returns:
        Configuration dict or None if no config found
    """
    path = find_config_file(project_root)
    if path is None:
        return None

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    logger.debug(f"Loaded config from {path}")
    section = data.get("inscribe", {})
    section.setdefault("_source", str(path))
    return section


def build_registry_config(
    data: Optional[Dict[str, Any]] = None,
    project_root: Optional[Path] = None,
) -> RegistryConfig:
    """
    Build a RegistryConfig from a loaded config table.

    Args:
        data: The [inscribe] table (None for defaults)
        project_root: Overrides data["project_root"]; defaults to CWD

    Raises:
        ConfigError: unknown family/reload preset or invalid values
    """
    data = data or {}

    root = project_root or data.get("project_root")
    if root is None:
        root = Path.cwd()
    elif not Path(root).is_absolute() and data.get("_source"):
        root = Path(data["_source"]).parent / root
    root = Path(root).expanduser().resolve()

    family_name = data.get("family", "clojure")
    family = SOURCE_FAMILIES.get(family_name)
    if family is None:
        raise ConfigError(f"Unknown source family '{family_name}'. Known: {sorted(SOURCE_FAMILIES)}")

    reload_name = data.get("reload")
    executor = None
    if reload_name is not None:
        executor = PRESETS.get(reload_name)
        if executor is None:
            raise ConfigError(f"Unknown reload executor '{reload_name}'. Known: {sorted(PRESETS)}")

    formatters = {
        ext: shell_formatter(template)
        for ext, template in (data.get("formatters") or {}).items()
    }

    return RegistryConfig(
        project_root=str(root),
        source_roots=tuple(data.get("source_roots", DEFAULT_SOURCE_ROOTS)),
        default_threshold=_env_int("INSCRIBE_DEFAULT_THRESHOLD", data.get("default_threshold")),
        formatters=formatters,
        reload_executor=executor,
        source_family=family,
    )


def create_audit_storage(
    data: Optional[Dict[str, Any]] = None,
    project_root: Optional[Path] = None,
) -> AuditStorage:
    """
    Audit backend from the [inscribe.audit] table.

    Defaults to the JSON-lines log under .inscribe/.
    """
    audit = (data or {}).get("audit") or {}
    paths = get_paths(project_root)
    backend = audit.get("backend", "file")

    custom = audit.get("path")
    if custom is not None and not Path(custom).is_absolute():
        custom = paths.project_root / custom

    if backend == "file":
        return FileAuditStorage(custom or paths.audit_log)
    if backend == "sqlite":
        return SQLiteAuditStorage(custom or paths.audit_db)
    raise ConfigError(f"Unknown audit backend '{backend}'. Use 'file' or 'sqlite'.")
