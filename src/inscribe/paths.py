"""
Inscribe Path Configuration

Centralized path management for Inscribe data files.
All paths are relative to the project root (current working directory).

Directory Structure:
.inscribe/
├── audit.jsonl          # Flat-file audit log
├── audit.db             # SQLite audit log
└── logs/                # Log files
"""

from pathlib import Path
from typing import Optional


class InscribePaths:
    """
    Centralized path configuration for Inscribe.

    All paths are lazily resolved relative to project_root.
    Default project_root is current working directory.
    """

    INSCRIBE_DIR = ".inscribe"

    AUDIT_LOG_NAME = "audit.jsonl"
    AUDIT_DB_NAME = "audit.db"
    CONFIG_NAME = "inscribe.toml"

    LOGS_DIR = "logs"

    def __init__(self, project_root: Optional[Path] = None):
        """
        Initialize paths configuration.

        Args:
            project_root: Root directory for the project. Defaults to CWD.
        """
        self._project_root = Path(project_root) if project_root is not None else None

    @property
    def project_root(self) -> Path:
        """Get the project root directory."""
        if self._project_root is None:
            return Path.cwd()
        return self._project_root

    @property
    def inscribe_dir(self) -> Path:
        return self.project_root / self.INSCRIBE_DIR

    @property
    def audit_log(self) -> Path:
        """Get the flat-file audit log path."""
        return self.inscribe_dir / self.AUDIT_LOG_NAME

    @property
    def audit_db(self) -> Path:
        """Get the SQLite audit log path."""
        return self.inscribe_dir / self.AUDIT_DB_NAME

    @property
    def config_file(self) -> Path:
        """Get the project config file path (lives in the project root)."""
        return self.project_root / self.CONFIG_NAME

    @property
    def logs_dir(self) -> Path:
        return self.inscribe_dir / self.LOGS_DIR

    def ensure_dirs(self) -> None:
        """Create all necessary directories if they don't exist."""
        self.inscribe_dir.mkdir(parents=True, exist_ok=True)
        self.logs_dir.mkdir(exist_ok=True)


# Global instance for convenience
_default_paths: Optional[InscribePaths] = None


def get_paths(project_root: Optional[Path] = None) -> InscribePaths:
    """
    Get the paths configuration.

    Args:
        project_root: Optional project root override

    Returns:
        InscribePaths instance
    """
    global _default_paths
    if project_root is not None:
        return InscribePaths(project_root)
    if _default_paths is None:
        _default_paths = InscribePaths()
    return _default_paths


def reset_paths() -> None:
    """Reset the global paths instance (useful for testing)."""
    global _default_paths
    _default_paths = None
