"""
Pytest configuration for Inscribe test suite.

This conftest.py provides:
- Machine-mode logging (suppresses console output)
- Temp project fixtures with a src/ source root
- Registry configuration and facade fixtures
"""

import os
import shutil
import tempfile
from pathlib import Path

import pytest

from inscribe.logging_config import setup_logging
from inscribe.mutation import MutationFacade, RegistryConfig
from inscribe.paths import reset_paths


# ============================================================================
# GLOBAL CONFIGURATION
# ============================================================================

def pytest_configure(config):
    """Configure pytest for quiet operation."""
    os.environ.setdefault("INSCRIBE_MACHINE_MODE", "1")


# ============================================================================
# LOGGING FIXTURES
# ============================================================================

@pytest.fixture(autouse=True)
def setup_test_logging():
    """
    Machine mode by default - suppress console logs for clean test output.
    """
    setup_logging(level="DEBUG", suppress_console=True, force=True)


@pytest.fixture(autouse=True)
def isolate_environment(monkeypatch):
    """Keep user config and threshold overrides out of tests."""
    monkeypatch.delenv("INSCRIBE_CONFIG", raising=False)
    monkeypatch.delenv("INSCRIBE_DEFAULT_THRESHOLD", raising=False)
    reset_paths()
    yield
    reset_paths()


# ============================================================================
# TEMPORARY DIRECTORY FIXTURES
# ============================================================================

@pytest.fixture
def temp_dir():
    """Create a temporary directory that's cleaned up after the test."""
    tmp = Path(tempfile.mkdtemp(prefix="inscribe_test_")).resolve()
    yield tmp
    shutil.rmtree(tmp, ignore_errors=True)


@pytest.fixture
def temp_project(temp_dir):
    """
    Create a temporary project with a src/ tree of Clojure files.

    Returns:
        Path to the project root.
    """
    src = temp_dir / "src" / "app"
    src.mkdir(parents=True)
    (src / "core.clj").write_text(
        "(ns app.core\n"
        "  (:require [clojure.string :as str]))\n"
        "\n"
        "(defn greet [name]\n"
        "  (str \"Hello, \" name))\n"
    )
    (temp_dir / "README.md").write_text("# demo\n")
    return temp_dir


@pytest.fixture
def config(temp_project):
    """Registry configuration rooted at temp_project."""
    return RegistryConfig(project_root=str(temp_project))


@pytest.fixture
def facade(config):
    return MutationFacade(config)
