"""
Configuration for the mutation engine.

Holds the read-only registry configuration shared by every operation,
and the source families recognised by module-name inference.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple, TYPE_CHECKING

from inscribe.exceptions import ConfigError

if TYPE_CHECKING:
    from inscribe.reload import ReloadExecutor


DEFAULT_SOURCE_ROOTS = ("src",)


@dataclass(frozen=True)
class SourceFamily:
    """
    A language family whose files map onto module identifiers.

    hyphenate: translate underscores in file names to hyphens in the
    identifier (Clojure namespaces are written with hyphens, files with
    underscores).
    """
    kind: str
    extensions: Tuple[str, ...]
    hyphenate: bool = False
    separator: str = "."


CLOJURE = SourceFamily(kind="clojure", extensions=(".clj", ".cljc", ".cljs"), hyphenate=True)
PYTHON = SourceFamily(kind="python", extensions=(".py",))

SOURCE_FAMILIES = {
    CLOJURE.kind: CLOJURE,
    PYTHON.kind: PYTHON,
}

Formatter = Callable[[str], None]


@dataclass(frozen=True)
class RegistryConfig:
    """
    Read-only configuration for all file operations.

    Created once before any operation and never mutated, so it can be
    shared between threads.

    Attributes:
        project_root: Absolute path of the project
        source_roots: Source directories relative to project_root, in priority order
        default_threshold: Line limit applied when a call gives none
        formatters: Extension (with leading dot) -> formatter function
        reload_executor: Executor used by the reload effect
        source_family: Which files count as source modules
        on_diagnostic: Receives non-fatal diagnostic events (formatter failures)
    """
    project_root: str
    source_roots: Tuple[str, ...] = DEFAULT_SOURCE_ROOTS
    default_threshold: Optional[int] = None
    formatters: Mapping[str, Formatter] = field(default_factory=dict)
    reload_executor: Optional["ReloadExecutor"] = None
    source_family: SourceFamily = CLOJURE
    on_diagnostic: Optional[Callable[[dict], None]] = None

    def __post_init__(self):
        if not self.project_root:
            raise ConfigError("RegistryConfig requires a project_root")
        root = os.fspath(self.project_root)
        if not Path(root).is_absolute():
            raise ConfigError(f"project_root must be absolute, got '{root}'")
        object.__setattr__(self, "project_root", root)

        if isinstance(self.source_roots, str):
            raise ConfigError("source_roots must be a sequence of paths, not a string")
        roots = tuple(os.fspath(r) for r in self.source_roots)
        if not roots:
            raise ConfigError("source_roots must contain at least one path")
        object.__setattr__(self, "source_roots", roots)

        if self.default_threshold is not None and self.default_threshold <= 0:
            raise ConfigError(f"default_threshold must be positive, got {self.default_threshold}")

        for ext, formatter in self.formatters.items():
            if not ext.startswith("."):
                raise ConfigError(f"Formatter key '{ext}' must include the leading dot")
            if not callable(formatter):
                raise ConfigError(f"Formatter for '{ext}' is not callable")
        object.__setattr__(self, "formatters", MappingProxyType(dict(self.formatters)))

    def effective_threshold(self, threshold: Optional[int]) -> Optional[int]:
        """Threshold for a call: the explicit one, else the default."""
        return threshold if threshold is not None else self.default_threshold
