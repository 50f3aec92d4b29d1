"""
Inscribe: file mutation effects with metadata tracking.

Write, append, insert and replace source files atomically and get back
line-count deltas, threshold checks and the module each change touched.
"""

from inscribe.exceptions import (
    InscribeError,
    ConfigError,
    FileIOError,
    TargetNotFoundError,
    PatternNotFoundError,
    InvalidPatternError,
    InvalidLocationError,
    FormatterCommandError,
    UnknownEffectError,
)
from inscribe.mutation import MutationFacade, RegistryConfig, CLOJURE, PYTHON, shell_formatter
from inscribe.registry import DispatchContext, EffectRegistry
from inscribe.schemas import FileMeta, OperationResult

__version__ = "0.3.0"

__all__ = [
    "MutationFacade",
    "RegistryConfig",
    "CLOJURE",
    "PYTHON",
    "shell_formatter",
    "DispatchContext",
    "EffectRegistry",
    "FileMeta",
    "OperationResult",
    "InscribeError",
    "ConfigError",
    "FileIOError",
    "TargetNotFoundError",
    "PatternNotFoundError",
    "InvalidPatternError",
    "InvalidLocationError",
    "FormatterCommandError",
    "UnknownEffectError",
]
