"""
Module-name inference from file paths.

Maps a file under one of the configured source roots to the logical
module identifier a running process would know it by, e.g.
``<root>/src/my_app/core.clj`` -> ``my-app.core``.
"""

import os
from pathlib import Path
from typing import Optional, Sequence

from .config import CLOJURE, SourceFamily


def source_extension(path: str, family: SourceFamily = CLOJURE) -> Optional[str]:
    """Return the family extension the path ends with, or None."""
    name = os.fspath(path)
    for ext in family.extensions:
        if name.endswith(ext):
            return ext
    return None


def is_source_file(path: str, family: SourceFamily = CLOJURE) -> bool:
    return source_extension(path, family) is not None


def infer_module(
    path: str,
    project_root: str,
    source_roots: Sequence[str],
    family: SourceFamily = CLOJURE,
) -> Optional[str]:
    """
    Infer the module identifier for a file.

    Source roots are tried in configured order and the first one that is a
    proper ancestor of the file wins, even if a later root would match more
    specifically.

    Args:
        path: File path (absolute or relative to CWD)
        project_root: Project root the source roots are relative to
        source_roots: Source directories, in priority order
        family: Source family deciding extensions and naming rules

    Returns:
        Module identifier, or None when the file is not a source file or
        lies outside every source root. A path equal to a source root
        yields None.
    """
    ext = source_extension(path, family)
    if ext is None:
        return None

    abs_path = str(Path(path).resolve())
    root = Path(project_root)

    for src in source_roots:
        src_root = str((root / src).resolve())
        prefix = src_root.rstrip(os.sep) + os.sep
        if not abs_path.startswith(prefix):
            continue

        rel = abs_path[len(prefix):]
        if not rel.endswith(ext):
            # resolve() followed a symlink onto a file with another suffix
            return None
        rel = rel[: -len(ext)]
        if not rel or rel.endswith(os.sep):
            return None

        identifier = rel.replace(os.sep, family.separator)
        if os.altsep:
            identifier = identifier.replace(os.altsep, family.separator)
        if family.hyphenate:
            identifier = identifier.replace("_", "-")
        return identifier

    return None


def module_to_path(identifier: str, extension: str, family: SourceFamily = CLOJURE) -> str:
    """
    Convert a module identifier to a path relative to its source root.

    Example:
        module_to_path("my-app.core", ".clj") -> "my_app/core.clj"
    """
    rel = identifier.replace(family.separator, "/")
    if family.hyphenate:
        rel = rel.replace("-", "_")
    if not extension.startswith("."):
        extension = "." + extension
    return rel + extension
