"""
Atomic file writes (temp file + rename).

The visible target is only ever the old content or the new content.
"""

import os
import stat
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Tuple

from inscribe.exceptions import FileIOError
from inscribe.logging_config import logger


def read_text(path) -> str:
    """Read a UTF-8 file, wrapping OS and decode errors as FileIOError."""
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as e:
        raise FileIOError(str(path), e.strerror or str(e)) from e
    except UnicodeDecodeError as e:
        raise FileIOError(str(path), f"not valid UTF-8: {e.reason} at byte {e.start}") from e


def ensure_parent_dirs(path) -> None:
    """Create parent directories for path if they don't exist."""
    parent = Path(path).parent
    if not parent.exists():
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FileIOError(str(path), f"cannot create {parent}: {e.strerror or e}") from e
        logger.debug(f"Created parent directories: {parent}")


@contextmanager
def _temp_file(target: Path) -> Iterator[Tuple[int, str]]:
    """
    Temp file next to target; removed on every exit path.

    Same directory keeps the final rename on one filesystem.
    """
    fd, temp_path = tempfile.mkstemp(
        dir=str(target.parent),
        prefix=f".{target.name}.",
        suffix=".tmp"
    )
    try:
        yield fd, temp_path
    finally:
        if os.path.exists(temp_path):
            os.unlink(temp_path)


def _read_umask() -> int:
    # os.umask can only be read by setting it; done once, at import
    umask = os.umask(0o022)
    os.umask(umask)
    return umask


_UMASK = _read_umask()


def _target_mode(target: Path) -> int:
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        return 0o666 & ~_UMASK


def atomic_write(path, content: str, create_parent_dirs: bool = False) -> None:
    """
    Replace a file's content atomically.

    Args:
        path: Target file path
        content: Full new content (written as UTF-8)
        create_parent_dirs: Create missing parent directories first

    Raises:
        FileIOError: if any step fails; the original file is left untouched
    """
    target = Path(path)
    if create_parent_dirs:
        ensure_parent_dirs(target)

    try:
        mode = _target_mode(target)
        with _temp_file(target) as (fd, temp_path):
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(content)
                f.flush()
                os.fsync(f.fileno())
            os.chmod(temp_path, mode)
            os.replace(temp_path, str(target))
    except OSError as e:
        logger.error(f"Atomic write failed for {target}: {e}")
        raise FileIOError(str(target), e.strerror or str(e)) from e

    logger.debug(f"Atomic write completed: {target}")
