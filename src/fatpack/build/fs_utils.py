"""Filesystem helpers for artifact relocation.

Bundles are always replaced as whole trees, never patched in place. A
stale bundle from an earlier run is only removed once its replacement has
been copied completely.
"""

import logging
import os
import shutil
from pathlib import Path
from typing import Optional

from ..errors import FilesystemError

logger = logging.getLogger(__name__)


def remove_path(path: Path) -> bool:
    """Remove a file, symlink or directory tree.

    Args:
        path: Path to remove

    Returns:
        True if something was removed, False if the path did not exist
    """
    if path.is_symlink() or path.is_file():
        path.unlink()
        return True
    if path.is_dir():
        shutil.rmtree(path)
        return True
    return False


def replace_tree(src: Path, dst: Path, stage: Optional[str] = None) -> Path:
    """Replace dst with a full copy of src.

    The copy is made into a hidden sibling of dst and renamed into place, so
    a failed copy leaves any previous dst untouched.

    Args:
        src: Source directory
        dst: Destination directory (replaced if present)
        stage: Stage label attached to failures

    Returns:
        dst

    Raises:
        FilesystemError: If src is missing or the copy fails
    """
    if not src.is_dir():
        raise FilesystemError(f"Directory not found: {src}", stage)
    tmp = dst.with_name(f".{dst.name}.tmp")
    try:
        remove_path(tmp)
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copytree(src, tmp, symlinks=True)
        remove_path(dst)
        os.replace(tmp, dst)
    except OSError as e:
        try:
            remove_path(tmp)
        except OSError:
            logger.warning("Could not remove partial copy %s", tmp)
        raise FilesystemError(f"Failed to copy {src} to {dst}: {e}", stage) from e
    logger.debug("Replaced %s from %s", dst, src)
    return dst


def replace_file(src: Path, dst: Path, stage: Optional[str] = None) -> Path:
    """Atomically move src over dst.

    src and dst should live on the same filesystem; os.replace falls back to
    a copy-and-delete when they do not.

    Raises:
        FilesystemError: If the move fails
    """
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        try:
            os.replace(src, dst)
        except OSError:
            shutil.copy2(src, dst)
            src.unlink()
    except OSError as e:
        raise FilesystemError(f"Failed to move {src} to {dst}: {e}", stage) from e
    return dst


def fresh_directory(path: Path, stage: Optional[str] = None) -> Path:
    """Return path as a newly created, empty directory.

    Raises:
        FilesystemError: If the directory cannot be recreated
    """
    try:
        remove_path(path)
        path.mkdir(parents=True)
    except OSError as e:
        raise FilesystemError(f"Failed to prepare directory {path}: {e}", stage) from e
    return path
