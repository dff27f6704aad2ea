"""File I/O helpers: quick diff, copying, linking, removal."""

from __future__ import annotations

import os
import shutil
import stat

from ..config import StatErrorMode

_COPY_CHUNK_SIZE = 65536
_DIR_MODE = 0o755


# ---------------------------------------------------------------------------
# Change detection
# ---------------------------------------------------------------------------

def _stat(path: str) -> tuple[os.stat_result | None, OSError | None]:
    try:
        return os.stat(path), None
    except OSError as exc:
        return None, exc


def quick_diff(a: str, b: str, *, mode: StatErrorMode = StatErrorMode.STRICT) -> bool:
    """Return True if *a* and *b* look identical by size and mtime.

    No content is read.  Two different files with the same size and
    modification time are indistinguishable here.

    Under ``STRICT`` any stat failure means "differing".  Under
    ``MATCH_ERRORS`` two failures with the same errno count as identical,
    while a single failure still means "differing".
    """
    sa, ea = _stat(a)
    sb, eb = _stat(b)
    if ea is not None or eb is not None:
        if mode is StatErrorMode.MATCH_ERRORS and ea is not None and eb is not None:
            return ea.errno == eb.errno
        return False
    return sa.st_size == sb.st_size and sa.st_mtime_ns == sb.st_mtime_ns


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------

def _make_parents(path: str) -> None:
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, mode=_DIR_MODE, exist_ok=True)


def copy_file(dst: str, src: str) -> None:
    """Copy the regular file *src* to *dst*, creating parent directories.

    The permission bits of *src* are applied to *dst*, and both the access
    and modification times of *dst* are set to the mtime of *src*, so a
    following :func:`quick_diff` compares equal.  A symlink at *dst* is
    replaced, never written through.

    Raises:
        shutil.SameFileError: If *dst* already resolves to *src*, e.g. a
            real path linked into the overlay by a symlink pull.
        FileNotFoundError: If *src* does not exist.
        IsADirectoryError: If *src* is not a regular file.
        OSError: On any other failure; *dst* may be left truncated.
    """
    st = os.stat(src)
    if not stat.S_ISREG(st.st_mode):
        raise IsADirectoryError(f"Source path {src} must be a file")
    _make_parents(dst)
    if os.path.islink(dst):
        os.unlink(dst)
    elif os.path.exists(dst) and os.path.samefile(src, dst):
        raise shutil.SameFileError(f"{src} and {dst} are the same file")
    elif os.path.exists(dst) and not os.access(dst, os.W_OK):
        os.chmod(dst, stat.S_IMODE(os.stat(dst).st_mode) | stat.S_IWUSR)
    with open(src, "rb") as fsrc, open(dst, "wb") as fdst:
        shutil.copyfileobj(fsrc, fdst, _COPY_CHUNK_SIZE)
    os.chmod(dst, stat.S_IMODE(st.st_mode))
    os.utime(dst, ns=(st.st_mtime_ns, st.st_mtime_ns))


def link_file(dst: str, src: str) -> None:
    """Replace *dst* with a symlink pointing at the absolute path *src*."""
    if not os.path.isfile(src):
        raise FileNotFoundError(f"Source path {src} must be a file")
    _make_parents(dst)
    if os.path.isdir(dst) and not os.path.islink(dst):
        raise IsADirectoryError(f"Destination {dst} is a directory")
    if os.path.lexists(dst):
        os.unlink(dst)
    os.symlink(src, dst)


def backup_file(path: str, suffix: str) -> str | None:
    """Save a copy of the regular file *path* as ``path + suffix``.

    Returns the backup path, or ``None`` if *path* is not a regular file
    (nothing to preserve).  Symlinks are not backed up.
    """
    if os.path.islink(path) or not os.path.isfile(path):
        return None
    backup = path + suffix
    copy_file(backup, path)
    return backup


# ---------------------------------------------------------------------------
# Removal
# ---------------------------------------------------------------------------

def remove_path(path: str) -> bool:
    """Remove the file or directory tree at *path*.

    Returns ``False`` if there was nothing to remove.
    """
    if os.path.isdir(path) and not os.path.islink(path):
        shutil.rmtree(path)
        return True
    try:
        os.unlink(path)
    except FileNotFoundError:
        return False
    return True


def _prune_empty_parents(path: str, stop: str) -> None:
    """Remove empty directories above *path*, up to but not including *stop*."""
    parent = os.path.dirname(path)
    while parent != stop and parent.startswith(stop + os.sep):
        try:
            os.rmdir(parent)  # only succeeds if truly empty
        except OSError:
            return
        parent = os.path.dirname(parent)
