"""Expand a path into the flat list of regular files it denotes."""

from __future__ import annotations

import os
import stat
from typing import Callable, Iterable, Sequence

from dulwich.ignore import IgnoreFilter


def expand(
    path: str,
    *,
    exclude: IgnoreFilter | None = None,
    prune: Iterable[str] = (),
    onerror: Callable[[OSError], None] | None = None,
) -> list[str]:
    """Return every regular file at or below *path* as an absolute path.

    A regular file yields itself.  A directory is descended to unlimited
    depth with an explicit stack; directories themselves are never
    returned.  Entries come out in directory-listing order, depth first.
    Symlinks to files are returned (they stat as regular files); symlinks
    to directories are not descended.  Other file types are skipped.

    *exclude* (see :func:`load_excludes`) drops entries below a directory
    argument by their path relative to *path*; an excluded directory is
    not entered.  Directories listed in *prune* are not entered.

    Raises:
        FileNotFoundError: If *path* does not exist.
        OSError: On other errors, unless *onerror* is given, in which case
            errors below *path* are passed to it and the walk continues.
    """
    path = os.path.abspath(path)
    st = os.stat(path)
    if stat.S_ISREG(st.st_mode):
        return [path]
    if not stat.S_ISDIR(st.st_mode):
        return []

    pruned = {os.path.abspath(p) for p in prune}
    files: list[str] = []
    stack = [path]
    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as it:
                entries = list(it)
        except OSError as exc:
            if onerror is None or current == path:
                raise
            onerror(exc)
            continue

        subdirs = []
        for entry in entries:
            full = os.path.join(current, entry.name)
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                if onerror is None:
                    raise
                onerror(exc)
                continue
            if exclude is not None and is_excluded(exclude, os.path.relpath(full, path),
                                                   is_dir=is_dir):
                continue
            if is_dir:
                if full not in pruned:
                    subdirs.append(full)
            elif is_file:
                files.append(full)
        # Reversed so the first listed subdirectory is walked first
        stack.extend(reversed(subdirs))
    return files


def load_excludes(
    patterns: Sequence[str] = (), exclude_from: str | None = None,
) -> IgnoreFilter | None:
    """Build a gitignore-syntax filter from *patterns* and a pattern file.

    Blank lines and ``#`` comments in *exclude_from* are ignored.  Returns
    ``None`` when there is nothing to exclude.
    """
    lines = [p.encode("utf-8") for p in patterns]
    if exclude_from is not None:
        with open(exclude_from, "rb") as f:
            for raw in f:
                line = raw.strip()
                if line and not line.startswith(b"#"):
                    lines.append(line)
    return IgnoreFilter(lines) if lines else None


def is_excluded(exclude: IgnoreFilter, rel_path: str, *, is_dir: bool = False) -> bool:
    """Return True if *rel_path* (relative to the expanded root) is excluded."""
    rel_path = rel_path.replace(os.sep, "/")
    if is_dir:
        rel_path += "/"
    return exclude.is_ignored(rel_path) is True
