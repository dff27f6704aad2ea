"""Mapping between real paths and their overlay counterparts.

The overlay mirrors the absolute layout of the real root below it::

    real_root=/        overlay_root=/opt/cm
    /etc/hosts   <->   /opt/cm/etc/hosts
"""

from __future__ import annotations

import os

from .config import Config
from .exceptions import PathNotUnderRootError


def _is_under(path: str, root: str) -> bool:
    """Return True if *path* equals *root* or lies below it."""
    if root == os.sep:
        return path.startswith(os.sep)
    return path == root or path.startswith(root + os.sep)


def _relative_to(path: str, root: str) -> str:
    """Strip *root* from *path*; both must be normalized absolute paths."""
    if root == os.sep:
        return path.lstrip(os.sep)
    return path[len(root):].lstrip(os.sep)


class PathMapper:
    """Translate paths between the real root and the overlay root."""

    def __init__(self, config: Config) -> None:
        self._real_root = config.real_root
        self._overlay_root = config.overlay_root

    @property
    def real_root(self) -> str:
        return self._real_root

    @property
    def overlay_root(self) -> str:
        return self._overlay_root

    def resolve(self, path: str | os.PathLike[str]) -> str:
        """Return *path* as a normalized absolute path (relative to cwd)."""
        path = os.fspath(path)
        if not path:
            raise ValueError("Path must not be empty")
        return os.path.abspath(path)

    def strip_root(self, path: str) -> str:
        """Return *path* relative to the real root.

        Raises:
            PathNotUnderRootError: If *path* is not under the real root.
        """
        path = os.path.normpath(path)
        if not os.path.isabs(path) or not _is_under(path, self._real_root):
            raise PathNotUnderRootError(path, self._real_root)
        return _relative_to(path, self._real_root)

    def to_overlay(self, path: str) -> str:
        """Return the overlay path for the absolute real *path*."""
        if not os.path.isabs(path):
            raise ValueError(f"Path must be absolute: {path}")
        rel = self.strip_root(path)
        return os.path.join(self._overlay_root, rel) if rel else self._overlay_root

    def to_real(self, path: str) -> str:
        """Return the real path for an overlay *path*.

        Paths outside the overlay root are returned unchanged, so calling
        this on a path that is already real is harmless.
        """
        if not _is_under(path, self._overlay_root):
            return path
        rel = _relative_to(path, self._overlay_root)
        return os.path.join(self._real_root, rel) if rel else self._real_root

    def in_overlay(self, path: str) -> bool:
        """Return True if *path* lies inside the overlay root."""
        return _is_under(os.path.normpath(path), self._overlay_root)
