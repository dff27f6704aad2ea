"""The :class:`Overlay` handle: a validated overlay root plus its config."""

from __future__ import annotations

import os
import stat
import uuid

from .config import OVERLAY_ROOT_MODE, Config
from .exceptions import OverlaySetupError
from .paths import PathMapper


def _check_writable(root: str) -> None:
    """Create and delete a probe file under *root*."""
    probe = os.path.join(root, f".cm-probe-{uuid.uuid4().hex}")
    try:
        fd = os.open(probe, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o600)
    except PermissionError:
        raise OverlaySetupError(f"Path {root} must be writable.")
    except OSError as exc:
        raise OverlaySetupError(f"Cannot write to {root}: {exc}")
    os.close(fd)
    os.unlink(probe)


class Overlay:
    """A configured overlay tree.

    Create with :meth:`open`; pass the handle to the operations in
    :mod:`overlaycm.sync`::

        ov = Overlay.open(Config(overlay_root="/tmp/ov"))
        add(ov, "/etc/hosts")
    """

    def __init__(self, config: Config) -> None:
        self._config = config
        self._mapper = PathMapper(config)

    @classmethod
    def open(cls, config: Config, *, create: bool = True) -> Overlay:
        """Validate (and by default create) the overlay root.

        Raises:
            FileNotFoundError: If the root is missing and *create* is False.
            OverlaySetupError: If the root is not a directory, cannot be
                created, or is not writable.
        """
        root = config.overlay_root
        try:
            st = os.stat(root)
        except (FileNotFoundError, NotADirectoryError):
            if not create:
                raise FileNotFoundError(f"Overlay root not found: {root}")
            try:
                os.makedirs(root, mode=OVERLAY_ROOT_MODE)
            except OSError as exc:
                raise OverlaySetupError(f"Cannot create overlay root {root}: {exc}")
        else:
            if not stat.S_ISDIR(st.st_mode):
                raise OverlaySetupError(f"Path {root} must be directory or symlink.")
        _check_writable(root)
        return cls(config)

    @property
    def config(self) -> Config:
        return self._config

    @property
    def mapper(self) -> PathMapper:
        return self._mapper

    @property
    def root(self) -> str:
        """Absolute path of the overlay root."""
        return self._config.overlay_root

    def __repr__(self) -> str:
        return f"Overlay({self.root!r}, real_root={self._config.real_root!r})"
