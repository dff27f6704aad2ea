"""Process configuration for overlaycm.

A :class:`Config` is built once (by the CLI from options and environment
variables, or directly by library callers and tests) and handed to
:meth:`~overlaycm.Overlay.open`.  It is never mutated afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

DEFAULT_OVERLAY_ROOT = "/opt/cm"
DEFAULT_REAL_ROOT = "/"
DEFAULT_BACKUP_SUFFIX = "~"
OVERLAY_ROOT_MODE = 0o755


class StatErrorMode(str, Enum):
    """How quick diff treats pairs where ``stat`` fails.

    ``STRICT``: any stat failure marks the pair as differing.
    ``MATCH_ERRORS``: two failures with the same errno count as identical.
    """
    STRICT = "strict"
    MATCH_ERRORS = "match-errors"

    def __str__(self) -> str:          # noqa: D105
        return self.value


def _normalize_root(path: str | os.PathLike[str]) -> str:
    path = os.fspath(path)
    if not path:
        raise ValueError("Root path must not be empty")
    return os.path.abspath(path)


@dataclass(frozen=True)
class Config:
    """Immutable settings shared by every overlay operation.

    Attributes:
        overlay_root: Absolute path of the shadow tree.
        real_root: Absolute path of the live tree under management.
        no_backup: Do not keep ``<file><backup_suffix>`` when pull
            overwrites a real file.
        use_symlinks: Pull links real paths to overlay files instead of
            copying them.
        diff_tool: Explicit diff executable, overriding the search.
        stat_errors: :class:`StatErrorMode` used by quick diff.
        diff_timeout: Seconds to wait for each external process, or ``None``.
        backup_suffix: Suffix appended to backup copies.
    """
    overlay_root: str = DEFAULT_OVERLAY_ROOT
    real_root: str = DEFAULT_REAL_ROOT
    no_backup: bool = False
    use_symlinks: bool = False
    diff_tool: str | None = None
    stat_errors: StatErrorMode = StatErrorMode.STRICT
    diff_timeout: float | None = None
    backup_suffix: str = DEFAULT_BACKUP_SUFFIX

    def __post_init__(self) -> None:
        object.__setattr__(self, "overlay_root", _normalize_root(self.overlay_root))
        object.__setattr__(self, "real_root", _normalize_root(self.real_root))
        object.__setattr__(self, "stat_errors", StatErrorMode(self.stat_errors))
        if not self.backup_suffix:
            raise ValueError("backup_suffix must not be empty")
        if self.diff_timeout is not None and self.diff_timeout <= 0:
            raise ValueError("diff_timeout must be positive")
        if self.overlay_root == self.real_root:
            raise ValueError("overlay_root and real_root must differ")
