"""Data structures for overlay sync and diff operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SyncDirection(str, Enum):
    """Which side of a differing pair is the source.

    Members: ``TO_OVERLAY`` (push) and ``TO_REAL`` (pull).
    """
    TO_OVERLAY = "push"
    TO_REAL = "pull"

    def __str__(self) -> str:          # noqa: D105
        return self.value

    def source_dest(self, overlay_path: str, real_path: str) -> tuple[str, str]:
        """Order an overlay/real pair as ``(src, dst)`` for this direction."""
        if self is SyncDirection.TO_OVERLAY:
            return real_path, overlay_path
        return overlay_path, real_path


@dataclass
class CopyAction:
    """A single file written by a sync operation.

    Attributes:
        src: Path the content came from.
        dst: Path that was written.
        backup: Where the previous *dst* was saved, if a backup was made.
        link: ``True`` if *dst* was written as a symlink to *src*.
    """
    src: str
    dst: str
    backup: str | None = None
    link: bool = False


@dataclass
class ChangeError:
    """A file that failed during an operation.

    Attributes:
        path: The path that caused the error.
        error: Human-readable error message.
    """
    path: str
    error: str


@dataclass
class SyncReport:
    """Result of an add, pull, or push call.

    Attributes:
        copied: Files written, in processing order.
        skipped: Files left alone because quick diff found them identical.
        errors: Per-file errors; processing continued past each of them.
    """
    copied: list[CopyAction] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    errors: list[ChangeError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """``True`` if no per-file error was recorded."""
        return not self.errors


@dataclass
class DiffReport:
    """Result of a diff or status call.

    Attributes:
        output: Raw bytes produced by the external tools.
        pairs: ``(left, right)`` pairs that were diffed.
        errors: Per-file errors from the diff tool.
    """
    output: bytes = b""
    pairs: list[tuple[str, str]] = field(default_factory=list)
    errors: list[ChangeError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
