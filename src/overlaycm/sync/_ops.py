"""Overlay operations: add, rm, list, pull, push, diff, status.

Every operation takes an :class:`~overlaycm.Overlay` plus one path
argument, maps it through the overlay's :class:`~overlaycm.paths.PathMapper`,
expands it on its source side and acts on each file independently.
Nothing here prints; results come back as reports.
"""

from __future__ import annotations

import os
import shutil
from typing import TYPE_CHECKING, Iterator

from ..difftool import DiffTool, SubprocessDiffTool
from ..exceptions import DiffToolError
from ..tree import expand
from ._io import (
    _prune_empty_parents,
    backup_file,
    copy_file,
    link_file,
    quick_diff,
    remove_path,
)
from ._types import ChangeError, CopyAction, DiffReport, SyncDirection, SyncReport

if TYPE_CHECKING:
    from dulwich.ignore import IgnoreFilter

    from ..overlay import Overlay

ALL = "all"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _error(path: str, exc: BaseException) -> ChangeError:
    if isinstance(exc, OSError) and exc.strerror:
        return ChangeError(path=exc.filename or path, error=exc.strerror)
    return ChangeError(path=path, error=str(exc))


def _resolve(ov: Overlay, path: str, *, allow_all: bool = False) -> str:
    """Resolve a command argument to an absolute real path under the root."""
    if allow_all and path == ALL:
        return ov.config.real_root
    abs_path = ov.mapper.resolve(path)
    if ov.mapper.in_overlay(abs_path):
        raise ValueError(f"Path {abs_path} is inside the overlay root {ov.root}")
    ov.mapper.strip_root(abs_path)
    return abs_path


def _overlay_files(ov: Overlay, real_path: str, errors: list[ChangeError]) -> list[str]:
    """Expand the overlay side of *real_path*; missing means no files."""
    def onerror(exc: OSError) -> None:
        errors.append(_error(real_path, exc))

    try:
        return expand(ov.mapper.to_overlay(real_path), onerror=onerror)
    except FileNotFoundError:
        return []


def _pairs(ov: Overlay, real_path: str,
           errors: list[ChangeError]) -> Iterator[tuple[str, str, bool]]:
    """Yield ``(overlay, real, identical)`` for each overlay file."""
    mode = ov.config.stat_errors
    for cfg in _overlay_files(ov, real_path, errors):
        real = ov.mapper.to_real(cfg)
        yield cfg, real, quick_diff(cfg, real, mode=mode)


def _diff_pair(cfg: str, real: str, reverse: bool) -> tuple[str, str]:
    return (real, cfg) if reverse else (cfg, real)


# ---------------------------------------------------------------------------
# add / rm / list
# ---------------------------------------------------------------------------

def add(ov: Overlay, path: str, *, exclude: IgnoreFilter | None = None) -> SyncReport:
    """Copy *path* (a file, or every file below a directory) into the overlay.

    Files are copied unconditionally, except ones that already resolve to
    their overlay copy (pulled as symlinks); those are reported as
    skipped.  The call stops at the first copy failure, which is recorded in the report's ``errors``.  A missing
    *path* copies nothing.

    Raises:
        PathNotUnderRootError: If *path* is not under the real root.
        ValueError: If *path* lies inside the overlay root.
    """
    abs_path = _resolve(ov, path)
    report = SyncReport()
    try:
        files = expand(abs_path, exclude=exclude, prune=[ov.root])
    except FileNotFoundError:
        return report
    for file in files:
        dest = ov.mapper.to_overlay(file)
        try:
            copy_file(dest, file)
        except shutil.SameFileError:
            report.skipped.append(file)
            continue
        except OSError as exc:
            report.errors.append(_error(file, exc))
            break
        report.copied.append(CopyAction(src=file, dst=dest))
    return report


def rm(ov: Overlay, path: str) -> bool:
    """Delete the overlay subtree for *path*.

    The real side is never touched and need not exist.  Overlay
    directories left empty are pruned up to the overlay root; removing the
    real root itself empties the overlay but keeps its root directory.

    Returns ``False`` if nothing was tracked at *path*.
    """
    abs_path = _resolve(ov, path)
    target = ov.mapper.to_overlay(abs_path)
    if target == ov.root:
        removed = False
        with os.scandir(target) as it:
            names = [entry.name for entry in it]
        for name in names:
            removed = remove_path(os.path.join(target, name)) or removed
        return removed
    removed = remove_path(target)
    _prune_empty_parents(target, ov.root)
    return removed


def list_files(ov: Overlay, path: str) -> list[str]:
    """Return the real-side paths of overlay files at or below *path*."""
    abs_path = _resolve(ov, path)
    try:
        files = expand(ov.mapper.to_overlay(abs_path))
    except FileNotFoundError:
        return []
    return [ov.mapper.to_real(cfg) for cfg in files]


# ---------------------------------------------------------------------------
# pull / push
# ---------------------------------------------------------------------------

def _apply(ov: Overlay, direction: SyncDirection, cfg: str, real: str) -> CopyAction:
    src, dst = direction.source_dest(cfg, real)
    if direction is SyncDirection.TO_OVERLAY:
        copy_file(dst, src)
        return CopyAction(src=src, dst=dst)
    backup = None
    if not ov.config.no_backup:
        backup = backup_file(dst, ov.config.backup_suffix)
    if ov.config.use_symlinks:
        link_file(dst, src)
        return CopyAction(src=src, dst=dst, backup=backup, link=True)
    copy_file(dst, src)
    return CopyAction(src=src, dst=dst, backup=backup)


def transfer(ov: Overlay, path: str, direction: SyncDirection, *,
             dry_run: bool = False) -> SyncReport:
    """Copy every tracked file under *path* whose pair fails quick diff.

    Only files present in the overlay are considered, so pull never
    deletes real files and push never creates overlay entries.  A failure
    on one file is recorded and the remaining files are still processed.
    *path* may be ``"all"`` for the whole real root.
    """
    abs_path = _resolve(ov, path, allow_all=True)
    report = SyncReport()
    for cfg, real, identical in _pairs(ov, abs_path, report.errors):
        if identical:
            report.skipped.append(real)
            continue
        if direction is SyncDirection.TO_OVERLAY and not os.path.lexists(real):
            # Nothing to record; the tracked copy stays as it is
            report.skipped.append(real)
            continue
        if dry_run:
            src, dst = direction.source_dest(cfg, real)
            link = direction is SyncDirection.TO_REAL and ov.config.use_symlinks
            report.copied.append(CopyAction(src=src, dst=dst, link=link))
            continue
        try:
            report.copied.append(_apply(ov, direction, cfg, real))
        except OSError as exc:
            report.errors.append(_error(real, exc))
    return report


def pull(ov: Overlay, path: str, *, dry_run: bool = False) -> SyncReport:
    """Apply tracked files under *path* from the overlay to the real tree."""
    return transfer(ov, path, SyncDirection.TO_REAL, dry_run=dry_run)


def push(ov: Overlay, path: str, *, dry_run: bool = False) -> SyncReport:
    """Record the current real content of tracked files under *path*."""
    return transfer(ov, path, SyncDirection.TO_OVERLAY, dry_run=dry_run)


# ---------------------------------------------------------------------------
# diff / status
# ---------------------------------------------------------------------------

def _collect_diffs(ov: Overlay, path: str, *, reverse: bool, plain: bool,
                   tool: DiffTool) -> DiffReport:
    abs_path = _resolve(ov, path)
    report = DiffReport()
    chunks: list[bytes] = []
    for cfg, real, identical in _pairs(ov, abs_path, report.errors):
        if identical:
            continue
        left, right = _diff_pair(cfg, real, reverse)
        try:
            chunks.append(tool.run(left, right, plain=plain))
        except (DiffToolError, OSError) as exc:
            report.errors.append(_error(left, exc))
            continue
        report.pairs.append((left, right))
    report.output = b"".join(chunks)
    return report


def diff(ov: Overlay, path: str, *, reverse: bool = False,
         tool: DiffTool | None = None) -> DiffReport:
    """Unified diffs of tracked files under *path* that fail quick diff.

    Pairs are ordered ``(overlay, real)``, showing what a pull would do;
    *reverse* swaps them to show what a push would record.

    Raises:
        ToolNotFoundError: If no diff executable is available.
    """
    tool = tool or SubprocessDiffTool.from_config(ov.config)
    return _collect_diffs(ov, path, reverse=reverse, plain=False, tool=tool)


def status(ov: Overlay, path: str, *, reverse: bool = False,
           tool: DiffTool | None = None) -> DiffReport:
    """Diffstat summary of the pending differences under *path*.

    The per-file diffs always come from the plain ``diff`` tool, since
    colorized output would confuse the summarizer.
    """
    tool = tool or SubprocessDiffTool.from_config(ov.config)
    report = _collect_diffs(ov, path, reverse=reverse, plain=True, tool=tool)
    report.output = tool.summarize(report.output)
    return report
