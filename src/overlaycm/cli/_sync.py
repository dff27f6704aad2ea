"""The pull and push commands."""

from __future__ import annotations

import click

from ..sync import SyncDirection, transfer
from ._helpers import (
    main,
    _dry_run_option,
    _each_path,
    _echo_report,
    _open_overlay,
    _paths_argument,
    _status,
)


def _run_transfer(ctx, verb, paths, direction, dry_run):
    ov = _open_overlay(ctx)

    def _one(path):
        report = transfer(ov, path, direction, dry_run=dry_run)
        _status(ctx, f"{verb} {path}: {len(report.copied)} copied, "
                     f"{len(report.skipped)} unchanged, {len(report.errors)} failed")
        return _echo_report(ctx, report, dry_run=dry_run)

    _each_path(ctx, verb, paths, _one)


@main.command()
@_paths_argument
@_dry_run_option
@click.pass_context
def pull(ctx, paths, dry_run):
    """Apply tracked files from the overlay to the system.

    Only files whose size or modification time differ are copied.  Files
    on the system are overwritten (keeping FILE~ unless --no-backup) but
    never deleted.  Use "all" to pull the whole overlay.
    """
    _run_transfer(ctx, "pull", paths, SyncDirection.TO_REAL, dry_run)


main.add_command(pull, name="update")


@main.command()
@_paths_argument
@_dry_run_option
@click.pass_context
def push(ctx, paths, dry_run):
    """Record the system's current version of tracked files.

    Only files already in the overlay are considered; use add to track
    new ones.  Use "all" to push every tracked file.
    """
    _run_transfer(ctx, "push", paths, SyncDirection.TO_OVERLAY, dry_run)
