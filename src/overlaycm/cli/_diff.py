"""The diff and status commands."""

from __future__ import annotations

import click

from ..sync import diff as diff_path
from ..sync import status as status_path
from ._helpers import (
    main,
    _each_path,
    _open_overlay,
    _paths_argument,
    _reverse_option,
    _status,
)


def _echo_errors(report) -> bool:
    for e in report.errors:
        click.echo(f"ERROR: {e.path}: {e.error}", err=True)
    return report.ok


@main.command()
@_paths_argument
@_reverse_option
@click.pass_context
def diff(ctx, paths, reverse):
    """Show unified diffs between tracked files and the system.

    The diff shows what a pull would change; with -r, what a push would
    record.  Uses $CM_DIFF, else colordiff, else diff.
    """
    ov = _open_overlay(ctx)

    def _diff(path):
        report = diff_path(ov, path, reverse=reverse)
        click.echo(report.output, nl=False)
        _status(ctx, f"diff {path}: {len(report.pairs)} file(s) differ")
        return _echo_errors(report)

    _each_path(ctx, "diff", paths, _diff)


@main.command()
@_paths_argument
@_reverse_option
@click.pass_context
def status(ctx, paths, reverse):
    """Summarize pending differences with diffstat."""
    ov = _open_overlay(ctx)

    def _status_one(path):
        report = status_path(ov, path, reverse=reverse)
        click.echo(report.output, nl=False)
        return _echo_errors(report)

    _each_path(ctx, "status", paths, _status_one)
