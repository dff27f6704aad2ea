"""Tracking commands: add, rm, list."""

from __future__ import annotations

import click

from ..sync import add as add_path
from ..sync import list_files
from ..sync import rm as rm_path
from ..tree import load_excludes
from ._helpers import (
    main,
    _each_path,
    _echo_report,
    _open_overlay,
    _paths_argument,
    _status,
)


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------

@main.command()
@_paths_argument
@click.option("--exclude", multiple=True,
              help="Exclude files matching pattern (gitignore syntax, repeatable).")
@click.option("--exclude-from", "exclude_from", type=click.Path(exists=True),
              help="Read exclude patterns from file.")
@click.pass_context
def add(ctx, paths, exclude, exclude_from):
    """Copy files into the overlay, starting to track them.

    Directories are added recursively.  Existing overlay copies are
    overwritten.
    """
    ov = _open_overlay(ctx)
    excl = load_excludes(exclude, exclude_from)

    def _add(path):
        report = add_path(ov, path, exclude=excl)
        if not report.copied and report.ok:
            _status(ctx, f"Nothing to add at {path}")
        return _echo_report(ctx, report)

    _each_path(ctx, "add", paths, _add)


# ---------------------------------------------------------------------------
# rm
# ---------------------------------------------------------------------------

@main.command()
@_paths_argument
@click.pass_context
def rm(ctx, paths):
    """Stop tracking files by deleting them from the overlay.

    The files on the system are not touched.
    """
    ov = _open_overlay(ctx)

    def _rm(path):
        abs_path = ov.mapper.resolve(path)
        try:
            removed = rm_path(ov, path)
        except OSError as exc:
            click.echo(f"{abs_path} could not be removed: {exc}", err=True)
            return False
        if removed:
            click.echo(f"Removed {abs_path}")
        else:
            _status(ctx, f"Not tracked: {abs_path}")
        return True

    _each_path(ctx, "rm", paths, _rm)


main.add_command(rm, name="remove")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------

@main.command(name="list")
@_paths_argument
@click.pass_context
def list_cmd(ctx, paths):
    """Show which files under PATHS are tracked."""
    ov = _open_overlay(ctx)

    def _list(path):
        for real in list_files(ov, path):
            click.echo(real)
        return True

    _each_path(ctx, "list", paths, _list)


main.add_command(list_cmd, name="show")
