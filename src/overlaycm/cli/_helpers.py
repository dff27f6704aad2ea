"""Shared helpers, option decorators, and the main CLI group."""

from __future__ import annotations

from typing import Callable, Iterable

import click

from .. import __version__
from ..config import DEFAULT_OVERLAY_ROOT, DEFAULT_REAL_ROOT, Config, StatErrorMode
from ..exceptions import OverlayError, OverlaySetupError, ToolNotFoundError
from ..overlay import Overlay


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _status(ctx, msg):
    """Emit a status message to stderr when verbose mode (-v) is on."""
    if ctx.obj.get("verbose"):
        click.echo(msg, err=True)


def _open_overlay(ctx) -> Overlay:
    """Build the Config from the group options and validate the overlay root."""
    opts = ctx.obj
    try:
        config = Config(
            overlay_root=opts["overlay_root"],
            real_root=opts["real_root"],
            no_backup=opts["no_backup"],
            use_symlinks=opts["use_symlinks"],
            diff_tool=opts["diff_tool"],
            stat_errors=opts["stat_errors"],
            diff_timeout=opts["diff_timeout"],
        )
        return Overlay.open(config)
    except (OverlaySetupError, ValueError) as exc:
        raise click.ClickException(str(exc))


def _each_path(ctx, verb: str, paths: Iterable[str], fn: Callable[[str], bool]) -> None:
    """Run *fn* on every path argument (cwd if none were given).

    A failing argument is reported and the next one still runs.  The
    command exits with status 1 if any argument failed.  A missing diff
    tool stops the whole command.
    """
    failed = False
    for path in paths or (".",):
        try:
            if not fn(path):
                failed = True
        except ToolNotFoundError as exc:
            raise click.ClickException(str(exc))
        except (OverlayError, OSError, ValueError) as exc:
            click.echo(f"Error ({verb}): {exc}", err=True)
            failed = True
    if failed:
        ctx.exit(1)


def _echo_report(ctx, report, *, dry_run: bool = False) -> bool:
    """Print a SyncReport; return False if it carries errors."""
    for action in report.copied:
        if dry_run:
            click.echo(f"~ {action.dst}")
            continue
        arrow = "=>" if action.link else "->"
        click.echo(f"{action.src} {arrow} {action.dst}")
        if action.backup:
            _status(ctx, f"Backed up {action.dst} -> {action.backup}")
    for path in report.skipped:
        _status(ctx, f"Unchanged: {path}")
    for e in report.errors:
        click.echo(f"ERROR: {e.path}: {e.error}", err=True)
    return report.ok


def _paths_argument(f):
    """Shared variadic PATHS argument."""
    return click.argument("paths", nargs=-1, type=click.Path())(f)


def _reverse_option(f):
    return click.option(
        "-r", "--reverse", is_flag=True, default=False,
        help="Diff real -> overlay (what a push would record).",
    )(f)


def _dry_run_option(f):
    return click.option(
        "-n", "--dry-run", is_flag=True, default=False,
        help="Show what would be copied without writing.",
    )(f)


# ---------------------------------------------------------------------------
# Main group
# ---------------------------------------------------------------------------

@click.group()
@click.option("--overlay", "overlay_root", type=click.Path(), envvar="CM_OVERLAY",
              default=DEFAULT_OVERLAY_ROOT, show_default=True,
              help="Overlay directory (or set CM_OVERLAY).")
@click.option("--root", "real_root", type=click.Path(), envvar="CM_ROOT",
              default=DEFAULT_REAL_ROOT, show_default=True,
              help="Real tree under management (or set CM_ROOT).")
@click.option("--no-backup", "no_backup", is_flag=True, envvar="CM_NO_BACKUP",
              help="Do not keep FILE~ when pull overwrites a file.")
@click.option("--symlink", "use_symlinks", is_flag=True, envvar="CM_SYMLINK",
              help="Pull by symlinking to the overlay instead of copying.")
@click.option("--diff-tool", "diff_tool", envvar="CM_DIFF", default=None,
              help="Diff executable (default: colordiff if installed, else diff).")
@click.option("--stat-errors", "stat_errors",
              type=click.Choice([m.value for m in StatErrorMode]),
              envvar="CM_STAT_ERRORS", default=StatErrorMode.STRICT.value,
              show_default=True,
              help="How quick diff treats files that cannot be stat'ed.")
@click.option("--diff-timeout", "diff_timeout", type=click.FloatRange(min=0, min_open=True),
              envvar="CM_DIFF_TIMEOUT", default=None,
              help="Seconds to wait for each diff/diffstat process.")
@click.option("-v", "--verbose", is_flag=True, help="Verbose output on stderr.")
@click.version_option(__version__, prog_name="cm")
@click.pass_context
def main(ctx, overlay_root, real_root, no_backup, use_symlinks, diff_tool,
         stat_errors, diff_timeout, verbose):
    """cm: a (very) simple configuration manager.

    Keeps system config files in an overlay directory that mirrors their
    absolute paths, so they can be backed up, distributed, or put under
    version control separately.  PATH arguments may be directories, in
    which case cm works recursively.  With no PATH, the current directory
    is used.

    \b
    Quick start:
      cm add /etc/hosts       track a file
      cm diff /etc            what a pull would change
      cm push /etc            record edits made on the system
      cm pull all             apply the overlay to the whole system

    \b
    Set CM_OVERLAY to use an overlay other than /opt/cm.
    """
    ctx.ensure_object(dict)
    ctx.obj.update(
        overlay_root=overlay_root,
        real_root=real_root,
        no_backup=no_backup,
        use_symlinks=use_symlinks,
        diff_tool=diff_tool,
        stat_errors=stat_errors,
        diff_timeout=diff_timeout,
        verbose=verbose,
    )
