"""External diff and diffstat invocation.

The reporters in :mod:`overlaycm.sync` only need two operations, captured
by :class:`DiffTool`; :class:`SubprocessDiffTool` implements them with the
system executables and tests substitute their own implementation.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from typing import Protocol

from .config import Config
from .exceptions import DiffToolError, ToolNotFoundError

BASE_DIFF = "diff"
COLOR_DIFF = "colordiff"
DIFFSTAT = "diffstat"


class DiffTool(Protocol):
    def run(self, left: str, right: str, *, plain: bool = False) -> bytes:
        """Return unified diff output for *left* against *right*.

        With *plain*, the baseline non-colorized tool is used regardless of
        any configured preference.
        """

    def summarize(self, text: bytes) -> bytes:
        """Return a diffstat-style summary of the unified diff *text*."""


def diffstat_args(platform: str | None = None) -> list[str]:
    """Return diffstat flags for *platform* (default: the running one).

    ``-C`` (copy/rename detection) is not supported by the macOS diffstat.
    """
    platform = sys.platform if platform is None else platform
    return [] if platform == "darwin" else ["-C"]


class SubprocessDiffTool:
    """Run ``diff``-compatible executables found on ``PATH``.

    Resolution order for the preferred tool: the explicit *override*, else
    ``colordiff`` if installed, else plain ``diff``.  Executables are
    looked up on first use, so a missing tool only fails the command that
    needs it.
    """

    def __init__(self, override: str | None = None, *, timeout: float | None = None) -> None:
        self._override = override
        self._timeout = timeout
        self._preferred: str | None = None
        self._plain: str | None = None
        self._diffstat: str | None = None

    @classmethod
    def from_config(cls, config: Config) -> SubprocessDiffTool:
        return cls(config.diff_tool, timeout=config.diff_timeout)

    # ------------------------------------------------------------------
    def _plain_tool(self) -> str:
        if self._plain is None:
            found = shutil.which(BASE_DIFF)
            if found is None:
                raise ToolNotFoundError(
                    "Could not find suitable diff executable in your PATH."
                )
            self._plain = found
        return self._plain

    def _preferred_tool(self) -> str:
        if self._preferred is None:
            if self._override:
                found = shutil.which(self._override)
                if found is None:
                    raise ToolNotFoundError(
                        f"Configured diff tool not found: {self._override}"
                    )
                self._preferred = found
            else:
                self._preferred = shutil.which(COLOR_DIFF) or self._plain_tool()
        return self._preferred

    def _diffstat_tool(self) -> str:
        if self._diffstat is None:
            found = shutil.which(DIFFSTAT)
            if found is None:
                raise ToolNotFoundError(
                    "Could not find suitable diffstat executable in your PATH."
                )
            self._diffstat = found
        return self._diffstat

    # ------------------------------------------------------------------
    def _exec(self, args: list[str], stdin: bytes | None = None) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                args, input=stdin, capture_output=True, timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            raise DiffToolError(
                f"{args[0]} timed out after {self._timeout}s"
            ) from exc

    def run(self, left: str, right: str, *, plain: bool = False) -> bytes:
        tool = self._plain_tool() if plain else self._preferred_tool()
        proc = self._exec([tool, "-Nu", left, right])
        # diff exits 1 when the inputs differ; only 2+ means trouble
        if proc.returncode > 1:
            msg = proc.stderr.decode(errors="replace").strip() or "unknown error"
            raise DiffToolError(f"{tool} failed: {msg}")
        return proc.stdout

    def summarize(self, text: bytes) -> bytes:
        tool = self._diffstat_tool()
        proc = self._exec([tool, *diffstat_args()], text)
        if proc.returncode != 0:
            msg = proc.stderr.decode(errors="replace").strip() or "unknown error"
            raise DiffToolError(f"{tool} failed: {msg}")
        return proc.stdout
