from .config import Config, StatErrorMode
from .overlay import Overlay
from .paths import PathMapper
from .tree import expand, load_excludes
from .difftool import DiffTool, SubprocessDiffTool
from .exceptions import (
    DiffToolError,
    OverlayError,
    OverlaySetupError,
    PathNotUnderRootError,
    ToolNotFoundError,
)
from .sync import add, rm, list_files, pull, push, diff, status, quick_diff, copy_file
from .sync import ChangeError, CopyAction, DiffReport, SyncDirection, SyncReport

__version__ = "0.2.0"

__all__ = [
    "Config", "StatErrorMode", "Overlay", "PathMapper", "expand", "load_excludes",
    "DiffTool", "SubprocessDiffTool",
    "OverlayError", "OverlaySetupError", "PathNotUnderRootError",
    "ToolNotFoundError", "DiffToolError",
    "add", "rm", "list_files", "pull", "push", "diff", "status",
    "quick_diff", "copy_file",
    "ChangeError", "CopyAction", "DiffReport", "SyncDirection", "SyncReport",
]
