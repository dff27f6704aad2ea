"""Copy, compare and remove files between the real tree and the overlay.

``add``/``rm``/``list_files`` manage which files are tracked.  ``pull`` and
``push`` move content for tracked files whose size or mtime differ, and
``diff``/``status`` report those differences through external tools.
"""

from ._types import (
    ChangeError,
    CopyAction,
    DiffReport,
    SyncDirection,
    SyncReport,
)
from ._io import (
    backup_file,
    copy_file,
    link_file,
    quick_diff,
    remove_path,
)
from ._ops import (
    ALL,
    add,
    diff,
    list_files,
    pull,
    push,
    rm,
    status,
    transfer,
)

__all__ = [
    # Public types
    "ChangeError", "CopyAction", "DiffReport", "SyncDirection", "SyncReport",
    # File-level helpers
    "backup_file", "copy_file", "link_file", "quick_diff", "remove_path",
    # Operations
    "ALL", "add", "diff", "list_files", "pull", "push", "rm", "status", "transfer",
]
