"""Exceptions for overlaycm."""


class OverlayError(Exception):
    """Base class for errors raised by overlaycm."""


class PathNotUnderRootError(OverlayError, ValueError):
    """Raised when a path does not lie under the configured real root.

    The path cannot be mapped into the overlay, so the operation on that
    argument is rejected instead of touching anything outside the managed
    tree.
    """

    def __init__(self, path: str, root: str) -> None:
        super().__init__(f"Path {path} is not under root {root}")
        self.path = path
        self.root = root


class OverlaySetupError(OverlayError):
    """Raised when the overlay root cannot be created or is not writable."""


class ToolNotFoundError(OverlayError):
    """Raised when no diff or diffstat executable can be located."""


class DiffToolError(OverlayError):
    """Raised when an external diff tool exits with a trouble status."""
