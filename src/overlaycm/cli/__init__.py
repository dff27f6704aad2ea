"""cm CLI: keep system config files in an overlay directory."""

from ._helpers import main  # noqa: F401  entry point

# Import command modules to register Click commands with the main group.
from . import _basic, _sync, _diff  # noqa: F401
