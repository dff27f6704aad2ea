"""Shared fixtures for overlaycm tests."""

import pytest
from click.testing import CliRunner

from overlaycm import Config, Overlay


@pytest.fixture
def real_root(tmp_path):
    """A stand-in for / with a couple of config files."""
    root = tmp_path / "real"
    (root / "etc" / "app").mkdir(parents=True)
    (root / "etc" / "hosts").write_text("127.0.0.1 localhost\n")
    (root / "etc" / "app" / "app.conf").write_text("debug = false\n")
    (root / "etc" / "app" / "extra.conf").write_text("level = 1\n")
    return root


@pytest.fixture
def overlay_root(tmp_path):
    """Path of a not-yet-created overlay directory."""
    return tmp_path / "ov"


@pytest.fixture
def config(real_root, overlay_root):
    return Config(overlay_root=str(overlay_root), real_root=str(real_root))


@pytest.fixture
def ov(config):
    return Overlay.open(config)


class FakeDiffTool:
    """DiffTool that records calls instead of spawning processes."""

    def __init__(self):
        self.runs = []
        self.summarized = []

    def run(self, left, right, *, plain=False):
        self.runs.append((left, right, plain))
        return f"--- {left}\n+++ {right}\n".encode()

    def summarize(self, text):
        self.summarized.append(text)
        return f"{text.count(b'+++ ')} files changed\n".encode()


@pytest.fixture
def fake_tool():
    return FakeDiffTool()


# ---------------------------------------------------------------------------
# CLI fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def cm_args(real_root, overlay_root):
    """Leading options pointing the CLI at the test roots."""
    return ["--overlay", str(overlay_root), "--root", str(real_root)]
