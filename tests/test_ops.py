"""Tests for the overlay operations: add, rm, list_files, pull, push."""

import os

import pytest

from overlaycm import (
    Config,
    Overlay,
    PathNotUnderRootError,
    SyncDirection,
    add,
    list_files,
    load_excludes,
    pull,
    push,
    quick_diff,
    rm,
)
from overlaycm.sync import transfer


def _edit(path, text, mtime=1_700_000_000):
    """Change content and pin mtime so quick diff sees a difference."""
    path.write_text(text)
    os.utime(path, (mtime, mtime))


@pytest.fixture
def tracked(ov, real_root):
    """Overlay with everything under etc/ added."""
    report = add(ov, str(real_root / "etc"))
    assert report.ok
    return ov


def ov_path(overlay_root, real_root, real):
    return overlay_root / os.path.relpath(real, real_root)


# ---------------------------------------------------------------------------
# SyncDirection
# ---------------------------------------------------------------------------

class TestSyncDirection:
    def test_push_copies_real_to_overlay(self):
        assert SyncDirection.TO_OVERLAY.source_dest("/ov/f", "/f") == ("/f", "/ov/f")

    def test_pull_copies_overlay_to_real(self):
        assert SyncDirection.TO_REAL.source_dest("/ov/f", "/f") == ("/ov/f", "/f")

    def test_str(self):
        assert str(SyncDirection.TO_OVERLAY) == "push"
        assert str(SyncDirection.TO_REAL) == "pull"


# ---------------------------------------------------------------------------
# add
# ---------------------------------------------------------------------------

class TestAdd:
    def test_single_file(self, ov, real_root, overlay_root):
        real = real_root / "etc" / "hosts"
        report = add(ov, str(real))
        dest = overlay_root / "etc" / "hosts"
        assert dest.read_text() == "127.0.0.1 localhost\n"
        assert [(a.src, a.dst) for a in report.copied] == [(str(real), str(dest))]
        assert quick_diff(str(dest), str(real))

    def test_directory(self, ov, real_root, overlay_root):
        report = add(ov, str(real_root / "etc"))
        assert len(report.copied) == 3
        assert (overlay_root / "etc" / "app" / "app.conf").exists()
        assert (overlay_root / "etc" / "app" / "extra.conf").exists()

    def test_copies_unconditionally(self, tracked, real_root):
        report = add(tracked, str(real_root / "etc" / "hosts"))
        assert len(report.copied) == 1

    def test_relative_path(self, ov, real_root, overlay_root, monkeypatch):
        monkeypatch.chdir(real_root / "etc")
        add(ov, "hosts")
        assert (overlay_root / "etc" / "hosts").exists()

    def test_outside_root(self, ov, tmp_path):
        outside = tmp_path / "outside.conf"
        outside.write_text("x")
        with pytest.raises(PathNotUnderRootError):
            add(ov, str(outside))

    def test_missing_is_noop(self, ov, real_root):
        report = add(ov, str(real_root / "etc" / "nope"))
        assert report.copied == []
        assert report.ok

    def test_inside_overlay_rejected(self, ov, overlay_root):
        with pytest.raises(ValueError, match="inside the overlay"):
            add(ov, str(overlay_root / "etc"))

    def test_exclude(self, ov, real_root, overlay_root):
        (real_root / "etc" / "hosts~").write_text("old")
        add(ov, str(real_root / "etc"), exclude=load_excludes(["*~"]))
        assert not (overlay_root / "etc" / "hosts~").exists()
        assert (overlay_root / "etc" / "hosts").exists()

    def test_after_symlink_pull_keeps_overlay_content(self, config, real_root, overlay_root):
        ov = Overlay.open(Config(overlay_root=config.overlay_root,
                                 real_root=config.real_root, use_symlinks=True))
        real = real_root / "etc" / "hosts"
        add(ov, str(real))
        _edit(real, "edited\n")
        pull(ov, str(real))
        assert real.is_symlink()

        report = add(ov, str(real_root / "etc"))
        assert report.ok
        assert str(real) in report.skipped
        assert str(real) not in [a.src for a in report.copied]
        assert (overlay_root / "etc" / "hosts").read_text() == "127.0.0.1 localhost\n"
        assert real.is_symlink()
        assert real.read_text() == "127.0.0.1 localhost\n"

    def test_overlay_inside_real_root_is_skipped(self, tmp_path):
        root = tmp_path / "root"
        (root / "etc").mkdir(parents=True)
        (root / "etc" / "hosts").write_text("h")
        ov = Overlay.open(Config(overlay_root=str(root / "opt" / "cm"),
                                 real_root=str(root)))
        add(ov, str(root))
        # A second add must not pick up the overlay's own files
        report = add(ov, str(root))
        assert [a.src for a in report.copied] == [str(root / "etc" / "hosts")]
        assert not (root / "opt" / "cm" / "opt").exists()

    @pytest.mark.skipif(os.geteuid() == 0, reason="root ignores permissions")
    def test_stops_at_first_failure(self, ov, real_root):
        bad = real_root / "etc" / "app" / "app.conf"
        bad.chmod(0)
        try:
            report = add(ov, str(real_root / "etc" / "app"))
        finally:
            bad.chmod(0o644)
        assert len(report.errors) == 1
        assert report.errors[0].path == str(bad)
        assert len(report.copied) + len(report.errors) <= 2


# ---------------------------------------------------------------------------
# rm
# ---------------------------------------------------------------------------

class TestRm:
    def test_removes_file(self, tracked, real_root, overlay_root):
        assert rm(tracked, str(real_root / "etc" / "hosts")) is True
        assert not (overlay_root / "etc" / "hosts").exists()
        # Real side untouched
        assert (real_root / "etc" / "hosts").exists()

    def test_removes_directory(self, tracked, real_root, overlay_root):
        assert rm(tracked, str(real_root / "etc" / "app")) is True
        assert not (overlay_root / "etc" / "app").exists()
        assert (real_root / "etc" / "app" / "app.conf").exists()

    def test_real_counterpart_not_required(self, tracked, real_root, overlay_root):
        (real_root / "etc" / "hosts").unlink()
        assert rm(tracked, str(real_root / "etc" / "hosts")) is True
        assert not (overlay_root / "etc" / "hosts").exists()

    def test_untracked(self, ov, real_root):
        assert rm(ov, str(real_root / "etc" / "hosts")) is False

    def test_prunes_empty_parents(self, ov, real_root, overlay_root):
        add(ov, str(real_root / "etc" / "app" / "app.conf"))
        rm(ov, str(real_root / "etc" / "app" / "app.conf"))
        assert not (overlay_root / "etc").exists()
        assert overlay_root.is_dir()

    def test_whole_root_keeps_overlay_dir(self, tracked, real_root, overlay_root):
        assert rm(tracked, str(real_root)) is True
        assert overlay_root.is_dir()
        assert os.listdir(overlay_root) == []

    def test_outside_root(self, ov, tmp_path):
        with pytest.raises(PathNotUnderRootError):
            rm(ov, str(tmp_path / "elsewhere"))


# ---------------------------------------------------------------------------
# list_files
# ---------------------------------------------------------------------------

class TestListFiles:
    def test_lists_real_paths(self, tracked, real_root):
        got = sorted(list_files(tracked, str(real_root / "etc")))
        assert got == sorted([
            str(real_root / "etc" / "hosts"),
            str(real_root / "etc" / "app" / "app.conf"),
            str(real_root / "etc" / "app" / "extra.conf"),
        ])

    def test_single_file(self, tracked, real_root):
        p = str(real_root / "etc" / "hosts")
        assert list_files(tracked, p) == [p]

    def test_nothing_tracked(self, ov, real_root):
        assert list_files(ov, str(real_root / "etc")) == []

    def test_missing_overlay_parent(self, tracked, real_root):
        assert list_files(tracked, str(real_root / "usr" / "share" / "x")) == []

    def test_after_rm(self, tracked, real_root):
        rm(tracked, str(real_root / "etc" / "hosts"))
        assert str(real_root / "etc" / "hosts") not in list_files(tracked, str(real_root / "etc"))


# ---------------------------------------------------------------------------
# pull
# ---------------------------------------------------------------------------

class TestPull:
    def test_in_sync_copies_nothing(self, tracked):
        report = pull(tracked, "all")
        assert report.copied == []
        assert report.ok
        assert len(report.skipped) == 3

    def test_restores_real_file(self, tracked, real_root, overlay_root):
        real = real_root / "etc" / "hosts"
        _edit(real, "10.0.0.1 broken\n")
        report = pull(tracked, str(real))
        assert real.read_text() == "127.0.0.1 localhost\n"
        assert [(a.src, a.dst) for a in report.copied] == [
            (str(overlay_root / "etc" / "hosts"), str(real)),
        ]
        assert quick_diff(str(real), str(overlay_root / "etc" / "hosts"))

    def test_recreates_missing_real_file(self, tracked, real_root):
        real = real_root / "etc" / "app" / "app.conf"
        real.unlink()
        pull(tracked, str(real_root / "etc"))
        assert real.read_text() == "debug = false\n"

    def test_keeps_backup(self, tracked, real_root):
        real = real_root / "etc" / "hosts"
        _edit(real, "edited\n")
        report = pull(tracked, str(real))
        backup = real_root / "etc" / "hosts~"
        assert backup.read_text() == "edited\n"
        assert report.copied[0].backup == str(backup)

    def test_no_backup(self, config, real_root):
        ov = Overlay.open(Config(overlay_root=config.overlay_root,
                                 real_root=config.real_root, no_backup=True))
        add(ov, str(real_root / "etc" / "hosts"))
        _edit(real_root / "etc" / "hosts", "edited\n")
        pull(ov, str(real_root / "etc" / "hosts"))
        assert not (real_root / "etc" / "hosts~").exists()

    def test_custom_backup_suffix(self, config, real_root):
        ov = Overlay.open(Config(overlay_root=config.overlay_root,
                                 real_root=config.real_root, backup_suffix=".orig"))
        add(ov, str(real_root / "etc" / "hosts"))
        _edit(real_root / "etc" / "hosts", "edited\n")
        pull(ov, str(real_root / "etc" / "hosts"))
        assert (real_root / "etc" / "hosts.orig").read_text() == "edited\n"

    def test_symlinks(self, config, real_root, overlay_root):
        ov = Overlay.open(Config(overlay_root=config.overlay_root,
                                 real_root=config.real_root, use_symlinks=True))
        add(ov, str(real_root / "etc" / "hosts"))
        real = real_root / "etc" / "hosts"
        _edit(real, "edited\n")
        report = pull(ov, str(real))
        assert real.is_symlink()
        assert os.readlink(real) == str(overlay_root / "etc" / "hosts")
        assert report.copied[0].link is True
        # Linked files compare identical afterwards
        assert pull(ov, str(real)).copied == []

    def test_never_deletes_untracked_real_files(self, tracked, real_root):
        extra = real_root / "etc" / "untracked.conf"
        extra.write_text("mine")
        before = set(os.listdir(real_root / "etc"))
        pull(tracked, "all")
        assert extra.read_text() == "mine"
        assert before <= set(os.listdir(real_root / "etc"))

    def test_untracked_path_is_noop(self, tracked, real_root):
        report = pull(tracked, str(real_root / "var"))
        assert report.copied == []
        assert report.ok

    def test_dry_run(self, tracked, real_root):
        real = real_root / "etc" / "hosts"
        _edit(real, "edited\n")
        report = pull(tracked, str(real), dry_run=True)
        assert len(report.copied) == 1
        assert real.read_text() == "edited\n"

    def test_outside_root(self, tracked, tmp_path):
        with pytest.raises(PathNotUnderRootError):
            pull(tracked, str(tmp_path / "elsewhere"))

    def test_failure_does_not_stop_other_files(self, tracked, real_root):
        # A directory where a tracked file should be cannot be overwritten
        hosts = real_root / "etc" / "hosts"
        hosts.unlink()
        hosts.mkdir()
        _edit(real_root / "etc" / "app" / "app.conf", "edited\n")
        report = pull(tracked, "all")
        assert [e.path for e in report.errors] == [str(hosts)]
        assert (real_root / "etc" / "app" / "app.conf").read_text() == "debug = false\n"


# ---------------------------------------------------------------------------
# push
# ---------------------------------------------------------------------------

class TestPush:
    def test_records_real_edit(self, tracked, real_root, overlay_root):
        real = real_root / "etc" / "app" / "app.conf"
        _edit(real, "debug = true\n")
        report = push(tracked, "all")
        assert (overlay_root / "etc" / "app" / "app.conf").read_text() == "debug = true\n"
        assert [(a.src, a.dst) for a in report.copied] == [
            (str(real), str(overlay_root / "etc" / "app" / "app.conf")),
        ]

    def test_never_creates_overlay_entries(self, tracked, real_root, overlay_root):
        (real_root / "etc" / "new.conf").write_text("new")
        push(tracked, "all")
        assert not (overlay_root / "etc" / "new.conf").exists()

    def test_tracked_file_missing_on_real_side(self, tracked, real_root, overlay_root):
        (real_root / "etc" / "hosts").unlink()
        report = push(tracked, str(real_root / "etc"))
        assert report.ok
        assert (overlay_root / "etc" / "hosts").read_text() == "127.0.0.1 localhost\n"
        assert str(real_root / "etc" / "hosts") in report.skipped

    def test_no_backup_in_overlay(self, tracked, real_root, overlay_root):
        _edit(real_root / "etc" / "hosts", "edited\n")
        push(tracked, str(real_root / "etc" / "hosts"))
        assert not (overlay_root / "etc" / "hosts~").exists()

    def test_dry_run(self, tracked, real_root, overlay_root):
        _edit(real_root / "etc" / "hosts", "edited\n")
        report = push(tracked, str(real_root / "etc"), dry_run=True)
        assert [a.dst for a in report.copied] == [str(overlay_root / "etc" / "hosts")]
        assert (overlay_root / "etc" / "hosts").read_text() == "127.0.0.1 localhost\n"

    def test_transfer_direction(self, tracked, real_root, overlay_root):
        _edit(real_root / "etc" / "hosts", "edited\n")
        transfer(tracked, str(real_root / "etc" / "hosts"), SyncDirection.TO_OVERLAY)
        assert (overlay_root / "etc" / "hosts").read_text() == "edited\n"


# ---------------------------------------------------------------------------
# Stat error policy
# ---------------------------------------------------------------------------

class TestStatErrorPolicy:
    def test_strict_dangling_real_symlink_is_different(self, tracked, real_root):
        hosts = real_root / "etc" / "hosts"
        hosts.unlink()
        hosts.symlink_to(real_root / "nowhere")
        report = push(tracked, str(hosts))
        # Dangling source cannot be copied: recorded, not raised
        assert len(report.errors) == 1
