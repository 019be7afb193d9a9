from __future__ import annotations

import os
import time
from pathlib import Path
from types import SimpleNamespace

import pytest

import sdisk
import volumes
from disk_walker import Entry, EntryKind
from sdisk import Sdisk, build_parser, main
from sdisk_config import Command, SdiskConfig, collect_roots


def _config(argv: list[str]) -> SdiskConfig:
    return SdiskConfig.from_args(build_parser().parse_args(argv))


@pytest.fixture
def scenario(tmp_path: Path, make_file) -> Path:
    root = tmp_path / "root"
    make_file(root / "alpha.txt", size=500, age=0)
    make_file(root / "bravo.bin", size=10 * 1024 * 1024, age=200)
    make_file(root / "charlie.txt", size=1024, age=5)
    return root


# -- argument handling -------------------------------------------------------


def test_help_exits_zero() -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--help"])
    assert excinfo.value.code == 0


def test_no_command_means_info() -> None:
    config = _config([])

    assert config.command is Command.INFO
    assert config.roots == ()


def test_global_flags_before_and_after_command(tmp_path: Path) -> None:
    before = _config(["--yes", "--stale-days", "7", "stale", str(tmp_path)])
    after = _config(["clean", str(tmp_path), "--dry-run", "--non-interactive", "--stale-days", "3"])

    assert before.assume_yes and before.stale_days == 7 and not before.dry_run
    assert after.dry_run and not after.interactive and after.stale_days == 3
    assert after.command is Command.CLEAN


def test_defaults() -> None:
    top = _config(["top", "."])
    stale = _config(["stale", "."])

    assert top.limit == 20
    assert stale.limit == 100
    assert stale.stale_days == 90
    assert stale.interactive and not stale.assume_yes and not stale.dry_run


def test_roots_combine_path_flag_and_positionals(tmp_path: Path) -> None:
    a, b = tmp_path / "a", tmp_path / "b"

    config = _config(["--path", str(a), "top", "--count", "5", str(b), str(a)])

    assert config.roots == (a, b)
    assert config.limit == 5


def test_roots_default_to_working_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    assert collect_roots(None, []) == [tmp_path]


@pytest.mark.parametrize("argv", [["top", "--count", "-1"], ["--stale-days", "-5", "stale"], ["stale", "-l", "x"]])
def test_invalid_numbers_are_usage_errors(argv: list[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        build_parser().parse_args(argv)
    assert excinfo.value.code == 2


def test_config_is_immutable() -> None:
    config = _config(["top"])

    with pytest.raises(AttributeError):
        config.limit = 1


# -- info --------------------------------------------------------------------


def test_info_prints_every_volume(monkeypatch: pytest.MonkeyPatch, scripted_ui) -> None:
    monkeypatch.setattr(
        volumes.psutil, "disk_partitions", lambda all=False: [SimpleNamespace(device="/dev/sda1", mountpoint="/")]
    )
    monkeypatch.setattr(
        volumes.psutil, "disk_usage", lambda mount: SimpleNamespace(total=4 * 1024**3, free=1024**3)
    )
    ui = scripted_ui()

    assert Sdisk(_config(["info"]), ui=ui).run()

    assert "/dev/sda1" in ui.output
    assert "4.0 GiB" in ui.output
    assert "3.0 GiB" in ui.output
    assert "1.0 GiB" in ui.output


# -- top ---------------------------------------------------------------------


def test_top_lists_largest_first(scenario: Path, scripted_ui) -> None:
    ui = scripted_ui()

    assert Sdisk(_config(["--non-interactive", "top", str(scenario)]), ui=ui).run()

    out = ui.output
    assert out.index("bravo.bin") < out.index("charlie.txt") < out.index("alpha.txt")
    assert ui.select_calls == []
    assert (scenario / "bravo.bin").exists()


def test_top_count_limits_listing(scenario: Path, scripted_ui) -> None:
    ui = scripted_ui()

    Sdisk(_config(["--non-interactive", "top", "--count", "1", str(scenario)]), ui=ui).run()

    assert "bravo.bin" in ui.output
    assert "alpha.txt" not in ui.output


def test_top_interactive_removes_picked_entries(scenario: Path, scripted_ui) -> None:
    ui = scripted_ui(pick=lambda items: [i for i, label in enumerate(items) if "bravo.bin" in label], answer=True)

    assert Sdisk(_config(["top", str(scenario)]), ui=ui).run()

    assert not (scenario / "bravo.bin").exists()
    assert (scenario / "alpha.txt").exists()
    assert "Removed" in ui.output


def test_top_on_missing_root_reports_nothing_found(tmp_path: Path, scripted_ui) -> None:
    ui = scripted_ui()

    assert Sdisk(_config(["top", str(tmp_path / "missing")]), ui=ui).run()

    assert "No entries found" in ui.output
    assert ui.select_calls == []


# -- stale / clean -----------------------------------------------------------


def test_stale_lists_only_old_entries(scenario: Path, scripted_ui) -> None:
    ui = scripted_ui(answer=False)

    assert Sdisk(_config(["--non-interactive", "stale", str(scenario)]), ui=ui).run()

    assert "bravo.bin" in ui.output
    assert "200 days" in ui.output
    assert "alpha.txt" not in ui.output
    assert "charlie.txt" not in ui.output
    assert "Aborted." in ui.output
    assert (scenario / "bravo.bin").exists()


def test_stale_directories_report_aggregated_size(tmp_path: Path, make_file, scripted_ui) -> None:
    old_dir = tmp_path / "root" / "archive"
    make_file(old_dir / "one.bin", size=3000, age=400)
    make_file(old_dir / "two.bin", size=2000, age=400)
    stamp = time.time() - 400 * 86400
    os.utime(old_dir, (stamp, stamp))
    ui = scripted_ui()

    Sdisk(_config(["--dry-run", "stale", str(tmp_path / "root")]), ui=ui).run()

    assert "4.9 KiB" in ui.output


def test_clean_dry_run_with_yes_removes_nothing(tmp_path: Path, make_file, scripted_ui) -> None:
    root = tmp_path / "root"
    first = make_file(root / "old-one.log", size=100, age=120)
    second = make_file(root / "old-two.log", size=200, age=365)
    ui = scripted_ui(pick=lambda items: list(range(len(items))), answer=True)

    assert Sdisk(_config(["clean", "--dry-run", "--yes", str(root)]), ui=ui).run()

    assert "Would remove:" in ui.output
    would_remove = ui.output.split("Would remove:", 1)[1]
    assert "old-one.log" in would_remove and "old-two.log" in would_remove
    assert first.exists() and second.exists()
    assert ui.select_calls == [] and ui.confirm_calls == []


def test_clean_non_interactive_yes_removes_all_candidates(tmp_path: Path, make_file, scripted_ui) -> None:
    root = tmp_path / "root"
    stale = make_file(root / "old.log", size=100, age=120)
    fresh = make_file(root / "new.log", size=100, age=1)
    ui = scripted_ui()

    assert Sdisk(_config(["clean", "--non-interactive", "--yes", str(root)]), ui=ui).run()

    assert not stale.exists()
    assert fresh.exists()
    assert ui.confirm_calls == []


def test_clean_refusal_keeps_files(tmp_path: Path, make_file, scripted_ui) -> None:
    root = tmp_path / "root"
    stale = make_file(root / "old.log", size=100, age=120)
    ui = scripted_ui(pick=lambda items: [0], answer=False)

    assert Sdisk(_config(["clean", str(root)]), ui=ui).run()

    assert stale.exists()
    assert ui.confirm_calls


def test_remove_reports_partial_failure(tmp_path: Path, make_file, scripted_ui) -> None:
    first = make_file(tmp_path / "first.txt", size=1)
    third = make_file(tmp_path / "third.txt", size=1)
    entries = [
        Entry(first, 1, EntryKind.FILE, 0.0),
        Entry(tmp_path / "second.txt", 1, EntryKind.FILE, 0.0),
        Entry(third, 1, EntryKind.FILE, 0.0),
    ]
    ui = scripted_ui()

    assert Sdisk(_config(["clean"]), ui=ui).remove(entries) is False

    assert not first.exists() and not third.exists()
    assert "Failed to remove" in ui.output
    assert "second.txt" in ui.output


# -- main exit codes ---------------------------------------------------------


def test_main_clean_returns_zero_after_removal(tmp_path: Path, make_file) -> None:
    stale = make_file(tmp_path / "root" / "old.log", size=10, age=120)

    assert main(["clean", "--non-interactive", "--yes", str(tmp_path / "root")]) == 0
    assert not stale.exists()


def test_main_unreadable_input_exits_with_input_error(
    tmp_path: Path, make_file, monkeypatch: pytest.MonkeyPatch
) -> None:
    stale = make_file(tmp_path / "root" / "old.log", size=10, age=120)

    def closed(*args):
        raise EOFError

    monkeypatch.setattr("builtins.input", closed)

    assert main(["clean", "--non-interactive", str(tmp_path / "root")]) == sdisk.EXIT_INPUT_ERROR
    assert stale.exists()


def test_main_reports_failed_removal(tmp_path: Path, make_file, monkeypatch: pytest.MonkeyPatch) -> None:
    make_file(tmp_path / "root" / "old.log", size=10, age=120)

    def refuse(self, missing_ok=False):
        raise PermissionError("Permission denied")

    monkeypatch.setattr(Path, "unlink", refuse)

    assert main(["clean", "--non-interactive", "--yes", str(tmp_path / "root")]) == 1


def test_main_clean_stale_directory_with_stale_children(tmp_path: Path, make_file) -> None:
    old_dir = tmp_path / "root" / "old"
    make_file(old_dir / "a.log", size=10, age=400)
    make_file(old_dir / "b.log", size=10, age=400)
    stamp = time.time() - 400 * 86400
    os.utime(old_dir, (stamp, stamp))

    assert main(["clean", "--non-interactive", "--yes", str(tmp_path / "root")]) == 0
    assert not old_dir.exists()


def test_remove_skips_entries_inside_removed_directory(tmp_path: Path, make_file, scripted_ui) -> None:
    child = make_file(tmp_path / "old" / "a.log", size=10)
    entries = [
        Entry(tmp_path / "old", 10, EntryKind.DIRECTORY, 0.0),
        Entry(child, 10, EntryKind.FILE, 0.0),
    ]
    ui = scripted_ui()

    assert Sdisk(_config(["clean"]), ui=ui).remove(entries) is True

    assert not (tmp_path / "old").exists()
    assert "Failed to remove" not in ui.output
    assert "removed with" in ui.output


def test_main_clean_overlapping_roots(tmp_path: Path, make_file) -> None:
    root = tmp_path / "root"
    top = make_file(root / "old.log", size=10, age=120)
    nested = make_file(root / "sub" / "older.log", size=10, age=120)

    assert main(["clean", "--non-interactive", "--yes", str(root), str(root / "sub")]) == 0
    assert not top.exists() and not nested.exists()
