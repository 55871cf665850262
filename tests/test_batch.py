"""Directory discovery, batch run and work-queue tests."""

from __future__ import annotations

from collections import deque
from pathlib import Path

import pytest

from pattern_lint.analysis import build_profile
from pattern_lint.batch import QueueState, WorkQueue, discover_files, run_batch


def _write(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


def test_discovery_is_depth_first_sorted_and_filtered(tmp_path: Path) -> None:
    _write(tmp_path / "b.js", "")
    _write(tmp_path / "a" / "z.js", "")
    _write(tmp_path / "a" / "inner" / "y.mjs", "")
    _write(tmp_path / "c.min.js", "")
    _write(tmp_path / "notes.txt", "")
    _write(tmp_path / "page.html", "")
    _write(tmp_path / ".git" / "hook.js", "")
    _write(tmp_path / "node_modules" / "dep.js", "")
    _write(tmp_path / "vendor" / "lib.js", "")

    found = discover_files(tmp_path, build_profile("modernize"))
    assert [path.relative_to(tmp_path).as_posix() for path in found] == [
        "a/inner/y.mjs",
        "a/z.js",
        "b.js",
        "vendor/lib.js",
    ]

    trimmed = discover_files(tmp_path, build_profile("modernize"), exclude_dirs=["vendor"])
    assert "node_modules/dep.js" in [path.relative_to(tmp_path).as_posix() for path in trimmed]
    assert "vendor/lib.js" not in [path.relative_to(tmp_path).as_posix() for path in trimmed]


def test_markup_profile_discovers_markup_files(tmp_path: Path) -> None:
    _write(tmp_path / "index.HTML", "")
    _write(tmp_path / "about.htm", "")
    _write(tmp_path / "app.js", "")

    found = discover_files(tmp_path, build_profile("markup"))
    assert [path.name for path in found] == ["about.htm", "index.HTML"]


def test_discovery_does_not_follow_symlinked_directories(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "a.js", "")
    (tmp_path / "src" / "loop").symlink_to(tmp_path / "src", target_is_directory=True)
    (tmp_path / "alias").symlink_to(tmp_path / "src", target_is_directory=True)

    found = discover_files(tmp_path, build_profile("modernize"))

    assert [path.relative_to(tmp_path).as_posix() for path in found] == ["src/a.js"]


def test_batch_reports_unreadable_file_and_continues(tmp_path: Path) -> None:
    _write(tmp_path / "a.js", "var a = 1;\n")
    _write(tmp_path / "b.js", b"const bad = '\xff\xfe';\n")
    _write(tmp_path / "c.js", "const c = 2;\n")

    seen: list[str] = []
    summary = run_batch(
        tmp_path,
        build_profile("modernize"),
        on_result=lambda result: seen.append(Path(result.name).name),
    )

    assert seen == ["a.js", "b.js", "c.js"]
    assert summary.files == 3
    assert summary.analyzed == 2
    assert summary.io_failures == 1
    assert not summary.passed
    assert summary.failed == [str(tmp_path / "b.js")]

    failed = summary.results[1]
    (finding,) = failed.errors
    assert finding.rule_id == "io"
    assert (finding.line, finding.column) == (1, 1)
    assert summary.totals["error"] == 1
    assert summary.totals["warning"] == 1


def test_batch_of_clean_files_passes(tmp_path: Path) -> None:
    _write(tmp_path / "one.js", "const a = 1;\n")
    _write(tmp_path / "two.js", "let b = 2;\n")

    summary = run_batch(tmp_path, build_profile("modernize"))

    assert summary.passed
    assert summary.analyzed == 2
    assert summary.failed == []


def test_batch_of_empty_directory_passes(tmp_path: Path) -> None:
    summary = run_batch(tmp_path, build_profile("fundamentals"))

    assert summary.files == 0
    assert summary.passed


def test_work_queue_drains_in_order_and_returns_to_idle() -> None:
    queue = WorkQueue()
    queue.extend([Path("a"), Path("b")])
    states: list[QueueState] = []
    handled: list[str] = []

    def _handler(task: Path) -> None:
        states.append(queue.state)
        handled.append(task.name)

    assert queue.drain(_handler) == 2
    assert handled == ["a", "b"]
    assert states == [QueueState.PROCESSING, QueueState.PROCESSING]
    assert queue.state is QueueState.IDLE
    assert len(queue) == 0


def test_work_queue_rejects_enqueue_while_draining() -> None:
    queue = WorkQueue(deque([Path("a")]))

    def _handler(task: Path) -> None:
        queue.enqueue(task)

    with pytest.raises(RuntimeError, match="cannot enqueue while processing"):
        queue.drain(_handler)
    assert queue.state is QueueState.IDLE


def test_work_queue_rejects_reentrant_drain() -> None:
    queue = WorkQueue(deque([Path("a")]))

    with pytest.raises(RuntimeError, match="already processing"):
        queue.drain(lambda task: queue.drain(lambda inner: None))
    assert queue.state is QueueState.IDLE
