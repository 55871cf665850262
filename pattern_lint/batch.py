"""Recursive, sequential analysis of every eligible file under a directory."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from pattern_lint.aggregate import AnalysisResult
from pattern_lint.analysis import ToolProfile, analyze_text, io_failure_result, read_source
from pattern_lint.config import DEFAULT_EXCLUDE_DIRS
from pattern_lint.rules.base import IO_RULE_ID, SEVERITIES

logger = logging.getLogger(__name__)


class QueueState(Enum):
    """Lifecycle of a :class:`WorkQueue`."""

    IDLE = "idle"
    PROCESSING = "processing"
    DRAINING = "draining"


class WorkQueue:
    """FIFO of pending inputs drained one task at a time.

    ``IDLE`` accepts new tasks. ``drain`` moves to ``DRAINING`` while it pulls
    the next task and to ``PROCESSING`` while the handler runs, then returns to
    ``IDLE`` once the queue is empty or the handler raises.
    """

    def __init__(self, tasks: deque[Path] | None = None) -> None:
        self._tasks: deque[Path] = tasks if tasks is not None else deque()
        self._state = QueueState.IDLE

    @property
    def state(self) -> QueueState:
        return self._state

    def __len__(self) -> int:
        return len(self._tasks)

    def enqueue(self, task: Path) -> None:
        if self._state is not QueueState.IDLE:
            raise RuntimeError(f"cannot enqueue while {self._state.value}")
        self._tasks.append(task)

    def extend(self, tasks: Iterable[Path]) -> None:
        for task in tasks:
            self.enqueue(task)

    def drain(self, handler: Callable[[Path], None]) -> int:
        """Run ``handler`` for every queued task in order; return how many ran."""
        if self._state is not QueueState.IDLE:
            raise RuntimeError(f"queue is already {self._state.value}")
        processed = 0
        try:
            self._state = QueueState.DRAINING
            while self._tasks:
                task = self._tasks.popleft()
                self._state = QueueState.PROCESSING
                handler(task)
                processed += 1
                self._state = QueueState.DRAINING
        finally:
            self._state = QueueState.IDLE
        return processed


@dataclass(slots=True)
class BatchSummary:
    """Running totals across every input of a batch run."""

    root: str
    results: list[AnalysisResult] = field(default_factory=list)
    totals: dict[str, int] = field(default_factory=lambda: {key: 0 for key in SEVERITIES})
    io_failures: int = 0

    def add(self, result: AnalysisResult) -> None:
        self.results.append(result)
        for severity, count in result.counts.items():
            self.totals[severity] += count
        if any(finding.rule_id == IO_RULE_ID for finding in result.errors):
            self.io_failures += 1

    @property
    def files(self) -> int:
        return len(self.results)

    @property
    def analyzed(self) -> int:
        return len(self.results) - self.io_failures

    @property
    def failed(self) -> list[str]:
        return [result.name for result in self.results if not result.passed]

    @property
    def passed(self) -> bool:
        return all(result.passed for result in self.results)


def discover_files(
    root: Path,
    profile: ToolProfile,
    *,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
) -> list[Path]:
    """Depth-first walk in name order, skipping hidden and excluded directories."""
    excluded = set(exclude_dirs)
    found: list[Path] = []

    def _walk(directory: Path) -> None:
        try:
            entries = sorted(directory.iterdir(), key=lambda item: item.name)
        except OSError as exc:
            logger.warning("Cannot list %s: %s", directory, exc)
            return
        for entry in entries:
            if entry.is_dir():
                if entry.name.startswith(".") or entry.name in excluded:
                    logger.debug("skip directory %s", entry)
                    continue
                if entry.is_symlink():
                    logger.debug("skip symlinked directory %s", entry)
                    continue
                _walk(entry)
            elif profile.accepts(entry):
                found.append(entry)

    _walk(root)
    return found


def run_batch(
    root: Path,
    profile: ToolProfile,
    *,
    exclude_dirs: Iterable[str] = DEFAULT_EXCLUDE_DIRS,
    on_result: Callable[[AnalysisResult], None] | None = None,
    queue: WorkQueue | None = None,
) -> BatchSummary:
    """Analyze every eligible file under ``root``; unreadable files become ``io`` findings."""
    summary = BatchSummary(root=str(root))
    work = queue if queue is not None else WorkQueue()
    work.extend(discover_files(root, profile, exclude_dirs=exclude_dirs))
    logger.debug("%s: %d file(s) queued", root, len(work))

    def _handle(path: Path) -> None:
        try:
            buffer = read_source(path)
        except (OSError, UnicodeDecodeError) as exc:
            logger.debug("read failed for %s: %s", path, exc)
            result = io_failure_result(str(path), exc)
        else:
            result = analyze_text(str(path), buffer, profile)
        summary.add(result)
        if on_result is not None:
            on_result(result)

    work.drain(_handle)
    return summary
