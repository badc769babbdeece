"""Tests for soft delete strategies and batch cleanup."""

import sys
from pathlib import Path

import pytest

from session_guard.cleanup.executor import (
    CleanupResult,
    QuarantineStrategy,
    SoftDeleteOutcome,
    SoftDeleter,
    TrashStrategy,
    run_command,
    soft_delete_sessions,
    unique_path,
)
from tests.conftest import NAMESPACE, make_record


class FakeRunner:
    """Command runner returning a fixed exit code or raising."""

    def __init__(self, result: int | BaseException = 0):
        self.result = result
        self.calls: list[tuple[str, list[str], float]] = []

    async def __call__(self, command, args, timeout):
        self.calls.append((command, list(args), timeout))
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


class FailingStrategy:
    name = "broken"

    def __init__(self, exc: Exception | None = None):
        self.exc = exc

    async def remove(self, path, root):
        if self.exc:
            raise self.exc
        return SoftDeleteOutcome.failure("nope")


class TestRunCommand:
    @pytest.mark.asyncio
    async def test_exit_code(self):
        assert await run_command(sys.executable, ["-c", "raise SystemExit(3)"], 10) == 3

    @pytest.mark.asyncio
    async def test_timeout_kills(self):
        with pytest.raises(TimeoutError):
            await run_command(sys.executable, ["-c", "import time; time.sleep(30)"], 0.2)

    @pytest.mark.asyncio
    async def test_missing_command(self):
        with pytest.raises(OSError):
            await run_command("definitely-not-a-real-command-xyz", [], 1)


class TestTrashStrategy:
    """Tests for the external trash command strategy."""

    @pytest.mark.asyncio
    async def test_success(self, tmp_path):
        runner = FakeRunner(0)
        strategy = TrashStrategy(runner=runner, timeout=5)

        outcome = await strategy.remove(tmp_path / "a.jsonl", tmp_path)

        assert outcome.ok
        assert outcome.method == "trash"
        assert runner.calls == [("trash", [str(tmp_path / "a.jsonl")], 5)]

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, tmp_path):
        outcome = await TrashStrategy(runner=FakeRunner(2)).remove(tmp_path / "a", tmp_path)
        assert not outcome.ok
        assert outcome.error == "trash exited with code 2"

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path):
        strategy = TrashStrategy(runner=FakeRunner(TimeoutError()), timeout=10)
        outcome = await strategy.remove(tmp_path / "a", tmp_path)
        assert outcome.error == "trash timed out after 10s"

    @pytest.mark.asyncio
    async def test_missing_binary(self, tmp_path):
        strategy = TrashStrategy(runner=FakeRunner(FileNotFoundError("no trash")))
        outcome = await strategy.remove(tmp_path / "a", tmp_path)
        assert not outcome.ok
        assert "unavailable" in outcome.error


class TestQuarantineStrategy:
    """Tests for rename-into-quarantine."""

    @pytest.mark.asyncio
    async def test_mirrors_relative_path(self, session_root, write_session):
        path = write_session("s.jsonl", size=10)

        outcome = await QuarantineStrategy().remove(path, session_root)

        target = session_root.parent / "session-trash" / NAMESPACE / "s.jsonl"
        assert outcome.ok
        assert outcome.method == "quarantine"
        assert outcome.target == str(target)
        assert target.read_text() == "x" * 10
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_never_overwrites(self, session_root, write_session, tmp_path):
        trash = tmp_path / "trash"
        existing = trash / NAMESPACE / "s.jsonl"
        existing.parent.mkdir(parents=True)
        existing.write_text("old")
        path = write_session("s.jsonl", size=5)

        outcome = await QuarantineStrategy(trash_dir=trash).remove(path, session_root)

        assert outcome.ok
        assert existing.read_text() == "old"
        target = Path(outcome.target)
        assert target.parent == existing.parent
        assert target.name.startswith("s_")
        assert target.suffix == ".jsonl"

    @pytest.mark.asyncio
    async def test_outside_root_uses_basename(self, session_root, tmp_path):
        stray = tmp_path / "elsewhere" / "x.jsonl"
        stray.parent.mkdir()
        stray.write_text("{}")
        trash = tmp_path / "trash"

        outcome = await QuarantineStrategy(trash_dir=trash).remove(stray, session_root)

        assert outcome.target == str(trash / "x.jsonl")

    @pytest.mark.asyncio
    async def test_missing_source(self, session_root):
        outcome = await QuarantineStrategy().remove(session_root / "gone.jsonl", session_root)
        assert not outcome.ok
        assert outcome.error


class TestUniquePath:
    @pytest.mark.asyncio
    async def test_free_path_unchanged(self, tmp_path):
        assert await unique_path(tmp_path / "a.jsonl") == tmp_path / "a.jsonl"

    @pytest.mark.asyncio
    async def test_taken_path_gets_suffix(self, tmp_path):
        (tmp_path / "a.jsonl").write_text("")
        result = await unique_path(tmp_path / "a.jsonl")
        assert result != tmp_path / "a.jsonl"
        assert not result.exists()
        assert result.name.startswith("a_")


class TestSoftDeleter:
    @pytest.mark.asyncio
    async def test_falls_back_to_quarantine(self, session_root, write_session):
        path = write_session("s.jsonl")
        deleter = SoftDeleter([TrashStrategy(runner=FakeRunner(1)), QuarantineStrategy()])

        outcome = await deleter.soft_delete(path, session_root)

        assert outcome.ok
        assert outcome.method == "quarantine"

    @pytest.mark.asyncio
    async def test_strategy_exception_is_a_failure(self, session_root):
        deleter = SoftDeleter([FailingStrategy(RuntimeError("boom"))])
        outcome = await deleter.soft_delete(session_root / "a.jsonl", session_root)
        assert not outcome.ok
        assert outcome.error == "boom"

    @pytest.mark.asyncio
    async def test_last_failure_returned(self, session_root):
        deleter = SoftDeleter([FailingStrategy(RuntimeError("first")), FailingStrategy()])
        outcome = await deleter.soft_delete(session_root / "a.jsonl", session_root)
        assert outcome.error == "nope"

    @pytest.mark.asyncio
    async def test_no_strategies(self, session_root):
        outcome = await SoftDeleter([]).soft_delete(session_root / "a", session_root)
        assert not outcome.ok


class TestSoftDeleteSessions:
    """Tests for batch soft delete."""

    @pytest.mark.asyncio
    async def test_counts_and_freed_bytes(self, session_root, write_session):
        paths = [write_session(f"{i}.jsonl", size=100 * (i + 1)) for i in range(3)]
        records = [
            make_record(str(p), size_bytes=100 * (i + 1)) for i, p in enumerate(paths)
        ]
        deleter = SoftDeleter([TrashStrategy(runner=FakeRunner(0))])

        result = await soft_delete_sessions(records, session_root, deleter)

        assert result.attempted == 3
        assert result.succeeded == 3
        assert result.freed_bytes == 600
        assert result.trashed == 3
        assert result.quarantined == 0

    @pytest.mark.asyncio
    async def test_refuses_active(self, session_root, write_session):
        path = write_session("active.jsonl")
        deleter = SoftDeleter([QuarantineStrategy()])

        result = await soft_delete_sessions(
            [make_record(str(path), is_active=True)], session_root, deleter
        )

        assert result.failed == 1
        assert path.exists()
        assert "active.jsonl: Active session cannot be deleted" in result.failures

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_batch(self, session_root, write_session):
        good = write_session("good.jsonl", size=50)
        records = [
            make_record(str(session_root / NAMESPACE / "missing.jsonl"), size_bytes=10),
            make_record(str(good), size_bytes=50),
        ]

        result = await soft_delete_sessions(
            records, session_root, SoftDeleter([QuarantineStrategy()])
        )

        assert result.succeeded == 1
        assert result.failed == 1
        assert result.freed_bytes == 50
        assert result.quarantined == 1
        assert result.failures[0].startswith("missing.jsonl: ")


class TestCleanupResult:
    def test_failure_preview(self):
        result = CleanupResult(failures=[f"f{i}" for i in range(8)])
        shown, omitted = result.failure_preview()
        assert shown == ["f0", "f1", "f2", "f3", "f4"]
        assert omitted == 3
