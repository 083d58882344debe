"""Tests for the command-line interface."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from linear_tracker.__main__ import main, parse_args
from linear_tracker.cli import commands
from linear_tracker.models import (
    CompletionResult,
    EpicContext,
    ErrorKind,
    OperationResult,
    SyncResult,
    TaskStatus,
    TrackerConfig,
    UnifiedTask,
)
from linear_tracker.sync import LinearSyncEngine


def _task(task_id: str = "issue-1", **kwargs) -> UnifiedTask:
    defaults = {"title": "ENG-1: Fix login", "metadata": {"identifier": "ENG-1"}}
    defaults.update(kwargs)
    return UnifiedTask(id=task_id, **defaults)


@pytest.fixture
def engine() -> MagicMock:
    mock = MagicMock(spec=LinearSyncEngine)
    mock.config = TrackerConfig(team_id="team-1", project_id="proj-1")
    return mock


class TestParseArgs:
    """Tests for argument parsing."""

    def test_list_options(self):
        args = parse_args(["list", "--status", "open", "--status", "in_progress", "--ready"])
        assert args.command == "list"
        assert args.status == ["open", "in_progress"]
        assert args.ready is True
        assert args.labels is None

    def test_complete_reason(self):
        args = parse_args(["-vv", "complete", "ENG-1", "--reason", "done"])
        assert args.verbose == 2
        assert args.task_id == "ENG-1"
        assert args.reason == "done"

    def test_invalid_status_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["status", "ENG-1", "paused"])

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse_args([])


class TestCommands:
    """Tests for command implementations."""

    def test_check_success(self, engine, capsys):
        engine.connect.return_value = OperationResult(True, "Connected to Linear as Ada")

        assert commands.run_check(engine) == 0

        out = capsys.readouterr().out
        assert "Connected to Linear as Ada" in out
        assert "Project: proj-1" in out

    def test_check_failure(self, engine, capsys):
        engine.connect.return_value = OperationResult(
            False, "Failed to connect to Linear", error=ErrorKind.TRANSPORT, detail="401"
        )

        assert commands.run_check(engine) == 1
        assert "Failed to connect" in capsys.readouterr().err

    def test_list_builds_filter(self, engine, capsys):
        engine.get_tasks.return_value = [_task()]

        assert commands.run_list(engine, ["open"], ["urgent"], ready=True, limit=5) == 0

        filter_ = engine.get_tasks.call_args.args[0]
        assert filter_.status == [TaskStatus.OPEN]
        assert filter_.labels == ["urgent"]
        assert filter_.ready is True
        assert filter_.limit == 5
        assert "ENG-1: Fix login" in capsys.readouterr().out

    def test_list_empty(self, engine, capsys):
        engine.get_tasks.return_value = []
        assert commands.run_list(engine) == 0
        assert "No tasks found" in capsys.readouterr().out

    def test_list_negative_limit(self, engine, capsys):
        assert commands.run_list(engine, limit=-1) == 1
        engine.get_tasks.assert_not_called()

    def test_next(self, engine, capsys):
        engine.get_next_task.return_value = _task(status=TaskStatus.IN_PROGRESS)

        assert commands.run_next(engine) == 0
        assert "in_progress" in capsys.readouterr().out

    def test_show_missing(self, engine, capsys):
        engine.get_task.return_value = None

        assert commands.run_show(engine, "ENG-9") == 1
        assert "Task not found: ENG-9" in capsys.readouterr().err

    def test_sync_reports_counts(self, engine, capsys):
        engine.sync.return_value = SyncResult(
            True,
            "Synced 3 tasks from Linear",
            synced_at="2024-01-01T00:00:00.000Z",
            added=2,
            updated=1,
        )

        assert commands.run_sync(engine) == 0
        out = capsys.readouterr().out
        assert "Added: 2" in out
        assert "Updated: 1" in out
        assert "Removed" not in out

    def test_complete_passes_reason(self, engine, capsys):
        engine.complete_task.return_value = CompletionResult(
            True, "Task ENG-1 marked as complete", _task()
        )

        assert commands.run_complete(engine, "ENG-1", "done") == 0
        engine.complete_task.assert_called_once_with("ENG-1", "done")

    def test_claim_failure_shows_detail(self, engine, capsys):
        engine.claim_task.return_value = OperationResult(
            False,
            "Could not find started state",
            error=ErrorKind.WORKFLOW_STATE_MISSING,
            detail="No started state found in team workflow",
        )

        assert commands.run_claim(engine, "ENG-1") == 1
        captured = capsys.readouterr()
        assert "Could not find started state" in captured.err
        assert "No started state found" in captured.out

    def test_epics_with_context(self, engine, capsys):
        engine.get_epics.return_value = [
            _task("epic-1", type="epic", metadata={"child_count": 4, "completed_child_count": 1})
        ]
        engine.get_epic_context.return_value = EpicContext(
            name="ENG-10: Auth", content="", completed_count=1, total_count=4
        )

        assert commands.run_epics(engine) == 0
        out = capsys.readouterr().out
        assert "[1/4]" in out
        assert "Active epic: ENG-10: Auth" in out


class TestMain:
    """Tests for the main entry point."""

    def test_sync_without_api_key(self, tmp_path: Path, capsys):
        """Without a key the command fails cleanly with exit code 1."""
        with patch.dict("os.environ", {}, clear=True), pytest.raises(SystemExit) as exc_info:
            main(["--project-root", str(tmp_path), "sync"])

        assert exc_info.value.code == 1
        assert "Linear client not initialized" in capsys.readouterr().err

    def test_invalid_override_reported(self, tmp_path: Path, capsys):
        """A bad env override is printed and the command still runs."""
        env = {"LINEAR_LABEL_NAME": "   "}
        with patch.dict("os.environ", env, clear=True), pytest.raises(SystemExit) as exc_info:
            main(["--project-root", str(tmp_path), "next"])

        assert exc_info.value.code == 0
        assert "Invalid LINEAR_* override" in capsys.readouterr().err

    def test_engine_disposed(self, tmp_path: Path):
        engine = MagicMock(spec=LinearSyncEngine)
        engine.get_next_task.return_value = None
        with (
            patch.dict("os.environ", {}, clear=True),
            patch.object(LinearSyncEngine, "from_settings", return_value=engine),
            pytest.raises(SystemExit) as exc_info,
        ):
            main(["--project-root", str(tmp_path), "next"])

        assert exc_info.value.code == 0
        engine.dispose.assert_called_once()
