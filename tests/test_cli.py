"""Tests for the command line."""

import json
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from vigil.cli import main
from vigil.config import Config
from vigil.core.errors import ApiError
from vigil.core.records import RawRecord
from vigil.monitor import VisitMonitor

from test_monitor import FakeRepository

NOW = datetime(2025, 11, 25, 12, 0)


@pytest.fixture
def repo():
    return FakeRepository(
        [
            RawRecord(1, "João Silva", "12345678901", True, "2025/11/20 10:00:00", 3),
            RawRecord(2, "Maria Santos", "98765432100", True, "2025/11/10 10:00:00", 10),
            RawRecord(3, "Ana Souza", "11122233344", True, "2025/11/25 12:00:00", 30),
        ]
    )


@pytest.fixture
def runner(repo):
    with patch("vigil.cli.build_monitor", side_effect=lambda config=None: VisitMonitor(repo, clock=lambda: NOW)):
        yield CliRunner()


class TestBoard:
    def test_shows_columns(self, runner):
        result = runner.invoke(main, ["board"])
        assert result.exit_code == 0
        assert "### Overdue (2)" in result.output
        assert "### Urgent (0)" in result.output
        assert "### Scheduled (1)" in result.output
        assert "123.456.789-01" in result.output
        assert "5 days overdue" in result.output

    def test_json(self, runner):
        result = runner.invoke(main, ["board", "--json"])
        data = json.loads(result.output)
        assert [r["id"] for r in data["overdue"]] == [2, 1]
        assert data["scheduled"][0]["label"] == "in 30 days"

    def test_search_no_match(self, runner):
        result = runner.invoke(main, ["board", "--search", "nobody"])
        assert "No records match 'nobody'." in result.output

    def test_fetch_error(self, runner, repo):
        repo.fetch_error = ApiError.timeout()
        result = runner.invoke(main, ["board"])
        assert result.exit_code == 1
        assert "timed out" in result.output


class TestAck:
    def test_single(self, runner, repo):
        result = runner.invoke(main, ["ack", "1"])
        assert result.exit_code == 0
        assert "Visit registered for 1" in result.output
        assert repo.updates == [(1, "2025/11/25 12:00:00")]

    def test_single_failure(self, runner, repo):
        repo.failing[1] = ApiError.from_status(404)
        result = runner.invoke(main, ["ack", "1"])
        assert result.exit_code == 1
        assert "could not be found" in result.output

    def test_batch_requires_confirmation(self, runner, repo):
        result = runner.invoke(main, ["ack", "1", "2"], input="n\n")
        assert result.exit_code == 1
        assert repo.updates == []

    def test_batch_partial_failure(self, runner, repo):
        repo.failing[2] = ApiError.from_status(500)
        result = runner.invoke(main, ["ack", "1", "2", "3", "--yes"])
        assert result.exit_code == 1
        assert "1 visits registered" not in result.output
        assert "2 visits registered" in result.output
        assert "1 failed" in result.output

    def test_bucket_selection(self, runner, repo):
        result = runner.invoke(main, ["ack", "--bucket", "overdue", "--yes"])
        assert result.exit_code == 0
        assert sorted(i for i, _ in repo.updates) == [1, 2]

    def test_nothing_selected(self, runner):
        result = runner.invoke(main, ["ack"])
        assert result.exit_code == 0
        assert "Nothing to acknowledge." in result.output


class FakeScheduler:
    """Runs each job once, then stops the way Ctrl+C would."""

    def __init__(self):
        self.jobs = []

    def add_job(self, func, trigger, **kwargs):
        self.jobs.append((func, trigger, kwargs))

    def start(self):
        for func, _, _ in self.jobs:
            func()
        raise KeyboardInterrupt


class TestWatch:
    @pytest.fixture
    def scheduler(self):
        scheduler = FakeScheduler()
        with patch("vigil.cli.BlockingScheduler", return_value=scheduler), patch(
            "vigil.cli.load_config", return_value=Config()
        ):
            yield scheduler

    def test_renders_until_stopped(self, runner, scheduler):
        result = runner.invoke(main, ["watch", "--interval", "15"])

        assert result.exit_code == 0
        assert "### Overdue (2)" in result.output
        assert "every 15s" in result.output
        assert "Stopped." in result.output

        _, trigger, kwargs = scheduler.jobs[0]
        assert trigger.interval == timedelta(seconds=15)
        assert kwargs["id"] == "refresh_board"

    def test_defaults_to_configured_interval(self, runner, scheduler):
        result = runner.invoke(main, ["watch"])
        assert "every 60s" in result.output
        assert scheduler.jobs[0][1].interval == timedelta(seconds=60)

    def test_search(self, runner, scheduler):
        result = runner.invoke(main, ["watch", "--search", "maria"])
        assert "Maria Santos" in result.output
        assert "João Silva" not in result.output

    def test_fetch_error_keeps_watching(self, runner, repo, scheduler):
        repo.fetch_error = ApiError.timeout()
        result = runner.invoke(main, ["watch"])
        assert result.exit_code == 0
        assert "Error:" in result.output
        assert "timed out" in result.output
        assert "Stopped." in result.output
