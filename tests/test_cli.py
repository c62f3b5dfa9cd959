"""Tests for the week-assigned-sync command line."""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest

from week_assigned_sync import cli
from week_assigned_sync.reconcile import WeekAssignedUpdater

from conftest import DEADLINE_COL, STATUS_COL, TARGET_COL, TODAY, make_item


@pytest.fixture
def patched(cfg, fake_client):
    cfg.board_ids = ["100"]
    fake_client.add_board("100", "Ops", [DEADLINE_COL, TARGET_COL, STATUS_COL], [
        make_item("1", deadline="2026-10-26", week_assigned="This Week"),
    ])

    def make_updater(c, notifier=None):
        return WeekAssignedUpdater(c, client=fake_client, notifier=notifier, today_fn=lambda: TODAY)

    with patch.object(cli, "load_config", return_value=cfg), \
            patch.object(cli, "WeekAssignedUpdater", side_effect=make_updater):
        yield fake_client


class TestParser:
    def test_sweep_flags(self):
        args = cli.build_parser().parse_args(["sweep", "--dry-run", "--board", "1", "--board", "2"])
        assert args.dry_run is True
        assert args.board == ["1", "2"]
        assert args.func is cli.run_sweep

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args([])


class TestSweepCommand:
    def test_sweep_writes_and_reports(self, patched, tmp_path):
        out = tmp_path / "result.json"
        args = cli.build_parser().parse_args(["sweep", "--output", str(out)])

        assert cli.run_sweep(args) == 0
        assert len(patched.writes) == 1
        assert json.loads(out.read_text())["successful"] == 1

    def test_dry_run(self, patched):
        args = cli.build_parser().parse_args(["sweep", "--dry-run"])
        assert cli.run_sweep(args) == 0
        assert patched.writes == []

    def test_failed_board_exit_code(self, patched):
        args = cli.build_parser().parse_args(["sweep", "--board", "404"])
        assert cli.run_sweep(args) == 1

    def test_main_exits_with_code(self, patched):
        with pytest.raises(SystemExit) as exc:
            cli.main(["sweep", "--dry-run"])
        assert exc.value.code == 0
