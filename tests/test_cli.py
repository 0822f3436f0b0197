"""Tests for scheduling/event_cmd.py CLI handler."""

import io
import sys

import pytest

import pengingat_bot.config as config_mod
from pengingat_bot.scheduling.event_cmd import run_event_command


@pytest.fixture(autouse=True)
def _db(db_path, monkeypatch):
    monkeypatch.setattr(config_mod, "DB_PATH", db_path)


def _capture_stdout(fn, *args):
    old = sys.stdout
    sys.stdout = buf = io.StringIO()
    try:
        fn(*args)
    finally:
        sys.stdout = old
    return buf.getvalue()


def _add(note="Meeting", to="6281234", date="01-01-2099", time="09:00"):
    return _capture_stdout(
        run_event_command,
        ["add", "--to", to, "--date", date, "--time", time, "-m", note],
    )


def test_event_add_and_list():
    output = _add()
    assert "scheduled" in output
    assert "Meeting" in output

    output = _capture_stdout(run_event_command, ["list"])
    assert "01-01-2099 09:00" in output
    assert "Meeting" in output


def test_event_list_filters_by_recipient():
    _add(note="mine", to="111")
    _add(note="theirs", to="222")

    output = _capture_stdout(run_event_command, ["list", "--to", "111"])

    assert "mine" in output
    assert "theirs" not in output


def test_event_cancel():
    output = _add(note="to cancel")
    event_id = output.split()[1].rstrip(":")

    output = _capture_stdout(run_event_command, ["cancel", event_id])
    assert "cancelled" in output

    output = _capture_stdout(run_event_command, ["list"])
    assert "no pending events" in output


def test_event_cancel_unknown_exits():
    with pytest.raises(SystemExit):
        _capture_stdout(run_event_command, ["cancel", "999"])


def test_event_add_past_date_exits():
    with pytest.raises(SystemExit):
        _add(date="01-01-2000")
