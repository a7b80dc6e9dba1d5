"""Tests for 'apptboard playbook' commands."""

import json
from argparse import Namespace

import pytest

from apptboard.cli.playbook import playbook_list, playbook_run
from apptboard.lifecycle import Status
from apptboard.model.loader import load_board

AT = "2026-10-18T10:05:00+00:00"


def _run_args(board_file, name, card_id, version=None, json=False, config=None):
    return Namespace(
        board=str(board_file),
        config=config,
        json=json,
        at=AT,
        by="frontdesk",
        name=name,
        id=card_id,
        version=version,
    )


def test_playbook_list(capsys):
    args = Namespace(config=None, json=False)
    assert playbook_list(args) == 0

    out = capsys.readouterr().out
    assert "check_in_and_notify" in out
    assert "1. move to checked_in (end)" in out
    assert "2. signal notify_client" in out


def test_playbook_list_json_with_config(config_file, capsys):
    args = Namespace(config=str(config_file), json=True)
    assert playbook_list(args) == 0

    data = json.loads(capsys.readouterr().out)
    names = [p["name"] for p in data]
    assert names == sorted(names)
    express = next(p for p in data if p["name"] == "express")
    assert express["description"] == "Straight into the chair"
    assert express["steps"] == ["move to checked_in (end)", "advance"]


def test_playbook_run(board_file, capsys):
    assert playbook_run(_run_args(board_file, "check_in_and_notify", "a1")) == 0

    out = capsys.readouterr().out
    assert out.startswith("check_in_and_notify [PB-")
    assert "signal notify_client for a1" in out
    assert load_board(board_file).cards["a1"].column == Status.CHECKED_IN


def test_playbook_run_json(board_file, capsys):
    assert playbook_run(_run_args(board_file, "cancel_and_notify", "a1", version=1, json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["correlation_id"].startswith("PB-")
    assert [e["kind"] for e in data["events"]] == ["card_moved", "signal"]
    assert data["transitions"][0]["to_status"] == "cancelled"


def test_playbook_run_configured(board_file, config_file):
    args = _run_args(board_file, "express", "a1", config=str(config_file))
    assert playbook_run(args) == 0
    assert load_board(board_file).cards["a1"].column == Status.IN_SERVICE


def test_playbook_run_failure_leaves_file(board_file, capsys):
    before = board_file.read_text()
    with pytest.raises(SystemExit, match="1"):
        playbook_run(_run_args(board_file, "start_service", "c1"))

    err = capsys.readouterr().err
    assert "step 1" in err
    assert board_file.read_text() == before


def test_playbook_run_unknown(board_file, capsys):
    with pytest.raises(SystemExit, match="1"):
        playbook_run(_run_args(board_file, "nope", "a1", json=True))
    assert "nope" in json.loads(capsys.readouterr().err)["error"]


def test_playbook_run_stale_version(board_file, capsys):
    with pytest.raises(SystemExit, match="1"):
        playbook_run(_run_args(board_file, "start_service", "b1", version=1))
    assert "version 2" in capsys.readouterr().err


def test_playbook_run_unknown_card(board_file, capsys):
    with pytest.raises(SystemExit, match="1"):
        playbook_run(_run_args(board_file, "check_in_and_notify", "zz9"))
    assert "zz9" in capsys.readouterr().err
