"""Tests for 'apptboard board' commands."""

import json
from argparse import Namespace

import pytest

from apptboard.cli.board import board_move, board_show
from apptboard.lifecycle import Status
from apptboard.model.loader import load_board

AT = "2026-10-18T10:05:00+00:00"


def _move_args(board_file, card_id, column, version, after=None, before=None, json=False, config=None):
    return Namespace(
        board=str(board_file),
        config=config,
        json=json,
        at=AT,
        by="frontdesk",
        id=card_id,
        column=column,
        version=version,
        after=after,
        before=before,
    )


def test_board_show(board_file, capsys):
    args = Namespace(board=str(board_file), config=None, json=False)
    assert board_show(args) == 0

    out = capsys.readouterr().out
    assert "booked  (1)" in out
    assert "checked_in  (2)" in out
    assert "a1" in out


def test_board_show_json(board_file, capsys):
    args = Namespace(board=str(board_file), config=None, json=True)
    assert board_show(args) == 0

    data = json.loads(capsys.readouterr().out)
    assert [col["column"] for col in data] == [s.value for s in Status]
    checked_in = data[1]
    assert [c["id"] for c in checked_in["cards"]] == ["b1", "c1"]
    assert checked_in["cards"][0] == {"id": "b1", "rank": "i", "version": 2}


def test_board_show_missing_file(tmp_path):
    args = Namespace(board=str(tmp_path / "nope.yaml"), config=None, json=False)
    with pytest.raises(SystemExit, match="1"):
        board_show(args)


def test_board_move(board_file, capsys):
    assert board_move(_move_args(board_file, "a1", "checked_in", 1, after="c1")) == 0

    out = capsys.readouterr().out
    assert "moved a1: booked → checked_in" in out

    board = load_board(board_file)
    assert board.cards["a1"].column == Status.CHECKED_IN
    assert board.cards["a1"].version == 2
    assert board.appointments["a1"].status == Status.CHECKED_IN


def test_board_move_json(board_file, capsys):
    assert board_move(_move_args(board_file, "a1", "checked_in", 1, after="b1", before="c1", json=True)) == 0

    data = json.loads(capsys.readouterr().out)
    assert data["events"][0]["kind"] == "card_moved"
    assert data["transitions"][0]["triggered_by"] == "frontdesk"
    assert data["transitions"][0]["timestamp"] == AT
    assert "i" < data["events"][0]["rank"] < "r"


def test_board_move_stale_version(board_file, capsys):
    before = board_file.read_text()
    with pytest.raises(SystemExit, match="1"):
        board_move(_move_args(board_file, "a1", "cancelled", 3))

    assert "version" in capsys.readouterr().err
    assert board_file.read_text() == before


def test_board_move_guard_failure_json(board_file, capsys):
    with pytest.raises(SystemExit, match="1"):
        board_move(_move_args(board_file, "c1", "in_service", 1, json=True))

    err = json.loads(capsys.readouterr().err)
    assert "staff_available" in err["error"]


def test_board_move_unknown_column(board_file, capsys):
    with pytest.raises(SystemExit, match="1"):
        board_move(_move_args(board_file, "a1", "limbo", 1))
    assert "unknown column" in capsys.readouterr().err


def test_board_move_bad_time(board_file):
    args = _move_args(board_file, "a1", "cancelled", 1)
    args.at = "soon"
    with pytest.raises(SystemExit, match="1"):
        board_move(args)


def test_board_move_uses_config(config_file, tmp_path):
    """A policy from the config file applies to moves."""
    path = tmp_path / "done.yaml"
    path.write_text(
        """\
appointments:
  d1:
    status: completed
    card: {rank: i}
"""
    )
    with pytest.raises(SystemExit):
        board_move(_move_args(path, "d1", "cancelled", 1))
    assert board_move(_move_args(path, "d1", "cancelled", 1, config=str(config_file))) == 0
    assert load_board(path).cards["d1"].column == Status.CANCELLED


def test_board_move_naive_snapshot_time(tmp_path, capsys):
    path = tmp_path / "naive.yaml"
    path.write_text(
        """\
appointments:
  a1:
    status: booked
    staff_assigned: true
    scheduled_time: 2026-10-18 10:00:00
    card: {rank: i}
"""
    )
    assert board_move(_move_args(path, "a1", "checked_in", 1)) == 0
    assert load_board(path).cards["a1"].column == Status.CHECKED_IN


def test_board_show_malformed_snapshot(tmp_path, capsys):
    path = tmp_path / "bad.yaml"
    path.write_text("appointments:\n  a1:\n    card: {rank: i, version: two}\n")
    with pytest.raises(SystemExit, match="1"):
        board_show(Namespace(board=str(path), config=None, json=False))
    assert "version" in capsys.readouterr().err
