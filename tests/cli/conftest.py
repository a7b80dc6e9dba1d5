"""Shared fixtures for CLI tests."""

import pytest

SNAPSHOT = """\
appointments:
  a1:
    status: booked
    staff_assigned: true
    staff_available: true
    scheduled_time: 2026-10-18T10:00:00+00:00
    card: {rank: i}
  b1:
    status: checked_in
    staff_available: true
    card: {rank: i, version: 2}
  c1:
    status: checked_in
    staff_available: false
    card: {rank: r}
"""


@pytest.fixture
def board_file(tmp_path):
    """A snapshot with one booked card and two checked-in cards."""
    path = tmp_path / "board.yaml"
    path.write_text(SNAPSHOT)
    return path


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "apptboard.yaml"
    path.write_text(
        """\
lifecycle:
  allow_cancel_after_completion: true
playbooks:
  express:
    description: Straight into the chair
    steps:
      - move: checked_in
      - advance
"""
    )
    return path
