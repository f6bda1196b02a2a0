"""Tests for the BartTorvik T-Rank normalizer."""

from datetime import date

import pytest

from watchability.data.providers.torvik import MIN_COLUMNS, normalize_barttorvik
from watchability.models.stats import BartTorvikTeamStats, Provider


def make_row(name="Michigan", record="25-3", rank=1, columns=MIN_COLUMNS, overrides=None):
    row = [0.0] * columns
    values = {
        0: rank, 1: name, 2: "B10", 3: record,
        4: 128.9, 6: 91.7, 8: 0.9804, 41: 9.5, 44: 67.2,
    }
    values.update(overrides or {})
    for idx, value in values.items():
        if idx < columns:
            row[idx] = value
    return row


def test_parses_full_row():
    [team] = normalize_barttorvik([make_row()], as_of=date(2026, 2, 26))

    assert isinstance(team, BartTorvikTeamStats)
    assert team.team_name == "Michigan"
    assert team.trank == 1
    assert team.adj_o == pytest.approx(128.9)
    assert team.adj_d == pytest.approx(91.7)
    assert team.tempo == pytest.approx(67.2)
    assert team.barthag == pytest.approx(0.9804)
    assert team.wab == pytest.approx(9.5)
    assert team.conference == "B10"
    assert (team.wins, team.losses) == (25, 3)
    assert team.provider == Provider.BARTTORVIK
    assert team.as_of == date(2026, 2, 26)


def test_short_row_is_skipped():
    assert normalize_barttorvik([make_row(columns=MIN_COLUMNS - 1)]) == []


def test_bad_record_degrades_to_zero():
    result = normalize_barttorvik([make_row(record="not-a-record-string")])
    assert len(result) == 1
    assert (result[0].wins, result[0].losses) == (0, 0)


@pytest.mark.parametrize("name", ["", "   ", None, 42])
def test_missing_name_is_skipped(name):
    assert normalize_barttorvik([make_row(name=name)]) == []


def test_numeric_strings_and_garbage():
    row = make_row(overrides={4: "120.5", 6: "n/a"})
    [team] = normalize_barttorvik([row])
    assert team.adj_o == pytest.approx(120.5)
    assert team.adj_d == 0.0


@pytest.mark.parametrize("payload", [None, {}, "[]", 12])
def test_non_list_payload(payload):
    assert normalize_barttorvik(payload) == []


def test_bad_rows_do_not_abort_batch():
    rows = [make_row("Duke"), "garbage", [1, 2], make_row(name=""), make_row("Houston")]
    names = [t.team_name for t in normalize_barttorvik(rows)]
    assert names == ["Duke", "Houston"]
