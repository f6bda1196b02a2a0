"""Tests for the Haslametrics ratings.xml normalizer."""

from datetime import date

import pytest

from watchability.data.providers.haslametrics import compute_tid, normalize_haslametrics
from watchability.models.stats import HaslametricsTeamStats, Provider

RATINGS_XML = (
    '<?xml version="1.0"?>'
    "<mydata>"
    '<mr rk="1" t="Michigan" id="130" oe="125.4" de="90.1" ou="70.2" '
    'mom="1.5" mmo="0.8" mmd="0.7" ptf="0.12" ap="1.000000" w="25" l="3"/>'
    '<mr rk="2" t="Duke" id="105" oe="123.0" de="91.0" ou="67.0" ap="0.987" w="24" l="4"/>'
    '<mr rk="3" id="77" oe="120.0" de="92.0" ou="68.0" ap="0.95" w="22" l="6"/>'
    '<mr rk="4" t="No Id" oe="119.0" de="93.0" ou="66.0" ap="0.93" w="21" l="7"/>'
    '<mr rk="5" t="Zero Id" id="0" oe="118.0" de="94.0" ou="65.0" ap="0.92" w="20" l="8"/>'
    "</mydata>"
)


@pytest.fixture
def parsed():
    return normalize_haslametrics(RATINGS_XML, as_of=date(2026, 2, 26))


def test_skips_elements_missing_name_or_id(parsed):
    assert [t.team_name for t in parsed] == ["Michigan", "Duke"]


def test_tid_formula(parsed):
    michigan, duke = parsed
    assert michigan.tid == 130 * 2 + 23 == 283
    assert duke.tid == compute_tid(105) == 233


def test_fields(parsed):
    michigan = parsed[0]
    assert isinstance(michigan, HaslametricsTeamStats)
    assert michigan.rank == 1
    assert michigan.adj_o == pytest.approx(125.4)
    assert michigan.adj_d == pytest.approx(90.1)
    assert michigan.pace == pytest.approx(70.2)
    assert michigan.momentum == pytest.approx(1.5)
    assert michigan.ptf == pytest.approx(0.12)
    assert (michigan.wins, michigan.losses) == (25, 3)
    assert michigan.provider == Provider.HASLAMETRICS
    assert michigan.as_of == date(2026, 2, 26)


def test_all_play_rescaled_to_percent(parsed):
    michigan, duke = parsed
    assert michigan.ap_pct == pytest.approx(100.0)
    assert duke.ap_pct == pytest.approx(98.7)
    assert duke.win_expectancy == pytest.approx(0.987)


@pytest.mark.parametrize("xml", ["", "   ", None, '<?xml version="1.0"?><mydata></mydata>'])
def test_empty_inputs(xml):
    assert normalize_haslametrics(xml) == []


def test_unparseable_attributes_default_to_zero():
    xml = '<?xml version="1.0"?><mydata><mr t="Odd" id="9" oe="abc" w="x"/></mydata>'
    [team] = normalize_haslametrics(xml)
    assert team.adj_o == 0.0
    assert team.wins == 0
    assert team.tid == 41
