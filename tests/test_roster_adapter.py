"""Tests for roster import from CSV, TSV and JSON."""

import json
import os
import sys

import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from race_roulette.adapters.base import RosterImportError
from race_roulette.adapters.roster_adapter import RosterAdapter
from race_roulette.core.models import Tier


EXAMPLE_CSV = """name,tier,bestEvents
John Smith,High,100m,200m
Jane Doe,Med,400m
Bob Wilson,Low,800m,1 Mile
"""


@pytest.fixture
def adapter():
    return RosterAdapter()


class TestCsv:
    def test_example_roster(self, adapter):
        athletes = adapter.parse_text(EXAMPLE_CSV)
        assert [(a.name, a.tier, a.best_events) for a in athletes] == [
            ('John Smith', Tier.HIGH, '100m,200m'),
            ('Jane Doe', Tier.MED, '400m'),
            ('Bob Wilson', Tier.LOW, '800m,1 Mile'),
        ]

    def test_fresh_unique_ids(self, adapter):
        first = adapter.parse_text(EXAMPLE_CSV)
        second = adapter.parse_text(EXAMPLE_CSV)
        ids = {a.id for a in first + second}
        assert len(ids) == 6

    def test_quoted_events_and_optional_column(self, adapter):
        text = 'Name,Tier,Best Events\n"Doe, Jane",medium,"400m, 800m"\nAl,low,\n'
        athletes = adapter.parse_text(text)
        assert athletes[0].name == 'Doe, Jane'
        assert athletes[0].tier == Tier.MED
        assert athletes[0].best_events == '400m, 800m'
        assert athletes[1].best_events is None

    def test_without_best_events_column(self, adapter):
        athletes = adapter.parse_text('tier,name\nH,Ann\n\nl,Bo\n')
        assert [(a.name, a.tier) for a in athletes] == [('Ann', Tier.HIGH), ('Bo', Tier.LOW)]
        assert all(a.best_events is None for a in athletes)

    def test_missing_required_column(self, adapter):
        with pytest.raises(RosterImportError, match='"name" and "tier"'):
            adapter.parse_text('name,events\nAnn,100m\n')

    def test_unknown_tier_names_the_row(self, adapter):
        with pytest.raises(RosterImportError, match=r'Row 2 \(Bo\)'):
            adapter.parse_text('name,tier\nAnn,High\nBo,Elite\n')

    def test_blank_name(self, adapter):
        with pytest.raises(RosterImportError, match='Row 1'):
            adapter.parse_text('name,tier\n ,High\n')

    def test_empty_text(self, adapter):
        with pytest.raises(RosterImportError):
            adapter.parse_text('   \n')

    def test_header_only(self, adapter):
        with pytest.raises(RosterImportError):
            adapter.parse_text('name,tier\n')


class TestOtherFormats:
    def test_tsv(self, adapter):
        athletes = adapter.parse_text('name\ttier\tbestEvents\nAnn\tHigh\t100m, 200m\n')
        assert athletes[0].best_events == '100m, 200m'

    def test_json_with_aliases(self, adapter):
        data = [{'athlete': 'Ann', 'level': 'High', 'best_events': '4x100'},
                {'athlete': 'Bo', 'level': 'Low'}]
        athletes = adapter.parse_text(json.dumps(data))
        assert [(a.name, a.tier, a.best_events) for a in athletes] == [
            ('Ann', Tier.HIGH, '4x100'), ('Bo', Tier.LOW, None)]

    def test_json_must_be_list_of_objects(self, adapter):
        with pytest.raises(RosterImportError):
            adapter.parse_text('[1, 2]')
        with pytest.raises(RosterImportError):
            adapter.parse_text('[]')

    def test_parse_file(self, adapter, tmp_path):
        path = tmp_path / 'roster.csv'
        path.write_text(EXAMPLE_CSV)
        assert len(adapter.parse(str(path))) == 3

    def test_missing_file(self, adapter, tmp_path):
        with pytest.raises(RosterImportError, match='Cannot read roster file'):
            adapter.parse(str(tmp_path / 'missing.csv'))
