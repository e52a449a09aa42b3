"""Tests for the generated files and the race_day CLI."""

import csv
import json
import os
import sys

import fitz  # PyMuPDF
import pytest

# Add project root to path
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, PROJECT_ROOT)

from race_roulette import race_day
from race_roulette.core.models import Athlete, EventResult, Placement, Team, Tier
from race_roulette.core.output_generator import (
    generate_scoreboard_csv, generate_sequence_sheet, generate_team_sheet,
    write_export_json,
)
from race_roulette.core.pdf_generator import generate_scoreboard_pdf
from race_roulette.core.score_aggregator import calculate_team_scores


TEAMS = [
    Team(1, 'Team 1', [Athlete(id='a', name='Ada Quick', tier=Tier.HIGH, best_events='100m'),
                       Athlete(id='c', name='Cleo Pace', tier=Tier.MED)]),
    Team(2, 'Team 2', [Athlete(id='b', name='Ben Stride', tier=Tier.HIGH),
                       Athlete(id='d', name='Dev Dash', tier=Tier.LOW)]),
]
RESULTS = [
    EventResult(0, '100m', [Placement(2, 1), Placement(1, 2)]),
    EventResult(1, '4x100', [Placement(2, 1), Placement(1, 3)]),
]


@pytest.fixture
def scores():
    return calculate_team_scores(TEAMS, RESULTS)


class TestTextOutputs:
    def test_team_sheet(self, tmp_path):
        output = str(tmp_path / 'teams.txt')
        generate_team_sheet(TEAMS, output)
        with open(output) as f:
            content = f.read()
        assert '  Team 1 (2 athletes)' in content
        assert '  High 1 / Med 1 / Low 0' in content
        assert '  Ada Quick [High] - 100m' in content
        assert '  Dev Dash [Low]' in content

    def test_sequence_sheet_hides_unrevealed(self, tmp_path):
        output = str(tmp_path / 'sequence.md')
        generate_sequence_sheet(['100m', '4x100', '800m'], 2, output)
        with open(output) as f:
            lines = f.read().splitlines()
        assert '2 of 3 events revealed' in lines
        assert '1. 100m' in lines
        assert '2. 4x100 (relay)' in lines
        assert '3. ??? <- next' in lines

    def test_sequence_sheet_reveal_all(self, tmp_path):
        output = str(tmp_path / 'sequence.md')
        generate_sequence_sheet(['100m', '800m'], 0, output, reveal_all=True)
        with open(output) as f:
            content = f.read()
        assert '1. 100m <- next' in content
        assert '2. 800m' in content

    def test_scoreboard_csv(self, scores, tmp_path):
        output = str(tmp_path / 'scores.csv')
        generate_scoreboard_csv(scores, output)
        with open(output, newline='') as f:
            rows = list(csv.DictReader(f))
        assert rows == [
            {'rank': '1', 'team': 'Team 2', 'total_score': '20',
             'event_count': '2', 'average_score': '10.0'},
            {'rank': '2', 'team': 'Team 1', 'total_score': '14',
             'event_count': '2', 'average_score': '7.0'},
        ]

    def test_export_json(self, tmp_path):
        output = str(tmp_path / 'export.json')
        write_export_json({'athletes': [], 'appVersion': '1.0.0'}, output)
        with open(output) as f:
            assert json.load(f) == {'athletes': [], 'appVersion': '1.0.0'}


class TestPdf:
    def test_leaderboard_and_roster_pages(self, scores, tmp_path):
        output = str(tmp_path / 'scoreboard.pdf')
        generate_scoreboard_pdf(scores, TEAMS, output, title='Spring Meet')
        doc = fitz.open(output)
        assert doc.page_count == 3
        first = doc[0].get_text()
        assert 'Spring Meet' in first
        assert 'Team Standings' in first
        assert 'Team 2' in first
        assert 'Ada Quick' in doc[1].get_text()
        doc.close()

    def test_empty_scoreboard_still_has_a_page(self, tmp_path):
        output = str(tmp_path / 'empty.pdf')
        generate_scoreboard_pdf([], [], output)
        doc = fitz.open(output)
        assert doc.page_count == 1
        assert 'No results recorded yet' in doc[0].get_text()
        doc.close()


class TestCli:
    def _run(self, db, *argv):
        with pytest.raises(SystemExit) as exc:
            race_day.main(['--db', db, *argv])
        return exc.value.code

    def test_full_race_day(self, tmp_path, capsys):
        db = str(tmp_path / 'state.db')
        roster = tmp_path / 'roster.csv'
        roster.write_text('name,tier\nAda,High\nBen,High\nCleo,Med\nDev,Low\n')

        assert self._run(db, 'import', str(roster)) == 0
        assert self._run(db, 'assign', '--teams', '2') == 0
        assert self._run(db, 'generate', '--events', '3', '--relays', '1',
                         '--positions', '2') == 0
        assert self._run(db, 'reveal') == 0
        assert self._run(db, 'result', '1', '--place', '2=1', '--place', '1=2') == 0
        capsys.readouterr()

        assert self._run(db, 'scores') == 0
        out = capsys.readouterr().out
        assert ' 1. Team 2' in out
        assert ' 2. Team 1' in out

        pdf = str(tmp_path / 'out.pdf')
        assert self._run(db, 'export', '--pdf', pdf, '--json', str(tmp_path / 'x.json')) == 0
        assert os.path.exists(pdf)

    def test_result_for_hidden_event_fails(self, tmp_path, capsys):
        db = str(tmp_path / 'state.db')
        self._run(db, 'add', 'Ada', '--tier', 'High')
        self._run(db, 'add', 'Ben', '--tier', 'Low')
        self._run(db, 'assign', '--teams', '2')
        self._run(db, 'generate', '--events', '2')
        capsys.readouterr()
        assert self._run(db, 'result', '1', '--place', '1=1') == 1
        assert 'Error: This event has not been revealed yet.' in capsys.readouterr().out

    def test_result_rejects_repeated_and_unknown_teams(self, tmp_path, capsys):
        db = str(tmp_path / 'state.db')
        self._run(db, 'add', 'Ada', '--tier', 'High')
        self._run(db, 'add', 'Ben', '--tier', 'Low')
        self._run(db, 'assign', '--teams', '2')
        self._run(db, 'generate', '--events', '2')
        self._run(db, 'reveal')
        capsys.readouterr()
        assert self._run(db, 'result', '1', '--place', '1=1', '--place', '1=2') == 1
        assert 'Error: Each team can only be placed once.' in capsys.readouterr().out
        assert self._run(db, 'result', '1', '--place', '1=1', '--place', '9=2') == 1
        assert 'Error: Unknown team ID: 9' in capsys.readouterr().out
        assert self._run(db, 'result', '1', '--place', '2=1', '--place', '1=2') == 0

    def test_relay_positions_are_one_based(self, tmp_path, capsys):
        db = str(tmp_path / 'state.db')
        assert self._run(db, 'generate', '--events', '4', '--relays', '1',
                         '--positions', '4') == 0
        assert 'relays at 4' in capsys.readouterr().out
        assert self._run(db, 'generate', '--events', '4', '--relays', '1',
                         '--positions', '5') == 1

    def test_clear_rejects_unknown_type(self, tmp_path, capsys):
        db = str(tmp_path / 'state.db')
        assert self._run(db, 'clear', 'everything') == 1
        assert self._run(db, 'clear', 'teams', 'results') == 0
