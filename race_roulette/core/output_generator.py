"""Plain-file outputs for a race day.

Generates four output types from the session state:
  - Team sheet (text, one block per team with its tier mix)
  - Sequence sheet (markdown running order, unrevealed events hidden)
  - Scoreboard CSV (ranked team totals)
  - Export JSON (full state snapshot)
"""

import csv
import json

from .event_sequencer import is_relay
from .score_aggregator import leaderboard_rows
from .team_assigner import team_tier_counts


def generate_team_sheet(teams: list, output_path: str):
    """Write every team with its athletes, tiers and best events."""
    lines = []
    for team in teams:
        counts = team_tier_counts(team)
        lines.append('')
        lines.append('=' * 60)
        lines.append(f'  {team.name} ({len(team.athletes)} athletes)')
        lines.append(f'  High {counts["High"]} / Med {counts["Med"]} / Low {counts["Low"]}')
        lines.append('=' * 60)
        for athlete in team.athletes:
            line = f'  {athlete.name} [{athlete.tier.value}]'
            if athlete.best_events:
                line += f' - {athlete.best_events}'
            lines.append(line)
        lines.append('')

    with open(output_path, 'w') as f:
        f.write('\n'.join(lines))


def generate_sequence_sheet(sequence: list, revealed_index: int, output_path: str,
                            reveal_all: bool = False):
    """Write the running order as markdown.

    Events past revealed_index show as '???' unless reveal_all is set.
    """
    lines = ['# Race Roulette', '']
    lines.append(f'{min(revealed_index, len(sequence))} of {len(sequence)} events revealed')
    lines.append('')
    for i, name in enumerate(sequence):
        if reveal_all or i < revealed_index:
            label = f'{name} (relay)' if is_relay(name) else name
        else:
            label = '???'
        marker = ' <- next' if i == revealed_index else ''
        lines.append(f'{i + 1}. {label}{marker}')

    with open(output_path, 'w') as f:
        f.write('\n'.join(lines) + '\n')


def generate_scoreboard_csv(scores: list, output_path: str):
    """Write ranked team scores, one row per team."""
    with open(output_path, 'w', newline='') as f:
        writer = csv.DictWriter(f, fieldnames=['rank', 'team', 'total_score',
                                               'event_count', 'average_score'])
        writer.writeheader()
        for row in leaderboard_rows(scores):
            writer.writerow({k: v for k, v in row.items() if k != 'team_id'})


def write_export_json(snapshot: dict, output_path: str):
    with open(output_path, 'w') as f:
        json.dump(snapshot, f, indent=2)
