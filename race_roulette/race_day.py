#!/usr/bin/env python3
"""CLI entry point for running a race roulette competition.

Usage:
    python race_day.py import roster.csv
    python race_day.py assign --teams 4
    python race_day.py generate --events 8 --relays 2 --positions 4,8
    python race_day.py reveal
    python race_day.py result 1 --place 2=1 --place 1=2 --place 3=3
    python race_day.py scores
    python race_day.py export --json backup.json --pdf scoreboard.pdf
"""

import argparse
import os
import sqlite3
import sys

# Add parent directory to path for imports (skip when frozen by PyInstaller)
if not getattr(sys, 'frozen', False):
    sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from race_roulette.core import storage
from race_roulette.core.config import load_config
from race_roulette.core.event_sequencer import is_relay, next_event
from race_roulette.core.models import Placement
from race_roulette.core.output_generator import (
    generate_scoreboard_csv, generate_sequence_sheet, generate_team_sheet,
    write_export_json,
)
from race_roulette.core.pdf_generator import generate_scoreboard_pdf
from race_roulette.core.score_aggregator import event_status, leaderboard_rows
from race_roulette.core.session import RaceDaySession
from race_roulette.core.team_assigner import team_tier_counts


DATA_KEYS = {
    'athletes': [storage.ATHLETES],
    'teams': [storage.TEAMS],
    'sequence': [storage.EVENT_SEQUENCE, storage.RELAY_POSITIONS, storage.REVEALED_INDEX],
    'results': [storage.EVENT_RESULTS],
    'pool': [storage.EVENT_POOL],
}


def _parse_positions(text: str) -> list[int]:
    """'3, 7' (1-based, as typed) -> [2, 6]."""
    try:
        return [int(p.strip()) - 1 for p in text.split(',') if p.strip()]
    except ValueError:
        raise argparse.ArgumentTypeError(f'Relay positions must be numbers: {text}')


def _parse_placement(text: str) -> Placement:
    """'TEAM_ID=PLACE' -> Placement."""
    team, sep, place = text.partition('=')
    if not sep:
        raise argparse.ArgumentTypeError(f'Use TEAM_ID=PLACE, got {text}')
    try:
        return Placement(team_id=int(team), place=int(place))
    except ValueError:
        raise argparse.ArgumentTypeError(f'Team id and place must be numbers: {text}')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Run a race roulette competition')
    parser.add_argument('--db', default=None,
                        help='Path to the SQLite state file (default: ./race_roulette.db)')
    parser.add_argument('--config', default=None,
                        help='Path to a JSON config file (scoringTable, eventPool, appVersion)')
    sub = parser.add_subparsers(dest='command', required=True)

    p = sub.add_parser('add', help='Add one athlete')
    p.add_argument('name')
    p.add_argument('--tier', default='Med', help='High, Med or Low (default Med)')
    p.add_argument('--best-events', default=None, help='Free text, e.g. "100m, 200m"')

    p = sub.add_parser('import', help='Import athletes from a CSV, TSV or JSON roster')
    p.add_argument('path')

    sub.add_parser('roster', help='List athletes')

    p = sub.add_parser('remove', help='Remove one athlete by id')
    p.add_argument('athlete_id')

    sub.add_parser('clear-athletes', help='Remove every athlete')

    p = sub.add_parser('assign', help='Split the roster into tier-balanced teams')
    p.add_argument('--teams', type=int, required=True, help='Number of teams')

    p = sub.add_parser('move', help='Move an athlete to another team')
    p.add_argument('athlete_id')
    p.add_argument('from_team', type=int)
    p.add_argument('to_team', type=int)

    sub.add_parser('teams', help='Show teams')

    sub.add_parser('pool', help='Show the event pool')

    p = sub.add_parser('toggle', help='Enable or disable an event in the pool')
    p.add_argument('event')
    group = p.add_mutually_exclusive_group(required=True)
    group.add_argument('--on', dest='enabled', action='store_true')
    group.add_argument('--off', dest='enabled', action='store_false')

    p = sub.add_parser('generate', help='Spin the roulette: generate an event sequence')
    p.add_argument('--events', type=int, required=True, help='Total number of events')
    p.add_argument('--relays', type=int, default=0, help='Number of relay events')
    p.add_argument('--positions', type=_parse_positions, default=None,
                   help='Comma-separated 1-based relay slots (default: random)')

    sub.add_parser('reveal', help='Reveal the next event')

    p = sub.add_parser('sequence', help='Show the event sequence')
    p.add_argument('--all', action='store_true', help='Show unrevealed events too')

    p = sub.add_parser('result', help='Record placements for a revealed event')
    p.add_argument('event', type=int, help='1-based event number')
    p.add_argument('--place', dest='placements', action='append', required=True,
                   type=_parse_placement, help='TEAM_ID=PLACE, repeat per team')

    sub.add_parser('scores', help='Show the team leaderboard')

    p = sub.add_parser('reset', help='Reset part of the competition')
    p.add_argument('what', choices=['sequence', 'progress', 'results', 'teams', 'pool'])

    p = sub.add_parser('clear', help='Delete stored data')
    p.add_argument('what', nargs='*',
                   help=f'Data to clear: {", ".join(sorted(DATA_KEYS))} (default: everything)')

    p = sub.add_parser('export', help='Write outputs')
    p.add_argument('--json', default=None, help='Full data snapshot')
    p.add_argument('--csv', default=None, help='Scoreboard CSV')
    p.add_argument('--pdf', default=None, help='Scoreboard and team rosters PDF')
    p.add_argument('--teams', default=None, help='Team sheet text file')
    p.add_argument('--sequence', default=None, help='Sequence markdown file')
    p.add_argument('--title', default='Race Roulette', help='PDF title')

    sub.add_parser('stats', help='Show stored data counts')
    return parser


def _report(outcome) -> int:
    if not outcome.ok:
        print(f"Error: {outcome.message}")
        return 1
    if outcome.message:
        print(outcome.message)
    return 0


def _print_teams(teams):
    if not teams:
        print("No teams yet. Run 'assign' first.")
    for team in teams:
        counts = team_tier_counts(team)
        print(f"{team.id}. {team.name} ({len(team.athletes)}): "
              f"High {counts['High']}, Med {counts['Med']}, Low {counts['Low']}")
        for athlete in team.athletes:
            print(f"     {athlete.id}  {athlete.name} [{athlete.tier.value}]")


def _print_sequence(session, show_all: bool):
    s = session.state
    if not s.event_sequence:
        print("No event sequence. Run 'generate' first.")
        return
    print(f"{s.revealed_index} of {len(s.event_sequence)} events revealed")
    for i, name in enumerate(s.event_sequence):
        status = event_status(i, s.revealed_index, s.event_results)
        shown = name if (show_all or i < s.revealed_index) else '???'
        relay = ' (relay)' if is_relay(name) and shown != '???' else ''
        print(f"{i + 1:>3}. {shown}{relay}  [{status}]")


def run(args) -> int:
    config = load_config(args.config, db_path=args.db)
    session = RaceDaySession(storage.Storage(config.db_path), config)
    state = session.state
    command = args.command

    if command == 'add':
        return _report(session.add_athlete(args.name, args.tier, args.best_events))

    if command == 'import':
        return _report(session.import_roster(args.path))

    if command == 'roster':
        for athlete in state.athletes:
            best = f" - {athlete.best_events}" if athlete.best_events else ''
            print(f"{athlete.id}  {athlete.name} [{athlete.tier.value}]{best}")
        print(f"{len(state.athletes)} athletes")
        return 0

    if command == 'remove':
        return _report(session.delete_athlete(args.athlete_id))

    if command == 'clear-athletes':
        return _report(session.clear_athletes())

    if command == 'assign':
        outcome = session.assign_teams(args.teams)
        if outcome.ok:
            stats = outcome.value['stats']
            print(f"Created {args.teams} teams from {stats['total_athletes']} athletes "
                  f"(High {stats['high_tier']}, Med {stats['med_tier']}, "
                  f"Low {stats['low_tier']}; avg {stats['average_team_size']} per team)")
            _print_teams(session.state.teams)
        return _report(outcome)

    if command == 'move':
        outcome = session.move_athlete(args.athlete_id, args.from_team, args.to_team)
        if outcome.ok:
            _print_teams(session.state.teams)
        return _report(outcome)

    if command == 'teams':
        _print_teams(state.teams)
        return 0

    if command == 'pool':
        for category, events in state.event_pool.items():
            print(f"{category}:")
            for event in events:
                mark = 'x' if event.enabled else ' '
                print(f"  [{mark}] {event.name}")
        return 0

    if command == 'toggle':
        outcome = session.set_event_enabled(args.event, args.enabled)
        if outcome.ok:
            print(f"{args.event} {'enabled' if args.enabled else 'disabled'}")
        return _report(outcome)

    if command == 'generate':
        outcome = session.generate_sequence(args.events, args.relays, args.positions)
        if outcome.ok:
            slots = ', '.join(str(p + 1) for p in outcome.value['relay_positions'])
            print(f"Event sequence generated! {args.events} events"
                  + (f", relays at {slots}" if slots else ''))
        return _report(outcome)

    if command == 'reveal':
        outcome = session.reveal_next()
        if outcome.ok:
            s = session.state
            print(f"Event {s.revealed_index} of {len(s.event_sequence)}: {outcome.value['event']}")
            if next_event(s.event_sequence, s.revealed_index) is None:
                print("All events have been revealed!")
        return _report(outcome)

    if command == 'sequence':
        _print_sequence(session, args.all)
        return 0

    if command == 'result':
        outcome = session.submit_result(args.event - 1, args.placements)
        if outcome.ok:
            print(f"Event result submitted for {outcome.value.event}")
        return _report(outcome)

    if command == 'scores':
        rows = leaderboard_rows(session.team_scores())
        if not rows:
            print("No scores yet. Assign teams and record some results first.")
        for row in rows:
            print(f"{row['rank']:>2}. {row['team']:<20} {row['total_score']:>4} pts  "
                  f"{row['event_count']} events  avg {row['average_score']}")
        return 0

    if command == 'reset':
        actions = {
            'sequence': session.reset_sequence,
            'progress': session.reset_progress,
            'results': session.reset_results,
            'teams': session.reset_teams,
            'pool': session.reset_event_pool,
        }
        return _report(actions[args.what]())

    if command == 'clear':
        unknown = [what for what in args.what if what not in DATA_KEYS]
        if unknown:
            print(f"Error: unknown data type(s): {', '.join(unknown)}")
            return 1
        keys = [key for what in args.what for key in DATA_KEYS[what]] or None
        return _report(session.clear_data(keys))

    if command == 'export':
        wrote = False
        if args.json:
            write_export_json(session.export_snapshot(), args.json)
            print(f"Generated {args.json}")
            wrote = True
        if args.csv:
            generate_scoreboard_csv(session.team_scores(), args.csv)
            print(f"Generated {args.csv}")
            wrote = True
        if args.pdf:
            generate_scoreboard_pdf(session.team_scores(), state.teams, args.pdf,
                                    title=args.title)
            print(f"Generated {args.pdf}")
            wrote = True
        if args.teams:
            generate_team_sheet(state.teams, args.teams)
            print(f"Generated {args.teams}")
            wrote = True
        if args.sequence:
            generate_sequence_sheet(state.event_sequence, state.revealed_index, args.sequence)
            print(f"Generated {args.sequence}")
            wrote = True
        if not wrote:
            print("Nothing to export: pass --json, --csv, --pdf, --teams or --sequence")
            return 1
        return 0

    if command == 'stats':
        for key, count in session.data_stats().items():
            print(f"{key}: {count}")
        return 0

    print(f"Unknown command: {command}")
    return 1


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        status = run(args)
    except sqlite3.Error as e:
        print(f"Error: cannot open state database: {e}")
        status = 1
    sys.exit(status)


if __name__ == '__main__':
    main()
