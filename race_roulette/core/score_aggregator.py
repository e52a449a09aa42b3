"""Team scoring from recorded event placements.

Each placement is converted to points through a place -> points table
(1st=10, 2nd=8, ... 6th=1 by default; 7th and lower score nothing). Teams
are ranked by total points, ties keeping their team order.
"""

import datetime

from .models import ErrorKind, EventResult, Outcome, Placement, TeamScore


DEFAULT_SCORING_TABLE = {1: 10, 2: 8, 3: 6, 4: 4, 5: 2, 6: 1}

# Event status labels
NOT_REVEALED = 'not-revealed'
PENDING = 'pending'
COMPLETED = 'completed'


def calculate_team_scores(teams: list, event_results: list,
                          scoring_table: dict | None = None) -> list[TeamScore]:
    """Return TeamScores sorted by total points, highest first.

    An empty list is returned when there are no teams or no results.
    """
    if not teams or not event_results:
        return []
    table = DEFAULT_SCORING_TABLE if scoring_table is None else scoring_table

    scores = []
    for team in teams:
        total = 0
        count = 0
        for result in event_results:
            placement = next((p for p in result.placements if p.team_id == team.id), None)
            if placement is not None:
                total += table.get(placement.place, 0)
                count += 1
        average = round(total / count, 1) if count > 0 else 0
        scores.append(TeamScore(team=team, total_score=total,
                                event_count=count, average_score=average))

    # sorted() is stable, equal totals keep team order
    return sorted(scores, key=lambda s: -s.total_score)


def validate_placements(placements: list, team_ids=None) -> Outcome:
    """Check one event's placements.

    Each team may be placed once. When team_ids is given, every placement
    must name one of those teams.
    """
    if not placements:
        return Outcome.failure(ErrorKind.INVALID_PLACEMENTS,
                               'Please enter at least one placement.')
    places = [p.place for p in placements]
    if len(set(places)) != len(places):
        return Outcome.failure(ErrorKind.INVALID_PLACEMENTS,
                               'Each placement must be unique.')
    if min(places) < 1:
        return Outcome.failure(ErrorKind.INVALID_PLACEMENTS,
                               'Placements must start from 1.')
    teams = [p.team_id for p in placements]
    if len(set(teams)) != len(teams):
        return Outcome.failure(ErrorKind.INVALID_PLACEMENTS,
                               'Each team can only be placed once.')
    if team_ids is not None:
        unknown = sorted(set(teams) - set(team_ids))
        if unknown:
            return Outcome.failure(ErrorKind.INVALID_PLACEMENTS,
                                   f'Unknown team ID: {unknown[0]}')
    return Outcome.success(placements)


def submit_result(event_results: list, sequence: list, revealed_index: int,
                  event_index: int, placements: list,
                  timestamp: str | None = None, team_ids=None) -> Outcome:
    """Check a new result against the reveal progress and existing results.

    Does not modify event_results; on success the Outcome value is the new
    EventResult for the caller to append.
    """
    if event_index < 0 or event_index >= revealed_index or event_index >= len(sequence):
        return Outcome.failure(ErrorKind.EVENT_NOT_REVEALED,
                               'This event has not been revealed yet.')
    if any(r.event_index == event_index for r in event_results):
        return Outcome.failure(ErrorKind.DUPLICATE_RESULT,
                               'This event already has results entered.')

    checked = validate_placements(placements, team_ids)
    if not checked.ok:
        return checked

    result = EventResult(
        event_index=event_index,
        event=sequence[event_index],
        placements=[Placement(p.team_id, p.place) for p in placements],
        timestamp=timestamp or datetime.datetime.now().isoformat(),
    )
    return Outcome.success(result)


def event_status(event_index: int, revealed_index: int, event_results: list) -> str:
    if event_index >= revealed_index:
        return NOT_REVEALED
    if any(r.event_index == event_index for r in event_results):
        return COMPLETED
    return PENDING


def leaderboard_rows(scores: list[TeamScore]) -> list[dict]:
    """Flatten ranked scores into display rows with 1-based ranks."""
    return [{
        'rank': rank,
        'team_id': s.id,
        'team': s.name,
        'total_score': s.total_score,
        'event_count': s.event_count,
        'average_score': s.average_score,
    } for rank, s in enumerate(scores, start=1)]
