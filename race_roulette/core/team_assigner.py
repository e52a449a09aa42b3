"""Tier-balanced team assignment.

Athletes are bucketed High -> Med -> Low (original order kept inside each
bucket) and dealt round robin, so every team gets as even a share of each
tier as the roster allows.
"""

from .models import ErrorKind, Outcome, Team, Tier


TIER_ORDER = [Tier.HIGH, Tier.MED, Tier.LOW]


def assign_teams(athletes: list, num_teams: int) -> Outcome:
    """Split athletes into num_teams teams.

    Returns:
        Outcome whose value is {'teams': [Team], 'stats': {...}}.
    """
    if not athletes:
        return Outcome.failure(ErrorKind.NO_ATHLETES, 'No athletes provided')
    if num_teams < 1:
        return Outcome.failure(ErrorKind.INVALID_TEAM_COUNT,
                               'Number of teams must be at least 1')
    if num_teams > len(athletes):
        return Outcome.failure(
            ErrorKind.TOO_MANY_TEAMS,
            f'Cannot create {num_teams} teams with only {len(athletes)} athletes')

    buckets = {tier: [a for a in athletes if a.tier == tier] for tier in TIER_ORDER}
    teams = [Team(id=i + 1, name=f'Team {i + 1}') for i in range(num_teams)]

    ordered = buckets[Tier.HIGH] + buckets[Tier.MED] + buckets[Tier.LOW]
    for k, athlete in enumerate(ordered):
        teams[k % num_teams].athletes.append(athlete)

    stats = {
        'total_athletes': len(athletes),
        'high_tier': len(buckets[Tier.HIGH]),
        'med_tier': len(buckets[Tier.MED]),
        'low_tier': len(buckets[Tier.LOW]),
        'average_team_size': round(len(athletes) / num_teams, 1),
    }
    return Outcome.success({'teams': teams, 'stats': stats})


def find_team(teams: list, team_id: int):
    for team in teams:
        if team.id == team_id:
            return team
    return None


def move_athlete(teams: list, athlete_id: str, from_team_id: int,
                 to_team_id: int) -> Outcome:
    """Move one athlete to the end of another team's list (in place)."""
    source = find_team(teams, from_team_id)
    target = find_team(teams, to_team_id)
    if source is None or target is None:
        missing = from_team_id if source is None else to_team_id
        return Outcome.failure(ErrorKind.TEAM_NOT_FOUND, f'Invalid team ID: {missing}')

    for i, athlete in enumerate(source.athletes):
        if athlete.id == athlete_id:
            break
    else:
        return Outcome.failure(ErrorKind.ATHLETE_NOT_FOUND,
                               'Athlete not found in source team')

    target.athletes.append(source.athletes.pop(i))
    return Outcome.success(teams)


def team_tier_counts(team: Team) -> dict:
    """Count a team's athletes per tier, keyed by tier value."""
    counts = {tier.value: 0 for tier in TIER_ORDER}
    for athlete in team.athletes:
        counts[athlete.tier.value] += 1
    return counts
