"""Data models for the race roulette competition organiser."""

import uuid
from dataclasses import dataclass, field
from enum import Enum


class Tier(Enum):
    """Athlete skill bracket, used to stratify team assignment."""
    HIGH = 'High'
    MED = 'Med'
    LOW = 'Low'

    @classmethod
    def parse(cls, text) -> 'Tier':
        if isinstance(text, Tier):
            return text
        key = str(text or '').strip().lower()
        tier = _TIER_ALIASES.get(key)
        if tier is None:
            raise ValueError(f"Unknown tier '{text}' (expected High, Med or Low)")
        return tier


_TIER_ALIASES = {
    'high': Tier.HIGH, 'h': Tier.HIGH,
    'med': Tier.MED, 'medium': Tier.MED, 'mid': Tier.MED, 'm': Tier.MED,
    'low': Tier.LOW, 'l': Tier.LOW,
}


class ErrorKind(Enum):
    NO_ATHLETES = 'NoAthletes'
    INVALID_TEAM_COUNT = 'InvalidTeamCount'
    TOO_MANY_TEAMS = 'TooManyTeams'
    INSUFFICIENT_EVENTS = 'InsufficientEvents'
    INSUFFICIENT_RELAYS = 'InsufficientRelays'
    INVALID_EVENT_COUNT = 'InvalidEventCount'
    INVALID_RELAY_POSITIONS = 'InvalidRelayPositions'
    INVALID_PLACEMENTS = 'InvalidPlacements'
    TEAM_NOT_FOUND = 'TeamNotFound'
    ATHLETE_NOT_FOUND = 'AthleteNotFound'
    EVENT_NOT_FOUND = 'EventNotFound'
    EVENT_NOT_REVEALED = 'EventNotRevealed'
    DUPLICATE_RESULT = 'DuplicateResult'
    NO_SEQUENCE = 'NoSequence'
    SEQUENCE_COMPLETE = 'SequenceComplete'
    INVALID_ATHLETE = 'InvalidAthlete'
    INVALID_ROSTER = 'InvalidRoster'
    STORAGE_ERROR = 'StorageError'


@dataclass(frozen=True)
class Outcome:
    """Success/failure result returned by every roulette operation.

    Callers branch on ``ok``; a failure carries an ``ErrorKind`` and a
    message that can be shown to the user as-is.
    """
    ok: bool
    value: object = None
    error: ErrorKind | None = None
    message: str = ''

    @classmethod
    def success(cls, value=None, message: str = '') -> 'Outcome':
        return cls(ok=True, value=value, message=message)

    @classmethod
    def failure(cls, error: ErrorKind, message: str) -> 'Outcome':
        return cls(ok=False, error=error, message=message)


def new_athlete_id() -> str:
    return uuid.uuid4().hex


@dataclass
class Athlete:
    """A competitor on the roster."""
    name: str
    tier: Tier
    id: str = field(default_factory=new_athlete_id)
    best_events: str | None = None   # free text, e.g. "100m, 200m"

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'tier': self.tier.value,
            'bestEvents': self.best_events,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Athlete':
        return cls(
            id=str(data['id']),
            name=data['name'],
            tier=Tier.parse(data['tier']),
            best_events=data.get('bestEvents'),
        )


@dataclass
class EventOption:
    """One entry of the event pool."""
    name: str
    enabled: bool = True

    def to_dict(self) -> dict:
        return {'name': self.name, 'enabled': self.enabled}

    @classmethod
    def from_dict(cls, data: dict) -> 'EventOption':
        return cls(name=data['name'], enabled=bool(data.get('enabled', True)))


def pool_to_dict(pool: dict) -> dict:
    return {category: [e.to_dict() for e in events]
            for category, events in pool.items()}


def pool_from_dict(data: dict) -> dict:
    if not isinstance(data, dict):
        raise TypeError(f"event pool must be an object, got {type(data).__name__}")
    return {category: [EventOption.from_dict(e) for e in events]
            for category, events in data.items()}


@dataclass
class Team:
    id: int
    name: str
    athletes: list = field(default_factory=list)   # list[Athlete]

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'athletes': [a.to_dict() for a in self.athletes],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Team':
        return cls(
            id=int(data['id']),
            name=data['name'],
            athletes=[Athlete.from_dict(a) for a in data.get('athletes', [])],
        )


@dataclass
class Placement:
    """A team's finishing place in one event."""
    team_id: int
    place: int

    def to_dict(self) -> dict:
        return {'teamId': self.team_id, 'place': self.place}

    @classmethod
    def from_dict(cls, data: dict) -> 'Placement':
        return cls(team_id=int(data['teamId']), place=int(data['place']))


@dataclass
class EventResult:
    event_index: int
    event: str                       # name at event_index, kept for display
    placements: list                 # list[Placement]
    timestamp: str = ''              # ISO-8601

    def to_dict(self) -> dict:
        return {
            'eventIndex': self.event_index,
            'event': self.event,
            'placements': [p.to_dict() for p in self.placements],
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'EventResult':
        return cls(
            event_index=int(data['eventIndex']),
            event=data.get('event', ''),
            placements=[Placement.from_dict(p) for p in data.get('placements', [])],
            timestamp=data.get('timestamp', ''),
        )


@dataclass(frozen=True)
class TeamScore:
    """A team annotated with its aggregated score."""
    team: Team
    total_score: int = 0
    event_count: int = 0
    average_score: float = 0

    @property
    def id(self) -> int:
        return self.team.id

    @property
    def name(self) -> str:
        return self.team.name


@dataclass
class AppState:
    """Everything the app keeps between sessions."""
    athletes: list = field(default_factory=list)         # list[Athlete]
    teams: list = field(default_factory=list)            # list[Team]
    event_pool: dict = field(default_factory=dict)       # category -> list[EventOption]
    event_sequence: list = field(default_factory=list)   # list[str]
    relay_positions: list = field(default_factory=list)  # list[int], 0-based
    revealed_index: int = 0
    event_results: list = field(default_factory=list)    # list[EventResult]


@dataclass
class RouletteConfig:
    """Configuration for one race day database."""
    db_path: str = 'race_roulette.db'
    scoring_table: dict | None = None                   # place -> points, None = default
    event_pool: dict | None = None                      # overrides the built-in pool
    app_version: str = '1.0.0'
