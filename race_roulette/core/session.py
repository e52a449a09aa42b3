"""Race day session: application state plus storage mirroring.

The roulette algorithms are pure functions. RaceDaySession holds the
current AppState, runs those functions on it and writes every changed key
back to storage after a successful change. Storage is best effort: a failed
write prints a warning and the in-memory state stays authoritative.
"""

import json
import sqlite3

from race_roulette.adapters.base import RosterImportError
from race_roulette.adapters.roster_adapter import RosterAdapter

from . import event_sequencer, score_aggregator, storage, team_assigner
from .models import (
    AppState, Athlete, ErrorKind, EventResult, Outcome, Placement,
    RouletteConfig, Team, Tier, pool_from_dict, pool_to_dict,
)


class RaceDaySession:
    def __init__(self, store: storage.Storage, config: RouletteConfig | None = None):
        self.store = store
        self.config = config or RouletteConfig(db_path=store.db_path)
        self.state = AppState()
        self.load()

    # --- Persistence ---

    @property
    def scoring_table(self) -> dict:
        if self.config.scoring_table is None:
            return score_aggregator.DEFAULT_SCORING_TABLE
        return self.config.scoring_table

    def _default_pool(self) -> dict:
        if self.config.event_pool:
            return event_sequencer.copy_pool(self.config.event_pool)
        return event_sequencer.default_event_pool()

    def _read(self, key: str, decode, default):
        try:
            raw = self.store.get_item(key)
        except sqlite3.Error as e:
            print(f"Warning: could not read '{key}': {e}")
            return default
        except json.JSONDecodeError as e:
            print(f"Warning: stored '{key}' is not valid JSON: {e}")
            return default
        if raw is None:
            return default
        try:
            return decode(raw)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            print(f"Warning: ignoring unreadable '{key}': {e}")
            return default

    def load(self) -> AppState:
        """Replace the in-memory state with what storage holds."""
        s = AppState()
        s.athletes = self._read(storage.ATHLETES,
                                lambda raw: [Athlete.from_dict(a) for a in raw], [])
        s.teams = self._read(storage.TEAMS,
                             lambda raw: [Team.from_dict(t) for t in raw], [])
        s.event_pool = self._read(storage.EVENT_POOL, pool_from_dict, None) \
            or self._default_pool()
        s.event_sequence = self._read(storage.EVENT_SEQUENCE,
                                      lambda raw: [str(n) for n in raw], [])
        s.relay_positions = self._read(storage.RELAY_POSITIONS,
                                       lambda raw: [int(p) for p in raw], [])
        s.revealed_index = self._read(storage.REVEALED_INDEX, int, 0)
        s.revealed_index = max(0, min(s.revealed_index, len(s.event_sequence)))
        s.event_results = self._read(storage.EVENT_RESULTS,
                                     lambda raw: [EventResult.from_dict(r) for r in raw], [])
        self.state = s
        return s

    def _encode(self, key: str):
        s = self.state
        if key == storage.ATHLETES:
            return [a.to_dict() for a in s.athletes]
        if key == storage.TEAMS:
            return [t.to_dict() for t in s.teams]
        if key == storage.EVENT_POOL:
            return pool_to_dict(s.event_pool)
        if key == storage.EVENT_SEQUENCE:
            return list(s.event_sequence)
        if key == storage.RELAY_POSITIONS:
            return list(s.relay_positions)
        if key == storage.REVEALED_INDEX:
            return s.revealed_index
        if key == storage.EVENT_RESULTS:
            return [r.to_dict() for r in s.event_results]
        raise KeyError(key)

    def save(self, *keys: str) -> bool:
        """Mirror the given keys into storage. Returns False if any write failed."""
        saved = True
        for key in keys:
            try:
                self.store.set_item(key, self._encode(key))
            except sqlite3.Error as e:
                print(f"Warning: could not save '{key}': {e}")
                saved = False
        return saved

    # --- Roster ---

    def add_athlete(self, name: str, tier, best_events: str | None = None) -> Outcome:
        name = (name or '').strip()
        if not name:
            return Outcome.failure(ErrorKind.INVALID_ATHLETE, 'Please enter an athlete name')
        try:
            tier = Tier.parse(tier)
        except ValueError as e:
            return Outcome.failure(ErrorKind.INVALID_ATHLETE, str(e))
        athlete = Athlete(name=name, tier=tier,
                          best_events=(best_events or '').strip() or None)
        self.state.athletes.append(athlete)
        self.save(storage.ATHLETES)
        return Outcome.success(athlete, f'{name} added successfully!')

    def import_roster(self, data_path: str) -> Outcome:
        try:
            athletes = RosterAdapter().parse(data_path)
        except RosterImportError as e:
            return Outcome.failure(ErrorKind.INVALID_ROSTER, str(e))
        return self._add_imported(athletes)

    def import_roster_text(self, text: str) -> Outcome:
        try:
            athletes = RosterAdapter().parse_text(text)
        except RosterImportError as e:
            return Outcome.failure(ErrorKind.INVALID_ROSTER, str(e))
        return self._add_imported(athletes)

    def _add_imported(self, athletes: list) -> Outcome:
        self.state.athletes.extend(athletes)
        self.save(storage.ATHLETES)
        return Outcome.success(athletes, f'Imported {len(athletes)} athletes')

    def delete_athlete(self, athlete_id: str) -> Outcome:
        for i, athlete in enumerate(self.state.athletes):
            if athlete.id == athlete_id:
                removed = self.state.athletes.pop(i)
                self.save(storage.ATHLETES)
                return Outcome.success(removed, f'{removed.name} removed')
        return Outcome.failure(ErrorKind.ATHLETE_NOT_FOUND,
                               f'No athlete with id {athlete_id}')

    def clear_athletes(self) -> Outcome:
        count = len(self.state.athletes)
        self.state.athletes = []
        self.save(storage.ATHLETES)
        return Outcome.success(count, f'Removed {count} athletes')

    # --- Teams ---

    def assign_teams(self, num_teams: int) -> Outcome:
        outcome = team_assigner.assign_teams(self.state.athletes, num_teams)
        if outcome.ok:
            self.state.teams = outcome.value['teams']
            self.save(storage.TEAMS)
        return outcome

    def move_athlete(self, athlete_id: str, from_team_id: int, to_team_id: int) -> Outcome:
        outcome = team_assigner.move_athlete(self.state.teams, athlete_id,
                                             from_team_id, to_team_id)
        if outcome.ok:
            self.save(storage.TEAMS)
        return outcome

    def reset_teams(self) -> Outcome:
        self.state.teams = []
        self.save(storage.TEAMS)
        return Outcome.success(message='Teams have been reset')

    # --- Event pool ---

    def set_event_enabled(self, name: str, enabled: bool) -> Outcome:
        for events in self.state.event_pool.values():
            for event in events:
                if event.name == name:
                    event.enabled = enabled
                    self.save(storage.EVENT_POOL)
                    return Outcome.success(event)
        return Outcome.failure(ErrorKind.EVENT_NOT_FOUND, f"No event named '{name}' in the pool")

    def reset_event_pool(self) -> Outcome:
        self.state.event_pool = self._default_pool()
        self.save(storage.EVENT_POOL)
        return Outcome.success(self.state.event_pool)

    # --- Sequence ---

    def generate_sequence(self, total_events: int, num_relays: int,
                          relay_positions: list[int] | None = None, rng=None) -> Outcome:
        """Replace the sequence; progress and results of the old one are dropped."""
        outcome = event_sequencer.generate_sequence(
            self.state.event_pool, total_events, num_relays, relay_positions, rng=rng)
        if outcome.ok:
            self.state.event_sequence = outcome.value['sequence']
            self.state.relay_positions = outcome.value['relay_positions']
            self.state.revealed_index = 0
            self.state.event_results = []
            self.save(storage.EVENT_SEQUENCE, storage.RELAY_POSITIONS,
                      storage.REVEALED_INDEX, storage.EVENT_RESULTS)
        return outcome

    def reveal_next(self) -> Outcome:
        outcome = event_sequencer.reveal_next(self.state.event_sequence,
                                              self.state.revealed_index)
        if outcome.ok:
            self.state.revealed_index = outcome.value['revealed_index']
            self.save(storage.REVEALED_INDEX)
        return outcome

    def reset_sequence(self) -> Outcome:
        self.state.event_sequence = []
        self.state.relay_positions = []
        self.state.revealed_index = 0
        self.state.event_results = []
        self.save(storage.EVENT_SEQUENCE, storage.RELAY_POSITIONS,
                  storage.REVEALED_INDEX, storage.EVENT_RESULTS)
        return Outcome.success(message='Event sequence has been reset')

    def reset_progress(self) -> Outcome:
        self.state.revealed_index = 0
        self.save(storage.REVEALED_INDEX)
        return Outcome.success(message='Event progress has been reset')

    def sequence_state(self) -> str:
        return event_sequencer.sequence_state(self.state.event_sequence,
                                              self.state.revealed_index)

    # --- Results ---

    def submit_result(self, event_index: int, placements: list) -> Outcome:
        """Record placements for a revealed event.

        placements may be Placement objects or (team_id, place) pairs.
        """
        placements = [p if isinstance(p, Placement) else Placement(int(p[0]), int(p[1]))
                      for p in placements]
        outcome = score_aggregator.submit_result(
            self.state.event_results, self.state.event_sequence,
            self.state.revealed_index, event_index, placements,
            team_ids=[t.id for t in self.state.teams])
        if outcome.ok:
            self.state.event_results.append(outcome.value)
            self.save(storage.EVENT_RESULTS)
        return outcome

    def reset_results(self) -> Outcome:
        self.state.event_results = []
        self.save(storage.EVENT_RESULTS)
        return Outcome.success(message='All event results have been cleared')

    def team_scores(self) -> list:
        return score_aggregator.calculate_team_scores(
            self.state.teams, self.state.event_results, self.scoring_table)

    # --- Data management ---

    def clear_data(self, keys: list[str] | None = None) -> Outcome:
        """Remove stored keys (all by default) and reset them in memory."""
        keys = list(keys) if keys else list(storage.ALL_KEYS)
        unknown = [k for k in keys if k not in storage.ALL_KEYS]
        if unknown:
            return Outcome.failure(ErrorKind.STORAGE_ERROR,
                                   f'Unknown data keys: {", ".join(unknown)}')

        defaults = AppState()
        field_for_key = {
            storage.ATHLETES: 'athletes',
            storage.TEAMS: 'teams',
            storage.EVENT_POOL: 'event_pool',
            storage.EVENT_SEQUENCE: 'event_sequence',
            storage.RELAY_POSITIONS: 'relay_positions',
            storage.REVEALED_INDEX: 'revealed_index',
            storage.EVENT_RESULTS: 'event_results',
        }
        for key in keys:
            setattr(self.state, field_for_key[key], getattr(defaults, field_for_key[key]))
        if storage.EVENT_POOL in keys:
            self.state.event_pool = self._default_pool()
        if storage.EVENT_SEQUENCE in keys:
            # results and progress belong to the cleared sequence
            self.state.revealed_index = 0
            self.state.event_results = []
            for key in (storage.REVEALED_INDEX, storage.EVENT_RESULTS):
                if key not in keys:
                    keys.append(key)

        failed = self.store.multi_remove(keys)
        if failed:
            return Outcome.failure(ErrorKind.STORAGE_ERROR,
                                   f'Failed to clear: {", ".join(failed)}')
        return Outcome.success(keys, 'Data has been cleared.')

    def data_stats(self) -> dict:
        s = self.state
        return {
            'athletes': len(s.athletes),
            'teams': len(s.teams),
            'events': len(s.event_sequence),
            'revealed': s.revealed_index,
            'results': len(s.event_results),
        }

    def export_snapshot(self, export_date: str | None = None) -> dict:
        return storage.build_export(self.state, self.config.app_version, export_date)
