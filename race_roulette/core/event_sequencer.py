"""Race roulette event sequence generator.

Builds a randomized running order from the enabled events of the pool:
  - relay events (names containing "4x") go only into relay slots
  - every other enabled event fills the remaining slots
  - no event is used twice in one sequence

Relay slots are either supplied by the caller (0-based) or drawn at random.
"""

import copy
import random

from .models import ErrorKind, EventOption, Outcome


RELAY_MARKER = '4x'

# Sequence lifecycle states
EMPTY = 'empty'
GENERATED = 'generated'
REVEALING = 'revealing'
COMPLETE = 'complete'

_DEFAULT_POOL = {
    'shortSprints': [
        ('50m', True), ('60m', False), ('100m', True),
        ('150m', False), ('200m', True), ('300m', True),
    ],
    'middleDistances': [
        ('400m', True), ('500m', True), ('600m', True),
        ('700m', False), ('800m', True), ('1km', False),
    ],
    'longDistances': [
        ('1.2km', True), ('1 Mile', True), ('2km', True),
        ('2.4km', True), ('2.8km', False), ('2 Mile', False),
    ],
    'relays': [
        ('4x100', True), ('4x200', True), ('4x400', True), ('4x800', False),
        ('100-100-200-400', True), ('200-200-400-800', True),
        ('1200-400-800-1600', False),
    ],
    'technicalEvents': [
        ('60mH', False), ('110mH', False), ('400mH', False),
        ('Long Jump', False), ('Triple Jump', False), ('High Jump', False),
        ('Pole Vault', False), ('Shot Put', False), ('Discus', False),
    ],
}


def default_event_pool() -> dict:
    """Return a fresh copy of the built-in event catalog."""
    return {category: [EventOption(name, enabled) for name, enabled in events]
            for category, events in _DEFAULT_POOL.items()}


def is_relay(name: str) -> bool:
    return RELAY_MARKER in name


def enabled_event_names(event_pool) -> list[str]:
    """Flatten the pool into enabled names, first occurrence wins.

    Accepts either a category -> [EventOption] mapping or a flat list of
    names (every name in a flat list counts as enabled).
    """
    if isinstance(event_pool, dict):
        names = [e.name for events in event_pool.values() for e in events if e.enabled]
    else:
        names = list(event_pool)

    seen = set()
    unique = []
    for name in names:
        if name not in seen:
            seen.add(name)
            unique.append(name)
    return unique


def split_relays(names: list[str]) -> tuple[list[str], list[str]]:
    relays = [n for n in names if is_relay(n)]
    others = [n for n in names if not is_relay(n)]
    return relays, others


def generate_sequence(event_pool, total_events: int, num_relays: int,
                      relay_positions: list[int] | None = None,
                      rng: random.Random | None = None) -> Outcome:
    """Generate a random event sequence.

    Args:
        event_pool: Category -> [EventOption] mapping, or a flat list of names.
        total_events: Length of the sequence (>= 1).
        num_relays: How many slots hold relay events (0..total_events).
        relay_positions: Optional explicit 0-based relay slots. Empty or None
            means the slots are chosen at random.
        rng: Random source; defaults to a freshly seeded random.Random.

    Returns:
        Outcome whose value is {'sequence': [...], 'relay_positions': [...]}.
    """
    rng = rng or random.Random()

    if total_events < 1:
        return Outcome.failure(ErrorKind.INVALID_EVENT_COUNT,
                               'Total events must be at least 1')
    if num_relays < 0 or num_relays > total_events:
        return Outcome.failure(
            ErrorKind.INVALID_EVENT_COUNT,
            f'Number of relays must be between 0 and {total_events}, got {num_relays}')

    relays, others = split_relays(enabled_event_names(event_pool))

    needed = total_events - num_relays
    if len(others) < needed:
        return Outcome.failure(
            ErrorKind.INSUFFICIENT_EVENTS,
            f'Not enough non-relay events. Need {needed}, but only have {len(others)}')
    if len(relays) < num_relays:
        return Outcome.failure(
            ErrorKind.INSUFFICIENT_RELAYS,
            f'Not enough relay events. Need {num_relays}, but only have {len(relays)}')

    if relay_positions:
        error = _check_relay_positions(relay_positions, total_events, num_relays)
        if error:
            return Outcome.failure(ErrorKind.INVALID_RELAY_POSITIONS, error)
        positions = sorted(relay_positions)
    else:
        positions = sorted(rng.sample(range(total_events), num_relays))

    shuffled_relays = relays[:]
    shuffled_others = others[:]
    rng.shuffle(shuffled_relays)
    rng.shuffle(shuffled_others)

    relay_slots = set(positions)
    relay_iter = iter(shuffled_relays)
    other_iter = iter(shuffled_others)
    sequence = [next(relay_iter) if slot in relay_slots else next(other_iter)
                for slot in range(total_events)]

    return Outcome.success({'sequence': sequence, 'relay_positions': positions})


def _check_relay_positions(positions: list[int], total_events: int,
                           num_relays: int) -> str | None:
    """Return an error message for unusable relay slots, else None."""
    if len(positions) != num_relays:
        return (f'Expected {num_relays} relay positions, '
                f'got {len(positions)}')
    out_of_range = [p for p in positions if not 0 <= p < total_events]
    if out_of_range:
        return (f'Relay positions must be between 1 and {total_events}: '
                f'{", ".join(str(p + 1) for p in out_of_range)}')
    if len(set(positions)) != len(positions):
        return 'Relay positions must not repeat'
    return None


# --- Reveal lifecycle ---

def sequence_state(sequence: list[str], revealed_index: int) -> str:
    if not sequence:
        return EMPTY
    if revealed_index <= 0:
        return GENERATED
    if revealed_index < len(sequence):
        return REVEALING
    return COMPLETE


def next_event(sequence: list[str], revealed_index: int) -> str | None:
    if 0 <= revealed_index < len(sequence):
        return sequence[revealed_index]
    return None


def reveal_next(sequence: list[str], revealed_index: int) -> Outcome:
    """Disclose the next event.

    Returns an Outcome whose value is {'revealed_index', 'event'}.
    """
    if not sequence:
        return Outcome.failure(ErrorKind.NO_SEQUENCE,
                               'Generate an event sequence first')
    if revealed_index >= len(sequence):
        return Outcome.failure(ErrorKind.SEQUENCE_COMPLETE,
                               'All events have been revealed!')
    event = sequence[revealed_index]
    return Outcome.success({'revealed_index': revealed_index + 1, 'event': event})


def copy_pool(event_pool: dict) -> dict:
    return copy.deepcopy(event_pool)
