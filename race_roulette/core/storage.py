"""Local key-value storage for race day state.

A single SQLite file holds one table of string keys to JSON-encoded values,
so the whole competition survives between sessions. Every call opens its own
connection; errors are raised as sqlite3.Error for the caller to handle.
"""

import datetime
import json
import os
import sqlite3

from .models import pool_to_dict


ATHLETES = 'athletes'
TEAMS = 'teams'
EVENT_POOL = 'eventPool'
EVENT_SEQUENCE = 'eventSequence'
RELAY_POSITIONS = 'relayPositions'
REVEALED_INDEX = 'revealedIndex'
EVENT_RESULTS = 'eventResults'

ALL_KEYS = [ATHLETES, TEAMS, EVENT_POOL, EVENT_SEQUENCE, RELAY_POSITIONS,
            REVEALED_INDEX, EVENT_RESULTS]


class Storage:
    """String-keyed get/set/remove store backed by SQLite."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        db_dir = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(db_dir, exist_ok=True)
        conn = sqlite3.connect(self.db_path)
        conn.execute('''CREATE TABLE IF NOT EXISTS store (
            key TEXT PRIMARY KEY,
            value TEXT
        )''')
        conn.commit()
        conn.close()

    def get_item(self, key: str):
        """Return the decoded value for key, or None when it is not stored."""
        conn = sqlite3.connect(self.db_path)
        cur = conn.cursor()
        cur.execute('SELECT value FROM store WHERE key = ?', (key,))
        row = cur.fetchone()
        conn.close()
        if row is None:
            return None
        return json.loads(row[0])

    def set_item(self, key: str, value) -> None:
        conn = sqlite3.connect(self.db_path)
        conn.execute('INSERT OR REPLACE INTO store (key, value) VALUES (?, ?)',
                     (key, json.dumps(value)))
        conn.commit()
        conn.close()

    def remove_item(self, key: str) -> None:
        conn = sqlite3.connect(self.db_path)
        conn.execute('DELETE FROM store WHERE key = ?', (key,))
        conn.commit()
        conn.close()

    def multi_remove(self, keys: list[str]) -> list[str]:
        """Remove each key, returning the keys that could not be removed."""
        failed = []
        for key in keys:
            try:
                self.remove_item(key)
            except sqlite3.Error as e:
                print(f"Warning: could not remove '{key}': {e}")
                failed.append(key)
        return failed

    def keys(self) -> list[str]:
        conn = sqlite3.connect(self.db_path)
        cur = conn.cursor()
        cur.execute('SELECT key FROM store ORDER BY key')
        keys = [row[0] for row in cur.fetchall()]
        conn.close()
        return keys


def build_export(state, app_version: str, export_date: str | None = None) -> dict:
    """Read-only snapshot of an AppState for export."""
    return {
        ATHLETES: [a.to_dict() for a in state.athletes],
        TEAMS: [t.to_dict() for t in state.teams],
        EVENT_POOL: pool_to_dict(state.event_pool),
        EVENT_SEQUENCE: list(state.event_sequence),
        RELAY_POSITIONS: list(state.relay_positions),
        REVEALED_INDEX: state.revealed_index,
        EVENT_RESULTS: [r.to_dict() for r in state.event_results],
        'exportDate': export_date or datetime.datetime.now().isoformat(),
        'appVersion': app_version,
    }
