"""Adapter for athlete rosters in CSV, TSV or JSON form.

Handles three formats:
  - CSV: header row with name, tier and optional bestEvents columns
  - TSV: same columns, tab-separated
  - JSON: array of objects with the same keys

Columns are matched by name (case-insensitive, spaces/underscores ignored).
Unquoted extra CSV fields after the header width belong to bestEvents, so
"John Smith,High,100m,200m" keeps both events.
"""

import csv
import io
import json

from race_roulette.core.models import Athlete, Tier
from .base import BaseAdapter, RosterImportError


# Map common column name variations to our canonical names
COLUMN_ALIASES = {
    'name': 'name',
    'athlete': 'name',
    'athletename': 'name',
    'runner': 'name',
    'tier': 'tier',
    'level': 'tier',
    'skill': 'tier',
    'bestevents': 'bestEvents',
    'events': 'bestEvents',
    'best': 'bestEvents',
}

REQUIRED_COLUMNS = ('name', 'tier')


def _canonical(column) -> str | None:
    key = str(column).lower().strip().replace(' ', '').replace('_', '')
    return COLUMN_ALIASES.get(key)


class RosterAdapter(BaseAdapter):
    """Parse roster files or pasted roster text."""

    def parse(self, data_path: str) -> list:
        try:
            with open(data_path, 'r', encoding='utf-8-sig') as f:
                content = f.read()
        except OSError as e:
            raise RosterImportError(f'Cannot read roster file {data_path}: {e}') from e
        return self.parse_text(content)

    def parse_text(self, content: str) -> list:
        """Auto-detect format (JSON vs delimited text) and parse."""
        content = content.strip()
        if not content:
            raise RosterImportError('Please enter CSV data')

        if content.startswith('['):
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                raise RosterImportError(f'Invalid JSON roster: {e}') from e
            return self._parse_json_array(data)

        return self._parse_delimited(content)

    def _parse_json_array(self, data) -> list:
        if not isinstance(data, list):
            raise RosterImportError('JSON roster must be an array of athletes')
        rows = []
        for row in data:
            if not isinstance(row, dict):
                raise RosterImportError('JSON roster entries must be objects')
            mapped = {}
            for key, value in row.items():
                canonical = _canonical(key)
                if canonical:
                    mapped[canonical] = value
            rows.append(mapped)

        if not rows:
            raise RosterImportError('JSON roster has no athletes')
        if not all(col in rows[0] for col in REQUIRED_COLUMNS):
            raise RosterImportError('Roster must have "name" and "tier" columns')
        return [self._build_athlete(row, i + 1) for i, row in enumerate(rows)]

    def _parse_delimited(self, content: str) -> list:
        lines = [line for line in content.splitlines() if line.strip()]
        delimiter = '\t' if '\t' in lines[0] else ','
        reader = csv.reader(io.StringIO('\n'.join(lines)), delimiter=delimiter)
        try:
            table = list(reader)
        except csv.Error as e:
            raise RosterImportError(f'There was an error parsing the CSV data: {e}') from e

        header = [_canonical(col) for col in table[0]]
        if not all(col in header for col in REQUIRED_COLUMNS):
            raise RosterImportError('CSV must have "name" and "tier" columns')
        if len(table) < 2:
            raise RosterImportError('CSV has a header but no athletes')

        best_idx = header.index('bestEvents') if 'bestEvents' in header else None
        athletes = []
        for row_num, parts in enumerate(table[1:], start=1):
            row = {}
            for idx, col in enumerate(header):
                if col and idx < len(parts):
                    row[col] = parts[idx]
            extra = parts[len(header):]
            if extra and best_idx is not None:
                row['bestEvents'] = ','.join([row.get('bestEvents', '')] + extra)
            athletes.append(self._build_athlete(row, row_num))
        return athletes

    @staticmethod
    def _build_athlete(row: dict, row_num: int) -> Athlete:
        name = str(row.get('name') or '').strip()
        if not name:
            raise RosterImportError(f'Row {row_num}: athlete name is missing')
        try:
            tier = Tier.parse(row.get('tier'))
        except ValueError as e:
            raise RosterImportError(f'Row {row_num} ({name}): {e}') from e
        best = row.get('bestEvents')
        best = str(best).strip().strip(',').strip() if best is not None else ''
        return Athlete(name=name, tier=tier, best_events=best or None)
