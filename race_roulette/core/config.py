"""Load race day configuration from an optional JSON file.

File structure (every key optional):
    {
      "scoringTable": {"1": 10, "2": 8, "3": 6},
      "eventPool": {"sprints": [{"name": "100m", "enabled": true}]},
      "appVersion": "1.0.0"
    }
"""

import json

from .models import RouletteConfig, pool_from_dict


def load_config(config_path: str | None = None, db_path: str | None = None) -> RouletteConfig:
    """Build a RouletteConfig, falling back to defaults for anything unreadable."""
    config = RouletteConfig()
    if db_path:
        config.db_path = db_path
    if not config_path:
        return config

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except FileNotFoundError:
        print(f"Warning: Config file not found: {config_path}")
        return config
    except json.JSONDecodeError as e:
        print(f"Warning: Invalid JSON in config file: {e}")
        return config

    if 'scoringTable' in data:
        try:
            config.scoring_table = parse_scoring_table(data['scoringTable'])
        except (TypeError, ValueError) as e:
            print(f"Warning: Ignoring scoring table: {e}")
    if 'eventPool' in data:
        try:
            config.event_pool = pool_from_dict(data['eventPool'])
        except (AttributeError, KeyError, TypeError) as e:
            print(f"Warning: Ignoring event pool: {e}")
    if 'appVersion' in data:
        config.app_version = str(data['appVersion'])
    return config


def parse_scoring_table(raw: dict) -> dict:
    """Convert {"1": 10, ...} into {1: 10, ...}; places must be >= 1."""
    table = {}
    for place, points in raw.items():
        place_num = int(place)
        if place_num < 1:
            raise ValueError(f'place {place_num} must be at least 1')
        table[place_num] = int(points)
    return table
