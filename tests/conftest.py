"""
Shared fixtures: small athlete-event / NOC-region tables and config files.
"""

import csv
from pathlib import Path

import pytest
import yaml

from olympics_analysis.core.data_loader import parse_table, read_raw_csv
from olympics_analysis.core.schema import (
    ATHLETE_EVENT_SCHEMA,
    NOC_REGION_SCHEMA,
    column_names,
)

EVENT_COLUMNS = column_names(ATHLETE_EVENT_SCHEMA)
REGION_COLUMNS = column_names(NOC_REGION_SCHEMA)

EVENT_DEFAULTS = {
    "ID": "1",
    "Name": "Athlete",
    "Sex": "M",
    "Age": "25",
    "Height": "180",
    "Weight": "75",
    "Team": "Team",
    "NOC": "ABC",
    "Games": "2000 Summer",
    "Year": "2000",
    "Season": "Summer",
    "City": "Sydney",
    "Sport": "Athletics",
    "Event": "100m",
    "Medal": "NA",
}


def event(**fields):
    """One athlete-event row as CSV text cells."""
    row = dict(EVENT_DEFAULTS)
    row.update({k: str(v) for k, v in fields.items()})
    return row


def write_csv(path: Path, columns, rows):
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(columns)
        for row in rows:
            writer.writerow([row[c] for c in columns] if isinstance(row, dict) else row)
    return path


@pytest.fixture
def make_events(tmp_path):
    """Factory: list of event() rows -> parsed athlete-event frame."""
    counter = {"n": 0}

    def _make(rows):
        counter["n"] += 1
        path = write_csv(tmp_path / f"events_{counter['n']}.csv", EVENT_COLUMNS, rows)
        return parse_table(read_raw_csv(path), ATHLETE_EVENT_SCHEMA, source=path.name)

    return _make


@pytest.fixture
def make_regions(tmp_path):
    """Factory: list of (NOC, region, notes) tuples -> parsed NOC-region frame."""
    counter = {"n": 0}

    def _make(rows):
        counter["n"] += 1
        path = write_csv(tmp_path / f"regions_{counter['n']}.csv", REGION_COLUMNS, rows)
        return parse_table(read_raw_csv(path), NOC_REGION_SCHEMA, source=path.name)

    return _make


@pytest.fixture
def sample_rows():
    """Two NOCs with known ratios, one unmapped NOC and one exact duplicate."""
    rows = []
    # ABC: 10 athlete-events, 2 medals
    for i in range(10):
        medal = "Gold" if i == 0 else ("Silver" if i == 1 else "NA")
        rows.append(event(ID=100 + i, NOC="ABC", Medal=medal, Event=f"Event {i}"))
    # XYZ: 5 athlete-events, no medals, one missing weight
    for i in range(5):
        rows.append(event(ID=200 + i, NOC="XYZ", Sex="F", Weight="NA" if i == 0 else 60 + i, Event=f"Event {i}"))
    # QQQ has no region row
    rows.append(event(ID=300, NOC="QQQ", Medal="Bronze"))
    # Exact duplicate of the first row
    rows.append(dict(rows[0]))
    return rows


@pytest.fixture
def sample_regions():
    return [("ABC", "Abcland", "NA"), ("XYZ", "Xyzland", "NA"), ("ROT", "NA", "Refugee Olympic Team")]


@pytest.fixture
def config_file(tmp_path, sample_rows, sample_regions):
    """Analysis config plus data files in tmp_path; returns the config path."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    write_csv(data_dir / "athlete_events.csv", EVENT_COLUMNS, sample_rows)
    write_csv(data_dir / "noc_regions.csv", REGION_COLUMNS, sample_regions)

    config_dir = tmp_path / "configs"
    config_dir.mkdir()
    config = {
        "database_name": "olympics_test",
        "datasets": {
            "athlete_events": {"filename": "athlete_events.csv"},
            "noc_regions": {"filename": "noc_regions.csv"},
        },
        "imputation_options": {"empty_group_policy": "propagate", "medal_sentinel": "NoMedal"},
        "aggregation_options": {"strict_region_join": False},
        "export_options": {"enabled": True},
    }
    path = config_dir / "olympics.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    (config_dir / "global_defaults.yaml").write_text(yaml.safe_dump({
        "global_defaults": {
            "data_quality_checks": {"null_indicators": ["", "NA"]},
            "descriptive_statistics": {"top_n": 3},
        }
    }), encoding="utf-8")
    return path


@pytest.fixture
def data_dir(config_file):
    return config_file.parent.parent / "data"
