"""
Table schemas - declared column types for the two input tables and the
EfficiencyRatio record produced by the aggregator.
"""

from dataclasses import dataclass, asdict
from typing import List, Optional, Tuple

from .constants import (
    COL_ID, COL_NAME, COL_SEX, COL_AGE, COL_HEIGHT, COL_WEIGHT, COL_TEAM,
    COL_NOC, COL_GAMES, COL_YEAR, COL_SEASON, COL_CITY, COL_SPORT,
    COL_EVENT, COL_MEDAL, COL_REGION, COL_NOTES, MEDALS,
)

INTEGER = "integer"
REAL = "real"
STRING = "string"
NOC_CODE = "noc"


@dataclass(frozen=True)
class ColumnSpec:
    """Declared type of one input column."""
    name: str
    kind: str = STRING
    nullable: bool = False
    choices: Optional[Tuple[str, ...]] = None
    unique: bool = False


ATHLETE_EVENT_SCHEMA: List[ColumnSpec] = [
    ColumnSpec(COL_ID, INTEGER),
    ColumnSpec(COL_NAME),
    ColumnSpec(COL_SEX, choices=("M", "F")),
    ColumnSpec(COL_AGE, INTEGER, nullable=True),
    ColumnSpec(COL_HEIGHT, REAL, nullable=True),
    ColumnSpec(COL_WEIGHT, REAL, nullable=True),
    ColumnSpec(COL_TEAM),
    ColumnSpec(COL_NOC, NOC_CODE),
    ColumnSpec(COL_GAMES),
    ColumnSpec(COL_YEAR, INTEGER),
    ColumnSpec(COL_SEASON, choices=("Summer", "Winter")),
    ColumnSpec(COL_CITY),
    ColumnSpec(COL_SPORT),
    ColumnSpec(COL_EVENT),
    ColumnSpec(COL_MEDAL, nullable=True, choices=MEDALS),
]

# A handful of published NOC codes (ROT, TUV, UNK) carry no region name
NOC_REGION_SCHEMA: List[ColumnSpec] = [
    ColumnSpec(COL_NOC, NOC_CODE, unique=True),
    ColumnSpec(COL_REGION, nullable=True),
    ColumnSpec(COL_NOTES, nullable=True),
]


def column_names(schema: List[ColumnSpec]) -> List[str]:
    return [spec.name for spec in schema]


@dataclass(frozen=True)
class EfficiencyRatio:
    """Medal count over athlete-event count for one NOC (or one NOC in one year)."""
    noc: str
    region: Optional[str]
    total_medals: int
    total_athletes: int
    ratio: float
    year: Optional[int] = None

    def to_dict(self):
        return asdict(self)
