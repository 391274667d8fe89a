#!/usr/bin/env python3
"""
Aggregator - Medal efficiency ratios per NOC and per (NOC, Year)

total_athletes counts athlete-event rows, not distinct athletes. The
athlete-count grouping is the authoritative key set: NOCs that won nothing
appear with zero medals. After sorting by ratio the table is narrowed to
NOCs that have a row in the region table.
"""

from typing import List, Optional, Sequence, Tuple

import pandas as pd

from .base_analyzer import BaseAnalyzer
from .constants import (
    CONFIG_KEY_AGGREGATION,
    COL_MEDAL,
    COL_NOC,
    COL_REGION,
    COL_YEAR,
    MEDALS,
)
from .exceptions import JoinGapError
from .schema import EfficiencyRatio

TOTAL_MEDALS = "total_medals"
TOTAL_ATHLETES = "total_athletes"
RATIO = "ratio"
POSITION = "_position"


def count_ratios(df: pd.DataFrame, keys: Sequence[str]) -> pd.DataFrame:
    """
    Medal rows, athlete-event rows and their quotient per group, sorted by ratio.

    A row counts as a medal row when its Medal is Gold, Silver or Bronze, so
    both the sentinel and a still-missing medal count as no medal.
    """
    keys = list(keys)
    is_medal = df[COL_MEDAL].isin(list(MEDALS)).astype("int64")

    # Grouping every row keys the result on the athlete-count side, so a
    # group without medal rows still appears, with a medal count of 0
    flagged = df[keys].assign(**{TOTAL_MEDALS: is_medal})
    counts = flagged.groupby(keys).agg(
        **{TOTAL_MEDALS: (TOTAL_MEDALS, "sum"), TOTAL_ATHLETES: (TOTAL_MEDALS, "size")}
    )
    counts = counts.astype("int64")
    counts[RATIO] = counts[TOTAL_MEDALS] / counts[TOTAL_ATHLETES]

    counts = counts.reset_index()
    return counts.sort_values(RATIO, ascending=False, kind="mergesort").reset_index(drop=True)


def attach_regions(counts: pd.DataFrame, noc_regions: pd.DataFrame) -> Tuple[pd.DataFrame, List[str]]:
    """Inner-join region names onto the counts, then restore the ratio order."""
    regions = noc_regions[[COL_NOC, COL_REGION]]
    # Older pandas returns inner-merge rows grouped by key rather than in left order
    positioned = counts.assign(**{POSITION: range(len(counts))})
    joined = positioned.merge(regions, on=COL_NOC, how="inner")
    joined = joined.sort_values(POSITION, kind="mergesort").drop(columns=POSITION).reset_index(drop=True)
    dropped = sorted(set(counts[COL_NOC]) - set(regions[COL_NOC]))
    return joined, dropped


def _to_records(joined: pd.DataFrame, with_year: bool) -> List[EfficiencyRatio]:
    ratios = []
    for row in joined.to_dict("records"):
        region = row[COL_REGION]
        ratios.append(EfficiencyRatio(
            noc=str(row[COL_NOC]),
            region=None if pd.isna(region) else str(region),
            total_medals=int(row[TOTAL_MEDALS]),
            total_athletes=int(row[TOTAL_ATHLETES]),
            ratio=float(row[RATIO]),
            year=int(row[COL_YEAR]) if with_year else None,
        ))
    return ratios


def _efficiency_ratios(df, noc_regions, keys, strict) -> Tuple[List[EfficiencyRatio], List[str]]:
    joined, dropped = attach_regions(count_ratios(df, keys), noc_regions)
    if strict and dropped:
        raise JoinGapError(dropped)
    return _to_records(joined, with_year=COL_YEAR in keys), dropped


def global_ratios(df: pd.DataFrame, noc_regions: pd.DataFrame, strict: bool = False) -> List[EfficiencyRatio]:
    """Efficiency ratio per NOC, highest first."""
    ratios, _ = _efficiency_ratios(df, noc_regions, [COL_NOC], strict)
    return ratios


def yearly_ratios(df: pd.DataFrame, noc_regions: pd.DataFrame, strict: bool = False) -> List[EfficiencyRatio]:
    """Efficiency ratio per (NOC, Year), highest first."""
    ratios, _ = _efficiency_ratios(df, noc_regions, [COL_NOC, COL_YEAR], strict)
    return ratios


def ratios_to_frame(ratios: List[EfficiencyRatio], with_year: Optional[bool] = None) -> pd.DataFrame:
    """Tabular view of ratio records for export and display."""
    if with_year is None:
        with_year = any(r.year is not None for r in ratios)
    columns = [COL_NOC, COL_REGION] + ([COL_YEAR] if with_year else []) + [TOTAL_MEDALS, TOTAL_ATHLETES, RATIO]
    rows = [
        {
            COL_NOC: r.noc,
            COL_REGION: r.region,
            COL_YEAR: r.year,
            TOTAL_MEDALS: r.total_medals,
            TOTAL_ATHLETES: r.total_athletes,
            RATIO: r.ratio,
        }
        for r in ratios
    ]
    return pd.DataFrame(rows, columns=columns)


class Aggregator(BaseAnalyzer):
    """Computes efficiency ratios over the cleaned athlete-event table."""

    def __init__(
        self,
        config_file: str,
        data_directory: str,
        output_directory: str = None,
        context=None,
        config_override=None,
    ):
        super().__init__(config_file, data_directory, output_directory, context=context, config_override=config_override)
        self.strict_region_join = bool(self.get_section(CONFIG_KEY_AGGREGATION).get('strict_region_join', False))

    def compute_global_ratios(self, df: pd.DataFrame, noc_regions: pd.DataFrame) -> List[EfficiencyRatio]:
        ratios, dropped = _efficiency_ratios(df, noc_regions, [COL_NOC], self.strict_region_join)
        self._log_result("NOC", ratios, dropped)
        return ratios

    def compute_yearly_ratios(self, df: pd.DataFrame, noc_regions: pd.DataFrame) -> List[EfficiencyRatio]:
        ratios, dropped = _efficiency_ratios(df, noc_regions, [COL_NOC, COL_YEAR], self.strict_region_join)
        self._log_result("(NOC, Year)", ratios, dropped)
        return ratios

    def _log_result(self, granularity: str, ratios: List[EfficiencyRatio], dropped: List[str]):
        self.logger.info(f"Computed efficiency ratios for {len(ratios):,} {granularity} groups")
        if dropped:
            self.logger.info(f"Region join dropped {len(dropped)} NOC codes without a region row: {', '.join(dropped)}")
