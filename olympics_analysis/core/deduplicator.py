#!/usr/bin/env python3
"""
Deduplicator - Collapses exact full-row duplicates in the athlete-event table
"""

import pandas as pd

from .base_analyzer import BaseAnalyzer
from .constants import ATHLETE_EVENT_KEY


def deduplicate(df: pd.DataFrame) -> pd.DataFrame:
    """
    Drop rows identical to an earlier row in every column, keeping first-seen order.

    Missing cells compare equal to each other. Rows that only share the
    (ID, Games, Event) key are kept, see find_key_conflicts.
    """
    return df.drop_duplicates(keep="first").reset_index(drop=True)


def find_key_conflicts(df: pd.DataFrame) -> pd.DataFrame:
    """Rows of a deduplicated table that share (ID, Games, Event) with another row."""
    conflicts = df.duplicated(subset=ATHLETE_EVENT_KEY, keep=False)
    return df.loc[conflicts].sort_values(ATHLETE_EVENT_KEY, kind="mergesort")


class Deduplicator(BaseAnalyzer):
    """Removes ingestion duplicates from the athlete-event table."""

    def __init__(
        self,
        config_file: str,
        data_directory: str,
        output_directory: str = None,
        context=None,
        config_override=None,
    ):
        super().__init__(config_file, data_directory, output_directory, context=context, config_override=config_override)

    def deduplicate(self, df: pd.DataFrame) -> pd.DataFrame:
        deduplicated = deduplicate(df)

        removed = len(df) - len(deduplicated)
        self.logger.info(f"Deduplication: {len(df):,} -> {len(deduplicated):,} records ({removed:,} exact duplicates removed)")

        conflicts = find_key_conflicts(deduplicated)
        if len(conflicts) > 0:
            keys = conflicts[ATHLETE_EVENT_KEY].drop_duplicates()
            self.logger.warning(
                f"{len(keys):,} (ID, Games, Event) keys appear on {len(conflicts):,} non-identical rows; kept as-is"
            )

        return deduplicated
