#!/usr/bin/env python3
"""
Result Exporter - Descriptive statistics and hand-off of the pipeline tables
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Any, Optional

import pandas as pd

from .aggregator import ratios_to_frame
from .base_analyzer import BaseAnalyzer
from .constants import (
    BASIC_STATS_FILE,
    CLEANED_EVENTS_FILE,
    GLOBAL_RATIOS_FILE,
    YEARLY_RATIOS_FILE,
    CONFIG_KEY_EXPORT,
    ATHLETE_EVENTS_DATASET,
    NOC_REGIONS_DATASET,
    COL_AGE, COL_HEIGHT, COL_WEIGHT, COL_MEDAL, COL_SEX,
    COL_ID, COL_GAMES, COL_NOC,
)
from .schema import EfficiencyRatio

DEFAULT_NUMERIC_COLUMNS = [COL_AGE, COL_HEIGHT, COL_WEIGHT]
DEFAULT_CATEGORICAL_COLUMNS = [COL_MEDAL, COL_SEX]
DEFAULT_TOP_N = 10


def describe_numeric(series: pd.Series) -> Dict[str, Any]:
    """Count, mean, median, std, min and max of the non-missing values."""
    values = series.dropna().astype("float64")
    summary: Dict[str, Any] = {'count': int(len(values)), 'missing': int(series.isna().sum())}
    if len(values) == 0:
        return summary
    summary.update({
        'mean': float(values.mean()),
        'median': float(values.median()),
        'std': float(values.std()) if len(values) > 1 else None,
        'min': float(values.min()),
        'max': float(values.max()),
    })
    return summary


def value_counts(series: pd.Series) -> Dict[str, int]:
    counts = series.value_counts(dropna=False)
    return {("missing" if pd.isna(k) else str(k)): int(v) for k, v in counts.items()}


class ResultExporter(BaseAnalyzer):
    """Builds summary statistics and writes the tables consumed by the report stage."""

    def __init__(
        self,
        config_file: str,
        data_directory: str,
        output_directory: str = None,
        context=None,
        config_override=None,
    ):
        super().__init__(config_file, data_directory, output_directory, context=context, config_override=config_override)

    def generate_basic_statistics(
        self,
        datasets: Dict[str, pd.DataFrame],
        cleaned: pd.DataFrame,
        global_ratios: Optional[List[EfficiencyRatio]] = None,
        cleaning_report: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Generate basic statistics for the loaded tables and the cleaned athlete-events."""
        stats_defaults = self.global_defaults.get('descriptive_statistics', {})
        numeric_columns = stats_defaults.get('numeric_columns', DEFAULT_NUMERIC_COLUMNS)
        categorical_columns = stats_defaults.get('categorical_columns', DEFAULT_CATEGORICAL_COLUMNS)
        top_n = stats_defaults.get('top_n', DEFAULT_TOP_N)

        stats: Dict[str, Any] = {
            'database_name': self.get_database_name(),
            'analysis_date': datetime.now().isoformat(),
            'datasets': {}
        }

        # Dataset overview
        for dataset_name, df in datasets.items():
            stats['datasets'][dataset_name] = {
                'total_records': len(df),
                'columns': len(df.columns),
                'column_names': df.columns.tolist()
            }

        events = datasets.get(ATHLETE_EVENTS_DATASET)
        if events is not None:
            stats['datasets'][ATHLETE_EVENTS_DATASET].update({
                'unique_athletes': int(events[COL_ID].nunique()),
                'unique_games': int(events[COL_GAMES].nunique()),
                'unique_nocs': int(events[COL_NOC].nunique()),
            })
        regions = datasets.get(NOC_REGIONS_DATASET)
        if regions is not None:
            stats['datasets'][NOC_REGIONS_DATASET]['unique_nocs'] = int(regions[COL_NOC].nunique())

        stats['cleaned_records'] = len(cleaned)
        stats['numeric_statistics'] = {
            column: describe_numeric(cleaned[column]) for column in numeric_columns if column in cleaned.columns
        }
        stats['categorical_distributions'] = {
            column: value_counts(cleaned[column]) for column in categorical_columns if column in cleaned.columns
        }

        if cleaning_report:
            stats['cleaning'] = cleaning_report

        if global_ratios:
            stats['top_efficiency_ratios'] = [r.to_dict() for r in global_ratios[:top_n]]

        return stats

    def save_statistics_json(self, stats: Dict[str, Any]) -> Path:
        """Save basic statistics to JSON file."""
        stats_file = self.output_dir / BASIC_STATS_FILE
        with open(stats_file, 'w', encoding='utf-8') as f:
            json.dump(stats, f, indent=2)
        self.logger.info(f"Statistics saved to: {stats_file}")
        return stats_file

    def export_tables(
        self,
        cleaned: pd.DataFrame,
        global_ratios: List[EfficiencyRatio],
        yearly_ratios: List[EfficiencyRatio],
    ) -> Dict[str, Path]:
        """Write the cleaned table and both ratio tables as CSV."""
        if not self.get_section(CONFIG_KEY_EXPORT).get('enabled', True):
            self.logger.info("Table export disabled in configuration")
            return {}

        tables = {
            CLEANED_EVENTS_FILE: cleaned,
            GLOBAL_RATIOS_FILE: ratios_to_frame(global_ratios, with_year=False),
            YEARLY_RATIOS_FILE: ratios_to_frame(yearly_ratios, with_year=True),
        }

        written = {}
        for filename, table in tables.items():
            path = self.output_dir / filename
            table.to_csv(path, index=False, na_rep="NA")
            written[filename] = path
        self.logger.info(f"Exported {len(written)} tables to {self.output_dir}")
        return written

    def log_top_ratios(self, ratios: List[EfficiencyRatio], limit: int = None):
        """Log the leading rows of a ratio table."""
        limit = limit or self.global_defaults.get('descriptive_statistics', {}).get('top_n', DEFAULT_TOP_N)
        for i, r in enumerate(ratios[:limit], 1):
            year = f" {r.year}" if r.year is not None else ""
            self.logger.info(
                f"  {i}. {r.noc}{year} ({r.region or 'unknown region'}): "
                f"{r.total_medals:,}/{r.total_athletes:,} = {r.ratio:.3f}"
            )
