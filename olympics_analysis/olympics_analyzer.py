#!/usr/bin/env python3
"""
Main Olympics Analysis Framework - Orchestrates all components
"""

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Dict, Any, List, Optional, Tuple

import pandas as pd

from .core.base_analyzer import AnalysisContext
from .core.data_loader import DataLoader
from .core.deduplicator import Deduplicator, find_key_conflicts
from .core.imputer import Imputer
from .core.aggregator import Aggregator
from .core.result_exporter import ResultExporter
from .core.constants import (
    ATHLETE_EVENTS_DATASET,
    NOC_REGIONS_DATASET,
    COL_HEIGHT,
    COL_MEDAL,
    COL_WEIGHT,
)
from .core.exceptions import AnalysisError
from .core.schema import EfficiencyRatio

DEFAULT_CONFIG = Path(__file__).parent / "configs" / "olympics.yaml"


@dataclass
class CleaningReport:
    """What the cleaning stages changed."""
    raw_records: int = 0
    duplicates_removed: int = 0
    key_conflicts: int = 0
    medals_substituted: int = 0
    weights_imputed: int = 0
    heights_imputed: int = 0
    weights_missing: int = 0
    heights_missing: int = 0
    records_dropped: int = 0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)


@dataclass
class PipelineResult:
    """Everything the report stage consumes from one run."""
    cleaned: pd.DataFrame
    global_ratios: List[EfficiencyRatio]
    yearly_ratios: List[EfficiencyRatio]
    cleaning_report: CleaningReport
    statistics: Dict[str, Any] = field(default_factory=dict)
    exported_files: Dict[str, Path] = field(default_factory=dict)


class OlympicsAnalysisFramework:
    """
    Main framework class that orchestrates all analysis components.

    This class coordinates loading, deduplication, imputation, aggregation
    and export for the Olympic athlete-event dataset.
    """

    def __init__(self, config_file: str, data_directory: str, output_directory: str = None, config_override: Dict[str, Any] = None):
        """
        Initialize the Olympics analysis framework.

        Args:
            config_file: Path to the analysis configuration (YAML or JSON)
            data_directory: Path to directory containing the CSV files
            output_directory: Path for output files (default: <data_directory>/results)
            config_override: Values deep-merged over the configuration file
        """
        # Initialize loader first to build shared context (config, logging, paths)
        self.data_loader = DataLoader(config_file, data_directory, output_directory, config_override=config_override)
        shared_ctx: AnalysisContext = self.data_loader.context

        # Initialize dependent components with the shared context
        self.deduplicator = Deduplicator(config_file, data_directory, output_directory, context=shared_ctx)
        self.imputer = Imputer(config_file, data_directory, output_directory, context=shared_ctx)
        self.aggregator = Aggregator(config_file, data_directory, output_directory, context=shared_ctx)
        self.result_exporter = ResultExporter(config_file, data_directory, output_directory, context=shared_ctx)

        # Use data_loader as the primary reference for shared properties
        self.config = self.data_loader.config
        self.logger = self.data_loader.logger
        self.output_dir = self.data_loader.output_dir

        self.datasets: Dict[str, pd.DataFrame] = {}

        self.logger.info(f"Framework initialized for {self.data_loader.get_database_name()}")

    def load_datasets(self) -> Dict[str, pd.DataFrame]:
        """Load all datasets using the data loader."""
        self.datasets = self.data_loader.load_datasets()
        return self.datasets

    def clean(self, athlete_events: pd.DataFrame) -> Tuple[pd.DataFrame, CleaningReport]:
        """Deduplicate, substitute medals and impute measurements."""
        report = CleaningReport(raw_records=len(athlete_events))

        deduplicated = self.deduplicator.deduplicate(athlete_events)
        report.duplicates_removed = len(athlete_events) - len(deduplicated)
        report.key_conflicts = len(find_key_conflicts(deduplicated))

        with_medals = self.imputer.substitute_medals(deduplicated)
        report.medals_substituted = int(deduplicated[COL_MEDAL].isna().sum())

        cleaned, filled = self.imputer.impute_measurements_with_counts(with_medals)
        report.records_dropped = len(with_medals) - len(cleaned)
        report.weights_missing = int(cleaned[COL_WEIGHT].isna().sum())
        report.heights_missing = int(cleaned[COL_HEIGHT].isna().sum())
        report.weights_imputed = filled[COL_WEIGHT]
        report.heights_imputed = filled[COL_HEIGHT]

        return cleaned, report

    def compute_ratios(self, cleaned: pd.DataFrame) -> Tuple[List[EfficiencyRatio], List[EfficiencyRatio]]:
        """Global and yearly efficiency ratios over the cleaned table."""
        noc_regions = self.datasets[NOC_REGIONS_DATASET]
        global_ratios = self.aggregator.compute_global_ratios(cleaned, noc_regions)
        yearly_ratios = self.aggregator.compute_yearly_ratios(cleaned, noc_regions)
        return global_ratios, yearly_ratios

    def run(self, export: bool = True) -> PipelineResult:
        """Run the whole pipeline: load, clean, aggregate and export."""
        if not self.datasets:
            self.load_datasets()

        cleaned, cleaning_report = self.clean(self.datasets[ATHLETE_EVENTS_DATASET])
        global_ratios, yearly_ratios = self.compute_ratios(cleaned)

        statistics = self.result_exporter.generate_basic_statistics(
            self.datasets, cleaned, global_ratios, cleaning_report.to_dict()
        )

        result = PipelineResult(
            cleaned=cleaned,
            global_ratios=global_ratios,
            yearly_ratios=yearly_ratios,
            cleaning_report=cleaning_report,
            statistics=statistics,
        )

        if export:
            self.result_exporter.save_statistics_json(statistics)
            result.exported_files = self.result_exporter.export_tables(cleaned, global_ratios, yearly_ratios)

        self.logger.info("Top efficiency ratios by NOC:")
        self.result_exporter.log_top_ratios(global_ratios)
        self.logger.info(
            f"Analysis completed: {len(cleaned):,} cleaned records, "
            f"{len(global_ratios)} NOC ratios, {len(yearly_ratios)} (NOC, Year) ratios"
        )
        return result


def _parse_arguments(argv: List[str]) -> Optional[Dict[str, Any]]:
    """Accept '<config> <data_dir> [output_dir]' or '--data-root <dir> [--output <dir>]'."""
    if len(argv) >= 2 and argv[0] == '--data-root':
        output_directory = None
        if len(argv) >= 4 and argv[2] == '--output':
            output_directory = argv[3]
        return {'config_file': str(DEFAULT_CONFIG), 'data_directory': argv[1], 'output_directory': output_directory}

    if len(argv) >= 2 and not argv[0].startswith('--'):
        return {
            'config_file': argv[0],
            'data_directory': argv[1],
            'output_directory': argv[2] if len(argv) > 2 else None,
        }

    return None


def main(argv: List[str] = None):
    """Main function for running the analysis framework."""
    args = _parse_arguments(sys.argv[1:] if argv is None else argv)
    if args is None:
        print("Usage: olympics-analysis <config_file> <data_directory> [output_directory]")
        print("   OR: olympics-analysis --data-root <data_directory> [--output <output_directory>]")
        sys.exit(1)

    framework = OlympicsAnalysisFramework(args['config_file'], args['data_directory'], args['output_directory'])
    try:
        framework.run()
    except AnalysisError as e:
        framework.logger.error(f"Analysis aborted: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
