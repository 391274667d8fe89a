#!/usr/bin/env python3
"""
Data Loader - Handles dataset loading and strict type parsing

Every cell is read as text and then parsed against the declared schema of
its table. Malformed rows abort the load with a ParseError naming the file
line and column; nothing is skipped or coerced.
"""

import re
from pathlib import Path
from typing import Dict, Any, List, Sequence

import pandas as pd

from .base_analyzer import BaseAnalyzer
from .constants import (
    CONFIG_KEY_DATASETS,
    ATHLETE_EVENTS_DATASET,
    NOC_REGIONS_DATASET,
    DEFAULT_NULL_INDICATORS,
    DEFAULT_ENCODINGS,
)
from .exceptions import ParseError
from .schema import (
    ColumnSpec,
    ATHLETE_EVENT_SCHEMA,
    NOC_REGION_SCHEMA,
    INTEGER,
    REAL,
    NOC_CODE,
    column_names,
)

DATASET_SCHEMAS = {
    ATHLETE_EVENTS_DATASET: ATHLETE_EVENT_SCHEMA,
    NOC_REGIONS_DATASET: NOC_REGION_SCHEMA,
}

NOC_PATTERN = r"[A-Z]{3}"
INTEGER_PATTERN = r"[+-]?\d+"
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1


def read_raw_csv(file_path: Path, **read_params) -> pd.DataFrame:
    """
    Read a CSV as an all-text frame, header row included as row 0.

    Reading with header=None keeps the parser from guessing an index column
    and makes rows with too many fields fail instead of shifting columns.
    Rows with too few fields come back padded with NaN, which never occurs
    for a real cell because no string is treated as NA here.
    """
    try:
        return pd.read_csv(file_path, header=None, dtype=str, keep_default_na=False, **read_params)
    except pd.errors.EmptyDataError as e:
        raise ParseError(1, "*", "file is empty", source=Path(file_path).name) from e
    except pd.errors.ParserError as e:
        match = re.search(r"line (\d+)", str(e))
        row = int(match.group(1)) if match else 0
        raise ParseError(row, "*", f"wrong number of fields ({e})", source=Path(file_path).name) from e


def parse_table(
    raw: pd.DataFrame,
    schema: List[ColumnSpec],
    null_indicators: Sequence[str] = DEFAULT_NULL_INDICATORS,
    source: str = None,
) -> pd.DataFrame:
    """Parse a raw all-text frame (header in row 0) into a typed table."""
    expected = column_names(schema)
    if raw.empty:
        raise ParseError(1, "*", "missing header row", source=source)

    header = ["" if pd.isna(value) else str(value) for value in raw.iloc[0].tolist()]
    if header != expected:
        mismatch = next(
            (i for i, name in enumerate(expected) if i >= len(header) or header[i] != name),
            len(expected),
        )
        column = expected[mismatch] if mismatch < len(expected) else header[mismatch]
        raise ParseError(1, column, f"header {header} does not match expected columns {expected}", source=source)

    body = raw.iloc[1:].copy()
    body.columns = expected

    short_rows = body.isna()
    if short_rows.to_numpy().any():
        label = short_rows.any(axis=1).idxmax()
        column = short_rows.loc[label].idxmax()
        raise ParseError(
            _line_number(label), column,
            f"row has fewer fields than the {len(expected)} declared columns", source=source,
        )

    parsed = {
        spec.name: _parse_column(body[spec.name], spec, null_indicators, source)
        for spec in schema
    }
    return pd.DataFrame(parsed, index=body.index).reset_index(drop=True)


def _line_number(label) -> int:
    # Row 0 of the raw frame is the header, i.e. line 1 of the file
    return int(label) + 1


def _fail_first(mask: pd.Series, values: pd.Series, spec: ColumnSpec, problem: str, source: str):
    label = mask[mask].index[0]
    raise ParseError(_line_number(label), spec.name, f"{problem}: {values.loc[label]!r}", source=source)


def _parse_column(values: pd.Series, spec: ColumnSpec, null_indicators: Sequence[str], source: str) -> pd.Series:
    """Parse one text column according to its declared type."""
    missing = values.isin(list(null_indicators))
    if not spec.nullable and missing.any():
        _fail_first(missing, values, spec, "missing value in non-nullable column", source)

    present = values.where(~missing)

    if spec.kind == INTEGER:
        text = present.astype("string")
        malformed = ~missing & ~text.str.fullmatch(INTEGER_PATTERN).fillna(False).astype(bool)
        if malformed.any():
            _fail_first(malformed, values, spec, "not an integer", source)
        numbers = present.map(int, na_action="ignore")
        out_of_range = numbers.map(lambda v: isinstance(v, int) and not INT64_MIN <= v <= INT64_MAX).astype(bool)
        if out_of_range.any():
            _fail_first(out_of_range, values, spec, "integer out of range", source)
        parsed = numbers.astype("Int64")
    elif spec.kind == REAL:
        numbers = pd.to_numeric(present, errors="coerce")
        not_numeric = ~missing & numbers.isna()
        if not_numeric.any():
            _fail_first(not_numeric, values, spec, "not a number", source)
        parsed = numbers.astype("Float64")
    else:
        parsed = present.astype("string")
        if spec.kind == NOC_CODE:
            valid = parsed.str.fullmatch(NOC_PATTERN).fillna(False).astype(bool)
            malformed = ~missing & ~valid
            if malformed.any():
                _fail_first(malformed, values, spec, "malformed NOC code", source)
        if spec.choices:
            unexpected = ~missing & ~parsed.isin(spec.choices).astype(bool)
            if unexpected.any():
                _fail_first(unexpected, values, spec, f"expected one of {list(spec.choices)}", source)

    if spec.unique:
        duplicated = parsed.notna() & parsed.duplicated(keep="first")
        if duplicated.any():
            _fail_first(duplicated, values, spec, "duplicate value in unique column", source)

    return parsed


class DataLoader(BaseAnalyzer):
    """Handles data loading and parsing operations."""

    def __init__(
        self,
        config_file: str,
        data_directory: str,
        output_directory: str = None,
        context=None,
        config_override=None,
    ):
        super().__init__(config_file, data_directory, output_directory, context=context, config_override=config_override)
        self.raw_datasets: Dict[str, pd.DataFrame] = {}
        self.datasets: Dict[str, pd.DataFrame] = {}

    def load_datasets(self) -> Dict[str, pd.DataFrame]:
        """Load and parse the athlete-event and NOC-region tables."""
        self.logger.info("Loading datasets...")

        dataset_configs = self.config[CONFIG_KEY_DATASETS]
        for dataset_name, schema in DATASET_SCHEMAS.items():
            if dataset_name not in dataset_configs:
                raise ValueError(f"Configuration has no dataset entry for '{dataset_name}'")
            dataset_config = dataset_configs[dataset_name] or {}

            file_path = self._resolve_file_path(dataset_config)
            if not file_path.exists():
                raise FileNotFoundError(f"Dataset file not found: {file_path}")

            raw = self._read_with_encoding_fallbacks(file_path, dataset_name, dataset_config)
            self.raw_datasets[dataset_name] = raw
            self.datasets[dataset_name] = parse_table(
                raw, schema, self._null_indicators(), source=file_path.name
            )

        total_records = sum(len(df) for df in self.datasets.values())
        self.logger.info(f"Data loading completed: {len(self.datasets)} datasets, {total_records:,} total records")

        return self.datasets

    def _resolve_file_path(self, dataset_config: Dict[str, Any]) -> Path:
        filename = dataset_config.get('filename') or dataset_config.get('path')
        file_path = Path(filename)
        if not file_path.is_absolute():
            file_path = self.data_dir / filename
        return file_path

    def _null_indicators(self) -> List[str]:
        return self.global_defaults.get('data_quality_checks', {}).get('null_indicators', DEFAULT_NULL_INDICATORS)

    def _read_with_encoding_fallbacks(self, file_path: Path, dataset_name: str, dataset_config: Dict[str, Any]) -> pd.DataFrame:
        """Read the raw text table, trying each configured encoding in turn."""
        encodings = list(self.global_defaults.get('data_quality_checks', {}).get('encoding_fallbacks', DEFAULT_ENCODINGS))

        raw_loading_params = dataset_config.get('loading_params', {}) or {}
        explicit_encoding = raw_loading_params.get('encoding')
        fallback_encoding = raw_loading_params.get('fallback_encoding')
        loading_params = {k: v for k, v in raw_loading_params.items() if k not in ['encoding', 'fallback_encoding']}

        # Respect explicit encoding and optional fallback from config
        if explicit_encoding:
            encodings = [explicit_encoding] + [enc for enc in encodings if enc != explicit_encoding]
        if fallback_encoding and fallback_encoding not in encodings:
            encodings.append(fallback_encoding)

        for encoding in encodings:
            try:
                raw = read_raw_csv(file_path, encoding=encoding, **loading_params)
            except UnicodeDecodeError:
                self.logger.debug(f"Could not decode {file_path.name} as {encoding}")
                continue
            self.logger.info(f"Loaded {dataset_name} with {encoding} encoding: {max(len(raw) - 1, 0):,} records, {len(raw.columns)} columns")
            if loading_params:
                self.logger.info(f"Applied loading params for {dataset_name}: {loading_params}")
            return raw

        raise ParseError(0, "*", f"could not decode file with any of {encodings}", source=file_path.name)

    def get_dataset_summary(self) -> Dict[str, Any]:
        """Get summary information about loaded datasets."""
        summary = {}
        for dataset_name, df in self.datasets.items():
            summary[dataset_name] = {
                'total_records': len(df),
                'columns': len(df.columns),
                'column_names': df.columns.tolist(),
                'null_counts': int(df.isna().sum().sum()),
                'memory_usage': int(df.memory_usage(deep=True).sum())
            }
        return summary
