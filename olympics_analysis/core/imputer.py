#!/usr/bin/env python3
"""
Imputer - Fills missing medals, weights and heights

Weights take the median and heights the mean of the non-missing values in
the row's (Year, Sex) group. Both estimates are computed from the table as
passed in, so neither field sees values imputed into the other.
"""

from typing import Dict, List, Tuple, Union

import pandas as pd

from .base_analyzer import BaseAnalyzer
from .constants import (
    CONFIG_KEY_IMPUTATION,
    COL_HEIGHT,
    COL_MEDAL,
    COL_WEIGHT,
    IMPUTATION_GROUP_KEY,
    NO_MEDAL,
    EmptyGroupPolicy,
    Statistic,
)
from .exceptions import ImputationError

MEASUREMENT_STATISTICS = {
    COL_WEIGHT: Statistic.MEDIAN,
    COL_HEIGHT: Statistic.MEAN,
}

PolicyLike = Union[EmptyGroupPolicy, str]


def substitute_medals(df: pd.DataFrame, sentinel: str = NO_MEDAL) -> pd.DataFrame:
    """Replace missing medals with the sentinel label."""
    result = df.copy()
    result[COL_MEDAL] = result[COL_MEDAL].fillna(sentinel)
    return result


def group_estimates(df: pd.DataFrame, column: str, statistic: Union[Statistic, str]) -> pd.DataFrame:
    """
    Central-tendency estimate of a column per (Year, Sex) group.

    Returns a frame indexed by (Year, Sex) with the estimate and the number
    of non-missing observations it was computed from. Groups without
    observations carry a missing estimate.
    """
    grouped = df.groupby(IMPUTATION_GROUP_KEY)[column]
    estimates = grouped.agg(Statistic(statistic).value).to_frame("estimate")
    estimates["observations"] = grouped.count()
    return estimates


def row_estimates(df: pd.DataFrame, column: str, statistic: Union[Statistic, str]) -> pd.Series:
    """Each row's group estimate, missing where the group has no observations."""
    return df.groupby(IMPUTATION_GROUP_KEY)[column].transform(Statistic(statistic).value)


def estimate_columns(df: pd.DataFrame, statistics: Dict[str, Statistic]) -> Dict[str, pd.Series]:
    """Per-row estimates for several columns, all taken from the same input table."""
    return {column: row_estimates(df, column, statistic) for column, statistic in statistics.items()}


def empty_groups(df: pd.DataFrame, column: str, estimates: pd.Series = None) -> List[Tuple]:
    """(Year, Sex) groups with no non-missing values of the column."""
    if estimates is None:
        estimates = row_estimates(df, column, Statistic.MEDIAN)
    keys = df.loc[estimates.isna(), IMPUTATION_GROUP_KEY].drop_duplicates()
    return sorted((int(year), str(sex)) for year, sex in keys.itertuples(index=False))


def count_fillable(df: pd.DataFrame, estimates: Dict[str, pd.Series]) -> Dict[str, int]:
    """Number of missing cells per column whose group has an estimate."""
    return {
        column: int((df[column].isna() & column_estimates.notna()).sum())
        for column, column_estimates in estimates.items()
    }


def impute_columns(
    df: pd.DataFrame,
    statistics: Dict[str, Statistic],
    policy: PolicyLike = EmptyGroupPolicy.PROPAGATE,
    estimates: Dict[str, pd.Series] = None,
) -> pd.DataFrame:
    """Impute several columns at once, every estimate taken from the input table."""
    policy = EmptyGroupPolicy(policy)
    if estimates is None:
        estimates = estimate_columns(df, statistics)

    if policy is EmptyGroupPolicy.RAISE:
        for column in statistics:
            groups = empty_groups(df, column, estimates[column])
            if groups:
                raise ImputationError(column, groups)

    result = df.copy()
    for column in statistics:
        result[column] = df[column].fillna(estimates[column])

    if policy is EmptyGroupPolicy.DROP:
        still_missing = result[list(statistics)].isna().any(axis=1)
        result = result.loc[~still_missing].reset_index(drop=True)

    return result


def impute_weight(df: pd.DataFrame, policy: PolicyLike = EmptyGroupPolicy.PROPAGATE) -> pd.DataFrame:
    return impute_columns(df, {COL_WEIGHT: Statistic.MEDIAN}, policy)


def impute_height(df: pd.DataFrame, policy: PolicyLike = EmptyGroupPolicy.PROPAGATE) -> pd.DataFrame:
    return impute_columns(df, {COL_HEIGHT: Statistic.MEAN}, policy)


class Imputer(BaseAnalyzer):
    """Applies the configured imputation policy to the athlete-event table."""

    def __init__(
        self,
        config_file: str,
        data_directory: str,
        output_directory: str = None,
        context=None,
        config_override=None,
    ):
        super().__init__(config_file, data_directory, output_directory, context=context, config_override=config_override)
        options = self.get_section(CONFIG_KEY_IMPUTATION)
        self.policy = EmptyGroupPolicy(options.get('empty_group_policy', EmptyGroupPolicy.PROPAGATE.value))
        self.medal_sentinel = options.get('medal_sentinel', NO_MEDAL)

    def substitute_medals(self, df: pd.DataFrame) -> pd.DataFrame:
        missing = int(df[COL_MEDAL].isna().sum())
        result = substitute_medals(df, self.medal_sentinel)
        self.logger.info(f"Medal substitution: {missing:,} missing medals set to '{self.medal_sentinel}'")
        return result

    def impute_measurements(self, df: pd.DataFrame) -> pd.DataFrame:
        """Impute weight (group median) and height (group mean) under the configured policy."""
        result, _ = self.impute_measurements_with_counts(df)
        return result

    def impute_measurements_with_counts(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, Dict[str, int]]:
        """Imputed table plus the number of cells filled per column."""
        estimates = estimate_columns(df, MEASUREMENT_STATISTICS)

        if self.policy is not EmptyGroupPolicy.RAISE:
            for column, column_estimates in estimates.items():
                groups = empty_groups(df, column, column_estimates)
                if groups:
                    self.logger.warning(
                        f"{len(groups)} (Year, Sex) groups have no observed {column}; "
                        f"policy '{self.policy.value}' applies to their rows"
                    )

        result = impute_columns(df, MEASUREMENT_STATISTICS, self.policy, estimates)

        filled = count_fillable(df, estimates)
        for column, count in filled.items():
            self.logger.info(f"{column} imputation: {count:,} of {int(df[column].isna().sum()):,} missing values filled")
        if len(result) != len(df):
            self.logger.info(f"Dropped {len(df) - len(result):,} records in groups without observations")

        return result, filled

    def impute(self, df: pd.DataFrame) -> pd.DataFrame:
        """Medal substitution followed by weight and height imputation."""
        return self.impute_measurements(self.substitute_medals(df))
