"""
Core constants and identifiers used across the analysis framework.

Centralizing these values avoids hardcoded strings scattered throughout
the codebase and makes it easier to extend with new config keys or tables.
"""

from enum import Enum

# Configuration keys
CONFIG_KEY_DATASETS = "datasets"
CONFIG_KEY_IMPUTATION = "imputation_options"
CONFIG_KEY_AGGREGATION = "aggregation_options"
CONFIG_KEY_EXPORT = "export_options"

# Dataset names as used in the datasets section of the config
ATHLETE_EVENTS_DATASET = "athlete_events"
NOC_REGIONS_DATASET = "noc_regions"

# Auxiliary config filenames (without extension)
GLOBAL_DEFAULTS_STEM = "global_defaults"

# Output filenames
BASIC_STATS_FILE = "basic_statistics.json"
CLEANED_EVENTS_FILE = "cleaned_athlete_events.csv"
GLOBAL_RATIOS_FILE = "efficiency_ratios.csv"
YEARLY_RATIOS_FILE = "efficiency_ratios_by_year.csv"

# Defaults used when the config does not say otherwise
DEFAULT_NULL_INDICATORS = ["", "NA"]
DEFAULT_ENCODINGS = ["utf-8", "latin-1", "cp1252"]
NO_MEDAL = "NoMedal"

# Column names
COL_ID = "ID"
COL_NAME = "Name"
COL_SEX = "Sex"
COL_AGE = "Age"
COL_HEIGHT = "Height"
COL_WEIGHT = "Weight"
COL_TEAM = "Team"
COL_NOC = "NOC"
COL_GAMES = "Games"
COL_YEAR = "Year"
COL_SEASON = "Season"
COL_CITY = "City"
COL_SPORT = "Sport"
COL_EVENT = "Event"
COL_MEDAL = "Medal"
COL_REGION = "region"
COL_NOTES = "notes"

# Partition key for imputation and the intended primary key of a row
IMPUTATION_GROUP_KEY = [COL_YEAR, COL_SEX]
ATHLETE_EVENT_KEY = [COL_ID, COL_GAMES, COL_EVENT]

MEDALS = ("Gold", "Silver", "Bronze")


class EmptyGroupPolicy(str, Enum):
    """What the imputer does with a (Year, Sex) group that has no observations."""
    PROPAGATE = "propagate"
    RAISE = "raise"
    DROP = "drop"


class Statistic(str, Enum):
    """Central-tendency estimates supported by the imputer."""
    MEDIAN = "median"
    MEAN = "mean"
