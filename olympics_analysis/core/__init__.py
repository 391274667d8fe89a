#!/usr/bin/env python3
"""
Core module for the Olympics analysis framework.
Contains the modular components for loading, cleaning, aggregation and export.
"""

from .base_analyzer import BaseAnalyzer, AnalysisContext
from .data_loader import DataLoader
from .deduplicator import Deduplicator
from .imputer import Imputer
from .aggregator import Aggregator
from .result_exporter import ResultExporter
from .schema import EfficiencyRatio
from .constants import EmptyGroupPolicy, Statistic
from .exceptions import AnalysisError, ParseError, ImputationError, JoinGapError

__all__ = [
    'BaseAnalyzer',
    'AnalysisContext',
    'DataLoader',
    'Deduplicator',
    'Imputer',
    'Aggregator',
    'ResultExporter',
    'EfficiencyRatio',
    'EmptyGroupPolicy',
    'Statistic',
    'AnalysisError',
    'ParseError',
    'ImputationError',
    'JoinGapError',
]
