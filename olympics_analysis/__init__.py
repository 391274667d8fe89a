"""
Olympics Analysis Module
Provides tools for cleaning and aggregating the Olympic athlete-event dataset.
"""

__version__ = "1.0.0"
__author__ = "Olympics Analysis Framework"

# Import main classes for easy access
from .olympics_analyzer import OlympicsAnalysisFramework, PipelineResult, CleaningReport
from .core.base_analyzer import BaseAnalyzer
from .core.data_loader import DataLoader
from .core.deduplicator import Deduplicator
from .core.imputer import Imputer
from .core.aggregator import Aggregator
from .core.result_exporter import ResultExporter
from .core.schema import EfficiencyRatio
from .core.exceptions import AnalysisError, ParseError, ImputationError, JoinGapError

__all__ = [
    'OlympicsAnalysisFramework',
    'PipelineResult',
    'CleaningReport',
    'BaseAnalyzer',
    'DataLoader',
    'Deduplicator',
    'Imputer',
    'Aggregator',
    'ResultExporter',
    'EfficiencyRatio',
    'AnalysisError',
    'ParseError',
    'ImputationError',
    'JoinGapError',
]
