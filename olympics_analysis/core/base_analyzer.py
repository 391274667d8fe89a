#!/usr/bin/env python3
"""
Base Analyzer Class - Core functionality and configuration management
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from datetime import datetime
from typing import Dict, Any, Optional

import yaml

from .constants import (
    CONFIG_KEY_DATASETS,
    GLOBAL_DEFAULTS_STEM,
)


@dataclass
class AnalysisContext:
    """Shared context for analysis components to avoid repeated config/loading work."""
    config_file: Path
    data_dir: Path
    output_dir: Path
    database_name: str
    config: Dict[str, Any]
    global_defaults: Dict[str, Any]
    logger: logging.Logger


class BaseAnalyzer:
    """Base class for Olympics analysis components with configuration management."""

    def __init__(
        self,
        config_file: str,
        data_directory: str,
        output_directory: str = None,
        context: Optional[AnalysisContext] = None,
        config_override: Optional[Dict[str, Any]] = None,
    ):
        """Initialize the base analyzer with configuration and directories."""
        # Minimal logger for early setup; replaced once context is ready
        self.logger = logging.getLogger(self.__class__.__name__)

        # Reuse existing context when orchestrating multiple components
        if context:
            self._apply_context(context)
            return

        self.config_file = Path(config_file)

        self.config = self._load_configuration()
        if config_override:
            self._merge_config(self.config, config_override)
        self._validate_config(self.config)

        self.database_name = str(self.config.get('database_name') or self.config_file.stem)

        self.data_dir, self.output_dir = self._resolve_directories(data_directory, output_directory)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        # Initialize logging once directories are available
        self.logger = self._setup_logging()

        self.global_defaults = self._load_global_defaults()

        # Persist context for reuse by other components
        self.context = AnalysisContext(
            config_file=self.config_file,
            data_dir=self.data_dir,
            output_dir=self.output_dir,
            database_name=self.database_name,
            config=self.config,
            global_defaults=self.global_defaults,
            logger=self.logger,
        )

        self.logger.info(f"Initialized analyzer for {self.database_name}")

    def _apply_context(self, context: AnalysisContext):
        """Attach an existing analysis context (used by orchestrator to share state)."""
        self.context = context
        self.config_file = context.config_file
        self.data_dir = context.data_dir
        self.output_dir = context.output_dir
        self.database_name = context.database_name
        self.config = context.config
        self.global_defaults = context.global_defaults
        self.logger = context.logger

    def _setup_logging(self) -> logging.Logger:
        """Setup logging configuration."""
        log_dir = self.output_dir / "logs"
        log_dir.mkdir(exist_ok=True)

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        log_file = log_dir / f"analysis_{timestamp}.log"

        logging.basicConfig(
            level=logging.INFO,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            handlers=[
                logging.FileHandler(log_file),
                logging.StreamHandler()
            ]
        )

        return logging.getLogger(self.__class__.__name__)

    def _load_any_config(self, path: Path) -> Dict[str, Any]:
        """Load a YAML or JSON config file."""
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        try:
            if suffix in ['.yaml', '.yml']:
                with open(path, 'r', encoding='utf-8') as f:
                    return yaml.safe_load(f) or {}
            # Default to JSON
            with open(path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in configuration file {path}: {e}")
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {path}: {e}")

    def _load_configuration(self) -> Dict[str, Any]:
        """Load analysis configuration from YAML or JSON file."""
        config = self._load_any_config(self.config_file)
        self.logger.info(f"Loaded configuration from {self.config_file}")
        return config

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]):
        """Deep-merge override dict into base config."""
        for key, value in (override or {}).items():
            if isinstance(value, dict) and isinstance(base.get(key), dict):
                self._merge_config(base[key], value)
            else:
                base[key] = value

    def _validate_config(self, config: Dict[str, Any]):
        """Fail early on configs that cannot drive the pipeline."""
        datasets = config.get(CONFIG_KEY_DATASETS)
        if not isinstance(datasets, dict) or not datasets:
            raise ValueError(f"Configuration {self.config_file} has no '{CONFIG_KEY_DATASETS}' section")
        for dataset_name, dataset_config in datasets.items():
            if not (dataset_config or {}).get('filename') and not (dataset_config or {}).get('path'):
                raise ValueError(f"Dataset {dataset_name} missing filename/path")

    def _resolve_directories(self, data_directory: str, output_directory: Optional[str]):
        """Determine data/output directories."""
        # Explicit directories from config take precedence
        config_data_dir = self.config.get('data_directory') or self.config.get('data_dir')
        if config_data_dir:
            data_dir = Path(config_data_dir).expanduser().resolve()
        else:
            data_dir = Path(data_directory or ".").resolve()

        output_dir = Path(output_directory).expanduser() if output_directory else data_dir / "results"
        return data_dir, output_dir

    def _load_global_defaults(self) -> Dict[str, Any]:
        """Load global defaults configuration (supports YAML/JSON)."""
        try:
            defaults = self._load_auxiliary_config(GLOBAL_DEFAULTS_STEM)
            if defaults is None:
                return {}
            return defaults.get(GLOBAL_DEFAULTS_STEM, defaults)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not load global defaults: {e}")
            return {}

    def _load_auxiliary_config(self, stem: str) -> Optional[Dict[str, Any]]:
        """Load auxiliary config (global defaults) from YAML or JSON beside the main config."""
        for ext in ['.yaml', '.yml', '.json']:
            candidate = self.config_file.parent / f"{stem}{ext}"
            if candidate.exists():
                return self._load_any_config(candidate)
        return None

    def get_section(self, key: str) -> Dict[str, Any]:
        """Return a config section as a dict (empty when absent)."""
        return self.config.get(key) or {}

    def get_database_name(self) -> str:
        """Get the database name from config or provided parameter."""
        return self.database_name or self.config.get('database_name', 'Unknown Database')
