"""
Base classes and utilities for data ingestion.

Provides common functionality for all data loaders.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, TypeVar

import pandas as pd
import pandera.errors
import pandera.pandas as pa

from fastmatcher.config.settings import MatcherConfig
from fastmatcher.exceptions import DatasetError
from fastmatcher.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T", bound=pa.DataFrameModel)
R = TypeVar("R")


class DataLoader(ABC, Generic[T, R]):
    """
    Abstract base class for data loaders.

    Loaders read a JSON source, parse it into domain objects and validate a
    tabular view of those objects against a schema, so malformed input fails
    before matching starts.
    """

    def __init__(self, config: MatcherConfig, schema: type[T]) -> None:
        """
        Initialize data loader.

        Args:
            config: Matcher configuration.
            schema: Pandera schema for validation.
        """
        self.config = config
        self.schema = schema

    @abstractmethod
    def _load_raw(self) -> Any:
        """Load raw data from source. Implemented by subclasses."""
        ...

    @abstractmethod
    def _parse(self, raw: Any) -> R:
        """Convert raw data into domain objects."""
        ...

    @abstractmethod
    def _to_frame(self, parsed: R) -> pd.DataFrame:
        """Tabular view of the parsed data for schema validation."""
        ...

    def load(self, *, validate: bool = True) -> R:
        """
        Load, parse and optionally validate data.

        Args:
            validate: Whether to validate against schema.

        Returns:
            Parsed domain objects.

        Raises:
            FileNotFoundError: If data file not found.
            DatasetError: If the data is malformed or fails validation.
        """
        log.info("Loading data", loader=self.__class__.__name__)

        parsed = self._parse(self._load_raw())

        if validate:
            self._validate(parsed)
            log.info("Schema validation passed", loader=self.__class__.__name__)

        return parsed

    def _validate(self, parsed: R) -> None:
        """Validate parsed data against the loader's schema."""
        self._check(self.schema, self._to_frame(parsed))

    @staticmethod
    def _check(schema: type[pa.DataFrameModel], df: pd.DataFrame) -> pd.DataFrame:
        """Validate a frame, reporting schema failures as DatasetError."""
        try:
            return schema.validate(df, lazy=True)
        except (pandera.errors.SchemaError, pandera.errors.SchemaErrors) as e:
            msg = f"{schema.__name__} validation failed: {e}"
            raise DatasetError(msg) from e

    def resolve_path(self, relative_path: Path) -> Path:
        """
        Resolve a relative path against data root.

        Args:
            relative_path: Path relative to data root.

        Returns:
            Resolved path.
        """
        return self.config.data_paths.data_root / relative_path

    @staticmethod
    def _read_json(path: Path) -> Any:
        """Read a JSON file, failing loudly on missing or malformed files."""
        if not path.exists():
            msg = f"Data file not found: {path}"
            raise FileNotFoundError(msg)

        log.info("Reading JSON", path=str(path))

        try:
            with path.open(encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            msg = f"Parsing data error in {path}: {e}"
            raise DatasetError(msg) from e
