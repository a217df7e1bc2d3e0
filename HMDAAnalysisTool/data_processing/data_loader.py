"""
Population file loader for HMDA loan/application records.

This module reads a delimited public-disclosure file, draws a reproducible
fixed-size subsample without replacement, and projects it to the analysis
columns under their analysis names.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union
import pandas as pd
import numpy as np

from ..config import COLUMN_MAPPING, TEXT_COLUMNS, TEXT_MISSING_CODES
from ..exceptions import DataError


class DataLoader:
    """
    Loader for HMDA population files.

    Supports:
    - Comma, semicolon, tab and pipe delimited files (separator detection)
    - Seeded uniform subsampling without replacement
    - Projection and renaming to the analysis columns
    """

    def __init__(self,
                 column_mapping: Optional[Dict[str, str]] = None,
                 missing_codes: Optional[Dict[str, List[str]]] = None,
                 encoding: str = 'utf-8'):
        """
        Initialize the DataLoader.

        Parameters
        ----------
        column_mapping : dict, optional
            Source column -> analysis column. Defaults to the HMDA mapping.
        missing_codes : dict, optional
            Source column -> literal tokens read as missing (default: 'NA' county code)
        encoding : str, default 'utf-8'
            Text encoding for file reading
        """
        self.column_mapping = dict(column_mapping or COLUMN_MAPPING)
        self.missing_codes = dict(TEXT_MISSING_CODES if missing_codes is None else missing_codes)
        self.encoding = encoding
        self.logger = logging.getLogger(__name__)

    def load_data(self,
                  file_path: Union[str, Path],
                  rng: np.random.Generator,
                  sample_size: Optional[int] = None,
                  **kwargs) -> pd.DataFrame:
        """
        Load a population file and draw the analysis subsample.

        Parameters
        ----------
        file_path : str or Path
            Path to the delimited data file
        rng : np.random.Generator
            Random source for the subsample draw
        sample_size : int, optional
            Number of rows to draw without replacement. None or 0 keeps every row.
        **kwargs
            Additional arguments passed to pandas.read_csv

        Returns
        -------
        pd.DataFrame
            Subsample with analysis columns, rows numbered 0..n-1
        """
        population = self.read_population(file_path, **kwargs)

        if sample_size:
            if len(population) < sample_size:
                raise DataError(
                    f"File {file_path} has {len(population)} rows, "
                    f"fewer than the requested sample of {sample_size}"
                )
            data = population.sample(n=sample_size, replace=False, random_state=rng)
            self.logger.info(f"Drew {sample_size} of {len(population)} records without replacement")
        else:
            data = population

        data = data[list(self.column_mapping)].rename(columns=self.column_mapping)
        return data.reset_index(drop=True)

    def read_population(self, file_path: Union[str, Path], **kwargs) -> pd.DataFrame:
        """Read the full population table and check the required header."""
        file_path = Path(file_path)

        if not file_path.exists():
            raise DataError(f"Data file not found: {file_path}")

        sep = kwargs.pop('sep', None) or self._detect_separator(file_path)

        self.logger.info(f"Loading data from {file_path} (separator: {sep!r})")

        try:
            data = pd.read_csv(
                file_path,
                sep=sep,
                encoding=self.encoding,
                dtype={col: str for col in TEXT_COLUMNS},
                keep_default_na=False,
                na_values=[''],
                low_memory=False,
                **kwargs
            )
        except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
            raise DataError(f"Could not read {file_path}: {e}") from e

        missing_columns = self._missing_columns(data)
        if missing_columns:
            raise DataError(
                f"File {file_path} is missing required columns: {', '.join(missing_columns)}"
            )

        data = self._mark_missing_codes(data)

        self.logger.info(f"Loaded {len(data)} records with {len(data.columns)} variables")

        return data

    def _mark_missing_codes(self, data: pd.DataFrame) -> pd.DataFrame:
        """Replace literal not-reported tokens with NaN."""
        for col, codes in self.missing_codes.items():
            if col not in data.columns:
                continue

            mask = data[col].astype(str).str.strip().isin(codes) & data[col].notna()
            if mask.any():
                data[col] = data[col].mask(mask)
                self.logger.info(f"{col}: {int(mask.sum())} values coded as missing")

        return data

    def _missing_columns(self, data: pd.DataFrame) -> List[str]:
        return [col for col in self.column_mapping if col not in data.columns]

    def _detect_separator(self, file_path: Path) -> str:
        """Detect separator by examining the header line."""
        with open(file_path, 'r', encoding=self.encoding, errors='ignore') as f:
            sample = f.readline()

        # Count occurrences of common separators
        separators = [',', ';', '\t', '|']
        counts = {sep: sample.count(sep) for sep in separators}

        # Return separator with highest count
        return max(counts.items(), key=lambda x: x[1])[0]
