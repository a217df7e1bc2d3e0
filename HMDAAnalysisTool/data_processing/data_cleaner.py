"""
Data cleaning and recoding for HMDA loan/application records.

This module coerces text-encoded numeric fields, drops rows with invalid
income, and recodes integer-coded categorical fields to their published labels.
"""

import logging
from typing import Dict, Optional, Tuple, Sequence
import pandas as pd

from .code_tables import RECODE_TABLES
from .models import CleaningReport, LookupGap
from ..config import NUMERIC_COLUMNS
from ..exceptions import ParseError, LookupGapError


class DataCleaner:
    """
    Cleaning and validation for loan/application records.

    Features:
    - Numeric coercion of text fields with placeholder handling
    - Removal of rows with negative income
    - Recoding of action taken, county, loan type and loan purpose codes
    - Explicit reporting of codes missing from the recode tables
    """

    def __init__(self,
                 placeholders: Sequence[str] = ('', 'NA', 'N/A', 'Exempt', 'nan'),
                 numeric_missing_codes: Optional[Dict[str, Sequence[float]]] = None,
                 strict_validation: bool = False):
        """
        Initialize the DataCleaner.

        Parameters
        ----------
        placeholders : sequence of str
            Tokens in numeric columns that mean "no value" rather than bad data
        numeric_missing_codes : dict, optional
            Column -> numeric codes that mean "not reported" (default: income 9999)
        strict_validation : bool, default False
            Raise LookupGapError on unmapped codes instead of passing them through
        """
        self.placeholders = {p.strip().lower() for p in placeholders}
        self.numeric_missing_codes = (
            {'income': (9999.0,)} if numeric_missing_codes is None else dict(numeric_missing_codes)
        )
        self.strict_validation = strict_validation
        self.logger = logging.getLogger(__name__)

        self.cleaning_log = []

    def clean_data(self, data: pd.DataFrame) -> Tuple[pd.DataFrame, CleaningReport]:
        """
        Perform the cleaning pass.

        Parameters
        ----------
        data : pd.DataFrame
            Records with analysis column names, as returned by DataLoader

        Returns
        -------
        tuple
            (Cleaned DataFrame, CleaningReport object)
        """
        self.logger.info(f"Starting data cleaning for {len(data)} records")
        self.cleaning_log = []

        report = CleaningReport(total_records=len(data))

        # Make a copy to avoid modifying original data
        cleaned_data = data.copy()

        # 1. Numeric coercion; a bad token aborts the whole pass
        for col in NUMERIC_COLUMNS:
            if col in cleaned_data.columns:
                cleaned_data[col] = self.coerce_numeric(cleaned_data[col], col)

        for col, codes in self.numeric_missing_codes.items():
            if col in cleaned_data.columns:
                coded = cleaned_data[col].isin([float(c) for c in codes])
                if coded.any():
                    cleaned_data[col] = cleaned_data[col].mask(coded)
                    self._log_info(f"{col}: {int(coded.sum())} values coded as not reported set to missing")

        if 'interest_rate' in cleaned_data.columns:
            report.interest_rate_missing = int(cleaned_data['interest_rate'].isna().sum())

        # 2. Invalid income
        if 'income' in cleaned_data.columns:
            cleaned_data, dropped = self._drop_negative_income(cleaned_data)
            report.dropped_negative_income = dropped

        # 3. Recode categorical fields
        for col, table in RECODE_TABLES.items():
            if col not in cleaned_data.columns:
                continue

            cleaned_data[col], gaps = table.recode(cleaned_data[col])

            for code, count in gaps.items():
                report.lookup_gaps.append(LookupGap(column=col, code=code, count=count))
                self._log_warning(
                    f"{col}: code {code!r} ({count} rows) has no entry in the "
                    f"{table.__name__} table and was kept unchanged"
                )

        report.retained_records = len(cleaned_data)
        report.cleaning_log = list(self.cleaning_log)

        self.logger.info(f"Data cleaning completed. {len(cleaned_data)} records retained.")

        return cleaned_data, report

    def coerce_numeric(self, series: pd.Series, column: str) -> pd.Series:
        """
        Convert a text-encoded numeric column to float.

        Placeholder tokens become NaN; any other non-numeric token raises ParseError.
        """
        if pd.api.types.is_numeric_dtype(series):
            return series.astype(float)

        text = series.astype(str).str.strip()
        placeholder_mask = series.isna() | text.str.lower().isin(self.placeholders)

        values = pd.to_numeric(text.where(~placeholder_mask), errors='coerce')

        bad_mask = values.isna() & ~placeholder_mask
        if bad_mask.any():
            bad_tokens = text[bad_mask].unique().tolist()
            raise ParseError(column, bad_tokens, int(bad_mask.sum()))

        n_placeholders = int(placeholder_mask.sum())
        if n_placeholders:
            self._log_info(f"{column}: {n_placeholders} empty or placeholder values set to missing")

        return values.astype(float)

    def _drop_negative_income(self, data: pd.DataFrame) -> Tuple[pd.DataFrame, int]:
        """Remove rows whose income is below zero; missing income is kept."""
        negative = data['income'] < 0

        if negative.any():
            self._log_info(f"Removed {int(negative.sum())} records with negative income")

        return data[~negative], int(negative.sum())

    def _log_info(self, message: str):
        """Log info message and add to cleaning log."""
        self.logger.info(message)
        self.cleaning_log.append(f"INFO: {message}")

    def _log_warning(self, message: str):
        """Log warning message and add to cleaning log."""
        if self.strict_validation:
            raise LookupGapError(message)
        else:
            self.logger.warning(message)
            self.cleaning_log.append(f"WARNING: {message}")

