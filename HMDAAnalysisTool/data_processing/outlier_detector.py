"""
Interquartile-range outlier detection.

Each numeric column gets its own fence; splitting on one column never affects
the view produced for another.
"""

import logging
from typing import Dict, List, Optional
import pandas as pd

from .models import OutlierFence, OutlierResult


class OutlierDetector:
    """IQR fence computation and with/without-outlier views."""

    def __init__(self, multiplier: float = 1.5):
        """
        Parameters
        ----------
        multiplier : float, default 1.5
            Fence distance below Q1 and above Q3, in IQRs
        """
        self.multiplier = multiplier
        self.logger = logging.getLogger(__name__)

    def iqr_fence(self, values: pd.Series) -> OutlierFence:
        """Q1, Q3 (linear interpolation), IQR and the fence bounds."""
        values = values.dropna()
        if values.empty:
            raise ValueError("Cannot compute an IQR fence on an empty column")

        q1, q3 = values.quantile([0.25, 0.75])
        iqr = q3 - q1

        return OutlierFence(
            q1=float(q1),
            q3=float(q3),
            iqr=float(iqr),
            lower=float(q1 - self.multiplier * iqr),
            upper=float(q3 + self.multiplier * iqr)
        )

    def filter_outliers(self, data: pd.DataFrame, column: str) -> OutlierResult:
        """
        Split data on one column's fence.

        Parameters
        ----------
        data : pd.DataFrame
            Imputed records
        column : str
            Numeric column defining the fence

        Returns
        -------
        OutlierResult
            Full view and the view restricted to rows inside the fence
        """
        if column not in data.columns:
            raise ValueError(f"Variable {column} not found in data")

        fence = self.iqr_fence(data[column])
        outlier_mask = fence.is_outlier(data[column])

        result = OutlierResult(
            column=column,
            fence=fence,
            with_outliers=data.copy(),
            without_outliers=data[~outlier_mask].copy()
        )

        self.logger.info(
            f"{column}: {result.n_outliers} outliers outside "
            f"[{fence.lower:.3f}, {fence.upper:.3f}]"
        )

        return result

    def filter_columns(self,
                       data: pd.DataFrame,
                       columns: Optional[List[str]] = None) -> Dict[str, OutlierResult]:
        """Independent outlier split for each column."""
        if columns is None:
            columns = ['loan_amount', 'interest_rate']

        return {col: self.filter_outliers(data, col) for col in columns}
