"""
Univariate descriptive statistics for loan records.

This module provides five-number summaries, fuller descriptive statistics for
numeric variables, and frequency/percentage tables for categorical variables.
"""

import logging
from typing import Dict, List, Optional
import pandas as pd
import numpy as np
from scipy import stats

from ..data_processing.models import DescriptiveStats


class UnivariateStats:
    """
    Univariate descriptive statistics.

    Features:
    - Five-number summary with mean (linear-interpolation quantiles)
    - Central tendency, variability and shape measures
    - Frequency tables in caller-specified or frequency order
    """

    SUMMARY_COLUMNS = ['Min', 'Q1', 'Median', 'Mean', 'Q3', 'Max']

    def __init__(self, percentiles: Optional[List[int]] = None):
        """
        Initialize UnivariateStats calculator.

        Parameters
        ----------
        percentiles : list of int, optional
            Percentiles reported in DescriptiveStats
        """
        self.percentiles = percentiles or [1, 5, 10, 25, 50, 75, 90, 95, 99]
        self.logger = logging.getLogger(__name__)

    def five_number_summary(self,
                            data: pd.DataFrame,
                            variables: List[str]) -> pd.DataFrame:
        """
        Min, Q1, median, mean, Q3 and max per variable.

        Parameters
        ----------
        data : pd.DataFrame
            Records
        variables : list of str
            Numeric variables to summarize

        Returns
        -------
        pd.DataFrame
            One row per variable, columns Min, Q1, Median, Mean, Q3, Max
        """
        rows = {}

        for var in variables:
            if var not in data.columns:
                raise ValueError(f"Variable {var} not found in data")

            values = data[var].dropna()
            if values.empty:
                self.logger.warning(f"Variable {var} has no observed values")
                rows[var] = [np.nan] * len(self.SUMMARY_COLUMNS)
                continue

            q1, median, q3 = values.quantile([0.25, 0.5, 0.75])
            rows[var] = [
                float(values.min()), float(q1), float(median),
                float(values.mean()), float(q3), float(values.max())
            ]

        summary = pd.DataFrame.from_dict(rows, orient='index', columns=self.SUMMARY_COLUMNS)
        summary.index.name = 'Variable'
        return summary

    def calculate_descriptive_stats(self,
                                    data: pd.DataFrame,
                                    variables: Optional[List[str]] = None) -> Dict[str, DescriptiveStats]:
        """
        Descriptive statistics for numeric variables.

        Parameters
        ----------
        data : pd.DataFrame
            Records
        variables : list of str, optional
            Variables to analyze. If None, analyzes all numeric variables

        Returns
        -------
        dict
            Dictionary mapping variable names to DescriptiveStats objects
        """
        if variables is None:
            variables = data.select_dtypes(include=[np.number]).columns.tolist()

        results = {}

        for var in variables:
            if var not in data.columns:
                self.logger.warning(f"Variable {var} not found in data")
                continue

            self.logger.debug(f"Calculating descriptive statistics for {var}")
            results[var] = self._calculate_numeric_stats(data[var].dropna(), var)

        return results

    def frequency_table(self,
                        data: pd.DataFrame,
                        variable: str,
                        order: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Category counts and percentage of total.

        Parameters
        ----------
        data : pd.DataFrame
            Records
        variable : str
            Categorical variable
        order : list of str, optional
            Display order. Categories not listed follow in frequency order;
            listed categories with no rows are omitted.

        Returns
        -------
        pd.DataFrame
            Columns Category, Count, Percentage
        """
        if variable not in data.columns:
            raise ValueError(f"Variable {variable} not found in data")

        values = data[variable].dropna().astype(str)
        counts = values.value_counts()

        if order is not None:
            listed = [c for c in order if c in counts.index]
            rest = [c for c in counts.index if c not in set(order)]
            counts = counts.reindex(listed + rest)

        total = counts.sum()
        freq_table = pd.DataFrame({
            'Category': counts.index,
            'Count': counts.values.astype(int),
            'Percentage': (counts.values / total) * 100 if total else 0.0
        })

        return freq_table.reset_index(drop=True)

    def _calculate_numeric_stats(self, values: pd.Series, var_name: str) -> DescriptiveStats:
        """Calculate statistics for one numeric variable."""
        stats_result = DescriptiveStats(variable=var_name, count=len(values))

        if values.empty:
            return stats_result

        stats_result.mean = float(values.mean())
        stats_result.median = float(values.median())

        if len(values) >= 2:
            stats_result.variance = float(values.var())
            stats_result.std = float(values.std())

        # Distribution shape
        if len(values) >= 3:
            stats_result.skewness = float(stats.skew(values))
            if len(values) >= 4:
                stats_result.kurtosis = float(stats.kurtosis(values))

        stats_result.minimum = float(values.min())
        stats_result.maximum = float(values.max())
        stats_result.range_ = stats_result.maximum - stats_result.minimum

        q1, q3 = values.quantile([0.25, 0.75])
        stats_result.iqr = float(q3 - q1)

        stats_result.percentiles = {
            p: float(values.quantile(p / 100)) for p in self.percentiles
        }

        return stats_result
