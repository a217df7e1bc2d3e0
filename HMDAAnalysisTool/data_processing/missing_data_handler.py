"""
Missing data analysis and imputation for loan/application records.

This module profiles missingness (empty fields and documented sentinel codes),
fills numeric gaps with the column median and categorical gaps with the column
mode, and derives the income bracket of each application.
"""

import logging
from typing import Dict, List, Optional, Any
import pandas as pd
import numpy as np
from sklearn.impute import SimpleImputer

from .code_tables import IncomeLevel
from .models import MissingDataAnalysis


def classify_income(income: float, median_income: float) -> str:
    """
    Income bracket of one income value.

    Low below 50% of the median, Moderate from 50% up to (not including) 75%,
    Middle from 75% through 125% inclusive, High above 125%.
    """
    if pd.isna(income):
        raise ValueError("Cannot classify a missing income")

    if income < 0.5 * median_income:
        return IncomeLevel.LOW.value
    elif income < 0.75 * median_income:
        return IncomeLevel.MODERATE.value
    elif income <= 1.25 * median_income:
        return IncomeLevel.MIDDLE.value
    else:
        return IncomeLevel.HIGH.value


class MissingDataHandler:
    """
    Missing data analysis and imputation for loan records.

    Features:
    - Missing data profile per variable, counting sentinel codes as missing
    - Median imputation for numeric variables
    - Mode imputation for categorical variables
    - Income bracket derivation relative to the regional median income
    """

    def __init__(self,
                 median_income: float = 96.505,
                 numeric_variables: Optional[List[str]] = None,
                 categorical_variables: Optional[List[str]] = None,
                 sentinel_codes: Optional[Dict[str, List[Any]]] = None):
        """
        Initialize the MissingDataHandler.

        Parameters
        ----------
        median_income : float, default 96.505
            Regional median family income, in the same units as the income column
        numeric_variables : list of str, optional
            Variables imputed with the median
        categorical_variables : list of str, optional
            Variables imputed with the mode
        sentinel_codes : dict, optional
            Variable -> codes that stand for a missing value
        """
        self.median_income = median_income
        self.numeric_variables = numeric_variables or ['income', 'interest_rate']
        self.categorical_variables = categorical_variables or ['county', 'applicant_age']
        self.sentinel_codes = sentinel_codes if sentinel_codes is not None else {'applicant_age': ['8888']}
        self.logger = logging.getLogger(__name__)

        # Values used at the last imputation, for reporting
        self.fill_values: Dict[str, Any] = {}

    def analyze_missing_data(self,
                             data: pd.DataFrame,
                             variables: Optional[List[str]] = None) -> MissingDataAnalysis:
        """
        Missing data profile.

        Parameters
        ----------
        data : pd.DataFrame
            Records with potential missing values
        variables : list of str, optional
            Subset of variables to analyze. If None, analyzes all variables

        Returns
        -------
        MissingDataAnalysis
            Per-variable and overall missing data counts
        """
        if variables is None:
            variables = list(data.columns)

        analysis_data = self._mark_sentinels(data[variables])

        self.logger.info(f"Analyzing missing data for {len(variables)} variables")

        total_cells = analysis_data.size
        total_missing = int(analysis_data.isna().sum().sum())
        missing_percentage = (total_missing / total_cells) * 100 if total_cells else 0.0

        missing_by_variable = {}
        for var in variables:
            missing_count = int(analysis_data[var].isna().sum())
            missing_pct = (missing_count / len(analysis_data)) * 100 if len(analysis_data) else 0.0

            missing_by_variable[var] = {
                'count': missing_count,
                'percentage': float(missing_pct),
                'complete_cases': int(len(analysis_data) - missing_count)
            }

        return MissingDataAnalysis(
            total_missing=total_missing,
            missing_percentage=float(missing_percentage),
            missing_by_variable=missing_by_variable
        )

    def impute_missing_data(self, data: pd.DataFrame) -> pd.DataFrame:
        """
        Fill missing values and derive the income bracket.

        Parameters
        ----------
        data : pd.DataFrame
            Cleaned records

        Returns
        -------
        pd.DataFrame
            New DataFrame with no missing income, interest rate, county or age,
            and an ``income_level`` column
        """
        self.fill_values = {}
        imputed_data = self._mark_sentinels(data)

        numeric_vars = [v for v in self.numeric_variables if v in imputed_data.columns]
        categorical_vars = [v for v in self.categorical_variables if v in imputed_data.columns]

        self.logger.info(
            f"Imputing {len(numeric_vars)} numeric variables with the median and "
            f"{len(categorical_vars)} categorical variables with the mode"
        )

        imputed_data = self._impute_median(imputed_data, numeric_vars)
        imputed_data = self._impute_mode(imputed_data, categorical_vars)

        if 'income' in imputed_data.columns:
            imputed_data['income_level'] = self.derive_income_level(imputed_data['income'])

        return imputed_data

    def derive_income_level(self, income: pd.Series) -> pd.Series:
        """Income bracket for every row, as an ordered categorical."""
        levels = income.map(lambda x: classify_income(x, self.median_income))
        return pd.Categorical(levels, categories=IncomeLevel.labels(), ordered=True)

    def _mark_sentinels(self, data: pd.DataFrame) -> pd.DataFrame:
        """Copy of data with sentinel codes replaced by NaN."""
        marked = data.copy()

        for var, codes in self.sentinel_codes.items():
            if var in marked.columns:
                as_text = marked[var].astype(str).str.strip()
                sentinel_mask = as_text.isin([str(c) for c in codes])
                if sentinel_mask.any():
                    marked[var] = marked[var].where(~sentinel_mask, np.nan)

        return marked

    def _impute_median(self, data: pd.DataFrame, variables: List[str]) -> pd.DataFrame:
        """Impute numeric variables with the median of their observed values."""
        imputed_data = data.copy()

        for var in variables:
            missing = imputed_data[var].isna()
            if not missing.any():
                continue

            if missing.all():
                raise ValueError(f"Cannot impute {var}: no observed values")

            imputer = SimpleImputer(strategy='median')
            filled = imputer.fit_transform(imputed_data[[var]].astype(float))
            imputed_data[var] = filled[:, 0]
            self.fill_values[var] = float(imputer.statistics_[0])

            self.logger.info(
                f"{var}: filled {int(missing.sum())} missing values with median "
                f"{self.fill_values[var]:.4f}"
            )

        return imputed_data

    def _impute_mode(self, data: pd.DataFrame, variables: List[str]) -> pd.DataFrame:
        """Impute categorical variables with their most frequent value."""
        imputed_data = data.copy()

        for var in variables:
            missing = imputed_data[var].isna()
            if not missing.any():
                continue

            # Series.mode() is sorted, so ties resolve to the first value in sort order
            mode_value = imputed_data[var].mode()
            if mode_value.empty:
                raise ValueError(f"Cannot impute {var}: no observed values")

            imputed_data[var] = imputed_data[var].fillna(mode_value.iloc[0])
            self.fill_values[var] = mode_value.iloc[0]

            self.logger.info(
                f"{var}: filled {int(missing.sum())} missing values with mode {mode_value.iloc[0]!r}"
            )

        return imputed_data
