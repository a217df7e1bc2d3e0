"""
Cross-tabulation of loan outcomes by applicant and loan characteristics.
"""

import logging
from typing import List, Optional, Sequence
import pandas as pd


class CrossTabulation:
    """
    Outcome cross-tabulations.

    Features:
    - Approval counts and approval rates per category
    - Two-way frequency tables with row percentages
    """

    def __init__(self,
                 approved_statuses: Sequence[str] = ('Loan originated',
                                                     'Application approved but not accepted'),
                 outcome_variable: str = 'approval_status'):
        """
        Parameters
        ----------
        approved_statuses : sequence of str
            Outcome labels counted as an approval
        outcome_variable : str, default 'approval_status'
            Column holding the outcome label
        """
        self.approved_statuses = list(approved_statuses)
        self.outcome_variable = outcome_variable
        self.logger = logging.getLogger(__name__)

    def is_approved(self, data: pd.DataFrame) -> pd.Series:
        """Boolean approval indicator per row."""
        return data[self.outcome_variable].isin(self.approved_statuses)

    def approval_rate_by(self,
                         data: pd.DataFrame,
                         group_variable: str,
                         order: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Applications, approvals and approval rate per category.

        Returns
        -------
        pd.DataFrame
            Indexed by category, columns Applications, Approvals, Approval Rate
        """
        for var in (group_variable, self.outcome_variable):
            if var not in data.columns:
                raise ValueError(f"Variable {var} not found in data")

        approved = self.is_approved(data)
        grouped = approved.groupby(data[group_variable].astype(str))

        table = pd.DataFrame({
            'Applications': grouped.size(),
            'Approvals': grouped.sum().astype(int),
        })
        table['Approval Rate'] = table['Approvals'] / table['Applications']

        if order is not None:
            listed = [c for c in order if c in table.index]
            rest = [c for c in table.index if c not in set(order)]
            table = table.reindex(listed + rest)

        table.index.name = group_variable
        return table

    def crosstab(self,
                 data: pd.DataFrame,
                 row_variable: str,
                 column_variable: Optional[str] = None,
                 row_order: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Row-percentage table of column_variable within each row category.

        column_variable defaults to the outcome variable.
        """
        column_variable = column_variable or self.outcome_variable

        for var in (row_variable, column_variable):
            if var not in data.columns:
                raise ValueError(f"Variable {var} not found in data")

        clean_data = data[[row_variable, column_variable]].dropna()

        if len(clean_data) == 0:
            self.logger.warning("No valid data for cross-tabulation")
            return pd.DataFrame()

        table = pd.crosstab(
            clean_data[row_variable].astype(str),
            clean_data[column_variable].astype(str),
            normalize='index'
        ) * 100

        if row_order is not None:
            listed = [c for c in row_order if c in table.index]
            rest = [c for c in table.index if c not in set(row_order)]
            table = table.reindex(listed + rest)

        return table
