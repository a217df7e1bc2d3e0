"""
HMDA code tables.

Each integer-coded categorical field of the public loan/application register is
an Enum whose members carry the raw code and its published label. Recoding a
column is total: every code either maps to a label or is reported as a gap.
"""

from enum import Enum
from typing import Dict, List, Tuple

import numpy as np
import pandas as pd


class CodedCategory(Enum):
    """Base for code tables whose members are ``(code, label)`` pairs."""

    def __init__(self, code, label):
        self.code = code
        self.label = label

    @classmethod
    def lookup_table(cls) -> Dict:
        """Mapping from normalized raw code to label."""
        return {cls.normalize_code(member.code): member.label for member in cls}

    @classmethod
    def labels(cls) -> List[str]:
        """Labels in code-table order."""
        return [member.label for member in cls]

    @staticmethod
    def normalize_code(code):
        """Integer codes compare as ints whether read as 1, 1.0 or '1'."""
        if isinstance(code, str):
            code = code.strip()
        try:
            as_float = float(code)
        except (TypeError, ValueError):
            return code
        if as_float.is_integer():
            return int(as_float)
        return code

    @classmethod
    def recode(cls, series: pd.Series) -> Tuple[pd.Series, Dict[str, int]]:
        """
        Replace raw codes with labels.

        Parameters
        ----------
        series : pd.Series
            Raw codes; missing values stay missing

        Returns
        -------
        tuple
            (Recoded series, {unmapped code: row count}). Unmapped codes are
            passed through as their text form.
        """
        table = cls.lookup_table()
        present = series.notna()
        normalized = series[present].map(cls.normalize_code)

        labels = normalized.map(table)
        unmapped_mask = labels.isna()
        unmapped = normalized[unmapped_mask].astype(str)

        result = pd.Series(np.nan, index=series.index, dtype=object)
        result.loc[present] = labels.where(~unmapped_mask, unmapped)

        gaps = unmapped.value_counts().to_dict()
        return result, {str(code): int(count) for code, count in gaps.items()}


class ApprovalStatus(CodedCategory):
    """Action taken on the application (``action_taken``)."""
    LOAN_ORIGINATED = (1, 'Loan originated')
    APPROVED_NOT_ACCEPTED = (2, 'Application approved but not accepted')
    DENIED = (3, 'Application denied')
    WITHDRAWN = (4, 'Application withdrawn by applicant')
    CLOSED_INCOMPLETE = (5, 'File closed for incompleteness')
    PURCHASED = (6, 'Purchased loan')
    PREAPPROVAL_DENIED = (7, 'Preapproval request denied')
    PREAPPROVAL_APPROVED_NOT_ACCEPTED = (8, 'Preapproval request approved but not accepted')


class LoanType(CodedCategory):
    """Insurance or guarantee program of the loan (``loan_type``)."""
    CONVENTIONAL = (1, 'Conventional')
    FHA = (2, 'FHA-insured')
    VA = (3, 'VA-guaranteed')
    RHS_FSA = (4, 'RHS or FSA-guaranteed')


class LoanPurpose(CodedCategory):
    """Purpose of the loan (``loan_purpose``)."""
    HOME_PURCHASE = (1, 'Home purchase')
    HOME_IMPROVEMENT = (2, 'Home improvement')
    REFINANCING = (31, 'Refinancing')
    CASH_OUT_REFINANCING = (32, 'Cash-out refinancing')
    OTHER = (4, 'Other purpose')
    NOT_APPLICABLE = (5, 'Not applicable')


class County(CodedCategory):
    """Vermont counties by five-digit state+county FIPS code (``county_code``)."""
    ADDISON = (50001, 'Addison')
    BENNINGTON = (50003, 'Bennington')
    CALEDONIA = (50005, 'Caledonia')
    CHITTENDEN = (50007, 'Chittenden')
    ESSEX = (50009, 'Essex')
    FRANKLIN = (50011, 'Franklin')
    GRAND_ISLE = (50013, 'Grand Isle')
    LAMOILLE = (50015, 'Lamoille')
    ORANGE = (50017, 'Orange')
    ORLEANS = (50019, 'Orleans')
    RUTLAND = (50021, 'Rutland')
    WASHINGTON = (50023, 'Washington')
    WINDHAM = (50025, 'Windham')
    WINDSOR = (50027, 'Windsor')


class IncomeLevel(Enum):
    """Income bracket relative to the regional median family income."""
    LOW = 'Low'
    MODERATE = 'Moderate'
    MIDDLE = 'Middle'
    HIGH = 'High'

    @classmethod
    def labels(cls) -> List[str]:
        return [member.value for member in cls]


# Analysis column -> code table
RECODE_TABLES = {
    'approval_status': ApprovalStatus,
    'county': County,
    'loan_type': LoanType,
    'loan_purpose': LoanPurpose,
}
