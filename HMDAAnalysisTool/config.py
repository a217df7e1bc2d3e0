"""
Configuration for the HMDA lending analysis.

Holds the constants of the analysis (sample sizes, seeds, thresholds, the
source-to-analysis column mapping) and loads JSON overrides.
"""

import json
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Tuple, Union

from .exceptions import DataError

logger = logging.getLogger(__name__)

# ============================================================================
# COLUMN MAPPING
# ============================================================================
# Source column -> analysis column, in analysis order
COLUMN_MAPPING: Dict[str, str] = {
    'loan_amount': 'loan_amount',
    'income': 'income',
    'interest_rate': 'interest_rate',
    'debt_to_income_ratio': 'debt_to_income_ratio',
    'applicant_age': 'applicant_age',
    'derived_race': 'applicant_race',
    'derived_sex': 'applicant_sex',
    'loan_type': 'loan_type',
    'loan_purpose': 'loan_purpose',
    'county_code': 'county',
    'action_taken': 'approval_status',
}

# Source columns that must be read as text
TEXT_COLUMNS: List[str] = [
    'interest_rate', 'county_code', 'applicant_age', 'debt_to_income_ratio'
]

NUMERIC_COLUMNS: List[str] = ['loan_amount', 'income', 'interest_rate']

# Coded source columns whose literal tokens mean "not reported"
TEXT_MISSING_CODES: Dict[str, List[str]] = {
    'county_code': ['NA'],
}

# ============================================================================
# DISPLAY ORDERS
# ============================================================================
AGE_BAND_ORDER: List[str] = ['<25', '25-34', '35-44', '45-54', '55-64', '65-74', '>74']

DTI_ORDER: List[str] = [
    '<20%', '20%-<30%', '30%-<36%', '36', '37', '38', '39', '40', '41', '42',
    '43', '44', '45', '46', '47', '48', '49', '50%-60%', '>60%', 'Exempt'
]


@dataclass
class AnalysisConfig:
    """Tunable parameters of one analysis run."""
    sample_size: int = 10000
    random_state: int = 42
    clt_sample_sizes: Tuple[int, ...] = (200, 400, 600, 800)
    clt_n_samples: int = 5000
    sampling_sample_size: int = 1000
    # Regional median family income, in the thousands-scaled units of `income`
    median_income: float = 96.505
    outlier_multiplier: float = 1.5
    age_missing_code: str = '8888'
    income_missing_code: float = 9999.0
    numeric_placeholders: Tuple[str, ...] = ('', 'NA', 'N/A', 'Exempt', 'nan')
    approved_statuses: Tuple[str, ...] = (
        'Loan originated',
        'Application approved but not accepted',
    )
    strata_variable: str = 'applicant_age'
    strict_validation: bool = False
    plot_style: str = 'matplotlib'
    column_mapping: Dict[str, str] = field(default_factory=lambda: dict(COLUMN_MAPPING))

    @property
    def analysis_columns(self) -> List[str]:
        return list(self.column_mapping.values())


def load_config(config_path: Union[str, Path, None] = None, **overrides) -> AnalysisConfig:
    """
    Build an AnalysisConfig from defaults, an optional JSON file and keyword overrides.

    Parameters
    ----------
    config_path : str or Path, optional
        JSON file whose keys match AnalysisConfig field names
    **overrides
        Values taking precedence over the file (None values are ignored)

    Returns
    -------
    AnalysisConfig
    """
    values = {}

    if config_path is not None:
        config_path = Path(config_path)
        if not config_path.exists():
            raise DataError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            values.update(json.load(f))
        logger.info(f"Configuration loaded from {config_path}")

    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(AnalysisConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        logger.warning(f"Ignoring unknown configuration keys: {', '.join(unknown)}")

    kwargs = {k: v for k, v in values.items() if k in known}

    # JSON has no tuples
    for key in ('clt_sample_sizes', 'numeric_placeholders', 'approved_statuses'):
        if key in kwargs:
            kwargs[key] = tuple(kwargs[key])

    return AnalysisConfig(**kwargs)
