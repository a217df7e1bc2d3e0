"""Data processing module for HMDA lending analysis."""

from .data_loader import DataLoader
from .data_cleaner import DataCleaner
from .missing_data_handler import MissingDataHandler, classify_income
from .outlier_detector import OutlierDetector
from .code_tables import (
    ApprovalStatus,
    County,
    IncomeLevel,
    LoanPurpose,
    LoanType
)
from .models import (
    LookupGap,
    CleaningReport,
    MissingDataAnalysis,
    DescriptiveStats,
    OutlierFence,
    OutlierResult,
    CLTResult,
    SamplingComparison
)

__all__ = [
    'DataLoader',
    'DataCleaner',
    'MissingDataHandler',
    'classify_income',
    'OutlierDetector',
    'ApprovalStatus',
    'County',
    'IncomeLevel',
    'LoanPurpose',
    'LoanType',
    'LookupGap',
    'CleaningReport',
    'MissingDataAnalysis',
    'DescriptiveStats',
    'OutlierFence',
    'OutlierResult',
    'CLTResult',
    'SamplingComparison'
]
