"""
HMDA Analysis Tool

An exploratory analysis tool for one state-year of Home Mortgage Disclosure Act
loan/application records: seeded subsampling, cleaning and recoding, imputation,
descriptive statistics, outlier filtering, and demonstrations of the Central
Limit Theorem and of simple random, systematic and stratified sampling.

Version: 1.0.0
"""

__version__ = "1.0.0"

from .hmda_analysis_tool import HMDAAnalysisTool
from .config import AnalysisConfig, load_config
from .exceptions import HMDAAnalysisError, DataError, ParseError, LookupGapError
from .data_processing.models import (
    LookupGap,
    CleaningReport,
    MissingDataAnalysis,
    OutlierResult,
    CLTResult,
    SamplingComparison
)

__all__ = [
    'HMDAAnalysisTool',
    'AnalysisConfig',
    'load_config',
    'HMDAAnalysisError',
    'DataError',
    'ParseError',
    'LookupGapError',
    'LookupGap',
    'CleaningReport',
    'MissingDataAnalysis',
    'OutlierResult',
    'CLTResult',
    'SamplingComparison'
]
