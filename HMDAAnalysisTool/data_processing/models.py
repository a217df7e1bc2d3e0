"""
Core data models and structures for the lending analysis.

This module defines the result containers produced by each pipeline stage:
cleaning reports, missing data profiles, descriptive statistics, outlier
views and sampling-theory results.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
import pandas as pd
import numpy as np


@dataclass
class LookupGap:
    """A categorical code with no entry in its recode table."""
    column: str
    code: str
    count: int


@dataclass
class CleaningReport:
    """Container for the outcome of one cleaning pass."""
    total_records: int
    retained_records: int = 0
    dropped_negative_income: int = 0
    interest_rate_missing: int = 0
    lookup_gaps: List[LookupGap] = field(default_factory=list)
    cleaning_log: List[str] = field(default_factory=list)

    @property
    def has_lookup_gaps(self) -> bool:
        return bool(self.lookup_gaps)

    def gaps_for(self, column: str) -> List[LookupGap]:
        """Lookup gaps recorded for one column."""
        return [gap for gap in self.lookup_gaps if gap.column == column]


@dataclass
class MissingDataAnalysis:
    """Container for missing data analysis results."""
    total_missing: int
    missing_percentage: float
    missing_by_variable: Dict[str, Dict[str, float]]

    def to_frame(self) -> pd.DataFrame:
        """Per-variable missing counts as a table."""
        frame = pd.DataFrame.from_dict(self.missing_by_variable, orient='index')
        frame.index.name = 'Variable'
        return frame


@dataclass
class DescriptiveStats:
    """Container for descriptive statistics results."""
    variable: str
    count: int
    mean: Optional[float] = None
    median: Optional[float] = None
    std: Optional[float] = None
    variance: Optional[float] = None
    skewness: Optional[float] = None
    kurtosis: Optional[float] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    range_: Optional[float] = None
    iqr: Optional[float] = None
    percentiles: Dict[int, float] = field(default_factory=dict)


@dataclass
class OutlierFence:
    """Interquartile-range fence for one numeric column."""
    q1: float
    q3: float
    iqr: float
    lower: float
    upper: float

    def is_outlier(self, values: pd.Series) -> pd.Series:
        """Boolean mask of values strictly outside the fence."""
        return (values < self.lower) | (values > self.upper)


@dataclass
class OutlierResult:
    """The two views of a dataset split on one column's IQR fence."""
    column: str
    fence: OutlierFence
    with_outliers: pd.DataFrame
    without_outliers: pd.DataFrame

    @property
    def n_outliers(self) -> int:
        return len(self.with_outliers) - len(self.without_outliers)

    @property
    def outlier_percentage(self) -> float:
        if len(self.with_outliers) == 0:
            return 0.0
        return self.n_outliers / len(self.with_outliers) * 100


@dataclass
class CLTResult:
    """Distribution of sample means for one sample size."""
    sample_size: int
    sample_means: np.ndarray
    population_mean: float
    population_std: float

    @property
    def n_samples(self) -> int:
        return len(self.sample_means)

    @property
    def mean_of_means(self) -> float:
        return float(np.mean(self.sample_means))

    @property
    def std_of_means(self) -> float:
        return float(np.std(self.sample_means, ddof=1))

    @property
    def expected_std(self) -> float:
        """Standard error sigma / sqrt(n), without finite-population correction."""
        return self.population_std / np.sqrt(self.sample_size)


@dataclass
class SamplingComparison:
    """Grouped approval rates under the population and each sampling design."""
    group_variable: str
    rates: pd.DataFrame
    sample_sizes: Dict[str, int] = field(default_factory=dict)
    stratum_allocation: Dict[Any, int] = field(default_factory=dict)

    def absolute_errors(self) -> pd.DataFrame:
        """Absolute difference between each design and the population rate."""
        designs = self.rates.drop(columns=['Population'])
        return designs.sub(self.rates['Population'], axis=0).abs()
