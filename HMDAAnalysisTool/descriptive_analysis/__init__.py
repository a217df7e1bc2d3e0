"""Descriptive analysis module for HMDA lending data."""

from .univariate_stats import UnivariateStats
from .cross_tabulation import CrossTabulation

__all__ = [
    'UnivariateStats',
    'CrossTabulation'
]
