"""Visualization module for HMDA lending analysis."""

from .distribution_plots import DistributionPlots

__all__ = ['DistributionPlots']
