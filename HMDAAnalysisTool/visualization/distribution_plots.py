"""
Distribution visualization module for lending data.

This module draws the charts of the analysis report from already computed
tables: histograms, category frequency bars, with/without-outlier box plots,
sampling distributions of the mean, and the sampling design comparison.
"""

import logging
import warnings
from typing import List, Any
import pandas as pd
import numpy as np
from scipy import stats
import matplotlib.pyplot as plt
import seaborn as sns

try:
    import plotly.graph_objects as go
    from plotly.subplots import make_subplots
    HAS_PLOTLY = True
except ImportError:
    HAS_PLOTLY = False
    warnings.warn("plotly not available. Interactive plots disabled.")

from ..data_processing.models import CLTResult, OutlierResult, SamplingComparison


class DistributionPlots:
    """
    Visualization tools for the lending analysis.

    Features:
    - Histograms of numeric variables
    - Frequency bar charts for categorical variables
    - Box plots with and without IQR outliers
    - Sampling distributions of the mean with normal overlay
    - Grouped bars comparing sampling designs
    """

    def __init__(self, style: str = 'matplotlib'):
        """
        Initialize visualization tools.

        Parameters
        ----------
        style : str, default 'matplotlib'
            Plotting style: 'matplotlib' for static, 'plotly' for interactive
        """
        if style not in ('matplotlib', 'plotly'):
            raise ValueError(f"Unknown plot style: {style}")

        if style == 'plotly' and not HAS_PLOTLY:
            raise ImportError("plotly is required for the 'plotly' style")

        self.style = style
        self.logger = logging.getLogger(__name__)

    def histogram(self,
                  data: pd.DataFrame,
                  column: str,
                  bins: int = 50,
                  title: str = None) -> Any:
        """Histogram of one numeric column."""
        values = data[column].dropna()
        title = title or f"Distribution of {column}"

        if self.style == 'plotly':
            fig = go.Figure(data=go.Histogram(x=values, nbinsx=bins))
            fig.update_layout(title=title, xaxis_title=column, yaxis_title='Count')
            return fig

        fig, ax = plt.subplots(figsize=(9, 5))
        sns.histplot(values, bins=bins, ax=ax)
        ax.set_title(title)
        ax.set_xlabel(column)
        ax.set_ylabel('Count')
        plt.tight_layout()
        return fig

    def frequency_bar_chart(self,
                            freq_table: pd.DataFrame,
                            title: str = "Frequency",
                            horizontal: bool = False) -> Any:
        """Bar chart of a Category/Count/Percentage table, in table order."""
        if freq_table.empty:
            self.logger.warning("No frequency data to plot")
            return None

        categories = freq_table['Category'].astype(str).tolist()
        percentages = freq_table['Percentage'].tolist()

        if self.style == 'plotly':
            bar = go.Bar(
                x=percentages if horizontal else categories,
                y=categories if horizontal else percentages,
                orientation='h' if horizontal else 'v',
                text=[f"{p:.1f}%" for p in percentages]
            )
            fig = go.Figure(data=bar)
            fig.update_layout(title=title)
            return fig

        fig, ax = plt.subplots(figsize=(10, max(4, len(categories) * 0.4) if horizontal else 5))
        if horizontal:
            sns.barplot(x=percentages, y=categories, order=categories, ax=ax, orient='h')
            ax.set_xlabel('Percentage')
        else:
            sns.barplot(x=categories, y=percentages, order=categories, ax=ax)
            ax.set_ylabel('Percentage')
            ax.tick_params(axis='x', rotation=45)
        ax.set_title(title)
        plt.tight_layout()
        return fig

    def outlier_boxplots(self, outlier_result: OutlierResult) -> Any:
        """Side-by-side box plots of one column with and without outliers."""
        column = outlier_result.column
        views = {
            'With outliers': outlier_result.with_outliers[column].dropna(),
            'Without outliers': outlier_result.without_outliers[column].dropna(),
        }

        if self.style == 'plotly':
            fig = make_subplots(rows=1, cols=2, subplot_titles=list(views))
            for i, values in enumerate(views.values(), start=1):
                fig.add_trace(go.Box(y=values, name=column, showlegend=False), row=1, col=i)
            fig.update_layout(title=f"{column}: IQR outlier filter")
            return fig

        fig, axes = plt.subplots(1, 2, figsize=(10, 5))
        for ax, (label, values) in zip(axes, views.items()):
            sns.boxplot(y=values, ax=ax)
            ax.set_title(f"{label} (n={len(values)})")
            ax.set_ylabel(column)

        plt.suptitle(f"{column}: IQR outlier filter")
        plt.tight_layout()
        return fig

    def clt_histograms(self, clt_results: List[CLTResult], bins: int = 40) -> Any:
        """One sampling-distribution histogram per sample size with a normal overlay."""
        if not clt_results:
            self.logger.warning("No CLT results to plot")
            return None

        titles = [f"n = {r.sample_size}" for r in clt_results]

        if self.style == 'plotly':
            fig = make_subplots(rows=1, cols=len(clt_results), subplot_titles=titles)
            for i, result in enumerate(clt_results, start=1):
                x, pdf = self._normal_curve(result)
                fig.add_trace(go.Histogram(x=result.sample_means, nbinsx=bins,
                                           histnorm='probability density',
                                           showlegend=False), row=1, col=i)
                fig.add_trace(go.Scatter(x=x, y=pdf, mode='lines', showlegend=False),
                              row=1, col=i)
            fig.update_layout(title="Sampling distribution of the mean")
            return fig

        fig, axes = plt.subplots(1, len(clt_results),
                                 figsize=(4 * len(clt_results), 4), sharex=True)
        axes = np.atleast_1d(axes)

        for ax, result, title in zip(axes, clt_results, titles):
            ax.hist(result.sample_means, bins=bins, density=True, alpha=0.6)
            x, pdf = self._normal_curve(result)
            ax.plot(x, pdf, color='red', linewidth=1.5)
            ax.axvline(result.population_mean, color='black', linestyle='--', alpha=0.7)
            ax.set_title(f"{title}\nsd = {result.std_of_means:.2f}")
            ax.set_xlabel('Sample mean')

        axes[0].set_ylabel('Density')
        plt.suptitle("Sampling distribution of the mean")
        plt.tight_layout()
        return fig

    def sampling_comparison_chart(self, comparison: SamplingComparison) -> Any:
        """Grouped bars of the approval rate per group for each design."""
        rates = comparison.rates

        if self.style == 'plotly':
            fig = go.Figure(data=[
                go.Bar(name=method, x=rates.index.astype(str), y=rates[method])
                for method in rates.columns
            ])
            fig.update_layout(barmode='group', title="Approval rate by sampling design",
                              xaxis_title=comparison.group_variable,
                              yaxis_title='Approval rate')
            return fig

        long_form = (rates.reset_index()
                     .melt(id_vars=rates.index.name or 'index',
                           var_name='Method', value_name='Approval Rate'))
        group_col = rates.index.name or 'index'

        fig, ax = plt.subplots(figsize=(10, 5))
        sns.barplot(data=long_form, x=group_col, y='Approval Rate', hue='Method',
                    order=[str(g) for g in rates.index], ax=ax)
        ax.set_xlabel(comparison.group_variable)
        ax.set_title("Approval rate by sampling design")
        plt.tight_layout()
        return fig

    @staticmethod
    def _normal_curve(result: CLTResult, n_points: int = 200):
        """Normal pdf with the CLT mean and standard error."""
        center = result.population_mean
        spread = result.expected_std
        x = np.linspace(center - 4 * spread, center + 4 * spread, n_points)
        return x, stats.norm.pdf(x, loc=center, scale=spread)
