"""
Central Limit Theorem simulation.

Repeated simple random sampling without replacement from a finite population,
recording the mean of each sample. As the sample size grows the sample means
center on the population mean and their spread shrinks like sigma / sqrt(n).
"""

import logging
from typing import List, Sequence, Union
import pandas as pd
import numpy as np

from ..data_processing.models import CLTResult


def simulate_sample_means(population: Union[np.ndarray, pd.Series],
                          sample_size: int,
                          n_samples: int,
                          rng: np.random.Generator) -> np.ndarray:
    """
    Means of ``n_samples`` SRSWOR samples of ``sample_size`` drawn from population.

    Pure apart from advancing ``rng``: the same population, sizes and generator
    state always give the same means.
    """
    values = np.asarray(population, dtype=float)
    values = values[~np.isnan(values)]

    if sample_size <= 0 or sample_size > len(values):
        raise ValueError(
            f"Sample size {sample_size} must be between 1 and the population size {len(values)}"
        )

    means = np.empty(n_samples)
    for i in range(n_samples):
        means[i] = rng.choice(values, size=sample_size, replace=False).mean()

    return means


class CLTSimulation:
    """Sampling distribution of the mean for a list of sample sizes."""

    def __init__(self,
                 sample_sizes: Sequence[int] = (200, 400, 600, 800),
                 n_samples: int = 5000):
        """
        Parameters
        ----------
        sample_sizes : sequence of int
            Sample sizes to simulate, in increasing order
        n_samples : int, default 5000
            Number of samples drawn per sample size
        """
        self.sample_sizes = list(sample_sizes)
        self.n_samples = n_samples
        self.logger = logging.getLogger(__name__)

    def run(self,
            population: Union[np.ndarray, pd.Series],
            rng: np.random.Generator) -> List[CLTResult]:
        """Simulate every sample size against one population."""
        values = np.asarray(population, dtype=float)
        values = values[~np.isnan(values)]

        population_mean = float(values.mean())
        population_std = float(values.std(ddof=0))

        results = []
        for size in self.sample_sizes:
            means = simulate_sample_means(values, size, self.n_samples, rng)
            result = CLTResult(
                sample_size=size,
                sample_means=means,
                population_mean=population_mean,
                population_std=population_std
            )
            results.append(result)

            self.logger.info(
                f"n={size}: mean of sample means {result.mean_of_means:.3f}, "
                f"std {result.std_of_means:.3f} (sigma/sqrt(n) = {result.expected_std:.3f})"
            )

        return results

    @staticmethod
    def summary_table(results: List[CLTResult]) -> pd.DataFrame:
        """One row per sample size."""
        table = pd.DataFrame([
            {
                'Sample Size': r.sample_size,
                'Samples': r.n_samples,
                'Population Mean': r.population_mean,
                'Mean of Sample Means': r.mean_of_means,
                'Std of Sample Means': r.std_of_means,
                'Sigma / sqrt(n)': r.expected_std,
            }
            for r in results
        ])
        return table.set_index('Sample Size')
