"""
Finite-population sampling designs.

Simple random sampling without replacement, systematic sampling and
proportionally allocated stratified sampling, compared on the approval rate
per group against the population value.
"""

import logging
import math
from typing import Dict, List, Optional, Sequence
import pandas as pd
import numpy as np

from ..data_processing.models import SamplingComparison
from ..descriptive_analysis.cross_tabulation import CrossTabulation


def systematic_indices(population_size: int,
                       sample_size: int,
                       rng: np.random.Generator) -> np.ndarray:
    """
    Zero-based row positions of a systematic sample.

    Step k = ceil(N / n); start r uniform on {1..k}; positions r, r+k, r+2k, ...
    (one-based) up to n selections, never past N.
    """
    if population_size <= 0:
        raise ValueError("Population is empty")
    if sample_size <= 0:
        raise ValueError("Sample size must be positive")

    step = math.ceil(population_size / sample_size)
    start = int(rng.integers(1, step + 1))

    return np.arange(start - 1, population_size, step)[:sample_size]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class SamplingDesigns:
    """
    Probability sampling designs over a fixed, stably ordered dataset.

    Features:
    - Population approval rate per group
    - Simple random, systematic and stratified samples
    - Side-by-side comparison of grouped approval rates
    """

    DESIGNS = ['Simple Random', 'Systematic', 'Stratified']

    def __init__(self,
                 approved_statuses: Sequence[str] = ('Loan originated',
                                                     'Application approved but not accepted'),
                 group_variable: str = 'applicant_age'):
        """
        Parameters
        ----------
        approved_statuses : sequence of str
            Outcome labels counted as an approval
        group_variable : str, default 'applicant_age'
            Variable defining both the reporting groups and the strata
        """
        self.group_variable = group_variable
        self.cross_tabulation = CrossTabulation(approved_statuses=approved_statuses)
        self.logger = logging.getLogger(__name__)

    def population_approval_rate(self,
                                 data: pd.DataFrame,
                                 order: Optional[List[str]] = None) -> pd.Series:
        """Approvals over total rows, per group."""
        table = self.cross_tabulation.approval_rate_by(data, self.group_variable, order)
        return table['Approval Rate']

    def simple_random_sample(self,
                             data: pd.DataFrame,
                             sample_size: int,
                             rng: np.random.Generator) -> pd.DataFrame:
        """Every subset of sample_size rows equally likely."""
        if sample_size > len(data):
            raise ValueError(f"Sample size {sample_size} exceeds population size {len(data)}")

        return data.sample(n=sample_size, replace=False, random_state=rng).copy()

    def systematic_sample(self,
                          data: pd.DataFrame,
                          sample_size: int,
                          rng: np.random.Generator) -> pd.DataFrame:
        """Fixed-interval selection in the current row order."""
        positions = systematic_indices(len(data), sample_size, rng)
        return data.iloc[positions].copy()

    def stratified_allocation(self,
                              data: pd.DataFrame,
                              sample_size: int) -> Dict[str, int]:
        """
        Proportional allocation n * N_h / N per stratum, rounded half up.

        The allocations need not sum to sample_size.
        """
        strata_sizes = data[self.group_variable].astype(str).value_counts().sort_index()
        population_size = len(data)

        return {
            stratum: min(round_half_up(sample_size * size / population_size), int(size))
            for stratum, size in strata_sizes.items()
        }

    def stratified_sample(self,
                          data: pd.DataFrame,
                          sample_size: int,
                          rng: np.random.Generator) -> pd.DataFrame:
        """Simple random sample within each stratum, proportionally allocated."""
        allocation = self.stratified_allocation(data, sample_size)
        strata = data[self.group_variable].astype(str)

        samples = []
        for stratum, n_h in allocation.items():
            if n_h == 0:
                continue
            members = data[strata == stratum]
            samples.append(members.sample(n=n_h, replace=False, random_state=rng))

        if not samples:
            return data.iloc[0:0].copy()

        return pd.concat(samples).copy()

    def compare_methods(self,
                        data: pd.DataFrame,
                        sample_size: int,
                        rng: np.random.Generator,
                        order: Optional[List[str]] = None) -> SamplingComparison:
        """
        Grouped approval rate for the population and each design.

        Parameters
        ----------
        data : pd.DataFrame
            Imputed records, in their stable row order
        sample_size : int
            Nominal sample size n for every design
        rng : np.random.Generator
            Random source for all three draws, used in design order
        order : list of str, optional
            Display order of the groups

        Returns
        -------
        SamplingComparison
        """
        self.logger.info(
            f"Comparing sampling designs: n={sample_size} of N={len(data)}, "
            f"grouped by {self.group_variable}"
        )

        samples = {
            'Simple Random': self.simple_random_sample(data, sample_size, rng),
            'Systematic': self.systematic_sample(data, sample_size, rng),
            'Stratified': self.stratified_sample(data, sample_size, rng),
        }

        rates = pd.DataFrame({'Population': self.population_approval_rate(data, order)})
        for design, sample in samples.items():
            rates[design] = self.population_approval_rate(sample, order)

        sizes = {design: len(sample) for design, sample in samples.items()}
        self.logger.info(f"Realized sample sizes: {sizes}")

        return SamplingComparison(
            group_variable=self.group_variable,
            rates=rates,
            sample_sizes=sizes,
            stratum_allocation=self.stratified_allocation(data, sample_size)
        )
