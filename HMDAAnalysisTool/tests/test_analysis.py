"""
Tests for the descriptive statistics and sampling theory components.
"""

import math
import unittest

import numpy as np
import pandas as pd

from HMDAAnalysisTool.config import AGE_BAND_ORDER
from HMDAAnalysisTool.descriptive_analysis import UnivariateStats, CrossTabulation
from HMDAAnalysisTool.sampling_analysis import (
    CLTSimulation, simulate_sample_means, SamplingDesigns, systematic_indices
)
from HMDAAnalysisTool.sampling_analysis.sampling_designs import round_half_up
from HMDAAnalysisTool.tests.hmda_fixtures import make_analysis_frame


class TestUnivariateStats(unittest.TestCase):
    """Test cases for summaries and frequency tables."""

    def setUp(self):
        """Set up test fixtures."""
        self.stats = UnivariateStats()
        self.data = pd.DataFrame({
            'income': [1.0, 2.0, 3.0, 4.0, 100.0],
            'applicant_age': ['25-34', '<25', '25-34', '>74', 'Unknown'],
        })

    def test_five_number_summary(self):
        summary = self.stats.five_number_summary(self.data, ['income'])

        self.assertEqual(list(summary.columns), ['Min', 'Q1', 'Median', 'Mean', 'Q3', 'Max'])
        self.assertEqual(list(summary.loc['income']), [1.0, 2.0, 3.0, 22.0, 4.0, 100.0])

    def test_five_number_summary_unknown_variable(self):
        with self.assertRaises(ValueError):
            self.stats.five_number_summary(self.data, ['loan_amount'])

    def test_frequency_table_in_given_order(self):
        """Listed categories come first, unlisted ones after, empty ones omitted."""
        table = self.stats.frequency_table(self.data, 'applicant_age', AGE_BAND_ORDER)

        self.assertEqual(list(table['Category']), ['<25', '25-34', '>74', 'Unknown'])
        self.assertEqual(list(table['Count']), [1, 2, 1, 1])
        self.assertAlmostEqual(table['Percentage'].sum(), 100.0)

    def test_frequency_table_by_frequency(self):
        table = self.stats.frequency_table(self.data, 'applicant_age')

        self.assertEqual(table['Category'].iloc[0], '25-34')
        self.assertAlmostEqual(table['Percentage'].iloc[0], 40.0)

    def test_descriptive_stats(self):
        results = self.stats.calculate_descriptive_stats(self.data)

        self.assertEqual(list(results), ['income'])
        self.assertEqual(results['income'].count, 5)
        self.assertEqual(results['income'].median, 3.0)
        self.assertEqual(results['income'].range_, 99.0)
        self.assertGreater(results['income'].skewness, 0)


class TestCrossTabulation(unittest.TestCase):
    """Test cases for approval rates."""

    def setUp(self):
        """Set up test fixtures."""
        self.data = pd.DataFrame({
            'applicant_sex': ['Male', 'Male', 'Female', 'Joint'],
            'approval_status': ['Loan originated', 'Application denied',
                                'Application approved but not accepted', 'Purchased loan'],
        })
        self.crosstab = CrossTabulation()

    def test_approval_rate_by(self):
        table = self.crosstab.approval_rate_by(self.data, 'applicant_sex', ['Male', 'Female'])

        self.assertEqual(list(table.index), ['Male', 'Female', 'Joint'])
        self.assertEqual(list(table['Applications']), [2, 1, 1])
        self.assertEqual(list(table['Approval Rate']), [0.5, 1.0, 0.0])

    def test_crosstab_row_percentages(self):
        table = self.crosstab.crosstab(self.data, 'applicant_sex')

        self.assertAlmostEqual(table.loc['Male', 'Loan originated'], 50.0)
        for _, row in table.iterrows():
            self.assertAlmostEqual(row.sum(), 100.0)

    def test_unknown_variable(self):
        with self.assertRaises(ValueError):
            self.crosstab.approval_rate_by(self.data, 'county')


class TestCLTSimulation(unittest.TestCase):
    """Test cases for the sampling distribution of the mean."""

    def setUp(self):
        """Set up test fixtures."""
        self.population = np.random.default_rng(3).exponential(10.0, 20000)
        self.clt = CLTSimulation(sample_sizes=(50, 100, 200, 400), n_samples=2000)

    def test_spread_matches_standard_error(self):
        """Std of the sample means is close to sigma / sqrt(n) and shrinks with n."""
        results = self.clt.run(self.population, np.random.default_rng(42))

        spreads = [r.std_of_means for r in results]
        for previous, current in zip(spreads, spreads[1:]):
            self.assertLess(current, previous)

        for result in results:
            self.assertEqual(result.n_samples, 2000)
            ratio = result.std_of_means / result.expected_std
            self.assertTrue(0.9 <= ratio <= 1.1, f"n={result.sample_size}: ratio {ratio:.3f}")
            self.assertAlmostEqual(result.mean_of_means, result.population_mean, delta=0.15)

    def test_summary_table(self):
        clt = CLTSimulation(sample_sizes=(10, 20), n_samples=30)
        results = clt.run(self.population[:500], np.random.default_rng(0))
        table = CLTSimulation.summary_table(results)

        self.assertEqual(list(table.index), [10, 20])
        self.assertEqual(list(table['Samples']), [30, 30])
        self.assertAlmostEqual(table.loc[10, 'Sigma / sqrt(n)'],
                               np.std(self.population[:500]) / math.sqrt(10))

    def test_same_generator_state_same_means(self):
        first = simulate_sample_means(self.population, 25, 20, np.random.default_rng(5))
        second = simulate_sample_means(self.population, 25, 20, np.random.default_rng(5))
        np.testing.assert_array_equal(first, second)

    def test_missing_values_ignored(self):
        values = np.array([1.0, np.nan, 3.0])
        means = simulate_sample_means(values, 2, 5, np.random.default_rng(0))
        np.testing.assert_array_equal(means, np.full(5, 2.0))

    def test_sample_size_out_of_range(self):
        with self.assertRaises(ValueError):
            simulate_sample_means(self.population[:10], 11, 5, np.random.default_rng(0))
        with self.assertRaises(ValueError):
            simulate_sample_means(self.population[:10], 0, 5, np.random.default_rng(0))


class TestSamplingDesigns(unittest.TestCase):
    """Test cases for simple random, systematic and stratified sampling."""

    def setUp(self):
        """Set up test fixtures."""
        self.data = make_analysis_frame(n_rows=300)
        self.designs = SamplingDesigns()

    def test_systematic_indices(self):
        """Selection count is floor or ceil of N/k and no index reaches N."""
        for population_size, sample_size in [(103, 10), (10, 3), (100, 7), (50, 50), (20, 40)]:
            step = math.ceil(population_size / sample_size)
            for seed in range(20):
                idx = systematic_indices(population_size, sample_size, np.random.default_rng(seed))

                self.assertIn(len(idx), {population_size // step,
                                         math.ceil(population_size / step)})
                self.assertLessEqual(len(idx), sample_size)
                self.assertLess(idx.max(), population_size)
                self.assertTrue(np.all(np.diff(idx) == step))

    def test_systematic_indices_invalid(self):
        with self.assertRaises(ValueError):
            systematic_indices(0, 5, np.random.default_rng(0))
        with self.assertRaises(ValueError):
            systematic_indices(10, 0, np.random.default_rng(0))

    def test_round_half_up(self):
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(2.4999), 2)

    def test_stratified_allocation(self):
        data = pd.DataFrame({'applicant_age': ['A'] * 50 + ['B'] * 30 + ['C'] * 20})
        self.assertEqual(self.designs.stratified_allocation(data, 10), {'A': 5, 'B': 3, 'C': 2})

    def test_stratified_allocation_rounding_drift(self):
        """Half-up rounding may overshoot n by at most half the number of strata."""
        data = pd.DataFrame({'applicant_age': ['A'] * 25 + ['B'] * 75})
        allocation = self.designs.stratified_allocation(data, 2)
        self.assertEqual(allocation, {'A': 1, 'B': 2})

        data = pd.DataFrame({'applicant_age': ['A', 'B', 'C']})
        allocation = self.designs.stratified_allocation(data, 2)
        self.assertEqual(allocation, {'A': 1, 'B': 1, 'C': 1})
        self.assertLessEqual(abs(sum(allocation.values()) - 2), len(allocation) / 2)

    def test_stratified_sample_follows_allocation(self):
        allocation = self.designs.stratified_allocation(self.data, 60)
        sample = self.designs.stratified_sample(self.data, 60, np.random.default_rng(0))

        counts = sample['applicant_age'].value_counts().to_dict()
        for stratum, n_h in allocation.items():
            self.assertEqual(counts.get(stratum, 0), n_h)
        self.assertLessEqual(abs(len(sample) - 60), len(allocation) / 2)

    def test_compare_methods(self):
        comparison = self.designs.compare_methods(
            self.data, 60, np.random.default_rng(11), AGE_BAND_ORDER
        )

        self.assertEqual(list(comparison.rates.columns),
                         ['Population', 'Simple Random', 'Systematic', 'Stratified'])
        self.assertEqual(comparison.group_variable, 'applicant_age')
        self.assertEqual(comparison.sample_sizes['Simple Random'], 60)
        self.assertEqual(comparison.sample_sizes['Systematic'], 60)

        expected = CrossTabulation().approval_rate_by(self.data, 'applicant_age', AGE_BAND_ORDER)
        pd.testing.assert_series_equal(comparison.rates['Population'],
                                       expected['Approval Rate'], check_names=False)

        errors = comparison.absolute_errors()
        self.assertEqual(list(errors.columns), ['Simple Random', 'Systematic', 'Stratified'])
        self.assertTrue((errors.fillna(0) >= 0).all().all())

    def test_compare_methods_reproducible(self):
        first = self.designs.compare_methods(self.data, 60, np.random.default_rng(11))
        second = self.designs.compare_methods(self.data, 60, np.random.default_rng(11))
        pd.testing.assert_frame_equal(first.rates, second.rates)


if __name__ == '__main__':
    unittest.main()
