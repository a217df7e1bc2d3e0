"""
Tests for the data processing components.

Covers loading and subsampling, cleaning and recoding, the code tables,
imputation and income brackets, and IQR outlier filtering.
"""

import os
import tempfile
import unittest

import numpy as np
import pandas as pd

from HMDAAnalysisTool.config import COLUMN_MAPPING
from HMDAAnalysisTool.data_processing import (
    DataLoader, DataCleaner, MissingDataHandler, OutlierDetector, classify_income,
    ApprovalStatus, County, LoanPurpose, IncomeLevel
)
from HMDAAnalysisTool.data_processing.code_tables import CodedCategory
from HMDAAnalysisTool.exceptions import DataError, ParseError, LookupGapError
from HMDAAnalysisTool.tests.hmda_fixtures import make_population, write_population

MEDIAN_INCOME = 96.505


class TestDataLoader(unittest.TestCase):
    """Test cases for population loading and subsampling."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.TemporaryDirectory()
        self.data_file = os.path.join(self.temp_dir.name, 'hmda.csv')
        write_population(self.data_file, n_rows=600)
        self.loader = DataLoader()

    def tearDown(self):
        self.temp_dir.cleanup()

    def test_missing_file(self):
        """A path that does not exist is a DataError."""
        with self.assertRaises(DataError):
            self.loader.load_data(os.path.join(self.temp_dir.name, 'nope.csv'),
                                  np.random.default_rng(0), 10)

    def test_sample_larger_than_file(self):
        """Requesting more rows than the file holds is a DataError."""
        with self.assertRaises(DataError):
            self.loader.load_data(self.data_file, np.random.default_rng(0), 601)

    def test_subsample_shape_and_columns(self):
        """Subsample has the analysis columns and a fresh row numbering."""
        data = self.loader.load_data(self.data_file, np.random.default_rng(0), 200)

        self.assertEqual(len(data), 200)
        self.assertEqual(list(data.columns), list(COLUMN_MAPPING.values()))
        self.assertEqual(list(data.index), list(range(200)))
        self.assertNotIn('activity_year', data.columns)

    def test_subsample_is_reproducible(self):
        """Same seed gives the same rows, another seed does not."""
        first = self.loader.load_data(self.data_file, np.random.default_rng(7), 100)
        second = self.loader.load_data(self.data_file, np.random.default_rng(7), 100)
        other = self.loader.load_data(self.data_file, np.random.default_rng(8), 100)

        pd.testing.assert_frame_equal(first, second)
        self.assertFalse(first.equals(other))

    def test_no_sample_size_keeps_every_row(self):
        data = self.loader.load_data(self.data_file, np.random.default_rng(0), None)
        self.assertEqual(len(data), 600)

    def test_text_columns_stay_text(self):
        """County and age codes are read as text, not numbers."""
        data = self.loader.load_data(self.data_file, np.random.default_rng(0), None)

        observed = data['county'].dropna()
        self.assertTrue(all(isinstance(v, str) for v in observed))
        self.assertIn('8888', set(data['applicant_age']))

    def test_pipe_separated_file(self):
        """Separator is detected from the header line."""
        pipe_file = os.path.join(self.temp_dir.name, 'hmda_pipe.txt')
        write_population(pipe_file, n_rows=50, sep='|')

        data = self.loader.load_data(pipe_file, np.random.default_rng(0), 20)
        self.assertEqual(len(data), 20)
        self.assertIn('approval_status', data.columns)

    def test_na_county_code_is_missing(self):
        """A literal NA county code is read as missing, not as a code."""
        na_file = os.path.join(self.temp_dir.name, 'hmda_na.csv')
        population = make_population(300)
        population.loc[35:44, 'county_code'] = 'NA'
        population.to_csv(na_file, index=False)

        data = self.loader.load_data(na_file, np.random.default_rng(0), None)
        self.assertEqual(int(data['county'].isna().sum()), 10)
        self.assertNotIn('NA', set(data['county'].dropna()))

        cleaned, report = DataCleaner(strict_validation=True).clean_data(data)
        self.assertEqual(report.gaps_for('county'), [])

        imputed = MissingDataHandler().impute_missing_data(cleaned)
        self.assertFalse(imputed['county'].isna().any())
        self.assertTrue(set(imputed['county']) <= set(County.labels()))

    def test_missing_required_column(self):
        broken_file = os.path.join(self.temp_dir.name, 'broken.csv')
        population = write_population(broken_file, n_rows=20)
        population.drop(columns=['action_taken']).to_csv(broken_file, index=False)

        with self.assertRaises(DataError) as ctx:
            self.loader.load_data(broken_file, np.random.default_rng(0), 10)
        self.assertIn('action_taken', str(ctx.exception))


class TestDataCleaner(unittest.TestCase):
    """Test cases for numeric coercion, income filtering and recoding."""

    def setUp(self):
        """Set up test fixtures."""
        self.raw = pd.DataFrame({
            'loan_amount': [100000, 200000, 150000, 50000],
            'income': [50.0, -3.0, np.nan, 80.0],
            'interest_rate': ['6.5', 'Exempt', '', 'NA'],
            'approval_status': [1, 3, 2, 9],
            'county': ['50007', '50021', np.nan, '50099'],
            'loan_type': [1, 2, 3, 4],
            'loan_purpose': [1, 31, 32, 5],
        })

    def test_clean_data(self):
        """Negative income rows are dropped and codes become labels."""
        cleaned, report = DataCleaner().clean_data(self.raw)

        self.assertEqual(report.total_records, 4)
        self.assertEqual(report.retained_records, 3)
        self.assertEqual(report.dropped_negative_income, 1)
        self.assertEqual(report.interest_rate_missing, 3)

        self.assertEqual(len(cleaned), 3)
        self.assertTrue(cleaned['income'].isna().iloc[1])
        self.assertEqual(cleaned['interest_rate'].iloc[0], 6.5)
        self.assertEqual(
            list(cleaned['approval_status']),
            ['Loan originated', 'Application approved but not accepted', '9']
        )
        self.assertEqual(cleaned['county'].iloc[0], 'Chittenden')
        self.assertTrue(pd.isna(cleaned['county'].iloc[1]))
        self.assertEqual(list(cleaned['loan_purpose']),
                         ['Home purchase', 'Cash-out refinancing', 'Not applicable'])

    def test_input_not_modified(self):
        original = self.raw.copy()
        DataCleaner().clean_data(self.raw)
        pd.testing.assert_frame_equal(self.raw, original)

    def test_lookup_gaps_reported(self):
        """Unmapped codes pass through and are listed in the report."""
        _, report = DataCleaner().clean_data(self.raw)

        self.assertTrue(report.has_lookup_gaps)
        self.assertEqual([(g.code, g.count) for g in report.gaps_for('approval_status')],
                         [('9', 1)])
        self.assertEqual([g.code for g in report.gaps_for('county')], ['50099'])
        self.assertEqual(report.gaps_for('loan_type'), [])
        self.assertTrue(any(line.startswith('WARNING') for line in report.cleaning_log))

    def test_strict_validation_raises_on_gap(self):
        with self.assertRaises(LookupGapError):
            DataCleaner(strict_validation=True).clean_data(self.raw)

    def test_non_numeric_token_is_parse_error(self):
        """Tokens that are neither numbers nor placeholders abort cleaning."""
        raw = self.raw.copy()
        raw['interest_rate'] = ['6.5', 'abc', '7.0x', 'NA']

        with self.assertRaises(ParseError) as ctx:
            DataCleaner().clean_data(raw)

        self.assertEqual(ctx.exception.column, 'interest_rate')
        self.assertEqual(ctx.exception.n_rows, 2)
        self.assertEqual(sorted(ctx.exception.tokens), ['7.0x', 'abc'])

    def test_income_missing_code(self):
        """Income 9999 means not reported and becomes missing, not a High income."""
        raw = self.raw.copy()
        raw['income'] = ['50', '9999', '9999.0', '80']

        cleaned, report = DataCleaner().clean_data(raw)

        self.assertEqual(report.dropped_negative_income, 0)
        self.assertEqual(list(cleaned['income'].isna()), [False, True, True, False])
        self.assertIn('INFO: income: 2 values coded as not reported set to missing',
                      report.cleaning_log)

        kept, _ = DataCleaner(numeric_missing_codes={}).clean_data(raw)
        self.assertEqual(kept['income'].iloc[1], 9999.0)

    def test_custom_placeholders(self):
        cleaner = DataCleaner(placeholders=('', 'missing'))
        values = cleaner.coerce_numeric(pd.Series(['1.5', 'MISSING', ' 2 ']), 'income')

        self.assertEqual(values.iloc[0], 1.5)
        self.assertTrue(np.isnan(values.iloc[1]))
        self.assertEqual(values.iloc[2], 2.0)

        with self.assertRaises(ParseError):
            cleaner.coerce_numeric(pd.Series(['Exempt']), 'income')


class TestCodeTables(unittest.TestCase):
    """Test cases for the HMDA code tables."""

    def test_normalize_code(self):
        self.assertEqual(CodedCategory.normalize_code('1'), 1)
        self.assertEqual(CodedCategory.normalize_code(1.0), 1)
        self.assertEqual(CodedCategory.normalize_code(' 31 '), 31)
        self.assertEqual(CodedCategory.normalize_code('abc'), 'abc')

    def test_recode_mixed_representations(self):
        recoded, gaps = ApprovalStatus.recode(pd.Series(['1', 2.0, None, 3]))

        self.assertEqual(recoded.iloc[0], 'Loan originated')
        self.assertEqual(recoded.iloc[1], 'Application approved but not accepted')
        self.assertTrue(pd.isna(recoded.iloc[2]))
        self.assertEqual(recoded.iloc[3], 'Application denied')
        self.assertEqual(gaps, {})

    def test_table_contents(self):
        self.assertEqual(len(ApprovalStatus), 8)
        self.assertEqual(len(County), 14)
        self.assertEqual(County.lookup_table()[50007], 'Chittenden')
        self.assertEqual(LoanPurpose.labels()[2], 'Refinancing')
        self.assertEqual(IncomeLevel.labels(), ['Low', 'Moderate', 'Middle', 'High'])


class TestIncomeLevel(unittest.TestCase):
    """Income bracket boundaries relative to the median income."""

    def test_boundaries(self):
        m = MEDIAN_INCOME
        self.assertEqual(classify_income(0, m), 'Low')
        self.assertEqual(classify_income(48.25, m), 'Low')
        self.assertEqual(classify_income(0.5 * m, m), 'Moderate')
        self.assertEqual(classify_income(0.75 * m, m), 'Middle')
        self.assertEqual(classify_income(1.25 * m, m), 'Middle')
        self.assertEqual(classify_income(120.64, m), 'High')

    def test_missing_income(self):
        with self.assertRaises(ValueError):
            classify_income(np.nan, MEDIAN_INCOME)


class TestMissingDataHandler(unittest.TestCase):
    """Test cases for missing data profiling and imputation."""

    def setUp(self):
        """Set up test fixtures."""
        self.data = pd.DataFrame({
            'income': [10.0, np.nan, 30.0, np.nan, 50.0],
            'interest_rate': [6.0, 6.5, np.nan, 7.0, 7.5],
            'county': ['B', 'A', 'B', 'A', np.nan],
            'applicant_age': ['25-34', '8888', '35-44', '25-34', np.nan],
        })
        self.handler = MissingDataHandler(median_income=MEDIAN_INCOME)

    def test_analyze_counts_sentinels(self):
        analysis = self.handler.analyze_missing_data(self.data)

        self.assertEqual(analysis.missing_by_variable['applicant_age']['count'], 2)
        self.assertEqual(analysis.missing_by_variable['income']['count'], 2)
        self.assertEqual(analysis.total_missing, 6)
        self.assertAlmostEqual(analysis.missing_percentage, 30.0)
        self.assertEqual(list(analysis.to_frame().index), list(self.data.columns))

    def test_median_fills_only_missing_positions(self):
        imputed = self.handler.impute_missing_data(self.data)

        self.assertEqual(list(imputed['income']), [10.0, 30.0, 30.0, 30.0, 50.0])
        self.assertEqual(list(imputed['interest_rate']), [6.0, 6.5, 6.75, 7.0, 7.5])
        self.assertEqual(self.handler.fill_values['income'], 30.0)

    def test_mode_fill_and_sentinel(self):
        """Ties resolve to the first value in sort order; 8888 counts as missing."""
        imputed = self.handler.impute_missing_data(self.data)

        self.assertEqual(imputed['county'].iloc[4], 'A')
        self.assertEqual(list(imputed['applicant_age']),
                         ['25-34', '25-34', '35-44', '25-34', '25-34'])
        self.assertNotIn('8888', set(imputed['applicant_age']))

    def test_income_level_derived(self):
        imputed = self.handler.impute_missing_data(self.data)

        self.assertEqual(list(imputed['income_level'].astype(str)),
                         ['Low', 'Low', 'Low', 'Low', 'Moderate'])
        self.assertTrue(imputed['income_level'].cat.ordered)

    def test_input_not_modified(self):
        original = self.data.copy()
        self.handler.impute_missing_data(self.data)
        pd.testing.assert_frame_equal(self.data, original)

    def test_all_missing_column(self):
        data = self.data.copy()
        data['income'] = np.nan

        with self.assertRaises(ValueError):
            self.handler.impute_missing_data(data)


class TestOutlierDetector(unittest.TestCase):
    """Test cases for IQR outlier filtering."""

    def setUp(self):
        """Set up test fixtures."""
        self.data = pd.DataFrame({
            'loan_amount': list(range(1, 21)) + [100],
            'interest_rate': [6.0] + [5.0] * 20,
        })
        self.detector = OutlierDetector()

    def test_fence(self):
        fence = self.detector.iqr_fence(self.data['loan_amount'])

        self.assertEqual(fence.q1, 6.0)
        self.assertEqual(fence.q3, 16.0)
        self.assertEqual(fence.lower, -9.0)
        self.assertEqual(fence.upper, 31.0)

    def test_filter_is_idempotent(self):
        """Filtering the filtered data again removes nothing."""
        first = self.detector.filter_outliers(self.data, 'loan_amount')

        self.assertEqual(first.n_outliers, 1)
        self.assertEqual(list(first.without_outliers['loan_amount']), list(range(1, 21)))

        second = self.detector.filter_outliers(first.without_outliers, 'loan_amount')
        self.assertEqual(second.n_outliers, 0)

    def test_columns_filtered_independently(self):
        results = self.detector.filter_columns(self.data)

        self.assertEqual(set(results), {'loan_amount', 'interest_rate'})
        self.assertEqual(len(results['interest_rate'].with_outliers), 21)
        self.assertEqual(results['interest_rate'].n_outliers, 1)
        self.assertIn(100, list(results['interest_rate'].without_outliers['loan_amount']))

    def test_missing_column(self):
        with self.assertRaises(ValueError):
            self.detector.filter_outliers(self.data, 'income')


if __name__ == '__main__':
    unittest.main()
