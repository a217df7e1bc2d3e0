"""
Main HMDA Analysis Tool class.

This module provides the primary interface for the lending analysis,
running the pipeline stages in order (load, clean, impute, describe, filter
outliers, demonstrate sampling theory) and rendering the report.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Any, Union
import pandas as pd
import numpy as np

from .config import AGE_BAND_ORDER, DTI_ORDER, load_config
from .data_processing import (
    DataLoader, DataCleaner, MissingDataHandler, OutlierDetector,
    CleaningReport, MissingDataAnalysis, OutlierResult, CLTResult,
    SamplingComparison, IncomeLevel
)
from .descriptive_analysis import UnivariateStats, CrossTabulation
from .sampling_analysis import CLTSimulation, SamplingDesigns
from .visualization import DistributionPlots
from .reporting import HTMLReport


class HMDAAnalysisTool:
    """
    Exploratory analysis of one state-year of HMDA loan/application records.

    This is the main interface that integrates all analysis components.
    One random generator is created per tool instance and passed explicitly
    to every stage that draws samples, so a run is reproducible from its seed.

    Features:
    - Seeded subsampling of the population file
    - Cleaning, recoding and imputation
    - Five-number summaries and frequency tables
    - IQR outlier views per column
    - Central Limit Theorem simulation
    - Simple random, systematic and stratified sampling comparison
    - HTML reporting
    """

    NUMERIC_SUMMARY_VARIABLES = ['loan_amount', 'income', 'interest_rate']
    CATEGORICAL_VARIABLES = [
        'applicant_age', 'applicant_race', 'applicant_sex', 'income_level',
        'debt_to_income_ratio', 'loan_type', 'loan_purpose', 'county', 'approval_status'
    ]
    DISPLAY_ORDERS = {
        'applicant_age': AGE_BAND_ORDER,
        'income_level': IncomeLevel.labels(),
        'debt_to_income_ratio': DTI_ORDER,
    }

    def __init__(self,
                 config_path: Optional[str] = None,
                 random_state: Optional[int] = None,
                 log_level: str = 'INFO',
                 **config_overrides):
        """
        Initialize the HMDA Analysis Tool.

        Parameters
        ----------
        config_path : str, optional
            Path to a JSON configuration file
        random_state : int, optional
            Seed of the run; overrides the configured seed
        log_level : str, default 'INFO'
            Logging level
        **config_overrides
            AnalysisConfig fields overriding the file and defaults
        """
        # Setup logging
        logging.basicConfig(
            level=getattr(logging, log_level.upper()),
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )
        self.logger = logging.getLogger(__name__)

        # Configuration
        self.config = load_config(config_path, random_state=random_state, **config_overrides)
        self.random_state = self.config.random_state
        self.rng = np.random.default_rng(self.random_state)

        # Initialize components
        self.data_loader = DataLoader(column_mapping=self.config.column_mapping)
        self.data_cleaner = DataCleaner(
            placeholders=self.config.numeric_placeholders,
            numeric_missing_codes={'income': [self.config.income_missing_code]},
            strict_validation=self.config.strict_validation
        )
        self.missing_data_handler = MissingDataHandler(
            median_income=self.config.median_income,
            sentinel_codes={'applicant_age': [self.config.age_missing_code]}
        )
        self.univariate_stats = UnivariateStats()
        self.cross_tabulation = CrossTabulation(approved_statuses=self.config.approved_statuses)
        self.outlier_detector = OutlierDetector(multiplier=self.config.outlier_multiplier)
        self.clt = CLTSimulation(
            sample_sizes=self.config.clt_sample_sizes,
            n_samples=self.config.clt_n_samples
        )
        self.sampling_designs = SamplingDesigns(
            approved_statuses=self.config.approved_statuses,
            group_variable=self.config.strata_variable
        )

        # Data storage
        self.data = None
        self.cleaned_data = None
        self.imputed_data = None
        self.analysis_results = {}

        self.logger.info("HMDA Analysis Tool initialized successfully")

    def load_hmda_data(self,
                       file_path: Union[str, Path],
                       sample_size: Optional[int] = None,
                       **kwargs) -> pd.DataFrame:
        """
        Load the population file and draw the analysis subsample.

        Parameters
        ----------
        file_path : str or Path
            Path to the delimited HMDA file
        sample_size : int, optional
            Rows to draw; defaults to the configured sample size
        **kwargs
            Additional arguments for pandas.read_csv

        Returns
        -------
        pd.DataFrame
            Subsample with analysis columns
        """
        if sample_size is None:
            sample_size = self.config.sample_size

        self.logger.info(f"Loading HMDA data from {file_path}")

        try:
            self.data = self.data_loader.load_data(file_path, self.rng, sample_size, **kwargs)
            self.cleaned_data = None
            self.imputed_data = None
            self.analysis_results = {}

            self.logger.info(
                f"Successfully loaded {len(self.data)} records with "
                f"{len(self.data.columns)} variables"
            )

            return self.data

        except Exception as e:
            self.logger.error(f"Failed to load HMDA data: {e}")
            raise

    def clean_hmda_data(self,
                        data: Optional[pd.DataFrame] = None) -> Tuple[pd.DataFrame, CleaningReport]:
        """
        Coerce types, drop negative incomes and recode categorical fields.

        Returns
        -------
        tuple
            (Cleaned data, CleaningReport)
        """
        if data is None:
            if self.data is None:
                raise ValueError("No data loaded. Call load_hmda_data() first.")
            data = self.data

        self.logger.info("Starting data cleaning process")

        try:
            self.cleaned_data, cleaning_report = self.data_cleaner.clean_data(data)
            self.analysis_results['cleaning_report'] = cleaning_report

            if cleaning_report.has_lookup_gaps:
                self.logger.warning(
                    f"{len(cleaning_report.lookup_gaps)} unmapped codes passed through unchanged"
                )

            return self.cleaned_data, cleaning_report

        except Exception as e:
            self.logger.error(f"Data cleaning failed: {e}")
            raise

    def analyze_missing_data(self,
                             data: Optional[pd.DataFrame] = None,
                             variables: Optional[List[str]] = None) -> MissingDataAnalysis:
        """Missing data profile of the cleaned (not yet imputed) data."""
        if data is None:
            data = self.cleaned_data if self.cleaned_data is not None else self.data

        if data is None:
            raise ValueError("No data available for analysis")

        self.logger.info("Analyzing missing data patterns")

        missing_analysis = self.missing_data_handler.analyze_missing_data(data, variables)
        self.analysis_results['missing_data_analysis'] = missing_analysis

        self.logger.info(
            f"Missing data analysis completed. {missing_analysis.missing_percentage:.1f}% "
            f"of values are missing"
        )

        return missing_analysis

    def impute_missing_data(self, data: Optional[pd.DataFrame] = None) -> pd.DataFrame:
        """Median/mode imputation and income bracket derivation."""
        if data is None:
            if self.cleaned_data is None:
                raise ValueError("No cleaned data. Call clean_hmda_data() first.")
            data = self.cleaned_data

        self.logger.info("Imputing missing values")

        try:
            self.imputed_data = self.missing_data_handler.impute_missing_data(data)
            self.analysis_results['imputation_values'] = dict(self.missing_data_handler.fill_values)
            return self.imputed_data

        except Exception as e:
            self.logger.error(f"Imputation failed: {e}")
            raise

    def descriptive_analysis(self, variables: Optional[List[str]] = None) -> pd.DataFrame:
        """
        Five-number summary (with mean) of the numeric variables.

        Fuller descriptive statistics are stored under 'descriptive_stats'.
        """
        data = self._analysis_data()
        variables = variables or [v for v in self.NUMERIC_SUMMARY_VARIABLES if v in data.columns]

        self.logger.info("Generating descriptive statistics")

        summary = self.univariate_stats.five_number_summary(data, variables)
        self.analysis_results['five_number_summary'] = summary
        self.analysis_results['descriptive_stats'] = \
            self.univariate_stats.calculate_descriptive_stats(data, variables)

        return summary

    def frequency_analysis(self, variables: Optional[List[str]] = None) -> Dict[str, pd.DataFrame]:
        """Category counts and percentages per categorical variable."""
        data = self._analysis_data()
        variables = variables or [v for v in self.CATEGORICAL_VARIABLES if v in data.columns]

        tables = {
            var: self.univariate_stats.frequency_table(data, var, self.DISPLAY_ORDERS.get(var))
            for var in variables
        }
        self.analysis_results['frequency_tables'] = tables

        self.logger.info(f"Frequency analysis completed for {len(tables)} variables")
        return tables

    def approval_rate_analysis(self,
                               group_variables: Optional[List[str]] = None) -> Dict[str, pd.DataFrame]:
        """Approval rate per category of each group variable."""
        data = self._analysis_data()
        if group_variables is None:
            group_variables = ['applicant_age', 'applicant_sex', 'applicant_race',
                               'income_level', 'loan_type']
        group_variables = [v for v in group_variables if v in data.columns]

        tables = {
            var: self.cross_tabulation.approval_rate_by(data, var, self.DISPLAY_ORDERS.get(var))
            for var in group_variables
        }
        self.analysis_results['approval_rates'] = tables
        return tables

    def detect_outliers(self, columns: Optional[List[str]] = None) -> Dict[str, OutlierResult]:
        """Independent IQR outlier views per column."""
        data = self._analysis_data()

        self.logger.info("Detecting outliers")

        outliers = self.outlier_detector.filter_columns(data, columns)
        self.analysis_results['outliers'] = outliers
        return outliers

    def clt_simulation(self, column: str = 'loan_amount') -> List[CLTResult]:
        """Sampling distribution of the mean of one column."""
        data = self._analysis_data()

        if column not in data.columns:
            raise ValueError(f"Variable {column} not found in data")

        self.logger.info(
            f"Running CLT simulation on {column}: sizes {self.clt.sample_sizes}, "
            f"{self.clt.n_samples} samples each"
        )

        results = self.clt.run(data[column], self.rng)
        self.analysis_results['clt'] = results
        self.analysis_results['clt_summary'] = CLTSimulation.summary_table(results)
        return results

    def compare_sampling_methods(self, sample_size: Optional[int] = None) -> SamplingComparison:
        """Approval rate per group under the population and three sampling designs."""
        data = self._analysis_data()
        sample_size = sample_size or self.config.sampling_sample_size

        order = self.DISPLAY_ORDERS.get(self.sampling_designs.group_variable)
        comparison = self.sampling_designs.compare_methods(data, sample_size, self.rng, order)
        self.analysis_results['sampling_comparison'] = comparison
        return comparison

    def run_full_analysis(self, file_path: Union[str, Path]) -> Dict[str, Any]:
        """Run every stage in order and return the analysis results."""
        self.load_hmda_data(file_path)
        self.clean_hmda_data()
        self.analyze_missing_data()
        self.impute_missing_data()
        self.descriptive_analysis()
        self.frequency_analysis()
        self.approval_rate_analysis()
        self.detect_outliers()
        self.clt_simulation()
        self.compare_sampling_methods()

        self.logger.info("Full analysis completed")
        return self.analysis_results

    def generate_report(self,
                        output_path: Optional[str] = None,
                        include_figures: bool = True,
                        title: str = "HMDA Mortgage Lending Analysis") -> str:
        """
        Generate the HTML analysis report.

        Parameters
        ----------
        output_path : str, optional
            Path to save report
        include_figures : bool, default True
            Whether to draw and embed charts
        title : str
            Report title

        Returns
        -------
        str
            Generated report content or path to saved file
        """
        if not self.analysis_results:
            self.logger.warning("No analysis results available for reporting")
            return ""

        self.logger.info("Generating HTML report")

        try:
            plots = DistributionPlots(style=self.config.plot_style) if include_figures else None
            report_content = self._build_report(HTMLReport(title), plots).render()

            if output_path:
                with open(output_path, 'w', encoding='utf-8') as f:
                    f.write(report_content)
                self.logger.info(f"Report saved to {output_path}")
                return output_path
            else:
                return report_content

        except Exception as e:
            self.logger.error(f"Report generation failed: {e}")
            raise

    def get_analysis_summary(self) -> Dict[str, Any]:
        """
        Get summary of all completed analyses.

        Returns
        -------
        dict
            Summary of analysis results
        """
        summary = {
            'data_loaded': self.data is not None,
            'data_cleaned': self.cleaned_data is not None,
            'data_imputed': self.imputed_data is not None,
            'n_records': len(self.data) if self.data is not None else 0,
            'n_variables': len(self.data.columns) if self.data is not None else 0,
            'random_state': self.random_state,
            'analyses_completed': list(self.analysis_results.keys()),
        }

        if 'cleaning_report' in self.analysis_results:
            report = self.analysis_results['cleaning_report']
            summary['retained_records'] = report.retained_records
            summary['dropped_negative_income'] = report.dropped_negative_income
            summary['lookup_gaps'] = len(report.lookup_gaps)

        if 'outliers' in self.analysis_results:
            summary['outliers'] = {
                col: result.n_outliers for col, result in self.analysis_results['outliers'].items()
            }

        if 'sampling_comparison' in self.analysis_results:
            summary['sampling_sizes'] = self.analysis_results['sampling_comparison'].sample_sizes

        return summary

    def _analysis_data(self) -> pd.DataFrame:
        if self.imputed_data is None:
            raise ValueError("No imputed data. Call impute_missing_data() first.")
        return self.imputed_data

    def _build_report(self, report: HTMLReport, plots: Optional[DistributionPlots]) -> HTMLReport:
        """Add one section per completed analysis."""
        results = self.analysis_results

        report.paragraph(
            f"Exploratory analysis of a random subsample of {len(self.data) if self.data is not None else 0} "
            f"loan/application records (seed {self.random_state})."
        )

        if 'cleaning_report' in results:
            cr = results['cleaning_report']
            report.heading("Data Cleaning")
            report.summary_box({
                'Records loaded': cr.total_records,
                'Records with negative income removed': cr.dropped_negative_income,
                'Records retained': cr.retained_records,
                'Missing interest rates': cr.interest_rate_missing,
            })
            if cr.lookup_gaps:
                report.paragraph(
                    "Some codes had no entry in their recode table and were kept as raw codes; "
                    "they appear as separate categories in the tables below."
                )
                report.table(pd.DataFrame([vars(g) for g in cr.lookup_gaps]))

        if 'missing_data_analysis' in results:
            report.heading("Missing Data")
            report.paragraph(
                "Missing incomes and interest rates are filled with the column median; "
                "missing counties and ages are filled with the most frequent value."
            )
            report.table(results['missing_data_analysis'].to_frame(), float_format='{:,.2f}')
            if results.get('imputation_values'):
                report.table(
                    pd.Series(results['imputation_values'], name='Fill value').to_frame(),
                    caption='Imputed values'
                )

        if 'five_number_summary' in results:
            report.heading("Descriptive Statistics")
            report.table(results['five_number_summary'])
            if plots is not None and self.imputed_data is not None:
                for column in results['five_number_summary'].index:
                    report.figure(plots.histogram(self.imputed_data, column), alt=column)

        if 'frequency_tables' in results:
            report.heading("Categorical Variables")
            for variable, table in results['frequency_tables'].items():
                report.table(table.set_index('Category'), float_format='{:,.2f}', caption=variable)
                if plots is not None:
                    report.figure(
                        plots.frequency_bar_chart(table, title=variable, horizontal=len(table) > 8),
                        alt=variable
                    )

        if 'approval_rates' in results:
            report.heading("Approval Rates")
            for variable, table in results['approval_rates'].items():
                report.table(table, caption=variable)

        if 'outliers' in results:
            report.heading("Outliers")
            report.paragraph(
                "Values below Q1 - 1.5 IQR or above Q3 + 1.5 IQR are treated as outliers. "
                "Each column is filtered independently."
            )
            fences = pd.DataFrame({
                col: {**vars(r.fence), 'outliers': r.n_outliers}
                for col, r in results['outliers'].items()
            }).T
            report.table(fences)
            if plots is not None:
                for column, result in results['outliers'].items():
                    report.figure(plots.outlier_boxplots(result), alt=column)

        if 'clt_summary' in results:
            report.heading("Central Limit Theorem")
            report.paragraph(
                "The mean of the sample means stays at the population mean for every sample size, "
                "while their standard deviation shrinks in line with sigma / sqrt(n)."
            )
            report.table(results['clt_summary'])
            if plots is not None:
                report.figure(plots.clt_histograms(results['clt']), alt='CLT')

        if 'sampling_comparison' in results:
            comparison = results['sampling_comparison']
            report.heading("Sampling Methods")
            report.paragraph(
                "Approval rate by group in the population and in samples drawn by simple random, "
                "systematic and stratified sampling."
            )
            report.table(comparison.rates, float_format='{:.4f}')
            report.summary_box({f"{k} sample size": v for k, v in comparison.sample_sizes.items()})
            if plots is not None:
                report.figure(plots.sampling_comparison_chart(comparison), alt='Sampling comparison')

        return report
