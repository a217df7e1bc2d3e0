"""
Step-by-step example of the HMDA lending analysis.

Builds a synthetic state-year file in the public disclosure layout, then runs
each stage of the HMDAAnalysisTool in turn and prints what it finds.
"""

import numpy as np
import pandas as pd

from HMDAAnalysisTool import HMDAAnalysisTool
from HMDAAnalysisTool.config import AGE_BAND_ORDER, DTI_ORDER
from HMDAAnalysisTool.data_processing import County


def create_sample_hmda_file(path: str, n_records: int = 20000) -> pd.DataFrame:
    """Write synthetic loan/application records for demonstration."""
    rng = np.random.default_rng(2023)

    income = rng.lognormal(4.5, 0.5, n_records).round(0)
    data = pd.DataFrame({
        'activity_year': 2023,
        'loan_amount': (rng.lognormal(12.2, 0.6, n_records) // 5000 * 5000 + 5000).astype(int),
        'income': income,
        'interest_rate': rng.normal(6.6, 0.7, n_records).round(3).astype(str),
        'debt_to_income_ratio': rng.choice(DTI_ORDER, n_records),
        'applicant_age': rng.choice(AGE_BAND_ORDER + ['8888'], n_records,
                                    p=[0.04, 0.22, 0.22, 0.18, 0.16, 0.12, 0.05, 0.01]),
        'derived_race': rng.choice(['White', 'Black or African American', 'Asian',
                                    'Race Not Available'], n_records, p=[0.85, 0.02, 0.03, 0.10]),
        'derived_sex': rng.choice(['Male', 'Female', 'Joint', 'Sex Not Available'], n_records),
        'loan_type': rng.choice([1, 2, 3, 4], n_records, p=[0.8, 0.1, 0.06, 0.04]),
        'loan_purpose': rng.choice([1, 2, 31, 32, 4, 5], n_records),
        'county_code': rng.choice([str(c.code) for c in County], n_records),
        'action_taken': rng.choice([1, 2, 3, 4, 5, 6], n_records,
                                   p=[0.55, 0.03, 0.17, 0.10, 0.05, 0.10]),
    })

    # Placeholders and invalid values seen in real files
    data.loc[rng.choice(n_records, 300, replace=False), 'interest_rate'] = 'Exempt'
    data.loc[rng.choice(n_records, 400, replace=False), 'interest_rate'] = 'NA'
    data.loc[rng.choice(n_records, 500, replace=False), 'income'] = np.nan
    data.loc[rng.choice(n_records, 40, replace=False), 'income'] = -1
    data.loc[rng.choice(n_records, 100, replace=False), 'county_code'] = ''

    data.to_csv(path, index=False)
    return data


def main():
    """Run the lending analysis example."""
    print("=" * 60)
    print("HMDA MORTGAGE LENDING ANALYSIS EXAMPLE")
    print("=" * 60)

    print("\n1. Creating sample HMDA file...")
    create_sample_hmda_file('sample_hmda_data.csv')
    print("   - Sample data saved to 'sample_hmda_data.csv'")

    print("\n2. Initializing HMDA Analysis Tool...")
    tool = HMDAAnalysisTool(random_state=42, log_level='WARNING',
                            clt_n_samples=1000, sample_size=10000)

    print("\n3. Loading a 10,000 record subsample...")
    data = tool.load_hmda_data('sample_hmda_data.csv')
    print(f"   - {len(data)} records, {len(data.columns)} variables")

    print("\n4. Cleaning and recoding...")
    cleaned_data, report = tool.clean_hmda_data()
    print(f"   - Records with negative income removed: {report.dropped_negative_income}")
    print(f"   - Missing interest rates: {report.interest_rate_missing}")
    print(f"   - Unmapped codes: {len(report.lookup_gaps)}")

    print("\n5. Missing data and imputation...")
    missing = tool.analyze_missing_data()
    for var, stats in missing.missing_by_variable.items():
        if stats['count']:
            print(f"     * {var}: {stats['percentage']:.1f}% missing")
    tool.impute_missing_data()
    for var, value in tool.analysis_results['imputation_values'].items():
        print(f"     * {var} filled with {value}")

    print("\n6. Descriptive statistics...")
    print(tool.descriptive_analysis().round(2).to_string())

    print("\n7. Approval rate by income level...")
    tables = tool.frequency_analysis()
    rates = tool.approval_rate_analysis(['income_level'])['income_level']
    print(rates.round(3).to_string())
    print(f"   - Frequency tables built for {len(tables)} variables")

    print("\n8. Outliers...")
    for column, result in tool.detect_outliers().items():
        print(f"     * {column}: {result.n_outliers} outliers "
              f"({result.outlier_percentage:.1f}%) outside "
              f"[{result.fence.lower:.2f}, {result.fence.upper:.2f}]")

    print("\n9. Central Limit Theorem on loan amount...")
    tool.clt_simulation()
    print(tool.analysis_results['clt_summary'].round(1).to_string())

    print("\n10. Sampling designs...")
    comparison = tool.compare_sampling_methods()
    print(comparison.rates.round(3).to_string())
    print(f"   - Mean absolute error: {comparison.absolute_errors().mean().round(4).to_dict()}")

    print("\n11. Generating report...")
    tool.generate_report('hmda_analysis_report.html')
    print("   - Report saved to 'hmda_analysis_report.html'")

    summary = tool.get_analysis_summary()
    print(f"\nAnalyses completed: {', '.join(summary['analyses_completed'])}")


if __name__ == "__main__":
    main()
