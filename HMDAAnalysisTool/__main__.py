"""
Command line entry point.

Usage:
    python -m HMDAAnalysisTool state_2023.csv
    python -m HMDAAnalysisTool state_2023.csv --seed 7 --sample-size 5000
    python -m HMDAAnalysisTool state_2023.csv --config analysis.json --output report.html
"""
import argparse
import logging
import sys
from typing import List, Optional

from .exceptions import HMDAAnalysisError
from .hmda_analysis_tool import HMDAAnalysisTool

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m HMDAAnalysisTool",
        description="Exploratory analysis of HMDA loan/application records",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full analysis with the default seed, report written beside the data
  python -m HMDAAnalysisTool state_2023.csv

  # Reproduce a run with another seed and a smaller subsample
  python -m HMDAAnalysisTool state_2023.csv --seed 7 --sample-size 5000

  # Tables only, no charts
  python -m HMDAAnalysisTool state_2023.csv --no-figures --output tables.html
        """
    )
    parser.add_argument('data_file', help='Delimited HMDA file for one state-year')
    parser.add_argument('--config', default=None, help='JSON configuration file')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed (default: configured value, 42)')
    parser.add_argument('--sample-size', type=int, default=None,
                        help='Records drawn from the file (default: 10000)')
    parser.add_argument('--output', default='hmda_report.html',
                        help='HTML report path (default: hmda_report.html)')
    parser.add_argument('--log-level', default='INFO',
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help='Logging level')
    parser.add_argument('--no-figures', action='store_true',
                        help='Leave charts out of the report')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        tool = HMDAAnalysisTool(
            config_path=args.config,
            random_state=args.seed,
            log_level=args.log_level,
            sample_size=args.sample_size
        )
        tool.run_full_analysis(args.data_file)
        output = tool.generate_report(args.output, include_figures=not args.no_figures)
    except HMDAAnalysisError as e:
        logger.error(f"Analysis failed: {e}")
        return 1

    logger.info(f"Report written to {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
