"""
Command line entry point for the QOF CVD Earnings Analysis tool.

Serves the practice lookup API, searches practices, and renders a practice
earnings report (JSON dataset, PNG charts, HTML).
"""

import argparse
from pathlib import Path
from loguru import logger
import sys

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from config.config import (
    DATA_OUTPUTS_DIR,
    ensure_directories,
    get_dataset_path,
    get_prevalence_params,
    get_search_params,
    get_server_settings,
)
from src.acquisition.practice_loader import LoadError, PracticeDataCache
from src.analysis.practice_lookup import PracticeLookup, should_search
from src.modeling.earnings_projection import EarningsProjectionEngine
from src.reporting.dashboard_data_builder import DashboardDataBuilder
from src.reporting.html_report import build_html_report
from src.reporting.visualizations import ReportGenerator


def setup_logging(log_file: Path = None):
    """
    Configure logging for the tool.

    Args:
        log_file: Optional path to log file
    """
    logger.remove()  # Remove default handler

    # Console logging
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>",
        level="INFO"
    )

    # File logging
    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {message}",
            level="DEBUG",
            rotation="10 MB"
        )


def _cache_for(args) -> PracticeDataCache:
    return PracticeDataCache(args.data_file or get_dataset_path())


def run_serve(args):
    """Run the practice lookup API."""
    from src.api.server import create_app

    settings = get_server_settings()
    host = args.host or settings['host']
    port = args.port or settings['port']

    prevalence = get_prevalence_params()
    app = create_app(
        _cache_for(args),
        max_results=get_search_params()['max_results'],
        prevalence_levels=prevalence['levels'],
        default_prevalence=prevalence['default_level'],
    )
    logger.info(f"Server is running on http://{host}:{port}")
    app.run(host=host, port=port)
    return 0


def run_search(args):
    """Print practices matching a search term."""
    params = get_search_params()
    if not should_search(args.term, params['min_term_length']):
        logger.error(f"Search terms need at least {params['min_term_length']} characters")
        return 2

    try:
        store = _cache_for(args).get_store()
    except LoadError as e:
        logger.error(f"Error loading data: {e}")
        return 1

    results = PracticeLookup(store, max_results=params['max_results']).search(args.term)
    if not results:
        logger.info(f"No practices match '{args.term}'")
        return 0

    for practice in results:
        print(f"{practice.get('PRACTICE_CODE')} | {practice.get('PRACTICE_NAME')} | {practice.get('POST_CODE')}")
    return 0


def run_report(args):
    """Render the earnings report for one practice."""
    params = get_prevalence_params()
    prevalence = args.prevalence
    if prevalence is None:
        prevalence = params['default_level']
    if prevalence not in params['levels']:
        logger.error(f"Prevalence level {prevalence} is not enabled; choose from {params['levels']}")
        return 2

    try:
        store = _cache_for(args).get_store()
    except LoadError as e:
        logger.error(f"Error loading data: {e}")
        return 1

    practice = PracticeLookup(store).find_by_code(args.code)
    if practice is None:
        logger.error(f"Practice not found: {args.code}")
        return 1

    logger.info("=" * 70)
    logger.info(f"EARNINGS REPORT: {practice.get('PRACTICE_NAME')} ({args.code})")
    logger.info("=" * 70)

    projection = EarningsProjectionEngine().project(practice, prevalence)

    output_dir = Path(args.output_dir) if args.output_dir else DATA_OUTPUTS_DIR
    builder = DashboardDataBuilder(output_dir)
    dataset = builder.build_dataset(practice, projection)
    builder.export(dataset, filename=f"{args.code}_dashboard.json")

    charts = []
    if not args.no_charts:
        generator = ReportGenerator(output_dir)
        charts.append(generator.plot_prevalence_comparison(dataset['prevalenceComparisonData']))
        charts.extend(generator.plot_all_disease_areas(dataset))

    html_path = output_dir / "reports" / f"{args.code}_report.html"
    build_html_report(dataset, html_path, charts)

    for card in dataset['summaryCards']:
        change = f" ({card['change']})" if card['change'] else ""
        logger.info(f"{card['title']}: {card['formatted']}{change}")

    logger.info(f"✓ Report complete: {html_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="QOF 2025/26 Cardiovascular Indicator Analysis"
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        '--data-file',
        type=Path,
        default=None,
        help='Practice CSV (default: config data.practice_file)'
    )
    common.add_argument(
        '--log-file',
        type=Path,
        default=None,
        help='Optional path to log file'
    )

    subparsers = parser.add_subparsers(dest='command', required=True)

    serve = subparsers.add_parser('serve', parents=[common], help='Run the lookup API')
    serve.add_argument('--host', default=None, help='Bind address (default: config)')
    serve.add_argument('--port', type=int, default=None, help='Port (default: config or PORT)')
    serve.set_defaults(func=run_serve)

    search = subparsers.add_parser('search', parents=[common], help='Search by name, ODS code or postcode')
    search.add_argument('term', help='Search text (at least 2 characters)')
    search.set_defaults(func=run_search)

    report = subparsers.add_parser('report', parents=[common], help='Render a practice earnings report')
    report.add_argument('code', help='Practice ODS code')
    report.add_argument(
        '--prevalence',
        type=int,
        choices=[0, 1, 2, 3],
        default=None,
        help='Prevalence increase scenario in percent, 0 disables (default: config)'
    )
    report.add_argument('--output-dir', type=Path, default=None, help='Output directory')
    report.add_argument('--no-charts', action='store_true', help='Skip PNG chart rendering')
    report.set_defaults(func=run_report)

    return parser


def main(argv=None):
    """Main execution function."""
    args = build_parser().parse_args(argv)

    setup_logging(args.log_file)
    ensure_directories()

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
