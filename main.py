#!/usr/bin/env python3
# ========================
# main.py
# ========================

"""
Main Entry Point for the Layoffs Cleaning Pipeline

Cleans a raw layoffs CSV, writes the cleaned dataset and analysis reports,
and prints a country/industry breakdown. Without an input file a messy
sample dataset is generated first.
"""

import sys
import argparse
import logging
from pathlib import Path

from layoffs_pipeline.pipeline import DataPipeline
from layoffs_pipeline.utils import Config, setup_logging, DataGenerator

def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Clean and analyze a layoffs dataset")
    parser.add_argument('input_file', nargs='?', help="Raw layoffs CSV (default: generate sample data)")
    parser.add_argument('--output-dir', help="Directory for cleaned data and reports")
    parser.add_argument('--country', help="Country for the industry breakdown")
    parser.add_argument('--top-n', type=int, help="Highest industry rank in the breakdown")
    parser.add_argument('--strict-dates', action='store_true', help="Null out unrecognized dates")
    parser.add_argument('--config', help="JSON file of configuration overrides")
    parser.add_argument('--save-config', help="Write the effective configuration to this JSON file")
    return parser.parse_args(argv)

def build_config(args) -> Config:
    """Environment configuration with the command line options applied."""
    config = Config.load_from_file(args.config) if args.config else Config()
    if args.strict_dates:
        config.STRICT_DATES = True
    if args.country is not None:
        config.BREAKDOWN_COUNTRY = args.country
    if args.top_n is not None:
        config.BREAKDOWN_TOP_N = args.top_n
    return config

def main(argv=None):
    """Main execution function."""
    args = parse_args(argv)
    config = build_config(args)

    setup_logging(
        log_level=config.LOG_LEVEL,
        log_file="pipeline.log",
        log_dir="logs"
    )

    logger = logging.getLogger(__name__)
    logger.info("="*60)
    logger.info("LAYOFFS CLEANING PIPELINE - MAIN EXECUTION")
    logger.info("="*60)

    invalid = [name for name, valid in config.validate_config().items() if not valid]
    if invalid:
        logger.error(f"Invalid configuration values: {', '.join(invalid)}")
        return 1

    try:
        config.ensure_directories()
        if args.save_config:
            config.save_to_file(args.save_config)
            logger.info(f"Configuration saved to {args.save_config}")

        input_file = args.input_file
        if input_file is None:
            input_file = config.DEFAULT_INPUT_FILE
            logger.info("Step 1: Generating sample data...")
            generator = DataGenerator(seed=42)  # Reproducible data
            generation_stats = generator.generate_dataset(
                file_path=input_file,
                num_rows=config.DEFAULT_SAMPLE_ROWS,
                error_rate=0.15
            )
            logger.info(f"Sample data generated: {generation_stats}")

        logger.info("Step 2: Running layoffs pipeline...")
        pipeline = DataPipeline(
            input_file=input_file,
            output_dir=args.output_dir or config.DEFAULT_OUTPUT_DIR,
            chunk_size=config.DEFAULT_CHUNK_SIZE,
            config=config
        )

        if not pipeline.validate_input():
            logger.error("Input validation failed. Exiting.")
            return 1

        results = pipeline.run()

        _print_execution_summary(results)

        logger.info("Pipeline execution completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Pipeline execution failed: {e}", exc_info=True)
        return 1

def _print_execution_summary(results: dict) -> None:
    """Print final execution summary."""
    stages = results['stage_stats']
    analysis = results['analysis_summary']
    breakdown = results['country_breakdown']

    print("\n" + "="*70)
    print("PIPELINE EXECUTION SUMMARY")
    print("="*70)

    print("Cleaning:")
    print(f"   - Records staged: {stages['staging']['records_staged']:,}")
    print(f"   - Duplicates removed: {stages['deduplication']['duplicates_removed']:,}")
    print(f"   - Dates parsed: {stages['normalization']['dates_parsed']:,}")
    print(f"   - Industries imputed: {stages['imputation']['industries_imputed']:,}")
    print(f"   - Rows without figures removed: {stages['filtering']['records_removed']:,}")
    print(f"   - Clean records: {stages['output']['records_cleaned']:,}")

    print("\nAnalysis:")
    print(f"   - Total layoffs: {analysis['total_layoffs']:,}")
    print(f"   - Industries: {analysis['industries']}")
    print(f"   - Outlier events: {analysis['outlier_records']}")

    print(f"\nTop {breakdown['top_n']} industries in {breakdown['country']}:")
    for row in breakdown['rows']:
        print(f"   {row['rank']:>2}. {row['industry']}: {row['total_laid_off']:,}")

    print("\nGenerated Outputs:")
    for dataset_type, file_path in results['saved_files'].items():
        print(f"   - {dataset_type.replace('_', ' ').title()}: {Path(file_path).name}")

    print("="*70)

if __name__ == '__main__':
    exit_code = main()
    sys.exit(exit_code)
