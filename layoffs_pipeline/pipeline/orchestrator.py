# ========================
# layoffs_pipeline/pipeline/orchestrator.py
# ========================

"""
Pipeline Orchestrator Module

Main orchestrator class that coordinates the layoffs cleaning pipeline and
the analysis run over its output.
"""

import logging
from typing import Any, Dict, List, Optional
from pathlib import Path

from .ingestion import CSVReader
from .deduplication import Deduplicator
from .cleaning import DataCleaner
from .imputation import IndustryImputer
from .filtering import RecordFilter
from .transformation import LayoffAnalyzer
from .storage import DataSaver
from ..utils.performance_monitor import monitor_performance
from ..utils.config import Config

logger = logging.getLogger(__name__)

class DataPipeline:
    """
    Orchestrates the layoffs pipeline.

    Stages run strictly in order (staging, deduplication, normalization,
    imputation, filtering) over one working dataset owned by the pipeline.
    The raw input file is only read.
    """

    def __init__(self,
                 input_file: str,
                 output_dir: str,
                 chunk_size: int = 1000,
                 config: Optional[Config] = None):
        """
        Initialize the data pipeline.

        Args:
            input_file (str): Path to the raw layoffs CSV file
            output_dir (str): Directory for output files
            chunk_size (int): Number of rows read per chunk
            config (Config): Configuration object
        """
        self.input_file = input_file
        self.output_dir = output_dir
        self.chunk_size = chunk_size
        self.config = config or Config()

        self.reader = CSVReader(self.input_file)
        self.deduplicator = Deduplicator()
        self.cleaner = DataCleaner(strict_dates=self.config.STRICT_DATES)
        self.imputer = IndustryImputer()
        self.record_filter = RecordFilter()

        self.records: Optional[List[Dict[str, Any]]] = None
        self.stage_stats: Dict[str, Dict[str, Any]] = {}

        logger.info("DataPipeline initialized:")
        logger.info(f"  Input: {self.input_file}")
        logger.info(f"  Output: {self.output_dir}")
        logger.info(f"  Chunk size: {self.chunk_size}")

    def run(self) -> dict:
        """
        Clean the input, analyze it and write every output file.

        Returns:
            dict: Summary of processing results and saved files
        """
        logger.info(f"Starting layoffs pipeline for '{self.input_file}'...")
        saver = DataSaver(self.output_dir)

        with monitor_performance("Layoffs pipeline") as monitor:
            records = self.run_cleaning(monitor)

            analyzer = self.analyzer()
            logger.info("Saving cleaned dataset and reports...")
            saved_files = saver.save_all_data(
                records, analyzer,
                top_companies_per_year=self.config.TOP_COMPANIES_PER_YEAR
            )
            saved_files['data_dictionary'] = saver.create_data_dictionary(self.config.IQR_MULTIPLIER)

            analysis_summary = analyzer.get_analysis_summary()
            breakdown = analyzer.country_industry_breakdown(
                self.config.BREAKDOWN_COUNTRY, self.config.BREAKDOWN_TOP_N
            )
            monitor.add_checkpoint('analysis', analysis_summary)

        results = {
            'pipeline_status': 'completed',
            'input_file': self.input_file,
            'output_directory': self.output_dir,
            'stage_stats': self.stage_stats,
            'analysis_summary': analysis_summary,
            'country_breakdown': {
                'country': self.config.BREAKDOWN_COUNTRY,
                'top_n': self.config.BREAKDOWN_TOP_N,
                'rows': breakdown,
            },
            'performance': monitor.summary,
        }
        saved_files['summary'] = saver.save_summary(results)
        results['saved_files'] = saved_files

        logger.info("Pipeline finished successfully.")
        self._log_final_summary(results)

        return results

    def run_cleaning(self, monitor=None) -> List[Dict[str, Any]]:
        """
        Run the cleaning stages and keep the cleaned dataset on the pipeline.

        Args:
            monitor (PerformanceMonitor): Optional monitor receiving a
                checkpoint after each stage

        Returns:
            list[dict]: The cleaned records
        """
        records = self.reader.read_staging(self.chunk_size)
        self._finish_stage('staging', {'records_staged': len(records)}, monitor)
        if monitor is not None:
            monitor.update_progress(len(records))

        self.deduplicator.deduplicate(records)
        self._finish_stage('deduplication', self.deduplicator.get_statistics(), monitor)

        self.cleaner.normalize(records)
        self._finish_stage('normalization', self.cleaner.get_statistics(), monitor)

        self.imputer.impute(records)
        self._finish_stage('imputation', self.imputer.get_statistics(), monitor)

        self.record_filter.apply(records)
        self._finish_stage('filtering', self.record_filter.get_statistics(), monitor)

        self.stage_stats['output'] = {'records_cleaned': len(records)}
        self.records = records
        return records

    def analyzer(self) -> LayoffAnalyzer:
        """An analyzer over the cleaned dataset, cleaning first if needed."""
        if self.records is None:
            self.run_cleaning()
        return LayoffAnalyzer(self.records, iqr_multiplier=self.config.IQR_MULTIPLIER)

    def country_industry_breakdown(self, country: str, top_n: int) -> List[Dict[str, Any]]:
        """
        Top ``top_n`` dense-ranked industries of ``country`` by total layoffs.

        Returns:
            list[dict]: Rows with country, industry, total_laid_off and rank.
        """
        return self.analyzer().country_industry_breakdown(country, top_n)

    def _finish_stage(self, name: str, stats: Dict[str, Any], monitor) -> None:
        self.stage_stats[name] = dict(stats)
        if monitor is not None:
            monitor.add_checkpoint(name, stats)

    def _log_final_summary(self, results: dict) -> None:
        """Log final pipeline summary."""
        logger.info("="*60)
        logger.info("PIPELINE EXECUTION SUMMARY")
        logger.info("="*60)

        stage_stats = results['stage_stats']
        logger.info(f"Input file: {results['input_file']}")
        logger.info(f"Records staged: {stage_stats['staging']['records_staged']:,}")
        logger.info(f"Duplicates removed: {stage_stats['deduplication']['duplicates_removed']:,}")
        logger.info(f"Industries imputed: {stage_stats['imputation']['industries_imputed']:,}")
        logger.info(f"Records without figures removed: {stage_stats['filtering']['records_removed']:,}")
        logger.info(f"Clean records: {stage_stats['output']['records_cleaned']:,}")
        logger.info(f"Output files generated: {len(results['saved_files'])}")

        for dataset_type, file_path in results['saved_files'].items():
            logger.info(f"  - {dataset_type}: {file_path}")

        logger.info("="*60)

    def validate_input(self) -> bool:
        """
        Validate input file exists and is readable.

        Returns:
            bool: True if input is valid
        """
        input_path = Path(self.input_file)
        if not input_path.exists():
            logger.error(f"Input file does not exist: {self.input_file}")
            return False

        if not input_path.is_file():
            logger.error(f"Input path is not a file: {self.input_file}")
            return False

        try:
            with open(self.input_file, 'r', encoding='utf-8') as f:
                f.readline()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read input file: {e}")
            return False

        logger.info(f"Input validation passed: {self.input_file}")
        return True
