# ========================
# layoffs_pipeline/utils/__init__.py
# ========================

"""
Utilities Package

Configuration, logging, monitoring and sample data helpers for the pipeline.
"""

from .config import Config
from .performance_monitor import monitor_performance, PerformanceMonitor
from .logging_setup import setup_logging
from .data_generator import DataGenerator
from .job_metadata import JobMetadataManager

__all__ = [
    'Config',
    'monitor_performance',
    'PerformanceMonitor',
    'setup_logging',
    'DataGenerator',
    'JobMetadataManager'
]
