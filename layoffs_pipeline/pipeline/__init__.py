# ========================
# layoffs_pipeline/pipeline/__init__.py
# ========================

"""
Layoffs Pipeline Package

Core components of the layoffs cleaning and analysis pipeline:
- ingestion: CSV staging with header validation
- deduplication: Identity-key duplicate removal
- cleaning: Field standardization and null coercion
- imputation: Industry backfill from sibling records
- filtering: Removal of rows without layoff figures
- outliers: Per-industry IQR outlier detection
- transformation: Rankings, rolling totals and breakdowns
- storage: Output management
- orchestrator: Pipeline coordination
"""

from .ingestion import CSVReader, LAYOFF_COLUMNS
from .deduplication import Deduplicator, identity
from .cleaning import DataCleaner
from .imputation import IndustryImputer
from .filtering import RecordFilter
from .outliers import IQROutlierDetector, iqr_bounds
from .transformation import LayoffAnalyzer, dense_rank, layoff_bracket
from .storage import DataSaver
from .orchestrator import DataPipeline

__all__ = [
    'CSVReader',
    'LAYOFF_COLUMNS',
    'Deduplicator',
    'identity',
    'DataCleaner',
    'IndustryImputer',
    'RecordFilter',
    'IQROutlierDetector',
    'iqr_bounds',
    'LayoffAnalyzer',
    'dense_rank',
    'layoff_bracket',
    'DataSaver',
    'DataPipeline'
]
