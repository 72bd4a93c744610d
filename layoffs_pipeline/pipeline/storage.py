# ========================
# layoffs_pipeline/pipeline/storage.py
# ========================

"""
Data Storage Module

Writes the cleaned layoffs dataset and the analysis reports to disk.
"""

import csv
import json
import logging
from datetime import date
from typing import Any, Dict, List
from pathlib import Path

from .ingestion import LAYOFF_COLUMNS

logger = logging.getLogger(__name__)

# Output file name per dataset type
OUTPUT_FILES = {
    'cleaned_dataset': 'layoffs_cleaned.csv',
    'rolling_monthly_totals': 'rolling_monthly_totals.csv',
    'industry_ranking': 'industry_ranking.csv',
    'company_year_totals': 'company_year_totals.csv',
    'top_companies_per_year': 'top_companies_per_year.csv',
    'industry_outliers': 'industry_outliers.csv',
    'layoff_profiles': 'layoff_profiles.csv',
    'country_totals': 'country_totals.csv',
    'summary': 'pipeline_summary.json',
    'data_dictionary': 'DATA_DICTIONARY.md',
}

OUTLIER_COLUMNS = [
    'industry', 'company', 'total_laid_off', 'Q1', 'Q3', 'IQR',
    'lower_bound', 'upper_bound', 'outlier_status',
]

class DataSaver:
    """
    Saves the cleaned dataset and the LayoffAnalyzer reports as CSV files.
    """

    def __init__(self, output_dir: str = "data/processed"):
        """
        Initialize the data saver.

        Args:
            output_dir (str): Directory to save output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"DataSaver initialized with output directory: {self.output_dir}")

    def save_all_data(self, records: List[Dict[str, Any]], analyzer, top_companies_per_year: int = 5) -> Dict[str, str]:
        """
        Save the cleaned dataset and every report.

        Args:
            records (list[dict]): Cleaned records
            analyzer: LayoffAnalyzer built over ``records``
            top_companies_per_year (int): Rank cutoff for the per-year report

        Returns:
            dict: Mapping of dataset type to saved file path
        """
        saved_files = {}

        try:
            saved_files['cleaned_dataset'] = self.save_cleaned_dataset(records)
            saved_files['rolling_monthly_totals'] = self._save_report(
                'rolling_monthly_totals', ['month', 'total_layoffs', 'rolling_total'],
                analyzer.rolling_monthly_totals()
            )
            saved_files['industry_ranking'] = self._save_report(
                'industry_ranking', ['industry', 'total_layoffs', 'ranking'],
                analyzer.industry_ranking()
            )
            saved_files['top_companies_per_year'] = self._save_report(
                'top_companies_per_year', ['year', 'company', 'total_layoffs', 'ranking'],
                analyzer.top_companies_per_year(top_companies_per_year)
            )
            saved_files['company_year_totals'] = self._save_report(
                'company_year_totals', ['company', 'year', 'total_layoffs'],
                analyzer.totals_by_company_year()
            )
            saved_files['industry_outliers'] = self._save_report(
                'industry_outliers', OUTLIER_COLUMNS, analyzer.industry_outliers()
            )
            saved_files['layoff_profiles'] = self._save_report(
                'layoff_profiles', ['company', 'layoff_bracket', 'layoff_profile'],
                analyzer.layoff_profiles()
            )
            saved_files['country_totals'] = self._save_report(
                'country_totals', ['country', 'total_layoffs'], analyzer.totals_by('country')
            )

            logger.info(f"All data saved successfully to {len(saved_files)} files")
            return saved_files

        except OSError as e:
            logger.error(f"Error saving data: {e}")
            raise

    def save_cleaned_dataset(self, records: List[Dict[str, Any]]) -> str:
        """
        Save the cleaned records. Dates are written in ISO form and nulls as
        empty cells; columns beyond the layoffs schema are kept after it.
        """
        file_path = self.output_dir / OUTPUT_FILES['cleaned_dataset']
        headers = list(LAYOFF_COLUMNS)
        for record in records:
            for key in record:
                if key not in headers:
                    headers.append(key)

        rows = [
            {key: value.isoformat() if isinstance(value, date) else value for key, value in record.items()}
            for record in records
        ]
        self._write_csv(file_path, headers, rows)
        return str(file_path)

    def save_summary(self, summary_data: Dict[str, Any]) -> str:
        """Save the pipeline summary as JSON."""
        file_path = self.output_dir / OUTPUT_FILES['summary']

        with open(file_path, 'w', encoding='utf-8') as f:
            json.dump(summary_data, f, indent=2, ensure_ascii=False, default=str)

        logger.info(f"Summary saved to {file_path}")
        return str(file_path)

    def _save_report(self, dataset_type: str, headers: List[str], rows: List[Dict[str, Any]]) -> str:
        file_path = self.output_dir / OUTPUT_FILES[dataset_type]
        self._write_csv(file_path, headers, rows)
        return str(file_path)

    def _write_csv(self, file_path: Path, headers: List[str], data_items: List[Dict]) -> None:
        """Write data to CSV file."""
        try:
            with open(file_path, 'w', newline='', encoding='utf-8') as f:
                writer = csv.DictWriter(f, fieldnames=headers)
                writer.writeheader()
                writer.writerows(data_items)

            logger.info(f"Saved {len(data_items)} records to {file_path}")

        except OSError as e:
            logger.error(f"Error writing CSV file {file_path}: {e}")
            raise

    def create_data_dictionary(self, iqr_multiplier: float = 1.5) -> str:
        """Create a data dictionary explaining all output files."""
        file_path = self.output_dir / OUTPUT_FILES['data_dictionary']

        content = f"""# Data Dictionary

This document describes the structure and content of all generated data files.

## Files Overview

### 1. layoffs_cleaned.csv
The cleaned layoffs dataset: duplicates removed, text standardized, missing
industries filled from the same company, rows without any layoff figure dropped.

| Column | Type | Description |
|--------|------|-------------|
| company | string | Company name, surrounding spaces removed |
| location | string | Company location |
| industry | string | Industry ("Crypto" variants merged); empty if unknown |
| total_laid_off | integer | Number of employees laid off; empty if unknown |
| percentage_laid_off | float | Share of staff laid off (0.0-1.0); empty if unknown |
| date | date | Event date, YYYY-MM-DD; empty if unknown |
| stage | string | Funding stage of the company, as given in the source |
| country | string | Country, trailing periods removed from "United States" |
| funds_raised_millions | float | Funds raised in millions |

### 2. rolling_monthly_totals.csv
| Column | Type | Description |
|--------|------|-------------|
| month | string | YYYY-MM |
| total_layoffs | integer | Layoffs in the month |
| rolling_total | integer | Cumulative layoffs up to and including the month |

### 3. industry_ranking.csv
| Column | Type | Description |
|--------|------|-------------|
| industry | string | Industry |
| total_layoffs | integer | Layoffs in the industry |
| ranking | integer | Dense rank, 1 = most layoffs |

### 4. top_companies_per_year.csv
| Column | Type | Description |
|--------|------|-------------|
| year | integer | Calendar year |
| company | string | Company |
| total_layoffs | integer | Layoffs by the company in the year |
| ranking | integer | Dense rank within the year |

### 5. company_year_totals.csv
| Column | Type | Description |
|--------|------|-------------|
| company | string | Company |
| year | integer | Calendar year; empty for undated events |
| total_layoffs | integer | Layoffs by the company in the year |

### 6. industry_outliers.csv
IQR (Tukey fence) classification of each layoff event within its industry.

| Column | Type | Description |
|--------|------|-------------|
| industry | string | Industry |
| company | string | Company |
| total_laid_off | integer | Layoffs in the event |
| Q1 | float | First quartile of the industry |
| Q3 | float | Third quartile of the industry |
| IQR | float | Q3 - Q1 |
| lower_bound | float | Q1 - {iqr_multiplier} * IQR |
| upper_bound | float | Q3 + {iqr_multiplier} * IQR |
| outlier_status | string | "Outlier" or "Normal" |

### 7. layoff_profiles.csv
| Column | Type | Description |
|--------|------|-------------|
| company | string | Company |
| layoff_bracket | string | Full / Large / Medium / Small Layoff, or Unknown |
| layoff_profile | string | "<stage> - <industry> with <bracket>" |

### 8. country_totals.csv
| Column | Type | Description |
|--------|------|-------------|
| country | string | Country |
| total_layoffs | integer | Layoffs in the country |

### 9. pipeline_summary.json
Per-stage record counts and headline analysis numbers.

## Data Quality Notes

- The raw input file is never modified
- A percentage of exactly 0 falls outside every bracket and is labelled "Unknown"
- Events with an unparsable layoff count are left out of totals and outlier analysis
"""

        with open(file_path, 'w', encoding='utf-8') as f:
            f.write(content)

        logger.info(f"Data dictionary created at {file_path}")
        return str(file_path)
