# ========================
# layoffs_pipeline/utils/data_generator.py
# ========================

"""
Data Generation Utilities

Generates messy layoffs datasets shaped like the public layoffs data, with
the inconsistencies the cleaning pipeline is built to repair.
"""

import csv
import random
import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional
from pathlib import Path

from ..pipeline.ingestion import LAYOFF_COLUMNS

logger = logging.getLogger(__name__)

class DataGenerator:
    """
    Data generator for realistic, deliberately dirty layoffs datasets.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize data generator.

        Args:
            seed (int): Random seed for reproducible data generation
        """
        self.random = random.Random(seed)
        self._initialize_data_patterns()
        logger.info(f"DataGenerator initialized with seed: {seed}")

    def _initialize_data_patterns(self) -> None:
        """Initialize the company catalog and category pools."""
        self.companies = [
            {"name": "Amazon", "location": "Seattle", "industry": "Retail", "country": "United States", "size": 10000},
            {"name": "Meta", "location": "SF Bay Area", "industry": "Consumer", "country": "United States", "size": 8000},
            {"name": "Coinbase", "location": "SF Bay Area", "industry": "Crypto", "country": "United States", "size": 1500},
            {"name": "Gemini", "location": "New York City", "industry": "Crypto", "country": "United States", "size": 300},
            {"name": "Shopify", "location": "Ottawa", "industry": "Retail", "country": "Canada", "size": 1000},
            {"name": "Byju's", "location": "Bengaluru", "industry": "Education", "country": "India", "size": 2500},
            {"name": "Ola", "location": "Bengaluru", "industry": "Transportation", "country": "India", "size": 1000},
            {"name": "Klarna", "location": "Stockholm", "industry": "Finance", "country": "Sweden", "size": 700},
            {"name": "Delivery Hero", "location": "Berlin", "industry": "Food", "country": "Germany", "size": 400},
            {"name": "Airbnb", "location": "SF Bay Area", "industry": "Travel", "country": "United States", "size": 1900},
            {"name": "Carvana", "location": "Phoenix", "industry": "Transportation", "country": "United States", "size": 2500},
            {"name": "Juul", "location": "SF Bay Area", "industry": "Consumer", "country": "United States", "size": 400},
        ]
        self.stages = ["Seed", "Series A", "Series B", "Series C", "Series D", "Post-IPO", "Acquired", "Unknown"]
        self.crypto_variants = ["Crypto", "Crypto Currency", "CryptoCurrency"]

    def generate_dataset(self,
                        file_path: str,
                        num_rows: int,
                        error_rate: float = 0.15,
                        start_date: Optional[date] = None) -> Dict[str, Any]:
        """
        Generate a layoffs dataset with controlled error injection.

        Args:
            file_path (str): Output CSV file path
            num_rows (int): Number of rows to generate, before duplicates
            error_rate (float): Fraction of records with intentional errors
            start_date (date): First possible event date

        Returns:
            dict: Generation statistics
        """
        logger.info(f"Generating {num_rows:,} layoff rows with {error_rate:.1%} error rate...")

        if start_date is None:
            start_date = date(2020, 3, 1)

        stats = {
            'total_rows': 0,
            'error_rate': error_rate,
            'start_date': start_date.isoformat(),
            'records_with_errors': 0,
            'error_types': {}
        }

        Path(file_path).parent.mkdir(parents=True, exist_ok=True)

        with open(file_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(LAYOFF_COLUMNS)

            for _ in range(num_rows):
                record = self._generate_single_record(start_date, error_rate, stats)
                writer.writerow(record)
                stats['total_rows'] += 1

                # Exact repeats for the deduplicator
                if self.random.random() < error_rate / 5:
                    writer.writerow(record)
                    stats['total_rows'] += 1
                    self._track_error_type(stats, 'duplicate_row')

        stats['error_rate_actual'] = stats['records_with_errors'] / num_rows if num_rows else 0.0

        logger.info(f"Dataset generated: {file_path}")
        logger.info(f"Error breakdown: {stats['error_types']}")

        return stats

    def _generate_single_record(self,
                               start_date: date,
                               error_rate: float,
                               stats: Dict[str, Any]) -> List[Any]:
        """Generate a single raw row, possibly with errors."""
        company = self.random.choice(self.companies)
        event_date = start_date + timedelta(days=self.random.randint(0, 1100))

        percentage = round(self.random.uniform(0.01, 1.0), 2)
        if self.random.random() < 0.05:
            percentage = 1.0
        total = max(1, int(company["size"] * percentage * self.random.uniform(0.05, 0.5)))

        record = {
            'company': company["name"],
            'location': company["location"],
            'industry': company["industry"],
            'total_laid_off': str(total),
            'percentage_laid_off': str(percentage),
            'date': f"{event_date.month}/{event_date.day}/{event_date.year}",
            'stage': self.random.choice(self.stages),
            'country': company["country"],
            'funds_raised_millions': str(self.random.randint(1, 5000)),
        }

        # Missing figures occur in the real data regardless of errors
        if self.random.random() < 0.2:
            record['total_laid_off'] = 'NULL'
        if self.random.random() < 0.2:
            record['percentage_laid_off'] = 'NULL'

        if self.random.random() < error_rate:
            stats['records_with_errors'] += 1
            self._inject_errors(record, stats)

        return [record[column] for column in LAYOFF_COLUMNS]

    def _inject_errors(self, record: Dict[str, Any], stats: Dict[str, Any]) -> None:
        """Inject one kind of inconsistency into the record."""
        error_type = self.random.choice([
            'padded_company', 'crypto_variant', 'country_period', 'blank_industry',
            'null_date', 'no_figures', 'extreme_layoff'
        ])

        if error_type == 'padded_company':
            record['company'] = f" {record['company']} "
        elif error_type == 'crypto_variant':
            if record['industry'] != 'Crypto':
                return
            record['industry'] = self.random.choice(self.crypto_variants)
        elif error_type == 'country_period':
            if record['country'] != 'United States':
                return
            record['country'] = 'United States.'
        elif error_type == 'blank_industry':
            record['industry'] = self.random.choice(['', 'NULL'])
        elif error_type == 'null_date':
            record['date'] = self.random.choice(['', 'NULL'])
        elif error_type == 'no_figures':
            record['total_laid_off'] = 'NULL'
            record['percentage_laid_off'] = 'NULL'
        elif error_type == 'extreme_layoff':
            record['total_laid_off'] = str(self.random.randint(10000, 20000))

        self._track_error_type(stats, error_type)

    def _track_error_type(self, stats: Dict[str, Any], error_type: str) -> None:
        """Track error types for statistics."""
        stats['error_types'][error_type] = stats['error_types'].get(error_type, 0) + 1
