# ========================
# layoffs_pipeline/pipeline/ingestion.py
# ========================

"""
Data Ingestion Module

Reads the raw layoffs CSV into a staging copy. The source file is only ever
opened for reading, so the raw data stays untouched.
"""

import csv
import logging
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

# Columns every layoffs source must provide, in source order
LAYOFF_COLUMNS = (
    'company',
    'location',
    'industry',
    'total_laid_off',
    'percentage_laid_off',
    'date',
    'stage',
    'country',
    'funds_raised_millions',
)

class CSVReader:
    """
    A CSV reader that reads a layoffs file in chunks and validates its header
    before handing rows to the pipeline.
    """

    def __init__(self, file_path, required_columns=LAYOFF_COLUMNS):
        """
        Initialize the CSV reader.

        Args:
            file_path (str): Path to the CSV file to read
            required_columns (tuple): Columns that must appear in the header
        """
        self.file_path = file_path
        self.required_columns = tuple(required_columns)
        self.header = []
        logger.info(f"Initialized CSVReader for file: {file_path}")

    def read_in_chunks(self, chunk_size: int) -> Iterator[List[Dict[str, Optional[str]]]]:
        """
        A generator that yields a list of dictionaries for each chunk of data.

        Args:
            chunk_size (int): The number of rows to yield per chunk.

        Yields:
            list[dict]: A list of dictionaries representing a chunk of rows.

        Raises:
            FileNotFoundError: If the input file does not exist.
            ValueError: If the header lacks any of the required columns.
        """
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")

        try:
            with open(self.file_path, 'r', newline='', encoding='utf-8') as f:
                reader = csv.DictReader(f)
                self.header = reader.fieldnames or []
                logger.info(f"CSV header: {self.header}")

                # An empty file has no header and no rows to check
                if self.header:
                    self._validate_header()

                chunk = []
                row_count = 0

                for row in reader:
                    chunk.append(row)
                    row_count += 1

                    if len(chunk) == chunk_size:
                        logger.debug(f"Yielding chunk with {len(chunk)} rows")
                        yield chunk
                        chunk = []

                if chunk:
                    logger.debug(f"Yielding final chunk with {len(chunk)} rows")
                    yield chunk

                logger.info(f"Total rows read: {row_count}")

        except FileNotFoundError:
            logger.error(f"File '{self.file_path}' was not found")
            raise

    def read_staging(self, chunk_size: int = 1000) -> List[Dict[str, Optional[str]]]:
        """
        Read every row into a new list of record copies (the staging dataset).

        Args:
            chunk_size (int): Rows read per chunk while loading.

        Returns:
            list[dict]: Mutable working copy of the raw records.
        """
        staging = []
        for chunk in self.read_in_chunks(chunk_size):
            staging.extend(dict(row) for row in chunk)
        logger.info(f"Staged {len(staging)} raw records from {self.file_path}")
        return staging

    def _validate_header(self) -> None:
        """Abort ingestion when the source lacks expected columns."""
        missing = [col for col in self.required_columns if col not in self.header]
        if missing:
            logger.error(f"Input '{self.file_path}' is missing columns: {missing}")
            raise ValueError(
                f"Input file '{self.file_path}' is missing required columns: "
                f"{', '.join(missing)}"
            )
