# ========================
# tests/test_ingestion.py
# ========================

import unittest
import tempfile
import os
import sys
import csv

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from layoffs_pipeline.pipeline.ingestion import CSVReader, LAYOFF_COLUMNS

HEADER = list(LAYOFF_COLUMNS)

ROWS = [
    ['Atlassian', 'Sydney', 'Other', '500', '0.05', '3/6/2023', 'Post-IPO', 'Australia', '210'],
    ['SiriusXM', 'New York City', 'Media', '475', '0.08', '3/6/2023', 'Post-IPO', 'United States', '525'],
    ['Alerzo', 'Ibadan', 'Retail', '400', 'NULL', '3/6/2023', 'Series B', 'Nigeria', '16'],
    ['UpGrad', 'Mumbai', 'Education', '120', '', '3/6/2023', 'Unknown', 'India', '631'],
]

class TestDataIngestion(unittest.TestCase):
    """Test the CSV ingestion module."""

    def _write_csv(self, rows):
        with tempfile.NamedTemporaryFile(mode='w', suffix='.csv', delete=False, newline='') as f:
            writer = csv.writer(f)
            writer.writerows(rows)
            path = f.name
        self.addCleanup(os.unlink, path)
        return path

    def test_csv_reader_chunked_processing(self):
        """Test that CSVReader properly chunks data."""
        path = self._write_csv([HEADER] + ROWS)
        reader = CSVReader(path)

        chunks = list(reader.read_in_chunks(chunk_size=3))

        self.assertEqual(len(chunks), 2)
        self.assertEqual(len(chunks[0]), 3)
        self.assertEqual(len(chunks[1]), 1)
        self.assertEqual(reader.header, HEADER)
        self.assertEqual(chunks[0][0]['company'], 'Atlassian')

    def test_read_staging_keeps_raw_text(self):
        """Staged rows are verbatim text, sentinels included."""
        path = self._write_csv([HEADER] + ROWS)

        staging = CSVReader(path).read_staging(chunk_size=2)

        self.assertEqual(len(staging), 4)
        self.assertEqual(staging[2]['percentage_laid_off'], 'NULL')
        self.assertEqual(staging[3]['percentage_laid_off'], '')
        self.assertEqual(staging[0]['date'], '3/6/2023')

    def test_read_staging_leaves_source_untouched(self):
        """Mutating the staging copy never writes back to the file."""
        path = self._write_csv([HEADER] + ROWS)
        with open(path, 'rb') as f:
            before = f.read()

        staging = CSVReader(path).read_staging()
        staging[0]['company'] = 'changed'
        staging.clear()

        with open(path, 'rb') as f:
            self.assertEqual(f.read(), before)

    def test_missing_columns_abort_ingestion(self):
        """A header without the layoffs columns is a configuration error."""
        path = self._write_csv([['company', 'location'], ['Atlassian', 'Sydney']])
        reader = CSVReader(path)

        with self.assertRaises(ValueError) as ctx:
            list(reader.read_in_chunks(chunk_size=10))

        self.assertIn('total_laid_off', str(ctx.exception))
        self.assertIn('funds_raised_millions', str(ctx.exception))

    def test_extra_columns_are_allowed(self):
        path = self._write_csv([HEADER + ['source']] + [row + ['web'] for row in ROWS])

        staging = CSVReader(path).read_staging()

        self.assertEqual(staging[0]['source'], 'web')

    def test_csv_reader_file_not_found(self):
        """Test CSVReader behavior with non-existent file."""
        reader = CSVReader("non_existent_file.csv")

        with self.assertRaises(FileNotFoundError):
            list(reader.read_in_chunks(chunk_size=10))

    def test_csv_reader_empty_file(self):
        """Test CSVReader behavior with empty CSV file."""
        path = self._write_csv([])

        chunks = list(CSVReader(path).read_in_chunks(chunk_size=10))

        self.assertEqual(len(chunks), 0)

    def test_invalid_chunk_size(self):
        path = self._write_csv([HEADER] + ROWS)

        with self.assertRaises(ValueError):
            list(CSVReader(path).read_in_chunks(chunk_size=0))

if __name__ == '__main__':
    unittest.main()
