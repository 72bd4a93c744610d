# ========================
# layoffs_pipeline/pipeline/cleaning.py
# ========================

"""
Data Cleaning Module

Applies the field-level standardization rules to layoff records: trimming,
canonical industry and country names, date parsing and null coercion.
"""

import re
import logging
from datetime import date, datetime
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Raw text values standing in for SQL NULL in CSV sources
NULL_MARKERS = ('', 'NULL')

US_DATE_PATTERN = re.compile(r'^[0-9]{1,2}/[0-9]{1,2}/[0-9]{4}$')
ISO_DATE_PATTERN = re.compile(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$')

class DataCleaner:
    """
    Rewrites layoff records in place. No record is ever removed here; rows
    that end up without usable numbers are dropped later by the filter.

    With ``strict_dates`` enabled, dates are run through every recognized
    format and anything left unparsed becomes None instead of staying as text.
    """

    def __init__(self, strict_dates: bool = False):
        """
        Initialize the data cleaner.

        Args:
            strict_dates (bool): Null out dates no recognized format can parse
        """
        self.strict_dates = strict_dates
        self.records_processed = 0
        self.dates_parsed = 0
        self.dates_nulled = 0
        self.dates_unrecognized = 0
        self.numeric_parse_failures = 0
        self.industries_canonicalized = 0
        logger.info(f"DataCleaner initialized (strict_dates={strict_dates})")

    def normalize(self, records: List[Dict[str, Any]]) -> None:
        """
        Normalize every record of the working dataset in place.

        Args:
            records (list[dict]): Working dataset.
        """
        for record in records:
            self.clean_record(record)
        logger.info(
            f"Normalized {len(records)} records: {self.dates_parsed} dates parsed, "
            f"{self.dates_unrecognized} unrecognized dates, "
            f"{self.numeric_parse_failures} numeric parse failures"
        )

    def clean_record(self, record: Dict[str, Any]) -> Dict[str, Any]:
        """
        Apply all cleaning rules to a single record.

        Args:
            record (dict): A dictionary representing a single row of data.

        Returns:
            dict: The same record, rewritten in place.
        """
        self.records_processed += 1

        record['company'] = self._clean_company(record.get('company'))

        record['industry'] = self._clean_industry(self._coerce_null(record.get('industry')))
        record['country'] = self._clean_country(record.get('country'))
        record['date'] = self._clean_date(record.get('date'))

        record['total_laid_off'] = self._clean_count(record.get('total_laid_off'), record)
        record['percentage_laid_off'] = self._clean_float(record.get('percentage_laid_off'), record)
        record['funds_raised_millions'] = self._clean_float(record.get('funds_raised_millions'), record)

        return record

    def _coerce_null(self, value: Any) -> Any:
        """Map the textual null markers onto None."""
        if isinstance(value, str) and value in NULL_MARKERS:
            return None
        return value

    def _clean_company(self, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip(' ')
        return value

    def _clean_industry(self, value: Any) -> Optional[str]:
        """Collapse every 'Crypto...' spelling onto 'Crypto'."""
        if isinstance(value, str) and value.startswith('Crypto') and value != 'Crypto':
            self.industries_canonicalized += 1
            return 'Crypto'
        return value

    def _clean_country(self, value: Any) -> Optional[str]:
        """Strip trailing periods from 'United States' spellings."""
        if isinstance(value, str) and value.startswith('United States'):
            return value.rstrip('.')
        return value

    def _clean_date(self, value: Any) -> Any:
        """
        Parse an M/D/YYYY string into a date; blank, 'NULL' and impossible
        M/D/YYYY values such as 13/45/2022 become None.

        Values already converted are returned untouched. Any other text is
        logged and left as-is, or nulled when ``strict_dates`` is set.
        """
        if value is None or isinstance(value, date):
            return value

        if not isinstance(value, str):
            return self._unrecognized_date(value)

        if value in NULL_MARKERS:
            self.dates_nulled += 1
            return None

        if US_DATE_PATTERN.match(value):
            try:
                parsed = datetime.strptime(value, '%m/%d/%Y').date()
            except ValueError:
                return self._impossible_date(value)
            self.dates_parsed += 1
            return parsed

        if self.strict_dates and ISO_DATE_PATTERN.match(value):
            try:
                parsed = datetime.strptime(value, '%Y-%m-%d').date()
            except ValueError:
                return self._unrecognized_date(value)
            self.dates_parsed += 1
            return parsed

        # Already canonical; the analyzer reads ISO text the same as a date
        if ISO_DATE_PATTERN.match(value):
            return value

        return self._unrecognized_date(value)

    def _impossible_date(self, value: str) -> None:
        """An M/D/YYYY value naming no real calendar day becomes None."""
        self.dates_nulled += 1
        logger.warning(f"Impossible date {value!r} set to NULL")
        return None

    def _unrecognized_date(self, value: Any) -> Any:
        self.dates_unrecognized += 1
        if self.strict_dates:
            logger.warning(f"Unrecognized date {value!r} set to NULL")
            return None
        logger.warning(f"Unrecognized date {value!r} left unchanged")
        return value

    def _clean_count(self, value: Any, record: Dict[str, Any]) -> Any:
        """
        Converts a layoff count to an integer.
        Accepts integral floats such as '12.0'; anything else is left as-is.
        """
        value = self._coerce_null(value)
        if value is None or isinstance(value, int):
            return value

        try:
            number = float(value)
        except (ValueError, TypeError):
            return self._numeric_failure('total_laid_off', value, record)

        if number < 0 or not number.is_integer():
            return self._numeric_failure('total_laid_off', value, record)
        return int(number)

    def _clean_float(self, value: Any, record: Dict[str, Any]) -> Any:
        """Converts a value to a float, leaving unparsable text in place."""
        value = self._coerce_null(value)
        if value is None or isinstance(value, float):
            return value

        try:
            return float(value)
        except (ValueError, TypeError):
            return self._numeric_failure('numeric field', value, record)

    def _numeric_failure(self, field: str, value: Any, record: Dict[str, Any]) -> Any:
        self.numeric_parse_failures += 1
        logger.warning(f"Could not parse {field} value {value!r} for company {record.get('company')!r}")
        return value

    def get_statistics(self) -> Dict[str, int]:
        """Get cleaning statistics."""
        return {
            'records_processed': self.records_processed,
            'dates_parsed': self.dates_parsed,
            'dates_nulled': self.dates_nulled,
            'dates_unrecognized': self.dates_unrecognized,
            'numeric_parse_failures': self.numeric_parse_failures,
            'industries_canonicalized': self.industries_canonicalized,
        }
