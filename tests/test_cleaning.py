# ========================
# tests/test_cleaning.py
# ========================

import unittest
import sys
import os
from datetime import date

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from layoffs_pipeline.pipeline.cleaning import DataCleaner

def raw_record(**overrides):
    record = {
        'company': 'Included Health',
        'location': 'SF Bay Area',
        'industry': 'Healthcare',
        'total_laid_off': '100',
        'percentage_laid_off': '0.06',
        'date': '3/3/2023',
        'stage': 'Series E',
        'country': 'United States',
        'funds_raised_millions': '272',
    }
    record.update(overrides)
    return record

class TestDataCleaner(unittest.TestCase):

    def setUp(self):
        self.cleaner = DataCleaner()

    def test_clean_record_parses_fields(self):
        record = self.cleaner.clean_record(raw_record())

        self.assertEqual(record['total_laid_off'], 100)
        self.assertEqual(record['percentage_laid_off'], 0.06)
        self.assertEqual(record['funds_raised_millions'], 272.0)
        self.assertEqual(record['date'], date(2023, 3, 3))

    def test_company_is_trimmed(self):
        record = self.cleaner.clean_record(raw_record(company='  E Inc. '))
        self.assertEqual(record['company'], 'E Inc.')

    def test_crypto_variants_are_merged(self):
        for variant in ('Crypto', 'Crypto Currency', 'CryptoCurrency'):
            record = self.cleaner.clean_record(raw_record(industry=variant))
            self.assertEqual(record['industry'], 'Crypto', f"Failed for industry: {variant}")

    def test_crypto_prefix_is_case_sensitive(self):
        record = self.cleaner.clean_record(raw_record(industry='crypto'))
        self.assertEqual(record['industry'], 'crypto')

    def test_blank_industry_becomes_null(self):
        for blank in ('', 'NULL'):
            record = self.cleaner.clean_record(raw_record(industry=blank))
            self.assertIsNone(record['industry'])

    def test_united_states_trailing_period(self):
        tests = [
            ('United States.', 'United States'),
            ('United States..', 'United States'),
            ('United States', 'United States'),
            ('Canada.', 'Canada.'),
        ]
        for input_val, expected in tests:
            record = self.cleaner.clean_record(raw_record(country=input_val))
            self.assertEqual(record['country'], expected, f"Failed for country: {input_val}")

    def test_date_normalization(self):
        """M/D/YYYY is parsed, blanks and impossible days become null, ISO text is left alone."""
        test_dates = [
            ('3/5/2023', date(2023, 3, 5)),
            ('12/16/2022', date(2022, 12, 16)),
            ('', None),
            ('NULL', None),
            (None, None),
            ('2023-03-05', '2023-03-05'),
            ('March 5th', 'March 5th'),
            ('13/45/2022', None),
            ('2/30/2023', None),
        ]

        for input_date, expected in test_dates:
            result = self.cleaner._clean_date(input_date)
            self.assertEqual(result, expected, f"Failed for input: {input_date}")

    def test_unrecognized_date_is_logged(self):
        with self.assertLogs('layoffs_pipeline.pipeline.cleaning', level='WARNING') as logs:
            self.cleaner._clean_date('March 5th')

        self.assertIn('March 5th', logs.output[0])
        self.assertEqual(self.cleaner.get_statistics()['dates_unrecognized'], 1)

    def test_impossible_date_is_nulled_and_logged(self):
        with self.assertLogs('layoffs_pipeline.pipeline.cleaning', level='WARNING') as logs:
            record = self.cleaner.clean_record(raw_record(date='13/45/2022'))

        self.assertIsNone(record['date'])
        self.assertIn('13/45/2022', logs.output[0])
        self.assertEqual(self.cleaner.get_statistics()['dates_nulled'], 1)
        self.assertEqual(self.cleaner.get_statistics()['dates_unrecognized'], 0)

    def test_dates_are_real_dates_or_null(self):
        records = [raw_record(date=value) for value in ('3/5/2023', '', 'NULL', '13/45/2022', '0/1/2023')]

        self.cleaner.normalize(records)

        for record in records:
            self.assertTrue(record['date'] is None or isinstance(record['date'], date), record['date'])

    def test_blank_stage_and_country_kept_as_text(self):
        record = self.cleaner.clean_record(raw_record(stage='', country='NULL'))

        self.assertEqual(record['stage'], '')
        self.assertEqual(record['country'], 'NULL')

    def test_company_trim_removes_spaces_only(self):
        record = self.cleaner.clean_record(raw_record(company=' \tAcme\n '))
        self.assertEqual(record['company'], '\tAcme\n')

    def test_strict_dates(self):
        cleaner = DataCleaner(strict_dates=True)

        self.assertEqual(cleaner._clean_date('2023-03-05'), date(2023, 3, 5))
        self.assertEqual(cleaner._clean_date('3/5/2023'), date(2023, 3, 5))
        self.assertIsNone(cleaner._clean_date('March 5th'))
        self.assertIsNone(cleaner._clean_date('2023-02-30'))

    def test_numeric_null_markers(self):
        record = self.cleaner.clean_record(
            raw_record(total_laid_off='NULL', percentage_laid_off='', funds_raised_millions='NULL')
        )

        self.assertIsNone(record['total_laid_off'])
        self.assertIsNone(record['percentage_laid_off'])
        self.assertIsNone(record['funds_raised_millions'])

    def test_count_validation(self):
        """
        Tests layoff count parsing with edge cases.
        """
        count_tests = [
            ('12', 12),
            ('12.0', 12),
            (12, 12),
            ('0', 0),
            ('-5', '-5'),
            ('12.5', '12.5'),
            ('about 40', 'about 40'),
            ('NULL', None),
        ]

        for input_val, expected in count_tests:
            result = self.cleaner._clean_count(input_val, {})
            self.assertEqual(result, expected, f"Failed for count: {input_val}")

    def test_unparsable_numbers_are_counted(self):
        self.cleaner.clean_record(raw_record(total_laid_off='lots', percentage_laid_off='half'))

        self.assertEqual(self.cleaner.get_statistics()['numeric_parse_failures'], 2)

    def test_normalize_is_idempotent(self):
        records = [
            raw_record(company=' Amazon ', industry='Crypto Currency', country='United States.'),
            raw_record(date='NULL', total_laid_off=''),
            raw_record(date='2023-01-04'),
        ]
        self.cleaner.normalize(records)
        once = [dict(record) for record in records]

        self.cleaner.normalize(records)

        self.assertEqual(records, once)

    def test_normalize_never_removes_records(self):
        records = [raw_record(total_laid_off='NULL', percentage_laid_off='NULL') for _ in range(3)]

        self.cleaner.normalize(records)

        self.assertEqual(len(records), 3)

if __name__ == '__main__':
    unittest.main()
