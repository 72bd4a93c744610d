# ========================
# tests/test_pipeline.py
# ========================

import unittest
import sys
import os
import csv
import json
import shutil
import tempfile

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from layoffs_pipeline.pipeline.orchestrator import DataPipeline
from layoffs_pipeline.pipeline.deduplication import identity
from layoffs_pipeline.pipeline.storage import OUTPUT_FILES
from layoffs_pipeline.utils.config import Config
from layoffs_pipeline.utils.data_generator import DataGenerator
from main import build_config, parse_args

RAW_CSV = """company,location,industry,total_laid_off,percentage_laid_off,date,stage,country,funds_raised_millions
Amazon,Seattle,Retail,10000,0.03,11/16/2022,Post-IPO,United States,108
Amazon,Seattle,Retail,10000,0.03,11/16/2022,Post-IPO,United States,108
 Meta,SF Bay Area,Consumer,11000,0.13,11/9/2022,Post-IPO,United States.,26000
Coinbase,SF Bay Area,Crypto Currency,950,0.2,6/14/2022,Post-IPO,United States,549
Airbnb,SF Bay Area,,1900,0.25,5/5/2020,Private Equity,United States,5400
Airbnb,SF Bay Area,Travel,30,NULL,3/3/2023,Post-IPO,United States,6400
Ghost,London,Media,NULL,NULL,1/5/2023,Seed,United Kingdom,5
Undated,Berlin,Retail,200,0.1,NULL,Series B,Germany,50
Shopify,Ottawa,Retail,1000,0.1,7/26/2022,Post-IPO,Canada,122
"""

class TestDataPipeline(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.input_file = os.path.join(self.temp_dir, 'layoffs.csv')
        self.output_dir = os.path.join(self.temp_dir, 'processed')
        with open(self.input_file, 'w', encoding='utf-8') as f:
            f.write(RAW_CSV)

        config = Config({'breakdown_country': 'United States', 'breakdown_top_n': 5, 'strict_dates': False})
        self.pipeline = DataPipeline(self.input_file, self.output_dir, chunk_size=3, config=config)

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def read_output(self, dataset_type):
        with open(os.path.join(self.output_dir, OUTPUT_FILES[dataset_type]), newline='', encoding='utf-8') as f:
            return list(csv.DictReader(f))

    def test_stage_statistics(self):
        results = self.pipeline.run()
        stats = results['stage_stats']

        self.assertEqual(results['pipeline_status'], 'completed')
        self.assertEqual(stats['staging']['records_staged'], 9)
        self.assertEqual(stats['deduplication']['duplicates_removed'], 1)
        self.assertEqual(stats['imputation']['industries_imputed'], 1)
        self.assertEqual(stats['filtering']['records_removed'], 1)
        self.assertEqual(stats['output']['records_cleaned'], 7)

    def test_cleaned_records(self):
        records = self.pipeline.run_cleaning()
        by_company = {}
        for record in records:
            by_company.setdefault(record['company'], []).append(record)

        self.assertIn('Meta', by_company)
        self.assertEqual(by_company['Meta'][0]['country'], 'United States')
        self.assertEqual(by_company['Coinbase'][0]['industry'], 'Crypto')
        self.assertEqual([r['industry'] for r in by_company['Airbnb']], ['Travel', 'Travel'])
        self.assertIsNone(by_company['Undated'][0]['date'])
        self.assertNotIn('Ghost', by_company)

    def test_cleaned_dataset_invariants(self):
        records = self.pipeline.run_cleaning()

        keys = [identity(r) for r in records]
        self.assertEqual(len(keys), len(set(keys)))
        for record in records:
            self.assertNotIn('row_num', record)
            self.assertTrue(record['total_laid_off'] is not None or record['percentage_laid_off'] is not None)
            self.assertEqual(record['company'], record['company'].strip(' '))
            if record['industry'] is not None:
                self.assertFalse(record['industry'].startswith('Crypto') and record['industry'] != 'Crypto')

    def test_raw_input_untouched(self):
        self.pipeline.run()

        with open(self.input_file, encoding='utf-8') as f:
            self.assertEqual(f.read(), RAW_CSV)

    def test_output_files_written(self):
        results = self.pipeline.run()

        for dataset_type in OUTPUT_FILES:
            self.assertIn(dataset_type, results['saved_files'])
            self.assertTrue(os.path.exists(results['saved_files'][dataset_type]), dataset_type)

    def test_cleaned_csv_contents(self):
        self.pipeline.run()
        rows = self.read_output('cleaned_dataset')

        self.assertEqual(len(rows), 7)
        self.assertNotIn('row_num', rows[0])
        self.assertEqual(rows[0]['date'], '2022-11-16')
        undated = [row for row in rows if row['company'] == 'Undated'][0]
        self.assertEqual(undated['date'], '')

    def test_industry_ranking_report(self):
        self.pipeline.run()
        rows = self.read_output('industry_ranking')

        self.assertEqual(
            [(row['industry'], row['total_layoffs'], row['ranking']) for row in rows],
            [('Retail', '11200', '1'), ('Consumer', '11000', '2'), ('Travel', '1930', '3'), ('Crypto', '950', '4')]
        )

    def test_summary_json(self):
        self.pipeline.run()

        with open(os.path.join(self.output_dir, OUTPUT_FILES['summary']), encoding='utf-8') as f:
            summary = json.load(f)

        self.assertEqual(summary['pipeline_status'], 'completed')
        self.assertEqual(summary['analysis_summary']['total_layoffs'], 25080)
        self.assertEqual(summary['stage_stats']['deduplication']['duplicates_removed'], 1)
        self.assertIn('checkpoints', summary['performance'])

    def test_country_breakdown_in_results(self):
        results = self.pipeline.run()
        breakdown = results['country_breakdown']

        self.assertEqual(breakdown['country'], 'United States')
        self.assertEqual(
            [(row['industry'], row['total_laid_off'], row['rank']) for row in breakdown['rows']],
            [('Consumer', 11000, 1), ('Retail', 10000, 2), ('Travel', 1930, 3), ('Crypto', 950, 4)]
        )

    def test_country_breakdown_top_n(self):
        rows = self.pipeline.country_industry_breakdown('United States', 2)

        self.assertEqual([row['industry'] for row in rows], ['Consumer', 'Retail'])
        self.assertEqual(self.pipeline.country_industry_breakdown('Canada', 5)[0]['industry'], 'Retail')

    def test_missing_columns_abort(self):
        bad_file = os.path.join(self.temp_dir, 'bad.csv')
        with open(bad_file, 'w', encoding='utf-8') as f:
            f.write("company,industry\nAmazon,Retail\n")

        with self.assertRaises(ValueError):
            DataPipeline(bad_file, self.output_dir).run()

    def test_data_dictionary_uses_configured_multiplier(self):
        pipeline = DataPipeline(self.input_file, self.output_dir, config=Config({'iqr_multiplier': 3.0}))
        pipeline.run()

        with open(os.path.join(self.output_dir, OUTPUT_FILES['data_dictionary']), encoding='utf-8') as f:
            content = f.read()

        self.assertIn('Q1 - 3.0 * IQR', content)
        self.assertIn('Q3 + 3.0 * IQR', content)
        self.assertNotIn('1.5 * IQR', content)

    def test_company_year_totals_report(self):
        self.pipeline.run()
        rows = self.read_output('company_year_totals')

        self.assertIn({'company': 'Airbnb', 'year': '2020', 'total_layoffs': '1900'}, rows)
        self.assertIn({'company': 'Undated', 'year': '', 'total_layoffs': '200'}, rows)
        self.assertEqual(rows[0]['company'], 'Airbnb')

    def test_validate_input(self):
        self.assertTrue(self.pipeline.validate_input())
        missing = DataPipeline(os.path.join(self.temp_dir, 'missing.csv'), self.output_dir)
        self.assertFalse(missing.validate_input())

class TestConfiguration(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_defaults_are_valid(self):
        validations = Config({'log_level': 'INFO', 'api_port': 8000}).validate_config()
        self.assertTrue(all(validations.values()), validations)

    def test_invalid_values_flagged(self):
        validations = Config({'breakdown_top_n': 0, 'iqr_multiplier': -1, 'log_level': 'LOUD'}).validate_config()

        self.assertFalse(validations['breakdown_top_n'])
        self.assertFalse(validations['iqr_multiplier'])
        self.assertFalse(validations['log_level'])

    def test_save_and_load(self):
        config_file = os.path.join(self.temp_dir, 'config.json')
        Config({'breakdown_country': 'India', 'iqr_multiplier': 2.0, 'strict_dates': True}).save_to_file(config_file)

        loaded = Config.load_from_file(config_file)

        self.assertEqual(loaded.BREAKDOWN_COUNTRY, 'India')
        self.assertEqual(loaded.IQR_MULTIPLIER, 2.0)
        self.assertTrue(loaded.STRICT_DATES)

    def test_command_line_top_n_zero_applied(self):
        config = build_config(parse_args(['--top-n', '0']))

        self.assertEqual(config.BREAKDOWN_TOP_N, 0)
        self.assertFalse(config.validate_config()['breakdown_top_n'])

    def test_command_line_overrides_config_file(self):
        config_file = os.path.join(self.temp_dir, 'config.json')
        Config({'breakdown_country': 'India', 'breakdown_top_n': 3}).save_to_file(config_file)

        config = build_config(parse_args(['--config', config_file, '--country', 'Canada']))

        self.assertEqual(config.BREAKDOWN_COUNTRY, 'Canada')
        self.assertEqual(config.BREAKDOWN_TOP_N, 3)

class TestGeneratedData(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_pipeline_on_generated_data(self):
        input_file = os.path.join(self.temp_dir, 'raw', 'layoffs.csv')
        stats = DataGenerator(seed=7).generate_dataset(input_file, num_rows=300)

        pipeline = DataPipeline(input_file, os.path.join(self.temp_dir, 'processed'))
        results = pipeline.run()

        stage_stats = results['stage_stats']
        self.assertEqual(stage_stats['staging']['records_staged'], stats['total_rows'])
        self.assertLessEqual(stage_stats['output']['records_cleaned'], stats['total_rows'])
        for record in pipeline.records:
            self.assertNotEqual(record['country'], 'United States.')
            self.assertNotIn(record['industry'], ('Crypto Currency', 'CryptoCurrency', ''))

    def test_generation_is_reproducible(self):
        first = os.path.join(self.temp_dir, 'a.csv')
        second = os.path.join(self.temp_dir, 'b.csv')

        DataGenerator(seed=1).generate_dataset(first, num_rows=50)
        DataGenerator(seed=1).generate_dataset(second, num_rows=50)

        with open(first, encoding='utf-8') as f1, open(second, encoding='utf-8') as f2:
            self.assertEqual(f1.read(), f2.read())

if __name__ == '__main__':
    unittest.main()
