# ========================
# layoffs_pipeline/pipeline/transformation.py
# ========================

"""
Data Transformation Module

Read-only analytical queries over the cleaned layoffs dataset: grouped
totals, dense rankings, rolling monthly totals, layoff brackets, IQR outliers
and the country/industry breakdown.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, Hashable, List, Optional, Sequence

from .fields import event_month, event_year, layoff_count, percentage
from .outliers import IQROutlierDetector

logger = logging.getLogger(__name__)

GROUPABLE_FIELDS = ('company', 'location', 'industry', 'stage', 'country')


def dense_rank(values: Sequence[Any], descending: bool = True) -> List[int]:
    """
    Dense ranks for ``values``, aligned with the input order.

    Equal values share a rank and the next distinct value gets the previous
    rank plus one, so [50, 50, 30] ranks as [1, 1, 2].
    """
    distinct = sorted(set(values), reverse=descending)
    rank_of = {value: rank for rank, value in enumerate(distinct, start=1)}
    return [rank_of[value] for value in values]


def layoff_bracket(pct: Optional[float]) -> str:
    """
    Label a layoff by the share of staff let go.

    The rules are checked in order and a value none of them accepts, such as
    exactly 0, is labelled 'Unknown' just like a missing percentage.
    """
    if pct is None:
        return 'Unknown'
    if pct == 1:
        return 'Full Layoff'
    if 0.66 <= pct < 1:
        return 'Large Layoff'
    if 0.33 <= pct < 0.66:
        return 'Medium Layoff'
    if 0 < pct < 0.33:
        return 'Small Layoff'
    return 'Unknown'


class LayoffAnalyzer:
    """
    Runs analytical queries over a cleaned dataset. The analyzer never
    modifies the records it is given.
    """

    def __init__(self, records: List[Dict[str, Any]], iqr_multiplier: float = 1.5):
        """
        Initialize the analyzer.

        Args:
            records (list[dict]): Cleaned layoff records
            iqr_multiplier (float): Fence distance used by outlier detection
        """
        self.records = records
        self.outlier_detector = IQROutlierDetector(multiplier=iqr_multiplier)
        logger.info(f"LayoffAnalyzer initialized with {len(records)} records")

    def _sum_by(self, key: Callable[[Dict[str, Any]], Hashable],
                skip_null_keys: bool = True) -> Dict[Hashable, int]:
        """Sum total_laid_off per group key, ignoring missing counts."""
        totals = defaultdict(int)
        for record in self.records:
            count = layoff_count(record)
            if count is None:
                continue
            group = key(record)
            if group is None and skip_null_keys:
                continue
            totals[group] += count
        return totals

    # Descriptive totals

    def total_layoffs(self) -> int:
        """Grand total of total_laid_off across all records."""
        return sum(count for count in map(layoff_count, self.records) if count is not None)

    def totals_by(self, field: str) -> List[Dict[str, Any]]:
        """
        Summed layoffs per value of ``field``, largest first.

        Args:
            field (str): One of company, location, industry, stage, country.
        """
        if field not in GROUPABLE_FIELDS:
            raise ValueError(f"Cannot group by {field!r}; expected one of {GROUPABLE_FIELDS}")
        totals = self._sum_by(lambda record: record.get(field))
        rows = [{field: value, 'total_layoffs': total} for value, total in totals.items()]
        rows.sort(key=lambda row: (-row['total_layoffs'], str(row[field])))
        return rows

    def totals_by_year(self) -> List[Dict[str, Any]]:
        totals = self._sum_by(event_year)
        return [{'year': year, 'total_layoffs': totals[year]} for year in sorted(totals)]

    def totals_by_month(self) -> List[Dict[str, Any]]:
        totals = self._sum_by(event_month)
        return [{'month': month, 'total_layoffs': totals[month]} for month in sorted(totals)]

    def top_companies(self, n: int = 5) -> List[Dict[str, Any]]:
        """The ``n`` companies with the highest summed layoffs."""
        return self.totals_by('company')[:n]

    def totals_by_company_year(self) -> List[Dict[str, Any]]:
        """
        Summed layoffs per company and year, ordered by company then year.
        Undated events are kept under a year of None, after the dated years.
        """
        totals = self._sum_by(lambda record: (record.get('company'), event_year(record)))
        rows = [
            {'company': company, 'year': year, 'total_layoffs': total}
            for (company, year), total in totals.items()
        ]
        rows.sort(key=lambda row: (str(row['company']), row['year'] is None, row['year'] or 0))
        return rows

    def average_percentage_by_industry(self) -> List[Dict[str, Any]]:
        sums = defaultdict(float)
        counts = defaultdict(int)
        for record in self.records:
            industry = record.get('industry')
            pct = percentage(record)
            if industry is None or pct is None:
                continue
            sums[industry] += pct
            counts[industry] += 1

        rows = [
            {'industry': industry, 'avg_percentage': sums[industry] / counts[industry]}
            for industry in counts
        ]
        rows.sort(key=lambda row: (-row['avg_percentage'], row['industry']))
        return rows

    # Rankings and running totals

    def rolling_monthly_totals(self) -> List[Dict[str, Any]]:
        """
        Per-month layoffs with a cumulative total, oldest month first.
        Records without a usable date are left out.
        """
        rows = []
        running = 0
        for row in self.totals_by_month():
            running += row['total_layoffs']
            rows.append({**row, 'rolling_total': running})
        return rows

    def industry_ranking(self) -> List[Dict[str, Any]]:
        """Industries dense-ranked by summed layoffs, highest first."""
        rows = self.totals_by('industry')
        for row, rank in zip(rows, dense_rank([row['total_layoffs'] for row in rows])):
            row['ranking'] = rank
        return rows

    def top_companies_per_year(self, n: int = 5) -> List[Dict[str, Any]]:
        """
        Companies dense-ranked by summed layoffs within each year, keeping
        ranks up to ``n``. Ties can push more than ``n`` rows into a year.
        """
        by_year = defaultdict(list)
        for row in self.totals_by_company_year():
            if row['year'] is not None:
                by_year[row['year']].append(row)

        results = []
        for year in sorted(by_year):
            rows = by_year[year]
            rows.sort(key=lambda row: (-row['total_layoffs'], str(row['company'])))
            for row, rank in zip(rows, dense_rank([row['total_layoffs'] for row in rows])):
                if rank <= n:
                    results.append({**row, 'ranking': rank})
        return results

    def country_industry_breakdown(self, country: str, top_n: int) -> List[Dict[str, Any]]:
        """
        Top industries of one country by summed layoffs.

        Industries are dense-ranked within each country, highest total first,
        and rows for ``country`` with a rank up to ``top_n`` are returned.

        Args:
            country (str): Country to report on.
            top_n (int): Highest rank to include.

        Returns:
            list[dict]: Rows with country, industry, total_laid_off and rank.
        """
        totals = self._sum_by(
            lambda record: (
                (record.get('country'), record.get('industry'))
                if record.get('industry') is not None else None
            )
        )
        rows = [
            {'country': row_country, 'industry': industry, 'total_laid_off': total}
            for (row_country, industry), total in totals.items()
            if row_country == country
        ]
        rows.sort(key=lambda row: (-row['total_laid_off'], row['industry']))

        results = []
        for row, rank in zip(rows, dense_rank([row['total_laid_off'] for row in rows])):
            if rank <= top_n:
                results.append({**row, 'rank': rank})

        logger.info(f"Breakdown for {country!r}: {len(results)} industries within top {top_n}")
        return results

    # Classification

    def layoff_profiles(self) -> List[Dict[str, Any]]:
        """
        A one-line profile per record: stage, industry and layoff size.
        The profile is None when the stage or industry is unknown.
        """
        rows = []
        for record in self.records:
            bracket = layoff_bracket(percentage(record))
            stage, industry = record.get('stage'), record.get('industry')
            profile = None
            if stage is not None and industry is not None:
                profile = f"{stage} - {industry} with {bracket}"
            rows.append({
                'company': record.get('company'),
                'layoff_bracket': bracket,
                'layoff_profile': profile,
            })
        return rows

    def industry_outliers(self) -> List[Dict[str, Any]]:
        """IQR outlier classification of every usable record, per industry."""
        return self.outlier_detector.detect(self.records)

    def get_analysis_summary(self) -> Dict[str, Any]:
        """Headline numbers for the pipeline summary."""
        outliers = self.industry_outliers()
        return {
            'records': len(self.records),
            'total_layoffs': self.total_layoffs(),
            'industries': len({r.get('industry') for r in self.records if r.get('industry') is not None}),
            'countries': len({r.get('country') for r in self.records if r.get('country') is not None}),
            'months': len(self.totals_by_month()),
            'outlier_records': sum(1 for row in outliers if row['outlier_status'] == 'Outlier'),
        }
