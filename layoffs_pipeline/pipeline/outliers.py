# ========================
# layoffs_pipeline/pipeline/outliers.py
# ========================

"""
Outlier Detection Module

Flags unusually small or large layoff events within each industry using
Tukey fences around the interquartile range.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Sequence

from .fields import layoff_count

logger = logging.getLogger(__name__)

OUTLIER = 'Outlier'
NORMAL = 'Normal'


def quartile_ranks(n: int, quarter: int) -> List[int]:
    """
    The 1-based ranks averaged for a quartile of ``n`` sorted values: the
    floor and ceiling of ``quarter * (n + 1) / 4``, keeping only ranks that
    exist in ``1..n``.
    """
    numerator = quarter * (n + 1)
    low = numerator // 4
    high = -(-numerator // 4)
    return [rank for rank in sorted({low, high}) if 1 <= rank <= n]


def quartile(sorted_values: Sequence[float], quarter: int) -> float:
    """Average of the values sitting at the quartile's straddling ranks."""
    ranks = quartile_ranks(len(sorted_values), quarter)
    if not ranks:
        raise ValueError("Cannot compute a quartile of an empty group")
    return sum(sorted_values[rank - 1] for rank in ranks) / len(ranks)


def iqr_bounds(values: Sequence[float], multiplier: float = 1.5) -> Dict[str, float]:
    """
    Compute Q1, Q3, IQR and the outlier fences for a group of values.

    Args:
        values (sequence): Group values, in any order.
        multiplier (float): Fence distance in IQRs.

    Returns:
        dict: Q1, Q3, IQR, lower_bound and upper_bound.
    """
    ordered = sorted(values)
    q1 = quartile(ordered, 1)
    q3 = quartile(ordered, 3)
    iqr = q3 - q1
    return {
        'Q1': q1,
        'Q3': q3,
        'IQR': iqr,
        'lower_bound': q1 - multiplier * iqr,
        'upper_bound': q3 + multiplier * iqr,
    }


class IQROutlierDetector:
    """
    Partitions records by industry and classifies each layoff count against
    its industry's fences.

    Records with a null industry, or whose total_laid_off is null or not a
    valid count, are skipped.
    """

    def __init__(self, multiplier: float = 1.5):
        self.multiplier = multiplier
        self.records_skipped = 0

    def partition(self, records: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
        """Group usable records by industry, each group sorted by count."""
        groups = defaultdict(list)
        skipped = 0
        for record in records:
            industry = record.get('industry')
            count = layoff_count(record)
            if industry is None or count is None:
                if industry is not None and record.get('total_laid_off') is not None:
                    logger.debug(f"Skipping unparsable total_laid_off {record.get('total_laid_off')!r}")
                skipped += 1
                continue
            groups[industry].append({
                'industry': industry,
                'company': record.get('company'),
                'total_laid_off': count,
            })

        for rows in groups.values():
            rows.sort(key=lambda row: row['total_laid_off'])

        self.records_skipped = skipped
        return groups

    def bounds_by_industry(self, records: List[Dict[str, Any]]) -> Dict[str, Dict[str, float]]:
        """Quartiles and fences for every industry."""
        return {
            industry: iqr_bounds([row['total_laid_off'] for row in rows], self.multiplier)
            for industry, rows in self.partition(records).items()
        }

    def detect(self, records: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Classify every usable record as Outlier or Normal.

        Returns:
            list[dict]: One row per record with industry, company,
            total_laid_off, the industry's bounds and outlier_status,
            ordered by industry then total_laid_off.
        """
        results = []
        outliers = 0
        groups = self.partition(records)

        for industry in sorted(groups):
            rows = groups[industry]
            bounds = iqr_bounds([row['total_laid_off'] for row in rows], self.multiplier)
            for row in rows:
                value = row['total_laid_off']
                is_outlier = value < bounds['lower_bound'] or value > bounds['upper_bound']
                outliers += is_outlier
                results.append({
                    **row,
                    **bounds,
                    'outlier_status': OUTLIER if is_outlier else NORMAL,
                })

        logger.info(
            f"IQR analysis: {len(groups)} industries, {len(results)} records, "
            f"{outliers} outliers, {self.records_skipped} skipped"
        )
        return results
