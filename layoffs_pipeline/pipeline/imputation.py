# ========================
# layoffs_pipeline/pipeline/imputation.py
# ========================

"""
Imputation Module

Fills missing industries from other records of the same company.
"""

import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)

class IndustryImputer:
    """
    Copies a known industry onto records of the same company whose industry
    is null.

    When a company's records disagree, the industry of the earliest record in
    the working dataset wins.
    """

    def __init__(self):
        self.industries_imputed = 0
        self.industries_unresolved = 0

    def impute(self, records: List[Dict[str, Any]]) -> int:
        """
        Fill null industries in place.

        Args:
            records (list[dict]): Working dataset.

        Returns:
            int: Number of records whose industry was filled.
        """
        known = {}
        conflicts = set()
        for record in records:
            industry = record.get('industry')
            if industry is None:
                continue
            company = record.get('company')
            if company not in known:
                known[company] = industry
            elif known[company] != industry:
                conflicts.add(company)

        for company in sorted(conflicts, key=str):
            logger.warning(f"Company {company!r} has conflicting industries, using {known[company]!r}")

        filled = 0
        unresolved = 0
        for record in records:
            if record.get('industry') is not None:
                continue
            industry = known.get(record.get('company'))
            if industry is None:
                unresolved += 1
                logger.debug(f"No industry source for company {record.get('company')!r}")
                continue
            record['industry'] = industry
            filled += 1

        self.industries_imputed += filled
        self.industries_unresolved = unresolved
        logger.info(f"Imputed {filled} industries, {unresolved} left without a source")
        return filled

    def get_statistics(self) -> Dict[str, int]:
        return {
            'industries_imputed': self.industries_imputed,
            'industries_unresolved': self.industries_unresolved,
        }
