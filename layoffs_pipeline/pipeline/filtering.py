# ========================
# layoffs_pipeline/pipeline/filtering.py
# ========================

"""
Filtering Module

Drops records without any layoff figure and strips helper fields before the
cleaned dataset is exposed.
"""

import logging
from typing import Any, Dict, List, Sequence

from .deduplication import ROW_NUMBER_FIELD

logger = logging.getLogger(__name__)

class RecordFilter:
    """Removes unusable records and projects away bookkeeping fields."""

    def __init__(self, helper_fields: Sequence[str] = (ROW_NUMBER_FIELD,)):
        """
        Initialize the filter.

        Args:
            helper_fields (sequence): Fields removed from every surviving record
        """
        self.helper_fields = tuple(helper_fields)
        self.records_removed = 0

    def apply(self, records: List[Dict[str, Any]]) -> int:
        """
        Remove records where both total_laid_off and percentage_laid_off are
        null, then drop the helper fields. Modifies ``records`` in place.

        Returns:
            int: Number of records removed.
        """
        kept = [
            record for record in records
            if record.get('total_laid_off') is not None
            or record.get('percentage_laid_off') is not None
        ]
        removed = len(records) - len(kept)

        for record in kept:
            for field in self.helper_fields:
                record.pop(field, None)

        records[:] = kept
        self.records_removed += removed
        logger.info(f"Filter removed {removed} records without layoff figures, {len(records)} remain")
        return removed

    def get_statistics(self) -> Dict[str, int]:
        return {'records_removed': self.records_removed}
