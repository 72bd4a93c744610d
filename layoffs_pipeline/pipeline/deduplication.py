# ========================
# layoffs_pipeline/pipeline/deduplication.py
# ========================

"""
Deduplication Module

Numbers the rows of each identity group and removes every repeat, keeping
the first occurrence in ingestion order.
"""

import logging
from collections import defaultdict
from typing import Any, Dict, List, Tuple

from .ingestion import LAYOFF_COLUMNS

logger = logging.getLogger(__name__)

ROW_NUMBER_FIELD = 'row_num'


def identity(record: Dict[str, Any]) -> Tuple[Any, ...]:
    """
    Composite identity key of a record.

    Missing fields read as None, and tuples compare None == None, so two rows
    with the same null fields still share a key.
    """
    return tuple(record.get(column) for column in LAYOFF_COLUMNS)


class Deduplicator:
    """
    Removes duplicate records from a working dataset in place.
    """

    def __init__(self):
        """Initialize the deduplicator."""
        self.records_processed = 0
        self.duplicates_removed = 0
        logger.info("Deduplicator initialized")

    def assign_row_numbers(self, records: List[Dict[str, Any]]) -> None:
        """
        Number each record within its identity group, starting from 1 in
        ingestion order. The number is stored in the ``row_num`` field.
        """
        seen = defaultdict(int)
        for record in records:
            key = identity(record)
            seen[key] += 1
            record[ROW_NUMBER_FIELD] = seen[key]

    def deduplicate(self, records: List[Dict[str, Any]]) -> int:
        """
        Remove every record whose row number within its identity group is
        greater than one.

        Args:
            records (list[dict]): Working dataset, modified in place.

        Returns:
            int: Number of records removed.
        """
        self.assign_row_numbers(records)
        kept = [record for record in records if record[ROW_NUMBER_FIELD] == 1]
        removed = len(records) - len(kept)

        for record in records:
            if record[ROW_NUMBER_FIELD] > 1:
                logger.debug(f"Duplicate removed: {record}")

        self.records_processed += len(records)
        self.duplicates_removed += removed
        records[:] = kept

        logger.info(f"Deduplication removed {removed} duplicate records, {len(records)} remain")
        return removed

    def get_statistics(self) -> Dict[str, int]:
        """Get deduplication statistics."""
        return {
            'records_processed': self.records_processed,
            'duplicates_removed': self.duplicates_removed,
        }
