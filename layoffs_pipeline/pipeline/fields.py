# ========================
# layoffs_pipeline/pipeline/fields.py
# ========================

"""
Field accessors shared by the analysis modules.

Cleaned records may still hold text the cleaner could not parse; these
helpers read such values as missing instead of failing the whole query.
"""

from datetime import date
from typing import Any, Dict, Optional


def layoff_count(record: Dict[str, Any]) -> Optional[int]:
    """total_laid_off as a non-negative int, or None if missing or invalid."""
    value = record.get('total_laid_off')
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    try:
        number = float(value)
    except (ValueError, TypeError):
        return None
    if number < 0 or not number.is_integer():
        return None
    return int(number)


def percentage(record: Dict[str, Any]) -> Optional[float]:
    """percentage_laid_off as a float, or None if missing or invalid."""
    value = record.get('percentage_laid_off')
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (ValueError, TypeError):
        return None


def event_month(record: Dict[str, Any]) -> Optional[str]:
    """The YYYY-MM period of the event date, or None."""
    value = record.get('date')
    if isinstance(value, date):
        return value.strftime('%Y-%m')
    if isinstance(value, str) and len(value) >= 7 and value[4] == '-' and value[:4].isdigit():
        return value[:7]
    return None


def event_year(record: Dict[str, Any]) -> Optional[int]:
    """The calendar year of the event date, or None."""
    month = event_month(record)
    return int(month[:4]) if month else None
