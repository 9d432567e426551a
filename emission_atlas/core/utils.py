"""
Utility functions for numeric coercion and data validation.
"""

import math
import logging
import pandas as pd

logger = logging.getLogger(__name__)


def coerce_number(value, default=0.0):
    """Convert ``value`` to a finite, non-negative float.

    Strings are stripped of thousands separators first.  Anything that is
    missing, unparseable, infinite or negative becomes ``default``.
    """
    if value is None:
        return default
    if isinstance(value, str):
        value = value.replace(",", "").strip()
        if not value:
            return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if math.isnan(number) or math.isinf(number) or number < 0:
        return default
    return number


def coerce_numeric_series(series):
    """Vectorised ``coerce_number`` for a pandas Series."""
    if series.dtype == object:
        series = series.astype(str).str.replace(",", "", regex=False).str.strip()
    numeric = pd.to_numeric(series, errors='coerce')
    numeric = numeric.where(numeric >= 0)
    return numeric.replace([float('inf'), float('-inf')], float('nan')).fillna(0.0).astype(float)


def validate_columns(df, required_cols):
    """Validate that required columns exist in dataframe"""
    missing = [c for c in required_cols if c not in df.columns]
    if missing:
        logger.warning(f"Missing columns: {missing}. Some features may be limited.")
        return False
    return True
