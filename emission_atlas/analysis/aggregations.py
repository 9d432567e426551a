"""
Aggregations behind the three linked charts.

Every function here is pure: it reads a row sequence (or a single row) and
returns a fresh derived view.  Nothing is cached; the controller calls these
on every render so a view can never go stale relative to the dataset or the
selection.

Views
-----
- Year domain      -> heatmap x axis
- Country order    -> heatmap y axis (largest cumulative emitter first)
- Color domain     -> heatmap color scale
- Composition      -> pie chart
- Time series      -> line chart

Percentages
-----------
Composition percentages are rounded to hundredths with largest-remainder
apportionment: each share is floored to 0.01, and the leftover hundredths go
to the shares with the largest fractional parts.  The six values therefore
always add up to exactly 100.00, where independent rounding can drift by up
to 0.03.
"""

import math
import logging
from typing import Iterable, List, Sequence

import pandas as pd

from ..core.config import (
    MIN_YEAR, MAX_YEAR, COL_COUNTRY, COL_YEAR, COL_TOTAL,
    NUMERIC_COLUMNS, SOURCE_CATEGORIES,
)
from ..core.errors import EmptyDatasetError
from ..models.data_models import (
    EmissionRecord,
    ColorDomain,
    CompositionSlice,
    CompositionStatus,
    CompositionView,
    SeriesPoint,
    RECORD_NUMERIC_FIELDS,
)

logger = logging.getLogger(__name__)

# Percentages are apportioned in units of 0.01%.
_HUNDREDTHS = 100 * 100


def records_to_frame(rows: Iterable[EmissionRecord]) -> pd.DataFrame:
    """Convert rows into a DataFrame with the canonical column order.

    An empty input still produces every column, so callers can filter and
    group without special-casing.
    """
    columns = [COL_COUNTRY, COL_YEAR] + list(NUMERIC_COLUMNS)
    df = pd.DataFrame([r.to_dict() for r in rows], columns=columns)
    if df.empty:
        df = df.astype({COL_COUNTRY: object, COL_YEAR: int})
    return df


def compute_year_domain(rows: Sequence[EmissionRecord],
                        min_year: int = MIN_YEAR,
                        max_year: int = MAX_YEAR) -> List[int]:
    """Distinct years within ``[min_year, max_year]``, ascending."""
    return sorted({r.Year for r in rows if min_year <= r.Year <= max_year})


def compute_country_order(rows: Sequence[EmissionRecord]) -> List[str]:
    """Countries by descending cumulative ``Total``.

    Countries with equal totals keep the order in which they first appear
    in ``rows``.
    """
    df = records_to_frame(rows)
    if df.empty:
        return []
    # sort=False keeps first-appearance order; mergesort is stable.
    totals = df.groupby(COL_COUNTRY, sort=False)[COL_TOTAL].sum()
    totals = totals.sort_values(ascending=False, kind='mergesort')
    return totals.index.tolist()


def compute_color_domain(rows: Sequence[EmissionRecord], metric: str) -> ColorDomain:
    """Numeric extent of ``metric`` across ``rows``.

    Raises:
        EmptyDatasetError: If ``rows`` is empty; there is no valid range.
        ValueError: If ``metric`` is not a numeric column.
    """
    if metric not in RECORD_NUMERIC_FIELDS:
        raise ValueError(f"Unknown metric: {metric!r}")
    if not rows:
        raise EmptyDatasetError(f"Cannot compute {metric} color domain of an empty dataset")
    values = [r.metric(metric) for r in rows]
    return ColorDomain(min_value=min(values), max_value=max(values))


def _apportion_percentages(values: Sequence[float], total: float) -> List[float]:
    """Largest-remainder rounding of ``values / total`` to 0.01%."""
    raw = [v * _HUNDREDTHS / total for v in values]
    floors = [math.floor(x) for x in raw]
    leftover = _HUNDREDTHS - sum(floors)
    leftover = max(0, min(leftover, len(values)))
    by_remainder = sorted(range(len(raw)), key=lambda i: raw[i] - floors[i], reverse=True)
    for i in by_remainder[:leftover]:
        floors[i] += 1
    return [round(units / 100, 2) for units in floors]


def compute_composition(row: EmissionRecord) -> CompositionView:
    """Six-way source breakdown of ``row`` in display order.

    When the six values sum to zero the view comes back with
    ``CompositionStatus.DEGENERATE`` and ``percentage=None`` on every slice.
    """
    values = row.source_values()
    total = sum(values)

    if total <= 0:
        logger.debug(f"Degenerate composition for {row.Country} {row.Year}")
        slices = tuple(
            CompositionSlice(label=label, value=value, percentage=None)
            for label, value in zip(SOURCE_CATEGORIES, values)
        )
        return CompositionView(row.Country, row.Year, slices, CompositionStatus.DEGENERATE)

    percentages = _apportion_percentages(values, total)
    slices = tuple(
        CompositionSlice(label=label, value=value, percentage=pct)
        for label, value, pct in zip(SOURCE_CATEGORIES, values, percentages)
    )
    return CompositionView(row.Country, row.Year, slices, CompositionStatus.OK)


def compute_time_series(rows: Sequence[EmissionRecord], country: str) -> List[SeriesPoint]:
    """The rows of ``country`` as (year, emission, GDP), ascending by year.

    A country with no rows yields an empty list.
    """
    matching = sorted((r for r in rows if r.Country == country), key=lambda r: r.Year)
    return [SeriesPoint(year=r.Year, emission_value=r.Total, gdp_value=r.GDP) for r in matching]
