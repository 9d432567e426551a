"""
Data models for the emissions dashboard.

This module defines the **schema layer** of Emission Atlas: typed dataclasses
for every entity that flows from the loader, through the controller, into the
charts.

Dataclass hierarchy
-------------------
::

    EmissionRecord
        One (Country, Year) observation: emission total, population, GDP and
        the six source-breakdown values.

    CompositionSlice / CompositionView
        The pie chart's input: six labelled values with percentages, plus a
        status telling whether the percentages could be computed.

    SeriesPoint
        One year of the line chart (emission value and GDP).

    ColorDomain
        Numeric extent of the heatmap metric.

    DatasetUnloaded / DatasetLoaded, NoSelection / Selected
        Tagged variants for the controller's two state fields.  Rendering
        code dispatches on ``isinstance`` so the "nothing loaded" and
        "nothing selected" branches are explicit.

    HeatmapProps / PieChartProps / LineChartProps
        Immutable inputs handed from the controller to each chart builder.

All classes are frozen: derived views are recomputed on demand and never
patched in place.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from ..core.config import (
    COL_COUNTRY, COL_YEAR,
    SOURCE_CATEGORIES, NUMERIC_COLUMNS, DEFAULT_METRIC,
)
from ..core.utils import coerce_number


# ============================================================================
# ROW MODEL
# ============================================================================

@dataclass(frozen=True)
class EmissionRecord:
    """A single country-year observation.

    Field names mirror the CSV headers so ``to_dict`` output can be fed
    straight back into pandas.  Missing, non-finite and negative numbers
    are stored as 0.
    """
    Country: str
    Year: int
    Total: float = 0.0
    Population: float = 0.0
    GDP: float = 0.0
    Coal: float = 0.0
    Oil: float = 0.0
    Gas: float = 0.0
    Cement: float = 0.0
    Flaring: float = 0.0
    Other: float = 0.0

    def __post_init__(self):
        # Numeric fields are always finite and non-negative, however built.
        for name in RECORD_NUMERIC_FIELDS:
            object.__setattr__(self, name, coerce_number(getattr(self, name)))

    @property
    def key(self) -> Tuple[str, int]:
        """The (Country, Year) pair that identifies this row in a dataset."""
        return (self.Country, self.Year)

    def metric(self, name: str) -> float:
        """Return a numeric field by column name."""
        if name not in RECORD_NUMERIC_FIELDS:
            raise ValueError(f"Unknown metric: {name!r}")
        return getattr(self, name)

    def source_values(self) -> Tuple[float, ...]:
        """The six source values in display order."""
        return tuple(getattr(self, name) for name in SOURCE_CATEGORIES)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "EmissionRecord":
        """Build a record from a raw mapping, coercing every numeric field.

        Missing or malformed numbers become 0; the year is truncated to int.
        """
        values = {name: data.get(name) for name in RECORD_NUMERIC_FIELDS}
        return cls(
            Country=str(data.get(COL_COUNTRY, "")).strip(),
            Year=int(coerce_number(data.get(COL_YEAR))),
            **values,
        )


RECORD_NUMERIC_FIELDS = NUMERIC_COLUMNS


# ============================================================================
# DERIVED VIEWS
# ============================================================================

class CompositionStatus(Enum):
    """Whether percentages could be computed for a composition.

    DEGENERATE means the six source values sum to zero; every slice then has
    ``percentage=None`` and the pie chart shows a placeholder.
    """
    OK = "ok"
    DEGENERATE = "degenerate"


@dataclass(frozen=True)
class CompositionSlice:
    label: str
    value: float
    percentage: Optional[float] = None


@dataclass(frozen=True)
class CompositionView:
    """Emission-source breakdown for one row."""
    country: str
    year: int
    slices: Tuple[CompositionSlice, ...] = ()
    status: CompositionStatus = CompositionStatus.OK

    @property
    def is_degenerate(self) -> bool:
        return self.status is CompositionStatus.DEGENERATE

    @property
    def total(self) -> float:
        return sum(s.value for s in self.slices)


@dataclass(frozen=True)
class SeriesPoint:
    """One year of the selected country's time series."""
    year: int
    emission_value: float
    gdp_value: float


@dataclass(frozen=True)
class ColorDomain:
    """Closed numeric range ``[min_value, max_value]`` of a metric."""
    min_value: float
    max_value: float

    def as_list(self):
        return [self.min_value, self.max_value]


# ============================================================================
# CONTROLLER STATE VARIANTS
# ============================================================================

@dataclass(frozen=True)
class DatasetUnloaded:
    """Initial dataset state, before the loader has resolved."""


@dataclass(frozen=True)
class DatasetLoaded:
    rows: Tuple[EmissionRecord, ...] = ()


DatasetState = Union[DatasetUnloaded, DatasetLoaded]


@dataclass(frozen=True)
class NoSelection:
    """No heatmap cell has been clicked yet."""


@dataclass(frozen=True)
class Selected:
    row: EmissionRecord


SelectionState = Union[NoSelection, Selected]


# ============================================================================
# CHART PROPS
# ============================================================================

@dataclass(frozen=True)
class HeatmapProps:
    rows: Tuple[EmissionRecord, ...] = ()
    metric: str = DEFAULT_METRIC


@dataclass(frozen=True)
class PieChartProps:
    """``composition`` is None until a cell is selected."""
    composition: Optional[CompositionView] = None


@dataclass(frozen=True)
class LineChartProps:
    country: Optional[str] = None
    series: Tuple[SeriesPoint, ...] = ()
