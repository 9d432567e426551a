"""
Dashboard Controller.

Owns the two pieces of dashboard state and derives every chart's props from
them:

    dataset    DatasetUnloaded  --load-->  DatasetLoaded(rows)      (one way)
    selection  NoSelection  --click-->  Selected(row)  --click-->  Selected(row')

The transitions are driven by exactly two events: completion of the initial
load and a heatmap cell click.  Derived views are recomputed on every
``*_props()`` call rather than cached, so props always reflect the current
state.

Failure handling is local:
- a failed load is recorded in ``load_error`` and the dataset stays unloaded;
- a second load completion is ignored;
- a click on a row that is not in the dataset, or before the dataset has
  loaded, is ignored and ``select`` returns False.
"""

import logging
from concurrent.futures import Future
from typing import Iterable, Optional

from ..analysis.aggregations import compute_composition, compute_time_series
from ..core.config import DEFAULT_METRIC, HEATMAP_METRICS
from ..core.errors import LoadFailure
from ..models.data_models import (
    DatasetLoaded,
    DatasetState,
    DatasetUnloaded,
    EmissionRecord,
    HeatmapProps,
    LineChartProps,
    NoSelection,
    PieChartProps,
    Selected,
    SelectionState,
)

logger = logging.getLogger(__name__)


class DashboardController:
    """Holds dataset and selection state for one dashboard session."""

    def __init__(self, metric: str = DEFAULT_METRIC):
        self._validate_metric(metric)
        self._metric = metric
        self._dataset: DatasetState = DatasetUnloaded()
        self._selection: SelectionState = NoSelection()
        self._load_error: Optional[LoadFailure] = None

    # ------------------------------------------------------------------
    # State accessors
    # ------------------------------------------------------------------

    @property
    def dataset(self) -> DatasetState:
        return self._dataset

    @property
    def selection(self) -> SelectionState:
        return self._selection

    @property
    def metric(self) -> str:
        return self._metric

    @property
    def load_error(self) -> Optional[LoadFailure]:
        return self._load_error

    @property
    def is_loaded(self) -> bool:
        return isinstance(self._dataset, DatasetLoaded)

    @property
    def rows(self):
        """Current rows; empty while unloaded."""
        if isinstance(self._dataset, DatasetLoaded):
            return self._dataset.rows
        return ()

    # ------------------------------------------------------------------
    # Load events
    # ------------------------------------------------------------------

    def on_load_complete(self, rows: Iterable[EmissionRecord]) -> bool:
        """Move to ``DatasetLoaded``. Returns False if already loaded."""
        if self.is_loaded:
            logger.warning("Ignoring dataset load: dataset already loaded")
            return False
        self._dataset = DatasetLoaded(rows=tuple(rows))
        self._load_error = None
        logger.info(f"Dataset loaded with {len(self._dataset.rows)} rows")
        return True

    def on_load_failed(self, error: Exception) -> None:
        """Record a failed load; the dataset stays unloaded."""
        if self.is_loaded:
            logger.warning(f"Ignoring load failure after successful load: {error}")
            return
        if not isinstance(error, LoadFailure):
            error = LoadFailure(str(error))
        self._load_error = error
        logger.error(f"Dataset load failed: {error}")

    def complete_load(self, future: Future) -> bool:
        """Consume a finished load future on the caller's thread.

        Blocks until the future resolves.  Returns True if the dataset was
        loaded by this call.
        """
        try:
            rows = future.result()
        except LoadFailure as e:
            self.on_load_failed(e)
            return False
        return self.on_load_complete(rows)

    # ------------------------------------------------------------------
    # Selection events
    # ------------------------------------------------------------------

    def select(self, row: EmissionRecord) -> bool:
        """Select a row from a heatmap click.

        The row must be present in the loaded dataset; otherwise the event is
        ignored and the current selection kept.
        """
        if not self.is_loaded:
            logger.warning("Ignoring selection before the dataset has loaded")
            return False
        if row not in self._dataset.rows:
            logger.warning(f"Ignoring selection of unknown row {row.Country} {row.Year}")
            return False
        self._selection = Selected(row=row)
        logger.debug(f"Selected {row.Country} {row.Year}")
        return True

    def select_cell(self, country: str, year: int) -> bool:
        """Select the row at (country, year)."""
        for row in self.rows:
            if row.key == (country, year):
                return self.select(row)
        logger.warning(f"Ignoring click on missing cell {country} {year}")
        return False

    def reset_selection(self) -> None:
        self._selection = NoSelection()

    def set_metric(self, metric: str) -> None:
        self._validate_metric(metric)
        self._metric = metric

    @staticmethod
    def _validate_metric(metric: str) -> None:
        if metric not in HEATMAP_METRICS:
            raise ValueError(f"Unsupported heatmap metric {metric!r}; expected one of {HEATMAP_METRICS}")

    # ------------------------------------------------------------------
    # Derived props
    # ------------------------------------------------------------------

    def heatmap_props(self) -> HeatmapProps:
        return HeatmapProps(rows=self.rows, metric=self._metric)

    def pie_props(self) -> PieChartProps:
        if isinstance(self._selection, Selected):
            return PieChartProps(composition=compute_composition(self._selection.row))
        return PieChartProps(composition=None)

    def line_props(self) -> LineChartProps:
        if isinstance(self._selection, Selected):
            country = self._selection.row.Country
            return LineChartProps(country=country, series=tuple(compute_time_series(self.rows, country)))
        return LineChartProps()
