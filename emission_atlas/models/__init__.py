"""
Models module for Emission Atlas.

Contains the row model, derived-view models, state variants and chart props.
"""

from .data_models import (
    EmissionRecord,
    RECORD_NUMERIC_FIELDS,
    CompositionStatus,
    CompositionSlice,
    CompositionView,
    SeriesPoint,
    ColorDomain,
    DatasetUnloaded,
    DatasetLoaded,
    DatasetState,
    NoSelection,
    Selected,
    SelectionState,
    HeatmapProps,
    PieChartProps,
    LineChartProps,
)

__all__ = [
    'EmissionRecord',
    'RECORD_NUMERIC_FIELDS',
    'CompositionStatus',
    'CompositionSlice',
    'CompositionView',
    'SeriesPoint',
    'ColorDomain',
    'DatasetUnloaded',
    'DatasetLoaded',
    'DatasetState',
    'NoSelection',
    'Selected',
    'SelectionState',
    'HeatmapProps',
    'PieChartProps',
    'LineChartProps',
]
