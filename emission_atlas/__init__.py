"""
Emission Atlas - linked heatmap, pie and timeline views of national CO2 emissions.

This package provides:
- Loading and numeric cleaning of the per-country emissions CSV
- Pure aggregations (year domain, country ranking, color domain,
  source composition, country time series)
- Plotly chart builders for the three linked views
- A selection-driven controller and the Streamlit page that hosts it
"""

__version__ = "1.0.0"
__author__ = "Emission Atlas Team"

# Core imports
from .core.config import *
from .core.errors import EmissionAtlasError, LoadFailure, EmptyDatasetError
from .core.utils import coerce_number, validate_columns

# Models
from .models import (
    EmissionRecord,
    CompositionStatus,
    CompositionSlice,
    CompositionView,
    SeriesPoint,
    ColorDomain,
)

# Data
from .data import load_dataset, load_dataset_async

# Analysis
from .analysis import (
    compute_year_domain,
    compute_country_order,
    compute_color_domain,
    compute_composition,
    compute_time_series,
)

# Visualization
from .visualization import chart_heatmap, chart_composition_pie, chart_country_timeline

# Dashboard
from .dashboard import DashboardController

__all__ = [
    # Core
    'EmissionAtlasError',
    'LoadFailure',
    'EmptyDatasetError',
    'coerce_number',
    'validate_columns',

    # Models
    'EmissionRecord',
    'CompositionStatus',
    'CompositionSlice',
    'CompositionView',
    'SeriesPoint',
    'ColorDomain',

    # Data
    'load_dataset',
    'load_dataset_async',

    # Analysis
    'compute_year_domain',
    'compute_country_order',
    'compute_color_domain',
    'compute_composition',
    'compute_time_series',

    # Visualization
    'chart_heatmap',
    'chart_composition_pie',
    'chart_country_timeline',

    # Dashboard
    'DashboardController',

    # Metadata
    '__version__',
]
