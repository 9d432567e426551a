"""
Analysis module for Emission Atlas.

Pure aggregations that derive each chart's view from the dataset.
"""

from .aggregations import (
    records_to_frame,
    compute_year_domain,
    compute_country_order,
    compute_color_domain,
    compute_composition,
    compute_time_series,
)

__all__ = [
    'records_to_frame',
    'compute_year_domain',
    'compute_country_order',
    'compute_color_domain',
    'compute_composition',
    'compute_time_series',
]
