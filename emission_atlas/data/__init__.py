"""
Data loading module.

Fetches and cleans the per-country emissions CSV.
"""

from .loader import (
    fetch_csv_text,
    parse_emissions_csv,
    frame_to_records,
    load_dataset,
    load_dataset_async,
)

__all__ = [
    'fetch_csv_text',
    'parse_emissions_csv',
    'frame_to_records',
    'load_dataset',
    'load_dataset_async',
]
