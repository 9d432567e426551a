"""
Core module for Emission Atlas.

Contains configuration, the error taxonomy, and base utilities.
"""

from emission_atlas.core.config import *
from emission_atlas.core.errors import EmissionAtlasError, LoadFailure, EmptyDatasetError
from emission_atlas.core.utils import coerce_number, coerce_numeric_series, validate_columns

__all__ = [
    # Errors
    'EmissionAtlasError',
    'LoadFailure',
    'EmptyDatasetError',
    # Utils
    'coerce_number',
    'coerce_numeric_series',
    'validate_columns',
]
