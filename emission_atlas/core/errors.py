"""
Exception taxonomy for Emission Atlas.

Only conditions that callers must handle are modelled as exceptions.  A
degenerate composition (all six sources zero) is reported through
``CompositionStatus.DEGENERATE`` on the returned view instead, and a click on
a row that is not in the dataset is absorbed by the controller.
"""


class EmissionAtlasError(Exception):
    """Base class for every error raised by this package."""


class LoadFailure(EmissionAtlasError):
    """The dataset could not be fetched or parsed.

    Attributes:
        source: URL or path the loader was reading from.
    """

    def __init__(self, message, source=None):
        super().__init__(message)
        self.source = source


class EmptyDatasetError(EmissionAtlasError):
    """An aggregation that needs at least one row received none."""
