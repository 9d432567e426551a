"""
Emission Atlas - Data Loading & Cleaning
========================================

Single entry point for dataset ingestion.  Reads the per-country emissions
CSV (from the remote URL in ``core.config.DATA_URL`` or from a local path),
validates its structure, coerces every numeric cell, and returns the rows as
an ordered, immutable tuple of ``EmissionRecord``.

Data Flow
---------
1. URL  -->  requests.get  -->  CSV text   (or local path --> file handle)
2. CSV  -->  pd.read_csv   -->  raw DataFrame
3. Strip header whitespace, validate that Country and Year exist
4. Add any missing numeric column as all-zero (logged)
5. Coerce numeric columns: unparseable, missing or negative cells become 0
6. Drop repeated (Country, Year) pairs, keeping the first occurrence
7. DataFrame  -->  tuple[EmissionRecord] in file order

Errors
------
Network failures, HTTP error statuses, unreadable files and CSV parse
errors all surface as ``LoadFailure``.  A single malformed cell never fails
the load; only that field of that row falls back to 0.

Asynchronous load
-----------------
``load_dataset_async`` runs the fetch on a single background worker and
returns a ``concurrent.futures.Future``.  The future resolves exactly once,
with either the row tuple or a ``LoadFailure``.
"""

import io
import logging
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Optional, Tuple, Union

import pandas as pd
import requests

from ..core.config import (
    DATA_URL, REQUEST_TIMEOUT_SECONDS, COL_COUNTRY, COL_YEAR,
    NUMERIC_COLUMNS, REQUIRED_COLUMNS,
)
from ..core.errors import LoadFailure
from ..core.utils import coerce_numeric_series, validate_columns
from ..models.data_models import EmissionRecord

logger = logging.getLogger(__name__)

Source = Union[str, Path]

_executor: Optional[ThreadPoolExecutor] = None


def _is_remote(source: Source) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def fetch_csv_text(url: str, timeout: float = REQUEST_TIMEOUT_SECONDS) -> str:
    """Download the CSV body from ``url``.

    Raises:
        LoadFailure: On connection errors, timeouts or non-2xx responses.
    """
    logger.info(f"[Loader] Fetching dataset from {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.error(f"[Loader] Download failed: {e}")
        raise LoadFailure(f"Could not download dataset: {e}", source=url) from e
    response.encoding = response.encoding or "utf-8"
    return response.text


def parse_emissions_csv(buffer, source: Optional[Source] = None) -> pd.DataFrame:
    """Parse and clean the emissions CSV.

    Args:
        buffer: Anything ``pd.read_csv`` accepts (path, file handle, StringIO).
        source: Label used in error messages.

    Returns:
        DataFrame with ``Country`` (str), ``Year`` (int) and every column in
        ``NUMERIC_COLUMNS`` as non-negative floats, in file order.

    Raises:
        LoadFailure: If the CSV cannot be parsed or lacks Country / Year.
    """
    # ── Step 1: Parse ────────────────────────────────────────────────────
    try:
        df = pd.read_csv(buffer)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError, OSError) as e:
        raise LoadFailure(f"Could not parse dataset: {e}", source=source) from e

    df.columns = [str(c).strip() for c in df.columns]

    # ── Step 2: Validate required columns ────────────────────────────────
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise LoadFailure(f"Missing required columns: {missing}", source=source)

    # ── Step 3: Fill absent numeric columns ──────────────────────────────
    # Older exports lack Flaring / Other; the row is still usable.
    if not validate_columns(df, NUMERIC_COLUMNS):
        for col in NUMERIC_COLUMNS:
            if col not in df.columns:
                df[col] = 0.0

    # ── Step 4: Coerce ───────────────────────────────────────────────────
    df[COL_COUNTRY] = df[COL_COUNTRY].fillna("").astype(str).str.strip()
    df[COL_YEAR] = coerce_numeric_series(df[COL_YEAR]).astype(int)
    for col in NUMERIC_COLUMNS:
        df[col] = coerce_numeric_series(df[col])

    # ── Step 5: Enforce (Country, Year) uniqueness ───────────────────────
    dupes = df.duplicated(subset=[COL_COUNTRY, COL_YEAR], keep='first')
    if dupes.any():
        logger.warning(f"[Loader] Dropping {int(dupes.sum())} duplicate (Country, Year) rows")
        df = df[~dupes]

    return df[[COL_COUNTRY, COL_YEAR] + list(NUMERIC_COLUMNS)].reset_index(drop=True)


def frame_to_records(df: pd.DataFrame) -> Tuple[EmissionRecord, ...]:
    """Convert a cleaned frame into the immutable row tuple."""
    return tuple(EmissionRecord.from_mapping(rec) for rec in df.to_dict(orient='records'))


def load_dataset(source: Source = DATA_URL,
                 timeout: float = REQUEST_TIMEOUT_SECONDS) -> Tuple[EmissionRecord, ...]:
    """Load the dataset from a URL or a local CSV path.

    Returns:
        Rows in file order.

    Raises:
        LoadFailure: If the source cannot be read or parsed.
    """
    if _is_remote(source):
        text = fetch_csv_text(source, timeout=timeout)
        df = parse_emissions_csv(io.StringIO(text), source=source)
    else:
        path = Path(source)
        if not path.is_file():
            raise LoadFailure(f"Dataset file not found: {path}", source=source)
        df = parse_emissions_csv(path, source=source)

    rows = frame_to_records(df)
    logger.info(f"[Loader] Loaded {len(rows)} rows, {df[COL_COUNTRY].nunique()} countries")
    return rows


def _get_executor() -> ThreadPoolExecutor:
    global _executor
    if _executor is None:
        _executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="emission-atlas-loader")
    return _executor


def load_dataset_async(source: Source = DATA_URL,
                       fetch: Callable[[Source], Tuple[EmissionRecord, ...]] = load_dataset) -> Future:
    """Start a one-shot background load.

    Args:
        source: URL or path passed to ``fetch``.
        fetch: The blocking loader to run on the worker thread.

    Returns:
        A future holding the row tuple, or raising ``LoadFailure``.  Any
        other exception raised by ``fetch`` is wrapped in ``LoadFailure``.
    """
    def _run():
        try:
            return fetch(source)
        except LoadFailure:
            raise
        except Exception as e:
            logger.error("[Loader] Unexpected load error", exc_info=True)
            raise LoadFailure(f"Unexpected error loading dataset: {e}", source=source) from e

    return _get_executor().submit(_run)
