"""
Central Configuration Module for Emission Atlas.

=== PURPOSE ===
Single source of truth for every constant used across the dashboard: the
remote dataset location, the year window shown in the heatmap, the column
names of the CSV, the six emission source categories, and the colors used by
the charts.  Other modules import from here rather than defining their own
magic values.

=== DATA FLOW ===
  1. DATA_URL / REQUEST_TIMEOUT_SECONDS drive the dataset loader
     (emission_atlas.data.loader).
  2. COL_* constants abstract the raw CSV column names so a schema change
     only needs updating here.
  3. MIN_YEAR / MAX_YEAR bound the heatmap's year axis.
  4. HEATMAP_METRICS / HEATMAP_COLORSCALES drive the metric selector and
     the color scale of the heatmap.
  5. SOURCE_CATEGORIES fixes the display order of the composition pie.
"""

import os
import logging

logger = logging.getLogger(__name__)

# ==========================================
# DATA SOURCE
# ==========================================
# Per-country, per-year CO2 emissions with population and GDP for the
# fifteen largest emitters.  Override with EMISSION_ATLAS_DATA_URL to point
# the dashboard at a mirror or a local http server.
DEFAULT_DATA_URL = (
    "https://raw.githubusercontent.com/bettyzzzr/fall2024-iv-final-project/"
    "refs/heads/main/15%E5%9B%BD%E7%A2%B3%E6%8E%92%E6%94%BE.csv"
)
DATA_URL = os.environ.get("EMISSION_ATLAS_DATA_URL", DEFAULT_DATA_URL)


def _read_timeout(default=15.0):
    """Read the HTTP timeout override, falling back to ``default``."""
    raw = os.environ.get("EMISSION_ATLAS_TIMEOUT")
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning(f"[Config] Ignoring invalid EMISSION_ATLAS_TIMEOUT={raw!r}")
        return default
    return value if value > 0 else default


# Seconds to wait for the CSV download before the load is declared failed.
REQUEST_TIMEOUT_SECONDS = _read_timeout()

# ==========================================
# YEAR WINDOW
# ==========================================
# The heatmap only shows the last two decades; older rows stay in the
# dataset (the line chart still plots them).
MIN_YEAR = 2003
MAX_YEAR = 2023

# ==========================================
# COLUMN MAPPINGS
# ==========================================
COL_COUNTRY = "Country"
COL_YEAR = "Year"
COL_TOTAL = "Total"
COL_POPULATION = "Population"
COL_GDP = "GDP"

# Emission sources in pie display order.  The six values of a row sum
# (approximately) to its Total.
SOURCE_CATEGORIES = ("Coal", "Oil", "Gas", "Cement", "Flaring", "Other")

# Every numeric column of a row; each is coerced to a non-negative float.
NUMERIC_COLUMNS = (COL_TOTAL, COL_POPULATION, COL_GDP) + SOURCE_CATEGORIES

REQUIRED_COLUMNS = (COL_COUNTRY, COL_YEAR)

# ==========================================
# HEATMAP METRICS
# ==========================================
HEATMAP_METRICS = (COL_POPULATION, COL_GDP, COL_TOTAL)
DEFAULT_METRIC = COL_POPULATION

# Population cells are green, the economic and emission metrics blue.
HEATMAP_COLORSCALES = {
    COL_POPULATION: "Greens",
    COL_GDP: "Blues",
    COL_TOTAL: "Blues",
}

METRIC_LABELS = {
    COL_POPULATION: "Population",
    COL_GDP: "GDP (Hundred Million)",
    COL_TOTAL: "Total Emission (MT)",
}

# ==========================================
# CHART COLORS
# ==========================================
GDP_LINE_COLOR = "black"
EMISSION_LINE_COLOR = "blue"

SOURCE_COLORS = {
    "Coal": "#4D4D4D",
    "Oil": "#8C564B",
    "Gas": "#1F77B4",
    "Cement": "#BCBD22",
    "Flaring": "#FF7F0E",
    "Other": "#9467BD",
}

EMPTY_STATE_TEXT = "No data available"
DEGENERATE_COMPOSITION_TEXT = "No emission source data for this selection"
NO_SELECTION_TEXT = "Click a heatmap cell to see details"

# ==========================================
# DASHBOARD
# ==========================================
DEFAULT_DASHBOARD_PORT = 8501
