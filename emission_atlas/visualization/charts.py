"""
Plotly chart builders for the emissions dashboard.

Three linked visualizations:
- Emissions heatmap (country x year, colored by the selected metric)
- Emission-source composition pie for the selected cell
- Emission / GDP timeline for the selected country

Each builder takes the immutable props produced by ``DashboardController``
and returns a ``go.Figure``.  Builders never raise on empty or degenerate
input; they return a placeholder figure carrying an explanatory annotation
instead.  Every number written into a trace passes through ``_finite`` so no
NaN reaches the renderer.

Heatmap cells are drawn as square scatter markers rather than a
``go.Heatmap`` trace: Streamlit's ``on_select`` reports clicked points only
for point-based traces, and each marker carries its (country, year) in
``customdata`` so a click resolves to exactly one row.
"""

import math
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from ..analysis.aggregations import (
    compute_year_domain,
    compute_country_order,
    compute_color_domain,
)
from ..core.config import (
    HEATMAP_COLORSCALES, METRIC_LABELS, SOURCE_COLORS,
    GDP_LINE_COLOR, EMISSION_LINE_COLOR, COL_GDP, COL_TOTAL,
    EMPTY_STATE_TEXT, DEGENERATE_COMPOSITION_TEXT, NO_SELECTION_TEXT,
)
from ..core.errors import EmptyDatasetError
from ..models.data_models import (
    ColorDomain,
    EmissionRecord,
    HeatmapProps,
    LineChartProps,
    PieChartProps,
)

logger = logging.getLogger(__name__)

HEATMAP_WIDTH = 800
HEATMAP_HEIGHT = 400
HEATMAP_MARGIN = dict(l=100, r=20, t=50, b=60)
CHART_HEIGHT = 400

# Fraction of a band a cell fills; the rest is the gap between cells.
CELL_FILL = 0.9


def create_plotly_theme():
    """Get consistent Plotly theme settings."""
    return dict(
        paper_bgcolor='rgba(0,0,0,0)',
        plot_bgcolor='rgba(0,0,0,0)',
        font=dict(family='Inter'),
        margin=dict(l=40, r=40, t=50, b=40),
    )


def _finite(value) -> float:
    """Return ``value`` as a float, or 0.0 if it is missing or not finite."""
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def _placeholder_figure(message: str, height: int = CHART_HEIGHT) -> go.Figure:
    fig = go.Figure()
    fig.add_annotation(text=message, x=0.5, y=0.5, xref='paper', yref='paper',
                       showarrow=False, font=dict(size=14, color='#888888'))
    fig.update_layout(**create_plotly_theme(), height=height)
    fig.update_xaxes(visible=False)
    fig.update_yaxes(visible=False)
    return fig


# =============================================================================
# EMISSIONS HEATMAP
# =============================================================================

@dataclass(frozen=True)
class HeatmapCell:
    country: str
    year: int
    value: float


@dataclass(frozen=True)
class HeatmapGrid:
    """Cells and axes of the heatmap for one metric.

    ``color_domain`` is None when there are no rows.
    """
    years: Tuple[int, ...]
    countries: Tuple[str, ...]
    cells: Tuple[HeatmapCell, ...]
    color_domain: Optional[ColorDomain]

    @property
    def is_empty(self) -> bool:
        return not self.cells


def build_heatmap_grid(rows: Sequence[EmissionRecord], metric: str) -> HeatmapGrid:
    """Lay out one cell per row whose year is inside the year domain.

    Cells are ordered country-major following the country order, then by
    year.
    """
    try:
        color_domain = compute_color_domain(rows, metric)
    except EmptyDatasetError:
        logger.info("Heatmap received an empty dataset; rendering empty state")
        return HeatmapGrid(years=(), countries=(), cells=(), color_domain=None)

    years = compute_year_domain(rows)
    countries = compute_country_order(rows)
    year_set = set(years)
    by_key = {r.key: r for r in rows if r.Year in year_set}

    cells = []
    for country in countries:
        for year in years:
            row = by_key.get((country, year))
            if row is not None:
                cells.append(HeatmapCell(country, year, _finite(row.metric(metric))))

    return HeatmapGrid(tuple(years), tuple(countries), tuple(cells), color_domain)


def _cell_size(n_years: int, n_countries: int) -> float:
    plot_w = HEATMAP_WIDTH - HEATMAP_MARGIN['l'] - HEATMAP_MARGIN['r']
    plot_h = HEATMAP_HEIGHT - HEATMAP_MARGIN['t'] - HEATMAP_MARGIN['b']
    band = min(plot_w / max(n_years, 1), plot_h / max(n_countries, 1))
    return max(4.0, band * CELL_FILL)


def chart_heatmap(props: HeatmapProps) -> go.Figure:
    """
    Country x year heatmap of ``props.metric``.

    Countries run top to bottom from the largest cumulative emitter.  The
    color scale spans the metric's extent over the whole dataset.
    """
    grid = build_heatmap_grid(props.rows, props.metric)
    if grid.is_empty:
        return _placeholder_figure(EMPTY_STATE_TEXT, height=HEATMAP_HEIGHT)

    domain = grid.color_domain
    label = METRIC_LABELS.get(props.metric, props.metric)

    fig = go.Figure(go.Scatter(
        x=[str(c.year) for c in grid.cells],
        y=[c.country for c in grid.cells],
        mode='markers',
        marker=dict(
            symbol='square',
            size=_cell_size(len(grid.years), len(grid.countries)),
            color=[c.value for c in grid.cells],
            colorscale=HEATMAP_COLORSCALES.get(props.metric, 'Blues'),
            cmin=_finite(domain.min_value),
            cmax=_finite(domain.max_value),
            showscale=True,
            colorbar=dict(title=dict(text=props.metric), thickness=12),
            line=dict(width=0),
        ),
        customdata=[[c.country, c.year] for c in grid.cells],
        hovertemplate='<b>%{customdata[0]}</b> %{customdata[1]}<br>'
                      + label + ': %{marker.color:,.2f}<extra></extra>',
        showlegend=False,
    ))

    fig.update_layout(
        **{**create_plotly_theme(), 'margin': HEATMAP_MARGIN},
        width=HEATMAP_WIDTH,
        height=HEATMAP_HEIGHT,
        clickmode='event+select',
        dragmode=False,
    )
    fig.update_xaxes(type='category', categoryorder='array',
                     categoryarray=[str(y) for y in grid.years],
                     tickangle=-45, showgrid=False)
    fig.update_yaxes(type='category', categoryorder='array',
                     categoryarray=list(grid.countries), autorange='reversed',
                     title_text='Countries', showgrid=False)
    return fig


def resolve_clicked_cell(points: Optional[List[Dict[str, Any]]]) -> Optional[Tuple[str, int]]:
    """Turn a Streamlit plotly selection into ``(country, year)``.

    Uses the first point's ``customdata``; falls back to its x / y.  Returns
    None when nothing usable was clicked.
    """
    if not points:
        return None
    point = points[0]
    custom = point.get('customdata')
    try:
        if custom is not None and len(custom) >= 2:
            return str(custom[0]), int(custom[1])
        if point.get('y') is not None and point.get('x') is not None:
            return str(point['y']), int(point['x'])
    except (TypeError, ValueError):
        logger.warning(f"Ignoring unreadable heatmap click: {point}")
    return None


# =============================================================================
# COMPOSITION PIE
# =============================================================================

def chart_composition_pie(props: PieChartProps) -> go.Figure:
    """
    Six-sector pie of the selected row's emission sources.

    Shows a neutral placeholder before any selection and when the
    composition is degenerate.
    """
    composition = props.composition
    if composition is None:
        return _placeholder_figure(NO_SELECTION_TEXT)
    if composition.is_degenerate:
        return _placeholder_figure(DEGENERATE_COMPOSITION_TEXT)

    slices = composition.slices
    fig = go.Figure(go.Pie(
        labels=[s.label for s in slices],
        values=[_finite(s.value) for s in slices],
        text=[f"{_finite(s.percentage):.2f}%" for s in slices],
        textinfo='label+text',
        marker=dict(colors=[SOURCE_COLORS.get(s.label, '#CCCCCC') for s in slices]),
        hovertemplate='<b>%{label}</b><br>%{value:,.2f} MT (%{text})<extra></extra>',
        sort=False,
        direction='clockwise',
    ))
    fig.update_layout(
        **create_plotly_theme(),
        title=dict(text=f"Emission Sources: {composition.country} {composition.year}"),
        height=CHART_HEIGHT,
    )
    return fig


# =============================================================================
# COUNTRY TIMELINE
# =============================================================================

def chart_country_timeline(props: LineChartProps) -> go.Figure:
    """
    Emission total and GDP of one country over time.

    Both series share the year axis but have independent y axes: GDP on the
    left, emission total on the right.
    """
    if not props.series:
        return _placeholder_figure(NO_SELECTION_TEXT if props.country is None else EMPTY_STATE_TEXT)

    years = [p.year for p in props.series]

    fig = make_subplots(specs=[[{"secondary_y": True}]])
    fig.add_trace(
        go.Scatter(
            x=years,
            y=[_finite(p.gdp_value) for p in props.series],
            name='GDP',
            mode='lines+markers',
            line=dict(color=GDP_LINE_COLOR, width=2),
            marker=dict(color=GDP_LINE_COLOR, size=6),
        ),
        secondary_y=False
    )
    fig.add_trace(
        go.Scatter(
            x=years,
            y=[_finite(p.emission_value) for p in props.series],
            name='Total Emission',
            mode='lines+markers',
            line=dict(color=EMISSION_LINE_COLOR, width=2),
            marker=dict(color=EMISSION_LINE_COLOR, size=6),
        ),
        secondary_y=True
    )

    fig.update_xaxes(title_text="Year", tickformat='d', tickangle=-45)
    fig.update_yaxes(title_text=METRIC_LABELS[COL_GDP], rangemode='tozero', secondary_y=False)
    fig.update_yaxes(title_text=METRIC_LABELS[COL_TOTAL], rangemode='tozero',
                     title_font=dict(color=EMISSION_LINE_COLOR), secondary_y=True)

    fig.update_layout(
        **create_plotly_theme(),
        title=dict(text=f"{props.country}: Emissions vs GDP"),
        height=CHART_HEIGHT,
        hovermode='x unified',
        legend=dict(orientation='h', y=1.1, x=1, xanchor='right'),
    )
    return fig
