"""
Visualization module for the linked dashboard charts.
"""

from .charts import (
    HeatmapCell,
    HeatmapGrid,
    build_heatmap_grid,
    chart_heatmap,
    resolve_clicked_cell,
    chart_composition_pie,
    chart_country_timeline,
    create_plotly_theme,
)

__all__ = [
    'HeatmapCell',
    'HeatmapGrid',
    'build_heatmap_grid',
    'chart_heatmap',
    'resolve_clicked_cell',
    'chart_composition_pie',
    'chart_country_timeline',
    'create_plotly_theme',
]
