"""
Emission Atlas - Streamlit Page.

Run with:
    streamlit run emission_atlas/dashboard/streamlit_app.py -- --data <url-or-csv>

Layout:
    Header
    Metric selector (Population / GDP / Total)
    Heatmap (country x year)           <- click a cell to select it
    Composition pie | Country timeline <- follow the selection

Streamlit re-executes this script on every interaction.  The controller is
kept in ``st.session_state`` so the dataset and the selection survive those
reruns; the parsed dataset is additionally memoized per source with
``st.cache_data`` so a browser refresh does not download it again.
"""

import argparse
import logging
import sys
from pathlib import Path

import streamlit as st

# Add project root to path for imports when run from a checkout
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from emission_atlas.core.config import DATA_URL, HEATMAP_METRICS, METRIC_LABELS
from emission_atlas.core.errors import LoadFailure
from emission_atlas.dashboard.app import configure_page, load_custom_css, render_header
from emission_atlas.dashboard.controller import DashboardController
from emission_atlas.data.loader import load_dataset_async
from emission_atlas.models.data_models import Selected
from emission_atlas.visualization.charts import (
    chart_heatmap,
    chart_composition_pie,
    chart_country_timeline,
    resolve_clicked_cell,
)

logger = logging.getLogger(__name__)

CONTROLLER_KEY = "emission_atlas_controller"


def parse_page_args(argv=None):
    """Read the arguments passed after ``--`` on the streamlit command line."""
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('--data', default=DATA_URL)
    args, _ = parser.parse_known_args(argv)
    return args


@st.cache_data(show_spinner=False)
def fetch_rows(source):
    """Rows for ``source``, memoized per source; failures are not cached.

    Runs on the script thread.  Only the uncached ``load_dataset`` goes to
    the loader worker, which has no Streamlit script-run context.
    """
    return load_dataset_async(source).result()


def get_controller() -> DashboardController:
    if CONTROLLER_KEY not in st.session_state:
        st.session_state[CONTROLLER_KEY] = DashboardController()
    return st.session_state[CONTROLLER_KEY]


def ensure_loaded(controller: DashboardController, source) -> None:
    """Run the one-shot load the first time the page renders."""
    if controller.is_loaded or controller.load_error is not None:
        return
    with st.spinner("Loading emissions dataset..."):
        try:
            rows = fetch_rows(source)
        except LoadFailure as e:
            controller.on_load_failed(e)
        else:
            controller.on_load_complete(rows)


def render_metric_selector(controller: DashboardController) -> None:
    metric = st.selectbox(
        "Heatmap metric",
        options=list(HEATMAP_METRICS),
        index=HEATMAP_METRICS.index(controller.metric),
        format_func=lambda m: METRIC_LABELS.get(m, m),
    )
    if metric != controller.metric:
        controller.set_metric(metric)


def render_heatmap(controller: DashboardController) -> None:
    event = st.plotly_chart(
        chart_heatmap(controller.heatmap_props()),
        use_container_width=False,
        on_select="rerun",
        selection_mode="points",
        key=f"heatmap_{controller.metric}",
    )
    points = event.selection.points if event and event.selection else None
    cell = resolve_clicked_cell(points)
    if cell is not None:
        controller.select_cell(*cell)


def render_detail_charts(controller: DashboardController) -> None:
    selection = controller.selection
    if isinstance(selection, Selected):
        row = selection.row
        st.markdown(
            f'<p class="selection-caption">Selected: {row.Country}, {row.Year}</p>',
            unsafe_allow_html=True,
        )

    col1, col2 = st.columns(2)
    with col1:
        st.plotly_chart(chart_composition_pie(controller.pie_props()), use_container_width=True)
    with col2:
        st.plotly_chart(chart_country_timeline(controller.line_props()), use_container_width=True)


def main():
    configure_page()
    load_custom_css()
    render_header()

    source = parse_page_args().data
    controller = get_controller()
    ensure_loaded(controller, source)

    if controller.load_error is not None:
        st.error(f"Dataset unavailable: {controller.load_error}")
        st.stop()

    render_metric_selector(controller)
    render_heatmap(controller)
    render_detail_charts(controller)


if __name__ == "__main__":
    main()
