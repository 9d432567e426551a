"""
Streamlit launcher and page helpers.

This module provides the helpers shared by the dashboard page (page
configuration, CSS, header) and the functions that start a Streamlit server
for it.
"""

import sys
import subprocess
from pathlib import Path
from typing import List, Optional

import streamlit as st

from ..core.config import DEFAULT_DASHBOARD_PORT


def get_dashboard_path() -> Path:
    """Get the path to the main streamlit app file."""
    return Path(__file__).parent / "streamlit_app.py"


def build_streamlit_command(port: int = DEFAULT_DASHBOARD_PORT,
                            data_url: Optional[str] = None,
                            headless: bool = False) -> List[str]:
    """Build the ``streamlit run`` command line for the dashboard page."""
    cmd = [
        sys.executable, "-m", "streamlit", "run",
        str(get_dashboard_path()),
        "--server.port", str(port),
        "--server.headless", "true" if headless else "false",
        "--browser.gatherUsageStats", "false",
    ]
    if data_url:
        cmd.extend(["--", "--data", data_url])
    return cmd


def run_dashboard(data_url: str = None, port: int = DEFAULT_DASHBOARD_PORT):
    """
    Launch the Streamlit dashboard and block until it exits.

    Args:
        data_url: Dataset URL or local CSV path (optional)
        port: Port to run on (default 8501)

    Returns:
        The Streamlit process exit code.
    """
    return subprocess.run(build_streamlit_command(port=port, data_url=data_url)).returncode


# ============================================================================
# STREAMLIT PAGE CONFIGURATION
# ============================================================================

def configure_page():
    """Configure Streamlit page settings."""
    st.set_page_config(
        page_title="Emission Atlas",
        page_icon="🌍",
        layout="wide",
        initial_sidebar_state="collapsed",
        menu_items={
            'About': "# Emission Atlas\nCO2 emissions by country, year and source"
        }
    )


def load_custom_css():
    """Load custom CSS for the page."""
    st.markdown("""
    <style>
    .main-header {
        font-size: 2.2rem;
        font-weight: 700;
        margin-bottom: 0.25rem;
    }

    .sub-header {
        color: #6C757D;
        font-size: 1.05rem;
        margin-bottom: 1.5rem;
    }

    .selection-caption {
        font-weight: 600;
        margin-top: 0.5rem;
    }

    /* Hide Streamlit branding */
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
    </style>
    """, unsafe_allow_html=True)


def render_header():
    """Render the main dashboard header."""
    st.markdown('<p class="main-header">🌍 Emission Atlas</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Click a heatmap cell to break down its emissions by source '
        'and follow the country over time</p>',
        unsafe_allow_html=True,
    )
