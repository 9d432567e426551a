"""
Emission Atlas Dashboard - Streamlit Web Interface.

Linked views over the emissions dataset:
- Country x year heatmap with a selectable metric
- Emission-source composition pie for the clicked cell
- Emission / GDP timeline for the clicked country
"""

from .controller import DashboardController
from .app import run_dashboard, get_dashboard_path, build_streamlit_command

__all__ = ['DashboardController', 'run_dashboard', 'get_dashboard_path', 'build_streamlit_command']
