#!/usr/bin/env python3
"""
Emission Atlas - Main CLI Entry Point
=====================================

Command-line entry point for the emissions dashboard.  It resolves the data
source, configures logging, and then either:

  - launches the Streamlit dashboard (default),
  - prints a headless text summary of the dataset (--no-gui), or
  - runs a health check of the data source and dependencies (--health-check).

Usage:
    python run.py                          # Launch dashboard on port 8501
    python run.py --port 8502              # Custom port
    python run.py --data emissions.csv     # Local CSV instead of the remote URL
    python run.py --no-gui                 # Print year range and country ranking
    python run.py --health-check           # Diagnostics, then exit

Environment Requirements:
    - Python 3.9+
    - Network access to the dataset URL (or a local CSV via --data)
"""

import logging
import sys
import subprocess
import argparse
import webbrowser
from pathlib import Path
import time
import atexit
import socket

import requests

from emission_atlas.core.config import DATA_URL, DEFAULT_DASHBOARD_PORT, REQUEST_TIMEOUT_SECONDS
from emission_atlas.core.errors import LoadFailure
from emission_atlas.analysis.aggregations import (
    compute_year_domain,
    compute_country_order,
    records_to_frame,
)
from emission_atlas.dashboard.app import build_streamlit_command
from emission_atlas.data.loader import load_dataset


# ==========================================
# PATH VALIDATION
# ==========================================
# A local --data path is resolved and checked against the project root and
# the user's home directory before the loader opens it.

def validate_file_path(path: str, must_exist: bool = False) -> Path:
    """
    Validate a local dataset path.

    Args:
        path: Raw file path string from the --data argument.
        must_exist: When True, raise ValueError if the resolved path does not
                    exist on disk.

    Returns:
        A fully-resolved Path object within the allowed directories.

    Raises:
        ValueError: If the path is outside the project root and home
                    directory, or does not exist when must_exist is True.
    """
    try:
        resolved = Path(path).resolve()

        if must_exist and not resolved.exists():
            raise ValueError(f"File not found: {path}")

        project_root = Path(__file__).parent.resolve()
        home_dir = Path.home().resolve()

        resolved_str = str(resolved)
        allowed = (
            resolved_str.startswith(str(project_root)) or
            resolved_str.startswith(str(home_dir))
        )

        if not allowed:
            raise ValueError(f"Path outside allowed directories: {path}")

        return resolved

    except Exception as e:
        raise ValueError(f"Invalid file path '{path}': {e}")


def resolve_data_source(data: str) -> str:
    """Return ``data`` unchanged if it is a URL, else a validated path string."""
    if data.lower().startswith(("http://", "https://")):
        return data
    return str(validate_file_path(data, must_exist=True))


# ==========================================
# LOGGING CONFIGURATION
# ==========================================
# Dual-output logging: a DEBUG-level log file for post-mortem debugging and
# a quieter console handler (WARNING by default, INFO with --verbose).

def setup_logging(verbose: bool = False):
    """
    Configure the root logger with file and console handlers.

    Every run writes a timestamped log file under logs/.  The file handler
    captures DEBUG messages; the console handler shows warnings only, or
    info messages as well in verbose mode.

    Args:
        verbose: When True, lower the console handler to INFO level.

    Returns:
        Path: Absolute path to the newly created log file.
    """
    log_dir = Path(__file__).parent / "logs"
    log_dir.mkdir(exist_ok=True)

    timestamp = time.strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f"emission_atlas_{timestamp}.log"

    file_formatter = logging.Formatter(
        '%(asctime)s | %(name)s | %(levelname)s | %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(
        '%(asctime)s | %(levelname)s | %(message)s',
        datefmt='%H:%M:%S'
    )

    file_handler = logging.FileHandler(log_file)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(file_formatter)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO if verbose else logging.WARNING)
    console_handler.setFormatter(console_formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)

    # Remove pre-existing handlers to avoid duplicate log lines.
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    if verbose:
        print(f"\U0001f4dd Verbose logging enabled. Log file: {log_file}")

    return log_file


logger = logging.getLogger(__name__)


# ==========================================
# HEALTH CHECK UTILITIES
# ==========================================

def check_data_source(source: str = DATA_URL, timeout: float = 5):
    """
    Check that the dataset is reachable.

    URLs are probed with a GET; local paths must exist.

    Returns:
        bool: True if the source responded with HTTP 200 or the file exists.
    """
    if not source.lower().startswith(("http://", "https://")):
        return Path(source).is_file()
    try:
        response = requests.get(source, timeout=timeout, stream=True)
        response.close()
        return response.status_code == 200
    except requests.exceptions.RequestException:
        return False


def check_required_packages():
    """
    Verify that the dashboard's Python packages are importable.

    Returns:
        Tuple of (all_installed: bool, missing_packages: list[str]).
        missing_packages contains pip install names, not import names.
    """
    # Mapping: Python import name -> pip install name
    required = {
        'pandas': 'pandas',
        'plotly': 'plotly',
        'streamlit': 'streamlit',
        'requests': 'requests',
    }

    missing = []
    for import_name, package_name in required.items():
        try:
            __import__(import_name)
        except ImportError:
            missing.append(package_name)

    return len(missing) == 0, missing


def health_check(source: str = DATA_URL):
    """
    Run diagnostic checks and print a human-readable report.

    Checks performed:
        1. Python version (>= 3.9 required)
        2. Data source reachable
        3. Required Python packages

    Returns:
        bool: True if all checks passed.
    """
    print()
    print("=" * 60)
    print("  \U0001f3e5 EMISSION ATLAS - HEALTH CHECK")
    print("=" * 60)
    print()

    python_version = sys.version_info
    python_ok = python_version >= (3, 9)
    status = "✅" if python_ok else "❌"
    print(f"{status} Python Version: {python_version.major}.{python_version.minor}.{python_version.micro}")
    if not python_ok:
        print(f"   Required: Python 3.9+")

    data_ok = check_data_source(source)
    status = "✅" if data_ok else "❌"
    print(f"{status} Data Source: {'Reachable' if data_ok else 'Not accessible'}")
    if not data_ok:
        print(f"   Source: {source}")

    packages_ok, missing = check_required_packages()
    status = "✅" if packages_ok else "❌"
    print(f"{status} Required Packages: {'All installed' if packages_ok else f'{len(missing)} missing'}")
    if missing:
        print(f"   Missing: {', '.join(missing)}")
        print(f"   Install with: pip install {' '.join(missing)}")

    print()
    print("=" * 60)

    all_ok = python_ok and data_ok and packages_ok
    if all_ok:
        print("  ✅ All checks passed!")
    else:
        print("  ❌ Some checks failed. Please fix the issues above.")
    print("=" * 60)
    print()

    return all_ok


def parse_args(argv=None):
    """
    Parse and return command-line arguments.

    Returns:
        argparse.Namespace with the parsed flags.
    """
    parser = argparse.ArgumentParser(
        description='Emission Atlas - linked emissions dashboard',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python run.py                      Launch dashboard
  python run.py --no-gui             Print a text summary of the dataset
  python run.py --data data.csv      Use a local CSV
  python run.py --port 8502          Use custom port for dashboard
        """
    )

    parser.add_argument(
        '--data', '-d',
        type=str,
        default=DATA_URL,
        help='Dataset URL or local CSV path (default: project dataset URL)'
    )

    parser.add_argument(
        '--no-gui',
        action='store_true',
        help='Print a dataset summary instead of launching the dashboard'
    )

    parser.add_argument(
        '--port',
        type=int,
        default=DEFAULT_DASHBOARD_PORT,
        help=f'Port for Streamlit dashboard (default: {DEFAULT_DASHBOARD_PORT})'
    )

    parser.add_argument(
        '--no-browser',
        action='store_true',
        help='Do not automatically open browser'
    )

    parser.add_argument(
        '--verbose', '-v',
        action='store_true',
        help='Show detailed logging output'
    )

    parser.add_argument(
        '--health-check',
        action='store_true',
        help='Run system health check and exit'
    )

    return parser.parse_args(argv)


def print_summary(source: str) -> bool:
    """
    Load the dataset and print its heatmap axes without starting Streamlit.

    Returns:
        bool: False if the dataset could not be loaded.
    """
    try:
        rows = load_dataset(source, timeout=REQUEST_TIMEOUT_SECONDS)
    except LoadFailure as e:
        print(f"❌ Dataset unavailable: {e}")
        logger.error(f"Summary load failed: {e}")
        return False

    years = compute_year_domain(rows)
    countries = compute_country_order(rows)
    print()
    print("=" * 60)
    print("  \U0001f30d EMISSION ATLAS - DATASET SUMMARY")
    print("=" * 60)
    print(f"  Rows:      {len(rows)}")
    if years:
        print(f"  Years:     {years[0]}-{years[-1]} ({len(years)} in heatmap window)")
    else:
        print("  Years:     none in heatmap window")
    print(f"  Countries: {len(countries)}")
    print()

    if countries:
        totals = records_to_frame(rows).groupby('Country', sort=False)['Total'].sum()
        print("  Cumulative emissions (heatmap order):")
        for rank, country in enumerate(countries, start=1):
            print(f"  {rank:>3}. {country:<30} {totals[country]:>14,.1f}")
    print("=" * 60)
    return True


def launch_dashboard(source: str, port: int = DEFAULT_DASHBOARD_PORT, open_browser: bool = True):
    """
    Launch the Streamlit dashboard as a managed subprocess.

    This function:
        1. Refuses to start if the requested port is already in use.
        2. Starts Streamlit headless with usage stats disabled.
        3. Optionally opens the browser after a short delay.
        4. Registers an atexit handler that terminates the subprocess.

    Returns:
        bool: True if the dashboard ran and exited cleanly (including Ctrl+C
              shutdown), False on errors.
    """
    print()
    print("=" * 60)
    print("  \U0001f310 Launching Interactive Dashboard")
    print("=" * 60)
    print()

    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        port_in_use = sock.connect_ex(('localhost', port)) == 0
        sock.close()
        if port_in_use:
            print(f"⚠️  Port {port} is already in use")
            print("   Please use a different port with --port flag")
            return False
    except OSError as e:
        logger.warning(f"Could not check port status: {e}")

    print(f"  \U0001f4ca Starting Streamlit server on port {port}...")
    print(f"  \U0001f517 URL: http://localhost:{port}")
    print()
    print("  Press Ctrl+C to stop the dashboard")
    print("-" * 60)
    sys.stdout.flush()

    cmd = build_streamlit_command(port=port, data_url=source, headless=True)

    streamlit_process = None

    def cleanup():
        """Terminate the Streamlit subprocess on exit."""
        nonlocal streamlit_process
        if streamlit_process and streamlit_process.poll() is None:
            print("\n\U0001f9f9 Cleaning up dashboard process...")
            streamlit_process.terminate()
            try:
                streamlit_process.wait(timeout=5)
            except subprocess.TimeoutExpired:
                print("   Force killing process...")
                streamlit_process.kill()

    atexit.register(cleanup)

    try:
        if open_browser:
            def open_browser_delayed():
                time.sleep(3)  # Wait for server to start accepting connections
                try:
                    webbrowser.open(f"http://localhost:{port}")
                except webbrowser.Error as e:
                    logger.warning(f"Failed to open browser: {e}")

            import threading
            browser_thread = threading.Thread(target=open_browser_delayed, daemon=True)
            browser_thread.start()

        streamlit_process = subprocess.Popen(cmd)
        streamlit_process.wait()
        return True

    except KeyboardInterrupt:
        print("\n\n✅ Dashboard stopped by user.")
        cleanup()
        return True
    except FileNotFoundError:
        print("\n❌ Streamlit not found. Install with: pip install streamlit plotly")
        return False
    except OSError as e:
        print(f"\n❌ Error launching dashboard: {e}")
        logger.error("Dashboard launch failed", exc_info=True)
        cleanup()
        return False


def main(argv=None):
    """
    Top-level entry point: parse CLI args and dispatch to the requested mode.

    Execution modes:
        --health-check -> run diagnostics, print report, exit
        --no-gui       -> print a dataset summary, exit
        (default)      -> launch the Streamlit dashboard
    """
    args = parse_args(argv)
    setup_logging(verbose=args.verbose)

    try:
        source = resolve_data_source(args.data)
    except ValueError as e:
        print(f"❌ {e}")
        sys.exit(2)

    if args.health_check:
        success = health_check(source)
        sys.exit(0 if success else 1)

    try:
        if args.no_gui:
            if not print_summary(source):
                sys.exit(1)
        else:
            if not launch_dashboard(source, port=args.port, open_browser=not args.no_browser):
                sys.exit(1)
    except KeyboardInterrupt:
        print("\n\n\U0001f44b Cancelled by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
