"""
Emission Atlas Test Suite

This package contains unit tests, end-to-end controller scenarios, and
fixtures for the Emission Atlas dashboard.

Run tests with:
    pytest tests/
    pytest tests/test_aggregations.py -v
    pytest tests/test_controller.py::TestEndToEndScenarios -v
"""
