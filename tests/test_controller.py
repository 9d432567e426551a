"""
Unit tests for emission_atlas.dashboard.controller

Covers the two state machines (dataset, selection), the props derived from
them, and end-to-end scenarios that drive the controller the way the
Streamlit page does.
"""

import unittest
from concurrent.futures import Future

from emission_atlas.core.errors import LoadFailure
from emission_atlas.dashboard.controller import DashboardController
from emission_atlas.data.loader import load_dataset_async
from emission_atlas.models.data_models import (
    DatasetLoaded,
    DatasetUnloaded,
    EmissionRecord,
    NoSelection,
    Selected,
    SeriesPoint,
)
from emission_atlas.visualization.charts import (
    chart_composition_pie,
    chart_country_timeline,
    chart_heatmap,
    build_heatmap_grid,
)
from tests.fixtures.sample_data import (
    create_sample_rows,
    create_tied_rows,
    create_usa_2020_row,
)


def _resolved(value=None, error=None):
    future = Future()
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(value)
    return future


class TestDatasetState(unittest.TestCase):
    """Test suite for dataset loading transitions."""

    def setUp(self):
        self.controller = DashboardController()

    def test_initial_state(self):
        self.assertIsInstance(self.controller.dataset, DatasetUnloaded)
        self.assertIsInstance(self.controller.selection, NoSelection)
        self.assertFalse(self.controller.is_loaded)
        self.assertEqual(self.controller.rows, ())
        self.assertIsNone(self.controller.load_error)

    def test_load_complete(self):
        rows = create_sample_rows()
        self.assertTrue(self.controller.on_load_complete(rows))
        self.assertEqual(self.controller.dataset, DatasetLoaded(rows=rows))
        self.assertTrue(self.controller.is_loaded)

    def test_load_happens_once(self):
        """A second completion is ignored and the first rows are kept."""
        rows = create_sample_rows()
        self.controller.on_load_complete(rows)
        self.assertFalse(self.controller.on_load_complete([create_usa_2020_row()]))
        self.assertEqual(self.controller.rows, rows)

    def test_rows_stored_as_tuple(self):
        self.controller.on_load_complete(list(create_sample_rows()))
        self.assertIsInstance(self.controller.rows, tuple)

    def test_load_failed(self):
        error = LoadFailure("network down", source="http://x")
        self.controller.on_load_failed(error)
        self.assertIsInstance(self.controller.dataset, DatasetUnloaded)
        self.assertIs(self.controller.load_error, error)

    def test_load_failed_wraps_other_errors(self):
        self.controller.on_load_failed(RuntimeError("boom"))
        self.assertIsInstance(self.controller.load_error, LoadFailure)
        self.assertIn("boom", str(self.controller.load_error))

    def test_failure_after_load_ignored(self):
        self.controller.on_load_complete(create_sample_rows())
        self.controller.on_load_failed(LoadFailure("late"))
        self.assertTrue(self.controller.is_loaded)
        self.assertIsNone(self.controller.load_error)

    def test_complete_load_success(self):
        rows = create_sample_rows()
        self.assertTrue(self.controller.complete_load(_resolved(rows)))
        self.assertEqual(self.controller.rows, rows)

    def test_complete_load_failure(self):
        self.assertFalse(self.controller.complete_load(_resolved(error=LoadFailure("bad csv"))))
        self.assertIsInstance(self.controller.dataset, DatasetUnloaded)
        self.assertEqual(str(self.controller.load_error), "bad csv")

    def test_complete_load_with_async_loader(self):
        rows = create_sample_rows()
        future = load_dataset_async("memory", fetch=lambda source: rows)
        self.assertTrue(self.controller.complete_load(future))
        self.assertEqual(self.controller.rows, rows)


class TestSelection(unittest.TestCase):
    """Test suite for selection transitions."""

    def setUp(self):
        self.rows = create_sample_rows()
        self.controller = DashboardController()
        self.controller.on_load_complete(self.rows)

    def test_select_row(self):
        self.assertTrue(self.controller.select(self.rows[1]))
        self.assertEqual(self.controller.selection, Selected(row=self.rows[1]))

    def test_reselect_replaces(self):
        self.controller.select(self.rows[0])
        self.controller.select(self.rows[3])
        self.assertEqual(self.controller.selection.row, self.rows[3])

    def test_select_unknown_row_ignored(self):
        self.controller.select(self.rows[0])
        stranger = EmissionRecord("Atlantis", 2010, Total=1)
        self.assertFalse(self.controller.select(stranger))
        self.assertEqual(self.controller.selection.row, self.rows[0])

    def test_select_before_load_ignored(self):
        controller = DashboardController()
        self.assertFalse(controller.select(self.rows[0]))
        self.assertIsInstance(controller.selection, NoSelection)

    def test_select_cell(self):
        self.assertTrue(self.controller.select_cell("India", 2004))
        self.assertEqual(self.controller.selection.row.key, ("India", 2004))

    def test_select_missing_cell(self):
        self.assertFalse(self.controller.select_cell("India", 2002))
        self.assertIsInstance(self.controller.selection, NoSelection)

    def test_reset_selection(self):
        self.controller.select(self.rows[0])
        self.controller.reset_selection()
        self.assertIsInstance(self.controller.selection, NoSelection)


class TestMetric(unittest.TestCase):
    """Test suite for the heatmap metric."""

    def test_default_metric(self):
        self.assertEqual(DashboardController().metric, "Population")

    def test_set_metric(self):
        controller = DashboardController()
        controller.set_metric("GDP")
        self.assertEqual(controller.metric, "GDP")
        self.assertEqual(controller.heatmap_props().metric, "GDP")

    def test_unsupported_metric(self):
        controller = DashboardController()
        with self.assertRaises(ValueError):
            controller.set_metric("Coal")
        self.assertEqual(controller.metric, "Population")

    def test_unsupported_initial_metric(self):
        with self.assertRaises(ValueError):
            DashboardController(metric="Country")


class TestProps(unittest.TestCase):
    """Test suite for derived chart props."""

    def setUp(self):
        self.rows = create_sample_rows()
        self.controller = DashboardController()

    def test_props_before_load(self):
        self.assertEqual(self.controller.heatmap_props().rows, ())
        self.assertIsNone(self.controller.pie_props().composition)
        self.assertIsNone(self.controller.line_props().country)
        self.assertEqual(self.controller.line_props().series, ())

    def test_props_without_selection(self):
        self.controller.on_load_complete(self.rows)
        self.assertEqual(self.controller.heatmap_props().rows, self.rows)
        self.assertIsNone(self.controller.pie_props().composition)

    def test_props_follow_selection(self):
        self.controller.on_load_complete(self.rows)
        self.controller.select_cell("USA", 2003)
        pie = self.controller.pie_props()
        self.assertEqual((pie.composition.country, pie.composition.year), ("USA", 2003))
        self.assertEqual(self.controller.line_props().country, "USA")

        self.controller.select_cell("China", 2004)
        line = self.controller.line_props()
        self.assertEqual(line.country, "China")
        self.assertEqual([p.year for p in line.series], [2002, 2003, 2004])


class TestEndToEndScenarios(unittest.TestCase):
    """Scenarios that drive the controller and render every chart."""

    def test_usa_2020_selection(self):
        """Selecting the only row yields 40/30/20/5/3/2 and a one-point series."""
        row = create_usa_2020_row()
        controller = DashboardController()
        controller.complete_load(_resolved((row,)))
        self.assertTrue(controller.select_cell("USA", 2020))

        composition = controller.pie_props().composition
        for got, expected in zip([s.percentage for s in composition.slices], [40, 30, 20, 5, 3, 2]):
            self.assertAlmostEqual(got, expected, places=2)

        line = controller.line_props()
        self.assertEqual(line.series, (SeriesPoint(year=2020, emission_value=100, gdp_value=20),))

        pie_fig = chart_composition_pie(controller.pie_props())
        self.assertEqual(len(pie_fig.data), 1)
        self.assertEqual(list(pie_fig.data[0].text), ["40.00%", "30.00%", "20.00%", "5.00%", "3.00%", "2.00%"])
        line_fig = chart_country_timeline(line)
        self.assertEqual(len(line_fig.data), 2)
        self.assertTrue(all('markers' in trace.mode for trace in line_fig.data))

    def test_empty_dataset(self):
        """An empty dataset loads, and the heatmap renders its empty state."""
        controller = DashboardController()
        controller.complete_load(_resolved(()))
        self.assertEqual(controller.dataset, DatasetLoaded(rows=()))

        fig = chart_heatmap(controller.heatmap_props())
        self.assertEqual(len(fig.data), 0)
        self.assertEqual(len(fig.layout.annotations), 1)

    def test_tied_countries_keep_order(self):
        controller = DashboardController(metric="Total")
        controller.on_load_complete(create_tied_rows())
        grid = build_heatmap_grid(controller.heatmap_props().rows, controller.metric)
        self.assertEqual(grid.countries, ("Brazil", "Mexico"))

    def test_click_then_metric_change_keeps_selection(self):
        controller = DashboardController()
        controller.on_load_complete(create_sample_rows())
        controller.select_cell("China", 2003)
        controller.set_metric("Total")
        self.assertEqual(controller.selection.row.key, ("China", 2003))
        self.assertEqual(controller.heatmap_props().metric, "Total")


if __name__ == '__main__':
    unittest.main()
