"""
Unit tests for emission_atlas.analysis.aggregations

Covers the derived views behind the three charts:
- Year domain
- Country ordering (including ties)
- Color domain and the empty-dataset signal
- Source composition and the degenerate case
- Country time series
"""

import math
import unittest

from emission_atlas.analysis.aggregations import (
    compute_color_domain,
    compute_composition,
    compute_country_order,
    compute_time_series,
    compute_year_domain,
    records_to_frame,
)
from emission_atlas.core.errors import EmptyDatasetError
from emission_atlas.models.data_models import (
    CompositionStatus,
    EmissionRecord,
    SeriesPoint,
)
from tests.fixtures.sample_data import (
    create_sample_rows,
    create_tied_rows,
    create_usa_2020_row,
)


class TestYearDomain(unittest.TestCase):
    """Test suite for compute_year_domain."""

    def test_sorted_distinct_in_window(self):
        """Years are distinct, ascending and limited to 2003-2023."""
        years = compute_year_domain(create_sample_rows())
        self.assertEqual(years, [2003, 2004])

    def test_excludes_out_of_range_years(self):
        """Years before 2003 and after 2023 are dropped."""
        rows = [
            EmissionRecord("A", 1999),
            EmissionRecord("A", 2003),
            EmissionRecord("A", 2023),
            EmissionRecord("A", 2024),
        ]
        self.assertEqual(compute_year_domain(rows), [2003, 2023])

    def test_custom_bounds(self):
        """Explicit bounds override the defaults."""
        rows = [EmissionRecord("A", y) for y in (2001, 2002, 2010)]
        self.assertEqual(compute_year_domain(rows, min_year=2000, max_year=2005), [2001, 2002])

    def test_empty(self):
        self.assertEqual(compute_year_domain([]), [])


class TestCountryOrder(unittest.TestCase):
    """Test suite for compute_country_order."""

    def test_descending_by_cumulative_total(self):
        """China (240) > USA (118) > India (42)."""
        self.assertEqual(compute_country_order(create_sample_rows()), ["China", "USA", "India"])

    def test_is_permutation_of_countries(self):
        rows = create_sample_rows()
        order = compute_country_order(rows)
        self.assertEqual(sorted(order), sorted({r.Country for r in rows}))
        self.assertEqual(len(order), len(set(order)))

    def test_ties_keep_first_appearance(self):
        """Equal totals preserve the order countries first appear in."""
        self.assertEqual(compute_country_order(create_tied_rows()), ["Brazil", "Mexico"])

    def test_ties_follow_input_order(self):
        """Moving Mexico's rows first flips the tie order."""
        tied = create_tied_rows()
        rows = (tied[1], tied[2], tied[0], tied[3])
        self.assertEqual(compute_country_order(rows), ["Mexico", "Brazil"])

    def test_includes_years_outside_window(self):
        """Totals sum over all years, not only the heatmap window."""
        rows = [
            EmissionRecord("Old", 1990, Total=500),
            EmissionRecord("Old", 2010, Total=1),
            EmissionRecord("New", 2010, Total=100),
        ]
        self.assertEqual(compute_country_order(rows), ["Old", "New"])

    def test_empty(self):
        self.assertEqual(compute_country_order([]), [])


class TestColorDomain(unittest.TestCase):
    """Test suite for compute_color_domain."""

    def test_extent_of_metric(self):
        domain = compute_color_domain(create_sample_rows(), "Population")
        self.assertEqual(domain.min_value, 288)
        self.assertEqual(domain.max_value, 1300)
        self.assertEqual(domain.as_list(), [288, 1300])

    def test_single_row(self):
        domain = compute_color_domain([create_usa_2020_row()], "GDP")
        self.assertEqual((domain.min_value, domain.max_value), (20, 20))

    def test_empty_dataset_signals(self):
        """An empty row sequence raises EmptyDatasetError, not a bogus range."""
        with self.assertRaises(EmptyDatasetError):
            compute_color_domain([], "Total")

    def test_unknown_metric(self):
        with self.assertRaises(ValueError):
            compute_color_domain(create_sample_rows(), "Country")


class TestComposition(unittest.TestCase):
    """Test suite for compute_composition."""

    def test_usa_2020_percentages(self):
        view = compute_composition(create_usa_2020_row())
        self.assertEqual(view.status, CompositionStatus.OK)
        self.assertEqual([s.label for s in view.slices],
                         ["Coal", "Oil", "Gas", "Cement", "Flaring", "Other"])
        for got, expected in zip([s.percentage for s in view.slices], [40, 30, 20, 5, 3, 2]):
            self.assertAlmostEqual(got, expected, places=2)
        self.assertEqual(view.country, "USA")
        self.assertEqual(view.year, 2020)

    def test_percentages_sum_to_100(self):
        """Uneven splits still sum to 100 within 0.01."""
        rows = [
            EmissionRecord("A", 2010, Coal=1, Oil=1, Gas=1),
            EmissionRecord("B", 2010, Coal=1, Oil=1, Gas=1, Cement=1, Flaring=1, Other=1),
            EmissionRecord("C", 2010, Coal=0.001, Oil=123.456, Gas=7.89, Cement=2, Flaring=0.3, Other=11),
        ]
        for row in rows:
            with self.subTest(country=row.Country):
                view = compute_composition(row)
                total = sum(s.percentage for s in view.slices)
                self.assertLessEqual(abs(total - 100), 0.01)

    def test_percentages_have_two_decimals(self):
        view = compute_composition(EmissionRecord("A", 2010, Coal=1, Oil=2))
        for s in view.slices:
            self.assertEqual(round(s.percentage, 2), s.percentage)

    def test_degenerate_composition(self):
        """All-zero sources give DEGENERATE and no NaN values."""
        view = compute_composition(EmissionRecord("Z", 2010, Total=5))
        self.assertTrue(view.is_degenerate)
        self.assertEqual(len(view.slices), 6)
        for s in view.slices:
            self.assertIsNone(s.percentage)
            self.assertFalse(math.isnan(s.value))

    def test_values_carried_through(self):
        view = compute_composition(create_usa_2020_row())
        self.assertEqual([s.value for s in view.slices], [40, 30, 20, 5, 3, 2])
        self.assertEqual(view.total, 100)

    def test_non_finite_source_values_count_as_zero(self):
        """NaN and inf sources are treated as 0 rather than failing."""
        for bad in (float('nan'), float('inf')):
            with self.subTest(coal=bad):
                view = compute_composition(EmissionRecord("A", 2010, Coal=bad, Oil=1))
                self.assertEqual(view.status, CompositionStatus.OK)
                self.assertEqual(view.slices[0].value, 0.0)
                self.assertEqual(view.slices[0].percentage, 0.0)
                self.assertEqual(view.slices[1].percentage, 100.0)

    def test_equal_thirds_apportioned(self):
        """A 1:1:1 split gives the spare hundredth to the first source."""
        view = compute_composition(EmissionRecord("A", 2010, Coal=1, Oil=1, Gas=1))
        self.assertEqual([s.percentage for s in view.slices], [33.34, 33.33, 33.33, 0.0, 0.0, 0.0])


class TestTimeSeries(unittest.TestCase):
    """Test suite for compute_time_series."""

    def test_filters_and_sorts(self):
        series = compute_time_series(create_sample_rows(), "China")
        self.assertEqual([p.year for p in series], [2002, 2003, 2004])
        self.assertEqual(series[0], SeriesPoint(year=2002, emission_value=70, gdp_value=14))

    def test_restricted_to_country(self):
        rows = create_sample_rows()
        series = compute_time_series(rows, "USA")
        expected_years = sorted(r.Year for r in rows if r.Country == "USA")
        self.assertEqual([p.year for p in series], expected_years)

    def test_idempotent(self):
        rows = create_sample_rows()
        self.assertEqual(compute_time_series(rows, "India"), compute_time_series(rows, "India"))

    def test_unknown_country_is_empty(self):
        self.assertEqual(compute_time_series(create_sample_rows(), "Atlantis"), [])


class TestRecordsToFrame(unittest.TestCase):
    """Test suite for records_to_frame."""

    def test_columns_present_when_empty(self):
        df = records_to_frame([])
        self.assertTrue(df.empty)
        for col in ("Country", "Year", "Total", "Coal", "Other", "GDP"):
            self.assertIn(col, df.columns)

    def test_row_order_preserved(self):
        rows = create_sample_rows()
        df = records_to_frame(rows)
        self.assertEqual(df["Country"].tolist(), [r.Country for r in rows])


class TestEmissionRecord(unittest.TestCase):
    """Test suite for EmissionRecord field coercion."""

    def test_constructor_coerces_numbers(self):
        row = EmissionRecord("A", 2010, Total=float('inf'), GDP=-3, Coal=float('nan'), Oil="1,250")
        self.assertEqual(row.Total, 0.0)
        self.assertEqual(row.GDP, 0.0)
        self.assertEqual(row.Coal, 0.0)
        self.assertEqual(row.Oil, 1250.0)

    def test_from_mapping(self):
        row = EmissionRecord.from_mapping({"Country": " USA ", "Year": "2020", "Coal": "n/a", "Gas": 5})
        self.assertEqual(row.key, ("USA", 2020))
        self.assertEqual(row.Coal, 0.0)
        self.assertEqual(row.Gas, 5.0)


if __name__ == '__main__':
    unittest.main()
