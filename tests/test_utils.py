"""
Unit tests for kpi_dashboard.utils
"""

import math
import unittest
from datetime import date

import numpy as np

from kpi_dashboard.utils import (
    normalise_group_name,
    normalise_name,
    normalise_series,
    resolve_today,
    round_half_up,
    safe_float,
    value_or_zero,
)


class TestSafeFloat(unittest.TestCase):
    """Test suite for safe_float."""

    def test_numbers_and_strings(self):
        self.assertEqual(safe_float(3), 3.0)
        self.assertEqual(safe_float(" 2.5 "), 2.5)
        self.assertEqual(safe_float("1,250"), 1250.0)
        self.assertEqual(safe_float("95%"), 95.0)
        self.assertEqual(safe_float(np.int64(4)), 4.0)

    def test_missing_values(self):
        for val in (None, "", "  ", "abc", float("nan"), math.inf, np.nan, True, [1]):
            with self.subTest(val=val):
                self.assertIsNone(safe_float(val))


class TestSeriesHelpers(unittest.TestCase):

    def test_value_or_zero(self):
        series = [1, None, "x", 4]
        self.assertEqual(value_or_zero(series, 0), 1.0)
        self.assertEqual(value_or_zero(series, 1), 0.0)
        self.assertEqual(value_or_zero(series, 2), 0.0)
        self.assertEqual(value_or_zero(series, 9), 0.0)
        self.assertEqual(value_or_zero(None, 0), 0.0)

    def test_normalise_series(self):
        self.assertEqual(normalise_series(["1", None], 3), [1.0, None, None])
        self.assertEqual(normalise_series([1, 2, 3, 4], 2), [1.0, 2.0])
        self.assertEqual(normalise_series(None, 2), [None, None])

    def test_normalise_series_non_list_is_empty(self):
        for series in (5, "12", {"a": 1}, 3.5):
            with self.subTest(series=series):
                self.assertEqual(normalise_series(series, 3), [None, None, None])


class TestRoundHalfUp(unittest.TestCase):

    def test_half_moves_away_from_zero(self):
        self.assertEqual(round_half_up(2.5, 0), 3.0)
        self.assertEqual(round_half_up(0.125, 2), 0.13)
        self.assertEqual(round_half_up(-2.5, 0), -3.0)
        self.assertEqual(round_half_up(66.66666, 1), 66.7)
        self.assertEqual(round_half_up(0.0, 2), 0.0)


class TestNames(unittest.TestCase):
    """Test suite for indicator and group name normalisation."""

    def test_normalise_name(self):
        self.assertEqual(normalise_name("  Sales "), "SALES")
        self.assertEqual(normalise_name(None), "")

    def test_group_prefixes_and_accents(self):
        self.assertEqual(normalise_group_name("Dirección Norte"), "NORTE")
        self.assertEqual(normalise_group_name("Direccion de  Ventas"), "VENTAS")
        self.assertEqual(normalise_group_name("zona   sur"), "SUR")
        self.assertEqual(normalise_group_name("Region West"), "WEST")
        self.assertEqual(normalise_group_name("Finance"), "FINANCE")

    def test_empty_group_is_general(self):
        self.assertEqual(normalise_group_name(None), "GENERAL")
        self.assertEqual(normalise_group_name("   "), "GENERAL")


class TestResolveToday(unittest.TestCase):

    def test_injected_date_wins(self):
        self.assertEqual(resolve_today(date(2025, 1, 1)), date(2025, 1, 1))
        self.assertIsInstance(resolve_today(None), date)


if __name__ == '__main__':
    unittest.main()
