"""
Unit tests for kpi_dashboard.formula

Tests placeholder resolution, operator precedence, and that anything
outside the arithmetic grammar evaluates to 0 instead of executing.
"""

import unittest

from kpi_dashboard.formula import (
    FIELD_GOALS,
    FIELD_PROGRESS,
    evaluate_formula,
    formula_dependencies,
    formula_series,
    tokenize,
)

from tests.fixtures.sample_data import make_indicator


class TestEvaluateFormula(unittest.TestCase):
    """Test suite for formula evaluation."""

    def setUp(self):
        self.items = [
            make_indicator(101, "K1", progress=[10, 20], goals=[10, 10]),
            make_indicator(102, "K2", progress=[5, 5], goals=[5, 5]),
        ]

    def test_sums_two_indicators(self):
        self.assertEqual(evaluate_formula("{id:101} + {id:102}", self.items, 0), 15)

    def test_missing_indicator_is_zero(self):
        self.assertEqual(evaluate_formula("{id:999} + 10", self.items, 0), 10)

    def test_goals_field(self):
        self.assertEqual(evaluate_formula("{id:101} * 2", self.items, 1, FIELD_GOALS), 20)

    def test_empty_slot_is_zero(self):
        self.assertEqual(evaluate_formula("{id:101} + 1", self.items, 7), 1)

    def test_operator_precedence(self):
        self.assertEqual(evaluate_formula("2 + 3 * 4", [], 0), 14)
        self.assertEqual(evaluate_formula("(2 + 3) * 4", [], 0), 20)
        self.assertEqual(evaluate_formula("10 / 4", [], 0), 2.5)
        self.assertEqual(evaluate_formula("10 - 4 - 3", [], 0), 3)

    def test_unary_minus(self):
        self.assertEqual(evaluate_formula("-{id:102} + 1", self.items, 0), -4)
        self.assertEqual(evaluate_formula("2 * -(1 + 1)", [], 0), -4)

    def test_decimals(self):
        self.assertAlmostEqual(evaluate_formula("0.5 + .25", [], 0), 0.75)

    def test_division_by_zero_is_zero(self):
        self.assertEqual(evaluate_formula("{id:101} / 0", self.items, 0), 0)
        self.assertEqual(evaluate_formula("{id:101} / ({id:102} - 5)", self.items, 0), 0)

    def test_unsafe_expressions_are_zero(self):
        for formula in (
            "__import__('os').system('echo hacked')",
            "{id:101} + abs(1)",
            "2 ** 3",
            "1e3",
            "{id:101}; 1",
        ):
            with self.subTest(formula=formula):
                with self.assertLogs("kpi_dashboard.formula", level="WARNING"):
                    self.assertEqual(evaluate_formula(formula, self.items, 0), 0)

    def test_malformed_expressions_are_zero(self):
        for formula in ("(1 + 2", "1 +", ")", "1 2", "()"):
            with self.subTest(formula=formula):
                self.assertEqual(evaluate_formula(formula, [], 0), 0)

    def test_empty_formula(self):
        self.assertEqual(evaluate_formula("", self.items, 0), 0)
        self.assertEqual(evaluate_formula(None, self.items, 0), 0)

    def test_deep_nesting_is_zero(self):
        formula = "(" * 5000 + "1" + ")" * 5000
        self.assertEqual(evaluate_formula(formula, [], 0), 0)

    def test_series_per_month(self):
        series = formula_series("{id:101} + {id:102}", self.items, 3, FIELD_PROGRESS)
        self.assertEqual(series, [15, 25, 0])


class TestFormulaHelpers(unittest.TestCase):

    def test_dependencies(self):
        self.assertEqual(formula_dependencies("({id:1} + {id:2}) / {id:1}"), ["1", "2"])
        self.assertEqual(formula_dependencies(None), [])

    def test_tokenize(self):
        self.assertEqual(
            tokenize("({id:7} + 2.5)"),
            [("op", "("), ("ref", "7"), ("op", "+"), ("num", "2.5"), ("op", ")")],
        )


if __name__ == '__main__':
    unittest.main()
