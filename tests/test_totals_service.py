from __future__ import annotations

import unittest
from decimal import Decimal

from paintops.services.totals_service import (
    LineItem,
    compute_item_total,
    compute_totals,
    items_to_json,
    line_item_from_mapping,
    normalize_items,
    to_decimal,
)


class ToDecimalTests(unittest.TestCase):
    def test_parses_currency_formatted_strings(self) -> None:
        self.assertEqual(to_decimal('$1,200.50'), Decimal('1200.50'))
        self.assertEqual(to_decimal(' 42 '), Decimal('42'))

    def test_unparsable_values_fall_back_to_default(self) -> None:
        self.assertEqual(to_decimal('abc'), Decimal('0'))
        self.assertEqual(to_decimal(None), Decimal('0'))
        self.assertEqual(to_decimal(True), Decimal('0'))
        self.assertEqual(to_decimal(float('nan')), Decimal('0'))
        self.assertEqual(to_decimal('', default=Decimal('1')), Decimal('1'))


class ComputeTotalsTests(unittest.TestCase):
    def test_subtotal_and_global_discount(self) -> None:
        items = [
            {'quantity': 25, 'unit_price': 2, 'discount': 0},
            {'quantity': 5, 'unit_price': 10, 'discount': 5},
        ]
        totals = compute_totals(items, 10)
        self.assertEqual(totals.subtotal, Decimal('95.00'))
        self.assertEqual(totals.global_discount, Decimal('10.00'))
        self.assertEqual(totals.total, Decimal('85.00'))

    def test_total_never_goes_negative(self) -> None:
        totals = compute_totals([{'quantity': 1, 'unit_price': 20}], '500')
        self.assertEqual(totals.total, Decimal('0.00'))

    def test_recomputing_is_idempotent(self) -> None:
        items = normalize_items([{'quantity': '3', 'unit_price': '19.99', 'discount': '1.50'}])
        first = compute_totals(items, '2')
        second = compute_totals(normalize_items(items_to_json(items)), first.global_discount)
        self.assertEqual(first, second)

    def test_malformed_numbers_coerce_to_zero(self) -> None:
        item = line_item_from_mapping({'description': 'Primer', 'quantity': 'abc', 'unit_price': '12'})
        self.assertEqual(item.quantity, Decimal('0'))
        self.assertEqual(compute_item_total(item), Decimal('0.00'))

    def test_negative_inputs_are_clamped(self) -> None:
        item = line_item_from_mapping({'quantity': -2, 'unit_price': 10, 'discount': -5})
        self.assertEqual(item.quantity, Decimal('0'))
        self.assertEqual(item.discount, Decimal('0'))

    def test_purchase_order_rows_use_price_key(self) -> None:
        item = line_item_from_mapping({'description': 'Tape', 'quantity': 4, 'price': '2.25', 'unit': 'roll'})
        self.assertEqual(item.unit_price, Decimal('2.25'))
        self.assertEqual(item.total, Decimal('9.00'))
        self.assertEqual(item.unit, 'roll')

    def test_item_total_rounds_half_up_to_cents(self) -> None:
        item = LineItem(description='Caulk', quantity=Decimal('3'), unit_price=Decimal('0.335'))
        self.assertEqual(item.total, Decimal('1.01'))

    def test_to_json_serializes_decimals_as_strings(self) -> None:
        payload = LineItem(description='Roller', quantity=Decimal('2'), unit_price=Decimal('7.5')).to_json()
        self.assertEqual(
            payload,
            {'description': 'Roller', 'quantity': '2', 'unit_price': '7.50', 'discount': '0.00', 'total': '15.00'},
        )


if __name__ == '__main__':
    unittest.main()
