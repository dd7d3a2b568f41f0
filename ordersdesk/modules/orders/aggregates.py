"""
Order Aggregates
================

Totals over the filtered-and-sorted list, used by the summary cards and the
PDF footer.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from numbers import Number
from typing import Any, Iterable, Mapping

from .records import resolve


@dataclass(frozen=True)
class OrderTotals:
    order_count: int = 0
    total_revenue: Any = 0

    def to_dict(self) -> dict:
        return {'order_count': self.order_count, 'total_revenue': self.total_revenue}


def numeric_amount(amount):
    """A number or numeric string as int/float; None for anything else"""
    if isinstance(amount, bool):
        return None
    if isinstance(amount, Number):
        return amount
    if isinstance(amount, str):
        try:
            value = Decimal(amount.strip())
        except InvalidOperation:
            return None
        if not value.is_finite():
            return None
        return int(value) if value == value.to_integral_value() else float(value)
    return None


def order_amount(record: Mapping):
    """totalAmt as a number; missing or unusable amounts count as 0"""
    amount = numeric_amount(resolve(record, 'totalAmt', 0))
    return 0 if amount is None else amount


def compute_totals(orders: Iterable[Mapping]) -> OrderTotals:
    count = 0
    revenue = 0
    for order in orders:
        count += 1
        revenue += order_amount(order)
    return OrderTotals(order_count=count, total_revenue=revenue)
