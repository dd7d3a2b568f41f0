"""
Order Sorting
=============

Single-key, stable sorting of order lists. Keys may be dotted paths
('userId.name'). createdAt is compared as an instant and totalAmt reads
numeric strings as numbers; every other key uses a type-ranked order so
mixed numbers, strings and missing values never raise.
"""

from dataclasses import dataclass
from numbers import Number
from typing import Any, Iterable, List, Mapping

from .aggregates import numeric_amount
from .constants import AMOUNT_KEY, CREATED_AT_KEY, DEFAULT_SORT_KEY, DEFAULT_SORT_DIRECTION
from .records import resolve, parse_timestamp, store_timezone

ASC = 'asc'
DESC = 'desc'


@dataclass(frozen=True)
class SortConfig:
    key: str = DEFAULT_SORT_KEY
    direction: str = DEFAULT_SORT_DIRECTION

    def toggled(self, key: str) -> 'SortConfig':
        """Same key flips asc -> desc (anything else goes back to asc); a new key starts ascending"""
        if key == self.key and self.direction == ASC:
            return SortConfig(key, DESC)
        return SortConfig(key, ASC)

    def to_dict(self) -> dict:
        return {'key': self.key, 'direction': self.direction}


def _value_rank(value: Any) -> tuple:
    # missing < numbers < strings < everything else
    if value is None or value == '':
        return (0, 0)
    if isinstance(value, bool):
        return (1, int(value))
    if isinstance(value, Number):
        return (1, value)
    if isinstance(value, str):
        return (2, value)
    return (3, str(value))


def _amount_rank(value: Any) -> tuple:
    # numeric strings rank as the numbers they total as
    amount = numeric_amount(value)
    if amount is None:
        return _value_rank(value)
    return (1, amount)


def _timestamp_rank(value: Any, tz) -> tuple:
    try:
        return (1, parse_timestamp(value, tz).timestamp())
    except (ValueError, TypeError, OverflowError):
        return (0, 0)


def sort_key(key: str, tz=None):
    """Key function for `sorted` on the given (possibly dotted) field"""
    if key == CREATED_AT_KEY:
        tz = tz or store_timezone()
        return lambda record: _timestamp_rank(resolve(record, key), tz)
    if key == AMOUNT_KEY:
        return lambda record: _amount_rank(resolve(record, key))
    return lambda record: _value_rank(resolve(record, key))


def sort_orders(orders: Iterable[Mapping], config: SortConfig = None, tz=None) -> List[Mapping]:
    """Return a new list ordered by `config`; ties keep their input order in both directions"""
    config = config or SortConfig()
    if not config.key:
        return list(orders)
    return sorted(orders, key=sort_key(config.key, tz), reverse=config.direction == DESC)
