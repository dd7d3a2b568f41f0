"""
Order Filters
=============

Status, date-range and free-text filtering over an in-memory order list.
Filtering never re-orders records and never copies them.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, date, time
from typing import Any, Iterable, List, Mapping, Optional, Tuple

from ordersdesk.core.logging_service import db_log
from .constants import DATE_RANGE_ERROR
from .records import resolve, mobile_numbers, product_search_fields, created_at, store_timezone

logger = logging.getLogger(__name__)

FILTER_FIELDS = ('status', 'start_date', 'end_date')


class DateRangeError(ValueError):
    """Start date falls after end date"""

    def __init__(self, message=DATE_RANGE_ERROR):
        super().__init__(message)


@dataclass(frozen=True)
class FilterParams:
    status: str = ''
    start_date: str = ''
    end_date: str = ''

    def with_value(self, name: str, value: Any) -> 'FilterParams':
        if name not in FILTER_FIELDS:
            raise KeyError(f"Unknown filter: {name}")
        return replace(self, **{name: str(value).strip() if value else ''})

    def to_query(self) -> dict:
        """Parameters as the order service expects them"""
        params = {
            'status': self.status,
            'startDate': self.start_date,
            'endDate': self.end_date,
        }
        return {k: v for k, v in params.items() if v}

    def to_dict(self) -> dict:
        return {'status': self.status, 'start_date': self.start_date, 'end_date': self.end_date}


def parse_day(value: Any) -> Optional[date]:
    """'YYYY-MM-DD' (or a date) to a date; empty means unset"""
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip()[:10])


def day_bounds(start: Optional[date], end: Optional[date], tz=None) -> Tuple[Optional[datetime], Optional[datetime]]:
    """Inclusive instants covering the whole of each selected day"""
    tz = tz or store_timezone()
    lower = datetime.combine(start, time.min, tzinfo=tz) if start else None
    upper = datetime.combine(end, time.max, tzinfo=tz) if end else None
    return lower, upper


def validate_date_range(params: FilterParams) -> None:
    """Raise DateRangeError when both dates are set and start > end.

    Dates that do not parse are left for the filter stage to deal with.
    """
    if not (params.start_date and params.end_date):
        return
    try:
        start = parse_day(params.start_date)
        end = parse_day(params.end_date)
    except ValueError:
        return
    if start > end:
        raise DateRangeError()


def search_fields(record: Mapping) -> List[Any]:
    """Every value a free-text query is matched against, absent ones dropped"""
    fields = [
        resolve(record, 'orderId'),
        resolve(record, 'userId.name'),
        resolve(record, 'userId.email'),
        *mobile_numbers(record, 'userId.mobile'),
        *mobile_numbers(record, 'delivery_address.mobile'),
        resolve(record, 'payment_status'),
        resolve(record, 'delivery_address.city'),
        resolve(record, 'delivery_address.district'),
        resolve(record, 'delivery_address.ward'),
        resolve(record, 'delivery_address.address'),
        *product_search_fields(record),
    ]
    return [field for field in fields if field is not None and field != '']


def normalize_query(query: Optional[str]) -> str:
    return (query or '').strip().lower()


def matches_query(record: Mapping, needle: str) -> bool:
    """`needle` must already be normalized"""
    return any(needle in str(field).lower() for field in search_fields(record))


def _created_or_none(record: Mapping, tz) -> Optional[datetime]:
    """createdAt as an instant, or None when missing or unparseable"""
    try:
        return created_at(record, tz)
    except (ValueError, TypeError, OverflowError):
        return None


def _within(instant: Optional[datetime], lower: Optional[datetime], upper: Optional[datetime]) -> bool:
    if instant is None:
        return False
    if lower and instant < lower:
        return False
    if upper and instant > upper:
        return False
    return True


def _apply_filters(orders: List[Mapping], params: FilterParams, query: str, tz) -> List[Mapping]:
    result = list(orders)

    if params.status:
        result = [o for o in result if resolve(o, 'payment_status') == params.status]

    start = parse_day(params.start_date)
    end = parse_day(params.end_date)
    if start and end and start > end:
        logger.warning(f"Ignoring inverted date range {start} > {end}")
    else:
        lower, upper = day_bounds(start, end, tz)
        if lower or upper:
            result = [o for o in result if _within(_created_or_none(o, tz), lower, upper)]

    needle = normalize_query(query)
    if needle:
        result = [o for o in result if matches_query(o, needle)]

    return result


def filter_orders(orders: Iterable[Mapping], params: Optional[FilterParams] = None,
                  query: Optional[str] = '', tz=None) -> List[Mapping]:
    """Apply status, date range and search to `orders`.

    Records whose createdAt cannot be parsed never match a date bound. On
    any other error (a malformed filter date) the full, unfiltered list is
    returned and the failure is logged.
    """
    orders = list(orders)
    params = params or FilterParams()
    tz = tz or store_timezone()
    try:
        return _apply_filters(orders, params, query, tz)
    except Exception as e:
        logger.error(f"Error filtering orders: {e}")
        db_log('error', 'orders', 'Error filtering orders, showing unfiltered list', {
            'error': str(e),
            'filters': params.to_dict(),
            'query': query,
        })
        return orders
