"""
Order Record Accessors
======================

Safe lookups over raw order records as returned by the order service.

Records are plain dicts and are never copied or modified here. Any segment of
a dotted path may be missing, None, or of the wrong type; lookups fall back to
a default instead of raising.
"""

import re
from dataclasses import dataclass
from datetime import datetime, date, timezone
from typing import Any, Optional, List, Mapping, Sequence, Union
from zoneinfo import ZoneInfo

from ordersdesk.core.config import get_setting
from .constants import GUEST_PLACEHOLDER

_WHITESPACE = re.compile(r'\s+')


def resolve(record: Any, path: str, default: Any = None) -> Any:
    """Return the value at a dotted path such as 'userId.name'.

    Integer segments index into lists ('products.0.sku'). Returns `default`
    when any segment is absent or when an intermediate value is None.
    """
    current = record
    for segment in path.split('.'):
        if current is None:
            return default
        if isinstance(current, Mapping):
            if segment not in current:
                return default
            current = current[segment]
        elif isinstance(current, Sequence) and not isinstance(current, (str, bytes)):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError):
                return default
        else:
            return default
    return default if current is None else current


# ---------------------------------------------------------------------------
# Product shapes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ItemizedProducts:
    """Order carrying a `products` list"""
    products: tuple


@dataclass(frozen=True)
class SingleProductDetail:
    """Order carrying one flattened `product_details` object"""
    detail: Mapping


@dataclass(frozen=True)
class NoProducts:
    pass


ProductShape = Union[ItemizedProducts, SingleProductDetail, NoProducts]


def classify_products(record: Mapping) -> ProductShape:
    """Decide which product representation an order uses.

    A non-empty `products` list wins; otherwise a `product_details` object.
    """
    products = resolve(record, 'products')
    if isinstance(products, Sequence) and not isinstance(products, (str, bytes)) and len(products) > 0:
        return ItemizedProducts(tuple(p for p in products if isinstance(p, Mapping)))

    detail = resolve(record, 'product_details')
    if isinstance(detail, Mapping):
        return SingleProductDetail(detail)

    return NoProducts()


def category_name(category: Any) -> Optional[str]:
    """Categories arrive either as {'name': ...} or as a bare string"""
    if isinstance(category, Mapping):
        return resolve(category, 'name')
    return category


def product_search_fields(record: Mapping) -> List[Any]:
    shape = classify_products(record)
    if isinstance(shape, ItemizedProducts):
        fields = []
        for product in shape.products:
            fields.extend([
                resolve(product, 'name'),
                resolve(product, 'sku'),
                resolve(product, 'brand'),
                category_name(resolve(product, 'category')),
            ])
        return fields
    if isinstance(shape, SingleProductDetail):
        return [
            resolve(shape.detail, 'name'),
            resolve(shape.detail, 'brand'),
            category_name(resolve(shape.detail, 'category')),
        ]
    return []


def product_display_name(record: Mapping) -> str:
    """Name shown in table rows and exports for either product shape"""
    shape = classify_products(record)
    if isinstance(shape, ItemizedProducts):
        names = [str(resolve(p, 'name')) for p in shape.products if resolve(p, 'name')]
        return ', '.join(names)
    if isinstance(shape, SingleProductDetail):
        return str(resolve(shape.detail, 'name', ''))
    return ''


# ---------------------------------------------------------------------------
# Buyer / address
# ---------------------------------------------------------------------------

def buyer_name(record: Mapping) -> str:
    return resolve(record, 'userId.name') or GUEST_PLACEHOLDER


def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v for v in value if v is not None]
    return [value]


def mobile_numbers(record: Mapping, path: str) -> List[Any]:
    """Mobile numbers at `path` (one value or a list), raw and with whitespace removed"""
    numbers = []
    for mobile in _as_list(resolve(record, path)):
        numbers.append(mobile)
        numbers.append(_WHITESPACE.sub('', str(mobile)))
    return numbers


def first_mobile(record: Mapping) -> str:
    mobiles = _as_list(resolve(record, 'userId.mobile'))
    return str(mobiles[0]) if mobiles else ''


# ---------------------------------------------------------------------------
# Timestamps
# ---------------------------------------------------------------------------

def store_timezone():
    return ZoneInfo(get_setting('ORDERSDESK_TIMEZONE', 'Asia/Ho_Chi_Minh'))


def parse_timestamp(value: Any, tz=None) -> datetime:
    """Parse a createdAt value into an aware datetime.

    Accepts datetimes, dates, ISO-8601 strings (with 'Z' or an offset) and
    epoch milliseconds. Naive values are taken to be in the store timezone.
    Raises ValueError for anything else.
    """
    tz = tz or store_timezone()

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    elif isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith('Z') or text.endswith('z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


def created_at(record: Mapping, tz=None) -> datetime:
    return parse_timestamp(resolve(record, 'createdAt'), tz)


def format_created_at(record: Mapping, fmt: str = '%d/%m/%Y %H:%M', tz=None) -> str:
    """createdAt rendered in the store timezone, or '' when it cannot be parsed"""
    tz = tz or store_timezone()
    try:
        return created_at(record, tz).astimezone(tz).strftime(fmt)
    except (ValueError, TypeError, OverflowError):
        return ''
