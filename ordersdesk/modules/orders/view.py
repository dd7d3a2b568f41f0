"""
Order View State
================

Immutable view state, the reducer that applies operator intents to it, and
`derive_view`, the single pass that turns the raw order list plus a state into
everything the order table shows.

Intents are plain dicts so they can come straight from a JSON request body:

    {'type': 'set_query', 'query': 'hanoi'}
    {'type': 'set_filter', 'name': 'status', 'value': 'Đã thanh toán'}
    {'type': 'set_filters', 'filters': {'start_date': '2024-03-01', 'end_date': '2024-03-31'}}
    {'type': 'reset_filters'}
    {'type': 'sort', 'key': 'totalAmt'}
    {'type': 'set_page', 'page': 3}
    {'type': 'set_page_size', 'page_size': 25}
"""

from dataclasses import dataclass, field, replace
from typing import List, Mapping, Sequence

from .aggregates import OrderTotals, compute_totals, order_amount
from .filters import FilterParams, DateRangeError, FILTER_FIELDS, filter_orders, validate_date_range
from .formatting import format_vnd
from .pagination import PageState, clamp_page, display_range, page_window, paginate, total_pages, validate_page_size
from .records import buyer_name, format_created_at, product_display_name, resolve
from .sorting import SortConfig, sort_orders

FILTER_INTENTS = ('set_filter', 'set_filters', 'reset_filters')


@dataclass(frozen=True)
class ViewState:
    filters: FilterParams = field(default_factory=FilterParams)
    query: str = ''
    sort: SortConfig = field(default_factory=SortConfig)
    pagination: PageState = field(default_factory=PageState)
    date_error: str = ''

    def to_dict(self) -> dict:
        return {
            'filters': self.filters.to_dict(),
            'query': self.query,
            'sort': self.sort.to_dict(),
            'pagination': self.pagination.to_dict(),
            'date_error': self.date_error,
        }


def _first_page(state: ViewState) -> PageState:
    return replace(state.pagination, page=1)


def _apply_filters(state: ViewState, values: Mapping) -> ViewState:
    filters = state.filters
    for name, value in values.items():
        filters = filters.with_value(name, value)
    try:
        validate_date_range(filters)
    except DateRangeError as e:
        # Rejected pair: keep the previous filters, only surface the message
        return replace(state, date_error=str(e))
    return replace(state, filters=filters, date_error='', pagination=_first_page(state))


def reduce_view_state(state: ViewState, action: Mapping) -> ViewState:
    """Return the state after `action`; `state` itself is never modified.

    Raises ValueError for unknown intents or invalid values. A start date
    after the end date is not an exception: the filters stay as they were and
    `date_error` carries the message.
    """
    kind = action.get('type')

    if kind == 'set_query':
        return replace(state, query=str(action.get('query') or ''), pagination=_first_page(state))

    if kind == 'set_filter':
        name = action.get('name')
        if name not in FILTER_FIELDS:
            raise ValueError(f"Unknown filter: {name}")
        return _apply_filters(state, {name: action.get('value')})

    if kind == 'set_filters':
        values = action.get('filters') or {}
        unknown = [name for name in values if name not in FILTER_FIELDS]
        if unknown:
            raise ValueError(f"Unknown filter: {', '.join(unknown)}")
        return _apply_filters(state, values)

    if kind == 'reset_filters':
        return replace(state, filters=FilterParams(), query='', date_error='', pagination=_first_page(state))

    if kind == 'sort':
        key = action.get('key')
        if not key:
            raise ValueError("Sort key required")
        return replace(state, sort=state.sort.toggled(key))

    if kind == 'set_page':
        try:
            page = int(action.get('page'))
        except (TypeError, ValueError):
            raise ValueError("Page must be a number")
        return replace(state, pagination=replace(state.pagination, page=page))

    if kind == 'set_page_size':
        try:
            size = validate_page_size(action.get('page_size'))
        except (TypeError, ValueError) as e:
            raise ValueError(str(e))
        return replace(state, pagination=PageState(page=1, page_size=size))

    raise ValueError(f"Unknown action: {kind}")


def filters_changed(before: ViewState, after: ViewState) -> bool:
    """True when the order service needs to be asked again"""
    return before.filters != after.filters


# ---------------------------------------------------------------------------
# Derivation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class OrderView:
    """Everything the order table renders for one state"""
    orders: List[Mapping]
    visible: List[Mapping]
    page: int
    page_size: int
    total_pages: int
    pages: list
    totals: OrderTotals
    first_row: int
    last_row: int
    raw_count: int

    @property
    def filtered_count(self) -> int:
        return len(self.orders)

    def to_dict(self) -> dict:
        return {
            'orders': [order_row(order) for order in self.visible],
            'page': self.page,
            'page_size': self.page_size,
            'total_pages': self.total_pages,
            'pages': self.pages,
            'first_row': self.first_row,
            'last_row': self.last_row,
            'filtered_count': self.filtered_count,
            'raw_count': self.raw_count,
            'order_count': self.totals.order_count,
            'total_revenue': self.totals.total_revenue,
            'total_revenue_display': format_vnd(self.totals.total_revenue),
        }


def order_row(order: Mapping) -> dict:
    """Table row: the record as received plus the display values"""
    amount = order_amount(order)
    return {
        'order': order,
        'order_id': resolve(order, 'orderId'),
        'customer_name': buyer_name(order),
        'product_name': product_display_name(order),
        'amount_display': format_vnd(amount),
        'status': resolve(order, 'payment_status', ''),
        'created_at_display': format_created_at(order),
    }


def filter_and_sort(raw: Sequence[Mapping], state: ViewState, tz=None) -> List[Mapping]:
    """The filtered-and-sorted list exports and totals are built from"""
    return sort_orders(filter_orders(raw, state.filters, state.query, tz), state.sort, tz)


def derive_view(raw: Sequence[Mapping], state: ViewState, tz=None) -> OrderView:
    orders = filter_and_sort(raw, state, tz)
    size = state.pagination.page_size
    pages = total_pages(len(orders), size)
    page = clamp_page(state.pagination.page, pages)
    first_row, last_row = display_range(len(orders), page, size)

    return OrderView(
        orders=orders,
        visible=paginate(orders, page, size),
        page=page,
        page_size=size,
        total_pages=pages,
        pages=page_window(page, pages),
        totals=compute_totals(orders),
        first_row=first_row,
        last_row=last_row,
        raw_count=len(raw),
    )
