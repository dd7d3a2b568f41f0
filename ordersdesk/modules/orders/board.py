"""
Order Board
===========

Per-operator holder of the raw order list and the current ViewState.

The raw list is only ever replaced wholesale by a completed fetch, and only
by the most recently issued one: every fetch takes a generation token and a
result whose token is no longer current is dropped. Filtering, sorting and
paging are recomputed from (raw, state) on every read.
"""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, List, Mapping, Optional

from ordersdesk.core.logging_service import db_log, LoggingService
from .constants import STATUS_CANCELLED
from .exporters import ExportError, export_orders_xlsx, export_orders_pdf, render_print_bill
from .records import resolve
from .service import AuthenticationError, OrderServiceError
from .view import ViewState, OrderView, derive_view, filter_and_sort, filters_changed, reduce_view_state

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    level: str
    message: str

    def to_dict(self) -> dict:
        return {'level': self.level, 'message': self.message}


class OrderBoard:
    """Orders screen state for one admin session"""

    def __init__(self, service, state: ViewState = None, tz=None):
        self.service = service
        self.tz = tz
        self._lock = threading.Lock()
        self._state = state or ViewState()
        self._raw: tuple = ()
        self._generation = 0
        self._loaded = False
        self._notifications: List[Notification] = []

    # -- state ---------------------------------------------------------------

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def raw_orders(self) -> tuple:
        return self._raw

    @property
    def loaded(self) -> bool:
        return self._loaded

    def notify(self, level: str, message: str) -> None:
        with self._lock:
            self._notifications.append(Notification(level, message))

    def pop_notifications(self) -> List[Notification]:
        with self._lock:
            pending, self._notifications = self._notifications, []
        return pending

    def dispatch(self, action: Mapping) -> bool:
        """Apply an intent; returns True when the filter parameters changed
        and the order list should be fetched again"""
        with self._lock:
            before = self._state
            self._state = reduce_view_state(before, action)
            return filters_changed(before, self._state)

    def view(self) -> OrderView:
        """Derive the table for the current state, keeping the page in range"""
        with self._lock:
            raw, state = self._raw, self._state
        result = derive_view(raw, state, self.tz)
        if result.page != state.pagination.page:
            with self._lock:
                if self._state is state:
                    self._state = replace(state, pagination=replace(state.pagination, page=result.page))
        return result

    def export_source(self) -> List[Mapping]:
        """Every filtered-and-sorted order, not just the visible page"""
        with self._lock:
            raw, state = self._raw, self._state
        return filter_and_sort(raw, state, self.tz)

    def find_order(self, order_id) -> Optional[Mapping]:
        with self._lock:
            raw = self._raw
        for order in raw:
            if str(resolve(order, 'orderId', '')) == str(order_id) or str(resolve(order, '_id', '')) == str(order_id):
                return order
        return None

    # -- fetching ------------------------------------------------------------

    def begin_fetch(self) -> int:
        with self._lock:
            self._generation += 1
            return self._generation

    def apply_fetch(self, token: int, orders) -> bool:
        """Install a fetch result if it belongs to the latest request"""
        with self._lock:
            if token != self._generation:
                logger.info(f"Dropping stale order fetch {token} (latest {self._generation})")
                return False
            self._raw = tuple(orders)
            self._loaded = True
            return True

    def refresh(self, access_token: str = None) -> bool:
        """Fetch the order list for the current filter parameters.

        AuthenticationError propagates so the caller can send the operator
        back to the login page; any other service failure becomes an error
        notification, leaves the current list in place and returns False.
        A result overtaken by a newer fetch is dropped but still returns True.
        """
        token = self.begin_fetch()
        params = self._state.filters.to_query()
        try:
            orders = self.service.fetch_orders(params, access_token=access_token)
        except AuthenticationError:
            raise
        except OrderServiceError as e:
            logger.error(f"Error loading orders: {e}")
            db_log('error', 'orders', 'Error loading orders', {'error': str(e), 'params': params})
            self.notify('error', str(e) or 'Có lỗi xảy ra khi tải đơn hàng')
            return False
        self.apply_fetch(token, orders)
        return True

    # -- mutations -----------------------------------------------------------

    def update_status(self, order_id, status: str, cancel_reason: str = '',
                      access_token: str = None) -> bool:
        """Send a status change, then reload the whole list from the service"""
        try:
            self.service.update_order_status(order_id, status, cancel_reason, access_token=access_token)
            LoggingService.log_user_action('orders', f"Order {order_id} status -> {status}", details={
                'order_id': order_id,
                'status': status,
                'cancel_reason': cancel_reason,
            })
            if not self.refresh(access_token):
                return False
        except AuthenticationError:
            raise
        except OrderServiceError as e:
            logger.error(f"Error updating order {order_id}: {e}")
            db_log('error', 'orders', f'Error updating order {order_id}', {'error': str(e), 'status': status})
            self.notify('error', str(e) or 'Cập nhật thất bại')
            return False

        if status == STATUS_CANCELLED:
            self.notify('success', 'Hủy đơn hàng thành công!')
        else:
            self.notify('success', 'Cập nhật trạng thái thành công!')
        return True

    # -- exports -------------------------------------------------------------

    def export_xlsx(self, now: datetime = None):
        """(filename, bytes) or None after queuing an error notification"""
        try:
            return export_orders_xlsx(self.export_source(), now=now)
        except ExportError as e:
            LoggingService.log_error_with_traceback('exports', e, {'format': 'xlsx'})
            self.notify('error', str(e))
            return None

    def export_pdf(self, now: datetime = None):
        try:
            result = export_orders_pdf(self.export_source(), now=now)
        except ExportError as e:
            LoggingService.log_error_with_traceback('exports', e, {'format': 'pdf'})
            self.notify('error', str(e))
            return None
        self.notify('success', 'Xuất PDF thành công!')
        return result

    def print_bill(self, order_id) -> Optional[str]:
        try:
            return render_print_bill(self.find_order(order_id))
        except ExportError as e:
            LoggingService.log_error_with_traceback('exports', e, {'format': 'print', 'order_id': order_id})
            self.notify('error', str(e))
            return None

    def to_dict(self) -> Dict[str, Any]:
        view = self.view()
        return {
            'success': True,
            'loaded': self._loaded,
            'state': self._state.to_dict(),
            'view': view.to_dict(),
            'notifications': [n.to_dict() for n in self.pop_notifications()],
        }


class BoardRegistry:
    """Boards keyed by admin session id, one per operator per process"""

    def __init__(self, service_factory):
        self._service_factory = service_factory
        self._boards: Dict[str, OrderBoard] = {}
        self._lock = threading.Lock()

    def get(self, admin_id) -> OrderBoard:
        key = str(admin_id)
        with self._lock:
            board = self._boards.get(key)
            if board is None:
                board = OrderBoard(self._service_factory())
                self._boards[key] = board
            return board

    def discard(self, admin_id) -> None:
        with self._lock:
            self._boards.pop(str(admin_id), None)

    def __len__(self):
        return len(self._boards)
