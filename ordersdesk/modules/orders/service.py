# ordersdesk/modules/orders/service.py
import logging
from typing import Optional, Dict, Any, List

import requests

from ordersdesk.core.config import get_setting
from .constants import STATUS_CANCELLED

logger = logging.getLogger(__name__)


class OrderServiceError(Exception):
    """The order service could not be reached or refused the request"""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(OrderServiceError):
    """The access token was missing, expired or rejected"""


class OrderServiceClient:
    """Client for the remote order service (list orders, update payment status)"""

    LIST_PATH = '/api/order/all-orders'
    UPDATE_STATUS_PATH = '/api/order/update-status'

    def __init__(self, base_url: str = None, timeout: int = None, session: requests.Session = None):
        self.base_url = (base_url or get_setting('ORDERSDESK_ORDER_SERVICE_URL', '')).rstrip('/')
        self.timeout = timeout or int(get_setting('ORDERSDESK_REQUEST_TIMEOUT', 30))
        self.session = session or requests.Session()

    def _headers(self, access_token: Optional[str]) -> Dict[str, str]:
        if not access_token:
            raise AuthenticationError("No access token in session", status_code=401)
        return {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

    def _request(self, method: str, path: str, access_token: Optional[str], **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        headers = self._headers(access_token)

        try:
            response = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"Order service {method} {path} failed: {e}")
            raise OrderServiceError(f"Order service unavailable: {e}") from e

        if response.status_code == 401:
            raise AuthenticationError("Session expired, please log in again", status_code=401)

        if response.status_code not in [200, 201]:
            message = self._error_message(response)
            logger.error(f"Order service {method} {path} returned {response.status_code}: {message}")
            raise OrderServiceError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise OrderServiceError("Order service returned invalid JSON", status_code=response.status_code) from e

    @staticmethod
    def _error_message(response) -> str:
        try:
            data = response.json()
        except ValueError:
            return f"Order service error ({response.status_code})"
        if isinstance(data, dict):
            return data.get('message') or data.get('error') or f"Order service error ({response.status_code})"
        return f"Order service error ({response.status_code})"

    def fetch_orders(self, params: Optional[Dict[str, str]] = None, access_token: str = None) -> List[Dict[str, Any]]:
        """
        Fetch every order matching the (server-side) filter parameters

        Args:
            params: status / startDate / endDate, empty values omitted
            access_token: operator's bearer token

        Returns:
            List of raw order records
        """
        data = self._request('GET', self.LIST_PATH, access_token, params=params or {})

        if isinstance(data, dict):
            if data.get('success') is False or data.get('error') is True:
                raise OrderServiceError(data.get('message') or "Order service rejected the request")
            data = data.get('data', [])

        if not isinstance(data, list):
            raise OrderServiceError("Unexpected order list payload")

        return [order for order in data if isinstance(order, dict)]

    def update_order_status(self, order_id: str, status: str, cancel_reason: str = '',
                            access_token: str = None) -> Dict[str, Any]:
        """Change an order's payment status; cancelReason is only sent when cancelling"""
        payload = {"orderId": order_id, "status": status}
        if status == STATUS_CANCELLED and cancel_reason:
            payload["cancelReason"] = cancel_reason

        data = self._request('PUT', self.UPDATE_STATUS_PATH, access_token, json=payload)

        if isinstance(data, dict) and (data.get('success') is False or data.get('error') is True):
            raise OrderServiceError(data.get('message') or "Status update rejected")
        return data if isinstance(data, dict) else {}
