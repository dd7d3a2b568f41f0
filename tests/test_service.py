"""
Order Service Client Tests
==========================

The requests session is replaced with a MagicMock; no network traffic.
"""

from unittest.mock import MagicMock

import pytest
import requests

from conftest import CANCELLED, PAID
from ordersdesk.modules.orders.service import AuthenticationError, OrderServiceClient, OrderServiceError


def _response(status_code=200, payload=None, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    if json_error:
        response.json.side_effect = ValueError("no json")
    else:
        response.json.return_value = payload
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def client(session):
    return OrderServiceClient(base_url="https://orders.example.com/", timeout=5, session=session)


def test_fetch_orders_sends_params_and_token(client, session):
    session.request.return_value = _response(payload={"success": True, "data": [{"orderId": "A"}, "junk"]})

    orders = client.fetch_orders({"status": PAID}, access_token="tok")

    assert orders == [{"orderId": "A"}]
    method, url = session.request.call_args[0]
    kwargs = session.request.call_args[1]
    assert method == "GET"
    assert url == "https://orders.example.com/api/order/all-orders"
    assert kwargs["params"] == {"status": PAID}
    assert kwargs["headers"]["Authorization"] == "Bearer tok"
    assert kwargs["timeout"] == 5


def test_fetch_orders_accepts_bare_list(client, session):
    session.request.return_value = _response(payload=[{"orderId": "A"}])
    assert client.fetch_orders(access_token="tok") == [{"orderId": "A"}]


def test_missing_token_is_authentication_error(client, session):
    with pytest.raises(AuthenticationError):
        client.fetch_orders({}, access_token=None)
    session.request.assert_not_called()


def test_401_is_authentication_error(client, session):
    session.request.return_value = _response(401, {"message": "jwt expired"})
    with pytest.raises(AuthenticationError) as exc:
        client.fetch_orders(access_token="tok")
    assert exc.value.status_code == 401


def test_server_error_carries_message(client, session):
    session.request.return_value = _response(500, {"message": "Database down"})
    with pytest.raises(OrderServiceError) as exc:
        client.fetch_orders(access_token="tok")

    assert not isinstance(exc.value, AuthenticationError)
    assert str(exc.value) == "Database down"
    assert exc.value.status_code == 500


def test_connection_error_is_service_error(client, session):
    session.request.side_effect = requests.ConnectionError("refused")
    with pytest.raises(OrderServiceError):
        client.fetch_orders(access_token="tok")


def test_invalid_json_is_service_error(client, session):
    session.request.return_value = _response(200, json_error=True)
    with pytest.raises(OrderServiceError):
        client.fetch_orders(access_token="tok")


def test_update_status_includes_reason_only_when_cancelling(client, session):
    session.request.return_value = _response(payload={"success": True})

    client.update_order_status("A", CANCELLED, "Out of stock", access_token="tok")
    assert session.request.call_args[1]["json"] == {"orderId": "A", "status": CANCELLED, "cancelReason": "Out of stock"}

    client.update_order_status("A", PAID, "Out of stock", access_token="tok")
    assert session.request.call_args[1]["json"] == {"orderId": "A", "status": PAID}
    assert session.request.call_args[0][0] == "PUT"


def test_update_status_rejected_by_service(client, session):
    session.request.return_value = _response(payload={"success": False, "message": "Order locked"})
    with pytest.raises(OrderServiceError) as exc:
        client.update_order_status("A", PAID, access_token="tok")
    assert str(exc.value) == "Order locked"
