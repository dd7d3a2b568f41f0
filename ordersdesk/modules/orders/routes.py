"""
Orders Admin Routes
===================

JSON API for the order-management screen. The operator's order list is held
server-side in an OrderBoard; these routes only dispatch intents to it and
return the derived view.
"""

import io
import logging
from flask import request, redirect, session, jsonify, send_file, current_app
from . import orders_bp
from .board import BoardRegistry
from .exporters import XLSX_MIMETYPE, PDF_MIMETYPE
from .service import AuthenticationError
from ordersdesk.core.logging_service import db_log

logger = logging.getLogger(__name__)


def _extension():
    return current_app.extensions['ordersdesk']


def _board():
    registry: BoardRegistry = _extension().boards
    return registry.get(session['admin_id'])


def _access_token():
    return session.get('access_token')


def _login_url():
    return current_app.config.get('ORDERSDESK_LOGIN_URL', '/admin/login')


def _auth_required():
    return jsonify({'success': False, 'error': 'Authentication required', 'redirect': _login_url()}), 401


def _session_expired(e):
    logger.info(f"Order service rejected session: {e}")
    db_log('warning', 'orders', 'Order service rejected the session token', {'error': str(e)})
    return jsonify({'success': False, 'error': str(e), 'redirect': _login_url()}), 401


@orders_bp.route('/api/view')
def api_view():
    """Current page of orders plus summary; loads the list on first use"""
    if 'admin_id' not in session:
        return _auth_required()

    board = _board()
    try:
        if not board.loaded:
            board.refresh(_access_token())
    except AuthenticationError as e:
        return _session_expired(e)

    return jsonify(board.to_dict())


@orders_bp.route('/api/dispatch', methods=['POST'])
def api_dispatch():
    """Apply one intent (search, filter, sort, page) and return the new view"""
    if 'admin_id' not in session:
        return _auth_required()

    action = request.get_json(silent=True)
    if not isinstance(action, dict) or not action.get('type'):
        return jsonify({'success': False, 'error': 'Action type required'}), 400

    board = _board()
    try:
        needs_fetch = board.dispatch(action)
    except ValueError as e:
        return jsonify({'success': False, 'error': str(e)}), 400

    try:
        if needs_fetch or not board.loaded:
            board.refresh(_access_token())
    except AuthenticationError as e:
        return _session_expired(e)

    return jsonify(board.to_dict())


@orders_bp.route('/api/refresh', methods=['POST'])
def api_refresh():
    """Reload the order list from the order service"""
    if 'admin_id' not in session:
        return _auth_required()

    board = _board()
    try:
        board.refresh(_access_token())
    except AuthenticationError as e:
        return _session_expired(e)

    return jsonify(board.to_dict())


@orders_bp.route('/api/update-status', methods=['POST'])
def api_update_status():
    """Change an order's payment status, then reload every order"""
    if 'admin_id' not in session:
        return _auth_required()

    data = request.get_json(silent=True) or {}
    order_id = data.get('order_id')
    status = data.get('status')

    if not order_id:
        return jsonify({'success': False, 'error': 'Order ID required'}), 400
    if not status:
        return jsonify({'success': False, 'error': 'Status required'}), 400

    board = _board()
    try:
        updated = board.update_status(order_id, status, data.get('cancel_reason') or '', _access_token())
    except AuthenticationError as e:
        return _session_expired(e)

    payload = board.to_dict()
    payload['success'] = updated
    return jsonify(payload), (200 if updated else 502)


def _export_failed(board):
    messages = [n.message for n in board.pop_notifications() if n.level == 'error']
    return jsonify({'success': False, 'error': messages[0] if messages else 'Export failed'}), 500


@orders_bp.route('/api/export/xlsx')
def api_export_xlsx():
    """Every filtered order (all pages) as an Excel workbook"""
    if 'admin_id' not in session:
        return _auth_required()

    board = _board()
    result = board.export_xlsx()
    if result is None:
        return _export_failed(board)

    filename, content = result
    return send_file(io.BytesIO(content), mimetype=XLSX_MIMETYPE, as_attachment=True, download_name=filename)


@orders_bp.route('/api/export/pdf')
def api_export_pdf():
    """Every filtered order (all pages) as a landscape PDF list"""
    if 'admin_id' not in session:
        return _auth_required()

    board = _board()
    result = board.export_pdf()
    if result is None:
        return _export_failed(board)

    filename, content = result
    return send_file(io.BytesIO(content), mimetype=PDF_MIMETYPE, as_attachment=True, download_name=filename)


@orders_bp.route('/print/<order_id>')
def print_bill(order_id):
    """Printable bill for one loaded order"""
    if 'admin_id' not in session:
        return redirect(_login_url())

    board = _board()
    document = board.print_bill(order_id)
    if document is None:
        return _export_failed(board)[0], 404

    return document, 200, {'Content-Type': 'text/html; charset=utf-8'}
