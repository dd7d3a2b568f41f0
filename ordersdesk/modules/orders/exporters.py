"""
Order Exports
=============

Three renderers over the filtered-and-sorted order list:

- export_orders_xlsx: one-sheet workbook (openpyxl)
- export_orders_pdf: landscape A4 order list with totals footer (reportlab)
- render_print_bill: printable HTML bill for a single order, prints on load

Each returns the artifact and never touches the board state. Any failure is
raised as ExportError so the caller can report it.
"""

import html
import io
import logging
import os
from datetime import datetime
from numbers import Number

from openpyxl import Workbook
from openpyxl.styles import Font
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.units import mm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import ParagraphStyle

from ordersdesk.core.config import get_setting
from .aggregates import compute_totals, order_amount
from .constants import UNDETERMINED_STATUS
from .formatting import format_vnd
from .records import resolve, buyer_name, product_display_name, format_created_at, first_mobile, store_timezone

logger = logging.getLogger(__name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'
PDF_MIMETYPE = 'application/pdf'

SHEET_TITLE = 'Danh sách hóa đơn'
XLSX_COLUMNS = [
    'Mã hóa đơn',
    'Ngày tạo',
    'Khách hàng',
    'Sản phẩm',
    'Số lượng',
    'Tổng tiền',
    'Trạng thái thanh toán',
    'Địa chỉ giao hàng',
]

PDF_TITLE = 'DANH SÁCH HÓA ĐƠN'
PDF_COLUMNS = ['Mã Đơn', 'Ngày tạo', 'Khách hàng', 'Sản phẩm', 'SL', 'Tổng tiền', 'Trạng thái']
PDF_FONT_NAME = 'OrdersdeskFont'


class ExportError(Exception):
    """An export artifact could not be produced"""


def _now(now=None):
    return now or datetime.now(store_timezone())


def _cell(value):
    """Spreadsheet-safe scalar: numbers stay numbers, everything else becomes text"""
    if value is None or value == '':
        return None
    if isinstance(value, Number) and not isinstance(value, bool):
        return value
    return str(value)


# ---------------------------------------------------------------------------
# Spreadsheet
# ---------------------------------------------------------------------------

def xlsx_row(order):
    return [
        _cell(resolve(order, 'orderId')),
        format_created_at(order),
        buyer_name(order),
        product_display_name(order),
        _cell(resolve(order, 'quantity')),
        _cell(resolve(order, 'totalAmt')),
        resolve(order, 'payment_status') or UNDETERMINED_STATUS,
        resolve(order, 'delivery_address.address', ''),
    ]


def xlsx_filename(now=None):
    return f"order-list-{_now(now).strftime('%Y-%m-%d')}.xlsx"


def export_orders_xlsx(orders, now=None):
    """
    Build the order list workbook

    Args:
        orders: filtered-and-sorted orders (all pages)
        now: export time, defaults to the current time in the store timezone

    Returns:
        (filename, xlsx bytes)
    """
    try:
        wb = Workbook()
        ws = wb.active
        ws.title = SHEET_TITLE
        ws.append(XLSX_COLUMNS)
        for cell in ws[1]:
            cell.font = Font(bold=True)

        for order in orders:
            ws.append(xlsx_row(order))

        buffer = io.BytesIO()
        wb.save(buffer)
    except Exception as e:
        logger.error(f"Excel export failed: {e}")
        raise ExportError(f"Xuất Excel thất bại: {e}") from e

    return xlsx_filename(now), buffer.getvalue()


# ---------------------------------------------------------------------------
# PDF order list
# ---------------------------------------------------------------------------

def _pdf_font():
    """Register the configured TTF font, or fall back to Helvetica"""
    font_path = get_setting('ORDERSDESK_PDF_FONT')
    if not font_path:
        return 'Helvetica', 'Helvetica-Bold'
    if not os.path.exists(font_path):
        raise ExportError(f"PDF font not found: {font_path}")
    if PDF_FONT_NAME not in pdfmetrics.getRegisteredFontNames():
        pdfmetrics.registerFont(TTFont(PDF_FONT_NAME, font_path))
    return PDF_FONT_NAME, PDF_FONT_NAME


def _truncate(text, limit=20):
    text = text or ''
    return text[:limit] + ('...' if len(text) > limit else '')


def pdf_row(order):
    return [
        str(resolve(order, 'orderId', '')),
        format_created_at(order, '%d/%m/%Y'),
        buyer_name(order),
        _truncate(product_display_name(order)),
        str(resolve(order, 'quantity', '')),
        format_vnd(order_amount(order)),
        resolve(order, 'payment_status') or UNDETERMINED_STATUS,
    ]


def pdf_filename(now=None):
    return f"order-list-{_now(now).strftime('%Y-%m-%d-%H-%M-%S')}.pdf"


def export_orders_pdf(orders, now=None):
    """Landscape A4 table of the orders with count and revenue underneath.

    Returns (filename, pdf bytes).
    """
    orders = list(orders)
    now = _now(now)
    try:
        font, bold_font = _pdf_font()
        totals = compute_totals(orders)

        buffer = io.BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=landscape(A4),
            leftMargin=14 * mm,
            rightMargin=14 * mm,
            topMargin=10 * mm,
            bottomMargin=10 * mm,
            title=PDF_TITLE,
        )

        title_style = ParagraphStyle('title', fontName=bold_font, fontSize=18, leading=22, alignment=1)
        text_style = ParagraphStyle('text', fontName=font, fontSize=10, leading=14)

        fixed = [20 * mm, 25 * mm, 35 * mm, None, 10 * mm, 25 * mm, 30 * mm]
        fixed[3] = doc.width - sum(w for w in fixed if w)

        table = Table([PDF_COLUMNS] + [pdf_row(order) for order in orders], colWidths=fixed, repeatRows=1)
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), font),
            ('FONTNAME', (0, 0), (-1, 0), bold_font),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('BACKGROUND', (0, 0), (-1, 0), colors.Color(41 / 255, 128 / 255, 185 / 255)),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.lightgrey),
            ('ALIGN', (4, 1), (4, -1), 'CENTER'),
            ('ALIGN', (5, 1), (5, -1), 'RIGHT'),
            ('TOPPADDING', (0, 0), (-1, -1), 2),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
        ]))

        story = [
            Paragraph(PDF_TITLE, title_style),
            Spacer(1, 4 * mm),
            Paragraph(f"Ngày xuất: {now.strftime('%d/%m/%Y %H:%M')}", text_style),
            Spacer(1, 4 * mm),
            table,
            Spacer(1, 6 * mm),
            Paragraph(f"Tổng số hóa đơn: {totals.order_count}", text_style),
            Paragraph(f"Tổng doanh thu: {format_vnd(totals.total_revenue)}", text_style),
        ]
        doc.build(story)
    except ExportError:
        raise
    except Exception as e:
        logger.error(f"PDF export failed: {e}")
        raise ExportError(f"Xuất PDF thất bại: {e}") from e

    return pdf_filename(now), buffer.getvalue()


# ---------------------------------------------------------------------------
# Printable bill
# ---------------------------------------------------------------------------

PRINT_STYLE = """
    body { font-family: Arial; font-size: 12px; padding: 20px; }
    .header, .info, .table, .signature { margin-bottom: 20px; }
    .title { font-size: 18px; font-weight: bold; text-align: center; }
    .info-row { display: flex; margin-bottom: 5px; }
    .info-label { font-weight: bold; width: 120px; }
    table { width: 100%; border-collapse: collapse; }
    th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
    th { background: #f2f2f2; }
    .text-right { text-align: right; }
"""


def _esc(value):
    return html.escape(str(value if value is not None else ''))


def _quantity(order):
    quantity = resolve(order, 'quantity')
    if isinstance(quantity, Number) and not isinstance(quantity, bool) and quantity > 0:
        return quantity
    return 1


def render_print_bill(order):
    """Self-contained HTML bill for one order; the browser prints it on load"""
    if not isinstance(order, dict):
        raise ExportError("Không tìm thấy hóa đơn")

    total = order_amount(order)
    quantity = _quantity(order)
    unit_price = total / quantity
    order_id = resolve(order, 'orderId', '')

    return f"""<!DOCTYPE html>
<html><head><meta charset="utf-8"><title>Hóa đơn {_esc(order_id)}</title>
<style>{PRINT_STYLE}</style>
</head><body onload="window.print()">
    <div class="title">HÓA ĐƠN BÁN HÀNG</div>
    <div style="text-align:center">Ngày: {_esc(format_created_at(order))}</div>
    <div class="info">
        <div class="info-row"><div class="info-label">Mã HD:</div><div>{_esc(order_id)}</div></div>
        <div class="info-row"><div class="info-label">Khách:</div><div>{_esc(buyer_name(order))}<br>{_esc(first_mobile(order))}</div></div>
        <div class="info-row"><div class="info-label">Địa chỉ:</div><div>{_esc(resolve(order, 'delivery_address.city', ''))}</div></div>
    </div>
    <table>
        <tr><th>STT</th><th>Sản phẩm</th><th>Đơn giá</th><th>SL</th><th>Thành tiền</th></tr>
        <tr>
            <td>1</td>
            <td>{_esc(product_display_name(order))}</td>
            <td>{_esc(format_vnd(unit_price))}</td>
            <td>{_esc(quantity)}</td>
            <td class="text-right">{_esc(format_vnd(total))}</td>
        </tr>
        <tfoot><tr><td colspan="4" class="text-right"><strong>Tổng:</strong></td><td class="text-right"><strong>{_esc(format_vnd(total))}</strong></td></tr></tfoot>
    </table>
    <div class="signature" style="display:flex; justify-content: space-between; margin-top: 50px;">
        <div>Người lập<br>(Ký, ghi rõ họ tên)</div>
        <div>Khách hàng<br>(Ký, ghi rõ họ tên)</div>
    </div>
</body></html>
"""
