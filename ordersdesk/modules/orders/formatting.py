"""
Display formatting for money in the store currency (VND).
"""

from decimal import Decimal, ROUND_HALF_UP


def format_vnd(amount) -> str:
    """1234567 -> '1.234.567 ₫' (vi-VN grouping, no decimals)"""
    try:
        value = Decimal(str(amount or 0)).quantize(Decimal('1'), rounding=ROUND_HALF_UP)
    except ArithmeticError:
        value = Decimal(0)
    sign = '-' if value < 0 else ''
    grouped = f"{abs(int(value)):,}".replace(',', '.')
    return f"{sign}{grouped} ₫"
