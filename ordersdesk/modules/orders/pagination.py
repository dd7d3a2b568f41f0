"""
Order Pagination
================

Page slicing and the compressed page-number strip shown under the table:
first, last, current and its neighbours, with gaps folded into one ellipsis.
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Union

from .constants import PAGE_SIZES, DEFAULT_PAGE_SIZE, ELLIPSIS


@dataclass(frozen=True)
class PageState:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def to_dict(self) -> dict:
        return {'page': self.page, 'page_size': self.page_size}


def validate_page_size(size) -> int:
    size = int(size)
    if size not in PAGE_SIZES:
        raise ValueError(f"Page size must be one of {', '.join(str(s) for s in PAGE_SIZES)}")
    return size


def total_pages(count: int, page_size: int) -> int:
    return math.ceil(count / page_size) if count else 0


def clamp_page(page: int, pages: int) -> int:
    """Keep `page` inside [1, pages]; an empty result still sits on page 1"""
    return max(1, min(page, pages)) if pages else 1


def paginate(items: Sequence, page: int, page_size: int) -> list:
    """Rows for a 1-based page; pages past the end are empty"""
    if page < 1:
        return []
    start = (page - 1) * page_size
    return list(items[start:start + page_size])


def display_range(count: int, page: int, page_size: int) -> tuple:
    """(first, last) row numbers on screen, (0, 0) when nothing is shown"""
    first = (page - 1) * page_size + 1
    last = min(page * page_size, count)
    if first > last:
        return 0, 0
    return first, last


def page_window(current: int, pages: int) -> List[Union[int, str]]:
    """Page numbers to render, e.g. [1, 2, '...', 4, 5, 6, '...', 9, 10]"""
    shown = [
        n for n in range(1, pages + 1)
        if n == 1
        or n == pages
        or abs(n - current) <= 1
        or (n == 2 and current > 3)
        or (n == pages - 1 and current < pages - 2)
    ]

    window = []
    for idx, n in enumerate(shown):
        if idx > 0 and n - shown[idx - 1] > 1:
            window.append(ELLIPSIS)
        window.append(n)
    return window
