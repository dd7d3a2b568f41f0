"""
Orders constants
================

Values the remote order service and the storefront share. The store runs in
a single locale (Vietnamese, VND), so status values and display labels are
stored exactly as the service returns them.
"""

STATUS_PENDING = 'Đang chờ thanh toán'
STATUS_PAID = 'Đã thanh toán'
STATUS_CANCELLED = 'Đã hủy'

# (value, label) pairs for the status select; '' means "all"
STATUS_OPTIONS = [
    ('', 'Tất cả'),
    (STATUS_PENDING, STATUS_PENDING),
    (STATUS_PAID, STATUS_PAID),
]

PAGE_SIZES = (5, 10, 25, 50)
DEFAULT_PAGE_SIZE = 10

CREATED_AT_KEY = 'createdAt'
AMOUNT_KEY = 'totalAmt'
SORTABLE_KEYS = ('orderId', AMOUNT_KEY, CREATED_AT_KEY)
DEFAULT_SORT_KEY = CREATED_AT_KEY
DEFAULT_SORT_DIRECTION = 'desc'

GUEST_PLACEHOLDER = 'Khách vãng lai'
UNDETERMINED_STATUS = 'Chưa xác định'

DATE_RANGE_ERROR = 'Ngày bắt đầu phải nhỏ hơn hoặc bằng ngày kết thúc'

ELLIPSIS = '...'
