import math
from typing import Optional

from django.conf import settings


def clamp_page(page: Optional[int], page_size: Optional[int], default_size: Optional[int] = None) -> tuple[int, int]:
    page = max(1, int(page or 1))
    size = int(page_size or default_size or settings.DEFAULT_PAGE_SIZE)
    return page, min(settings.MAX_PAGE_SIZE, max(1, size))


def paginate(qs, page: Optional[int], page_size: Optional[int], default_size: Optional[int] = None):
    """Slice ``qs`` and return ``(items, pagination)``.

    ``total`` is counted on the same queryset that is sliced, so filters
    applied before this call are reflected in both.
    """
    page, page_size = clamp_page(page, page_size, default_size)
    total = qs.count()
    start = (page - 1) * page_size
    items = list(qs[start:start + page_size])
    return items, {
        'total': total,
        'page': page,
        'pageSize': page_size,
        'totalPages': math.ceil(total / page_size) if total else 0,
    }
