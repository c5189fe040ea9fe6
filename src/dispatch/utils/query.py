"""Exhaustive reads over Protean querysets.

A bare ``queryset.all()`` returns a single window of ``meta_.limit`` records.
Reads that must see every matching record walk the windows in identity order
until the result set reports no further page.
"""

from collections.abc import Iterator

SCAN_BATCH_SIZE = 100


def scan(queryset, batch_size: int = SCAN_BATCH_SIZE) -> Iterator:
    """Yield every record matching ``queryset``, one window at a time."""
    queryset = queryset.order_by("id")
    offset = 0
    while True:
        page = queryset.offset(offset).limit(batch_size).all()
        yield from page.items
        if not page.has_next:
            return
        offset += batch_size
