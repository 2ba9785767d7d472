"""
Paging link construction.
"""

from __future__ import annotations

import math

from recordkeeper.service.schemas import Link

DEFAULT_BASE_PATH = "/api/v1/records"


def build_links(
    page: int,
    page_size: int,
    total_items: int,
    base_path: str = DEFAULT_BASE_PATH,
) -> list[Link]:
    """
    Build navigation links for a page.

    Always includes self and create. prev is added when page > 1 and there
    is at least one page; next when page is before the last page.
    """
    links = [
        Link(rel="self", href=f"{base_path}/list?page={page}&pageSize={page_size}"),
        Link(rel="create", href=base_path),
    ]

    total_pages = math.ceil(total_items / page_size) if page_size > 0 else 0

    if page > 1 and total_pages > 0:
        links.append(
            Link(rel="prev", href=f"{base_path}/list?page={page - 1}&pageSize={page_size}")
        )
    if page < total_pages:
        links.append(
            Link(rel="next", href=f"{base_path}/list?page={page + 1}&pageSize={page_size}")
        )

    return links
