from typing import Tuple


def normalize_paging(page, limit, default_limit: int = 10, max_limit: int = 50) -> Tuple[int, int]:
    p = page if page and page > 0 else 1
    lim = limit if limit and limit > 0 else default_limit
    lim = min(lim, max_limit)
    return p, lim


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if total > 0 else 0
