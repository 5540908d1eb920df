"""Pagination shared by all providers.

The total reported by a provider and the number of results it will actually
hand out can differ: Primo stops at 2000, Summon at 1000, and EBSCO drops
duplicates after the fact. Every provider computes its page cursor here so a
caller is never handed a page number that lands past the retrievable results.
"""

import math
from typing import NamedTuple


class PageScope(NamedTuple):
    """Clamped pagination cursor."""

    current_page: int
    total_pages: int
    per_page: int


def retrievable_total(total: int, max_accessible: int | None = None) -> int:
    """Number of results the provider will actually return.

    Args:
        total: Total hits reported by the provider
        max_accessible: Provider ceiling, None if unbounded

    Returns:
        The smaller of the two (never negative)
    """
    total = max(total, 0)
    if max_accessible is None:
        return total
    return min(total, max_accessible)


def last_page(total: int, per_page: int, max_accessible: int | None = None) -> int:
    """Last page that still holds results (1 when there are none)."""
    per_page = max(per_page, 1)
    return max(math.ceil(retrievable_total(total, max_accessible) / per_page), 1)


def compute_paging(
    total: int,
    per_page: int,
    requested_start: int,
    max_accessible: int | None = None,
) -> PageScope:
    """Compute the page cursor for a result set.

    Args:
        total: Total hits reported by the provider
        per_page: Results per page
        requested_start: Zero-based offset of the first requested result
        max_accessible: Provider ceiling on retrievable results

    Returns:
        PageScope with the current page clamped to the last retrievable page
    """
    per_page = max(per_page, 1)
    total_pages = math.ceil(retrievable_total(total, max_accessible) / per_page)
    current_page = max(requested_start, 0) // per_page + 1
    current_page = min(current_page, max(total_pages, 1))
    return PageScope(current_page, total_pages, per_page)


def page_offset(page: int, per_page: int) -> int:
    """Zero-based offset of the first result on a 1-based page."""
    return max(page - 1, 0) * max(per_page, 1)


def exceeds_ceiling(offset: int, max_accessible: int | None) -> bool:
    """True when a zero-based offset lies beyond a provider ceiling."""
    return max_accessible is not None and offset >= max_accessible


def position_in_page(index: int, per_page: int) -> tuple[int, int]:
    """Resolve an absolute 1-based position to a page and an in-page offset.

    Args:
        index: Absolute 1-based result position
        per_page: Fixed page size used for the fetch

    Returns:
        Tuple of (1-based page, 1-based offset within that page)

    Example:
        >>> position_in_page(73, 50)
        (2, 23)
    """
    per_page = max(per_page, 1)
    index = max(index, 1)
    page = math.ceil(index / per_page)
    offset = index
    while offset > per_page:
        offset = offset % per_page or per_page
    return page, offset
