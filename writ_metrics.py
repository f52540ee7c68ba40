"""
Page-count estimates for the variable-length parts of a writ petition.

There is no layout engine behind these numbers. The densities below were
measured on A4 pages set in 14pt Times with the court's margins and are
meant to be tuned, not trusted: callers may pass their own PageDensity.
"""

import math
from typing import NamedTuple, Optional


class PageDensity(NamedTuple):
    chars_per_page: int = 3200
    rows_per_page: int = 15
    grounds_per_page: int = 4


DEFAULT_DENSITY = PageDensity()


def _pages(units: int, per_page: int) -> int:
    return max(1, math.ceil(units / max(1, per_page)))


def estimate_text_pages(text: Optional[str], density: PageDensity = DEFAULT_DENSITY) -> int:
    """Pages needed for a free-text block; never less than one."""
    return _pages(len(text or ""), density.chars_per_page)


def estimate_row_pages(row_count: int, density: PageDensity = DEFAULT_DENSITY) -> int:
    return _pages(max(0, row_count), density.rows_per_page)


def split_grounds(text: Optional[str]):
    """Non-blank ground lines, in order."""
    return [line for line in (text or "").split("\n") if line.strip()]


def estimate_ground_pages(text: Optional[str], density: PageDensity = DEFAULT_DENSITY) -> int:
    return _pages(len(split_grounds(text)), density.grounds_per_page)
