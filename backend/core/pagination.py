"""Client-side paging over a fully loaded record set."""

import math
from collections.abc import Sequence
from typing import Any


class PaginationState:
    """The loaded records and the page window currently shown.

    ``next`` and ``prev`` move the page counter without clamping it; the
    caller checks ``is_first_page`` / ``is_last_page`` first. A page number
    outside ``1..total_pages`` shows an empty window.
    """

    def __init__(self, page_size: int = 10):
        self._records: list[dict[str, Any]] = []
        self._page_size = check_page_size(page_size)
        self.page_number = 1

    @property
    def page_size(self) -> int:
        return self._page_size

    @property
    def records(self) -> list[dict[str, Any]]:
        return list(self._records)

    def reset(self, records: Sequence[dict[str, Any]], page_size: int | None = None) -> None:
        """Replace the record set and go back to page 1."""
        if page_size is not None:
            self._page_size = check_page_size(page_size)
        self._records = list(records)
        self.page_number = 1

    def next(self) -> None:
        self.page_number += 1

    def prev(self) -> None:
        self.page_number -= 1

    def go_to(self, page_number: int) -> None:
        self.page_number = page_number

    @property
    def visible(self) -> list[dict[str, Any]]:
        if self.page_number < 1:
            return []
        start = (self.page_number - 1) * self._page_size
        return self._records[start:start + self._page_size]

    @property
    def total_records(self) -> int:
        return len(self._records)

    @property
    def total_pages(self) -> int:
        # An empty set still has one (empty) page to show
        return math.ceil(len(self._records) / self._page_size) or 1

    @property
    def is_first_page(self) -> bool:
        return self.page_number <= 1

    @property
    def is_last_page(self) -> bool:
        return self.page_number >= self.total_pages

    @property
    def has_data(self) -> bool:
        return bool(self._records)


def check_page_size(page_size: int) -> int:
    if isinstance(page_size, bool) or not isinstance(page_size, int) or page_size <= 0:
        raise ValueError(f"page_size must be a positive integer, got {page_size!r}")
    return page_size
