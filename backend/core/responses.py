from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class ColumnMeta:
    """Metadata for a column in a table response."""

    key: str
    label: str
    type: str  # "text", "currency", "date", "url"
    editable: bool = False
    label_key: str | None = None  # url columns: field holding the link text
    target: str | None = None  # url columns: link target
    relation: str | None = None  # url columns: relationship the link is derived from


@dataclass
class PageResponse:
    """One page window of an enriched record set with column metadata."""

    columns: list[ColumnMeta]
    data: list[dict[str, Any]]
    page_number: int
    page_size: int
    total_pages: int
    total_records: int
    is_first_page: bool
    is_last_page: bool


def make_ref(id: str, name: str | None) -> dict[str, str | None]:
    """Create a standard {Id, Name} reference struct for relationship fields."""
    return {"Id": id, "Name": name}
