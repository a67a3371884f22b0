"""In-memory search and pagination for fully loaded collections."""

from typing import Any

DEFAULT_PAGE_SIZE = 10


def search_records(
    records: list[dict[str, Any]],
    search: str | None,
    fields: tuple[str, ...] = ("name",),
) -> list[dict[str, Any]]:
    """
    Keep records where any of ``fields`` contains ``search``, ignoring case.

    A blank search keeps everything.
    """
    if not search or not search.strip():
        return list(records)

    needle = search.strip().lower()
    return [
        record
        for record in records
        if any(needle in str(record.get(field) or "").lower() for field in fields)
    ]


def filter_by(
    records: list[dict[str, Any]], field: str, value: str | None
) -> list[dict[str, Any]]:
    """Keep records whose ``field`` equals ``value``; no-op when value is None."""
    if value is None:
        return list(records)
    return [record for record in records if record.get(field) == value]


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit  # Ceiling division


def paginate(
    records: list[dict[str, Any]], page: int = 1, limit: int = DEFAULT_PAGE_SIZE
) -> dict[str, Any]:
    """
    Slice one page out of an already-filtered list.

    Pages are 1-based. A page past the end is empty rather than an error.
    """
    page = max(page, 1)
    limit = max(limit, 1)
    start = (page - 1) * limit

    return {
        "items": records[start : start + limit],
        "page": page,
        "limit": limit,
        "total": len(records),
        "total_pages": total_pages(len(records), limit),
    }
