"""Geographic hierarchy service functions: districts, wards and centers."""

from typing import Any
from uuid import UUID

import asyncpg


def _parse_row(row: asyncpg.Record | None) -> dict[str, Any] | None:
    """Parse a database row into a dict with string identifiers."""
    if not row:
        return None

    result = dict(row)

    for field in ("id", "district_id", "ward_id"):
        if result.get(field) is not None:
            result[field] = str(result[field])

    return result


# ============================================
# DISTRICTS
# ============================================


async def create_district(conn: asyncpg.Connection, name: str) -> dict[str, Any] | None:
    """Create a new district."""
    result = await conn.fetchrow(
        """
        INSERT INTO districts (name)
        VALUES ($1)
        RETURNING *
        """,
        name,
    )
    return _parse_row(result)


async def get_district(
    conn: asyncpg.Connection, district_id: UUID
) -> dict[str, Any] | None:
    """Get a district by ID."""
    result = await conn.fetchrow(
        "SELECT * FROM districts WHERE id = $1", str(district_id)
    )
    return _parse_row(result)


async def list_districts(conn: asyncpg.Connection) -> list[dict[str, Any]]:
    """List every district."""
    rows = await conn.fetch("SELECT * FROM districts ORDER BY name ASC")
    return [_parse_row(row) for row in rows]


# ============================================
# WARDS
# ============================================


async def create_ward(
    conn: asyncpg.Connection,
    district_id: UUID,
    name: str,
) -> dict[str, Any] | None:
    """Create a new ward under a district."""
    result = await conn.fetchrow(
        """
        INSERT INTO wards (district_id, name)
        VALUES ($1, $2)
        RETURNING *
        """,
        str(district_id),
        name,
    )
    return _parse_row(result)


async def get_ward(conn: asyncpg.Connection, ward_id: UUID) -> dict[str, Any] | None:
    """Get a ward by ID."""
    result = await conn.fetchrow("SELECT * FROM wards WHERE id = $1", str(ward_id))
    return _parse_row(result)


async def list_wards(
    conn: asyncpg.Connection,
    district_id: UUID | None = None,
) -> list[dict[str, Any]]:
    """List wards, optionally only those of one district."""
    query = "SELECT * FROM wards"
    params: list[Any] = []

    if district_id:
        query += " WHERE district_id = $1"
        params.append(str(district_id))

    query += " ORDER BY name ASC"

    rows = await conn.fetch(query, *params)
    return [_parse_row(row) for row in rows]


# ============================================
# CENTERS
# ============================================


async def create_center(
    conn: asyncpg.Connection,
    ward_id: UUID,
    center_number: str,
    name: str,
    registered_voters: int = 0,
) -> dict[str, Any] | None:
    """Create a new voting center under a ward."""
    result = await conn.fetchrow(
        """
        INSERT INTO centers (ward_id, center_number, name, registered_voters)
        VALUES ($1, $2, $3, $4)
        RETURNING *
        """,
        str(ward_id),
        center_number,
        name,
        registered_voters,
    )
    return _parse_row(result)


async def get_center(
    conn: asyncpg.Connection, center_id: UUID
) -> dict[str, Any] | None:
    """Get a center by ID."""
    result = await conn.fetchrow("SELECT * FROM centers WHERE id = $1", str(center_id))
    return _parse_row(result)


async def list_centers(
    conn: asyncpg.Connection,
    ward_id: UUID | None = None,
) -> list[dict[str, Any]]:
    """List centers, optionally only those of one ward."""
    query = "SELECT * FROM centers"
    params: list[Any] = []

    if ward_id:
        query += " WHERE ward_id = $1"
        params.append(str(ward_id))

    query += " ORDER BY center_number ASC, name ASC"

    rows = await conn.fetch(query, *params)
    return [_parse_row(row) for row in rows]
