"""Candidate service functions."""

from typing import Any

import asyncpg


def _parse_candidate_row(row: asyncpg.Record | None) -> dict[str, Any] | None:
    if not row:
        return None

    result = dict(row)
    result["id"] = str(result["id"])
    return result


async def create_candidate(
    conn: asyncpg.Connection,
    name: str,
    party: str,
) -> dict[str, Any] | None:
    """Create a new candidate. Candidates are not scoped to a ward or district."""
    result = await conn.fetchrow(
        """
        INSERT INTO candidates (name, party)
        VALUES ($1, $2)
        RETURNING *
        """,
        name,
        party,
    )
    return _parse_candidate_row(result)


async def list_candidates(conn: asyncpg.Connection) -> list[dict[str, Any]]:
    """List every candidate."""
    rows = await conn.fetch("SELECT * FROM candidates ORDER BY name ASC")
    return [_parse_candidate_row(row) for row in rows]
