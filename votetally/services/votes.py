"""Vote record service functions.

There is exactly one vote record per center: the ``votes`` table is keyed by
``center_id`` and saving is an upsert on that key. A second save for the same
center overwrites the first (last write wins, no version check).
"""

import json
from typing import Any
from uuid import UUID

import asyncpg

from votetally.core.validation import VoteCountValidator


class VoteValidationError(ValueError):
    """Counts rejected before reaching the store."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = errors
        message = errors.get("total") or next(iter(errors.values()), "Invalid vote counts")
        super().__init__(message)


def _parse_vote_row(row: asyncpg.Record | None) -> dict[str, Any] | None:
    if not row:
        return None

    result = dict(row)
    result["id"] = str(result["id"])
    result["center_id"] = str(result["center_id"])

    counts = result.get("counts") or {}
    if isinstance(counts, str):
        counts = json.loads(counts)
    result["counts"] = {str(k): int(v) for k, v in counts.items()}

    return result


async def get_vote_for_center(
    conn: asyncpg.Connection, center_id: UUID
) -> dict[str, Any] | None:
    """Get the vote record of a center, if one has been entered."""
    result = await conn.fetchrow(
        "SELECT * FROM votes WHERE center_id = $1", str(center_id)
    )
    return _parse_vote_row(result)


async def list_votes(conn: asyncpg.Connection) -> list[dict[str, Any]]:
    """List every vote record."""
    rows = await conn.fetch("SELECT * FROM votes ORDER BY submitted_at ASC")
    return [_parse_vote_row(row) for row in rows]


async def upsert_center_votes(
    conn: asyncpg.Connection,
    center_id: UUID,
    counts: dict[str, int],
) -> tuple[dict[str, Any], bool]:
    """
    Write the counts of a center, creating or replacing its vote record.

    Returns:
        Tuple of (vote record, created) where created is False when an
        existing record was updated in place.
    """
    row = await conn.fetchrow(
        """
        INSERT INTO votes (center_id, counts)
        VALUES ($1, $2::jsonb)
        ON CONFLICT (center_id)
        DO UPDATE SET
            counts = EXCLUDED.counts,
            updated_at = CURRENT_TIMESTAMP
        RETURNING *, (xmax = 0) AS inserted
        """,
        str(center_id),
        json.dumps(counts),
    )
    vote = _parse_vote_row(row)
    created = bool(vote.pop("inserted"))
    return vote, created


async def save_center_votes(
    conn: asyncpg.Connection,
    center_id: UUID,
    counts: dict[str, int],
) -> tuple[dict[str, Any], bool] | None:
    """
    Validate counts against the center's registered voters and persist them.

    The ceiling is re-checked here regardless of what the console already
    validated, so a direct write cannot bypass it.

    Returns:
        Tuple of (vote record, created), or None if the center does not exist.

    Raises:
        VoteValidationError: if any count or the total exceeds the ceiling.
    """
    registered_voters = await conn.fetchval(
        "SELECT registered_voters FROM centers WHERE id = $1", str(center_id)
    )
    if registered_voters is None:
        return None

    is_valid, errors = VoteCountValidator.validate(counts, registered_voters)
    if not is_valid:
        raise VoteValidationError(errors)

    return await upsert_center_votes(conn, center_id, counts)
