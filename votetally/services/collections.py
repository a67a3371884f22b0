"""Parallel loading of whole collections.

A page that needs several collections reads them concurrently, one pooled
connection per collection, and waits for all of them (fan-out, join-all).
"""

import asyncio
from typing import Any, Awaitable, Callable

import asyncpg

from votetally.core.database import get_db_connection
from votetally.core.logging_config import get_logger
from votetally.services import candidates as candidate_service
from votetally.services import geographic as geo_service
from votetally.services import votes as vote_service

logger = get_logger(__name__)

LOAD_ERROR_MESSAGE = "Error loading data. Please try again."

Loader = Callable[[asyncpg.Connection], Awaitable[list[dict[str, Any]]]]

LOADERS: dict[str, Loader] = {
    "districts": geo_service.list_districts,
    "wards": geo_service.list_wards,
    "centers": geo_service.list_centers,
    "candidates": candidate_service.list_candidates,
    "votes": vote_service.list_votes,
}


class CollectionLoadError(Exception):
    """A collection could not be read from the store."""


async def _load_one(name: str) -> list[dict[str, Any]]:
    async with get_db_connection() as conn:
        return await LOADERS[name](conn)


async def load_collections(*names: str) -> dict[str, list[dict[str, Any]]]:
    """
    Load the named collections concurrently.

    Returns:
        Mapping of collection name to its full list of records.

    Raises:
        CollectionLoadError: if any collection could not be read.
    """
    unknown = [name for name in names if name not in LOADERS]
    if unknown:
        raise KeyError(f"Unknown collections: {', '.join(unknown)}")

    try:
        results = await asyncio.gather(*(_load_one(name) for name in names))
    except (asyncpg.PostgresError, OSError, RuntimeError) as e:
        logger.error(f"Error loading {', '.join(names)}: {e}", exc_info=True)
        raise CollectionLoadError(LOAD_ERROR_MESSAGE) from e

    return dict(zip(names, results))


def empty_collections(*names: str) -> dict[str, list[dict[str, Any]]]:
    """Stand-in collections used to render a page after a failed load."""
    return {name: [] for name in names}
