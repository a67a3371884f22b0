"""Unit tests for concurrent collection loading."""

import asyncio
from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock, patch

import asyncpg
import pytest

from votetally.services import collections
from votetally.services.collections import (
    LOAD_ERROR_MESSAGE,
    CollectionLoadError,
    empty_collections,
    load_collections,
)


@pytest.fixture
def fake_connection():
    """Hand out one mock connection instead of a pooled one."""
    conn = MagicMock()

    @asynccontextmanager
    async def connection():
        yield conn

    with patch.object(collections, "get_db_connection", connection):
        yield conn


async def test_results_keyed_by_requested_name(fake_connection):
    wards = AsyncMock(return_value=[{"id": "w1"}])
    votes = AsyncMock(return_value=[{"id": "v1", "center_id": "c1"}])

    with patch.dict(collections.LOADERS, {"wards": wards, "votes": votes}):
        result = await load_collections("votes", "wards")

    assert list(result) == ["votes", "wards"]
    assert result["wards"] == [{"id": "w1"}]
    assert result["votes"] == [{"id": "v1", "center_id": "c1"}]
    wards.assert_awaited_once_with(fake_connection)
    votes.assert_awaited_once_with(fake_connection)


async def test_order_kept_when_loads_finish_out_of_order():
    delays = {"districts": 0.02, "wards": 0.01, "centers": 0}

    async def slow_load(name):
        await asyncio.sleep(delays[name])
        return [{"collection": name}]

    with patch.object(collections, "_load_one", side_effect=slow_load):
        result = await load_collections("districts", "wards", "centers")

    assert {name: rows[0]["collection"] for name, rows in result.items()} == {
        "districts": "districts",
        "wards": "wards",
        "centers": "centers",
    }


async def test_unknown_collection():
    with pytest.raises(KeyError, match="ballots"):
        await load_collections("wards", "ballots")


@pytest.mark.parametrize(
    "error",
    [asyncpg.PostgresError("relation missing"), OSError("refused"), RuntimeError("no pool")],
)
async def test_store_errors_become_load_error(error):
    async def failing_load(name):
        if name == "votes":
            raise error
        return []

    with patch.object(collections, "_load_one", side_effect=failing_load):
        with pytest.raises(CollectionLoadError, match=LOAD_ERROR_MESSAGE) as exc_info:
            await load_collections("centers", "votes")

    assert exc_info.value.__cause__ is error


def test_empty_collections():
    assert empty_collections("wards", "votes") == {"wards": [], "votes": []}
