"""Presentation views: everything a dashboard page renders, in one payload.

Each ``build_*`` function is pure over loaded collections. The ``get_*``
coroutines load what the page needs in parallel and fall back to rendering
from empty collections when the load fails, returning the error message
alongside so the caller can surface it.
"""

from typing import Any

from votetally.services import aggregation
from votetally.services.collections import (
    CollectionLoadError,
    empty_collections,
    load_collections,
)
from votetally.utils.pagination import DEFAULT_PAGE_SIZE, paginate, search_records

TOP_CENTERS_FOR_CANDIDATE = 10

ViewResult = tuple[dict[str, Any] | None, str | None]


def _find(records: list[dict[str, Any]], record_id: str) -> dict[str, Any] | None:
    return next((record for record in records if record["id"] == record_id), None)


def _summary(total_votes: int, registered_voters: int) -> dict[str, Any]:
    return {
        "total_votes": total_votes,
        "registered_voters": registered_voters,
        "turnout": aggregation.turnout(total_votes, registered_voters),
    }


async def _load(*names: str) -> tuple[dict[str, list[dict[str, Any]]], str | None]:
    try:
        return await load_collections(*names), None
    except CollectionLoadError as e:
        return empty_collections(*names), str(e)


# ============================================
# DASHBOARD
# ============================================

DASHBOARD_COLLECTIONS = ("districts", "wards", "centers", "candidates", "votes")


def build_dashboard(collections: dict[str, list[dict[str, Any]]]) -> dict[str, Any]:
    """Constituency-wide leaderboard, ward totals and turnout."""
    totals = aggregation.district_totals(collections["candidates"], collections["votes"])
    ward_totals = aggregation.ward_vote_totals(
        collections["wards"], collections["centers"], collections["votes"]
    )
    total_votes = sum(row["total_votes"] for row in totals)

    return {
        "districts": collections["districts"],
        "counts": {
            "districts": len(collections["districts"]),
            "wards": len(collections["wards"]),
            "centers": len(collections["centers"]),
            "candidates": len(collections["candidates"]),
            "centers_reporting": len(
                {vote["center_id"] for vote in collections["votes"]}
            ),
        },
        "summary": _summary(
            total_votes, aggregation.sum_registered_voters(collections["centers"])
        ),
        "leader": totals[0] if totals and totals[0]["total_votes"] > 0 else None,
        "candidate_totals": totals,
        "ward_totals": ward_totals,
        "charts": {
            "candidates": aggregation.chart_series(totals, "candidate"),
            "wards": aggregation.chart_series(ward_totals, "ward"),
        },
    }


async def get_dashboard() -> ViewResult:
    collections, error = await _load(*DASHBOARD_COLLECTIONS)
    return build_dashboard(collections), error


# ============================================
# WARD
# ============================================

WARD_COLLECTIONS = ("districts", "wards", "centers", "candidates", "votes")


def build_ward_view(
    ward_id: str,
    collections: dict[str, list[dict[str, Any]]],
    search: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> dict[str, Any] | None:
    """Candidate totals, per-center turnout and the center list of one ward."""
    ward = _find(collections["wards"], ward_id)
    if ward is None:
        return None

    centers = [c for c in collections["centers"] if c.get("ward_id") == ward_id]
    totals = aggregation.ward_totals(
        ward_id, collections["candidates"], collections["centers"], collections["votes"]
    )
    breakdown = aggregation.center_vote_breakdown(centers, collections["votes"])
    total_votes = sum(row["total_votes"] for row in totals)

    matching = search_records(centers, search, fields=("name", "center_number"))

    return {
        "ward": ward,
        "district": _find(collections["districts"], ward.get("district_id")),
        "summary": _summary(total_votes, aggregation.sum_registered_voters(centers)),
        "candidate_totals": totals,
        "center_breakdown": breakdown,
        "centers": paginate(matching, page, limit),
        "charts": {
            "candidates": aggregation.chart_series(totals, "candidate"),
            "centers": aggregation.chart_series(breakdown, "center"),
        },
    }


async def get_ward_view(
    ward_id: str,
    search: str | None = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> ViewResult:
    collections, error = await _load(*WARD_COLLECTIONS)
    return build_ward_view(ward_id, collections, search, page, limit), error


# ============================================
# CENTER
# ============================================

CENTER_COLLECTIONS = ("wards", "centers", "candidates", "votes")


def build_center_view(
    center_id: str, collections: dict[str, list[dict[str, Any]]]
) -> dict[str, Any] | None:
    """Per-candidate results of a single center."""
    center = _find(collections["centers"], center_id)
    if center is None:
        return None

    vote = next(
        (v for v in collections["votes"] if v.get("center_id") == center_id), None
    )
    totals = aggregation.center_totals(collections["candidates"], vote)
    total_votes = sum(row["total_votes"] for row in totals)

    return {
        "center": center,
        "ward": _find(collections["wards"], center.get("ward_id")),
        "vote": vote,
        "summary": _summary(total_votes, center.get("registered_voters") or 0),
        "candidate_totals": totals,
        "charts": {"candidates": aggregation.chart_series(totals, "candidate")},
    }


async def get_center_view(center_id: str) -> ViewResult:
    collections, error = await _load(*CENTER_COLLECTIONS)
    return build_center_view(center_id, collections), error


# ============================================
# CANDIDATE
# ============================================

CANDIDATE_COLLECTIONS = ("wards", "centers", "candidates", "votes")


def build_candidate_view(
    candidate_id: str, collections: dict[str, list[dict[str, Any]]]
) -> dict[str, Any] | None:
    """One candidate's performance broken down by ward and by center."""
    candidate = _find(collections["candidates"], candidate_id)
    if candidate is None:
        return None

    centers = collections["centers"]
    ward_totals = aggregation.candidate_totals_by_ward(
        candidate_id,
        collections["candidates"],
        collections["wards"],
        centers,
        collections["votes"],
    )

    wards = []
    for row in ward_totals:
        ward_centers = [c for c in centers if c.get("ward_id") == row["ward_id"]]
        registered_voters = aggregation.sum_registered_voters(ward_centers)
        wards.append(
            {
                **row,
                "center_count": len(ward_centers),
                "registered_voters": registered_voters,
                "turnout": aggregation.turnout(row["total_votes"], registered_voters),
            }
        )

    top_centers = aggregation.candidate_totals_by_center(
        candidate_id, centers, collections["votes"], limit=TOP_CENTERS_FOR_CANDIDATE
    )
    total_votes = sum(row["total_votes"] for row in ward_totals)

    return {
        "candidate": candidate,
        "summary": _summary(total_votes, aggregation.sum_registered_voters(centers)),
        "ward_totals": wards,
        "top_centers": top_centers,
        "charts": {
            "wards": aggregation.chart_series(ward_totals, "ward"),
            "centers": aggregation.chart_series(top_centers, "center"),
        },
    }


async def get_candidate_view(candidate_id: str) -> ViewResult:
    collections, error = await _load(*CANDIDATE_COLLECTIONS)
    return build_candidate_view(candidate_id, collections), error


# ============================================
# ADMIN CONSOLE
# ============================================


def candidate_ward_votes(
    candidate_id: str, collections: dict[str, list[dict[str, Any]]]
) -> dict[str, int]:
    """Ward id -> one candidate's votes, for the console's ward browser."""
    rows = aggregation.candidate_totals_by_ward(
        candidate_id,
        collections["candidates"],
        collections["wards"],
        collections["centers"],
        collections["votes"],
    )
    return {row["ward_id"]: row["total_votes"] for row in rows}
