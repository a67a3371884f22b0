"""Public tally routes (no authentication required).

Dashboard, ward, center and candidate views plus searchable, paginated
lists of the collections. Every request reads the collections afresh.
"""

from typing import Any
from uuid import UUID

from fastapi import APIRouter, Query, status

from votetally.core.responses import error_response, paginated_response, success_response
from votetally.services import views
from votetally.services.collections import (
    CollectionLoadError,
    load_collections,
)
from votetally.utils.pagination import (
    DEFAULT_PAGE_SIZE,
    filter_by,
    paginate,
    search_records,
)

router = APIRouter(tags=["Public Results"])


def _view_response(
    data: dict[str, Any] | None, error: str | None, resource: str
) -> dict[str, Any]:
    """Wrap a view, surfacing load failures (503) and unknown entities (404)."""
    if error:
        error_response(
            message=error, data=data, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )
    if data is None:
        error_response(
            message=f"{resource} not found", status_code=status.HTTP_404_NOT_FOUND
        )
    return success_response(data=data)


async def _list_response(
    collection: str,
    page: int,
    limit: int,
    search: str | None = None,
    search_fields: tuple[str, ...] = ("name",),
    filters: dict[str, str | None] | None = None,
) -> dict[str, Any]:
    try:
        records = (await load_collections(collection))[collection]
    except CollectionLoadError as e:
        empty = paginated_response([], page, limit, 0)
        error_response(
            message=str(e),
            data=empty["data"],
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    for field, value in (filters or {}).items():
        records = filter_by(records, field, value)
    records = search_records(records, search, fields=search_fields)

    result = paginate(records, page, limit)
    return paginated_response(result["items"], result["page"], result["limit"], result["total"])


# ============================================
# VIEWS
# ============================================


@router.get("/dashboard")
async def get_dashboard():
    """
    Constituency dashboard.

    Candidate leaderboard with vote shares, totals per ward, registered
    voters, votes cast, turnout and chart series.
    """
    data, error = await views.get_dashboard()
    return _view_response(data, error, "Dashboard")


@router.get("/wards/{ward_id}")
async def get_ward(
    ward_id: UUID,
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
):
    """Results of one ward, with per-center turnout and a searchable center list."""
    data, error = await views.get_ward_view(str(ward_id), search, page, limit)
    return _view_response(data, error, "Ward")


@router.get("/centers/{center_id}")
async def get_center(center_id: UUID):
    """Results of one voting center."""
    data, error = await views.get_center_view(str(center_id))
    return _view_response(data, error, "Center")


@router.get("/candidates/{candidate_id}")
async def get_candidate(candidate_id: UUID):
    """One candidate's votes by ward and top centers."""
    data, error = await views.get_candidate_view(str(candidate_id))
    return _view_response(data, error, "Candidate")


# ============================================
# LISTS
# ============================================


@router.get("/districts")
async def list_districts(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
):
    """List districts."""
    return await _list_response("districts", page, limit)


@router.get("/wards")
async def list_wards(
    district_id: UUID | None = None,
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
):
    """List wards, optionally of one district, searching by name."""
    return await _list_response(
        "wards",
        page,
        limit,
        search=search,
        filters={"district_id": str(district_id) if district_id else None},
    )


@router.get("/centers")
async def list_centers(
    ward_id: UUID | None = None,
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
):
    """List centers, optionally of one ward, searching by name or center number."""
    return await _list_response(
        "centers",
        page,
        limit,
        search=search,
        search_fields=("name", "center_number"),
        filters={"ward_id": str(ward_id) if ward_id else None},
    )


@router.get("/candidates")
async def list_candidates(
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=100),
):
    """List candidates, searching by name or party."""
    return await _list_response(
        "candidates", page, limit, search=search, search_fields=("name", "party")
    )
