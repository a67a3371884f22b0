"""Admin console routes: login, entity creation and vote entry."""

from typing import Annotated, Any
from uuid import UUID

import asyncpg
from fastapi import APIRouter, Depends, Request, Response, status
from pydantic import BaseModel, Field, field_validator

from votetally.api.deps import AdminSessionDep, client_ip
from votetally.core.config import settings
from votetally.core.database import get_db
from votetally.core.logging_config import data_entry_logger, get_logger, security_logger
from votetally.core.rate_limiting import login_rate_limiter
from votetally.core.responses import (
    error_response,
    not_found_response,
    success_response,
    validation_error_response,
)
from votetally.core.security import (
    create_admin_session,
    decode_session,
    encode_session,
    verify_admin_password,
)
from votetally.core.validation import require_fields, sanitize_string
from votetally.services import candidates as candidate_service
from votetally.services import geographic as geo_service
from votetally.services.collections import (
    CollectionLoadError,
    empty_collections,
    load_collections,
)
from votetally.services.views import candidate_ward_votes
from votetally.services.vote_entry import (
    CENTER_NOT_FOUND_MESSAGE,
    SAVE_ERROR_MESSAGE,
    VoteEntryForm,
)

router = APIRouter(prefix="/admin", tags=["Admin Console"])
logger = get_logger(__name__)

OVERVIEW_COLLECTIONS = ("districts", "wards", "centers", "candidates")

# centers.registered_voters is a PostgreSQL INTEGER
MAX_REGISTERED_VOTERS = 2_147_483_647


# ============================================
# PYDANTIC MODELS
# ============================================


class LoginRequest(BaseModel):
    """Admin login request."""

    password: str = Field(..., max_length=128)


class DistrictCreate(BaseModel):
    name: str | None = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: str | None) -> str | None:
        return sanitize_string(v) if v is not None else v


class WardCreate(BaseModel):
    district_id: UUID | None = None
    name: str | None = Field(None, max_length=255)

    @field_validator("name")
    @classmethod
    def sanitize_name(cls, v: str | None) -> str | None:
        return sanitize_string(v) if v is not None else v


class CenterCreate(BaseModel):
    ward_id: UUID | None = None
    center_number: str | None = Field(None, max_length=50)
    name: str | None = Field(None, max_length=255)
    registered_voters: int = Field(
        0,
        ge=0,
        le=MAX_REGISTERED_VOTERS,
        description="Registered voters (whole number)",
    )

    @field_validator("center_number", "name")
    @classmethod
    def sanitize_text(cls, v: str | None) -> str | None:
        return sanitize_string(v) if v is not None else v


class CandidateCreate(BaseModel):
    name: str | None = Field(None, max_length=255)
    party: str | None = Field(None, max_length=255)

    @field_validator("name", "party")
    @classmethod
    def sanitize_text(cls, v: str | None) -> str | None:
        return sanitize_string(v) if v is not None else v


class VoteSubmission(BaseModel):
    """Counts typed into the vote entry form, keyed by candidate ID."""

    counts: dict[str, int | str] = Field(default_factory=dict)


def _check_required(values: dict[str, Any], message: str) -> None:
    errors = require_fields(values, message)
    if errors:
        validation_error_response(errors, message=message)


# ============================================
# SESSION
# ============================================


@router.post("/login")
async def login(request: LoginRequest, http_request: Request, response: Response):
    """
    Exchange the shared admin password for a session.

    The signed session token is returned in the body and also set as an
    HttpOnly cookie that expires with the session.

    **Request Body:**
    ```json
    {"password": "..."}
    ```
    """
    ip_address = client_ip(http_request)
    user_agent = http_request.headers.get("User-Agent")

    allowed, message = login_rate_limiter.check_login_allowed(ip_address)
    if not allowed:
        security_logger.log_login_attempt(
            False, ip_address, user_agent, reason="rate limited"
        )
        error_response(message=message, status_code=status.HTTP_429_TOO_MANY_REQUESTS)

    if not verify_admin_password(request.password):
        login_rate_limiter.record_failed_attempt(ip_address)
        security_logger.log_login_attempt(
            False, ip_address, user_agent, reason="invalid password"
        )
        error_response(
            message="Invalid password", status_code=status.HTTP_401_UNAUTHORIZED
        )

    login_rate_limiter.record_successful_login(ip_address)
    session = create_admin_session()
    token = encode_session(session)

    response.set_cookie(
        key=settings.ADMIN_SESSION_COOKIE,
        value=token,
        max_age=settings.ADMIN_SESSION_TTL_SECONDS,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
    )

    security_logger.log_login_attempt(True, ip_address, user_agent)
    security_logger.log_session_created(session.session_id, session.expires_at)

    return success_response(
        data={"access_token": token, "token_type": "bearer", "session": session.to_dict()},
        message="Login successful",
    )


@router.post("/logout")
async def logout(http_request: Request, response: Response):
    """Clear the session cookie."""
    token = http_request.cookies.get(settings.ADMIN_SESSION_COOKIE)
    session = decode_session(token) if token else None

    response.delete_cookie(settings.ADMIN_SESSION_COOKIE)
    security_logger.log_logout(session.session_id if session else None)

    return success_response(message="Logged out")


@router.get("/session")
async def get_session(session: AdminSessionDep):
    """Return the current admin session."""
    return success_response(data=session.to_dict())


# ============================================
# CONSOLE DATA
# ============================================


@router.get("/overview")
async def get_overview(session: AdminSessionDep):
    """Districts, wards, centers and candidates for the console, in one call."""
    try:
        collections = await load_collections(*OVERVIEW_COLLECTIONS)
    except CollectionLoadError as e:
        error_response(
            message=str(e),
            data=empty_collections(*OVERVIEW_COLLECTIONS),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )

    return success_response(data=collections)


@router.get("/candidates/{candidate_id}/ward-votes")
async def get_candidate_ward_votes(candidate_id: UUID, session: AdminSessionDep):
    """Map of ward ID to one candidate's votes in that ward."""
    names = ("wards", "centers", "candidates", "votes")
    try:
        collections = await load_collections(*names)
    except CollectionLoadError as e:
        error_response(
            message=str(e), data={}, status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )

    if not any(c["id"] == str(candidate_id) for c in collections["candidates"]):
        not_found_response("Candidate")

    return success_response(data=candidate_ward_votes(str(candidate_id), collections))


# ============================================
# ENTITY CREATION
# ============================================


@router.post("/districts", status_code=status.HTTP_201_CREATED)
async def create_district(
    request: DistrictCreate,
    conn: Annotated[asyncpg.Connection, Depends(get_db)],
    session: AdminSessionDep,
):
    """Create a district."""
    _check_required({"name": request.name}, "Please enter a district name.")

    try:
        district = await geo_service.create_district(conn, request.name)
    except asyncpg.PostgresError as e:
        logger.error(f"Error creating district: {e}", exc_info=True)
        error_response(
            message="Error saving district. Please try again.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data_entry_logger.log_entity_created("districts", district["id"], session.session_id)
    return success_response(data=district, message="District created successfully")


@router.post("/wards", status_code=status.HTTP_201_CREATED)
async def create_ward(
    request: WardCreate,
    conn: Annotated[asyncpg.Connection, Depends(get_db)],
    session: AdminSessionDep,
):
    """Create a ward under an existing district."""
    _check_required(
        {"district_id": request.district_id, "name": request.name},
        "Please enter a ward name and select a district.",
    )

    try:
        if await geo_service.get_district(conn, request.district_id) is None:
            not_found_response("District")
        ward = await geo_service.create_ward(conn, request.district_id, request.name)
    except asyncpg.PostgresError as e:
        logger.error(f"Error creating ward: {e}", exc_info=True)
        error_response(
            message="Error saving ward. Please try again.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data_entry_logger.log_entity_created("wards", ward["id"], session.session_id)
    return success_response(data=ward, message="Ward created successfully")


@router.post("/centers", status_code=status.HTTP_201_CREATED)
async def create_center(
    request: CenterCreate,
    conn: Annotated[asyncpg.Connection, Depends(get_db)],
    session: AdminSessionDep,
):
    """Create a voting center under an existing ward."""
    _check_required(
        {
            "ward_id": request.ward_id,
            "center_number": request.center_number,
            "name": request.name,
        },
        "Please enter center name, center number, and select a ward.",
    )

    try:
        if await geo_service.get_ward(conn, request.ward_id) is None:
            not_found_response("Ward")
        center = await geo_service.create_center(
            conn,
            request.ward_id,
            request.center_number,
            request.name,
            request.registered_voters,
        )
    except asyncpg.PostgresError as e:
        logger.error(f"Error creating center: {e}", exc_info=True)
        error_response(
            message="Error saving center. Please try again.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data_entry_logger.log_entity_created("centers", center["id"], session.session_id)
    return success_response(data=center, message="Center created successfully")


@router.post("/candidates", status_code=status.HTTP_201_CREATED)
async def create_candidate(
    request: CandidateCreate,
    conn: Annotated[asyncpg.Connection, Depends(get_db)],
    session: AdminSessionDep,
):
    """Create a candidate."""
    _check_required(
        {"name": request.name, "party": request.party},
        "Please enter candidate name and party.",
    )

    try:
        candidate = await candidate_service.create_candidate(
            conn, request.name, request.party
        )
    except asyncpg.PostgresError as e:
        logger.error(f"Error creating candidate: {e}", exc_info=True)
        error_response(
            message="Error saving candidate. Please try again.",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data_entry_logger.log_entity_created("candidates", candidate["id"], session.session_id)
    return success_response(data=candidate, message="Candidate created successfully")


# ============================================
# VOTE ENTRY
# ============================================


async def _open_form(conn: asyncpg.Connection, center_id: UUID) -> VoteEntryForm:
    form = VoteEntryForm(conn)
    if not await form.select_center(center_id):
        if form.notice == CENTER_NOT_FOUND_MESSAGE:
            not_found_response("Center")
        error_response(
            message=form.notice,
            data=form.to_dict(),
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return form


@router.get("/centers/{center_id}/votes")
async def get_center_votes(
    center_id: UUID,
    conn: Annotated[asyncpg.Connection, Depends(get_db)],
    session: AdminSessionDep,
):
    """Load the vote entry form for a center: candidates, counts and ceiling."""
    form = await _open_form(conn, center_id)
    return success_response(data=form.to_dict())


@router.put("/centers/{center_id}/votes")
async def save_center_votes(
    center_id: UUID,
    request: VoteSubmission,
    conn: Annotated[asyncpg.Connection, Depends(get_db)],
    session: AdminSessionDep,
):
    """
    Enter or update a center's vote counts.

    Counts must be whole numbers; each count and their total must not exceed
    the center's registered voters. Saving replaces the center's existing
    record (last write wins).

    **Request Body:**
    ```json
    {"counts": {"<candidate_id>": 150, "<candidate_id>": "90"}}
    ```
    """
    form = await _open_form(conn, center_id)

    for candidate_id, raw in request.counts.items():
        form.set_count(candidate_id, str(raw))

    if not await form.save():
        if form.notice == CENTER_NOT_FOUND_MESSAGE:
            not_found_response("Center")
        if form.errors:
            error_response(
                message=form.notice,
                data=form.to_dict(),
                errors=form.errors,
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            )
        error_response(
            message=form.notice or SAVE_ERROR_MESSAGE,
            data=form.to_dict(),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    data_entry_logger.log_votes_saved(
        str(center_id), form.total, bool(form.created), session.session_id
    )
    return success_response(data=form.to_dict(), message=form.notice)
