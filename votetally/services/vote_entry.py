"""Admin vote-entry form.

Holds the editable counts of one center and walks the form through

    no-center-selected -> center-selected-loading -> center-selected-ready
    center-selected-ready -> saving -> center-selected-ready

Counts are only trusted once they have been written and read back from the
store; a failed save keeps what was typed so it can be resubmitted.
"""

from enum import Enum
from typing import Any
from uuid import UUID

import asyncpg

from votetally.core.logging_config import get_logger
from votetally.core.validation import VoteCountValidator
from votetally.services import candidates as candidate_service
from votetally.services import geographic as geo_service
from votetally.services import votes as vote_service
from votetally.services.aggregation import sum_counts

logger = get_logger(__name__)

LOAD_ERROR_MESSAGE = "Error loading vote data. Please try again."
SAVE_ERROR_MESSAGE = "Error saving votes. Please try again."
FIX_ERRORS_MESSAGE = "Please fix the vote entry errors before saving."
SAVED_MESSAGE = "Votes have been successfully saved."
NOT_NUMERIC_MESSAGE = "Votes must be a whole number"
UNKNOWN_CANDIDATE_MESSAGE = "Unknown candidate"
CENTER_NOT_FOUND_MESSAGE = "Center not found"


class VoteEntryState(str, Enum):
    NO_CENTER_SELECTED = "no-center-selected"
    LOADING = "center-selected-loading"
    READY = "center-selected-ready"
    SAVING = "saving"


class VoteEntryForm:
    """Vote entry for a single center, backed by a store connection."""

    def __init__(self, conn: asyncpg.Connection) -> None:
        self.conn = conn
        self.state = VoteEntryState.NO_CENTER_SELECTED
        self.center: dict[str, Any] | None = None
        self.candidates: list[dict[str, Any]] = []
        self.existing_vote: dict[str, Any] | None = None
        self.counts: dict[str, int] = {}
        self.field_errors: dict[str, str] = {}
        self.notice: str | None = None
        self.created: bool | None = None

    # ------------------------------------------------------------------
    # Selection and loading
    # ------------------------------------------------------------------

    async def select_center(self, center_id: UUID) -> bool:
        """
        Select a center and load its candidates and existing vote record.

        Returns:
            True when the form is ready for editing.
        """
        self.state = VoteEntryState.LOADING
        self.center = None
        self.notice = None

        try:
            center = await geo_service.get_center(self.conn, center_id)
            if center is None:
                self.state = VoteEntryState.NO_CENTER_SELECTED
                self.notice = CENTER_NOT_FOUND_MESSAGE
                return False
            self.center = center
            await self._load_vote_data()
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Error loading vote data for center {center_id}: {e}", exc_info=True)
            self.state = VoteEntryState.NO_CENTER_SELECTED
            self.notice = LOAD_ERROR_MESSAGE
            return False

        self.state = VoteEntryState.READY
        logger.debug(
            f"Selected center: {self.center['name']} ({self.center['center_number']})"
        )
        return True

    async def _load_vote_data(self) -> None:
        center_id = UUID(self.center["id"])
        self.candidates = await candidate_service.list_candidates(self.conn)
        self.existing_vote = await vote_service.get_vote_for_center(self.conn, center_id)

        existing = (self.existing_vote or {}).get("counts", {})
        self.counts = {
            candidate["id"]: existing.get(candidate["id"], 0)
            for candidate in self.candidates
        }
        self.field_errors = {}

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    @property
    def registered_voters(self) -> int:
        return (self.center or {}).get("registered_voters") or 0

    def set_count(self, candidate_id: str, raw: str) -> bool:
        """
        Apply a value typed into a candidate's count field.

        Only digits (or an empty field, meaning 0) are accepted; any other
        input leaves the count unchanged. Returns True if the value was
        applied.
        """
        if self.state != VoteEntryState.READY:
            raise RuntimeError(f"Cannot edit counts while {self.state.value}")

        if candidate_id not in self.counts:
            self.field_errors[candidate_id] = UNKNOWN_CANDIDATE_MESSAGE
            return False

        value = VoteCountValidator.parse_count(raw)
        if value is None:
            self.field_errors[candidate_id] = NOT_NUMERIC_MESSAGE
            return False

        error = VoteCountValidator.count_error(value, self.registered_voters)
        if error:
            self.field_errors[candidate_id] = error
        else:
            self.field_errors.pop(candidate_id, None)

        self.counts[candidate_id] = value
        return True

    @property
    def total(self) -> int:
        return sum_counts(self.counts)

    @property
    def total_error(self) -> str | None:
        return VoteCountValidator.total_error(self.total, self.registered_voters)

    @property
    def errors(self) -> dict[str, str]:
        errors = dict(self.field_errors)
        if self.total_error:
            errors["total"] = self.total_error
        return errors

    @property
    def can_save(self) -> bool:
        return self.state == VoteEntryState.READY and not self.errors

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    async def save(self) -> bool:
        """
        Persist the counts, then reload them from the store.

        Nothing is written while the form has errors. A store failure returns
        the form to ready with the typed counts intact.
        """
        if self.state != VoteEntryState.READY:
            return False

        if self.total_error:
            self.notice = self.total_error
            return False
        if self.field_errors:
            self.notice = FIX_ERRORS_MESSAGE
            return False

        self.state = VoteEntryState.SAVING
        center_id = UUID(self.center["id"])

        try:
            result = await vote_service.save_center_votes(
                self.conn, center_id, dict(self.counts)
            )
        except vote_service.VoteValidationError as e:
            self.field_errors.update(
                {key: msg for key, msg in e.errors.items() if key != "total"}
            )
            self.notice = str(e)
            self.state = VoteEntryState.READY
            return False
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Error saving votes for center {center_id}: {e}", exc_info=True)
            self.notice = SAVE_ERROR_MESSAGE
            self.state = VoteEntryState.READY
            return False

        if result is None:
            # Center removed between load and save
            self.notice = CENTER_NOT_FOUND_MESSAGE
            self.state = VoteEntryState.NO_CENTER_SELECTED
            self.center = None
            return False

        _, self.created = result

        try:
            await self._load_vote_data()
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Error reloading votes for center {center_id}: {e}", exc_info=True)
            self.notice = LOAD_ERROR_MESSAGE
            self.state = VoteEntryState.READY
            return True

        self.notice = SAVED_MESSAGE
        self.state = VoteEntryState.READY
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "state": self.state.value,
            "center": self.center,
            "candidates": self.candidates,
            "vote": self.existing_vote,
            "counts": self.counts,
            "total": self.total,
            "registered_voters": self.registered_voters,
            "errors": self.errors,
            "can_save": self.can_save,
            "notice": self.notice,
            "created": self.created,
        }
