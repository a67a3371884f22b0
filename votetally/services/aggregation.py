"""Vote aggregation.

Pure functions over already-loaded collections. Every call recomputes from
the raw vote records; nothing is cached or updated incrementally.

Rows returned by the grouping functions share one shape:

    {"<key>_id": ..., "<key>": <record>, "total_votes": int, "percentage": float}

and are sorted by ``total_votes`` descending. A percentage is the row's share
of the grand total of the grouping, and is 0 for every row when that grand
total is 0.
"""

from collections import defaultdict
from typing import Any, Iterable

CHART_COLORS = (
    "#2563eb",
    "#dc2626",
    "#16a34a",
    "#ca8a04",
    "#9333ea",
    "#0891b2",
    "#ea580c",
    "#db2777",
)


def percentage(part: int, whole: int) -> float:
    """Share of ``part`` in ``whole`` as a percentage, 0 when ``whole`` is 0."""
    if whole <= 0:
        return 0.0
    return part / whole * 100


def turnout(total_votes: int, registered_voters: int) -> float:
    """Votes cast as a percentage of registered voters."""
    return percentage(total_votes, registered_voters)


def sum_counts(counts: dict[str, int] | None) -> int:
    """Total of a vote record's counts mapping."""
    return sum((counts or {}).values())


def sum_registered_voters(centers: Iterable[dict[str, Any]]) -> int:
    return sum(center.get("registered_voters") or 0 for center in centers)


def _sort_desc(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    # Stable sort keeps the input order among equal totals
    return sorted(rows, key=lambda row: row["total_votes"], reverse=True)


def _candidate_rows(
    candidates: list[dict[str, Any]], totals: dict[str, int], grand_total: int
) -> list[dict[str, Any]]:
    return _sort_desc(
        [
            {
                "candidate_id": candidate["id"],
                "candidate": candidate,
                "total_votes": totals.get(candidate["id"], 0),
                "percentage": percentage(totals.get(candidate["id"], 0), grand_total),
            }
            for candidate in candidates
        ]
    )


def _ward_rows(
    wards: list[dict[str, Any]], totals: dict[str, int], grand_total: int
) -> list[dict[str, Any]]:
    return _sort_desc(
        [
            {
                "ward_id": ward["id"],
                "ward": ward,
                "total_votes": totals.get(ward["id"], 0),
                "percentage": percentage(totals.get(ward["id"], 0), grand_total),
            }
            for ward in wards
        ]
    )


def _sum_by_candidate(
    candidates: list[dict[str, Any]], votes: Iterable[dict[str, Any]]
) -> tuple[dict[str, int], int]:
    # Counts for candidates that no longer exist are left out of the total
    known = {candidate["id"] for candidate in candidates}
    totals: dict[str, int] = defaultdict(int)
    grand_total = 0

    for vote in votes:
        for candidate_id, count in (vote.get("counts") or {}).items():
            if candidate_id not in known:
                continue
            totals[candidate_id] += count
            grand_total += count

    return totals, grand_total


# ============================================
# BY CANDIDATE
# ============================================


def district_totals(
    candidates: list[dict[str, Any]],
    votes: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Totals per candidate across every vote record in the district."""
    totals, grand_total = _sum_by_candidate(candidates, votes)
    return _candidate_rows(candidates, totals, grand_total)


def ward_totals(
    ward_id: str,
    candidates: list[dict[str, Any]],
    centers: list[dict[str, Any]],
    votes: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Totals per candidate across the vote records of one ward's centers."""
    center_ids = {center["id"] for center in centers if center.get("ward_id") == ward_id}
    ward_votes = [vote for vote in votes if vote.get("center_id") in center_ids]

    totals, grand_total = _sum_by_candidate(candidates, ward_votes)
    return _candidate_rows(candidates, totals, grand_total)


def center_totals(
    candidates: list[dict[str, Any]],
    vote: dict[str, Any] | None,
) -> list[dict[str, Any]]:
    """Per-candidate counts of a single center's vote record."""
    totals, grand_total = _sum_by_candidate(candidates, [vote] if vote else [])
    return _candidate_rows(candidates, totals, grand_total)


# ============================================
# BY WARD
# ============================================


def candidate_totals_by_ward(
    candidate_id: str,
    candidates: list[dict[str, Any]],
    wards: list[dict[str, Any]],
    centers: list[dict[str, Any]],
    votes: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """
    One candidate's votes grouped by ward.

    Every ward is listed, with 0 where the candidate has no votes. Vote
    records whose center (or whose center's ward) no longer exists are
    skipped. Returns an empty list for an unknown candidate.
    """
    if not any(candidate["id"] == candidate_id for candidate in candidates):
        return []

    ward_by_center = {center["id"]: center.get("ward_id") for center in centers}
    totals: dict[str, int] = {ward["id"]: 0 for ward in wards}
    grand_total = 0

    for vote in votes:
        ward_id = ward_by_center.get(vote.get("center_id"))
        count = (vote.get("counts") or {}).get(candidate_id, 0)
        if ward_id not in totals or not count:
            continue
        totals[ward_id] += count
        grand_total += count

    return _ward_rows(wards, totals, grand_total)


def ward_vote_totals(
    wards: list[dict[str, Any]],
    centers: list[dict[str, Any]],
    votes: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """All candidates' votes combined, grouped by ward."""
    ward_by_center = {center["id"]: center.get("ward_id") for center in centers}
    totals: dict[str, int] = {ward["id"]: 0 for ward in wards}
    grand_total = 0

    for vote in votes:
        ward_id = ward_by_center.get(vote.get("center_id"))
        if ward_id not in totals:
            continue
        vote_count = sum_counts(vote.get("counts"))
        totals[ward_id] += vote_count
        grand_total += vote_count

    return _ward_rows(wards, totals, grand_total)


# ============================================
# BY CENTER
# ============================================


def center_vote_breakdown(
    centers: list[dict[str, Any]],
    votes: list[dict[str, Any]],
) -> list[dict[str, Any]]:
    """Votes cast and turnout for each center, sorted by votes descending."""
    votes_by_center = {vote["center_id"]: vote for vote in votes}
    rows = []

    for center in centers:
        vote = votes_by_center.get(center["id"])
        total_votes = sum_counts(vote.get("counts")) if vote else 0
        registered_voters = center.get("registered_voters") or 0
        rows.append(
            {
                "center_id": center["id"],
                "center": center,
                "total_votes": total_votes,
                "registered_voters": registered_voters,
                "turnout": turnout(total_votes, registered_voters),
                "has_vote_record": vote is not None,
            }
        )

    return _sort_desc(rows)


def candidate_totals_by_center(
    candidate_id: str,
    centers: list[dict[str, Any]],
    votes: list[dict[str, Any]],
    limit: int | None = None,
) -> list[dict[str, Any]]:
    """One candidate's votes per center, optionally only the top ``limit``."""
    totals: dict[str, int] = defaultdict(int)
    center_ids = {center["id"] for center in centers}

    for vote in votes:
        center_id = vote.get("center_id")
        count = (vote.get("counts") or {}).get(candidate_id, 0)
        if center_id in center_ids and count:
            totals[center_id] += count

    rows = _sort_desc(
        [
            {
                "center_id": center["id"],
                "center": center,
                "total_votes": totals.get(center["id"], 0),
            }
            for center in centers
        ]
    )
    return rows[:limit] if limit is not None else rows


# ============================================
# CHARTS
# ============================================


def chart_series(
    rows: list[dict[str, Any]], label_key: str, max_label: int = 15
) -> list[dict[str, Any]]:
    """
    Chart points for aggregation rows, one colour per point from a fixed
    palette. Labels longer than ``max_label`` characters are shortened.
    """
    series = []

    for index, row in enumerate(rows):
        record = row[label_key]
        name = record.get("name", "")
        if len(name) > max_label:
            name = f"{name[:max_label]}..."

        point = {
            "name": name,
            "votes": row["total_votes"],
            "fill": CHART_COLORS[index % len(CHART_COLORS)],
        }
        if "percentage" in row:
            point["percentage"] = row["percentage"]
        if "party" in record:
            point["party"] = record["party"]
        if "turnout" in row:
            point["turnout"] = row["turnout"]
        series.append(point)

    return series
