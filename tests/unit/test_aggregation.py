"""Unit tests for vote aggregation."""

import pytest

from conftest import (
    CANDIDATE_A_ID,
    CANDIDATE_B_ID,
    CANDIDATE_C_ID,
    CENTER_1_ID,
    CENTER_2_ID,
    CENTER_3_ID,
    WARD_1_ID,
    WARD_2_ID,
)
from votetally.services import aggregation


def _by_id(rows, key):
    return {row[f"{key}_id"]: row for row in rows}


class TestDistrictTotals:
    def test_sums_every_vote_record(self, sample_collections):
        rows = aggregation.district_totals(
            sample_collections["candidates"], sample_collections["votes"]
        )
        totals = {row["candidate_id"]: row["total_votes"] for row in rows}

        assert totals == {CANDIDATE_A_ID: 120, CANDIDATE_B_ID: 80, CANDIDATE_C_ID: 10}

    def test_sorted_descending(self, sample_collections):
        rows = aggregation.district_totals(
            sample_collections["candidates"], sample_collections["votes"]
        )

        assert [row["candidate_id"] for row in rows] == [
            CANDIDATE_A_ID,
            CANDIDATE_B_ID,
            CANDIDATE_C_ID,
        ]

    def test_percentages_sum_to_100(self, sample_collections):
        rows = aggregation.district_totals(
            sample_collections["candidates"], sample_collections["votes"]
        )

        assert sum(row["percentage"] for row in rows) == pytest.approx(100.0)
        assert rows[0]["percentage"] == pytest.approx(120 / 210 * 100)

    def test_zero_votes_yields_zero_percentages(self, sample_collections):
        rows = aggregation.district_totals(sample_collections["candidates"], [])

        assert len(rows) == 3
        assert all(row["total_votes"] == 0 for row in rows)
        assert all(row["percentage"] == 0 for row in rows)

    def test_unknown_candidate_counts_are_ignored(self, sample_collections):
        votes = sample_collections["votes"] + [
            {"id": "v-x", "center_id": CENTER_3_ID, "counts": {"removed-candidate": 40}}
        ]

        rows = aggregation.district_totals(sample_collections["candidates"], votes)

        assert sum(row["total_votes"] for row in rows) == 210
        assert sum(row["percentage"] for row in rows) == pytest.approx(100.0)


class TestWardTotals:
    def test_restricted_to_ward_centers(self, sample_collections):
        rows = aggregation.ward_totals(
            WARD_1_ID,
            sample_collections["candidates"],
            sample_collections["centers"],
            sample_collections["votes"],
        )
        totals = {row["candidate_id"]: row["total_votes"] for row in rows}

        assert totals == {CANDIDATE_A_ID: 120, CANDIDATE_B_ID: 80, CANDIDATE_C_ID: 10}
        assert sum(row["percentage"] for row in rows) == pytest.approx(100.0)

    def test_ward_without_votes(self, sample_collections):
        rows = aggregation.ward_totals(
            WARD_2_ID,
            sample_collections["candidates"],
            sample_collections["centers"],
            sample_collections["votes"],
        )

        assert all(row["total_votes"] == 0 for row in rows)
        assert all(row["percentage"] == 0 for row in rows)


class TestCenterTotals:
    def test_reads_single_record(self, sample_collections):
        vote = sample_collections["votes"][0]
        rows = aggregation.center_totals(sample_collections["candidates"], vote)
        by_candidate = _by_id(rows, "candidate")

        assert by_candidate[CANDIDATE_A_ID]["total_votes"] == 100
        assert by_candidate[CANDIDATE_A_ID]["percentage"] == pytest.approx(66.6667, rel=1e-4)
        assert by_candidate[CANDIDATE_B_ID]["percentage"] == pytest.approx(33.3333, rel=1e-4)
        assert by_candidate[CANDIDATE_C_ID]["total_votes"] == 0
        assert sum(row["percentage"] for row in rows) == pytest.approx(100.0)

    def test_no_vote_record(self, sample_collections):
        rows = aggregation.center_totals(sample_collections["candidates"], None)

        assert all(row["total_votes"] == 0 and row["percentage"] == 0 for row in rows)


class TestCandidateTotalsByWard:
    def test_lists_every_ward(self, sample_collections):
        rows = aggregation.candidate_totals_by_ward(
            CANDIDATE_A_ID,
            sample_collections["candidates"],
            sample_collections["wards"],
            sample_collections["centers"],
            sample_collections["votes"],
        )
        by_ward = _by_id(rows, "ward")

        assert set(by_ward) == {WARD_1_ID, WARD_2_ID}
        assert by_ward[WARD_1_ID]["total_votes"] == 120
        assert by_ward[WARD_2_ID]["total_votes"] == 0

    @pytest.mark.parametrize("candidate_id", [CANDIDATE_A_ID, CANDIDATE_B_ID, CANDIDATE_C_ID])
    def test_ward_totals_add_up_to_district_total(self, sample_collections, candidate_id):
        by_ward = aggregation.candidate_totals_by_ward(
            candidate_id,
            sample_collections["candidates"],
            sample_collections["wards"],
            sample_collections["centers"],
            sample_collections["votes"],
        )
        district = _by_id(
            aggregation.district_totals(
                sample_collections["candidates"], sample_collections["votes"]
            ),
            "candidate",
        )

        assert sum(row["total_votes"] for row in by_ward) == district[candidate_id]["total_votes"]

    def test_dangling_center_reference_is_skipped(self, sample_collections):
        votes = sample_collections["votes"] + [
            {"id": "v-x", "center_id": "deleted-center", "counts": {CANDIDATE_A_ID: 99}}
        ]

        rows = aggregation.candidate_totals_by_ward(
            CANDIDATE_A_ID,
            sample_collections["candidates"],
            sample_collections["wards"],
            sample_collections["centers"],
            votes,
        )

        assert sum(row["total_votes"] for row in rows) == 120

    def test_unknown_candidate(self, sample_collections):
        rows = aggregation.candidate_totals_by_ward(
            "no-such-candidate",
            sample_collections["candidates"],
            sample_collections["wards"],
            sample_collections["centers"],
            sample_collections["votes"],
        )

        assert rows == []


class TestWardVoteTotals:
    def test_all_candidates_combined(self, sample_collections):
        rows = aggregation.ward_vote_totals(
            sample_collections["wards"],
            sample_collections["centers"],
            sample_collections["votes"],
        )
        by_ward = _by_id(rows, "ward")

        assert by_ward[WARD_1_ID]["total_votes"] == 210
        assert by_ward[WARD_1_ID]["percentage"] == pytest.approx(100.0)
        assert by_ward[WARD_2_ID]["total_votes"] == 0
        assert rows[0]["ward_id"] == WARD_1_ID


class TestCenters:
    def test_breakdown_turnout(self, sample_collections):
        rows = aggregation.center_vote_breakdown(
            sample_collections["centers"], sample_collections["votes"]
        )
        by_center = _by_id(rows, "center")

        assert by_center[CENTER_1_ID]["total_votes"] == 150
        assert by_center[CENTER_1_ID]["turnout"] == pytest.approx(150 / 420 * 100)
        assert by_center[CENTER_3_ID]["has_vote_record"] is False
        assert by_center[CENTER_3_ID]["turnout"] == 0

    def test_candidate_by_center_limit(self, sample_collections):
        rows = aggregation.candidate_totals_by_center(
            CANDIDATE_B_ID,
            sample_collections["centers"],
            sample_collections["votes"],
            limit=1,
        )

        assert len(rows) == 1
        assert rows[0]["center_id"] == CENTER_1_ID
        assert rows[0]["total_votes"] == 50

    def test_center_ids_follow_records(self, sample_collections):
        rows = aggregation.candidate_totals_by_center(
            CANDIDATE_C_ID, sample_collections["centers"], sample_collections["votes"]
        )

        assert rows[0]["center_id"] == CENTER_2_ID
        assert rows[0]["total_votes"] == 10


class TestHelpers:
    def test_turnout_with_no_registered_voters(self):
        assert aggregation.turnout(10, 0) == 0

    def test_chart_series_cycles_colors_and_shortens_labels(self, sample_collections):
        candidates = [
            {"id": str(i), "name": f"A very long candidate name {i}", "party": "X"}
            for i in range(len(aggregation.CHART_COLORS) + 1)
        ]
        rows = aggregation.district_totals(candidates, [])

        series = aggregation.chart_series(rows, "candidate")

        assert series[0]["fill"] == aggregation.CHART_COLORS[0]
        assert series[-1]["fill"] == aggregation.CHART_COLORS[0]
        assert series[0]["name"] == "A very long can..."
        assert series[0]["party"] == "X"
        assert series[0]["percentage"] == 0
