"""
Unit tests — roster query engine (roster_service.py).

Pure functions over PlayerRecord snapshots; no database session required.

Coverage:
  - filtering (case-insensitive substring, AND, empty patterns, None values)
  - sorting (None placement, string comparison, stability, toggling)
  - pagination (12 per page, clamping, empty roster)
  - aggregates and rounding
  - RosterView state transitions and FSM round trip
  - memoised page building and in-memory Roster patching
"""
from __future__ import annotations

from datetime import date

import pytest

from chessreg.models.models import AgeCategory, Gender, PaymentStatus
from chessreg.services.player_service import list_players
from chessreg.services.registration_service import submit_registration
from chessreg.services.roster_service import (
    ASC,
    DESC,
    PAGE_SIZE,
    Roster,
    RosterView,
    _build,
    build_roster_page,
    compute_stats,
    filter_records,
    paginate,
    percent,
    sort_records,
    unique_values,
)


# ─────────────────────────── Filtering ────────────────────────────────────────

class TestFilter:

    def test_case_insensitive_substring(self, make_record) -> None:
        records = [
            make_record(1, full_name="Kavin Sivakumar"),
            make_record(2, full_name="Anjali Perera"),
            make_record(3, full_name="KAVYA Raj"),
        ]
        result = filter_records(records, {"full_name": "kav"})
        assert [r.full_name for r in result] == ["Kavin Sivakumar", "KAVYA Raj"]

    def test_and_across_fields(self, make_record) -> None:
        records = [
            make_record(1, gender=Gender.MALE,   age_category=AgeCategory.U12),
            make_record(2, gender=Gender.FEMALE, age_category=AgeCategory.U12),
            make_record(3, gender=Gender.FEMALE, age_category=AgeCategory.U14),
        ]
        result = filter_records(records, {"gender": "female", "age_category": "U12"})
        assert [r.id for r in result] == [records[1].id]

    def test_empty_pattern_ignored(self, make_record) -> None:
        records = [make_record(i) for i in range(5)]
        assert filter_records(records, {"full_name": ""}) == tuple(records)

    def test_none_value_only_matches_empty(self, make_record) -> None:
        records = [make_record(1, fide_id=None), make_record(2, fide_id="12345")]
        assert [r.id for r in filter_records(records, {"fide_id": "1"})] == [records[1].id]

    def test_filters_commute(self, make_record) -> None:
        records = [
            make_record(i, gender=Gender.ALL[i % 3], payment_status=PaymentStatus.ALL[i % 2])
            for i in range(20)
        ]
        a = filter_records(filter_records(records, {"gender": "male"}), {"payment_status": "unpaid"})
        b = filter_records(filter_records(records, {"payment_status": "unpaid"}), {"gender": "male"})
        both = filter_records(records, {"gender": "male", "payment_status": "unpaid"})
        assert a == b == both

    def test_unknown_field_rejected(self, make_record) -> None:
        with pytest.raises(ValueError):
            filter_records([make_record(1)], {"password": "x"})


# ─────────────────────────── Sorting ──────────────────────────────────────────

class TestSort:

    def test_ascending_and_descending(self, make_record) -> None:
        records = [make_record(1, full_name="b"), make_record(2, full_name="c"), make_record(3, full_name="a")]
        assert [r.full_name for r in sort_records(records, "full_name", ASC)] == ["a", "b", "c"]
        assert [r.full_name for r in sort_records(records, "full_name", DESC)] == ["c", "b", "a"]

    def test_none_first_ascending_last_descending(self, make_record) -> None:
        records = [make_record(1, fide_id="200"), make_record(2, fide_id=None), make_record(3, fide_id="100")]
        asc = sort_records(records, "fide_id", ASC)
        desc = sort_records(records, "fide_id", DESC)
        assert [r.fide_id for r in asc] == [None, "100", "200"]
        assert [r.fide_id for r in desc] == ["200", "100", None]

    def test_numeric_looking_values_compare_as_strings(self, make_record) -> None:
        records = [make_record(1, fide_id="9"), make_record(2, fide_id="10")]
        assert [r.fide_id for r in sort_records(records, "fide_id", ASC)] == ["10", "9"]

    def test_stable_for_equal_keys(self, make_record) -> None:
        records = [make_record(i, age_category=AgeCategory.U12) for i in range(6)]
        assert sort_records(records, "age_category", ASC) == tuple(records)
        assert sort_records(records, "age_category", DESC) == tuple(records)

    def test_dates_sort_chronologically(self, make_record) -> None:
        records = [
            make_record(1, date_of_birth=date(2014, 5, 1)),
            make_record(2, date_of_birth=date(2010, 12, 1)),
            make_record(3, date_of_birth=date(2012, 1, 30)),
        ]
        result = sort_records(records, "date_of_birth", ASC)
        assert [r.id for r in result] == [records[1].id, records[2].id, records[0].id]

    def test_toggling_twice_restores_order(self, make_record) -> None:
        records = [make_record(i, full_name=name) for i, name in enumerate("dbeac")]
        view = RosterView()
        view.toggle_sort("full_name")
        first = build_roster_page(records, view).visible
        view.toggle_sort("full_name")
        view.toggle_sort("full_name")
        assert build_roster_page(records, view).visible == first
        assert [r.full_name for r in first] == ["a", "b", "c", "d", "e"]

    def test_id_is_not_sortable(self, make_record) -> None:
        with pytest.raises(ValueError):
            sort_records([make_record(1)], "id", ASC)


# ─────────────────────────── Pagination ───────────────────────────────────────

class TestPaginate:

    def test_page_size_is_twelve(self) -> None:
        assert PAGE_SIZE == 12

    def test_twenty_five_records(self, make_record) -> None:
        records = tuple(make_record(i) for i in range(25))
        rows, page, total = paginate(records, 1)
        assert (len(rows), page, total) == (12, 1, 3)
        rows, page, total = paginate(records, 3)
        assert (len(rows), page, total) == (1, 3, 3)
        assert rows[0] is records[24]

    @pytest.mark.parametrize("requested, expected", [(99, 3), (0, 1), (-4, 1)])
    def test_out_of_range_clamps(self, make_record, requested, expected) -> None:
        records = tuple(make_record(i) for i in range(25))
        _, page, _ = paginate(records, requested)
        assert page == expected

    def test_empty_roster_has_one_page(self) -> None:
        rows, page, total = paginate((), 5)
        assert rows == () and page == 1 and total == 1

    def test_exact_multiple(self, make_record) -> None:
        records = tuple(make_record(i) for i in range(24))
        _, _, total = paginate(records, 1)
        assert total == 2


# ─────────────────────────── Aggregates ───────────────────────────────────────

class TestStats:

    def test_ten_records(self, make_record) -> None:
        statuses = (
            [PaymentStatus.UNPAID] * 4
            + [PaymentStatus.PAID_TO_A] * 3
            + [PaymentStatus.PAID_TO_B] * 3
        )
        stats = compute_stats(make_record(i, payment_status=s) for i, s in enumerate(statuses))
        assert stats.total_registered == 10
        assert stats.total_paid == 6
        assert stats.paid_to_a == 3
        assert stats.paid_to_b == 3
        assert stats.paid_pct_of_total == 60
        assert stats.a_pct_of_paid == 50
        assert stats.b_pct_of_paid == 50

    def test_zero_records(self) -> None:
        stats = compute_stats([])
        assert stats.total_registered == 0
        assert stats.paid_pct_of_total == 0
        assert stats.a_pct_of_paid == 0
        assert stats.b_pct_of_paid == 0

    def test_nobody_paid(self, make_record) -> None:
        stats = compute_stats([make_record(1), make_record(2)])
        assert stats.total_paid == 0
        assert stats.a_pct_of_paid == 0

    @pytest.mark.parametrize("part, whole, expected", [
        (1, 3, 33),
        (2, 3, 67),
        (1, 8, 13),     # 12.5 rounds half up
        (1, 200, 1),    # 0.5 rounds half up
        (0, 5, 0),
        (5, 5, 100),
        (3, 0, 0),
    ])
    def test_percent_rounding(self, part, whole, expected) -> None:
        assert percent(part, whole) == expected

    def test_unique_values(self, make_record) -> None:
        records = [
            make_record(1, age_category=AgeCategory.U14),
            make_record(2, age_category=AgeCategory.U8),
            make_record(3, age_category=AgeCategory.U14),
        ]
        assert unique_values(records, "age_category") == [AgeCategory.U14, AgeCategory.U8]

    def test_unique_values_skip_empty(self, make_record) -> None:
        records = [make_record(1, fide_id=None), make_record(2, fide_id="42")]
        assert unique_values(records, "fide_id") == ["42"]


# ─────────────────────────── RosterView ───────────────────────────────────────

class TestRosterView:

    def test_defaults(self) -> None:
        view = RosterView()
        assert view.sort_field == "created_at"
        assert view.sort_direction == DESC
        assert view.page == 1
        assert view.filters == {}

    def test_toggle_same_field_flips(self) -> None:
        view = RosterView()
        view.toggle_sort("created_at")
        assert view.sort_direction == ASC
        view.toggle_sort("created_at")
        assert view.sort_direction == DESC

    def test_toggle_new_field_starts_ascending(self) -> None:
        view = RosterView(page=3)
        view.toggle_sort("full_name")
        assert (view.sort_field, view.sort_direction, view.page) == ("full_name", ASC, 1)

    def test_set_filter_resets_page(self) -> None:
        view = RosterView(page=4)
        view.set_filter("full_name", "  kav ")
        assert view.filters == {"full_name": "kav"}
        assert view.page == 1

    def test_blank_filter_removes_it(self) -> None:
        view = RosterView(filters={"gender": "Male"})
        view.set_filter("gender", "")
        assert view.filters == {}

    def test_clear_filters(self) -> None:
        view = RosterView(filters={"gender": "Male", "full_name": "a"}, page=2)
        view.clear_filters()
        assert view.filters == {} and view.page == 1

    def test_go_to_page_clamps(self) -> None:
        view = RosterView()
        view.go_to_page(10, total_pages=3)
        assert view.page == 3

    def test_dict_round_trip(self) -> None:
        view = RosterView(filters={"gender": "Female"}, sort_field="full_name", sort_direction=ASC, page=2)
        assert RosterView.from_dict(view.to_dict()) == view

    def test_from_empty_dict(self) -> None:
        assert RosterView.from_dict(None) == RosterView()


# ─────────────────────────── Page building ────────────────────────────────────

class TestBuildRosterPage:

    def test_default_view_is_newest_first(self, make_record) -> None:
        records = [make_record(i) for i in range(5)]
        page = build_roster_page(records, RosterView())
        assert [r.id for r in page.rows] == [r.id for r in reversed(records)]

    def test_stats_ignore_filters(self, make_record) -> None:
        records = [
            make_record(1, gender=Gender.MALE, payment_status=PaymentStatus.PAID_TO_A),
            make_record(2, gender=Gender.FEMALE),
        ]
        page = build_roster_page(records, RosterView(filters={"gender": "female"}))
        assert len(page.visible) == 1
        assert page.stats.total_registered == 2
        assert page.stats.total_paid == 1

    def test_visible_is_unpaginated(self, make_record) -> None:
        records = [make_record(i) for i in range(30)]
        page = build_roster_page(records, RosterView(page=2))
        assert len(page.visible) == 30
        assert len(page.rows) == 12
        assert page.first_index == 13

    def test_page_is_clamped(self, make_record) -> None:
        records = [make_record(i) for i in range(25)]
        page = build_roster_page(records, RosterView(page=99))
        assert page.page == 3
        assert len(page.rows) == 1

    def test_memoised(self, make_record) -> None:
        _build.cache_clear()
        records = [make_record(i) for i in range(10)]
        view = RosterView(filters={"full_name": "player"})
        first = build_roster_page(records, view)
        second = build_roster_page(list(records), RosterView(filters={"full_name": "player"}))
        assert first is second
        assert _build.cache_info().hits == 1

    def test_changed_records_rebuild(self, make_record) -> None:
        _build.cache_clear()
        roster = Roster([make_record(i) for i in range(3)])
        before = build_roster_page(roster.records, RosterView())
        roster.patch_status(roster.records[0].id, PaymentStatus.PAID_TO_B)
        after = build_roster_page(roster.records, RosterView())
        assert before is not after
        assert after.stats.paid_to_b == 1


# ─────────────────────────── In-memory roster ─────────────────────────────────

class TestRoster:

    def test_patch_status_replaces_one_record(self, make_record) -> None:
        records = [make_record(i) for i in range(3)]
        roster = Roster(records)
        assert roster.patch_status(records[1].id, PaymentStatus.PAID_TO_A)
        assert roster.get(records[1].id).payment_status == PaymentStatus.PAID_TO_A
        assert roster.get(records[0].id) is records[0]
        assert roster.get(records[2].id) is records[2]
        # The original snapshot is untouched
        assert records[1].payment_status == PaymentStatus.UNPAID

    def test_patch_unknown_id(self, make_record) -> None:
        roster = Roster([make_record(1)])
        assert not roster.patch_status("missing", PaymentStatus.PAID_TO_A)

    def test_replace(self, make_record) -> None:
        roster = Roster([make_record(1)])
        roster.replace([make_record(2), make_record(3)])
        assert [r.id for r in roster.records] == [make_record(2).id, make_record(3).id]

    async def test_from_players(self, async_session, valid_form) -> None:
        await submit_registration(async_session, valid_form())
        roster = Roster.from_players(await list_players(async_session))
        assert len(roster.records) == 1
        assert roster.records[0].full_name == "Kavin Sivakumar"
