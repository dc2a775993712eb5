"""
Message builders (formatting.py) and dispatcher wiring.
"""
from __future__ import annotations

from datetime import date

from chessreg.config import settings
from chessreg.formatting import (
    field_error_lines,
    md,
    payment_instructions,
    player_detail_text,
    registration_summary,
    roster_text,
)
from chessreg.models.models import AgeCategory, PaymentStatus
from chessreg.services.roster_service import RosterView, build_roster_page


class TestMarkdownEscaping:

    def test_escapes_control_characters(self) -> None:
        assert md("de_Silva *star* `x` [y]") == r"de\_Silva \*star\* \`x\` \[y]"

    def test_none(self) -> None:
        assert md(None) == "—"


class TestRegistrationText:

    def test_summary_with_iso_date(self) -> None:
        data = {
            "full_name": "Kavin Sivakumar",
            "name_with_initials": "S. Kavin",
            "fide_id": None,
            "date_of_birth": "2014-04-21",
            "gender": "Male",
            "contact_number": "0771234567",
        }
        text = registration_summary(data, AgeCategory.U12)
        assert "21/04/2014" in text
        assert "Under 12" in text
        assert "none" in text

    def test_payment_instructions_list_both_accounts(self) -> None:
        text = payment_instructions()
        assert settings.PAYEE_A_ACCOUNT in text
        assert settings.PAYEE_B_ACCOUNT in text

    def test_field_error_lines(self) -> None:
        text = field_error_lines({"full_name": "Too short", "form": "Please check"})
        assert "Full Name: Too short" in text
        assert "Form: Please check" in text


class TestRosterText:

    def test_cards_and_rows(self, make_record) -> None:
        records = [
            make_record(1, payment_status=PaymentStatus.PAID_TO_A),
            make_record(2, full_name="de_Silva"),
        ]
        view = RosterView()
        text = roster_text(build_roster_page(records, view), view)
        assert "Registered: *2*" in text
        assert "Paid: *1* (50% of total)" in text
        assert "(100% of paid)" in text
        assert r"de\_Silva" in text
        assert "Page 1/1" in text

    def test_empty_roster(self) -> None:
        view = RosterView(filters={"full_name": "nobody"})
        text = roster_text(build_roster_page([], view), view)
        assert "No registrations match" in text
        assert "Filters:" in text

    def test_player_detail(self, make_record) -> None:
        r = make_record(3, fide_id="12345678", date_of_birth=date(2012, 1, 5))
        text = player_detail_text(r)
        assert "12345678" in text
        assert "05/01/2012" in text
        assert "Unpaid" in text


class TestDispatcher:

    def test_fallback_router_is_last(self) -> None:
        from aiogram.fsm.storage.memory import SimpleEventIsolation

        from chessreg.main import build_dispatcher

        dp = build_dispatcher()
        names = [r.name for r in dp.sub_routers]
        assert names[0] == "common"
        assert names[-1] == "fallback"
        assert {"registration", "admin_auth", "admin_roster", "admin_export"} <= set(names)
        # Updates from one chat run one at a time
        assert isinstance(dp.fsm.events_isolation, SimpleEventIsolation)
