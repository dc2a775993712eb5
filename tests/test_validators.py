"""
Unit tests — Input validation (validators.py).

Covers the per-field checks used by the step-by-step flow and the
RegistrationData model used on submit:
  - names, FIDE ID, contact number normalisation
  - date of birth bounds and accepted input formats
  - gender whitelist, terms, honeypot
  - field_errors() flattening and validate_registration() fail-closed paths

All tests are synchronous; no database session required.
"""
from __future__ import annotations

from datetime import date

import pytest

from chessreg.errors import GENERIC_FORM_ERROR, BotDetected, FormValidationError
from chessreg.validators import (
    check_contact_number,
    check_date_of_birth,
    check_fide_id,
    check_full_name,
    check_gender,
    check_name_with_initials,
    normalize_contact_number,
    parse_date_of_birth,
    validate_registration,
)

TODAY = date(2025, 8, 1)


# ─────────────────────────── Names ────────────────────────────────────────────

class TestNames:

    def test_full_name_is_stripped(self) -> None:
        assert check_full_name("  Kavin Sivakumar ") == "Kavin Sivakumar"

    @pytest.mark.parametrize("bad", ["", " ", "K", "  K  ", None])
    def test_full_name_too_short(self, bad) -> None:
        with pytest.raises(ValueError, match="at least 2 characters"):
            check_full_name(bad)

    def test_two_characters_is_enough(self) -> None:
        assert check_full_name("Li") == "Li"

    def test_name_with_initials_required(self) -> None:
        with pytest.raises(ValueError, match="Name with initials is required"):
            check_name_with_initials(" ")

    def test_name_with_initials_accepts_dots(self) -> None:
        assert check_name_with_initials("A.B. Perera") == "A.B. Perera"


# ─────────────────────────── FIDE ID ──────────────────────────────────────────

class TestFideId:

    @pytest.mark.parametrize("blank", [None, "", "   "])
    def test_blank_becomes_none(self, blank) -> None:
        assert check_fide_id(blank) is None

    def test_value_kept_verbatim(self) -> None:
        assert check_fide_id(" 12345678 ") == "12345678"

    def test_too_long(self) -> None:
        with pytest.raises(ValueError):
            check_fide_id("9" * 33)


# ─────────────────────────── Contact number ───────────────────────────────────

class TestContactNumber:

    @pytest.mark.parametrize("value", ["0771234567", "+94771234567"])
    def test_valid(self, value) -> None:
        assert check_contact_number(value) == value

    @pytest.mark.parametrize("typed, stored", [
        ("077 123 4567",     "0771234567"),
        ("077-123-4567",     "0771234567"),
        ("+94 77 123 4567",  "+94771234567"),
    ])
    def test_spaces_and_dashes_are_removed(self, typed, stored) -> None:
        assert normalize_contact_number(typed) == stored
        assert check_contact_number(typed) == stored

    @pytest.mark.parametrize("bad", [
        "12345",            # too short
        "077123456",        # 9 digits with the leading 0
        "07712345678",      # 11 digits
        "+9477123456",      # +94 with only 8 digits
        "+44771234567",     # wrong country code
        "077123456a",       # letters
        "",
        "0٧٧١٢٣٤٥٦٧",       # Arabic-Indic digits
        "+94٧٧١٢٣٤٥٦٧",
        "０７７１２３４５６７",   # full-width digits
    ])
    def test_invalid(self, bad) -> None:
        with pytest.raises(ValueError, match="valid Sri Lankan phone number"):
            check_contact_number(bad)


# ─────────────────────────── Date of birth ────────────────────────────────────

class TestDateOfBirth:

    def test_today_is_allowed(self) -> None:
        assert check_date_of_birth(TODAY, TODAY) == TODAY

    def test_future_rejected(self) -> None:
        with pytest.raises(ValueError, match="future"):
            check_date_of_birth(date(2025, 8, 2), TODAY)

    def test_before_1900_rejected(self) -> None:
        with pytest.raises(ValueError, match="1900"):
            check_date_of_birth(date(1899, 12, 31), TODAY)

    def test_1900_boundary_allowed(self) -> None:
        assert check_date_of_birth(date(1900, 1, 1), TODAY) == date(1900, 1, 1)

    @pytest.mark.parametrize("text", ["21/04/2014", "21.04.2014", "21-04-2014", "2014-04-21"])
    def test_parse_formats(self, text) -> None:
        assert parse_date_of_birth(text, TODAY) == date(2014, 4, 21)

    @pytest.mark.parametrize("text", ["", "yesterday", "31/02/2014", "2014/04/21"])
    def test_parse_rejects_garbage(self, text) -> None:
        with pytest.raises(ValueError, match="DD/MM/YYYY"):
            parse_date_of_birth(text, TODAY)

    def test_parse_applies_bounds(self) -> None:
        with pytest.raises(ValueError, match="future"):
            parse_date_of_birth("01/01/2030", TODAY)


# ─────────────────────────── Gender ───────────────────────────────────────────

class TestGender:

    @pytest.mark.parametrize("value", ["Male", "Female", "Prefer not to say"])
    def test_valid(self, value) -> None:
        assert check_gender(value) == value

    @pytest.mark.parametrize("bad", ["male", "M", "", "Other"])
    def test_invalid(self, bad) -> None:
        with pytest.raises(ValueError, match="select your gender"):
            check_gender(bad)


# ─────────────────────────── validate_registration ────────────────────────────

class TestValidateRegistration:

    def test_valid_form(self, valid_form) -> None:
        data = validate_registration(valid_form(), today=TODAY)
        assert data.full_name == "Kavin Sivakumar"
        assert data.date_of_birth == date(2014, 4, 21)
        assert data.fide_id is None

    def test_contact_number_normalised(self, valid_form) -> None:
        data = validate_registration(valid_form(contact_number="077 123 4567"), today=TODAY)
        assert data.contact_number == "0771234567"

    def test_non_ascii_contact_number_not_stored(self, valid_form) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            validate_registration(valid_form(contact_number="0٧٧١٢٣٤٥٦٧"), today=TODAY)
        assert set(exc_info.value.errors) == {"contact_number"}

    def test_terms_must_be_accepted(self, valid_form) -> None:
        with pytest.raises(FormValidationError) as exc_info:
            validate_registration(valid_form(agree_to_terms=False), today=TODAY)
        assert exc_info.value.errors == {"agree_to_terms": "You must agree to the terms"}

    def test_every_bad_field_reported(self, valid_form) -> None:
        form = valid_form(
            full_name="K",
            name_with_initials="",
            gender="Robot",
            contact_number="123",
            date_of_birth="2030-01-01",
        )
        with pytest.raises(FormValidationError) as exc_info:
            validate_registration(form, today=TODAY)
        errors = exc_info.value.errors
        assert set(errors) == {
            "full_name", "name_with_initials", "gender", "contact_number", "date_of_birth",
        }
        assert errors["gender"] == "Please select your gender"
        assert errors["contact_number"] == "Please enter a valid Sri Lankan phone number"
        assert "future" in errors["date_of_birth"]

    def test_missing_date_of_birth(self, valid_form) -> None:
        form = valid_form()
        del form["date_of_birth"]
        with pytest.raises(FormValidationError) as exc_info:
            validate_registration(form, today=TODAY)
        assert exc_info.value.errors["date_of_birth"] == "Date of birth is required"

    def test_honeypot_checked_first(self, valid_form) -> None:
        # Other fields are invalid too, but only the generic error comes back
        form = valid_form(honeypot="automated", full_name="", contact_number="x")
        with pytest.raises(BotDetected) as exc_info:
            validate_registration(form, today=TODAY)
        assert exc_info.value.errors == {"form": GENERIC_FORM_ERROR}

    def test_bot_detected_is_a_validation_error(self) -> None:
        assert issubclass(BotDetected, FormValidationError)
