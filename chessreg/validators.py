"""
Input validation for the registration form — Pydantic v2 model plus the
per-field checks the step-by-step FSM flow calls as each answer arrives.

Keeps validation logic out of handler code and makes it trivially testable.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, Literal, Mapping, Optional

from pydantic import BaseModel, ValidationError, ValidationInfo, field_validator

from chessreg.errors import GENERIC_FORM_ERROR, BotDetected, FormValidationError
from chessreg.models.models import Gender

# Sri Lankan mobile number: +94 or a leading 0, then nine ASCII digits
PHONE_RE = re.compile(r"^(\+94|0)[0-9]{9}$")

MIN_BIRTH_DATE = date(1900, 1, 1)

_DATE_FORMATS = ("%d/%m/%Y", "%d.%m.%Y", "%d-%m-%Y", "%Y-%m-%d")

_FALLBACK_MESSAGES = {
    "full_name":          "Full name must be at least 2 characters",
    "name_with_initials": "Name with initials is required",
    "date_of_birth":      "Date of birth is required",
    "gender":             "Please select your gender",
    "contact_number":     "Please enter a valid Sri Lankan phone number",
    "agree_to_terms":     "You must agree to the terms",
}


# ─────────────────────────── Field checks ─────────────────────────────────────

def check_full_name(value: str) -> str:
    value = (value or "").strip()
    if len(value) < 2:
        raise ValueError(_FALLBACK_MESSAGES["full_name"])
    return value


def check_name_with_initials(value: str) -> str:
    value = (value or "").strip()
    if len(value) < 2:
        raise ValueError(_FALLBACK_MESSAGES["name_with_initials"])
    return value


def check_fide_id(value: Optional[str]) -> Optional[str]:
    """Optional; blank answers are stored as NULL."""
    value = (value or "").strip()
    if not value:
        return None
    if len(value) > 32:
        raise ValueError("FIDE ID is too long")
    return value


def normalize_contact_number(value: str) -> str:
    """Drop the spaces and dashes people type, e.g. '077 123 4567'."""
    return re.sub(r"[\s\-]", "", value or "")


def check_contact_number(value: str) -> str:
    value = normalize_contact_number(value)
    if not PHONE_RE.match(value):
        raise ValueError(_FALLBACK_MESSAGES["contact_number"])
    return value


def check_date_of_birth(value: date, today: Optional[date] = None) -> date:
    today = today or date.today()
    if value > today:
        raise ValueError("Date of birth cannot be in the future")
    if value < MIN_BIRTH_DATE:
        raise ValueError("Date of birth cannot be before 1900")
    return value


def parse_date_of_birth(text: str, today: Optional[date] = None) -> date:
    """Parse a typed date (DD/MM/YYYY, DD.MM.YYYY, DD-MM-YYYY or YYYY-MM-DD)."""
    text = (text or "").strip()
    for fmt in _DATE_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt).date()
        except ValueError:
            continue
        return check_date_of_birth(parsed, today)
    raise ValueError("Please enter the date as DD/MM/YYYY, e.g. 21/04/2014")


def check_gender(value: str) -> str:
    if value not in Gender.ALL:
        raise ValueError(_FALLBACK_MESSAGES["gender"])
    return value


# ─────────────────────────── Form model ───────────────────────────────────────

class RegistrationData(BaseModel):
    """
    Player registration payload validated before writing to DB.

    Attributes
    ----------
    full_name          : Full name (≥ 2 chars after stripping)
    name_with_initials : e.g. "A.B. Perera" (≥ 2 chars)
    fide_id            : Optional FIDE ID, blank → None
    date_of_birth      : 1900-01-01 … today
    gender             : "Male" | "Female" | "Prefer not to say"
    contact_number     : +94XXXXXXXXX or 0XXXXXXXXX
    agree_to_terms     : must be True
    honeypot           : hidden field, must stay empty
    """

    full_name: str
    name_with_initials: str
    fide_id: Optional[str] = None
    date_of_birth: date
    gender: Literal["Male", "Female", "Prefer not to say"]
    contact_number: str
    agree_to_terms: bool
    honeypot: str = ""

    @field_validator("full_name")
    @classmethod
    def validate_full_name(cls, v: str) -> str:
        return check_full_name(v)

    @field_validator("name_with_initials")
    @classmethod
    def validate_name_with_initials(cls, v: str) -> str:
        return check_name_with_initials(v)

    @field_validator("fide_id")
    @classmethod
    def validate_fide_id(cls, v: Optional[str]) -> Optional[str]:
        return check_fide_id(v)

    @field_validator("date_of_birth")
    @classmethod
    def validate_date_of_birth(cls, v: date, info: ValidationInfo) -> date:
        today = (info.context or {}).get("today")
        return check_date_of_birth(v, today)

    @field_validator("contact_number")
    @classmethod
    def validate_contact_number(cls, v: str) -> str:
        return check_contact_number(v)

    @field_validator("agree_to_terms")
    @classmethod
    def validate_agree_to_terms(cls, v: bool) -> bool:
        if v is not True:
            raise ValueError(_FALLBACK_MESSAGES["agree_to_terms"])
        return v

    @field_validator("honeypot")
    @classmethod
    def validate_honeypot(cls, v: str) -> str:
        if v:
            raise ValueError(GENERIC_FORM_ERROR)
        return v


def field_errors(exc: ValidationError) -> Dict[str, str]:
    """Flatten a pydantic ValidationError into one message per field."""
    errors: Dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "form"
        if field in errors:
            continue
        if err["type"] == "value_error":
            errors[field] = str(err["ctx"]["error"])
        else:
            errors[field] = _FALLBACK_MESSAGES.get(field, err["msg"])
    return errors


def validate_registration(
    raw: Mapping[str, Any],
    today: Optional[date] = None,
) -> RegistrationData:
    """
    Validate a raw form mapping. Fails closed.

    Raises BotDetected when the honeypot is filled (checked first, so the
    caller never learns which other fields would have failed) and
    FormValidationError for everything else.
    """
    if raw.get("honeypot"):
        raise BotDetected()
    try:
        return RegistrationData.model_validate(dict(raw), context={"today": today})
    except ValidationError as exc:
        raise FormValidationError(field_errors(exc)) from exc
