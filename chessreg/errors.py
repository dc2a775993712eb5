"""
Error taxonomy shared by services and handlers.

FormValidationError  — field-scoped, fixable by the user, never reaches the DB
BotDetected          — honeypot tripped; reported with a generic message only
PersistenceError     — the store rejected the write or was unreachable
RosterTableMissing   — the registrations table does not exist
"""
from __future__ import annotations

from typing import Dict

GENERIC_FORM_ERROR = "Please check the form and try again."


class FormValidationError(Exception):
    """Carries `{field: message}` for every rejected field."""

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(f"{k}: {v}" for k, v in self.errors.items()))


class BotDetected(FormValidationError):
    def __init__(self) -> None:
        super().__init__({"form": GENERIC_FORM_ERROR})


class PersistenceError(Exception):
    pass


class RosterTableMissing(PersistenceError):
    pass
