from aiogram.fsm.state import State, StatesGroup


class RegistrationStates(StatesGroup):
    """FSM for player self-registration flow."""
    enter_full_name          = State()   # Text input: full name
    enter_name_with_initials = State()   # Text input: e.g. A.B. Perera
    enter_fide_id            = State()   # Text input or "Skip"
    enter_date_of_birth      = State()   # Text input: DD/MM/YYYY
    choose_gender            = State()   # Inline: Male / Female / Prefer not to say
    enter_contact_number     = State()   # Text input: +94… or 0…
    confirm                  = State()   # Summary + payment info → confirm or edit
    submitting               = State()   # Insert in flight; further taps are ignored
