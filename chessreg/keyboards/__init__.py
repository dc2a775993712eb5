from chessreg.keyboards.callbacks import (
    MainMenuCb,
    RegistrationCb,
    RosterCb,
    PlayerCb,
)
from chessreg.keyboards.main_menu import landing_menu, back_to_main
from chessreg.keyboards.registration_kb import (
    cancel_registration_kb,
    skip_fide_kb,
    gender_kb,
    confirm_registration_kb,
    retry_registration_kb,
    registration_success_kb,
)
from chessreg.keyboards.admin_kb import (
    password_cancel_kb,
    roster_kb,
    roster_error_kb,
    sort_menu_kb,
    filter_menu_kb,
    filter_values_kb,
    filter_input_cancel_kb,
    player_detail_kb,
    TEXT_FILTER_FIELDS,
    PICKER_FILTER_FIELDS,
)

__all__ = [
    # callbacks
    "MainMenuCb", "RegistrationCb", "RosterCb", "PlayerCb",
    # landing
    "landing_menu", "back_to_main",
    # registration
    "cancel_registration_kb", "skip_fide_kb", "gender_kb",
    "confirm_registration_kb", "retry_registration_kb", "registration_success_kb",
    # admin
    "password_cancel_kb", "roster_kb", "roster_error_kb", "sort_menu_kb", "filter_menu_kb",
    "filter_values_kb", "filter_input_cancel_kb", "player_detail_kb",
    "TEXT_FILTER_FIELDS", "PICKER_FILTER_FIELDS",
]
