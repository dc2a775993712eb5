"""
Centralized CallbackData factories.
Telegram limits callback_data to 64 bytes — all prefixes are kept short.
"""
from aiogram.filters.callback_data import CallbackData


class MainMenuCb(CallbackData, prefix="mm"):
    action: str           # main | register | details | prizes | payment | admin


class RegistrationCb(CallbackData, prefix="reg"):
    action: str           # gender | skip_fide | confirm | edit | retry | another
    value: str = ""       # gender value for action=gender


class RosterCb(CallbackData, prefix="ros"):
    action: str           # show | page | sort_menu | sort | filter_menu | filter_pick
                          # filter_text | filter_set | filter_clear | export | sheets
                          # refresh | logout
    page: int = 0
    field: str = ""       # roster field name
    value: str = ""       # picked filter value


class PlayerCb(CallbackData, prefix="pl"):
    action: str           # view | pay
    pid: str = ""         # registration id (uuid4, 36 chars)
    status: str = ""      # PaymentStatus.* for action=pay
