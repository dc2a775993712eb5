from aiogram.fsm.state import State, StatesGroup


class AdminStates(StatesGroup):
    """FSM for the password-gated roster panel."""
    enter_password = State()   # Shared admin password
    enter_filter   = State()   # Free-text filter value for name / reference
