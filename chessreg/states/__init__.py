from chessreg.states.registration_states import RegistrationStates
from chessreg.states.admin_states import AdminStates

__all__ = ["RegistrationStates", "AdminStates"]
