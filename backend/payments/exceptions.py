class SimulatorError(Exception):
    pass


class SimulatorDisabled(SimulatorError):
    """The payment simulator is switched off (PAYMENT_SIMULATOR_ENABLED)"""


class InvalidTransition(SimulatorError):

    def __init__(self, action, state):
        super().__init__(f"Cannot {action} while {state}")
        self.action = action
        self.state = state
