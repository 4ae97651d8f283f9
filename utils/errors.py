"""
Error taxonomy for the OS Concepts Simulator.

All three simulator errors are local and recoverable: pure engine functions
raise them, session objects catch them and report an OperationResult with
success=False, leaving their state untouched.
"""


class SimulatorError(Exception):
    """Base class for recoverable simulator errors."""
    kind = "error"


class ValidationError(SimulatorError):
    """Malformed numeric input (NaN, negative, wrong vector length, etc)."""
    kind = "validation"


class NoFitError(SimulatorError):
    """No free memory block is large enough for a request."""
    kind = "no_fit"


class NotFoundError(SimulatorError):
    """An operation referenced a process or id that does not exist."""
    kind = "not_found"
