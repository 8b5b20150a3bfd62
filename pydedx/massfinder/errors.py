"""Failures reported by the mass inversion."""


class MassInversionError(Exception):
    """Base class for mass inversion failures."""


class NonPhysicalInputError(MassInversionError, ValueError):
    """β² leaves (0, 1) inside the search bracket, or the inputs are not finite."""


class NoSignChangeError(MassInversionError, ValueError):
    """The measured response is not reached by any mass in the search bracket."""


class SolverNonConvergenceError(MassInversionError, RuntimeError):
    """The root finder exhausted its iteration budget."""
