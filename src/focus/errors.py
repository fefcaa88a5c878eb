class FocusError(Exception):
    """Base exception for focus timer misuse."""


class InvalidPhaseError(FocusError, ValueError):
    """Raised when a phase value cannot be mapped to a timer phase."""


class InvalidSettingsError(FocusError, ValueError):
    """Raised when timer settings are outside their allowed ranges."""
