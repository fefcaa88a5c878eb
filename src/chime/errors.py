class ChimeError(Exception):
    """Raised when the completion chime cannot be rendered or played."""
