class AssistantError(Exception):
    """Raised when the study assistant cannot produce a reply."""
