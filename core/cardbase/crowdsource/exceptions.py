"""Exceptions raised by the contribution & review pipeline."""


class CrowdsourceError(Exception):
    """Base for all errors returned to callers of the pipeline."""


class ValidationError(CrowdsourceError, ValueError):
    """Malformed or out-of-range input."""

    def __init__(self, message: str, field: str = '') -> None:
        """Keep track of the offending field, if known."""
        self.field = field
        self.message = message
        if field:
            message = f'{field}: {message}'
        super(ValidationError, self).__init__(message)


class NotFound(CrowdsourceError):
    """A submission, parent, or target entity does not exist."""


class DuplicateSubmission(CrowdsourceError):
    """The submitter already has a pending submission for the same target."""


class InvalidState(CrowdsourceError):
    """The submission is not in a state that allows the requested change."""


class ParentNotReady(CrowdsourceError):
    """The parent submission has not (yet) been approved."""


class Forbidden(CrowdsourceError):
    """The agent's role does not permit this action."""


class Conflict(CrowdsourceError):
    """The target entity changed after the edit was submitted."""


class SaveError(CrowdsourceError, RuntimeError):
    """Failed to persist submission state."""
