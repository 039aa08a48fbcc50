"""Exception hierarchy for MediCore."""

from pydantic import ValidationError


class MediCoreError(Exception):
    """Base exception for MediCore errors."""

    pass


class ConfigurationError(MediCoreError):
    """Settings describe an unsupported combination."""

    pass


class AuthenticationError(MediCoreError):
    """Credentials were rejected.

    The message is shown to the operator as-is.
    """

    pass


class SessionStateError(MediCoreError):
    """Operation is not valid in the encounter session's current state."""

    pass


class ChangeRejected(MediCoreError):
    """A change event named an unknown slice/field or carried an invalid value."""

    def __init__(self, slice_name: str, field: str, reason: str):
        self.slice_name = slice_name
        self.field = field
        self.reason = reason
        super().__init__(f"Rejected change to {slice_name}.{field}: {reason}")

    @classmethod
    def from_validation(cls, slice_name: str, field: str, error: ValidationError) -> "ChangeRejected":
        """Build from a pydantic error, keeping only the first problem."""
        errors = error.errors()
        if not errors:
            return cls(slice_name, field, str(error))
        first = errors[0]
        loc = ".".join(str(part) for part in first.get("loc", ()))
        reason = f"{loc}: {first.get('msg')}" if loc else str(first.get("msg"))
        return cls(slice_name, field, reason)


class InvalidTransitionError(MediCoreError):
    """Investigation status change not permitted by the lifecycle."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot move investigation from '{current}' to '{target}'")


class AttachmentRejected(MediCoreError):
    """File failed the caller-side type or size check before upload."""

    pass


class AttachmentUploadError(MediCoreError):
    """Upload backend failed or answered without a usable URL."""

    pass
