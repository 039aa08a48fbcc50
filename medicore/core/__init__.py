"""Core services: errors, authentication and the user directory."""

from medicore.core.exceptions import (
    AttachmentRejected,
    AttachmentUploadError,
    AuthenticationError,
    ChangeRejected,
    ConfigurationError,
    InvalidTransitionError,
    MediCoreError,
    SessionStateError,
)

__all__ = [
    "AttachmentRejected",
    "AttachmentUploadError",
    "AuthenticationError",
    "ChangeRejected",
    "ConfigurationError",
    "InvalidTransitionError",
    "MediCoreError",
    "SessionStateError",
]
