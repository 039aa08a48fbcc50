"""Access gate: decides whether a role may enter a section or path.

A denied entry is a redirect decision, never an exception.
"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict

from medicore.access.policy import DEFAULT_SECTION, can_access
from medicore.access.roles import Role, Section
from medicore.access.routes import LOGIN_PATH, normalize_path, resolve_path

logger = logging.getLogger(__name__)


class GateDecision(BaseModel):
    """Outcome of a navigation attempt."""

    model_config = ConfigDict(frozen=True)

    allowed: bool
    path: str
    section: Optional[Section] = None
    redirect_to: Optional[str] = None

    @property
    def target(self) -> str:
        """The path the operator actually ends up on."""
        return self.path if self.allowed else (self.redirect_to or DEFAULT_SECTION.path)


def guard_route(role: Role, section: Section) -> GateDecision:
    """Allow ``section`` for ``role`` or redirect to the default section."""
    if can_access(role, section):
        return GateDecision(allowed=True, path=section.path, section=section)

    logger.info(f"Redirecting role={role.value} away from section={section.value}")
    return GateDecision(
        allowed=False,
        path=section.path,
        section=section,
        redirect_to=DEFAULT_SECTION.path,
    )


def guard_path(role: Optional[Role], path: str) -> GateDecision:
    """Apply the gate to a raw URL path, as on direct URL entry.

    Public routes always pass. Without a role the operator is sent to login.
    The index path and unknown paths land on the default section.
    """
    path = normalize_path(path)
    entry = resolve_path(path)

    if entry is not None and entry.public:
        return GateDecision(allowed=True, path=path)

    if role is None:
        return GateDecision(
            allowed=False,
            path=path,
            section=entry.section if entry else None,
            redirect_to=LOGIN_PATH,
        )

    if entry is None or entry.section is None:
        return GateDecision(allowed=False, path=path, redirect_to=DEFAULT_SECTION.path)

    return guard_route(role, entry.section).model_copy(update={"path": path})
