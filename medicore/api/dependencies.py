"""FastAPI dependencies: settings, current operator, section guard, encounter session."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from fastapi import Depends, HTTPException, Request

from medicore.access import GateDecision, Section, guard_route
from medicore.attachments import AttachmentPort
from medicore.config import Settings
from medicore.core.auth import ACCESS_COOKIE, decode_token
from medicore.core.users import Operator, UserDirectory
from medicore.encounter import EncounterSession, SessionRegistry

logger = logging.getLogger(__name__)


class SectionDenied(Exception):
    """Raised by the section guard; the app answers with a redirect."""

    def __init__(self, decision: GateDecision):
        self.decision = decision
        super().__init__(f"Redirect to {decision.redirect_to}")


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_directory(request: Request) -> UserDirectory:
    return request.app.state.directory


def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_attachment_port(request: Request) -> Optional[AttachmentPort]:
    return request.app.state.attachment_port


def _token_from(request: Request) -> Optional[str]:
    auth_header = request.headers.get("Authorization")
    if auth_header and auth_header.startswith("Bearer "):
        return auth_header[7:]
    return request.cookies.get(ACCESS_COOKIE)


async def get_optional_user(
    request: Request,
    settings: Settings = Depends(get_app_settings),
    directory: UserDirectory = Depends(get_directory),
) -> Optional[Operator]:
    """Resolve the operator from a Bearer token or the access cookie, if any."""
    token = _token_from(request)
    if not token:
        return None

    claims = decode_token(token, settings)
    if not claims or claims.get("type") != "access":
        return None

    operator = directory.get(claims.get("sub", ""))
    if operator is None:
        logger.info(f"Token for unknown or inactive user {claims.get('sub')!r}")
    return operator


async def get_current_user(operator: Optional[Operator] = Depends(get_optional_user)) -> Operator:
    if operator is None:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return operator


def require_section(section: Section) -> Callable:
    """Dependency factory applying the access gate to a section's endpoints."""

    async def guard(operator: Operator = Depends(get_current_user)) -> Operator:
        decision = guard_route(operator.role, section)
        if not decision.allowed:
            raise SectionDenied(decision)
        return operator

    return guard


async def get_encounter_session(
    operator: Operator = Depends(require_section(Section.CONSULTATION)),
    registry: SessionRegistry = Depends(get_registry),
) -> EncounterSession:
    return registry.for_operator(operator)
