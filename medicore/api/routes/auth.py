"""Auth routes: login, logout, current operator."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from medicore.access import DEFAULT_SECTION, Role, Section, allowed_sections
from medicore.api.dependencies import (
    get_app_settings,
    get_current_user,
    get_directory,
    get_optional_user,
    get_registry,
)
from medicore.config import Settings
from medicore.core.auth import clear_auth_cookie, create_access_token, set_auth_cookie
from medicore.core.exceptions import AuthenticationError
from medicore.core.users import Operator, UserDirectory
from medicore.encounter import SessionRegistry

router = APIRouter(prefix="/auth")
logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    username: str
    password: str


class OperatorResponse(BaseModel):
    id: str
    name: str
    role: Role
    department: Optional[str]
    sections: list[Section]
    landing: str

    @classmethod
    def from_operator(cls, operator: Operator) -> "OperatorResponse":
        sections = sorted(allowed_sections(operator.role), key=lambda s: list(Section).index(s))
        return cls(
            id=operator.id,
            name=operator.name,
            role=operator.role,
            department=operator.department,
            sections=sections,
            landing=DEFAULT_SECTION.path,
        )


class LoginResponse(OperatorResponse):
    access_token: str
    token_type: str = "bearer"


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    response: Response,
    settings: Settings = Depends(get_app_settings),
    directory: UserDirectory = Depends(get_directory),
) -> LoginResponse:
    try:
        operator = directory.authenticate(body.username, body.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))

    access = create_access_token(operator.id, operator.role.value, settings)
    set_auth_cookie(response, access, settings)

    profile = OperatorResponse.from_operator(operator)
    return LoginResponse(**profile.model_dump(), access_token=access)


@router.post("/logout")
async def logout(
    response: Response,
    settings: Settings = Depends(get_app_settings),
    operator: Optional[Operator] = Depends(get_optional_user),
    registry: SessionRegistry = Depends(get_registry),
) -> dict:
    """Clear the cookie. Any open encounter is discarded unsaved."""
    if operator is not None:
        registry.discard(operator.id)
    clear_auth_cookie(response, settings)
    return {"ok": True}


@router.get("/me", response_model=OperatorResponse)
async def me(operator: Operator = Depends(get_current_user)) -> OperatorResponse:
    return OperatorResponse.from_operator(operator)
