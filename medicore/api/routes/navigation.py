"""Navigation menu and URL resolution for the front end."""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from medicore.access import GateDecision, NavGroup, build_navigation, guard_path
from medicore.api.dependencies import get_current_user, get_optional_user
from medicore.core.users import Operator

router = APIRouter(prefix="/navigation")


@router.get("", response_model=list[NavGroup])
async def navigation(operator: Operator = Depends(get_current_user)) -> list[NavGroup]:
    """Menu groups visible to the current operator."""
    return build_navigation(operator.role)


@router.get("/resolve", response_model=GateDecision)
async def resolve(
    path: str = Query(..., description="URL path entered by the operator"),
    operator: Optional[Operator] = Depends(get_optional_user),
) -> GateDecision:
    """Apply the access gate to a direct URL entry."""
    return guard_path(operator.role if operator else None, path)
