"""Role-capability gate: route policy, access decisions and navigation."""

from medicore.access.gate import GateDecision, guard_path, guard_route
from medicore.access.navigation import NavGroup, NavItem, build_navigation, visible_sections
from medicore.access.policy import (
    DEFAULT_SECTION,
    ROUTE_POLICY,
    allowed_sections,
    can_access,
    roles_for,
)
from medicore.access.roles import Role, Section
from medicore.access.routes import ROUTE_TABLE, RouteEntry, resolve_path

__all__ = [
    "DEFAULT_SECTION",
    "GateDecision",
    "NavGroup",
    "NavItem",
    "ROUTE_POLICY",
    "ROUTE_TABLE",
    "Role",
    "RouteEntry",
    "Section",
    "allowed_sections",
    "build_navigation",
    "can_access",
    "guard_path",
    "guard_route",
    "resolve_path",
    "roles_for",
    "visible_sections",
]
