"""Route policy: which roles may enter which sections.

``ROUTE_POLICY`` is the only place role/section pairs are listed. The access
gate, the navigation menu and the HTTP section guard all read it through
``can_access``.
"""

from types import MappingProxyType
from typing import Mapping

from medicore.access.roles import Role, Section
from medicore.core.exceptions import ConfigurationError

ROUTE_POLICY: Mapping[Role, frozenset[Section]] = MappingProxyType(
    {
        Role.SUPERADMIN: frozenset(Section),
        Role.DOCTOR: frozenset(
            {
                Section.DASHBOARD,
                Section.PATIENTS,
                Section.APPOINTMENTS,
                Section.MEDICAL_RECORDS,
                Section.SCHEDULES,
                Section.INPATIENTS,
                Section.QUEUE,
                Section.CONSULTATION,
            }
        ),
        Role.NURSE: frozenset(
            {
                Section.DASHBOARD,
                Section.PATIENTS,
                Section.MEDICAL_RECORDS,
                Section.SCHEDULES,
                Section.INPATIENTS,
                Section.WARDS,
                Section.BEDS,
            }
        ),
        Role.DIRECTOR: frozenset(
            {
                Section.DASHBOARD,
                Section.DEPARTMENTS,
                Section.DOCTORS,
                Section.WARDS,
                Section.BEDS,
            }
        ),
        Role.ADMIN: frozenset(
            {Section.DASHBOARD, Section.DEPARTMENTS, Section.DOCTORS, Section.SETTINGS}
        ),
        Role.CASHIER: frozenset({Section.DASHBOARD, Section.BILLING}),
        Role.PHARMACIST: frozenset({Section.DASHBOARD, Section.PHARMACY}),
        Role.TECHNICIAN: frozenset({Section.DASHBOARD, Section.LABORATORY}),
        Role.RECEPTIONIST: frozenset(
            {
                Section.DASHBOARD,
                Section.PATIENTS,
                Section.APPOINTMENTS,
                Section.SCHEDULES,
                Section.QUEUE,
            }
        ),
    }
)

# Where a denied navigation lands. Every role must be able to enter it.
DEFAULT_SECTION = Section.DASHBOARD


def validate_policy(policy: Mapping[Role, frozenset[Section]] = ROUTE_POLICY) -> None:
    """Raise ConfigurationError unless the policy covers every role and section."""
    missing_roles = [role.value for role in Role if role not in policy]
    if missing_roles:
        raise ConfigurationError(f"Route policy has no entry for roles: {', '.join(missing_roles)}")

    unknown = [s for sections in policy.values() for s in sections if not isinstance(s, Section)]
    if unknown:
        raise ConfigurationError(f"Route policy names unknown sections: {unknown}")

    stranded = [role.value for role in Role if DEFAULT_SECTION not in policy[role]]
    if stranded:
        raise ConfigurationError(
            f"Roles cannot enter the default section '{DEFAULT_SECTION.value}': {', '.join(stranded)}"
        )


validate_policy()


def can_access(role: Role, section: Section) -> bool:
    """Return True iff ``role`` may enter ``section``."""
    return section in ROUTE_POLICY[role]


def allowed_sections(role: Role) -> frozenset[Section]:
    return ROUTE_POLICY[role]


def roles_for(section: Section) -> frozenset[Role]:
    """Inverse lookup: every role permitted to enter ``section``."""
    return frozenset(role for role in Role if can_access(role, section))
