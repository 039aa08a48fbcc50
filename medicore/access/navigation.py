"""Navigation menu filtered through the route policy.

Entries are hidden with the same ``can_access`` predicate the gate uses, so
a visible entry is always enterable and an enterable section is always
visible.
"""

from pydantic import BaseModel

from medicore.access.policy import can_access
from medicore.access.roles import Role, Section


class NavItem(BaseModel):
    section: Section
    path: str
    label_key: str  # i18n key, resolved by the front end


class NavGroup(BaseModel):
    key: str
    items: list[NavItem]


# Group layout of the sidebar; every section appears exactly once.
MENU_LAYOUT: tuple[tuple[str, tuple[tuple[Section, str], ...]], ...] = (
    (
        "outpatient",
        (
            (Section.PATIENTS, "nav.patients"),
            (Section.APPOINTMENTS, "nav.appointments"),
            (Section.QUEUE, "nav.queue"),
            (Section.CONSULTATION, "nav.consultation"),
            (Section.MEDICAL_RECORDS, "nav.medicalRecords"),
        ),
    ),
    (
        "inpatient",
        (
            (Section.INPATIENTS, "nav.inpatients"),
            (Section.WARDS, "nav.wards"),
            (Section.BEDS, "nav.beds"),
        ),
    ),
    (
        "auxiliary",
        (
            (Section.DEPARTMENTS, "nav.departments"),
            (Section.DOCTORS, "nav.doctors"),
            (Section.SCHEDULES, "nav.schedules"),
            (Section.BILLING, "nav.billing"),
            (Section.PHARMACY, "nav.pharmacy"),
            (Section.LABORATORY, "nav.laboratory"),
        ),
    ),
    (
        "system",
        (
            (Section.DASHBOARD, "nav.dashboard"),
            (Section.SETTINGS, "nav.settings"),
        ),
    ),
)


def build_navigation(role: Role) -> list[NavGroup]:
    """Menu groups visible to ``role``; empty groups are omitted."""
    groups: list[NavGroup] = []
    for key, entries in MENU_LAYOUT:
        items = [
            NavItem(section=section, path=section.path, label_key=label)
            for section, label in entries
            if can_access(role, section)
        ]
        if items:
            groups.append(NavGroup(key=key, items=items))
    return groups


def visible_sections(role: Role) -> frozenset[Section]:
    return frozenset(item.section for group in build_navigation(role) for item in group.items)
