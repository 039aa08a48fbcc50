"""Application route table.

Order matters: ``resolve_path`` returns the first entry whose path matches.
Allowed roles are never stored here; they are derived from the route policy.
"""

from dataclasses import dataclass
from typing import Optional

from medicore.access.policy import roles_for
from medicore.access.roles import Role, Section

LOGIN_PATH = "/login"
QUEUE_DISPLAY_PATH = "/queue-display"


@dataclass(frozen=True)
class RouteEntry:
    """One navigable path of the front end."""

    path: str
    component: str
    section: Optional[Section] = None
    public: bool = False

    @property
    def allowed_roles(self) -> frozenset[Role]:
        if self.public or self.section is None:
            return frozenset(Role)
        return roles_for(self.section)


ROUTE_TABLE: tuple[RouteEntry, ...] = (
    # Unauthenticated paths bypass the access gate entirely
    RouteEntry(LOGIN_PATH, "Login", public=True),
    RouteEntry(QUEUE_DISPLAY_PATH, "QueueDisplay", public=True),
    RouteEntry("/dashboard", "Dashboard", Section.DASHBOARD),
    RouteEntry("/patients", "Patients", Section.PATIENTS),
    RouteEntry("/medical-records", "MedicalRecords", Section.MEDICAL_RECORDS),
    RouteEntry("/appointments", "Appointments", Section.APPOINTMENTS),
    RouteEntry("/departments", "Departments", Section.DEPARTMENTS),
    RouteEntry("/doctors", "Doctors", Section.DOCTORS),
    RouteEntry("/schedules", "Schedules", Section.SCHEDULES),
    RouteEntry("/inpatients", "Inpatients", Section.INPATIENTS),
    RouteEntry("/wards", "WardManagement", Section.WARDS),
    RouteEntry("/beds", "BedManagement", Section.BEDS),
    RouteEntry("/queue", "QueueManagement", Section.QUEUE),
    RouteEntry("/consultation", "Consultation", Section.CONSULTATION),
    RouteEntry("/billing", "Billing", Section.BILLING),
    RouteEntry("/pharmacy", "Pharmacy", Section.PHARMACY),
    RouteEntry("/laboratory", "Laboratory", Section.LABORATORY),
    RouteEntry("/settings", "Settings", Section.SETTINGS),
)


def normalize_path(path: str) -> str:
    """Drop query string, fragment and trailing slash; ensure a leading slash."""
    path = path.split("?", 1)[0].split("#", 1)[0].strip()
    if not path.startswith("/"):
        path = "/" + path
    if len(path) > 1:
        path = path.rstrip("/") or "/"
    return path


def resolve_path(path: str) -> Optional[RouteEntry]:
    """Find the route for ``path`` (exact match or a sub-path of the entry)."""
    path = normalize_path(path)
    for entry in ROUTE_TABLE:
        if path == entry.path or path.startswith(entry.path + "/"):
            return entry
    return None
