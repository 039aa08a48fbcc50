"""Closed role and section enumerations."""

from enum import Enum


class Role(str, Enum):
    """Job-function identity of an operator."""

    SUPERADMIN = "superadmin"
    DOCTOR = "doctor"
    NURSE = "nurse"
    DIRECTOR = "director"  # Department head
    ADMIN = "admin"
    CASHIER = "cashier"
    PHARMACIST = "pharmacist"
    TECHNICIAN = "technician"  # Lab / imaging technician
    RECEPTIONIST = "receptionist"  # Front desk


class Section(str, Enum):
    """Navigable capability area of the application."""

    DASHBOARD = "dashboard"
    PATIENTS = "patients"
    APPOINTMENTS = "appointments"
    MEDICAL_RECORDS = "medical-records"
    DEPARTMENTS = "departments"
    DOCTORS = "doctors"
    SCHEDULES = "schedules"
    INPATIENTS = "inpatients"
    WARDS = "wards"
    BEDS = "beds"
    QUEUE = "queue"
    CONSULTATION = "consultation"
    BILLING = "billing"
    PHARMACY = "pharmacy"
    LABORATORY = "laboratory"
    SETTINGS = "settings"

    @property
    def path(self) -> str:
        return f"/{self.value}"
