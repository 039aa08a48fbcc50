"""Patient summary and vital-sign models."""

from datetime import date
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class VisitType(str, Enum):
    """Kind of outpatient visit."""

    NORMAL = "normal"  # First visit for this complaint
    RETURN = "return"


class VitalSigns(BaseModel):
    """Vital signs as measured at triage or during examination."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    temperature: Optional[float] = Field(None, ge=30, le=45, description="Celsius")
    blood_pressure: Optional[str] = Field(None, pattern=r"^\d{2,3}/\d{2,3}$", description="mmHg, systolic/diastolic")
    heart_rate: Optional[int] = Field(None, ge=0, le=300, description="BPM")
    respiratory_rate: Optional[int] = Field(None, ge=0, le=80)
    weight: Optional[float] = Field(None, gt=0, description="kg")
    height: Optional[float] = Field(None, gt=0, description="cm")
    bmi: Optional[float] = Field(None, gt=0)

    @property
    def is_complete(self) -> bool:
        """Check the four core measurements are present."""
        return None not in (self.temperature, self.blood_pressure, self.heart_rate, self.respiratory_rate)


class Patient(BaseModel):
    """Patient summary owned by the external registry.

    An encounter session copies these fields in when it starts; it never
    writes back to the registry.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    age: int = Field(..., ge=0, le=150)
    gender: str = Field(..., pattern="^(male|female|other)$")
    phone: Optional[str] = None
    address: Optional[str] = None
    visit_type: Optional[VisitType] = None
    queue_number: Optional[str] = None
    chief_complaint: Optional[str] = None
    allergies: list[str] = Field(default_factory=list)
    chronic_conditions: list[str] = Field(default_factory=list)
    last_visit: Optional[date] = None
    vital_signs: Optional[VitalSigns] = None

    def summary(self) -> str:
        """Generate brief patient summary."""
        parts = [f"{self.name}, {self.age}yo {self.gender}"]
        if self.visit_type == VisitType.RETURN:
            parts.append("return visit")
        if self.allergies:
            parts.append(f"allergies: {', '.join(self.allergies)}")
        return "; ".join(parts)
