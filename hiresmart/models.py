"""
Candidate record and its JSON shape.

Candidates are immutable once built by the repository. The JSON keys
match the persisted selection and export formats.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

GENDERS = ("Male", "Female", "Other")

OPTIONAL_FIELDS = (
    "email",
    "phone",
    "submitted_at",
    "work_availability",
    "annual_salary_expectation",
    "work_experiences",
    "education",
)


@dataclass(frozen=True)
class Candidate:
    id: str
    name: str
    role: str
    skills: Tuple[str, ...]
    experience: int
    gender: str
    location: str
    # Display-only attributes
    email: Optional[str] = None
    phone: Optional[str] = None
    submitted_at: Optional[str] = None
    work_availability: Optional[Tuple[str, ...]] = None
    annual_salary_expectation: Optional[Dict[str, str]] = field(default=None, compare=False)
    work_experiences: Tuple[Dict[str, Any], ...] = field(default=(), compare=False)
    education: Optional[Dict[str, Any]] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "skills": list(self.skills),
            "experience": self.experience,
            "gender": self.gender,
            "location": self.location,
        }
        for key in OPTIONAL_FIELDS:
            value = getattr(self, key)
            if value is None:
                continue
            if isinstance(value, tuple):
                value = [dict(v) if isinstance(v, dict) else v for v in value]
            data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Candidate":
        """Build a Candidate from an already validated JSON object."""
        availability = data.get("work_availability")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            role=data["role"],
            skills=tuple(data["skills"]),
            experience=int(data["experience"]),
            gender=data["gender"],
            location=data["location"],
            email=data.get("email"),
            phone=data.get("phone"),
            submitted_at=data.get("submitted_at"),
            work_availability=tuple(availability) if availability is not None else None,
            annual_salary_expectation=data.get("annual_salary_expectation"),
            work_experiences=tuple(data.get("work_experiences") or ()),
            education=data.get("education"),
        )
