from typing import Any, Dict, List, Optional

from .models import GENDERS, Candidate
from .normalize import coerce_str_list, normalize_text

REQUIRED_STR_FIELDS = ["id", "name", "role", "gender", "location"]
OPTIONAL_STR_FIELDS = ["email", "phone", "submitted_at"]


def _is_non_empty_str(v: Any) -> bool:
    return isinstance(v, str) and v.strip() != ""


def _is_str_list(v: Any) -> bool:
    return isinstance(v, list) and all(isinstance(s, str) for s in v)


def validate_candidate(data: Any) -> List[str]:
    """
    Returns a list of validation error messages for a serialized Candidate.
    Empty list means valid.
    """
    if not isinstance(data, dict):
        return ["Candidate must be a JSON object"]

    errors: List[str] = []

    for f in REQUIRED_STR_FIELDS:
        if f not in data:
            errors.append(f"Missing required field: {f}")
        elif not _is_non_empty_str(data[f]):
            errors.append(f"Field '{f}' must be a non-empty string")

    if "skills" not in data:
        errors.append("Missing required field: skills")
    elif not _is_str_list(data["skills"]):
        errors.append("Field 'skills' must be a list of strings")

    experience = data.get("experience")
    if "experience" not in data:
        errors.append("Missing required field: experience")
    elif isinstance(experience, bool) or not isinstance(experience, int) or experience < 0:
        errors.append("Field 'experience' must be a non-negative integer")

    if _is_non_empty_str(data.get("gender")) and data["gender"] not in GENDERS:
        errors.append(f"Field 'gender' must be one of {', '.join(GENDERS)}")

    for f in OPTIONAL_STR_FIELDS:
        if data.get(f) is not None and not isinstance(data[f], str):
            errors.append(f"Field '{f}' must be a string if provided")

    if data.get("work_availability") is not None and not _is_str_list(data["work_availability"]):
        errors.append("Field 'work_availability' must be a list of strings if provided")

    experiences = data.get("work_experiences")
    if experiences is not None and not (
        isinstance(experiences, list) and all(isinstance(e, dict) for e in experiences)
    ):
        errors.append("Field 'work_experiences' must be a list of objects if provided")

    for f in ("annual_salary_expectation", "education"):
        if data.get(f) is not None and not isinstance(data[f], dict):
            errors.append(f"Field '{f}' must be an object if provided")

    return errors


def _text_or(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return normalize_text(value)
    return default


def _map_work_experience(exp: Dict[str, Any]) -> Dict[str, Optional[str]]:
    return {
        "company": _text_or(exp.get("company"), "Unknown Company"),
        "roleName": _text_or(exp.get("roleName"), "Unknown Role"),
        "startDate": exp.get("startDate"),
        "endDate": exp.get("endDate"),
        "description": exp.get("description"),
    }


def map_submission(submission: Dict[str, Any], index: int) -> Candidate:
    """
    Map one raw form submission onto a Candidate.

    Missing or malformed fields fall back to defaults; the id is the
    1-based position of the submission in its source list.
    """
    raw_experiences = submission.get("work_experiences")
    if not isinstance(raw_experiences, list):
        raw_experiences = []
    raw_experiences = [exp for exp in raw_experiences if isinstance(exp, dict)]
    work_experiences = tuple(_map_work_experience(exp) for exp in raw_experiences)
    role = _text_or(raw_experiences[0].get("roleName"), "Candidate") if raw_experiences else "Candidate"

    gender = submission.get("gender")
    availability = submission.get("work_availability")
    salary = submission.get("annual_salary_expectation")
    education = submission.get("education")

    return Candidate(
        id=str(index + 1),
        name=_text_or(submission.get("name"), "Unknown"),
        role=role,
        skills=tuple(coerce_str_list(submission.get("skills"))),
        experience=len(work_experiences),
        gender=gender if gender in GENDERS else "Other",
        location=_text_or(submission.get("location"), "Unknown"),
        email=_text_or(submission.get("email"), f"user{index + 1}@example.com"),
        phone=submission.get("phone") if isinstance(submission.get("phone"), str) else None,
        submitted_at=submission.get("submitted_at") if isinstance(submission.get("submitted_at"), str) else None,
        work_availability=tuple(coerce_str_list(availability)) if availability is not None else None,
        annual_salary_expectation=salary if isinstance(salary, dict) else None,
        work_experiences=work_experiences,
        education=education if isinstance(education, dict) else None,
    )
