"""
Pytest configuration and shared fixtures.
"""

import pytest
import json
from pathlib import Path
from typing import Any, Dict, List

from hiresmart.database import dispose_engines
from hiresmart.logger import get_logger, reset_logger
from hiresmart.models import Candidate
from hiresmart.repository import CandidateRepository
from hiresmart.storage import InMemoryStorage


@pytest.fixture(autouse=True)
def quiet_logger(tmp_path):
    """Global logger writing only to a per-test directory."""
    reset_logger()
    logger = get_logger(log_dir=tmp_path / "logs", enable_console=False)
    yield logger
    reset_logger()


@pytest.fixture(autouse=True)
def sqlite_engines():
    """Release cached SQLite engines after each test."""
    yield
    dispose_engines()


def make_candidate(
    id: str,
    name: str = None,
    skills=("React",),
    experience: int = 3,
    gender: str = "Male",
    location: str = "Austin",
    role: str = "Engineer",
) -> Candidate:
    return Candidate(
        id=id,
        name=name or f"Candidate {id}",
        role=role,
        skills=tuple(skills),
        experience=experience,
        gender=gender,
        location=location,
    )


@pytest.fixture
def candidate_factory():
    """Build Candidates with sensible defaults."""
    return make_candidate


@pytest.fixture
def diverse_pool() -> List[Candidate]:
    """Seven candidates spanning genders, locations and roles."""
    return [
        make_candidate("1", "Priya Raman", ["React", "TypeScript", "CSS"], 3, "Female", "Austin", "Frontend Engineer"),
        make_candidate("2", "Marcus Bell", ["Node.js", "Python", "Docker"], 6, "Male", "Denver", "Backend Engineer"),
        make_candidate("3", "Lena Okafor", ["Figma", "Prototyping"], 2, "Female", "Lagos", "Product Designer"),
        make_candidate("4", "Diego Alvarez", ["AWS", "Kubernetes", "Terraform"], 4, "Male", "Mexico City", "DevOps Engineer"),
        make_candidate("5", "Sam Whitaker", ["Agile", "Scrum", "Roadmap"], 8, "Other", "Remote", "Product Manager"),
        make_candidate("6", "Hannah Cho", ["Python", "Machine Learning"], 1, "Female", "Seattle", "ML Engineer"),
        make_candidate("7", "Tom Becker", ["React", "Vue.js"], 0, "Male", "Austin", "Web Developer"),
    ]


@pytest.fixture
def repository(diverse_pool) -> CandidateRepository:
    return CandidateRepository(diverse_pool)


@pytest.fixture
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture
def raw_submissions() -> List[Dict[str, Any]]:
    """Form submissions as they arrive from the intake form."""
    return [
        {
            "name": "Priya Raman",
            "email": "priya@example.com",
            "location": "Austin",
            "gender": "Female",
            "skills": ["React", "TypeScript", None, ""],
            "work_experiences": [
                {"company": "Brightline", "roleName": "Frontend Engineer"},
                {"company": "Kettle Labs"},
            ],
            "education": {"highest_level": "Bachelor's Degree"},
        },
        {
            "name": "Marcus Bell",
            "location": "Denver",
            "skills": ["Python", 42],
            "work_experiences": [],
        },
        {},
    ]


@pytest.fixture
def submissions_file(tmp_path, raw_submissions) -> Path:
    path = tmp_path / "submissions.json"
    path.write_text(json.dumps(raw_submissions))
    return path
