"""
Scoring logic for candidate suitability.

Responsibilities:
- Compute a deterministic 0-100 score for a candidate relative to a
  reference group, with its component breakdown.
- Infer a candidate's primary role from skills.
- Aggregate skills and role coverage across a group.

Non-Responsibilities:
- No selection state.
- No persistence.

Invariant:
Given identical inputs, this module must always return the same score.
"""

import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from .models import Candidate
from .normalize import fold

FRONTEND = "Frontend"
BACKEND = "Backend"
DESIGNER = "Designer"
DEVOPS = "DevOps"
PRODUCT_MANAGER = "Product Manager"
UNKNOWN = "Unknown"

# Tie-break order for role inference, also the roles a team needs
ROLE_ORDER = (FRONTEND, BACKEND, DESIGNER, DEVOPS, PRODUCT_MANAGER)

ROLE_SKILL_MAP: Dict[str, List[str]] = {
    FRONTEND: ["React", "Vue.js", "Angular", "TypeScript", "JavaScript", "CSS", "HTML"],
    BACKEND: ["Node.js", "Python", "Java", "Spring Boot", "Go", "Ruby", "PHP"],
    DESIGNER: ["Figma", "Adobe XD", "Prototyping", "User Research", "UI", "UX"],
    DEVOPS: ["Docker", "Kubernetes", "AWS", "Azure", "Terraform", "Jenkins"],
    PRODUCT_MANAGER: ["Product", "Scrum", "Agile", "Product Strategy", "Roadmap"],
}

REQUIRED_SKILLS: List[str] = [
    "React",
    "Node.js",
    "TypeScript",
    "Python",
    "AWS",
    "Docker",
    "Figma",
    "Kubernetes",
]

MAX_SKILLS_SCORE = 40
MAX_EXPERIENCE_SCORE = 30
EXPERIENCE_CAP_YEARS = 10
NEW_GENDER_POINTS = 10
NEW_LOCATION_POINTS = 10
UNIQUE_SKILL_BONUS = 10


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class ScoreBreakdown:
    skills: int
    experience: int
    diversity: int
    bonus: int

    @property
    def total(self) -> int:
        return max(0, min(100, self.skills + self.experience + self.diversity + self.bonus))

    def to_dict(self) -> Dict[str, int]:
        return {
            "skills": self.skills,
            "experience": self.experience,
            "diversity": self.diversity,
            "bonus": self.bonus,
            "total": self.total,
        }


def infer_primary_role(skills: Iterable[str]) -> str:
    """
    Classify skills into one of ROLE_ORDER, or UNKNOWN with no overlap.

    Matching is case-sensitive. Ties resolve to the earlier role.
    """
    skills = list(skills)
    best_role = UNKNOWN
    best_count = 0
    for role in ROLE_ORDER:
        keywords = ROLE_SKILL_MAP[role]
        count = sum(1 for s in skills if s in keywords)
        if count > best_count:
            best_role = role
            best_count = count
    return best_role


def score_breakdown(
    candidate: Candidate,
    reference_group: Sequence[Candidate],
    required_skills: Sequence[str] = REQUIRED_SKILLS,
) -> ScoreBreakdown:
    """
    Score a candidate against a reference group.

    Args:
        candidate: Candidate being scored
        reference_group: Candidates the score is relative to, usually the
            current selection without ``candidate``
        required_skills: Skills credited by the skills component

    Returns:
        ScoreBreakdown with skills (0-40), experience (0-30),
        diversity (0-20) and bonus (0 or 10)
    """
    required = {fold(s) for s in required_skills}
    matches = sum(1 for s in candidate.skills if fold(s) in required)
    skills_score = min(
        MAX_SKILLS_SCORE,
        round_half_up(matches / max(len(required_skills), 1) * MAX_SKILLS_SCORE),
    )

    years = max(0, min(EXPERIENCE_CAP_YEARS, candidate.experience))
    experience_score = round_half_up(years / EXPERIENCE_CAP_YEARS * MAX_EXPERIENCE_SCORE)

    genders = {c.gender for c in reference_group}
    locations = {fold(c.location) for c in reference_group}
    diversity_score = 0
    if candidate.gender not in genders:
        diversity_score += NEW_GENDER_POINTS
    if fold(candidate.location) not in locations:
        diversity_score += NEW_LOCATION_POINTS

    group_skills = {fold(s) for c in reference_group for s in c.skills}
    has_unique_skill = any(fold(s) not in group_skills for s in candidate.skills)
    bonus = UNIQUE_SKILL_BONUS if has_unique_skill else 0

    return ScoreBreakdown(
        skills=skills_score,
        experience=experience_score,
        diversity=diversity_score,
        bonus=bonus,
    )


def compute_candidate_score(
    candidate: Candidate,
    reference_group: Sequence[Candidate],
    required_skills: Sequence[str] = REQUIRED_SKILLS,
) -> int:
    return score_breakdown(candidate, reference_group, required_skills).total


def reference_group_for(candidate: Candidate, group: Sequence[Candidate]) -> List[Candidate]:
    """The group without ``candidate`` (matched by id)."""
    return [c for c in group if c.id != candidate.id]


def summarize_skills(group: Iterable[Candidate]) -> List[str]:
    return sorted({s for c in group for s in c.skills})


def summarize_roles(group: Iterable[Candidate]) -> Dict[str, object]:
    """
    Role coverage across a group.

    Returns:
        {"coverage": {role: count} for every role including UNKNOWN,
         "missing": needed roles nobody covers, in ROLE_ORDER}
    """
    coverage: Dict[str, int] = {role: 0 for role in ROLE_ORDER}
    coverage[UNKNOWN] = 0
    for c in group:
        coverage[infer_primary_role(c.skills)] += 1
    missing = [role for role in ROLE_ORDER if coverage[role] == 0]
    return {"coverage": coverage, "missing": missing}
