"""
Aggregate team analysis for a finalized selection.

Builds the narrative summary, machine-readable details and validation
flags, plus the export document and share text derived from them.
The report is advisory and never blocks finalize.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from .models import Candidate
from .scoring import compute_candidate_score, infer_primary_role, reference_group_for, round_half_up

TEAM_SIZE = 5
SUMMARY_SKILL_LIMIT = 6
OVERLAP_THRESHOLD = 4
MAX_COMPARE = 3

CLOSING_SENTENCE = (
    "We selected a balanced team covering multiple skills, diverse genders, "
    "and experience levels across multiple locations."
)

SKILL_CATEGORIES: Dict[str, List[str]] = {
    "Frontend": ["React", "Vue.js", "Angular", "JavaScript", "TypeScript", "CSS", "SASS", "HTML"],
    "Backend": ["Node.js", "Python", "Java", "Spring Boot", "PHP", "Ruby"],
    "Database": ["PostgreSQL", "MongoDB", "MySQL", "Redis", "SQL"],
    "Cloud/DevOps": ["AWS", "Azure", "Docker", "Kubernetes", "Jenkins", "Terraform"],
    "Mobile": ["React Native", "Swift", "Kotlin", "Flutter"],
    "Data/AI": ["Machine Learning", "TensorFlow", "PyTorch", "Data Science", "NLP", "Computer Vision"],
    "Design/UX": ["Figma", "Adobe XD", "Prototyping", "User Research"],
}
OTHER_CATEGORY = "Other"

GENDER_LABELS = {"Male": "men", "Female": "women"}


def categorize_skills(skills: Sequence[str]) -> Dict[str, List[str]]:
    """Group skills by category; a skill lands in its first matching one. Empty categories are dropped."""
    categorized: Dict[str, List[str]] = {name: [] for name in SKILL_CATEGORIES}
    categorized[OTHER_CATEGORY] = []
    for skill in skills:
        category = next(
            (name for name, members in SKILL_CATEGORIES.items() if skill in members),
            OTHER_CATEGORY,
        )
        if skill not in categorized[category]:
            categorized[category].append(skill)
    return {name: members for name, members in categorized.items() if members}


def gender_breakdown_phrase(gender_counts: Dict[str, int]) -> str:
    if not gender_counts:
        return "no gender data"
    return ", ".join(
        f"{count} {GENDER_LABELS.get(gender, 'non-binary/other')}"
        for gender, count in gender_counts.items()
    )


def location_phrase(locations: Sequence[str]) -> str:
    if len(locations) == 1:
        return f"candidates all from {locations[0]}"
    return f"candidates from {len(locations)} different locations"


def _unique(values: Sequence[str]) -> List[str]:
    return list(dict.fromkeys(values))


def generate_team_analysis(team: Sequence[Candidate]) -> Dict[str, Any]:
    """
    Build the finalize report for a team.

    Returns:
        {"summary": narrative string, "details": {...}} with validation
        flags under details["validations"]

    Raises:
        ValueError: team is empty
    """
    if not team:
        raise ValueError("Cannot analyze an empty team")

    gender_counts = dict(Counter(c.gender for c in team))

    all_skills = [s for c in team for s in c.skills]
    unique_skills = _unique(all_skills)

    experiences = [c.experience for c in team]
    min_exp = min(experiences)
    max_exp = max(experiences)
    avg_exp = round_half_up(sum(experiences) / len(experiences))

    locations = _unique([c.location for c in team])

    summary = (
        f"{gender_breakdown_phrase(gender_counts)}; "
        f"skills include {', '.join(unique_skills[:SUMMARY_SKILL_LIMIT])}; "
        f"experience from {min_exp} to {max_exp} years; "
        f"{location_phrase(locations)}. {CLOSING_SENTENCE}"
    )

    # Counter keeps first-seen order, so ties go to the earliest skill
    skill_frequency = Counter(all_skills)
    top_skill: Optional[Dict[str, Any]] = None
    if skill_frequency:
        name, count = max(skill_frequency.items(), key=lambda item: item[1])
        top_skill = {"name": name, "count": count}

    return {
        "summary": summary,
        "details": {
            "genderCounts": gender_counts,
            "skillCategories": categorize_skills(unique_skills),
            "experienceRange": {"min": min_exp, "max": max_exp, "avg": avg_exp},
            "locations": locations,
            "uniqueSkills": len(unique_skills),
            "totalSkills": len(all_skills),
            "locationDiversityCount": len(locations),
            "uniqueSkillsList": unique_skills,
            "validations": {
                "allSameGender": len(gender_counts) == 1 and len(team) == TEAM_SIZE,
                "skillsOverlapTooMuch": top_skill is not None and top_skill["count"] >= OVERLAP_THRESHOLD,
                "topSkill": top_skill,
            },
        },
    }


def build_export(team: Sequence[Candidate], now: Optional[datetime] = None) -> Dict[str, Any]:
    now = now or datetime.now(timezone.utc)
    return {
        "team": [c.to_dict() for c in team],
        "analysis": generate_team_analysis(team),
        "exportDate": now.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
    }


def build_share_text(team: Sequence[Candidate]) -> str:
    analysis = generate_team_analysis(team)
    members = "\n".join(f"• {c.name} - {c.role}" for c in team)
    return f"HireSmart Team Selection:\n\n{members}\n\nTeam Analysis:\n{analysis['summary']}"


def compare_candidates(candidates: Sequence[Candidate]) -> List[Dict[str, Any]]:
    """
    Side-by-side view of up to three candidates, each scored against the others.

    Raises:
        ValueError: more than MAX_COMPARE candidates
    """
    if len(candidates) > MAX_COMPARE:
        raise ValueError(f"Can compare at most {MAX_COMPARE} candidates")
    rows = []
    for c in candidates:
        rows.append({
            "id": c.id,
            "name": c.name,
            "role": c.role,
            "score": compute_candidate_score(c, reference_group_for(c, candidates)),
            "primaryRole": infer_primary_role(c.skills),
            "experience": c.experience,
            "gender": c.gender,
            "location": c.location,
            "skills": list(c.skills[:12]),
        })
    return rows
