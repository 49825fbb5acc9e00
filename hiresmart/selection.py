"""
Team selection state with persistence.

The manager owns an ordered list of at most MAX_TEAM_SIZE candidates
with unique ids. Every committed mutation is written through to the
injected storage; storage failures are logged and never undo the
in-memory change.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .analysis import generate_team_analysis
from .logger import StructuredLogger, get_logger
from .models import Candidate
from .repository import CandidateRepository
from .schema import validate_candidate
from .scoring import ScoreBreakdown, reference_group_for, round_half_up, score_breakdown
from .storage import StorageError

STORAGE_KEY = "hiresmart-selected-team"
MAX_TEAM_SIZE = 5

# Selection outcome codes
OK = "OK"
CAPACITY_EXCEEDED = "CAPACITY_EXCEEDED"
DUPLICATE = "DUPLICATE"
NOT_FOUND = "NOT_FOUND"
INCOMPLETE_TEAM = "INCOMPLETE_TEAM"

# Recovered persistence failures
PERSISTENCE_READ_INVALID = "PERSISTENCE_READ_INVALID"
PERSISTENCE_WRITE_FAILED = "PERSISTENCE_WRITE_FAILED"


@dataclass
class SelectionResult:
    success: bool
    message: str
    code: str = OK
    data: Dict[str, Any] = field(default_factory=dict)


def parse_stored_selection(raw: Optional[str]) -> List[Candidate]:
    """
    Decode a persisted selection.

    Raises:
        ValueError: value is not a JSON list of at most MAX_TEAM_SIZE
            well-formed candidates with unique ids
    """
    if raw is None:
        return []
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"invalid JSON: {e}") from e
    if not isinstance(payload, list):
        raise ValueError(f"expected a list, got {type(payload).__name__}")
    if len(payload) > MAX_TEAM_SIZE:
        raise ValueError(f"{len(payload)} candidates exceeds team size {MAX_TEAM_SIZE}")
    for index, item in enumerate(payload):
        errors = validate_candidate(item)
        if errors:
            raise ValueError(f"candidate {index}: {'; '.join(errors)}")
    candidates = [Candidate.from_dict(item) for item in payload]
    if len({c.id for c in candidates}) != len(candidates):
        raise ValueError("duplicate candidate ids")
    return candidates


class SelectionManager:
    """Bounded, persisted team selection for one session."""

    def __init__(
        self,
        storage,
        repository: Optional[CandidateRepository] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            storage: Backend with get_item/set_item (see hiresmart.storage)
            repository: Candidate pool; when given, additions must come from it
            logger: Defaults to the global logger
        """
        self.storage = storage
        self.repository = repository
        self.logger = logger or get_logger()
        self._selected: List[Candidate] = self._restore()

    @property
    def selected(self) -> List[Candidate]:
        return list(self._selected)

    def __len__(self) -> int:
        return len(self._selected)

    def _restore(self) -> List[Candidate]:
        self.logger.record_persistence_read()
        try:
            raw = self.storage.get_item(STORAGE_KEY)
            return parse_stored_selection(raw)
        except (ValueError, StorageError) as e:
            self.logger.record_persistence_failure(PERSISTENCE_READ_INVALID)
            self.logger.warning(
                "Discarding stored team selection",
                code=PERSISTENCE_READ_INVALID,
                error=str(e),
            )
            return []

    def _persist(self) -> None:
        value = json.dumps([c.to_dict() for c in self._selected], ensure_ascii=False)
        try:
            self.storage.set_item(STORAGE_KEY, value)
            self.logger.record_persistence_write()
        except StorageError as e:
            self.logger.record_persistence_failure(PERSISTENCE_WRITE_FAILED)
            self.logger.error(
                "Failed to save team selection",
                code=PERSISTENCE_WRITE_FAILED,
                error=str(e),
            )

    def _reject(self, code: str, message: str, **context) -> SelectionResult:
        self.logger.record_selection_rejection(code)
        self.logger.debug("Selection change rejected", code=code, **context)
        return SelectionResult(success=False, message=message, code=code)

    def _commit(self, message: str, **context) -> SelectionResult:
        self._persist()
        self.logger.record_selection_change()
        self.logger.info(message, size=len(self._selected), **context)
        return SelectionResult(success=True, message=message)

    def add(self, candidate: Candidate) -> SelectionResult:
        # Check order is fixed: capacity, duplicate, then pool membership
        if len(self._selected) >= MAX_TEAM_SIZE:
            return self._reject(
                CAPACITY_EXCEEDED,
                f"Team is full. You can only select up to {MAX_TEAM_SIZE} candidates.",
                candidate_id=candidate.id,
            )
        if self.is_selected(candidate.id):
            return self._reject(DUPLICATE, "This candidate is already selected.", candidate_id=candidate.id)
        if self.repository is not None and candidate.id not in self.repository:
            return self._reject(NOT_FOUND, "Candidate not found in the candidate pool.", candidate_id=candidate.id)

        self._selected.append(candidate)
        return self._commit(f"{candidate.name} has been added to your team.", candidate_id=candidate.id)

    def remove(self, candidate_id: str) -> SelectionResult:
        candidate = next((c for c in self._selected if c.id == candidate_id), None)
        if candidate is None:
            return self._reject(NOT_FOUND, "Candidate not found in selection.", candidate_id=candidate_id)

        self._selected = [c for c in self._selected if c.id != candidate_id]
        return self._commit(f"{candidate.name} has been removed from your team.", candidate_id=candidate_id)

    def clear(self) -> SelectionResult:
        self._selected = []
        return self._commit("Team selection has been cleared.")

    def is_selected(self, candidate_id: str) -> bool:
        return any(c.id == candidate_id for c in self._selected)

    def is_disabled(self, candidate_id: str) -> bool:
        """Full team blocks additions, never removal of existing members."""
        return len(self._selected) >= MAX_TEAM_SIZE and not self.is_selected(candidate_id)

    def can_finalize(self) -> bool:
        return len(self._selected) == MAX_TEAM_SIZE

    def score_against_selection(self, candidate: Candidate) -> ScoreBreakdown:
        """Score any pool candidate relative to the current selection minus itself."""
        return score_breakdown(candidate, reference_group_for(candidate, self._selected))

    def candidate_scores(self) -> Dict[str, ScoreBreakdown]:
        return {c.id: self.score_against_selection(c) for c in self._selected}

    def get_selection_stats(self) -> Dict[str, Any]:
        gender_counts: Dict[str, int] = {}
        skill_counts: Dict[str, int] = {}
        location_counts: Dict[str, int] = {}
        for c in self._selected:
            gender_counts[c.gender] = gender_counts.get(c.gender, 0) + 1
            for skill in c.skills:
                skill_counts[skill] = skill_counts.get(skill, 0) + 1
            location_counts[c.location] = location_counts.get(c.location, 0) + 1

        if self._selected:
            experiences = [c.experience for c in self._selected]
            experience_range = {
                "min": min(experiences),
                "max": max(experiences),
                "avg": round_half_up(sum(experiences) / len(experiences)),
            }
        else:
            experience_range = {"min": 0, "max": 0, "avg": 0}

        return {
            "gender_counts": gender_counts,
            "skill_counts": skill_counts,
            "location_counts": location_counts,
            "experience_range": experience_range,
            "total_selected": len(self._selected),
            "max_size": MAX_TEAM_SIZE,
        }

    def finalize(self) -> SelectionResult:
        """Attach the team analysis to a full selection; refuse anything smaller."""
        if not self.can_finalize():
            return self._reject(
                INCOMPLETE_TEAM,
                f"Please select exactly {MAX_TEAM_SIZE} candidates to finalize your team.",
                size=len(self._selected),
            )
        analysis = generate_team_analysis(self._selected)
        self.logger.info("Team finalized", validations=analysis["details"]["validations"])
        return SelectionResult(
            success=True,
            message="Your team has been finalized.",
            data={"team": self.selected, "analysis": analysis},
        )
