"""
Candidate pool loaded from raw form submissions.

Responsibilities:
- Read the submissions array from a local file or an http(s) URL.
- Map every submission onto an immutable Candidate.
- Derived lookups (skills, locations, experience bounds) and filtering.

Non-Responsibilities:
- No scoring.
- No selection state.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple
from urllib.parse import urlparse

import requests

from .logger import get_logger
from .models import Candidate
from .retry import TransientHTTPError, exponential_backoff, should_retry_http_status
from .schema import map_submission

ALL_LOCATIONS = "All locations"


def _log_fetch_retry(attempt: int, error: Exception, delay: float) -> None:
    get_logger().warning(
        "Retrying submissions fetch",
        attempt=attempt,
        error=str(error),
        delay_seconds=delay,
    )


@exponential_backoff(
    max_retries=3,
    base_delay=1.0,
    exceptions=(requests.ConnectionError, requests.Timeout, TransientHTTPError),
    on_retry=_log_fetch_retry,
)
def fetch_submissions(url: str, timeout: float = 15.0) -> Any:
    """GET a submissions document, retrying connection errors and 5xx/429."""
    resp = requests.get(url, timeout=timeout, headers={"Accept": "application/json"})
    if should_retry_http_status(resp.status_code):
        raise TransientHTTPError(resp.status_code, url)
    resp.raise_for_status()
    return resp.json()


def load_submissions(source: str) -> List[Any]:
    """
    Load the raw submissions array.

    Args:
        source: Local JSON path or http(s) URL

    Raises:
        FileNotFoundError: local file is missing
        ValueError: document is not a JSON array
        RetryError: remote fetch kept failing
    """
    if urlparse(source).scheme in ("http", "https"):
        payload = fetch_submissions(source)
    else:
        path = Path(source)
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)

    if not isinstance(payload, list):
        raise ValueError(f"Submissions must be a JSON array, got {type(payload).__name__}")
    return payload


@dataclass
class FilterCriteria:
    skills: Sequence[str] = ()
    genders: Sequence[str] = ()
    location: str = ""
    experience_range: Optional[Tuple[int, int]] = None
    search_query: str = ""

    def matches(self, candidate: Candidate) -> bool:
        if self.search_query and self.search_query.lower() not in candidate.name.lower():
            return False
        if self.skills and not any(skill in candidate.skills for skill in self.skills):
            return False
        if self.genders and candidate.gender not in self.genders:
            return False
        if self.location and self.location != ALL_LOCATIONS and candidate.location != self.location:
            return False
        if self.experience_range is not None:
            low, high = self.experience_range
            if candidate.experience < low or candidate.experience > high:
                return False
        return True


class CandidateRepository:
    """Immutable, ordered candidate pool."""

    def __init__(self, candidates: Sequence[Candidate]):
        self._candidates: Tuple[Candidate, ...] = tuple(candidates)
        self._by_id: Dict[str, Candidate] = {c.id: c for c in self._candidates}
        if len(self._by_id) != len(self._candidates):
            raise ValueError("Candidate ids must be unique")

    @classmethod
    def from_submissions(cls, submissions: Sequence[Any]) -> "CandidateRepository":
        logger = get_logger()
        candidates = []
        for index, submission in enumerate(submissions):
            if not isinstance(submission, dict):
                logger.warning("Skipping malformed submission", index=index)
                continue
            candidates.append(map_submission(submission, index))
        logger.debug("Loaded candidate pool", submissions=len(submissions), candidates=len(candidates))
        return cls(candidates)

    @classmethod
    def from_source(cls, source: str) -> "CandidateRepository":
        return cls.from_submissions(load_submissions(source))

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self._candidates)

    def __len__(self) -> int:
        return len(self._candidates)

    def __contains__(self, candidate_id: object) -> bool:
        return candidate_id in self._by_id

    def get(self, candidate_id: str) -> Optional[Candidate]:
        return self._by_id.get(candidate_id)

    def all_skills(self) -> List[str]:
        return sorted({skill for c in self._candidates for skill in c.skills})

    def all_locations(self) -> List[str]:
        return sorted({c.location for c in self._candidates})

    def experience_range(self) -> Tuple[int, int]:
        """(min, max) years across the pool; (0, 0) when empty."""
        if not self._candidates:
            return (0, 0)
        experiences = [c.experience for c in self._candidates]
        return (min(experiences), max(experiences))

    def filter(self, criteria: FilterCriteria) -> List[Candidate]:
        return [c for c in self._candidates if criteria.matches(c)]
