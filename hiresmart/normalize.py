from typing import Any, List


def normalize_text(s: str) -> str:
    return " ".join(s.strip().split())


def fold(s: str) -> str:
    """Comparison key for case-insensitive skill and location matching."""
    return s.lower()


def coerce_str_list(value: Any) -> List[str]:
    """Truthy entries of a list, stringified. Anything else yields []."""
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v]
