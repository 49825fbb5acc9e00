"""
Runtime settings for the HireSmart CLI.

Values come from the environment (optionally seeded from .env by
``load_env``); command line flags override them.
"""

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

STORAGE_BACKENDS = ("json", "sqlite")

DEFAULT_SUBMISSIONS = "data/form-submissions.json"
DEFAULT_STORE = "data/store.json"
DEFAULT_DB = "data/hiresmart.db"


@dataclass(frozen=True)
class Settings:
    submissions: str = DEFAULT_SUBMISSIONS
    storage_backend: str = "json"
    store_path: Path = Path(DEFAULT_STORE)
    db_path: Path = Path(DEFAULT_DB)
    log_level: str = "INFO"
    log_dir: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        backend = os.getenv("HIRESMART_STORAGE", "json").strip().lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"HIRESMART_STORAGE must be one of {', '.join(STORAGE_BACKENDS)}, got {backend!r}"
            )
        log_dir = os.getenv("HIRESMART_LOG_DIR")
        return cls(
            submissions=os.getenv("HIRESMART_SUBMISSIONS", DEFAULT_SUBMISSIONS),
            storage_backend=backend,
            store_path=Path(os.getenv("HIRESMART_STORE", DEFAULT_STORE)),
            db_path=Path(os.getenv("HIRESMART_DB", DEFAULT_DB)),
            log_level=os.getenv("HIRESMART_LOG_LEVEL", "INFO").upper(),
            log_dir=Path(log_dir) if log_dir else None,
        )

    def with_overrides(self, **overrides) -> "Settings":
        """Return a copy with every non-None override applied."""
        values = {k: v for k, v in overrides.items() if v is not None}
        for key in ("store_path", "db_path", "log_dir"):
            if key in values:
                values[key] = Path(values[key])
        return replace(self, **values)
