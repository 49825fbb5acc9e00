"""
Keyed string storage backends for persisted session state.

Every backend exposes ``get_item`` / ``set_item`` / ``remove_item``.
Reads of a missing or unreadable store return None; write failures
raise StorageError and leave recovery to the caller.
"""

import json
from pathlib import Path
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from .database import StoredValue, get_session, init_database


class StorageError(Exception):
    """Raised when a value cannot be written."""
    pass


def load_store(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}
    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read().strip()
            if not content:
                return {}
            store = json.loads(content)
    except (ValueError, OSError):
        return {}
    return store if isinstance(store, dict) else {}


def save_store(path: Path, store: Dict[str, str]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(store, f, indent=2, ensure_ascii=False)


class InMemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.values: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self.values.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.values[key] = value

    def remove_item(self, key: str) -> None:
        self.values.pop(key, None)


class JsonFileStorage:
    """All keys live in one JSON object on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_item(self, key: str) -> Optional[str]:
        value = load_store(self.path).get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        store = load_store(self.path)
        store[key] = value
        try:
            save_store(self.path, store)
        except OSError as e:
            raise StorageError(f"Failed to write {self.path}: {e}") from e

    def remove_item(self, key: str) -> None:
        store = load_store(self.path)
        if store.pop(key, None) is not None:
            try:
                save_store(self.path, store)
            except OSError as e:
                raise StorageError(f"Failed to write {self.path}: {e}") from e


class SqliteStorage:
    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        init_database(self.db_path)

    def get_item(self, key: str) -> Optional[str]:
        session = get_session(self.db_path)
        try:
            row = session.get(StoredValue, key)
            return row.value if row is not None else None
        except SQLAlchemyError:
            return None
        finally:
            session.close()

    def set_item(self, key: str, value: str) -> None:
        session = get_session(self.db_path)
        try:
            row = session.get(StoredValue, key)
            if row is None:
                session.add(StoredValue(key=key, value=value))
            else:
                row.value = value
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to write {key!r} to {self.db_path}: {e}") from e
        finally:
            session.close()

    def remove_item(self, key: str) -> None:
        session = get_session(self.db_path)
        try:
            session.query(StoredValue).filter_by(key=key).delete()
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            raise StorageError(f"Failed to delete {key!r} from {self.db_path}: {e}") from e
        finally:
            session.close()
