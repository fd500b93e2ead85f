"""
Session stores for verification state.

Handlers never hold sessions in module globals; a store is passed in.
JsonSessionStore keeps one JSON file per session key so a verification
survives process restarts:

    .planning/.sessions/verification.04-02.json
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Union

from hopper.config import get_planning_dir
from hopper.models.uat import VerificationSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Key-value store of VerificationSession records."""

    def load(self, key: str) -> Optional[VerificationSession]:
        raise NotImplementedError

    def save(self, session: VerificationSession) -> None:
        raise NotImplementedError

    def delete(self, key: str) -> bool:
        raise NotImplementedError

    def keys(self) -> List[str]:
        raise NotImplementedError

    def __contains__(self, key: str) -> bool:
        return self.load(key) is not None


class MemorySessionStore(SessionStore):
    """In-process store. Sessions are copied in and out so callers
    can't mutate what is stored."""

    def __init__(self):
        self._data: Dict[str, dict] = {}

    def load(self, key: str) -> Optional[VerificationSession]:
        data = self._data.get(key)
        return VerificationSession.from_dict(data) if data is not None else None

    def save(self, session: VerificationSession) -> None:
        self._data[session.key] = session.to_dict()

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def keys(self) -> List[str]:
        return sorted(self._data)


class JsonSessionStore(SessionStore):
    """One JSON file per session under a directory."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)

    @classmethod
    def for_project(
        cls,
        project_path: Optional[Union[str, Path]] = None,
        sessions_dir: str = ".sessions",
    ) -> "JsonSessionStore":
        return cls(get_planning_dir(project_path) / sessions_dir)

    def _path(self, key: str) -> Path:
        safe = "".join(c if c.isalnum() or c in ".-_" else "_" for c in key)
        return self.directory / f"{safe}.json"

    def load(self, key: str) -> Optional[VerificationSession]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path) as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            return VerificationSession.from_dict(data)
        except (OSError, KeyError, ValueError, TypeError, AttributeError) as e:
            # Unreadable session is treated as expired
            logger.warning(f"Discarding unreadable session {path.name}: {e}")
            return None

    def save(self, session: VerificationSession) -> None:
        path = self._path(session.key)
        path.parent.mkdir(parents=True, exist_ok=True)

        tmp = path.with_suffix(path.suffix + ".tmp")
        with open(tmp, "w") as f:
            json.dump(session.to_dict(), f, indent=2)
        os.replace(tmp, path)
        logger.debug(f"Saved session {session.key} ({session.state_name()})")

    def delete(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        path.unlink()
        return True

    def keys(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(p.stem for p in self.directory.glob("*.json"))
