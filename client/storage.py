"""
client/storage.py -- Local session storage for the client.

The client keeps two entries, mirroring a browser's localStorage:
  token -- the raw bearer token string
  user  -- a snapshot {_id, full_name, email, username}

Both are written together on login/register and cleared together on logout
or any authentication failure. The snapshot is a convenience copy for
rendering before the server answers; it is never authoritative.

SessionStorage is the seam SessionGuard depends on. MemorySessionStorage is
the test double; FileSessionStorage persists to a JSON file for the CLI.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger("authgate.client")

SNAPSHOT_FIELDS = ("_id", "full_name", "email", "username")


def trim_snapshot(data: dict) -> dict:
    """Keep only the public identity fields. Tokens and passwords are dropped."""
    return {field: data.get(field) for field in SNAPSHOT_FIELDS}


class SessionStorage(Protocol):
    def get_token(self) -> str | None: ...

    def set_token(self, token: str) -> None: ...

    def get_snapshot(self) -> dict | None: ...

    def set_snapshot(self, snapshot: dict) -> None: ...

    def clear(self) -> None: ...


class MemorySessionStorage:
    """In-process storage. Nothing survives the process."""

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}

    def get_token(self) -> str | None:
        return self._entries.get("token")

    def set_token(self, token: str) -> None:
        self._entries["token"] = token

    def get_snapshot(self) -> dict | None:
        raw = self._entries.get("user")
        return json.loads(raw) if raw else None

    def set_snapshot(self, snapshot: dict) -> None:
        self._entries["user"] = json.dumps(trim_snapshot(snapshot))

    def clear(self) -> None:
        self._entries.pop("token", None)
        self._entries.pop("user", None)


class FileSessionStorage:
    """JSON-file storage at a fixed path, created with owner-only permissions.

    Every read goes to disk so two CLI invocations see each other's writes.
    A corrupt or unreadable file is treated as an empty session.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def get_token(self) -> str | None:
        return self._load().get("token")

    def set_token(self, token: str) -> None:
        entries = self._load()
        entries["token"] = token
        self._save(entries)

    def get_snapshot(self) -> dict | None:
        raw = self._load().get("user")
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding unreadable session snapshot in %s", self.path)
            return None

    def set_snapshot(self, snapshot: dict) -> None:
        entries = self._load()
        entries["user"] = json.dumps(trim_snapshot(snapshot))
        self._save(entries)

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def _load(self) -> dict:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable session file %s: %s", self.path, exc)
            return {}
        return data if isinstance(data, dict) else {}

    def _save(self, entries: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        # The file holds a bearer token -- keep it readable by the owner only.
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(entries, fh)
