"""Workspace journal: per-user persistence of accounts and trades."""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from propdesk.models import Account, Trade

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkspaceSnapshot:
    """Everything needed to rehydrate an engine for one user."""

    accounts: list[Account] = field(default_factory=list)
    trades: list[Trade] = field(default_factory=list)
    last_active_account_id: str | None = None
    last_active_tab: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "trades": [t.to_dict() for t in self.trades],
            "accounts": [a.to_dict() for a in self.accounts],
            "last_active_account_id": self.last_active_account_id,
            "last_active_tab": self.last_active_tab,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WorkspaceSnapshot":
        return cls(
            accounts=[Account.from_dict(a) for a in data.get("accounts") or []],
            trades=[Trade.from_dict(t) for t in data.get("trades") or []],
            last_active_account_id=data.get("last_active_account_id"),
            last_active_tab=data.get("last_active_tab"),
        )


class WorkspaceJournal:
    """
    Persists workspace snapshots as one JSON file per user.

    Write pattern:
      After each engine mutation the caller passes :meth:`save` the engine's
      current snapshot. The file is written atomically (write to ``.tmp``,
      then rename).

    Read pattern:
      On login the caller uses :meth:`load` to rehydrate an engine. Returns
      ``None`` if the user has no workspace yet.
    """

    def __init__(self, journal_dir: Path):
        self._dir = journal_dir

    def path_for(self, user_id: str) -> Path:
        if not user_id or not user_id.strip():
            raise ValueError("user_id is required")
        safe = re.sub(r"[^A-Za-z0-9_.-]", "_", user_id.strip())
        return self._dir / f"workspace_{safe}.json"

    def save(self, user_id: str, snapshot: WorkspaceSnapshot) -> None:
        """Atomically write the user's workspace."""
        path = self.path_for(user_id)
        tmp_path = path.with_name(f".{path.name}.tmp")
        self._dir.mkdir(parents=True, exist_ok=True)

        tmp_path.write_text(json.dumps(snapshot.to_dict(), indent=2))
        tmp_path.replace(path)
        log.debug(
            "Workspace saved for %s: %d accounts, %d trades",
            user_id, len(snapshot.accounts), len(snapshot.trades),
        )

    def load(self, user_id: str) -> WorkspaceSnapshot | None:
        """Load the user's workspace, or ``None`` if none has been saved."""
        path = self.path_for(user_id)
        if not path.exists():
            return None

        try:
            return WorkspaceSnapshot.from_dict(json.loads(path.read_text()))
        except Exception:
            log.exception("Failed to load workspace from %s", path)
            return None

    def clear(self, user_id: str) -> None:
        """Remove the user's workspace file."""
        path = self.path_for(user_id)
        if path.exists():
            path.unlink()
            log.info("Workspace cleared for %s", user_id)
