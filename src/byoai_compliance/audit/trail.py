"""Append-only JSONL audit trail.

Every state change made through the service layer (tool registration and
approval, usage logging, policy enforcement, violation remediation) is
written as one newline-delimited JSON record::

    {"timestamp": "...", "user_id": "...", "action": "violation_remediated",
     "resource_type": "violation", "resource_id": "...", "success": true,
     "new_values": {...}}

Records are never rewritten.  Thread-safety is achieved with a
``threading.Lock`` so the trail is safe to share between threads.

Example
-------
>>> from pathlib import Path
>>> trail = AuditTrail(Path("/tmp/audit.jsonl"))
>>> entry = trail.record("tool_registered", "tool", "tool-1", user_id="u-1")
>>> trail.count()
1
"""
from __future__ import annotations

import json
import logging
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)


class AuditTrail:
    """Append-only JSONL audit trail.

    Parameters
    ----------
    log_path:
        Path to the ``.jsonl`` file.  Parent directories are created on
        first write.
    """

    def __init__(self, log_path: Path) -> None:
        self._log_path = Path(log_path)
        self._lock = threading.Lock()

    @property
    def log_path(self) -> Path:
        return self._log_path

    # ------------------------------------------------------------------
    # Write API
    # ------------------------------------------------------------------

    def record(
        self,
        action: str,
        resource_type: str,
        resource_id: str | None,
        user_id: str | None = None,
        success: bool = True,
        new_values: dict[str, object] | None = None,
    ) -> dict[str, object]:
        """Append one audit record and return it.

        Parameters
        ----------
        action:
            What happened, e.g. ``"usage_logged"`` or ``"violation_remediated"``.
        resource_type, resource_id:
            The record the action applied to.
        user_id:
            The acting user, if any.
        success:
            ``False`` for rejected attempts (unauthorised or invalid).
        new_values:
            JSON-serialisable details of the change.
        """
        entry: dict[str, object] = {
            "timestamp": datetime.now(tz=timezone.utc).isoformat(),
            "user_id": user_id,
            "action": action,
            "resource_type": resource_type,
            "resource_id": resource_id,
            "success": success,
            "new_values": new_values or {},
        }
        with self._lock:
            self._log_path.parent.mkdir(parents=True, exist_ok=True)
            with self._log_path.open("a", encoding="utf-8") as fh:
                fh.write(json.dumps(entry, default=str) + "\n")
        return entry

    # ------------------------------------------------------------------
    # Read API
    # ------------------------------------------------------------------

    def read_all(self) -> list[dict[str, object]]:
        """Return all records in write order; empty when the file is absent."""
        return list(self._iter_records())

    def query(self, filters: dict[str, object]) -> list[dict[str, object]]:
        """Return records whose top-level fields equal every filter value.

        Example
        -------
        >>> trail.query({"resource_type": "violation", "success": False})
        [...]
        """
        return [
            record
            for record in self._iter_records()
            if all(record.get(k) == v for k, v in filters.items())
        ]

    def by_action(self, action: str) -> list[dict[str, object]]:
        return self.query({"action": action})

    def count(self) -> int:
        return sum(1 for _ in self._iter_records())

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _iter_records(self) -> Iterator[dict[str, object]]:
        if not self._log_path.exists():
            return
        with self._lock:
            with self._log_path.open("r", encoding="utf-8") as fh:
                lines = fh.readlines()
        for number, line in enumerate(lines, start=1):
            line = line.strip()
            if not line:
                continue
            try:
                yield json.loads(line)
            except json.JSONDecodeError:
                logger.warning("Skipping malformed audit record at %s:%d", self._log_path, number)
