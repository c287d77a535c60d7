"""Status mapping utilities.

Maps Redmine status objects onto the three task states used by the
analytics layer.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .config import DONE_STATUS_HINTS, IN_PROGRESS_STATUS_HINTS


def map_redmine_status(status: Mapping[str, Any] | None) -> str:
    """Map a Redmine ``status`` object to ``todo`` / ``in-progress`` / ``done``.

    ``is_closed`` decides "done" whenever the tracker supplies it; the name
    heuristics only apply when it is absent.

    Examples
    --------
    >>> map_redmine_status({"name": "Resolved", "is_closed": True})
    'done'
    >>> map_redmine_status({"name": "Code Review"})
    'in-progress'
    >>> map_redmine_status(None)
    'todo'
    """
    if not status:
        return "todo"
    name = str(status.get("name") or "").strip().lower()
    is_closed = status.get("is_closed")
    if is_closed is not None:
        if is_closed:
            return "done"
    elif any(hint in name for hint in DONE_STATUS_HINTS):
        return "done"
    if any(hint in name for hint in IN_PROGRESS_STATUS_HINTS):
        return "in-progress"
    return "todo"
