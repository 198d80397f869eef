"""Creation and modification timestamps for persisted entities."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class AuditingHandler:
    """Stamps ``created_when``/``modified_when`` on entities.

    A freshly persisted entity gets equal creation and modification times;
    only an explicit ``mark_modified`` moves the modification time forward.
    """

    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self.clock = clock

    def mark_created(self, entity: Any) -> Any:
        """Stamp both timestamps if the entity was never persisted."""
        if getattr(entity, "created_when", None) is None:
            now = self.clock()
            entity.created_when = now
            entity.modified_when = now
        return entity

    def mark_modified(self, entity: Any) -> Any:
        """Move the modification time to now."""
        entity.modified_when = self.clock()
        return entity
