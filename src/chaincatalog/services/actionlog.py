"""Action log - a best-effort record of user-visible catalog operations.

Appending never raises: a failing sink is reported through logging and
the primary operation carries on.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

from chaincatalog.graph.model import Chain, Folder

logger = logging.getLogger(__name__)


class EntityType(Enum):
    CHAIN = "CHAIN"
    FOLDER = "FOLDER"
    ELEMENT = "ELEMENT"
    SPECIFICATION_GROUP = "SPECIFICATION_GROUP"
    SYSTEM_MODEL = "SYSTEM_MODEL"


class LogOperation(Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    MOVE = "MOVE"
    COPY = "COPY"


@dataclass(frozen=True)
class ActionLog:
    entity_type: EntityType
    entity_id: str
    entity_name: str
    operation: LogOperation
    parent_type: EntityType | None = None
    parent_id: str | None = None
    parent_name: str | None = None
    action_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class ActionLogSink(ABC):
    """Destination of action log records."""

    @abstractmethod
    def append(self, action: ActionLog) -> None:
        pass


class InMemoryActionLogSink(ActionLogSink):
    """Keeps records in a list (tests, local server)."""

    def __init__(self) -> None:
        self.actions: list[ActionLog] = []

    def append(self, action: ActionLog) -> None:
        self.actions.append(action)


class LoggingActionLogSink(ActionLogSink):
    """Writes each record to a logger at INFO."""

    def __init__(self, name: str = "chaincatalog.actions") -> None:
        self.logger = logging.getLogger(name)

    def append(self, action: ActionLog) -> None:
        self.logger.info(
            "%s %s '%s' (%s) parent=%s",
            action.operation.value,
            action.entity_type.value,
            action.entity_name,
            action.entity_id,
            action.parent_id,
        )


class ActionsLogService:
    """Fire-and-forget front of an ActionLogSink.

    Args:
        sink: Destination of records, None disables the log.
    """

    def __init__(self, sink: ActionLogSink | None = None) -> None:
        self.sink = sink

    def log_action(self, action: ActionLog) -> None:
        if self.sink is None:
            return
        try:
            self.sink.append(action)
        except Exception as e:
            logger.warning(f"Failed to record action log (best-effort): {e}")

    def log_chain_action(
        self,
        chain: Chain,
        operation: LogOperation,
        parent: Folder | None = None,
    ) -> None:
        """Record an operation on a chain, with its folder as parent."""
        self.log_action(
            ActionLog(
                entity_type=EntityType.CHAIN,
                entity_id=chain.id,
                entity_name=chain.name,
                operation=operation,
                parent_type=EntityType.FOLDER if parent is not None else None,
                parent_id=parent.id if parent is not None else None,
                parent_name=parent.name if parent is not None else None,
            )
        )


__all__ = [
    "ActionLog",
    "ActionLogSink",
    "ActionsLogService",
    "EntityType",
    "InMemoryActionLogSink",
    "LogOperation",
    "LoggingActionLogSink",
]
