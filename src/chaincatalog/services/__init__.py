"""Services - transactional façades used by the HTTP surface and the CLI."""

from chaincatalog.services.actionlog import (
    ActionLog,
    ActionsLogService,
    EntityType,
    InMemoryActionLogSink,
    LoggingActionLogSink,
    LogOperation,
)
from chaincatalog.services.chains import ChainService
from chaincatalog.services.deployments import DeploymentService
from chaincatalog.services.elements import ElementService
from chaincatalog.services.filters import FilterCondition, FilterFeature, FilterRequest
from chaincatalog.services.folders import FolderService
from chaincatalog.services.specifications import SpecificationGroupService, SystemModelService

__all__ = [
    "ActionLog",
    "ActionsLogService",
    "ChainService",
    "DeploymentService",
    "ElementService",
    "EntityType",
    "FilterCondition",
    "FilterFeature",
    "FilterRequest",
    "FolderService",
    "InMemoryActionLogSink",
    "LogOperation",
    "LoggingActionLogSink",
    "SpecificationGroupService",
    "SystemModelService",
]
