"""Data models for the template migration service."""

from .credentials import (
    SourceCredentials,
    DestinationCredentials,
    DestinationSession,
)
from .template import (
    SourceTemplate,
    ConvertedTemplate,
    DestinationFolder,
    CreatedAsset,
)
from .migration import (
    RunState,
    ResultStatus,
    MigrationRequest,
    MigrationResult,
    MigrationSummary,
)

__all__ = [
    "SourceCredentials",
    "DestinationCredentials",
    "DestinationSession",
    "SourceTemplate",
    "ConvertedTemplate",
    "DestinationFolder",
    "CreatedAsset",
    "RunState",
    "ResultStatus",
    "MigrationRequest",
    "MigrationResult",
    "MigrationSummary",
]
