"""Migration run models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from enum import Enum
from datetime import datetime
import uuid


class RunState(str, Enum):
    """State of a migration run."""
    RESOLVING_CREDENTIALS = "resolving_credentials"
    RESOLVING_FOLDER = "resolving_folder"
    CUSTOM_MODE = "custom_mode"
    FETCH_MODE = "fetch_mode"
    ITERATING = "iterating"
    SUMMARIZED = "summarized"
    FAILED = "failed"


class ResultStatus(str, Enum):
    """Outcome of migrating a single template."""
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class MigrationRequest:
    """Everything a caller can ask of a migration run."""
    user_id: str
    hubspot_token: Optional[str] = None
    sfmc_credentials: Optional[Dict[str, Any]] = None
    limit: Optional[int] = None
    folder_id: Optional[str] = None
    custom_templates: Optional[List[Dict[str, Any]]] = None

    @property
    def is_custom(self) -> bool:
        """Custom mode applies only to a non-empty list."""
        return isinstance(self.custom_templates, list) and len(self.custom_templates) > 0


@dataclass
class MigrationResult:
    """Outcome for one attempted template."""
    source_id: Optional[str]
    source_name: str
    status: ResultStatus
    custom: bool = False
    sfmc_id: Optional[str] = None
    sfmc_customer_key: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the response representation."""
        prefix = "custom" if self.custom else "hubspot"
        data: Dict[str, Any] = {
            f"{prefix}Id": self.source_id,
            f"{prefix}Name": self.source_name,
        }
        if self.success:
            data["sfmcId"] = self.sfmc_id
            data["sfmcCustomerKey"] = self.sfmc_customer_key
        else:
            data["error"] = self.error
        data["status"] = self.status.value
        return data


@dataclass
class MigrationSummary:
    """Results of a whole run."""
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    mode: Optional[RunState] = None
    folder_id: Optional[str] = None
    results: List[MigrationResult] = field(default_factory=list)
    errors: List[MigrationResult] = field(default_factory=list)
    skipped: List[Dict[str, Any]] = field(default_factory=list)
    templates_found: int = 0
    total_attempted: int = 0
    message: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None

    @property
    def templates_count(self) -> int:
        """Number of templates migrated successfully."""
        return len(self.results)

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def record(self, result: MigrationResult) -> None:
        """Add a per-item outcome to exactly one of results or errors."""
        self.total_attempted += 1
        if result.success:
            self.results.append(result)
        else:
            self.errors.append(result)

    def build_message(self) -> str:
        """Build the human-readable outcome line."""
        noun = "custom templates" if self.mode == RunState.CUSTOM_MODE else "templates"
        message = f"Migrated {self.templates_count} {noun} successfully"
        if self.errors:
            message += f", with {len(self.errors)} errors"
        return message

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the success response body."""
        data: Dict[str, Any] = {
            "success": True,
            "message": self.message,
            "migrated": [r.to_dict() for r in self.results],
        }
        if self.errors:
            data["errors"] = [e.to_dict() for e in self.errors]
        data["templatesCount"] = self.templates_count
        data["totalAttempted"] = self.total_attempted
        return data

    def to_report(self) -> Dict[str, Any]:
        """Convert to a detailed report including run metadata."""
        report = self.to_dict()
        report.update({
            "id": self.id,
            "mode": self.mode.value if self.mode else None,
            "folderId": self.folder_id,
            "templatesFound": self.templates_found,
            "skipped": self.skipped,
            "startedAt": self.started_at.isoformat() if self.started_at else None,
            "completedAt": self.completed_at.isoformat() if self.completed_at else None,
            "durationSeconds": self.duration_seconds,
        })
        return report
