"""Template models for source and destination content."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SourceTemplate:
    """A template pulled from HubSpot or supplied by the caller."""
    id: Optional[str]
    name: str
    raw: Dict[str, Any] = field(default_factory=dict)  # Original unprocessed payload
    endpoint: Optional[str] = None  # Strategy that produced it; None for custom templates
    generated_id: bool = False  # id was made up locally, not supplied by the source

    @classmethod
    def from_api(cls, item: Dict[str, Any], endpoint: Optional[str] = None) -> "SourceTemplate":
        """Build from a HubSpot template payload."""
        template_id = item.get("id")
        return cls(
            id=str(template_id) if template_id is not None else None,
            name=item.get("name") or item.get("label") or item.get("path") or "",
            raw=item,
            endpoint=endpoint,
        )

    @property
    def field_names(self) -> List[str]:
        """Names of the fields present on the raw payload."""
        return list(self.raw.keys())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "id": self.id,
            "name": self.name,
            "endpoint": self.endpoint,
            "fields": self.field_names,
        }


@dataclass
class ConvertedTemplate:
    """A template converted to the Content Builder model."""
    content: str
    channels: Dict[str, bool] = field(default_factory=lambda: {"email": True, "web": False})
    slots: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def slot_keys(self) -> List[str]:
        return list(self.slots.keys())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "content": self.content,
            "channels": self.channels,
            "slots": self.slots,
            "warnings": self.warnings,
        }


@dataclass
class DestinationFolder:
    """A Content Builder category."""
    id: str
    name: str
    parent_id: Optional[str] = None

    @classmethod
    def from_api(cls, item: Dict[str, Any]) -> "DestinationFolder":
        """Build from an SFMC category payload."""
        parent_id = item.get("parentId")
        return cls(
            id=str(item["id"]),
            name=item.get("name", ""),
            parent_id=str(parent_id) if parent_id is not None else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "parentId": self.parent_id}


@dataclass
class CreatedAsset:
    """Identifiers SFMC assigns to a newly created asset."""
    id: str
    customer_key: Optional[str] = None
    response_data: Optional[Dict[str, Any]] = None
