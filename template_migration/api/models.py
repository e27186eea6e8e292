"""Pydantic models for API requests and responses."""

from typing import Any, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, Field

from ..models.migration import MigrationRequest


class SFMCCredentialsPayload(BaseModel):
    """Installed-package credentials supplied inline."""
    model_config = ConfigDict(populate_by_name=True)

    client_id: Optional[str] = Field(None, alias="clientId")
    client_secret: Optional[str] = Field(None, alias="clientSecret")
    subdomain: Optional[str] = None


class CustomTemplatePayload(BaseModel):
    """A template supplied by the caller instead of fetched from HubSpot."""
    model_config = ConfigDict(extra="allow")

    id: Optional[Union[str, int]] = None
    name: str
    content: Optional[str] = None
    html: Optional[str] = None


class TemplateMigrationRequest(BaseModel):
    """Body of POST /api/migrate/templates."""
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    hubspot_token: Optional[str] = Field(None, alias="hubspotToken")
    sfmc_credentials: Optional[SFMCCredentialsPayload] = Field(None, alias="sfmcCredentials")
    limit: Optional[int] = Field(None, ge=0)
    folder_id: Optional[Union[str, int]] = Field(None, alias="folderId")
    custom_templates: Optional[List[CustomTemplatePayload]] = Field(None, alias="customTemplates")

    def to_migration_request(self) -> MigrationRequest:
        """Convert to the orchestrator's request model."""
        custom: Optional[List[Dict[str, Any]]] = None
        if self.custom_templates is not None:
            custom = []
            for template in self.custom_templates:
                data = template.model_dump(exclude_none=True)
                if "id" in data:
                    data["id"] = str(data["id"])
                custom.append(data)

        return MigrationRequest(
            user_id=self.user_id or "",
            hubspot_token=self.hubspot_token,
            sfmc_credentials=(
                self.sfmc_credentials.model_dump(by_alias=True)
                if self.sfmc_credentials is not None
                else None
            ),
            limit=self.limit,
            folder_id=str(self.folder_id) if self.folder_id is not None else None,
            custom_templates=custom,
        )


class TemplateMigrationResponse(BaseModel):
    """Success response."""
    success: bool
    message: str
    migrated: List[Dict[str, Any]]
    errors: Optional[List[Dict[str, Any]]] = None
    templatesCount: int
    totalAttempted: int


class ErrorResponse(BaseModel):
    """Failure response."""
    error: str
    details: Optional[Any] = None
