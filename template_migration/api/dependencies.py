"""FastAPI dependencies shared by the routers."""

from fastapi import Depends, Request

from ..config import Settings
from ..orchestrator import TemplateMigrationOrchestrator
from ..services.credentials import CredentialStore


def get_settings(request: Request) -> Settings:
    """Settings the application was created with."""
    return request.app.state.settings


def get_credential_store(request: Request) -> CredentialStore:
    """Credential store the application was created with."""
    return request.app.state.credential_store


def get_orchestrator(
    settings: Settings = Depends(get_settings),
    store: CredentialStore = Depends(get_credential_store),
) -> TemplateMigrationOrchestrator:
    """A fresh orchestrator for each request."""
    return TemplateMigrationOrchestrator(settings, store)
