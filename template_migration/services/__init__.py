"""Service layer for the template migration service."""

from .converter import TemplateConverter, find_markup, resolve_markup
from .credentials import (
    CredentialResolver,
    CredentialStore,
    InMemoryCredentialStore,
    SupabaseCredentialStore,
)
from .folder_resolver import FolderResolver

__all__ = [
    "TemplateConverter",
    "find_markup",
    "resolve_markup",
    "CredentialResolver",
    "CredentialStore",
    "InMemoryCredentialStore",
    "SupabaseCredentialStore",
    "FolderResolver",
]
