"""Runtime configuration loaded from the environment."""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv


def _env_list(name: str, default: List[str]) -> List[str]:
    value = os.environ.get(name)
    if not value:
        return list(default)
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class Settings:
    """Settings for the HubSpot and SFMC clients, the store and the API."""

    hubspot_api_base: str = "https://api.hubapi.com"
    sfmc_auth_host_template: str = "https://{subdomain}.auth.marketingcloudapis.com"
    sfmc_rest_host_template: str = "https://{subdomain}.rest.marketingcloudapis.com"
    http_timeout: float = 30.0
    default_template_limit: int = 10

    # Content Builder folder names
    sfmc_root_folder: str = "Content Builder"
    sfmc_target_folder: str = "HubSpot Templates"

    # Credential store
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None
    supabase_tokens_table: str = "integration_tokens"

    log_level: str = "INFO"
    cors_origins: List[str] = field(default_factory=lambda: [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:3000",
    ])

    @property
    def use_supabase(self) -> bool:
        """Whether stored credentials come from Supabase."""
        return bool(self.supabase_url and self.supabase_service_role_key)

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            dotenv_path: Optional .env file loaded before reading the environment

        Returns:
            Settings instance
        """
        load_dotenv(dotenv_path)
        defaults = cls()

        return cls(
            hubspot_api_base=os.environ.get("HUBSPOT_API_BASE", defaults.hubspot_api_base).rstrip("/"),
            sfmc_auth_host_template=os.environ.get(
                "SFMC_AUTH_HOST_TEMPLATE", defaults.sfmc_auth_host_template
            ),
            sfmc_rest_host_template=os.environ.get(
                "SFMC_REST_HOST_TEMPLATE", defaults.sfmc_rest_host_template
            ),
            http_timeout=float(os.environ.get("HTTP_TIMEOUT", defaults.http_timeout)),
            default_template_limit=int(
                os.environ.get("DEFAULT_TEMPLATE_LIMIT", defaults.default_template_limit)
            ),
            sfmc_root_folder=os.environ.get("SFMC_ROOT_FOLDER", defaults.sfmc_root_folder),
            sfmc_target_folder=os.environ.get("SFMC_TARGET_FOLDER", defaults.sfmc_target_folder),
            supabase_url=os.environ.get("SUPABASE_URL"),
            supabase_service_role_key=os.environ.get("SUPABASE_SERVICE_ROLE_KEY"),
            supabase_tokens_table=os.environ.get(
                "SUPABASE_TOKENS_TABLE", defaults.supabase_tokens_table
            ),
            log_level=os.environ.get("LOG_LEVEL", defaults.log_level),
            cors_origins=_env_list("CORS_ORIGINS", defaults.cors_origins),
        )


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
    )
