"""Command-line interface for the template migration service."""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional, Union

from .config import Settings, configure_logging
from .errors import MigrationError
from .models.migration import MigrationRequest
from .orchestrator import TemplateMigrationOrchestrator
from .services.converter import TemplateConverter, find_markup, resolve_custom_markup
from .services.credentials import create_credential_store

logger = logging.getLogger(__name__)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(
        description="Template Migration Tool - Migrate HubSpot email templates to SFMC"
    )
    parser.add_argument("--env-file", help="Path to a .env file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")
    parser.add_argument("--log-level", help="Log level (overrides LOG_LEVEL)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Run migration
    migrate_parser = subparsers.add_parser("migrate", help="Run a template migration")
    migrate_parser.add_argument("--user-id", required=True, help="User whose stored credentials to use")
    migrate_parser.add_argument("--hubspot-token", help="HubSpot access token (skips the credential store)")
    migrate_parser.add_argument("--client-id", help="SFMC installed package client id")
    migrate_parser.add_argument("--client-secret", help="SFMC installed package client secret")
    migrate_parser.add_argument("--subdomain", help="SFMC tenant subdomain")
    migrate_parser.add_argument("--limit", type=int, help="Maximum templates to migrate")
    migrate_parser.add_argument("--folder-id", help="Content Builder folder to create assets in")
    migrate_parser.add_argument("--custom-templates", help="Path to a JSON list of templates to migrate")
    migrate_parser.add_argument("--report", help="Write a detailed JSON report to this path")

    # Preview conversion
    convert_parser = subparsers.add_parser("convert", help="Preview conversion of a template file")
    convert_parser.add_argument("--input", required=True, help="Path to a template JSON object or list")

    # API server
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)

    settings = Settings.from_env(args.env_file)
    configure_logging("DEBUG" if args.verbose else (args.log_level or settings.log_level))

    if args.command == "migrate":
        return run_migration(args, settings)
    elif args.command == "convert":
        return run_convert(args)
    elif args.command == "serve":
        return run_server(args, settings)

    parser.print_help()
    return 1


def run_migration(args, settings: Settings) -> int:
    """Run a migration and print the response body."""
    custom_templates = None
    if args.custom_templates:
        custom_templates = _load_templates(args.custom_templates)
        if not isinstance(custom_templates, list):
            print("--custom-templates must contain a JSON list of objects", file=sys.stderr)
            return 2

    sfmc_credentials = None
    if args.client_id or args.client_secret or args.subdomain:
        sfmc_credentials = {
            "clientId": args.client_id,
            "clientSecret": args.client_secret,
            "subdomain": args.subdomain,
        }

    request = MigrationRequest(
        user_id=args.user_id,
        hubspot_token=args.hubspot_token,
        sfmc_credentials=sfmc_credentials,
        limit=args.limit,
        folder_id=args.folder_id,
        custom_templates=custom_templates,
    )

    orchestrator = TemplateMigrationOrchestrator(settings, create_credential_store(settings))

    try:
        summary = orchestrator.run(request)
    except MigrationError as e:
        print(json.dumps(e.to_dict(), indent=2, default=str))
        return 1

    print(json.dumps(summary.to_dict(), indent=2, default=str))

    if args.report:
        with open(args.report, "w") as f:
            json.dump(summary.to_report(), f, indent=2, default=str)
        logger.info(f"Saved migration report to {args.report}")

    return 0 if not summary.errors else 3


def run_convert(args) -> int:
    """Print the converted form of each template in a file."""
    data = _load_templates(args.input)
    if data is None:
        print("--input must contain a JSON object or a list of objects", file=sys.stderr)
        return 2

    if not isinstance(data, list):
        data = [data]

    converter = TemplateConverter()

    for item in data:
        match = find_markup(item)
        markup = match.markup if match else resolve_custom_markup(item)
        result = converter.convert(markup, name=item.get("name"))
        output = {"name": item.get("name"), "field": match.field if match else None}
        output.update(result.to_dict())
        print(json.dumps(output, indent=2))
        print("-" * 40)

    return 0


def _load_templates(path: str) -> Optional[Union[Dict[str, Any], List[Dict[str, Any]]]]:
    """Load a template object or list of template objects; None if the file is unusable."""
    try:
        with open(path) as f:
            data = json.load(f)
    except ValueError as e:
        logger.error(f"Could not parse {path}: {e}")
        return None

    items = data if isinstance(data, list) else [data]
    if not all(isinstance(item, dict) for item in items):
        logger.error(f"{path} contains entries that are not JSON objects")
        return None
    return data


def run_server(args, settings: Settings) -> int:
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from .api.main import create_app

    uvicorn.run(create_app(settings), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
