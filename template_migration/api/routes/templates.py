"""Template migration endpoint."""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool

from ..dependencies import get_orchestrator
from ..models import ErrorResponse, TemplateMigrationRequest, TemplateMigrationResponse
from ...errors import MigrationError
from ...orchestrator import TemplateMigrationOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/templates",
    responses={
        200: {"model": TemplateMigrationResponse},
        400: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
async def migrate_templates(
    body: TemplateMigrationRequest,
    orchestrator: TemplateMigrationOrchestrator = Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Migrate HubSpot email templates into SFMC Content Builder.

    Uses ``customTemplates`` when a non-empty list is given, otherwise
    fetches up to ``limit`` templates from HubSpot. Per-template failures
    are reported in ``errors``; run-level failures return ``{error, details}``.
    """
    try:
        summary = await run_in_threadpool(orchestrator.run, body.to_migration_request())
    except MigrationError:
        raise
    except Exception as e:
        logger.exception("Error in templates migration")
        raise MigrationError("Failed to migrate email templates", details=str(e)) from e

    return summary.to_dict()
