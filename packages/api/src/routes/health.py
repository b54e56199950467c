# This project was developed with assistance from AI tools.
"""Liveness and database health endpoint."""

import logging

from db import DatabaseService, get_db_service
from fastapi import APIRouter, Depends

from .. import __version__
from ..schemas.health import HealthItem

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=list[HealthItem])
async def health(service: DatabaseService = Depends(get_db_service)) -> list[HealthItem]:
    """Report API and database status. Always 200; per-component status in the body."""
    api = HealthItem(name="API", status="healthy", message="API is running", version=__version__)
    if await service.health_check():
        database = HealthItem(name="Database", status="healthy", message="Database is reachable")
    else:
        database = HealthItem(
            name="Database", status="unhealthy", message="Database is unreachable"
        )
    return [api, database]
