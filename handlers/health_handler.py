"""
handlers/health_handler.py
---------------------------
Liveness probe for Kubernetes, Docker HEALTHCHECK and other orchestrators.
"""

from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from config import DB_PING_TIMEOUT_MS
from db.connection import Database
from db.errors import DatabaseUnavailableError
from handlers.dependencies import get_database
from utils.logger import get_logger

logger = get_logger(__name__)
router = APIRouter(prefix="/_internal")


@router.get("/health")
def health_check(database: Database = Depends(get_database)) -> Response:
    """200 if the database answers a ping in time, 502 otherwise. No body."""
    try:
        database.ping(DB_PING_TIMEOUT_MS)
    except DatabaseUnavailableError as e:
        logger.error(f"Health check ERROR: {e}")
        return Response(status_code=status.HTTP_502_BAD_GATEWAY)
    return Response(status_code=status.HTTP_200_OK)
