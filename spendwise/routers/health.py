"""
Health Check Router
Liveness and collaborator status endpoints
"""
from fastapi import APIRouter, Depends
from datetime import datetime
import logging

from spendwise.core.config import Settings
from spendwise.core.exceptions import StoreError
from spendwise.db.interface import ExpenseStore
from spendwise.routers.deps import get_ai_client, get_settings, get_store
from spendwise.services.ai import InsightClient

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("/health")
def health_check(settings: Settings = Depends(get_settings)):
    """
    Health check endpoint.
    Returns API status.
    """
    return {
        "status": "healthy",
        "service": settings.PROJECT_NAME,
        "timestamp": datetime.utcnow().isoformat()
    }


@router.get("/status")
def services_status(
    store: ExpenseStore = Depends(get_store),
    ai_client: InsightClient = Depends(get_ai_client),
):
    """
    Report store reachability and whether AI features are configured.
    """
    try:
        store_status = store.status()
    except StoreError as e:
        logger.error(f"Store check failed: {e}")
        store_status = {"connected": False, "error": str(e)}

    status = {
        "timestamp": datetime.utcnow().isoformat(),
        "services": {
            "store": store_status,
            "ai": {"connected": ai_client.enabled, "model": ai_client.model},
        },
    }
    status["overall_status"] = "healthy" if store_status.get("connected") else "degraded"
    return status
