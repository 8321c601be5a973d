"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


@router.get("/health/hub-directory", status_code=status.HTTP_200_OK)
def health_hub_directory() -> dict:
    """Check the remote hub directory, when one is configured."""
    if not settings.hub_directory_url:
        return {"service": "hub-directory", "configured": False, "healthy": False}
    from ...services.directory.hub_client import check_health

    try:
        return {"service": "hub-directory", "configured": True, "healthy": check_health()}
    except Exception as e:
        return {"service": "hub-directory", "configured": True, "healthy": False, "error": str(e)}


@router.get("/health/database", status_code=status.HTTP_200_OK)
def check_database() -> dict:
    """Check database connection and quote storage status."""
    from ...db.supabase import get_supabase_client
    from ...persistence.database import QUOTES_TABLE, get_quotes_from_database

    supabase = get_supabase_client()
    if not supabase:
        return {
            "configured": False,
            "message": "Supabase not configured. Set RQ_SUPABASE_URL and RQ_SUPABASE_KEY environment variables.",
            "quotes_count": 0,
        }

    try:
        supabase.table(QUOTES_TABLE).select("shipment_id").limit(1).execute()
    except Exception as exc:
        return {
            "configured": True,
            "connected": False,
            "error": str(exc),
            "message": f"Database connection error: {exc}",
        }
    quotes = get_quotes_from_database()
    return {
        "configured": True,
        "connected": True,
        "quotes_count": len(quotes),
        "message": f"Database connected. Found {len(quotes)} stored quotes.",
    }
