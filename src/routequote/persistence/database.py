"""Database persistence for finalized quotes."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from ..db.supabase import get_supabase_client
from ..models.domain import RouteQuote
from ..services.outputs.quote_formatter import quote_to_json

logger = logging.getLogger(__name__)

QUOTES_TABLE = "route_quotes"


def quote_record(quote: RouteQuote, run_id: str | None = None) -> dict[str, Any]:
    """Flatten a quote into a ``route_quotes`` row; the full quote goes into ``payload``."""
    return {
        "shipment_id": quote.shipment_id,
        "tier": quote.tier,
        "service_model": quote.service_model,
        "hybrid_variant": quote.hybrid_variant,
        "hub1_id": quote.hub1_id,
        "hub2_id": quote.hub2_id,
        "segment_count": len(quote.segments),
        "transport_total": quote.transport_total,
        "labor_total": quote.labor.total_labor_cost,
        "hub_fee_total": quote.hub_fees.total,
        "insurance": quote.insurance,
        "total_cost": quote.total_cost,
        "margin_amount": quote.margin_amount,
        "client_price": quote.client_price,
        "currency": quote.currency,
        "finalized": quote.finalized,
        "run_id": run_id,
        "payload": quote_to_json(quote),
        "updated_at": datetime.now(timezone.utc).isoformat(),
    }


def save_quote_to_database(quote: RouteQuote, run_id: str | None = None) -> bool:
    """Upsert a quote by shipment id. Returns False when the database is unavailable."""
    supabase = get_supabase_client()
    if not supabase:
        logger.info("Supabase not configured - quote will only be saved to files")
        return False

    try:
        supabase.table(QUOTES_TABLE).upsert(
            quote_record(quote, run_id), on_conflict="shipment_id"
        ).execute()
    except Exception as e:
        logger.warning(f"Failed to save quote '{quote.shipment_id}' to database: {e}")
        return False
    logger.info(f"Saved quote '{quote.shipment_id}' to database")
    return True


def get_quotes_from_database(limit: int | None = None) -> list[dict[str, Any]]:
    """Stored quote rows, newest first. Empty when the database is unavailable."""
    supabase = get_supabase_client()
    if not supabase:
        return []

    try:
        query = supabase.table(QUOTES_TABLE).select("*").order("updated_at", desc=True)
        if limit:
            query = query.limit(limit)
        response = query.execute()
    except Exception as e:
        logger.warning(f"Failed to load quotes from database: {e}")
        return []
    return list(response.data or [])
