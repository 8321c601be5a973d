"""Quote planning orchestration service."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Optional

from ...data.hub_repository import ROLE_AUTHENTICATOR, ROLE_COUTURIER, get_hub
from ...models.domain import Hub, RouteParties, RouteQuote
from ...persistence.filesystem import FileStorage
from ...schemas.quotes import (
    QuoteFinalizeResponse,
    QuotePlanRequest,
    QuoteRecalculateRequest,
    QuoteRegenerateRequest,
    QuoteResponse,
    SegmentAddRequest,
    SegmentProviderRequest,
    SegmentRemoveRequest,
    SegmentUpdateRequest,
    ValidationReportModel,
)
from ..directory.settings_client import QuoteDefaults, load_quote_defaults
from ..outputs.quote_formatter import quote_segments_to_csv, quote_to_json, quote_to_workbook
from .conversion import (
    labor_settings_from_model,
    parties_from_model,
    pricing_from_model,
    quote_from_model,
    quote_to_model,
    validation_to_model,
)
from .hub_fees import resolve_hub_fees
from .labor import calculate_labor
from .pricing import aggregate_pricing, insurance_for
from .segment_cost import transport_total
from .segments import add_segment, remove_segment, switch_provider, update_segment
from .topology import generate_segments, regenerate_segments
from .validation import validate_quote

logger = logging.getLogger(__name__)


def _lookup_hub(hub_id: Optional[str], tier: int, role: str) -> Optional[Hub]:
    if not hub_id:
        return None
    hub = get_hub(hub_id, tier)
    if hub is None:
        raise ValueError(f"Hub '{hub_id}' not found.")
    if not hub.is_active:
        raise ValueError(f"Hub '{hub.code or hub.hub_id}' is not active.")
    if not hub.has_role(role):
        raise ValueError(f"Hub '{hub.code or hub.hub_id}' cannot act as {role}.")
    return hub


def apply_hub_selection(quote: RouteQuote, hub1: Optional[Hub], hub2: Optional[Hub]) -> RouteQuote:
    """Copy the selected hubs into the parties and re-seed the hub fees."""
    parties = RouteParties(
        sender=quote.parties.sender,
        buyer=quote.parties.buyer,
        hub1=replace(hub1.address) if hub1 else quote.parties.hub1,
        hub2=replace(hub2.address) if hub2 else quote.parties.hub2,
    )
    quote.parties = parties
    if hub1 is not None:
        quote.hub1_id = hub1.hub_id
    if hub2 is not None:
        quote.hub2_id = hub2.hub_id
    if hub1 is not None or hub2 is not None:
        quote.hub_fees = resolve_hub_fees(hub1, hub2, quote.tier, quote.no_second_hub)
    return quote


def recalculate(quote: RouteQuote) -> RouteQuote:
    """Recompute transport, labor and pricing from the current segments.

    Operator-entered hub fees and insurance are kept as they are.
    """
    quote.ensure_editable()
    quote.transport_total = transport_total(quote.segments)
    quote.labor = calculate_labor(quote.segments, quote.labor_settings)
    summary = aggregate_pricing(
        transport=quote.transport_total,
        labor=quote.labor.total_labor_cost,
        hub_fees=quote.hub_fees.total,
        insurance=quote.insurance,
        margin=quote.margin,
        margin_type=quote.margin_type,
    )
    quote.total_cost = summary.total_cost
    quote.margin_amount = summary.margin_amount
    quote.client_price = summary.client_price
    quote.effective_margin_percentage = summary.effective_margin_percentage
    return quote


def build_quote(payload: QuotePlanRequest, defaults: QuoteDefaults | None = None) -> RouteQuote:
    defaults = defaults or load_quote_defaults()
    # only tier 3 can route through a couturier
    no_second_hub = bool(payload.no_second_hub) if payload.tier == 3 else True

    hub1 = _lookup_hub(payload.hub1_id, payload.tier, ROLE_AUTHENTICATOR)
    hub2 = None if no_second_hub else _lookup_hub(payload.hub2_id, payload.tier, ROLE_COUTURIER)

    quote = RouteQuote(
        shipment_id=payload.shipment_id,
        tier=payload.tier,
        service_model=payload.service_model,
        hybrid_variant=payload.hybrid_variant,
        parties=parties_from_model(payload.parties),
        labor_settings=(
            labor_settings_from_model(payload.labor_settings) if payload.labor_settings else defaults.labor
        ),
        declared_value=payload.declared_value,
        insurance=insurance_for(payload.declared_value, defaults.insurance_rate),
        margin=payload.margin if payload.margin is not None else defaults.margin_percentage,
        margin_type=payload.margin_type,
        no_second_hub=no_second_hub,
        sla_comment=payload.sla_comment,
        currency=(payload.currency or defaults.currency).upper(),
    )
    if no_second_hub:
        quote.parties.hub2 = None
    apply_hub_selection(quote, hub1, hub2)
    quote.segments = generate_segments(
        tier=quote.tier,
        service_model=quote.service_model,
        parties=quote.parties,
        hybrid_variant=quote.hybrid_variant,
        no_second_hub=quote.no_second_hub,
        start=payload.start,
        internal_cost_per_item=defaults.internal_cost_per_item,
    )
    return quote


def _respond(quote: RouteQuote) -> QuoteResponse:
    return QuoteResponse(quote=quote_to_model(quote), validation=validation_to_model(validate_quote(quote)))


def plan_quote(payload: QuotePlanRequest, defaults: QuoteDefaults | None = None) -> QuoteResponse:
    quote = recalculate(build_quote(payload, defaults))
    logger.info(
        f"Planned quote for shipment '{quote.shipment_id}': tier {quote.tier}, "
        f"{quote.service_model}, {len(quote.segments)} segments"
    )
    return _respond(quote)


def recalculate_quote(payload: QuoteRecalculateRequest) -> QuoteResponse:
    quote = quote_from_model(payload.quote)
    quote.ensure_editable()
    if payload.hub1_id or payload.hub2_id:
        hub1 = _lookup_hub(payload.hub1_id, quote.tier, ROLE_AUTHENTICATOR)
        hub2 = None
        if not quote.no_second_hub:
            hub2 = _lookup_hub(payload.hub2_id or quote.hub2_id, quote.tier, ROLE_COUTURIER)
        if hub1 is None:
            hub1 = _lookup_hub(quote.hub1_id, quote.tier, ROLE_AUTHENTICATOR)
        apply_hub_selection(quote, hub1, hub2)
    return _respond(recalculate(quote))


def regenerate_quote(payload: QuoteRegenerateRequest, defaults: QuoteDefaults | None = None) -> QuoteResponse:
    """Discard the current legs and rebuild them from the topology rules."""
    quote = quote_from_model(payload.quote)
    quote.ensure_editable()
    defaults = defaults or load_quote_defaults()
    quote.segments = regenerate_segments(
        quote,
        start=payload.start,
        internal_cost_per_item=defaults.internal_cost_per_item,
    )
    return _respond(recalculate(quote))


def add_quote_segment(payload: SegmentAddRequest, defaults: QuoteDefaults | None = None) -> QuoteResponse:
    quote = quote_from_model(payload.quote)
    quote.ensure_editable()
    defaults = defaults or load_quote_defaults()
    quote.segments = add_segment(
        quote.segments,
        quote.parties,
        internal_cost_per_item=defaults.internal_cost_per_item,
    )
    return _respond(recalculate(quote))


def remove_quote_segment(payload: SegmentRemoveRequest) -> QuoteResponse:
    quote = quote_from_model(payload.quote)
    quote.ensure_editable()
    quote.segments = remove_segment(quote.segments, payload.segment_id)
    return _respond(recalculate(quote))


def update_quote_segment(payload: SegmentUpdateRequest) -> QuoteResponse:
    quote = quote_from_model(payload.quote)
    quote.ensure_editable()
    changes = payload.changes.model_dump(exclude_none=True, exclude={"pricing"})
    if payload.changes.pricing is not None:
        changes["pricing"] = pricing_from_model(payload.changes.pricing)
    quote.segments = update_segment(quote.segments, payload.segment_id, **changes)
    return _respond(recalculate(quote))


def switch_segment_provider(
    payload: SegmentProviderRequest, defaults: QuoteDefaults | None = None
) -> QuoteResponse:
    quote = quote_from_model(payload.quote)
    quote.ensure_editable()
    defaults = defaults or load_quote_defaults()
    quote.segments = switch_provider(
        quote.segments,
        payload.segment_id,
        payload.service_provider,
        internal_cost_per_item=defaults.internal_cost_per_item,
    )
    return _respond(recalculate(quote))


def validate_quote_payload(payload: QuoteRecalculateRequest) -> ValidationReportModel:
    return validation_to_model(validate_quote(quote_from_model(payload.quote)))


def finalize_quote(
    payload: QuoteRecalculateRequest,
    *,
    storage_root: Path | None = None,
    persist: bool = True,
) -> QuoteFinalizeResponse:
    """Recompute, mark read-only and export the quote.

    Validation findings are reported back but never block the export.
    """
    quote = quote_from_model(payload.quote)
    recalculate(quote)
    validation = validate_quote(quote)
    if not validation.is_valid:
        logger.warning(
            f"Finalizing quote '{quote.shipment_id}' with {len(validation.errors)} validation errors"
        )
    quote.finalized = True

    generated_at = datetime.now()
    storage = FileStorage(storage_root)
    run_dir = storage.make_run_directory(prefix="quote", label=quote.shipment_id)
    storage.write_json(run_dir / "summary.json", quote_to_json(quote, generated_at=generated_at))
    storage.write_csv(run_dir / "segments.csv", quote_segments_to_csv(quote))
    storage.write_bytes(run_dir / "route_sheet.xlsx", quote_to_workbook(quote))
    files = sorted(path.name for path in run_dir.iterdir() if path.is_file())
    logger.info(f"Exported quote '{quote.shipment_id}' to {run_dir}")

    persisted = False
    if persist:
        from ...persistence.database import save_quote_to_database

        persisted = save_quote_to_database(quote, run_id=run_dir.name)

    return QuoteFinalizeResponse(
        quote=quote_to_model(quote),
        validation=validation_to_model(validation),
        run_id=run_dir.name,
        files=files,
        persisted=persisted,
    )
