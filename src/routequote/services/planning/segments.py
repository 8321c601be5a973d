"""Segment construction and operator edits."""

from __future__ import annotations

import uuid
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Any, Sequence

from ...config import settings
from ...models.domain import (
    Address,
    ChauffeurPricing,
    DHLPricing,
    InternalPricing,
    Mode,
    RouteParties,
    RouteSegment,
    SegmentPricing,
    ServiceProvider,
    WGPricing,
)

DEFAULT_LEG_HOURS: dict[str, int] = {"wg": 4, "dhl": 24, "internal": 24}

_EDITABLE_FIELDS = frozenset(
    {"mode", "origin", "destination", "departure", "arrival", "pricing", "notes", "attachments"}
)


def new_segment_id() -> str:
    return uuid.uuid4().hex


def generation_time() -> datetime:
    """Local wall-clock time truncated to the minute."""
    return datetime.now().replace(second=0, microsecond=0)


def default_provider(mode: Mode) -> ServiceProvider:
    if mode == "dhl":
        return "dhl"
    return "wg"


def default_pricing(
    mode: Mode,
    provider: ServiceProvider,
    internal_cost_per_item: float | None = None,
) -> SegmentPricing:
    """Zeroed pricing variant for a leg.

    Internal hops carried by the white-glove team keep per-item pricing; every
    other combination gets the variant of its billing provider.
    """
    if mode == "internal" and provider == "wg":
        per_item = (
            internal_cost_per_item
            if internal_cost_per_item is not None
            else settings.internal_rollout_cost_per_item
        )
        return InternalPricing(per_item_cost=per_item, item_count=1)
    if provider == "dhl":
        return DHLPricing()
    if provider == "chauffeur":
        return ChauffeurPricing()
    return WGPricing()


def pricing_matches(mode: Mode, provider: ServiceProvider, pricing: SegmentPricing) -> bool:
    if pricing.kind == provider:
        return True
    return mode == "internal" and pricing.kind == "internal"


def create_segment(
    mode: Mode,
    origin: str,
    destination: str,
    departure: datetime,
    *,
    internal_cost_per_item: float | None = None,
) -> RouteSegment:
    provider = default_provider(mode)
    hours = DEFAULT_LEG_HOURS[mode]
    return RouteSegment(
        segment_id=new_segment_id(),
        mode=mode,
        service_provider=provider,
        origin=origin,
        destination=destination,
        departure=departure,
        arrival=departure + timedelta(hours=hours),
        pricing=default_pricing(mode, provider, internal_cost_per_item),
    )


def party_label(address: Address | None, fallback: str, *, prefer_city: bool = False) -> str:
    """Display label for a party; falls back to a placeholder when unnamed."""
    if address is None:
        return fallback
    if prefer_city:
        return address.city.strip() or address.name.strip() or fallback
    return address.name.strip() or fallback


def _find_index(segments: Sequence[RouteSegment], segment_id: str) -> int:
    for index, segment in enumerate(segments):
        if segment.segment_id == segment_id:
            return index
    raise ValueError(f"Segment '{segment_id}' not found.")


def update_segment(segments: Sequence[RouteSegment], segment_id: str, **changes: Any) -> list[RouteSegment]:
    """Return a new segment list with one segment edited."""
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Unsupported segment fields: {', '.join(sorted(unknown))}")

    index = _find_index(segments, segment_id)
    current = segments[index]
    pricing = changes.get("pricing", current.pricing)
    mode = changes.get("mode", current.mode)
    if not pricing_matches(mode, current.service_provider, pricing):
        raise ValueError(
            f"Pricing '{pricing.kind}' does not match provider '{current.service_provider}' on a {mode} leg."
        )

    # replace() goes through __post_init__, which rederives duration_hours
    edited = replace(current, **changes)

    updated = list(segments)
    updated[index] = edited
    return updated


def switch_provider(
    segments: Sequence[RouteSegment],
    segment_id: str,
    provider: ServiceProvider,
    *,
    internal_cost_per_item: float | None = None,
) -> list[RouteSegment]:
    index = _find_index(segments, segment_id)
    current = segments[index]
    if current.service_provider == provider:
        return list(segments)

    edited = replace(
        current,
        service_provider=provider,
        pricing=default_pricing(current.mode, provider, internal_cost_per_item),
    )
    updated = list(segments)
    updated[index] = edited
    return updated


def add_segment(
    segments: Sequence[RouteSegment],
    parties: RouteParties,
    *,
    now: datetime | None = None,
    internal_cost_per_item: float | None = None,
) -> list[RouteSegment]:
    """Append a white-glove leg continuing from the last destination to the buyer."""
    buyer_label = party_label(parties.buyer, "Buyer", prefer_city=True)
    if segments:
        last = segments[-1]
        origin, departure = last.destination, last.arrival
    else:
        origin = party_label(parties.sender, "Sender", prefer_city=True)
        departure = now or generation_time()

    segment = create_segment(
        "wg",
        origin,
        buyer_label,
        departure,
        internal_cost_per_item=internal_cost_per_item,
    )
    return [*segments, segment]


def remove_segment(segments: Sequence[RouteSegment], segment_id: str) -> list[RouteSegment]:
    index = _find_index(segments, segment_id)
    return [segment for position, segment in enumerate(segments) if position != index]
