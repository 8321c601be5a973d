"""Per-leg transport pricing."""

from __future__ import annotations

from typing import Iterable

from ...models.domain import (
    ChauffeurPricing,
    DHLPricing,
    InternalPricing,
    RouteSegment,
    WGPricing,
)


def segment_cost(segment: RouteSegment) -> float:
    """Money amount for one leg, selected by billing provider rather than mode."""
    pricing = segment.pricing
    match segment.service_provider:
        case "chauffeur" if isinstance(pricing, ChauffeurPricing):
            return pricing.quote
        case "dhl" if isinstance(pricing, DHLPricing):
            return pricing.quote
        case "wg" if isinstance(pricing, WGPricing):
            return pricing.flights + pricing.trains + pricing.ground + pricing.other
    if segment.mode == "internal" and isinstance(pricing, InternalPricing):
        return pricing.per_item_cost * pricing.item_count
    return 0.0


def transport_total(segments: Iterable[RouteSegment]) -> float:
    return sum((segment_cost(segment) for segment in segments), 0.0)
