"""Route topology generation from tier and service model."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from ...models.domain import (
    HybridVariant,
    Mode,
    RouteParties,
    RouteQuote,
    RouteSegment,
    ServiceModel,
)
from .segments import create_segment, generation_time, party_label

HUB1_PLACEHOLDER = "Hub Authenticator"
HUB2_PLACEHOLDER = "Hub Couturier"


def _leg_modes(service_model: ServiceModel, hybrid_variant: Optional[HybridVariant]) -> tuple[Mode, Mode] | None:
    """Modes of the first and the terminal leg."""
    match service_model:
        case "wg-full":
            return ("wg", "wg")
        case "dhl-full":
            return ("dhl", "dhl")
        case "hybrid" if hybrid_variant == "wg_to_dhl":
            return ("wg", "dhl")
        case "hybrid" if hybrid_variant == "dhl_to_wg":
            return ("dhl", "wg")
        case _:
            return None


def uses_second_hub(tier: int, no_second_hub: bool, parties: RouteParties) -> bool:
    return tier == 3 and not no_second_hub and parties.hub2 is not None


def generate_segments(
    *,
    tier: int,
    service_model: ServiceModel,
    parties: RouteParties,
    hybrid_variant: Optional[HybridVariant] = None,
    no_second_hub: bool = False,
    start: datetime | None = None,
    internal_cost_per_item: float | None = None,
) -> list[RouteSegment]:
    """Expand the planning inputs into an ordered, chained list of legs.

    Tier 1 ships direct and has no legs. Tier 2 only knows the full
    white-glove and full DHL models. Missing hub names are replaced by
    placeholder labels; the outcome is left for validation to flag.
    """
    if tier not in (2, 3):
        return []
    if tier == 2 and service_model == "hybrid":
        return []
    modes = _leg_modes(service_model, hybrid_variant)
    if modes is None:
        return []
    first_mode, terminal_mode = modes

    sender = party_label(parties.sender, "Sender", prefer_city=True)
    buyer = party_label(parties.buyer, "Buyer", prefer_city=True)
    hub1 = party_label(parties.hub1, HUB1_PLACEHOLDER)

    legs: list[tuple[str, str, Mode]] = [(sender, hub1, first_mode)]
    if uses_second_hub(tier, no_second_hub, parties):
        hub2 = party_label(parties.hub2, HUB2_PLACEHOLDER)
        legs.append((hub1, hub2, "internal"))
        legs.append((hub2, buyer, terminal_mode))
    else:
        legs.append((hub1, buyer, terminal_mode))

    departure = start or generation_time()
    segments: list[RouteSegment] = []
    for origin, destination, mode in legs:
        segment = create_segment(
            mode,
            origin,
            destination,
            departure,
            internal_cost_per_item=internal_cost_per_item,
        )
        segments.append(segment)
        departure = segment.arrival
    return segments


def regenerate_segments(
    quote: RouteQuote,
    *,
    start: datetime | None = None,
    internal_cost_per_item: float | None = None,
) -> list[RouteSegment]:
    """Rederive the legs of a quote from scratch. Operator edits are discarded."""
    return generate_segments(
        tier=quote.tier,
        service_model=quote.service_model,
        parties=quote.parties,
        hybrid_variant=quote.hybrid_variant,
        no_second_hub=quote.no_second_hub,
        start=start,
        internal_cost_per_item=internal_cost_per_item,
    )
