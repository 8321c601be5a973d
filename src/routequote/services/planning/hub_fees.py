"""Tier-dependent hub fee resolution."""

from __future__ import annotations

from typing import Optional

from ...models.domain import Hub, HubFeeBundle, HubPriceEntry

# service type -> name keywords accepted when the type does not match
_SERVICE_KEYWORDS: dict[str, tuple[str, ...]] = {
    "authentication": ("authentication",),
    "tagging": ("tag",),
    "nfc": ("nfc",),
    "sewing": ("sewing",),
    "qa": ("qa", "quality"),
}


def find_price(hub: Hub, service_type: str) -> Optional[HubPriceEntry]:
    """First price list entry for a service, by type and then by name keyword."""
    for entry in hub.pricing:
        if entry.service_type == service_type:
            return entry
    keywords = _SERVICE_KEYWORDS.get(service_type, ())
    for entry in hub.pricing:
        name = entry.service_name.lower()
        if any(keyword in name for keyword in keywords):
            return entry
    return None


def _price(hub: Hub, service_type: str) -> float:
    entry = find_price(hub, service_type)
    return entry.price if entry else 0.0


def resolve_hub_fees(
    hub1: Optional[Hub],
    hub2: Optional[Hub],
    tier: int,
    no_second_hub: bool,
) -> HubFeeBundle:
    """Seed the fee bundle from the selected hubs' price lists.

    The authenticator covers sewing and QA itself when there is no
    couturier. The result is a default; operators may override any field.
    """
    fees = HubFeeBundle()
    if hub1 is None:
        return fees

    fees.authentication = _price(hub1, "authentication")
    if tier == 2:
        fees.tag = _price(hub1, "tagging")
    elif tier == 3:
        fees.nfc = _price(hub1, "nfc")
        finisher = hub2 if hub2 is not None and not no_second_hub else hub1
        fees.sewing = _price(finisher, "sewing")
        fees.qa_fee = _price(finisher, "qa")
    return fees
