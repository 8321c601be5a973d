"""Hub directory access: remote service first, then database, then the local price book."""

from __future__ import annotations

import functools
import json
import logging
from pathlib import Path
from typing import Any, Iterable, Optional

from ..config import settings
from ..db.supabase import get_supabase_client
from ..models.domain import Address, Hub, HubPriceEntry
from ..services.directory.hub_client import HubDirectoryClient

logger = logging.getLogger(__name__)

ROLE_AUTHENTICATOR = "authenticator"
ROLE_COUTURIER = "couturier"


def _coerce_price(value: Any) -> float:
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric hub price {value!r}")
        return 0.0


def _address_from_record(record: dict) -> Address:
    raw = record.get("address") if isinstance(record.get("address"), dict) else {}
    location = str(record.get("location") or "")
    location_parts = [part.strip() for part in location.split(",")] if location else []
    return Address(
        name=str(record.get("name") or ""),
        street=str(raw.get("street") or ""),
        city=str(raw.get("city") or (location_parts[0] if location_parts else "")),
        postal_code=str(raw.get("postal_code") or raw.get("postalCode") or ""),
        country=str(raw.get("country") or (location_parts[1] if len(location_parts) > 1 else "")),
    )


def _price_list(pricing: dict, tier: int) -> tuple[HubPriceEntry, ...]:
    currency = str(pricing.get("currency") or settings.default_currency)
    auth_key = "tier3_auth_fee" if tier == 3 else "tier2_auth_fee"
    auth_label = "Tier 3 Authentication" if tier == 3 else "Tier 2 Authentication"
    rows = (
        ("authentication", auth_label, pricing.get(auth_key)),
        ("tagging", "Security Tag", pricing.get("tag_unit_cost")),
        ("nfc", "NFC Chip", pricing.get("nfc_unit_cost")),
        ("sewing", "Sewing & NFC Installation", pricing.get("sew_fee")),
        ("qa", "Quality Assurance", pricing.get("qa_fee")),
        ("internal_rollout", "Internal Rollout", pricing.get("internal_rollout_cost")),
    )
    return tuple(
        HubPriceEntry(service_type=service_type, service_name=name, price=_coerce_price(value), currency=currency)
        for service_type, name, value in rows
    )


def hub_from_record(record: dict, tier: int) -> Hub:
    """Convert a directory record into a hub with a tier-specific price list."""
    roles_value = record.get("roles") or [ROLE_AUTHENTICATOR]
    if isinstance(roles_value, str):
        roles_value = [roles_value]
    roles = tuple(str(role) for role in roles_value)

    capabilities = {"storage"}
    if ROLE_AUTHENTICATOR in roles:
        capabilities.add("authentication")
    if ROLE_COUTURIER in roles:
        capabilities.update({"sewing", "nfc"})

    # flat rows (single hubs table) carry the price keys at the top level
    pricing = record.get("pricing") if isinstance(record.get("pricing"), dict) else record
    return Hub(
        hub_id=str(record.get("id") or record.get("code") or ""),
        code=str(record.get("code") or ""),
        name=str(record.get("name") or ""),
        address=_address_from_record(record),
        roles=roles,
        capabilities=frozenset(capabilities),
        status="active" if record.get("status", "active") == "active" else "inactive",
        pricing=_price_list(pricing, tier),
    )


def _load_hubs_from_directory() -> list[dict] | None:
    if not settings.hub_directory_url:
        return None
    try:
        records = HubDirectoryClient().list_hubs()
    except (ConnectionError, ValueError) as e:
        logger.warning(f"Hub directory lookup failed, falling back: {e}")
        return None
    return records or None


def _load_hubs_from_database() -> list[dict] | None:
    supabase = get_supabase_client()
    if not supabase:
        return None
    try:
        response = supabase.table("hubs").select("*").execute()
    except Exception as e:
        logger.debug(f"Database hub query failed, falling back to file: {e}")
        return None
    return list(response.data) if response.data else None


def _load_hubs_from_file(source: Path | None = None) -> list[dict]:
    path = source or settings.hub_price_book_file
    if not path.exists():
        logger.warning(f"Hub price book not found: {path}")
        return []
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict):
        payload = payload.get("data") or payload.get("hubs") or []
    if not isinstance(payload, list):
        raise ValueError(f"Hub price book '{path}' must contain a list of hubs.")
    return [record for record in payload if isinstance(record, dict)]


class HubSourceUnavailable(LookupError):
    """Neither the hub directory nor the database returned any hubs."""


@functools.lru_cache(maxsize=1)
def _load_remote_hub_records() -> tuple[dict, ...]:
    # raising keeps a failed lookup out of the cache
    for loader in (_load_hubs_from_directory, _load_hubs_from_database):
        records = loader()
        if records:
            return tuple(records)
    raise HubSourceUnavailable("no remote hub source available")


def load_hub_records() -> tuple[dict, ...]:
    """Cached remote hub records, or the local price book re-read on every call."""
    try:
        return _load_remote_hub_records()
    except HubSourceUnavailable:
        return tuple(_load_hubs_from_file())


def clear_hub_cache() -> None:
    _load_remote_hub_records.cache_clear()


def get_hubs(tier: int) -> tuple[Hub, ...]:
    return tuple(hub_from_record(record, tier) for record in load_hub_records())


def get_hub(hub_id: str | None, tier: int) -> Optional[Hub]:
    if not hub_id:
        return None
    wanted = hub_id.strip().upper()
    for hub in get_hubs(tier):
        if hub.hub_id.upper() == wanted or hub.code.upper() == wanted:
            return hub
    return None


def filter_hubs_by_role(hubs: Iterable[Hub], role: str) -> list[Hub]:
    """Active hubs eligible for a role (``authenticator`` for hub1, ``couturier`` for hub2)."""
    return [hub for hub in hubs if hub.is_active and hub.has_role(role)]
