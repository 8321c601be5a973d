"""Quote settings collaborator: commercial and labor defaults per session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ...config import settings
from ...models.domain import BufferSettings, LaborSettings
from ..planning.labor import default_labor_settings
from .http import JSONServiceClient

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class QuoteDefaults:
    margin_percentage: float
    currency: str
    insurance_rate: float
    internal_cost_per_item: float
    labor: LaborSettings = field(default_factory=LaborSettings)


class SettingsClient(JSONServiceClient):
    service_name = "Settings service"

    def __init__(self, base_url: str | None = None, **kwargs: Any) -> None:
        super().__init__(base_url or settings.settings_service_url, **kwargs)

    def get_quote_settings(self) -> dict:
        payload = self.get_json("/settings/quote")
        if isinstance(payload, dict) and isinstance(payload.get("data"), dict):
            payload = payload["data"]
        if not isinstance(payload, dict):
            raise ValueError("Settings service returned an unexpected payload.")
        return payload


def local_defaults() -> QuoteDefaults:
    return QuoteDefaults(
        margin_percentage=settings.default_margin_percentage,
        currency=settings.default_currency,
        insurance_rate=settings.insurance_rate,
        internal_cost_per_item=settings.internal_rollout_cost_per_item,
        labor=default_labor_settings(),
    )


def _number(section: dict, key: str, fallback: float) -> float:
    value = section.get(key)
    if value is None:
        return fallback
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric setting '{key}': {value!r}")
        return fallback


def merge_quote_settings(payload: dict, base: QuoteDefaults | None = None) -> QuoteDefaults:
    """Overlay a settings document on top of the configured defaults."""
    defaults = base or local_defaults()
    commercial = payload.get("defaults") or {}
    wg = payload.get("wg") or {}
    buffers = payload.get("buffers") or {}
    internal = payload.get("internal") or {}

    labor = defaults.labor
    merged_buffers = BufferSettings(
        airport_check_in=labor.buffers.airport_check_in,
        airport_check_in_minutes=int(_number(buffers, "airportCheckIn", labor.buffers.airport_check_in_minutes)),
        train_buffer=labor.buffers.train_buffer,
        train_buffer_minutes=int(_number(buffers, "trainBuffer", labor.buffers.train_buffer_minutes)),
        transfer_buffer=labor.buffers.transfer_buffer,
        transfer_buffer_minutes=int(_number(buffers, "transferBuffer", labor.buffers.transfer_buffer_minutes)),
    )
    merged_labor = LaborSettings(
        hourly_rate=_number(wg, "hourlyRate", labor.hourly_rate),
        overtime_threshold_hours=_number(wg, "overtimeThreshold", labor.overtime_threshold_hours),
        overtime_multiplier=_number(wg, "overtimeMultiplier", labor.overtime_multiplier),
        per_diem_enabled=labor.per_diem_enabled,
        per_diem_amount=_number(wg, "perDiemRate", labor.per_diem_amount),
        operator_count=labor.operator_count,
        buffers=merged_buffers,
    )
    currency = commercial.get("currency")
    return QuoteDefaults(
        margin_percentage=_number(commercial, "marginPercentage", defaults.margin_percentage),
        currency=str(currency).upper() if currency else defaults.currency,
        insurance_rate=_number(commercial, "insuranceRate", defaults.insurance_rate),
        internal_cost_per_item=_number(internal, "rolloutCostPerItem", defaults.internal_cost_per_item),
        labor=merged_labor,
    )


def load_quote_defaults() -> QuoteDefaults:
    """Read the settings service once per session, falling back to local configuration."""
    defaults = local_defaults()
    if not settings.settings_service_url:
        return defaults
    try:
        payload = SettingsClient().get_quote_settings()
    except (ConnectionError, ValueError) as exc:
        logger.warning(f"Settings service unavailable, using configured defaults: {exc}")
        return defaults
    return merge_quote_settings(payload, defaults)
