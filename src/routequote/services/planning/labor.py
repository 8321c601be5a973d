"""White-glove labor hours and cost."""

from __future__ import annotations

import math
from typing import Sequence

from ...config import settings
from ...models.domain import (
    BufferSettings,
    LaborCostBreakdown,
    LaborSettings,
    RouteSegment,
    WGPricing,
)

OVERNIGHT_THRESHOLD_HOURS = 8.0


def default_labor_settings() -> LaborSettings:
    """Labor settings seeded from configuration; buffers start switched off."""
    return LaborSettings(
        hourly_rate=settings.wg_hourly_rate,
        overtime_threshold_hours=settings.wg_overtime_threshold_hours,
        overtime_multiplier=settings.wg_overtime_multiplier,
        per_diem_amount=settings.wg_per_diem_amount,
        operator_count=settings.wg_operator_count,
        buffers=BufferSettings(
            airport_check_in_minutes=settings.airport_check_in_minutes,
            train_buffer_minutes=settings.train_buffer_minutes,
            transfer_buffer_minutes=settings.transfer_buffer_minutes,
        ),
    )


def _buffer_hours(wg_segments: Sequence[RouteSegment], buffers: BufferSettings) -> float:
    priced = [segment.pricing for segment in wg_segments if isinstance(segment.pricing, WGPricing)]
    flight_legs = sum(1 for pricing in priced if pricing.flights > 0)
    train_legs = sum(1 for pricing in priced if pricing.trains > 0)

    hours = 0.0
    if buffers.airport_check_in and flight_legs:
        hours += (buffers.airport_check_in_minutes / 60) * flight_legs
    if buffers.train_buffer and train_legs:
        hours += (buffers.train_buffer_minutes / 60) * train_legs
    if buffers.transfer_buffer and len(wg_segments) > 1:
        hours += (buffers.transfer_buffer_minutes / 60) * (len(wg_segments) - 1)
    return hours


def calculate_labor(segments: Sequence[RouteSegment], labor_settings: LaborSettings | None = None) -> LaborCostBreakdown:
    """Derive the labor breakdown from the white-glove legs of a route.

    Hours are per operator; only the costs scale with the operator count.
    A route without white-glove legs has no labor component.
    """
    config = labor_settings or default_labor_settings()
    wg_segments = [segment for segment in segments if segment.mode == "wg"]
    if not wg_segments:
        return LaborCostBreakdown()

    total_wg_hours = sum((segment.duration_hours or 0.0 for segment in wg_segments), 0.0)
    buffer_hours = _buffer_hours(wg_segments, config.buffers)
    total_active_hours = total_wg_hours + buffer_hours

    threshold = config.overtime_threshold_hours
    regular_hours = min(total_active_hours, threshold)
    overtime_hours = max(0.0, total_active_hours - threshold)

    operators = config.operator_count
    base_labor_cost = regular_hours * config.hourly_rate * operators
    overtime_cost = overtime_hours * config.hourly_rate * config.overtime_multiplier * operators

    per_diem_cost = 0.0
    if config.per_diem_enabled and total_active_hours > OVERNIGHT_THRESHOLD_HOURS:
        days = math.ceil(total_active_hours / 24)
        per_diem_cost = days * config.per_diem_amount * operators

    return LaborCostBreakdown(
        total_wg_hours=total_wg_hours,
        buffer_hours=buffer_hours,
        total_active_hours=total_active_hours,
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        base_labor_cost=base_labor_cost,
        overtime_cost=overtime_cost,
        per_diem_cost=per_diem_cost,
        total_labor_cost=base_labor_cost + overtime_cost + per_diem_cost,
    )
