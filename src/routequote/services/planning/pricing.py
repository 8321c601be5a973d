"""Cost aggregation and margin policy."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ...config import settings
from ...models.domain import MarginType


@dataclass(slots=True, frozen=True)
class PricingSummary:
    transport: float
    labor: float
    hub_fees: float
    insurance: float
    total_cost: float
    margin_amount: float
    client_price: float
    effective_margin_percentage: Optional[float]


def insurance_for(declared_value: float | None, rate: float | None = None) -> float:
    if not declared_value:
        return 0.0
    insurance_rate = rate if rate is not None else settings.insurance_rate
    return declared_value * insurance_rate


def effective_margin_percentage(margin_amount: float, total_cost: float) -> Optional[float]:
    """Margin as a share of cost; ``None`` when the cost is zero."""
    if total_cost == 0:
        return None
    return margin_amount / total_cost * 100


def aggregate_pricing(
    *,
    transport: float,
    labor: float,
    hub_fees: float,
    insurance: float,
    margin: float,
    margin_type: MarginType,
) -> PricingSummary:
    total_cost = transport + labor + hub_fees + insurance
    if margin_type == "percentage":
        margin_amount = total_cost * (margin / 100)
    else:
        margin_amount = margin
    return PricingSummary(
        transport=transport,
        labor=labor,
        hub_fees=hub_fees,
        insurance=insurance,
        total_cost=total_cost,
        margin_amount=margin_amount,
        client_price=total_cost + margin_amount,
        effective_margin_percentage=effective_margin_percentage(margin_amount, total_cost),
    )
