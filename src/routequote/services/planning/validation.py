"""Advisory quote validation. Findings never block computation."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Literal, Sequence

from ...models.domain import (
    Address,
    DHLPricing,
    HubFeeBundle,
    RouteQuote,
    RouteSegment,
    WGPricing,
)

Severity = Literal["error", "warning", "info"]

MAX_SEGMENT_HOURS = 48
MAX_GAP_HOURS = 24


@dataclass(slots=True)
class ValidationIssue:
    field: str
    message: str
    severity: Severity


@dataclass(slots=True)
class ValidationResult:
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def issues(self) -> list[ValidationIssue]:
        return [*self.errors, *self.warnings]


def _is_incomplete(address: Address | None) -> bool:
    return address is None or not address.name.strip() or not address.city.strip()


def validate_service_model(quote: RouteQuote) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if quote.tier == 2 and quote.service_model == "hybrid":
        issues.append(
            ValidationIssue("serviceModel", "Tier 2 does not support hybrid service model", "error")
        )
    if quote.service_model == "hybrid" and quote.hybrid_variant is None:
        issues.append(
            ValidationIssue("hybridVariant", "Hybrid service model requires a hybrid variant", "error")
        )
    if quote.tier > 1 and _is_incomplete(quote.parties.hub1):
        issues.append(
            ValidationIssue("hub1Address", "Hub #1 (Authenticator) is required for Tier 2 and 3", "error")
        )
    if quote.tier == 3 and not quote.no_second_hub and _is_incomplete(quote.parties.hub2):
        issues.append(
            ValidationIssue(
                "hub2Address",
                'Hub #2 (Couturier) is required for Tier 3 unless "No second hub" is selected',
                "warning",
            )
        )
    return issues


def validate_segment_times(segments: Sequence[RouteSegment]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    previous: RouteSegment | None = None
    for index, segment in enumerate(segments):
        label = f"Segment {index + 1}"
        span_hours = (segment.arrival - segment.departure).total_seconds() / 3600
        if span_hours <= 0:
            issues.append(
                ValidationIssue(f"segment_{index}_time", f"{label}: Arrival must be after departure", "error")
            )
        if span_hours > MAX_SEGMENT_HOURS:
            issues.append(
                ValidationIssue(
                    f"segment_{index}_duration",
                    f"{label}: Duration exceeds {MAX_SEGMENT_HOURS} hours, please verify",
                    "warning",
                )
            )
        if previous is not None:
            gap_hours = (segment.departure - previous.arrival).total_seconds() / 3600
            if gap_hours < 0:
                issues.append(
                    ValidationIssue(
                        f"segment_{index}_continuity",
                        f"{label}: Departure cannot be before previous segment's arrival",
                        "error",
                    )
                )
            elif gap_hours > MAX_GAP_HOURS:
                issues.append(
                    ValidationIssue(
                        f"segment_{index}_gap",
                        f"{label}: {round(gap_hours)}h gap from previous segment",
                        "info",
                    )
                )
        previous = segment
    return issues


def validate_pricing(
    segments: Sequence[RouteSegment],
    hub_fees: HubFeeBundle,
    margin: float,
    margin_type: str = "percentage",
) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for index, segment in enumerate(segments):
        label = f"Segment {index + 1}"
        pricing = segment.pricing
        if segment.mode == "dhl" and isinstance(pricing, DHLPricing) and pricing.quote <= 0:
            issues.append(
                ValidationIssue(f"segment_{index}_dhl_price", f"{label}: DHL price is required", "error")
            )
        if segment.mode == "wg" and isinstance(pricing, WGPricing):
            if pricing.flights + pricing.trains + pricing.ground == 0 and not pricing.other:
                issues.append(
                    ValidationIssue(
                        f"segment_{index}_wg_price",
                        f"{label}: WG transport costs not entered (will show as TBD)",
                        "info",
                    )
                )

    for name in ("authentication", "sewing", "qa_fee", "tag", "nfc"):
        value = getattr(hub_fees, name)
        if not isinstance(value, (int, float)) or math.isnan(value):
            issues.append(
                ValidationIssue(f"hubFee_{name}", f'Hub fee "{name}" must be a valid number', "error")
            )

    if math.isnan(margin) or margin < 0:
        issues.append(ValidationIssue("margin", "Margin must be a valid positive number", "error"))
    elif margin_type == "percentage" and margin > 100:
        issues.append(ValidationIssue("margin", "Margin exceeds 100% - please verify", "warning"))
    return issues


def validate_quote(quote: RouteQuote) -> ValidationResult:
    """Collect every finding and split blocking-severity errors from the rest."""
    issues = [
        *validate_service_model(quote),
        *validate_segment_times(quote.segments),
        *validate_pricing(quote.segments, quote.hub_fees, quote.margin, quote.margin_type),
    ]
    result = ValidationResult()
    for issue in issues:
        if issue.severity == "error":
            result.errors.append(issue)
        else:
            result.warnings.append(issue)
    return result
