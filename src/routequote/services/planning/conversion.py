"""Mapping between API schemas and domain dataclasses."""

from __future__ import annotations

from dataclasses import asdict
from typing import Optional

from ...models.domain import (
    Address,
    BufferSettings,
    ChauffeurPricing,
    DHLPricing,
    HubFeeBundle,
    InternalPricing,
    LaborCostBreakdown,
    LaborSettings,
    RouteParties,
    RouteQuote,
    RouteSegment,
    SegmentPricing,
    WGPricing,
)
from ...schemas.quotes import (
    AddressModel,
    ChauffeurPricingModel,
    DHLPricingModel,
    InternalPricingModel,
    LaborSettingsModel,
    PartiesModel,
    RouteQuoteModel,
    RouteSegmentModel,
    ValidationIssueModel,
    ValidationReportModel,
    WGPricingModel,
)
from .validation import ValidationResult


def address_from_model(model: Optional[AddressModel]) -> Optional[Address]:
    if model is None:
        return None
    return Address(**model.model_dump())


def parties_from_model(model: PartiesModel) -> RouteParties:
    return RouteParties(
        sender=address_from_model(model.sender) or Address(),
        buyer=address_from_model(model.buyer) or Address(),
        hub1=address_from_model(model.hub1),
        hub2=address_from_model(model.hub2),
    )


def pricing_from_model(model) -> SegmentPricing:
    data = model.model_dump(exclude={"kind"})
    match model:
        case WGPricingModel():
            return WGPricing(**data)
        case DHLPricingModel():
            return DHLPricing(**data)
        case ChauffeurPricingModel():
            return ChauffeurPricing(**data)
        case InternalPricingModel():
            return InternalPricing(**data)
    raise ValueError(f"Unsupported pricing variant: {type(model).__name__}")


def segment_from_model(model: RouteSegmentModel) -> RouteSegment:
    # duration_hours is rederived by the dataclass
    return RouteSegment(
        segment_id=model.segment_id,
        mode=model.mode,
        service_provider=model.service_provider,
        origin=model.origin,
        destination=model.destination,
        departure=model.departure,
        arrival=model.arrival,
        pricing=pricing_from_model(model.pricing),
        notes=model.notes,
        attachments=list(model.attachments),
    )


def labor_settings_from_model(model: LaborSettingsModel) -> LaborSettings:
    data = model.model_dump(exclude={"buffers"})
    return LaborSettings(**data, buffers=BufferSettings(**model.buffers.model_dump()))


def quote_from_model(model: RouteQuoteModel) -> RouteQuote:
    return RouteQuote(
        shipment_id=model.shipment_id,
        tier=model.tier,
        service_model=model.service_model,
        hybrid_variant=model.hybrid_variant,
        hub1_id=model.hub1_id,
        hub2_id=model.hub2_id,
        parties=parties_from_model(model.parties),
        segments=[segment_from_model(segment) for segment in model.segments],
        labor_settings=labor_settings_from_model(model.labor_settings),
        labor=LaborCostBreakdown(**model.labor.model_dump()),
        hub_fees=HubFeeBundle(**model.hub_fees.model_dump()),
        declared_value=model.declared_value,
        insurance=model.insurance,
        margin=model.margin,
        margin_type=model.margin_type,
        transport_total=model.transport_total,
        total_cost=model.total_cost,
        margin_amount=model.margin_amount,
        client_price=model.client_price,
        effective_margin_percentage=model.effective_margin_percentage,
        no_second_hub=model.no_second_hub,
        sla_comment=model.sla_comment,
        currency=model.currency,
        finalized=model.finalized,
    )


def quote_to_model(quote: RouteQuote) -> RouteQuoteModel:
    return RouteQuoteModel.model_validate(asdict(quote))


def validation_to_model(result: ValidationResult) -> ValidationReportModel:
    return ValidationReportModel(
        is_valid=result.is_valid,
        errors=[ValidationIssueModel(**asdict(issue)) for issue in result.errors],
        warnings=[ValidationIssueModel(**asdict(issue)) for issue in result.warnings],
    )
