"""Quote planning request/response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, Field, model_validator

ModeLiteral = Literal["wg", "dhl", "internal"]
ProviderLiteral = Literal["chauffeur", "dhl", "wg"]
ServiceModelLiteral = Literal["wg-full", "dhl-full", "hybrid"]
HybridVariantLiteral = Literal["wg_to_dhl", "dhl_to_wg"]
MarginTypeLiteral = Literal["percentage", "amount"]


class AddressModel(BaseModel):
    name: str = ""
    street: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""


class PartiesModel(BaseModel):
    sender: AddressModel
    buyer: AddressModel
    hub1: Optional[AddressModel] = None
    hub2: Optional[AddressModel] = None


class WGPricingModel(BaseModel):
    kind: Literal["wg"] = "wg"
    flights: float = Field(0.0, ge=0)
    trains: float = Field(0.0, ge=0)
    ground: float = Field(0.0, ge=0)
    other: float = Field(0.0, ge=0)
    other_notes: Optional[str] = None


class DHLPricingModel(BaseModel):
    kind: Literal["dhl"] = "dhl"
    quote: float = Field(0.0, ge=0)
    service_level: Literal["express", "standard"] = "standard"
    tracking_number: Optional[str] = None


class ChauffeurPricingModel(BaseModel):
    kind: Literal["chauffeur"] = "chauffeur"
    quote: float = Field(0.0, ge=0)
    service_level: Literal["standard", "premium", "luxury"] = "standard"
    vehicle_type: Optional[str] = None
    driver_notes: Optional[str] = None


class InternalPricingModel(BaseModel):
    kind: Literal["internal"] = "internal"
    per_item_cost: float = Field(0.0, ge=0)
    item_count: int = Field(1, ge=1)


SegmentPricingModel = Annotated[
    Union[WGPricingModel, DHLPricingModel, ChauffeurPricingModel, InternalPricingModel],
    Field(discriminator="kind"),
]


class RouteSegmentModel(BaseModel):
    segment_id: str
    mode: ModeLiteral
    service_provider: ProviderLiteral
    origin: str
    destination: str
    departure: datetime
    arrival: datetime
    duration_hours: float = Field(0.0, description="Derived from departure/arrival; ignored on input.")
    pricing: SegmentPricingModel
    notes: str = ""
    attachments: List[dict] = Field(default_factory=list)


class BufferSettingsModel(BaseModel):
    airport_check_in: bool = False
    airport_check_in_minutes: int = Field(90, ge=0)
    train_buffer: bool = False
    train_buffer_minutes: int = Field(20, ge=0)
    transfer_buffer: bool = False
    transfer_buffer_minutes: int = Field(30, ge=0)


class LaborSettingsModel(BaseModel):
    hourly_rate: float = Field(75.0, ge=0)
    overtime_threshold_hours: float = Field(8.0, ge=0)
    overtime_multiplier: float = Field(1.5, ge=0)
    per_diem_enabled: bool = False
    per_diem_amount: float = Field(150.0, ge=0)
    operator_count: int = Field(1, ge=1)
    buffers: BufferSettingsModel = Field(default_factory=BufferSettingsModel)


class LaborCostBreakdownModel(BaseModel):
    total_wg_hours: float = 0.0
    buffer_hours: float = 0.0
    total_active_hours: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    base_labor_cost: float = 0.0
    overtime_cost: float = 0.0
    per_diem_cost: float = 0.0
    total_labor_cost: float = 0.0


class HubFeeBundleModel(BaseModel):
    authentication: float = Field(0.0, ge=0)
    sewing: float = Field(0.0, ge=0)
    qa_fee: float = Field(0.0, ge=0)
    tag: float = Field(0.0, ge=0)
    nfc: float = Field(0.0, ge=0)


class RouteQuoteModel(BaseModel):
    shipment_id: str
    tier: int = Field(..., ge=1, le=3)
    service_model: ServiceModelLiteral
    hybrid_variant: Optional[HybridVariantLiteral] = None
    hub1_id: Optional[str] = None
    hub2_id: Optional[str] = None
    parties: PartiesModel
    segments: List[RouteSegmentModel] = Field(default_factory=list)
    labor_settings: LaborSettingsModel = Field(default_factory=LaborSettingsModel)
    labor: LaborCostBreakdownModel = Field(default_factory=LaborCostBreakdownModel)
    hub_fees: HubFeeBundleModel = Field(default_factory=HubFeeBundleModel)
    declared_value: float = Field(0.0, ge=0)
    insurance: float = Field(0.0, ge=0)
    margin: float = 30.0
    margin_type: MarginTypeLiteral = "percentage"
    transport_total: float = 0.0
    total_cost: float = 0.0
    margin_amount: float = 0.0
    client_price: float = 0.0
    effective_margin_percentage: Optional[float] = Field(
        None, description="Margin as a percentage of cost; null when the cost is zero."
    )
    no_second_hub: bool = False
    sla_comment: str = ""
    currency: str = "EUR"
    finalized: bool = False


class QuotePlanRequest(BaseModel):
    shipment_id: str
    tier: int = Field(..., ge=1, le=3)
    service_model: ServiceModelLiteral
    hybrid_variant: Optional[HybridVariantLiteral] = None
    no_second_hub: Optional[bool] = Field(
        default=None,
        description="Tier 3 only. Defaults to false for tier 3 and true otherwise.",
    )
    parties: PartiesModel
    hub1_id: Optional[str] = Field(default=None, description="Authenticator hub id or code.")
    hub2_id: Optional[str] = Field(default=None, description="Couturier hub id or code.")
    declared_value: float = Field(0.0, ge=0)
    margin: Optional[float] = Field(default=None, description="Defaults to the configured margin percentage.")
    margin_type: MarginTypeLiteral = "percentage"
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    sla_comment: str = ""
    labor_settings: Optional[LaborSettingsModel] = None
    start: Optional[datetime] = Field(default=None, description="Departure of the first leg; defaults to now.")

    @model_validator(mode="after")
    def _check_hybrid_variant(self) -> "QuotePlanRequest":
        if self.service_model == "hybrid" and self.hybrid_variant is None:
            raise ValueError("hybrid_variant is required when service_model is 'hybrid'.")
        if self.service_model != "hybrid":
            self.hybrid_variant = None
        return self


class QuoteRecalculateRequest(BaseModel):
    quote: RouteQuoteModel
    hub1_id: Optional[str] = Field(
        default=None, description="Re-select the authenticator hub; re-seeds hub fees and address."
    )
    hub2_id: Optional[str] = Field(
        default=None, description="Re-select the couturier hub; re-seeds hub fees and address."
    )


class QuoteRegenerateRequest(BaseModel):
    quote: RouteQuoteModel
    start: Optional[datetime] = None


class SegmentAddRequest(BaseModel):
    quote: RouteQuoteModel


class SegmentRemoveRequest(BaseModel):
    quote: RouteQuoteModel
    segment_id: str


class SegmentProviderRequest(BaseModel):
    quote: RouteQuoteModel
    segment_id: str
    service_provider: ProviderLiteral


class SegmentChangesModel(BaseModel):
    """Partial segment edit; only the fields that are sent are applied."""

    mode: Optional[ModeLiteral] = None
    origin: Optional[str] = None
    destination: Optional[str] = None
    departure: Optional[datetime] = None
    arrival: Optional[datetime] = None
    pricing: Optional[SegmentPricingModel] = None
    notes: Optional[str] = None
    attachments: Optional[List[dict]] = None


class SegmentUpdateRequest(BaseModel):
    quote: RouteQuoteModel
    segment_id: str
    changes: SegmentChangesModel


class ValidationIssueModel(BaseModel):
    field: str
    message: str
    severity: Literal["error", "warning", "info"]


class ValidationReportModel(BaseModel):
    is_valid: bool
    errors: List[ValidationIssueModel] = Field(default_factory=list)
    warnings: List[ValidationIssueModel] = Field(default_factory=list)


class QuoteResponse(BaseModel):
    quote: RouteQuoteModel
    validation: ValidationReportModel


class QuoteFinalizeResponse(BaseModel):
    quote: RouteQuoteModel
    validation: ValidationReportModel
    run_id: str
    files: List[str]
    persisted: bool = Field(False, description="True when the quote was also stored in the database.")
