"""Domain models for hubs, route segments and quotes."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal, Optional, Union

Mode = Literal["wg", "dhl", "internal"]
ServiceProvider = Literal["chauffeur", "dhl", "wg"]
ServiceModel = Literal["wg-full", "dhl-full", "hybrid"]
HybridVariant = Literal["wg_to_dhl", "dhl_to_wg"]
MarginType = Literal["percentage", "amount"]


class QuoteFinalizedError(ValueError):
    """Raised when an edit is attempted on a quote that was handed to export."""


@dataclass(slots=True)
class Address:
    name: str = ""
    street: str = ""
    city: str = ""
    postal_code: str = ""
    country: str = ""


@dataclass(slots=True)
class HubPriceEntry:
    service_type: str
    service_name: str
    price: float
    currency: str = "EUR"
    unit: str = "item"


@dataclass(slots=True)
class Hub:
    """A hub from the directory. Looked up, never mutated, by the planner."""

    hub_id: str
    code: str
    name: str
    address: Address
    roles: tuple[str, ...] = ()
    capabilities: frozenset[str] = frozenset()
    status: str = "active"
    pricing: tuple[HubPriceEntry, ...] = ()

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    def has_role(self, role: str) -> bool:
        return role in self.roles


@dataclass(slots=True)
class WGPricing:
    flights: float = 0.0
    trains: float = 0.0
    ground: float = 0.0
    other: float = 0.0
    other_notes: Optional[str] = None
    kind: Literal["wg"] = field(default="wg", init=False)


@dataclass(slots=True)
class DHLPricing:
    quote: float = 0.0
    service_level: Literal["express", "standard"] = "standard"
    tracking_number: Optional[str] = None
    kind: Literal["dhl"] = field(default="dhl", init=False)


@dataclass(slots=True)
class ChauffeurPricing:
    quote: float = 0.0
    service_level: Literal["standard", "premium", "luxury"] = "standard"
    vehicle_type: Optional[str] = None
    driver_notes: Optional[str] = None
    kind: Literal["chauffeur"] = field(default="chauffeur", init=False)


@dataclass(slots=True)
class InternalPricing:
    per_item_cost: float = 0.0
    item_count: int = 1
    kind: Literal["internal"] = field(default="internal", init=False)


SegmentPricing = Union[WGPricing, DHLPricing, ChauffeurPricing, InternalPricing]


def duration_between(departure: datetime, arrival: datetime) -> float:
    """Hours between two local timestamps, rounded half-up to one decimal, never negative."""
    hours = (arrival - departure).total_seconds() / 3600.0
    return max(0.0, math.floor(hours * 10 + 0.5) / 10)


@dataclass(slots=True)
class RouteSegment:
    """One transport leg.

    ``mode`` is the leg's role in the topology, ``service_provider`` is the
    party that gets billed. The two are edited independently.
    """

    segment_id: str
    mode: Mode
    service_provider: ServiceProvider
    origin: str
    destination: str
    departure: datetime
    arrival: datetime
    pricing: SegmentPricing
    notes: str = ""
    attachments: list[dict] = field(default_factory=list)
    duration_hours: float = field(default=0.0, init=False)

    def __post_init__(self) -> None:
        self.duration_hours = duration_between(self.departure, self.arrival)

    def reschedule(self, departure: datetime | None = None, arrival: datetime | None = None) -> None:
        if departure is not None:
            self.departure = departure
        if arrival is not None:
            self.arrival = arrival
        self.duration_hours = duration_between(self.departure, self.arrival)


@dataclass(slots=True)
class BufferSettings:
    airport_check_in: bool = False
    airport_check_in_minutes: int = 90
    train_buffer: bool = False
    train_buffer_minutes: int = 20
    transfer_buffer: bool = False
    transfer_buffer_minutes: int = 30


@dataclass(slots=True)
class LaborSettings:
    hourly_rate: float = 75.0
    overtime_threshold_hours: float = 8.0
    overtime_multiplier: float = 1.5
    per_diem_enabled: bool = False
    per_diem_amount: float = 150.0
    operator_count: int = 1
    buffers: BufferSettings = field(default_factory=BufferSettings)


@dataclass(slots=True)
class LaborCostBreakdown:
    total_wg_hours: float = 0.0
    buffer_hours: float = 0.0
    total_active_hours: float = 0.0
    regular_hours: float = 0.0
    overtime_hours: float = 0.0
    base_labor_cost: float = 0.0
    overtime_cost: float = 0.0
    per_diem_cost: float = 0.0
    total_labor_cost: float = 0.0


@dataclass(slots=True)
class HubFeeBundle:
    authentication: float = 0.0
    sewing: float = 0.0
    qa_fee: float = 0.0
    tag: float = 0.0
    nfc: float = 0.0

    @property
    def total(self) -> float:
        return self.authentication + self.sewing + self.qa_fee + self.tag + self.nfc


@dataclass(slots=True)
class RouteParties:
    sender: Address
    buyer: Address
    hub1: Optional[Address] = None
    hub2: Optional[Address] = None


@dataclass(slots=True)
class RouteQuote:
    """Aggregate root for one planning session."""

    shipment_id: str
    tier: int
    service_model: ServiceModel
    parties: RouteParties
    hybrid_variant: Optional[HybridVariant] = None
    hub1_id: Optional[str] = None
    hub2_id: Optional[str] = None
    segments: list[RouteSegment] = field(default_factory=list)
    labor_settings: LaborSettings = field(default_factory=LaborSettings)
    labor: LaborCostBreakdown = field(default_factory=LaborCostBreakdown)
    hub_fees: HubFeeBundle = field(default_factory=HubFeeBundle)
    declared_value: float = 0.0
    insurance: float = 0.0
    margin: float = 30.0
    margin_type: MarginType = "percentage"
    transport_total: float = 0.0
    total_cost: float = 0.0
    margin_amount: float = 0.0
    client_price: float = 0.0
    effective_margin_percentage: Optional[float] = None
    no_second_hub: bool = False
    sla_comment: str = ""
    currency: str = "EUR"
    finalized: bool = False

    def ensure_editable(self) -> None:
        if self.finalized:
            raise QuoteFinalizedError(f"Quote for shipment '{self.shipment_id}' is finalized and read-only.")
