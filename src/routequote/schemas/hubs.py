"""Hub directory response schemas."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, Field

from .quotes import AddressModel


class HubPriceModel(BaseModel):
    service_type: str
    service_name: str
    price: float
    currency: str = "EUR"
    unit: str = "item"


class HubModel(BaseModel):
    hub_id: str
    code: str
    name: str
    address: AddressModel
    roles: List[str] = Field(default_factory=list)
    capabilities: List[str] = Field(default_factory=list)
    status: str = "active"
    pricing: List[HubPriceModel] = Field(default_factory=list)


class HubListResponse(BaseModel):
    tier: int
    role: str | None = None
    hubs: List[HubModel]
