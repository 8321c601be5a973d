"""Report manifest API schemas."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuoteExportFileModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  file_name: str = Field(..., alias='fileName')
  file_type: str = Field(..., alias='fileType')
  size_bytes: int = Field(..., alias='sizeBytes')
  description: Optional[str] = None
  download_path: str = Field(..., alias='downloadPath')


class QuoteRunModel(BaseModel):
  model_config = ConfigDict(populate_by_name=True)

  id: str
  run_type: str = Field(..., alias='runType')
  created_at: Optional[datetime] = Field(None, alias='createdAt')
  shipment_id: Optional[str] = Field(None, alias='shipmentId')
  tier: Optional[int] = None
  service_model: Optional[str] = Field(None, alias='serviceModel')
  description: Optional[str] = None
  segment_count: int = Field(0, alias='segmentCount')
  total_cost: Optional[float] = Field(None, alias='totalCost')
  client_price: Optional[float] = Field(None, alias='clientPrice')
  currency: Optional[str] = None
  files: List[QuoteExportFileModel] = Field(default_factory=list)
