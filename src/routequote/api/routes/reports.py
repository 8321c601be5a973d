"""Report manifest endpoints."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Path, Query, status
from fastapi.responses import FileResponse

from ...schemas.reports import QuoteRunModel
from ...services.reports import list_quote_runs, resolve_export_file

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/quotes", response_model=list[QuoteRunModel])
def get_quote_runs(
  shipment_id: str | None = Query(default=None, description="Filter by shipment id"),
  tier: int | None = Query(default=None, ge=1, le=3, description="Filter by tier"),
  search: str | None = Query(default=None, description="Case-insensitive search across run metadata"),
  limit: int | None = Query(default=None, gt=0, description="Maximum number of runs to return"),
) -> list[QuoteRunModel]:
  runs = list_quote_runs(shipment_id=shipment_id, tier=tier, search=search, limit=limit)
  return [QuoteRunModel.model_validate(item) for item in runs]


@router.get(
  "/quotes/{run_id}/{file_name:path}",
  response_class=FileResponse,
  status_code=status.HTTP_200_OK,
)
def download_quote_file(
  run_id: str = Path(..., description="Run directory identifier"),
  file_name: str = Path(..., description="File name within the run directory"),
) -> FileResponse:
  try:
    file_path = resolve_export_file(run_id, file_name)
  except FileNotFoundError as exc:
    raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc

  return FileResponse(
    path=file_path,
    filename=file_path.name,
    media_type=_get_media_type(file_path),
    headers={"Content-Disposition": f'attachment; filename="{file_path.name}"'},
  )


def _get_media_type(file_path) -> str:
  suffix = file_path.suffix.lower()
  mime_types = {
    ".csv": "text/csv",
    ".json": "application/json",
    ".xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
  }
  return mime_types.get(suffix, "application/octet-stream")
