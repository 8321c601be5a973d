"""Report/export manifest helpers for finalized quote runs."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from ...config import settings
from ...persistence.filesystem import TIMESTAMP_FORMAT

_FILE_DESCRIPTIONS = {
    "summary.json": "Quote summary",
    "segments.csv": "Route segments with per-leg cost",
    "route_sheet.xlsx": "Route sheet workbook",
}


def output_root(root: Path | None = None) -> Path:
    return ((root or settings.data_root) / "outputs").resolve()


def list_quote_runs(
    *,
    shipment_id: Optional[str] = None,
    tier: Optional[int] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    root: Path | None = None,
) -> List[dict]:
    base = output_root(root)
    if not base.exists():
        return []

    normalized_shipment = _normalize(shipment_id) if shipment_id else None
    normalized_search = _normalize(search) if search else None

    runs: List[dict] = []
    for run_dir in sorted((p for p in base.iterdir() if p.is_dir()), key=_sort_key, reverse=True):
        run_info = _build_run_summary(run_dir)
        if not run_info or run_info["run_type"] != "quote":
            continue
        if normalized_shipment and _normalize(run_info.get("shipment_id")) != normalized_shipment:
            continue
        if tier is not None and run_info.get("tier") != tier:
            continue
        if normalized_search and not _matches_search(
            normalized_search,
            run_info.get("id"),
            run_info.get("shipment_id"),
            run_info.get("service_model"),
            run_info.get("description"),
        ):
            continue

        run_info["files"] = [
            _build_file_record(file_path, run_dir) for file_path in sorted(run_dir.glob("*")) if file_path.is_file()
        ]
        runs.append(run_info)
        if limit and len(runs) >= limit:
            break
    return runs


def resolve_export_file(run_id: str, filename: str, root: Path | None = None) -> Path:
    base = output_root(root)
    candidate = (base / run_id / filename).resolve()
    if not candidate.is_file():
        raise FileNotFoundError(filename)
    if base not in candidate.parents:
        raise FileNotFoundError(filename)
    return candidate


def _build_run_summary(run_dir: Path) -> Optional[dict]:
    name_parts = run_dir.name.split("_")
    if len(name_parts) < 2:
        return None
    timestamp = _parse_timestamp(name_parts[-1])
    summary_data = _load_summary(run_dir / "summary.json") or {}
    metadata = summary_data.get("metadata") if isinstance(summary_data.get("metadata"), dict) else {}

    shipment_id = summary_data.get("shipment_id") or metadata.get("shipment_id")
    if not shipment_id and len(name_parts) > 2:
        shipment_id = "_".join(name_parts[1:-1])

    info: Dict[str, Any] = {
        "id": run_dir.name,
        "run_type": name_parts[0],
        "created_at": timestamp,
        "shipment_id": shipment_id,
        "tier": summary_data.get("tier"),
        "service_model": summary_data.get("service_model"),
        "description": metadata.get("service_description"),
        "segment_count": len(summary_data.get("segments") or []),
        "total_cost": summary_data.get("total_cost"),
        "client_price": summary_data.get("client_price"),
        "currency": summary_data.get("currency"),
    }
    return info


def _build_file_record(file_path: Path, run_dir: Path) -> dict:
    file_suffix = file_path.suffix[1:].upper() if file_path.suffix else ""
    return {
        "file_name": file_path.name,
        "file_type": file_suffix or "FILE",
        "size_bytes": file_path.stat().st_size,
        "description": _FILE_DESCRIPTIONS.get(file_path.name.lower(), "Export file"),
        "download_path": f"{settings.api_prefix}/reports/quotes/{run_dir.name}/{file_path.name}",
    }


def _load_summary(path: Path) -> Optional[dict]:
    if not path.exists():
        return None
    try:
        with path.open("r", encoding="utf-8") as handle:
            return json.load(handle)
    except json.JSONDecodeError:
        return None


def _parse_timestamp(value: str) -> Optional[datetime]:
    # same-instant runs carry a "-2", "-3" suffix after the timestamp
    try:
        return datetime.strptime(value.split("-")[0], TIMESTAMP_FORMAT)
    except ValueError:
        return None


def _sort_key(path: Path) -> float:
    timestamp = _parse_timestamp(path.name.split("_")[-1])
    if timestamp:
        return timestamp.timestamp()
    return path.stat().st_mtime


def _normalize(value: Optional[str]) -> str:
    return value.lower().strip() if isinstance(value, str) else ""


def _matches_search(search: str, *values: Optional[str]) -> bool:
    for value in values:
        if isinstance(value, str) and search in value.lower():
            return True
    return False
