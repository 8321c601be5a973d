"""Serializers for finalized quotes: JSON summary, segment CSV and route sheet workbook."""

from __future__ import annotations

import csv
import io
from dataclasses import asdict
from datetime import datetime
from typing import Optional

from openpyxl import Workbook
from openpyxl.styles import Font

from ...models.domain import RouteQuote
from ..planning.segment_cost import segment_cost

_CURRENCY_SYMBOLS = {"EUR": "€", "USD": "$", "GBP": "£"}

_MODE_NAMES = {"wg": "White-Glove", "dhl": "DHL", "internal": "Internal Rollout"}
_PROVIDER_NAMES = {"wg": "White-Glove Service", "dhl": "DHL Shipping", "chauffeur": "Chauffeur Service"}


def format_currency(amount: float, currency: str = "EUR", show_symbol: bool = True) -> str:
    formatted = f"{amount:.2f}"
    if not show_symbol:
        return formatted
    symbol = _CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    return f"{symbol}{formatted}"


def format_percentage(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:.1f}%"


def service_model_description(quote: RouteQuote) -> str:
    if quote.service_model == "wg-full":
        return "Full White-Glove Service - Professional operators handle entire journey"
    if quote.service_model == "dhl-full":
        return "Full DHL Service - Complete shipping via DHL network"
    if quote.hybrid_variant == "wg_to_dhl":
        return "Hybrid: WG to Hub → DHL to Client"
    if quote.hybrid_variant == "dhl_to_wg":
        return "Hybrid: DHL to Hub → WG to Client"
    return "Hybrid"


def quote_to_json(quote: RouteQuote, *, generated_at: datetime | None = None) -> dict:
    payload = asdict(quote)
    for segment in payload["segments"]:
        segment["departure"] = segment["departure"].isoformat()
        segment["arrival"] = segment["arrival"].isoformat()
    payload["metadata"] = {
        "run_type": "quote",
        "shipment_id": quote.shipment_id,
        "service_description": service_model_description(quote),
        "hub_fee_total": quote.hub_fees.total,
        "generated_at": (generated_at or datetime.now()).isoformat(timespec="seconds"),
    }
    return payload


def quote_segments_to_csv(quote: RouteQuote) -> str:
    buffer = io.StringIO()
    fieldnames = [
        "sequence",
        "segment_id",
        "mode",
        "service_provider",
        "origin",
        "destination",
        "departure",
        "arrival",
        "duration_hours",
        "cost",
        "currency",
        "notes",
    ]
    writer = csv.DictWriter(buffer, fieldnames=fieldnames)
    writer.writeheader()
    for sequence, segment in enumerate(quote.segments, start=1):
        writer.writerow(
            {
                "sequence": sequence,
                "segment_id": segment.segment_id,
                "mode": segment.mode,
                "service_provider": segment.service_provider,
                "origin": segment.origin,
                "destination": segment.destination,
                "departure": segment.departure.isoformat(timespec="minutes"),
                "arrival": segment.arrival.isoformat(timespec="minutes"),
                "duration_hours": segment.duration_hours,
                "cost": f"{segment_cost(segment):.2f}",
                "currency": quote.currency,
                "notes": segment.notes,
            }
        )
    return buffer.getvalue()


def quote_to_workbook(quote: RouteQuote) -> bytes:
    """Route sheet workbook with a summary sheet and a segments sheet."""
    workbook = Workbook()
    summary = workbook.active
    summary.title = "Summary"
    bold = Font(bold=True)

    currency = quote.currency
    rows: list[tuple[str, str]] = [
        ("Shipment", quote.shipment_id),
        ("Tier", str(quote.tier)),
        ("Service", service_model_description(quote)),
        ("Sender", quote.parties.sender.name),
        ("Hub #1", quote.parties.hub1.name if quote.parties.hub1 else "-"),
        ("Hub #2", quote.parties.hub2.name if quote.parties.hub2 else "-"),
        ("Buyer", quote.parties.buyer.name),
        ("Transport", format_currency(quote.transport_total, currency)),
        ("Labor", format_currency(quote.labor.total_labor_cost, currency)),
        ("Hub fees", format_currency(quote.hub_fees.total, currency)),
        ("Insurance", format_currency(quote.insurance, currency)),
        ("Total cost", format_currency(quote.total_cost, currency)),
        ("Margin", format_currency(quote.margin_amount, currency)),
        ("Margin %", format_percentage(quote.effective_margin_percentage)),
        ("Client price", format_currency(quote.client_price, currency)),
        ("SLA comment", quote.sla_comment),
    ]
    for label, value in rows:
        summary.append([label, value])
        summary.cell(row=summary.max_row, column=1).font = bold

    segments_sheet = workbook.create_sheet("Segments")
    header = ["#", "Mode", "Provider", "From", "To", "Departure", "Arrival", "Hours", f"Cost ({currency})"]
    segments_sheet.append(header)
    for cell in segments_sheet[1]:
        cell.font = bold
    for sequence, segment in enumerate(quote.segments, start=1):
        segments_sheet.append(
            [
                sequence,
                _MODE_NAMES.get(segment.mode, segment.mode),
                _PROVIDER_NAMES.get(segment.service_provider, segment.service_provider),
                segment.origin,
                segment.destination,
                segment.departure,
                segment.arrival,
                segment.duration_hours,
                round(segment_cost(segment), 2),
            ]
        )

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
