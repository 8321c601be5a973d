import json
from datetime import datetime
from pathlib import Path

import pytest

from src.routequote.config import settings
from src.routequote.data import hub_repository
from src.routequote.models.domain import LaborSettings, QuoteFinalizedError
from src.routequote.schemas.quotes import (
    AddressModel,
    DHLPricingModel,
    PartiesModel,
    QuotePlanRequest,
    QuoteRecalculateRequest,
    QuoteRegenerateRequest,
    SegmentAddRequest,
    SegmentChangesModel,
    SegmentProviderRequest,
    SegmentRemoveRequest,
    SegmentUpdateRequest,
    WGPricingModel,
)
from src.routequote.services.directory.settings_client import QuoteDefaults
from src.routequote.services.planning import service as planning_service

START = datetime(2025, 3, 10, 9, 0)

HUB_RECORDS = [
    {
        "id": "hub-par-01",
        "code": "PAR-Id-01",
        "name": "Paris Authenticator Hub",
        "roles": ["authenticator"],
        "address": {"street": "45 Rue de Rivoli", "city": "Paris", "country": "France"},
        "pricing": {"tier2_auth_fee": 150, "tag_unit_cost": 12.5, "tier3_auth_fee": 175, "nfc_unit_cost": 25},
    },
    {
        "id": "hub-lon-01",
        "code": "LON-Cou-01",
        "name": "London Couturier Hub",
        "roles": ["couturier"],
        "address": {"street": "123 Savile Row", "city": "London", "country": "United Kingdom"},
        "pricing": {"sew_fee": 125, "qa_fee": 75},
    },
]


def _defaults() -> QuoteDefaults:
    return QuoteDefaults(
        margin_percentage=30.0,
        currency="EUR",
        insurance_rate=0.003,
        internal_cost_per_item=50.0,
        labor=LaborSettings(),
    )


def _parties() -> PartiesModel:
    return PartiesModel(
        sender=AddressModel(name="Atelier Lumiere", city="Lyon", country="France"),
        buyer=AddressModel(name="J. Carter", city="Geneva", country="Switzerland"),
    )


def _plan_request(**overrides) -> QuotePlanRequest:
    payload = dict(
        shipment_id="SHP-100",
        tier=3,
        service_model="wg-full",
        parties=_parties(),
        hub1_id="PAR-Id-01",
        hub2_id="LON-Cou-01",
        declared_value=10000,
        start=START,
    )
    payload.update(overrides)
    return QuotePlanRequest(**payload)


@pytest.fixture(autouse=True)
def hub_price_book(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    path = tmp_path / "hubs.json"
    path.write_text(json.dumps(HUB_RECORDS), encoding="utf-8")
    monkeypatch.setattr(settings, "hub_price_book_file", path)
    monkeypatch.setattr(settings, "hub_directory_url", None)
    monkeypatch.setattr(settings, "settings_service_url", None)
    monkeypatch.setattr(hub_repository, "get_supabase_client", lambda: None)
    hub_repository.clear_hub_cache()
    yield
    hub_repository.clear_hub_cache()


def test_plan_tier3_quote_resolves_hubs_fees_and_totals() -> None:
    response = planning_service.plan_quote(_plan_request(), _defaults())
    quote = response.quote

    assert [segment.mode for segment in quote.segments] == ["wg", "internal", "wg"]
    assert quote.segments[0].destination == "Paris Authenticator Hub"
    assert quote.parties.hub1.city == "Paris"
    assert quote.parties.hub2.name == "London Couturier Hub"
    assert (quote.hub1_id, quote.hub2_id) == ("hub-par-01", "hub-lon-01")
    assert quote.hub_fees.model_dump() == {
        "authentication": 175.0,
        "sewing": 125.0,
        "qa_fee": 75.0,
        "tag": 0.0,
        "nfc": 25.0,
    }
    assert quote.transport_total == 50.0
    assert quote.labor.total_wg_hours == 8.0
    assert quote.labor.total_labor_cost == 600.0
    assert quote.insurance == pytest.approx(30.0)
    assert quote.total_cost == pytest.approx(1080.0)
    assert quote.client_price == pytest.approx(1404.0)
    assert quote.effective_margin_percentage == pytest.approx(30.0)
    assert quote.currency == "EUR"


def test_plan_flags_unpriced_white_glove_legs() -> None:
    response = planning_service.plan_quote(_plan_request(), _defaults())

    assert response.validation.is_valid
    assert {warning.field for warning in response.validation.warnings} == {"segment_0_wg_price", "segment_2_wg_price"}


def test_second_hub_is_dropped_below_tier3() -> None:
    response = planning_service.plan_quote(
        _plan_request(tier=2, service_model="dhl-full", no_second_hub=False), _defaults()
    )
    quote = response.quote

    assert quote.no_second_hub is True
    assert quote.parties.hub2 is None
    assert quote.hub2_id is None
    assert len(quote.segments) == 2


def test_tier3_no_second_hub_flag() -> None:
    response = planning_service.plan_quote(_plan_request(no_second_hub=True), _defaults())

    assert [segment.mode for segment in response.quote.segments] == ["wg", "wg"]
    assert response.quote.hub_fees.sewing == 0.0


def test_unknown_or_miscast_hub_is_rejected() -> None:
    with pytest.raises(ValueError, match="not found"):
        planning_service.plan_quote(_plan_request(hub1_id="NOPE"), _defaults())
    with pytest.raises(ValueError, match="cannot act as couturier"):
        planning_service.plan_quote(_plan_request(hub2_id="PAR-Id-01"), _defaults())


def test_tier2_dhl_scenario_through_recalculation() -> None:
    planned = planning_service.plan_quote(
        _plan_request(tier=2, service_model="dhl-full", hub2_id=None, declared_value=0, margin=20), _defaults()
    ).quote
    assert {error.field for error in planning_service.validate_quote_payload(
        QuoteRecalculateRequest(quote=planned)
    ).errors} == {"segment_0_dhl_price", "segment_1_dhl_price"}

    planned.segments[0].pricing = DHLPricingModel(quote=80)
    planned.segments[1].pricing = DHLPricingModel(quote=90)
    response = planning_service.recalculate_quote(QuoteRecalculateRequest(quote=planned))

    assert response.quote.labor.total_labor_cost == 0.0
    assert sum(response.quote.hub_fees.model_dump().values()) == 162.5
    assert response.quote.total_cost == pytest.approx(332.5)
    assert response.quote.client_price == pytest.approx(399.0)
    assert response.validation.is_valid


def test_recalculate_is_idempotent() -> None:
    planned = planning_service.plan_quote(_plan_request(), _defaults()).quote

    first = planning_service.recalculate_quote(QuoteRecalculateRequest(quote=planned)).quote
    second = planning_service.recalculate_quote(QuoteRecalculateRequest(quote=first)).quote

    assert (first.total_cost, first.client_price) == (second.total_cost, second.client_price)


def test_recalculate_keeps_operator_fee_overrides() -> None:
    planned = planning_service.plan_quote(_plan_request(), _defaults()).quote
    planned.hub_fees.authentication = 0.0

    response = planning_service.recalculate_quote(QuoteRecalculateRequest(quote=planned))

    assert response.quote.hub_fees.authentication == 0.0
    assert response.quote.total_cost == pytest.approx(1080.0 - 175.0)


def test_recalculate_with_new_hub_reseeds_fees() -> None:
    planned = planning_service.plan_quote(_plan_request(no_second_hub=True), _defaults()).quote
    planned.hub_fees.authentication = 0.0

    response = planning_service.recalculate_quote(QuoteRecalculateRequest(quote=planned, hub1_id="PAR-Id-01"))

    assert response.quote.hub_fees.authentication == 175.0


def test_segment_operations_recompute_totals() -> None:
    quote = planning_service.plan_quote(_plan_request(), _defaults()).quote
    first_id = quote.segments[0].segment_id

    updated = planning_service.update_quote_segment(
        SegmentUpdateRequest(
            quote=quote,
            segment_id=first_id,
            changes=SegmentChangesModel(pricing=WGPricingModel(flights=120, ground=30), notes="AF 7641"),
        )
    ).quote
    assert updated.segments[0].notes == "AF 7641"
    assert updated.transport_total == 200.0

    switched = planning_service.switch_segment_provider(
        SegmentProviderRequest(quote=updated, segment_id=first_id, service_provider="chauffeur"), _defaults()
    ).quote
    assert switched.segments[0].pricing.kind == "chauffeur"
    assert switched.transport_total == 50.0

    added = planning_service.add_quote_segment(SegmentAddRequest(quote=switched), _defaults()).quote
    assert len(added.segments) == 4
    assert added.segments[-1].origin == "Geneva"
    assert added.labor.total_wg_hours == 12.0

    removed = planning_service.remove_quote_segment(
        SegmentRemoveRequest(quote=added, segment_id=added.segments[-1].segment_id)
    ).quote
    assert len(removed.segments) == 3


def test_regenerate_discards_segment_edits() -> None:
    quote = planning_service.plan_quote(_plan_request(), _defaults()).quote
    quote.segments[0].pricing = WGPricingModel(ground=80)

    regenerated = planning_service.regenerate_quote(QuoteRegenerateRequest(quote=quote, start=START), _defaults()).quote

    assert regenerated.segments[0].pricing.ground == 0.0
    assert regenerated.segments[0].departure == START
    assert regenerated.transport_total == 50.0


def test_finalize_exports_and_locks_quote(tmp_path: Path) -> None:
    quote = planning_service.plan_quote(_plan_request(), _defaults()).quote

    response = planning_service.finalize_quote(
        QuoteRecalculateRequest(quote=quote), storage_root=tmp_path, persist=False
    )

    assert response.quote.finalized is True
    assert response.run_id.startswith("quote_SHP-100_")
    assert response.files == ["route_sheet.xlsx", "segments.csv", "summary.json"]
    run_dir = tmp_path / "outputs" / response.run_id
    summary = json.loads((run_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["shipment_id"] == "SHP-100"
    assert summary["finalized"] is True
    assert summary["client_price"] == pytest.approx(1404.0)

    with pytest.raises(QuoteFinalizedError):
        planning_service.recalculate_quote(QuoteRecalculateRequest(quote=response.quote))
    with pytest.raises(QuoteFinalizedError):
        planning_service.finalize_quote(QuoteRecalculateRequest(quote=response.quote), storage_root=tmp_path)


def test_finalizing_the_same_quote_twice_writes_separate_runs(tmp_path: Path) -> None:
    quote = planning_service.plan_quote(_plan_request(), _defaults()).quote
    payload = QuoteRecalculateRequest(quote=quote)

    first = planning_service.finalize_quote(payload, storage_root=tmp_path, persist=False)
    second = planning_service.finalize_quote(payload, storage_root=tmp_path, persist=False)

    assert first.run_id != second.run_id
    for response in (first, second):
        assert (tmp_path / "outputs" / response.run_id / "summary.json").is_file()
