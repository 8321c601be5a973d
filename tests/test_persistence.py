import csv
import io
import json
from datetime import datetime, timedelta
from pathlib import Path

from openpyxl import load_workbook

from src.routequote.models.domain import (
    Address,
    DHLPricing,
    HubFeeBundle,
    RouteParties,
    RouteQuote,
    RouteSegment,
)
from src.routequote.persistence import database, filesystem
from src.routequote.persistence.filesystem import FileStorage, safe_token
from src.routequote.services.outputs.quote_formatter import (
    format_currency,
    quote_segments_to_csv,
    quote_to_json,
    quote_to_workbook,
    service_model_description,
)
from src.routequote.services.reports.manifest import list_quote_runs, resolve_export_file

START = datetime(2025, 3, 10, 9, 0)


def _quote(**overrides) -> RouteQuote:
    segments = [
        RouteSegment(
            segment_id=f"s{index}",
            mode="dhl",
            service_provider="dhl",
            origin=origin,
            destination=destination,
            departure=START + timedelta(hours=24 * index),
            arrival=START + timedelta(hours=24 * (index + 1)),
            pricing=DHLPricing(quote=price),
        )
        for index, (origin, destination, price) in enumerate(
            [("Lyon", "Paris Authenticator Hub", 80.0), ("Paris Authenticator Hub", "Geneva", 90.0)]
        )
    ]
    values = dict(
        shipment_id="SHP-8",
        tier=2,
        service_model="dhl-full",
        parties=RouteParties(
            sender=Address(name="Atelier", city="Lyon"),
            buyer=Address(name="Buyer", city="Geneva"),
            hub1=Address(name="Paris Authenticator Hub", city="Paris"),
        ),
        segments=segments,
        hub_fees=HubFeeBundle(authentication=150.0, tag=12.5),
        margin=20.0,
        transport_total=170.0,
        total_cost=332.5,
        margin_amount=66.5,
        client_price=399.0,
        effective_margin_percentage=20.0,
        no_second_hub=True,
        finalized=True,
    )
    values.update(overrides)
    return RouteQuote(**values)


def _write_run(root: Path, quote: RouteQuote) -> Path:
    storage = FileStorage(root=root)
    run_dir = storage.make_run_directory(prefix="quote", label=quote.shipment_id)
    storage.write_json(run_dir / "summary.json", quote_to_json(quote))
    storage.write_csv(run_dir / "segments.csv", quote_segments_to_csv(quote))
    return run_dir


def test_file_storage_creates_run_directory(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory(prefix="quote", label="SHP 42/A_b")

    assert run_dir.is_dir()
    assert run_dir.parent == tmp_path / "outputs"
    assert run_dir.name.startswith("quote_SHP-42-A-b_")


def test_file_storage_writes_json_csv_and_bytes(tmp_path: Path) -> None:
    storage = FileStorage(root=tmp_path)
    run_dir = storage.make_run_directory()

    storage.write_json(run_dir / "summary.json", {"hello": "world"})
    storage.write_csv(run_dir / "segments.csv", "a,b\n1,2\n")
    storage.write_bytes(run_dir / "sheet.xlsx", b"PK\x03\x04")

    assert (run_dir / "summary.json").read_text(encoding="utf-8") == '{\n  "hello": "world"\n}'
    assert (run_dir / "segments.csv").read_text(encoding="utf-8") == "a,b\n1,2\n"
    assert (run_dir / "sheet.xlsx").read_bytes() == b"PK\x03\x04"


def test_run_directories_stay_unique_within_one_instant(tmp_path: Path, monkeypatch) -> None:
    class _FrozenClock(datetime):
        @classmethod
        def now(cls, tz=None):
            return datetime(2025, 3, 10, 9, 0, 0, 123456, tzinfo=tz)

    monkeypatch.setattr(filesystem, "datetime", _FrozenClock)
    storage = FileStorage(root=tmp_path)

    first = storage.make_run_directory(prefix="quote", label="SHP-8")
    second = storage.make_run_directory(prefix="quote", label="SHP-8")

    assert first.name == "quote_SHP-8_20250310T090000123456Z"
    assert second.name == "quote_SHP-8_20250310T090000123456Z-2"
    for run_dir in (first, second):
        storage.write_json(run_dir / "summary.json", quote_to_json(_quote()))
    runs = list_quote_runs(root=tmp_path)
    assert {run["id"] for run in runs} == {first.name, second.name}
    assert {run["created_at"] for run in runs} == {datetime(2025, 3, 10, 9, 0, 0, 123456)}


def test_safe_token() -> None:
    assert safe_token("  ") == "unknown"
    assert safe_token("ord_77") == "ord-77"


def test_format_currency() -> None:
    assert format_currency(399, "EUR") == "€399.00"
    assert format_currency(12.5, "usd") == "$12.50"
    assert format_currency(12.5, "GBP") == "£12.50"
    assert format_currency(12.5, "CHF") == "CHF12.50"
    assert format_currency(12.5, "EUR", show_symbol=False) == "12.50"


def test_service_model_description() -> None:
    assert service_model_description(_quote()).startswith("Full DHL Service")
    hybrid = _quote(tier=3, service_model="hybrid", hybrid_variant="dhl_to_wg")
    assert service_model_description(hybrid) == "Hybrid: DHL to Hub → WG to Client"


def test_quote_to_json_is_serializable() -> None:
    payload = quote_to_json(_quote(), generated_at=datetime(2025, 3, 1, 12, 0))

    encoded = json.loads(json.dumps(payload))
    assert encoded["segments"][0]["departure"] == "2025-03-10T09:00:00"
    assert encoded["segments"][0]["pricing"]["kind"] == "dhl"
    assert encoded["metadata"]["hub_fee_total"] == 162.5
    assert encoded["metadata"]["generated_at"] == "2025-03-01T12:00:00"


def test_segments_csv_lists_cost_per_leg() -> None:
    rows = list(csv.DictReader(io.StringIO(quote_segments_to_csv(_quote()))))

    assert [row["cost"] for row in rows] == ["80.00", "90.00"]
    assert rows[1]["sequence"] == "2"
    assert rows[0]["duration_hours"] == "24.0"


def test_workbook_has_summary_and_segment_sheets() -> None:
    workbook = load_workbook(io.BytesIO(quote_to_workbook(_quote())))

    assert workbook.sheetnames == ["Summary", "Segments"]
    summary = {row[0]: row[1] for row in workbook["Summary"].iter_rows(values_only=True)}
    assert summary["Client price"] == "€399.00"
    assert summary["Hub #2"] == "-"
    segment_rows = list(workbook["Segments"].iter_rows(min_row=2, values_only=True))
    assert [row[-1] for row in segment_rows] == [80.0, 90.0]


def test_manifest_lists_quote_runs(tmp_path: Path) -> None:
    run_dir = _write_run(tmp_path, _quote())
    (tmp_path / "outputs" / "scratch").mkdir()

    runs = list_quote_runs(root=tmp_path)

    assert [run["id"] for run in runs] == [run_dir.name]
    run = runs[0]
    assert run["shipment_id"] == "SHP-8"
    assert run["segment_count"] == 2
    assert run["client_price"] == 399.0
    assert isinstance(run["created_at"], datetime)
    assert {item["file_name"] for item in run["files"]} == {"segments.csv", "summary.json"}
    assert run["files"][0]["download_path"].endswith(f"/reports/quotes/{run_dir.name}/segments.csv")


def test_manifest_filters(tmp_path: Path) -> None:
    _write_run(tmp_path, _quote())

    assert list_quote_runs(root=tmp_path, shipment_id="shp-8")
    assert list_quote_runs(root=tmp_path, shipment_id="SHP-9") == []
    assert list_quote_runs(root=tmp_path, tier=3) == []
    assert list_quote_runs(root=tmp_path, search="dhl service")
    assert list_quote_runs(root=tmp_path / "missing") == []


def test_resolve_export_file_stays_inside_outputs(tmp_path: Path) -> None:
    run_dir = _write_run(tmp_path, _quote())

    assert resolve_export_file(run_dir.name, "summary.json", root=tmp_path) == (run_dir / "summary.json").resolve()
    for bad_name in ("missing.csv", "../../hubs.json"):
        try:
            resolve_export_file(run_dir.name, bad_name, root=tmp_path)
        except FileNotFoundError:
            continue
        raise AssertionError(f"{bad_name} should not resolve")


class _FakeTable:
    def __init__(self, log: list, fail: bool = False) -> None:
        self.log = log
        self.fail = fail

    def upsert(self, record, on_conflict=None):
        self.log.append((record, on_conflict))
        return self

    def execute(self):
        if self.fail:
            raise RuntimeError("connection reset")
        return self


class _FakeSupabase:
    def __init__(self, fail: bool = False) -> None:
        self.log: list = []
        self.tables: list = []
        self.fail = fail

    def table(self, name):
        self.tables.append(name)
        return _FakeTable(self.log, self.fail)


def test_save_quote_skips_when_database_not_configured(monkeypatch) -> None:
    monkeypatch.setattr(database, "get_supabase_client", lambda: None)

    assert database.save_quote_to_database(_quote()) is False


def test_save_quote_upserts_by_shipment(monkeypatch) -> None:
    fake = _FakeSupabase()
    monkeypatch.setattr(database, "get_supabase_client", lambda: fake)

    assert database.save_quote_to_database(_quote(), run_id="quote_SHP-8_20250310T090000Z") is True

    record, conflict = fake.log[0]
    assert fake.tables == ["route_quotes"]
    assert conflict == "shipment_id"
    assert record["client_price"] == 399.0
    assert record["hub_fee_total"] == 162.5
    assert record["payload"]["shipment_id"] == "SHP-8"


def test_save_quote_failure_is_reported_not_raised(monkeypatch) -> None:
    monkeypatch.setattr(database, "get_supabase_client", lambda: _FakeSupabase(fail=True))

    assert database.save_quote_to_database(_quote()) is False
