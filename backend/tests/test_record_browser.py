from datetime import date
from decimal import Decimal

import pytest

from app.models import Invoice, InvoiceItem
from app.schemas.records import ColumnDescriptor, ColumnKind
from app.services.record_browser import (
    TABLE_SCHEMAS,
    column_kind_for,
    format_cell,
    matches_search,
    render_table,
)
from app.services.record_store import RecordStoreError


@pytest.mark.parametrize("name, kind", [
    ("id", ColumnKind.IDENTITY),
    ("status", ColumnKind.STATUS),
    ("total_amount", ColumnKind.CURRENCY),
    ("unit_price", ColumnKind.CURRENCY),
    ("line_total", ColumnKind.CURRENCY),
    ("issue_date", ColumnKind.DATETIME),
    ("created_at", ColumnKind.DATETIME),
    ("invoice_id", ColumnKind.TEXT),
    ("quantity", ColumnKind.TEXT),
    ("company_name", ColumnKind.TEXT),
])
def test_column_kind_for(name, kind):
    assert column_kind_for(name) == kind


def test_schemas_list_the_browsable_tables_in_order():
    assert list(TABLE_SCHEMAS) == ["invoices", "clients", "profiles", "invoice_items"]
    assert [c.key for c in TABLE_SCHEMAS["invoices"].columns] == [
        "id", "invoice_number", "client_name", "total_amount", "status", "issue_date", "due_date",
    ]
    assert TABLE_SCHEMAS["profiles"].title == "User Profiles"
    assert set(TABLE_SCHEMAS["clients"].model_dump()) == {"name", "title", "columns"}


def test_matches_search_checks_every_field_case_insensitively():
    row = {"id": 1, "company_name": "Acme Fabrication", "email": "JANE@acme.test", "phone": None}
    assert matches_search(row, "")
    assert matches_search(row, "acme")
    assert matches_search(row, "jane@")
    assert not matches_search(row, "globex")


def test_matches_search_includes_hidden_fields():
    row = {"id": 1, "notes": "urgent delivery"}
    assert matches_search(row, "URGENT")


def test_format_cell_variants():
    money = ColumnDescriptor(key="total_amount", label="Total Amount", kind=ColumnKind.CURRENCY)
    status = ColumnDescriptor(key="status", label="Status", kind=ColumnKind.STATUS)
    ident = ColumnDescriptor(key="id", label="Id", kind=ColumnKind.IDENTITY)
    when = ColumnDescriptor(key="issue_date", label="Issue Date", kind=ColumnKind.DATETIME)

    assert format_cell(Decimal("1500"), money).text == "$1,500.00"
    assert format_cell(None, money).text == "-"

    badge = format_cell("overdue", status)
    assert badge.text == "overdue"
    assert badge.badge_color == "red"

    identity = format_cell(17, ident)
    assert identity.text == "17"
    assert identity.monospace and identity.muted

    assert format_cell(date(2024, 1, 5), when).text == "Jan 5, 2024, 12:00 AM"


def test_render_table_filters_and_counts():
    rows = [
        {"id": 1, "company_name": "Acme", "contact_name": "Jane", "email": "j@acme.test", "phone": None, "address": None},
        {"id": 2, "company_name": "Globex", "contact_name": "Hank", "email": "h@globex.test", "phone": "555", "address": "x"},
    ]
    table = render_table("clients", rows, search="glob")

    assert table.title == "Clients"
    assert table.total_count == 2
    assert table.match_count == 1
    assert table.rows[0].record_id == "2"
    assert [cell.text for cell in table.rows[0].cells] == ["2", "Globex", "Hank", "h@globex.test", "555", "x"]
    assert all(not action.enabled for action in table.rows[0].actions)


def test_render_unknown_table():
    with pytest.raises(RecordStoreError):
        render_table("secrets", [])


def _seed_invoice(db_session, owner, client, **overrides):
    values = dict(
        user_id=owner.id,
        client_id=client.id,
        invoice_number="INV-1001",
        issue_date=date(2024, 1, 5),
        due_date=date(2024, 2, 4),
        status="paid",
        subtotal=Decimal("400.00"),
        tax_amount=Decimal("0"),
        total_amount=Decimal("400.00"),
    )
    values.update(overrides)
    invoice = Invoice(**values)
    db_session.add(invoice)
    db_session.commit()
    return invoice


def test_records_endpoint_renders_invoices_with_client_name(client, db_session, profile, acme, auth_headers):
    _seed_invoice(db_session, profile, acme)

    response = client.get("/api/records/invoices", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["match_count"] == 1
    cells = {cell["column"]: cell for cell in data["rows"][0]["cells"]}
    assert cells["client_name"]["text"] == "Acme Fabrication"
    assert cells["total_amount"]["text"] == "$400.00"
    assert cells["status"]["badge_color"] == "green"


def test_records_endpoint_search(client, db_session, profile, acme, auth_headers):
    _seed_invoice(db_session, profile, acme, invoice_number="INV-1001")
    _seed_invoice(db_session, profile, acme, invoice_number="INV-2002", status="overdue")

    data = client.get("/api/records/invoices", params={"search": "overdue"}, headers=auth_headers).json()
    assert data["total_count"] == 2
    assert data["match_count"] == 1


def test_records_hidden_from_other_users_and_anonymous(client, db_session, profile, other_profile, acme):
    invoice = _seed_invoice(db_session, profile, acme)
    db_session.add(InvoiceItem(
        invoice_id=invoice.id, description="Steel Beam", quantity=4,
        unit_price=Decimal("100.00"), line_total=Decimal("400.00"),
    ))
    db_session.commit()

    other = {"X-User-Id": str(other_profile.id)}
    assert client.get("/api/records/invoices", headers=other).json()["total_count"] == 0
    assert client.get("/api/records/invoice_items", headers=other).json()["total_count"] == 0
    assert client.get("/api/records/invoices").json()["total_count"] == 0


def test_records_table_summary(client, db_session, profile, acme, auth_headers):
    _seed_invoice(db_session, profile, acme)

    summary = {t["name"]: t["count"] for t in client.get("/api/records", headers=auth_headers).json()}
    assert summary == {"invoices": 1, "clients": 1, "profiles": 1, "invoice_items": 0}


def test_records_unknown_table_404(client, auth_headers):
    assert client.get("/api/records/payroll", headers=auth_headers).status_code == 404
