from datetime import date, timedelta
from decimal import Decimal
from types import SimpleNamespace

import pytest

from app.schemas.invoice import InvoiceStatus
from app.services.exceptions import EditorStateError, InvoiceSubmissionError, InvoiceValidationError
from app.services.invoice_editor import (
    EditorState,
    InventorySnapshot,
    InvoiceEditor,
    SAVE_FAILED,
    filter_clients,
    filter_inventory,
    insufficient_stock_notice,
)
from app.services.record_store import RecordNotFoundError

STEEL_BEAM = InventorySnapshot(id=1, name="Steel Beam", unit_price=Decimal("100.00"), quantity=5, category="Structural")
BOLTS = InventorySnapshot(id=2, name="Anchor Bolts", unit_price=Decimal("2.50"), quantity=50, description="M16 galvanised")
OUT_OF_STOCK = InventorySnapshot(id=3, name="Rebar Bundle", unit_price=Decimal("80.00"), quantity=0)


@pytest.fixture
def editor():
    editor = InvoiceEditor([STEEL_BEAM, BOLTS, OUT_OF_STOCK])
    editor.open(today=date(2024, 6, 1))
    return editor


def test_blank_editor_defaults(editor):
    assert editor.state == EditorState.OPEN
    assert editor.is_new
    assert editor.header.invoice_number.startswith("INV-")
    assert len(editor.header.invoice_number) == len("INV-") + 4
    assert editor.header.issue_date == date(2024, 6, 1)
    assert editor.header.due_date == date(2024, 6, 1) + timedelta(days=30)
    assert editor.header.status == InvoiceStatus.DRAFT
    assert len(editor.lines) == 1
    line = editor.lines[0]
    assert line.inventory_id is None
    assert line.quantity == 1
    assert line.line_total == Decimal("0")


def test_select_inventory_copies_name_and_price(editor):
    line = editor.select_inventory("1", STEEL_BEAM.id)

    assert line.inventory_id == STEEL_BEAM.id
    assert line.description == "Steel Beam"
    assert line.quantity == 1
    assert line.unit_price == Decimal("100.00")
    assert line.line_total == Decimal("100.00")


def test_quantity_above_stock_is_capped_with_warning(editor):
    editor.select_inventory("1", STEEL_BEAM.id)

    notice = editor.set_quantity("1", 10)

    line = editor.get_line("1")
    assert line.quantity == 5
    assert line.line_total == Decimal("500.00")
    assert notice is not None
    assert notice.title == "Insufficient Inventory"
    assert "Steel Beam" in notice.description
    assert "5" in notice.description
    assert editor.drain_notifications() == [notice]


def test_quantity_within_stock_is_accepted(editor):
    editor.select_inventory("1", BOLTS.id)

    assert editor.set_quantity("1", 12) is None
    assert editor.get_line("1").quantity == 12
    assert editor.get_line("1").line_total == Decimal("30.00")
    assert editor.notifications == []


def test_select_inventory_clamps_existing_quantity(editor):
    editor.set_quantity("1", 8)
    line = editor.select_inventory("1", STEEL_BEAM.id)

    assert line.quantity == 5
    assert line.line_total == Decimal("500.00")


def test_unbound_line_accepts_any_quantity(editor):
    editor.set_unit_price("1", Decimal("4"))
    assert editor.set_quantity("1", 1000) is None
    assert editor.get_line("1").line_total == Decimal("4000")


def test_unit_price_edit_recomputes_total(editor):
    editor.select_inventory("1", STEEL_BEAM.id)
    editor.set_quantity("1", 3)
    editor.set_unit_price("1", Decimal("90.50"))

    assert editor.get_line("1").line_total == Decimal("271.50")


def test_subtotal_and_total_sum_line_totals(editor):
    editor.select_inventory("1", BOLTS.id)
    editor.set_quantity("1", 50)
    editor.set_unit_price("1", Decimal("3.00"))
    second = editor.add_line()
    editor.select_inventory(second.id, STEEL_BEAM.id)
    editor.set_quantity(second.id, 2)
    editor.set_unit_price(second.id, Decimal("125.00"))

    assert editor.get_line("1").line_total == Decimal("150.00")
    assert editor.get_line(second.id).line_total == Decimal("250.00")
    assert editor.subtotal == Decimal("400.00")
    assert editor.total == Decimal("400.00")
    assert editor.tax_amount == Decimal("0")


def test_remove_last_line_is_noop(editor):
    assert editor.remove_line("1") is False
    assert [line.id for line in editor.lines] == ["1"]


def test_add_and_remove_line(editor):
    added = editor.add_line()
    assert len(editor.lines) == 2
    assert editor.remove_line("1") is True
    assert [line.id for line in editor.lines] == [added.id]


def test_validate_requires_client(editor):
    editor.select_inventory("1", STEEL_BEAM.id)
    notice = editor.validate()
    assert notice.description == "Please select a client"


def test_validate_requires_bound_inventory(editor):
    editor.update_header(client_id=7)
    editor.set_unit_price("1", Decimal("10"))
    notice = editor.validate()
    assert notice.description == "Please select inventory items for all line items"


def test_validate_rejects_non_positive_values(editor):
    editor.update_header(client_id=7)
    editor.select_inventory("1", STEEL_BEAM.id)
    editor.set_quantity("1", 0)
    assert editor.validate().description == "Please select inventory items for all line items"

    editor.set_quantity("1", 1)
    editor.set_unit_price("1", Decimal("0"))
    assert editor.validate().description == "Please select inventory items for all line items"


def test_validate_names_item_when_stock_is_short():
    editor = InvoiceEditor([STEEL_BEAM])
    editor.open()
    editor.update_header(client_id=7)
    editor.select_inventory("1", STEEL_BEAM.id)
    editor.get_line("1").quantity = 9  # bypasses the cap, e.g. stock changed after selection

    notice = editor.validate()
    assert notice == insufficient_stock_notice("Steel Beam", 5)


def test_submit_blocked_without_calling_persist(editor):
    calls = []
    result = editor.submit(lambda submission: calls.append(submission) or 1)

    assert result is None
    assert calls == []
    assert editor.state == EditorState.OPEN
    assert editor.drain_notifications()[0].description == "Please select a client"


def test_submit_success_closes_editor(editor):
    editor.update_header(client_id=7, notes="Deliver to site B")
    editor.select_inventory("1", STEEL_BEAM.id)
    editor.set_quantity("1", 2)
    captured = []

    def persist(submission):
        captured.append(submission)
        return 42

    assert editor.submit(persist) == 42
    assert editor.state == EditorState.CLOSED
    assert editor.saved_invoice_id == 42

    submission = captured[0]
    assert submission.client_id == 7
    assert submission.notes == "Deliver to site B"
    assert len(submission.items) == 1
    assert submission.items[0].inventory_id == STEEL_BEAM.id
    assert submission.items[0].quantity == 2
    assert editor.drain_notifications()[-1].description == "Invoice created successfully"


def test_submit_failure_keeps_editor_open(editor):
    editor.update_header(client_id=7)
    editor.select_inventory("1", STEEL_BEAM.id)

    def persist(submission):
        raise InvoiceSubmissionError("database unavailable")

    assert editor.submit(persist) is None
    assert editor.state == EditorState.OPEN
    notice = editor.drain_notifications()[-1]
    assert notice.description == "Failed to save invoice"
    assert notice.variant == "destructive"


def test_submit_validation_error_from_persist_is_shown(editor):
    editor.update_header(client_id=7)
    editor.select_inventory("1", STEEL_BEAM.id)
    conflict = insufficient_stock_notice("Steel Beam", 0)

    def persist(submission):
        raise InvoiceValidationError(conflict)

    assert editor.submit(persist) is None
    assert editor.state == EditorState.OPEN
    assert editor.drain_notifications() == [conflict]


def test_open_existing_invoice_prefills_header_and_placeholder_line():
    invoice = SimpleNamespace(
        id=9,
        client_id=3,
        invoice_number="INV-0042",
        issue_date=date(2024, 2, 1),
        due_date=date(2024, 3, 2),
        notes=None,
        status="pending",
        subtotal=Decimal("1250.00"),
    )
    editor = InvoiceEditor([STEEL_BEAM])
    editor.open(invoice)

    assert not editor.is_new
    assert editor.header.invoice_number == "INV-0042"
    assert editor.header.status == InvoiceStatus.PENDING
    assert editor.header.notes == ""
    assert len(editor.lines) == 1
    assert editor.lines[0].inventory_id is None
    assert editor.lines[0].line_total == Decimal("1250.00")
    assert editor.subtotal == Decimal("1250.00")

    # Existing invoices skip line validation
    assert editor.validate() is None
    assert editor.submit(lambda submission: 9) == 9
    assert editor.drain_notifications()[-1].description == "Invoice updated successfully"


def test_operations_rejected_when_closed():
    editor = InvoiceEditor([STEEL_BEAM])
    with pytest.raises(EditorStateError):
        editor.add_line()

    editor.open()
    with pytest.raises(EditorStateError):
        editor.open()


def test_reopen_resets_to_blank(editor):
    editor.select_inventory("1", STEEL_BEAM.id)
    editor.add_line()
    editor.close()

    editor.open()
    assert len(editor.lines) == 1
    assert editor.lines[0].inventory_id is None
    assert editor.lines[0].id == "1"


def test_filter_clients_matches_company_or_contact():
    clients = [
        SimpleNamespace(company_name="Acme Fabrication", contact_name="Jane Doe"),
        SimpleNamespace(company_name="Northwind", contact_name="Sam Acres"),
        SimpleNamespace(company_name="Globex", contact_name="Hank"),
    ]
    assert [c.company_name for c in filter_clients(clients, "ac")] == ["Acme Fabrication", "Northwind"]


def test_filter_inventory_excludes_out_of_stock():
    matches = filter_inventory([STEEL_BEAM, BOLTS, OUT_OF_STOCK], "")
    assert [item.name for item in matches] == ["Steel Beam", "Anchor Bolts"]
    assert [item.name for item in filter_inventory([STEEL_BEAM, BOLTS], "galv")] == ["Anchor Bolts"]
    assert [item.name for item in filter_inventory([STEEL_BEAM, BOLTS], "structural")] == ["Steel Beam"]


def test_blank_invoice_number_blocks_submit(editor):
    editor.update_header(client_id=7, invoice_number="  ")
    editor.select_inventory("1", STEEL_BEAM.id)
    calls = []

    assert editor.submit(lambda submission: calls.append(submission) or 1) is None
    assert calls == []
    assert editor.state == EditorState.OPEN
    assert editor.drain_notifications()[0].description == "Please enter an invoice number"


def test_unexpected_persist_failure_returns_to_open(editor):
    editor.update_header(client_id=7)
    editor.select_inventory("1", STEEL_BEAM.id)

    def persist(submission):
        raise RecordNotFoundError("invoices record 9 not found")

    assert editor.submit(persist) is None
    assert editor.state == EditorState.OPEN
    assert editor.drain_notifications() == [SAVE_FAILED]
    # The form is still usable
    assert editor.add_line().id == "2"


def test_lines_sharing_an_item_are_checked_together(editor):
    editor.update_header(client_id=7)
    editor.select_inventory("1", STEEL_BEAM.id)
    editor.set_quantity("1", 3)
    second = editor.add_line()
    editor.select_inventory(second.id, STEEL_BEAM.id)
    editor.set_quantity(second.id, 3)

    assert editor.validate() == insufficient_stock_notice("Steel Beam", 5)
