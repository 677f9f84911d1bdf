"""
Editor Session Registry - keeps open invoice editors between HTTP calls.

Each browser modal maps to one session id. Sessions live in process memory
and are dropped when the editor is closed or the invoice is saved.
"""
import logging
import threading
import uuid
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.auth import UserContext
from app.models.inventory_item import InventoryItem
from app.models.invoice import Invoice
from app.schemas.editor import EditorSessionResponse
from app.schemas.invoice import InvoiceSubmission
from app.services import invoice_service
from app.services.exceptions import EditorSessionNotFoundError
from app.services.invoice_editor import EditorState, InventorySnapshot, InvoiceEditor
from app.services.record_store import RecordNotFoundError

logger = logging.getLogger(__name__)


class EditorSession:
    def __init__(self, session_id: str, user_id: int, editor: InvoiceEditor):
        self.session_id = session_id
        self.user_id = user_id
        self.editor = editor

    def to_response(self) -> EditorSessionResponse:
        editor = self.editor
        return EditorSessionResponse(
            session_id=self.session_id,
            state=editor.state.value,
            invoice_id=editor.invoice_id,
            header=editor.header,
            lines=[line.model_copy() for line in editor.lines],
            subtotal=editor.subtotal,
            tax_amount=editor.tax_amount,
            total_amount=editor.total,
            notifications=editor.drain_notifications(),
            saved_invoice_id=editor.saved_invoice_id,
        )


class EditorSessionRegistry:
    """Service for opening, looking up and submitting editor sessions"""

    def __init__(self):
        self._sessions: Dict[str, EditorSession] = {}
        self._lock = threading.Lock()

    def open(self, db: Session, context: UserContext, invoice_id: Optional[int] = None) -> EditorSession:
        """Open a blank editor, or one prefilled from an invoice the user owns"""
        invoice = None
        if invoice_id is not None:
            invoice = db.query(Invoice).filter(
                Invoice.id == invoice_id,
                Invoice.user_id == context.user_id,
            ).first()
            if invoice is None:
                raise RecordNotFoundError(f"invoices record {invoice_id} not found")

        inventory = [InventorySnapshot.from_item(item) for item in db.query(InventoryItem).all()]
        editor = InvoiceEditor(inventory)
        editor.open(invoice)

        session = EditorSession(uuid.uuid4().hex, context.user_id, editor)
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Opened editor session {session.session_id} for user {context.user_id}")
        return session

    def get(self, session_id: str, context: UserContext) -> EditorSession:
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None or session.user_id != context.user_id:
            raise EditorSessionNotFoundError(f"Editor session {session_id} not found")
        return session

    def close(self, session_id: str, context: UserContext) -> EditorSession:
        session = self.get(session_id, context)
        session.editor.close()
        self._discard(session_id)
        logger.info(f"Closed editor session {session_id}")
        return session

    def submit(self, db: Session, session_id: str, context: UserContext) -> EditorSession:
        session = self.get(session_id, context)
        editor = session.editor

        def persist(submission: InvoiceSubmission) -> int:
            if editor.is_new:
                return invoice_service.create_invoice(db, context, submission).id
            return invoice_service.update_invoice(db, context, editor.invoice_id, submission).id

        editor.submit(persist)
        if editor.state == EditorState.CLOSED:
            self._discard(session_id)
        return session

    def _discard(self, session_id: str) -> None:
        with self._lock:
            self._sessions.pop(session_id, None)

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()


# Singleton instance
editor_sessions = EditorSessionRegistry()
