"""
Invoice editor sessions.

A session mirrors the invoice modal in the browser: it is opened blank or
from an existing invoice, edited line by line, then submitted. Every response
carries the full form state and the notifications raised by the last call.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.auth import UserContext, require_user
from app.database import get_db
from app.schemas.editor import (
    EditorSessionResponse,
    HeaderUpdate,
    OpenEditorRequest,
    QuantityUpdate,
    SelectInventoryRequest,
    UnitPriceUpdate,
)
from app.services.editor_sessions import EditorSession, editor_sessions
from app.services.exceptions import EditorLineNotFoundError, EditorSessionNotFoundError, EditorStateError
from app.services.record_store import RecordNotFoundError

router = APIRouter(prefix="/api/editor/sessions", tags=["invoice-editor"])


def _session(session_id: str, context: UserContext) -> EditorSession:
    try:
        return editor_sessions.get(session_id, context)
    except EditorSessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _apply(session: EditorSession, operation, *args) -> EditorSessionResponse:
    try:
        operation(*args)
    except EditorLineNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except EditorStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.to_response()


@router.post("", response_model=EditorSessionResponse, status_code=201)
def open_session(
    request: OpenEditorRequest,
    db: Session = Depends(get_db),
    context: UserContext = Depends(require_user),
):
    """Open the editor blank, or prefilled from an existing invoice"""
    try:
        session = editor_sessions.open(db, context, request.invoice_id)
    except RecordNotFoundError:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return session.to_response()


@router.get("/{session_id}", response_model=EditorSessionResponse)
def get_session(session_id: str, context: UserContext = Depends(require_user)):
    return _session(session_id, context).to_response()


@router.delete("/{session_id}", response_model=EditorSessionResponse)
def close_session(session_id: str, context: UserContext = Depends(require_user)):
    """Close the editor without saving"""
    try:
        session = editor_sessions.close(session_id, context)
    except EditorSessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return session.to_response()


@router.patch("/{session_id}", response_model=EditorSessionResponse)
def update_header(session_id: str, update: HeaderUpdate, context: UserContext = Depends(require_user)):
    session = _session(session_id, context)
    return _apply(session, lambda: session.editor.update_header(**update.model_dump(exclude_unset=True)))


@router.post("/{session_id}/lines", response_model=EditorSessionResponse)
def add_line(session_id: str, context: UserContext = Depends(require_user)):
    session = _session(session_id, context)
    return _apply(session, session.editor.add_line)


@router.delete("/{session_id}/lines/{line_id}", response_model=EditorSessionResponse)
def remove_line(session_id: str, line_id: str, context: UserContext = Depends(require_user)):
    """Remove a line; removing the only remaining line does nothing"""
    session = _session(session_id, context)
    return _apply(session, session.editor.remove_line, line_id)


@router.put("/{session_id}/lines/{line_id}/inventory", response_model=EditorSessionResponse)
def select_inventory(
    session_id: str,
    line_id: str,
    request: SelectInventoryRequest,
    context: UserContext = Depends(require_user),
):
    session = _session(session_id, context)
    return _apply(session, session.editor.select_inventory, line_id, request.inventory_id)


@router.put("/{session_id}/lines/{line_id}/quantity", response_model=EditorSessionResponse)
def set_quantity(
    session_id: str,
    line_id: str,
    request: QuantityUpdate,
    context: UserContext = Depends(require_user),
):
    """Set a line's quantity; requests above available stock are capped with a warning"""
    session = _session(session_id, context)
    return _apply(session, session.editor.set_quantity, line_id, request.quantity)


@router.put("/{session_id}/lines/{line_id}/unit-price", response_model=EditorSessionResponse)
def set_unit_price(
    session_id: str,
    line_id: str,
    request: UnitPriceUpdate,
    context: UserContext = Depends(require_user),
):
    session = _session(session_id, context)
    return _apply(session, session.editor.set_unit_price, line_id, request.unit_price)


@router.post("/{session_id}/submit", response_model=EditorSessionResponse)
def submit_session(session_id: str, db: Session = Depends(get_db), context: UserContext = Depends(require_user)):
    """Validate and save; on failure the session stays open with notifications"""
    session = _session(session_id, context)
    try:
        editor_sessions.submit(db, session_id, context)
    except EditorStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return session.to_response()
