from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from app.auth import UserContext, get_user_context, require_user
from app.database import get_db
from app.schemas.client import ClientCreate, ClientResponse
from app.services.invoice_editor import filter_clients
from app.services.record_store import RecordStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/clients", tags=["clients"])


@router.get("", response_model=List[ClientResponse])
def list_clients(
    search: Optional[str] = Query(None, description="Match company or contact name"),
    db: Session = Depends(get_db),
    context: UserContext = Depends(get_user_context),
):
    """List the signed-in user's clients"""
    clients = RecordStore(db).fetch_records("clients", context)
    if search:
        clients = filter_clients(clients, search)
    return clients


@router.post("", response_model=ClientResponse, status_code=201)
def create_client(
    client_data: ClientCreate,
    db: Session = Depends(get_db),
    context: UserContext = Depends(require_user),
):
    """Create a client (used inline from the invoice editor)"""
    store = RecordStore(db)
    with store.transaction():
        values = client_data.model_dump()
        values["user_id"] = context.user_id
        client = store.create_record("clients", values)
    db.refresh(client)
    logger.info(f"Created client {client.company_name} (ID: {client.id})")
    return client
