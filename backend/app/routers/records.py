from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session
from typing import List

from app.auth import UserContext, get_user_context
from app.database import get_db
from app.schemas.records import RecordTableResponse, RecordTableSummary
from app.services.record_browser import TABLE_SCHEMAS, browse_table, summarize_tables

router = APIRouter(prefix="/api/records", tags=["records"])


@router.get("", response_model=List[RecordTableSummary])
def list_tables(db: Session = Depends(get_db), context: UserContext = Depends(get_user_context)):
    """Browsable tables with their row counts"""
    return summarize_tables(db, context)


@router.get("/{table}", response_model=RecordTableResponse)
def get_table(
    table: str,
    search: str = Query("", description="Case-insensitive match against any field"),
    db: Session = Depends(get_db),
    context: UserContext = Depends(get_user_context),
):
    """Rendered rows of one table, filtered by the search term"""
    if table not in TABLE_SCHEMAS:
        raise HTTPException(status_code=404, detail=f"Unknown table: {table}")
    return browse_table(db, table, context, search)
