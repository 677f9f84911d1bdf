from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from app.auth import UserContext, get_user_context
from app.database import get_db
from app.schemas.profile import ProfileResponse
from app.services.record_store import RecordStore

router = APIRouter(prefix="/api/profiles", tags=["profiles"])


@router.get("", response_model=List[ProfileResponse])
def list_profiles(db: Session = Depends(get_db), context: UserContext = Depends(get_user_context)):
    """List all user profiles"""
    return RecordStore(db).fetch_records("profiles", context)
