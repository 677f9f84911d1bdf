"""
Request user context.

The signed-in profile id arrives in a header set by the auth proxy. It is
resolved once per request and handed explicitly to every data access call,
so fetches never depend on ambient session state.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.models.profile import Profile

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserContext:
    user_id: Optional[int] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = UserContext()


def get_user_context(request: Request, db: Session = Depends(get_db)) -> UserContext:
    """Resolve the user header to a known profile, or the anonymous context"""
    raw = request.headers.get(settings.user_header)
    if not raw:
        return ANONYMOUS

    try:
        user_id = int(raw)
    except ValueError:
        logger.warning(f"Ignoring malformed {settings.user_header} header: {raw!r}")
        return ANONYMOUS

    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if not profile:
        logger.warning(f"Unknown profile id in {settings.user_header}: {user_id}")
        return ANONYMOUS

    return UserContext(user_id=profile.id)


def require_user(context: UserContext = Depends(get_user_context)) -> UserContext:
    """Dependency for write routes: reject anonymous callers"""
    if not context.is_authenticated:
        raise HTTPException(status_code=401, detail="Authentication required")
    return context
