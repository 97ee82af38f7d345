from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from ...core.config import settings
from ...core.database import get_db
from ...core.errors import guard
from ...utils.kst import utc_now
from ..responses import success

router = APIRouter(tags=["health"])


@router.get("/health")
def health(db: Session = Depends(get_db)):
    with guard("Database unavailable"):
        db.execute(text("SELECT 1"))
    return success({
        "status": "ok",
        "app": settings.APP_NAME,
        "env": settings.ENV,
        "timestamp": utc_now().isoformat() + "Z",
    })
