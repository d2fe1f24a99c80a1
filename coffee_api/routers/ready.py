import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db
from ..http import EnvelopeRoute

router = APIRouter(route_class=EnvelopeRoute)
logger = logging.getLogger("coffee_api.ready")


@router.get("/ready")
def ready(db: Session = Depends(get_db)):
    db_ok = False
    try:
        db.execute(text("SELECT 1"))
        db_ok = True
    except SQLAlchemyError as e:
        logger.warning(f"Database not reachable: {e}")
    return {"ok": True, "db_ok": db_ok}
