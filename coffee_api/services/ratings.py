import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..models import CoffeeRating
from ..schemas import CoffeeRatingCreate
from .coffees import find_one

logger = logging.getLogger("coffee_api.ratings")


def rate(db: Session, coffee_id: int, payload: CoffeeRatingCreate) -> CoffeeRating:
    """Store a rating for an existing coffee."""
    coffee = find_one(db, coffee_id)

    rating = CoffeeRating(coffee_id=coffee.id, score=payload.score, comment=payload.comment)
    db.add(rating)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(rating)
    logger.info(f"Coffee {coffee_id} rated {payload.score}")
    return rating


def list_for_coffee(db: Session, coffee_id: int) -> list[CoffeeRating]:
    find_one(db, coffee_id)
    return list(db.scalars(
        select(CoffeeRating)
        .where(CoffeeRating.coffee_id == coffee_id)
        .order_by(CoffeeRating.id)
    ).all())
