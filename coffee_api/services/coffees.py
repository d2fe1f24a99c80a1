"""Coffee persistence operations.

Each write runs in the request session's transaction: the coffee row, any
newly referenced flavors, join rows and events commit together or not at all.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from ..exceptions import CoffeeNotFoundError
from ..models import Coffee, Event
from ..schemas import CoffeeCreate, CoffeeOut, CoffeeUpdate
from .flavors import preload_flavors

logger = logging.getLogger("coffee_api.coffees")


def _commit(db: Session) -> None:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise


def find_all(
    db: Session, limit: Optional[int] = None, offset: Optional[int] = None
) -> list[Coffee]:
    """List coffees in insertion order. No bounds unless given."""
    query = (
        select(Coffee)
        .options(selectinload(Coffee.flavors))
        .order_by(Coffee.id)
    )
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return list(db.scalars(query).all())


def find_one(db: Session, coffee_id: int) -> Coffee:
    coffee = db.scalars(
        select(Coffee)
        .options(selectinload(Coffee.flavors))
        .where(Coffee.id == coffee_id)
    ).first()
    if not coffee:
        logger.info(f"Coffee {coffee_id} not found")
        raise CoffeeNotFoundError(coffee_id)
    return coffee


def create(db: Session, payload: CoffeeCreate) -> Coffee:
    try:
        flavors = preload_flavors(db, payload.flavors)
        coffee = Coffee(
            name=payload.name,
            brand=payload.brand,
            description=payload.description,
            recommendations=0,
            flavors=flavors,
        )
        db.add(coffee)
        db.flush()
    except Exception:
        db.rollback()
        raise
    _commit(db)
    logger.info(f"Created coffee {coffee.id} with {len(flavors)} flavors")
    return find_one(db, coffee.id)


def update(db: Session, coffee_id: int, payload: CoffeeUpdate) -> Coffee:
    """Apply a partial update. A missing coffee raises before anything is written."""
    coffee = find_one(db, coffee_id)

    update_data = payload.model_dump(exclude_unset=True)
    try:
        if "flavors" in update_data:
            coffee.flavors = preload_flavors(db, update_data.pop("flavors"))
        for field, value in update_data.items():
            setattr(coffee, field, value)
    except Exception:
        db.rollback()
        raise
    _commit(db)
    logger.info(f"Updated coffee {coffee_id} ({', '.join(sorted(payload.model_fields_set))})")
    return find_one(db, coffee_id)


def remove(db: Session, coffee_id: int) -> CoffeeOut:
    """Delete a coffee and return it as it was. Its flavors are kept."""
    coffee = find_one(db, coffee_id)
    snapshot = CoffeeOut.model_validate(coffee)

    db.delete(coffee)
    _commit(db)
    logger.info(f"Removed coffee {coffee_id}")
    return snapshot


def recommend(db: Session, coffee_id: int) -> Coffee:
    """Bump the recommendation counter and log a `recommend_coffee` event."""
    coffee = find_one(db, coffee_id)

    # Incremented in SQL so concurrent recommendations are not lost
    coffee.recommendations = Coffee.recommendations + 1
    db.add(Event(
        type="coffee",
        name="recommend_coffee",
        payload={"coffeeId": coffee.id},
    ))
    _commit(db)

    coffee = find_one(db, coffee_id)
    logger.info(f"Recommended coffee {coffee_id} (now {coffee.recommendations})")
    return coffee
