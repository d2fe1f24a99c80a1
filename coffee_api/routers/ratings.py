"""Coffee ratings API router.

Endpoints:
- POST /coffees/{id}/ratings - Rate a coffee (score 1-5)
- GET /coffees/{id}/ratings - List ratings for a coffee
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ..db import get_db
from ..http import EnvelopeRoute
from ..schemas import CoffeeRatingCreate, CoffeeRatingOut
from ..services import ratings as ratings_service

router = APIRouter(route_class=EnvelopeRoute)


@router.post(
    "/coffees/{coffee_id}/ratings",
    response_model=CoffeeRatingOut,
    status_code=status.HTTP_201_CREATED,
)
def rate_coffee(
    coffee_id: int,
    payload: CoffeeRatingCreate,
    db: Session = Depends(get_db),
):
    return ratings_service.rate(db, coffee_id, payload)


@router.get("/coffees/{coffee_id}/ratings", response_model=list[CoffeeRatingOut])
def list_ratings(coffee_id: int, db: Session = Depends(get_db)):
    """List ratings for a coffee, oldest first."""
    return ratings_service.list_for_coffee(db, coffee_id)
