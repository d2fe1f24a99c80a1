"""Coffees CRUD API router.

Endpoints:
- GET /coffees - List coffees (optional limit/offset)
- POST /coffees - Create coffee, resolving flavors by name
- GET /coffees/{id} - Get coffee with flavors
- PATCH /coffees/{id} - Partial update; flavors replace the existing set
- DELETE /coffees/{id} - Delete coffee (flavors are kept)
- POST /coffees/{id}/recommend - Increment recommendations
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy.orm import Session

from ..db import get_db
from ..http import EnvelopeRoute
from ..schemas import CoffeeCreate, CoffeeOut, CoffeeUpdate
from ..services import coffees as coffees_service
from ..settings import settings

router = APIRouter(route_class=EnvelopeRoute)
limiter = Limiter(key_func=get_remote_address, enabled=settings.rate_limit_enabled)


@router.get("/coffees", response_model=list[CoffeeOut])
def list_coffees(
    db: Session = Depends(get_db),
    limit: Optional[int] = Query(None, ge=1),
    offset: Optional[int] = Query(None, ge=0),
):
    """List coffees in insertion order."""
    return coffees_service.find_all(db, limit=limit, offset=offset)


@router.post("/coffees", response_model=CoffeeOut, status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.write_rate_limit)
def create_coffee(
    request: Request,  # Required for rate limiter
    payload: CoffeeCreate,
    db: Session = Depends(get_db),
):
    """Create a coffee. Unknown flavor names are created on the fly."""
    return coffees_service.create(db, payload)


@router.get("/coffees/{coffee_id}", response_model=CoffeeOut)
def get_coffee(coffee_id: int, db: Session = Depends(get_db)):
    return coffees_service.find_one(db, coffee_id)


@router.patch("/coffees/{coffee_id}", response_model=CoffeeOut)
def update_coffee(
    coffee_id: int,
    payload: CoffeeUpdate,
    db: Session = Depends(get_db),
):
    """Update a coffee. If flavors are provided, they replace all existing flavors."""
    return coffees_service.update(db, coffee_id, payload)


@router.delete("/coffees/{coffee_id}", response_model=CoffeeOut)
def delete_coffee(coffee_id: int, db: Session = Depends(get_db)):
    """Delete a coffee and return the removed record."""
    return coffees_service.remove(db, coffee_id)


@router.post("/coffees/{coffee_id}/recommend", response_model=CoffeeOut)
@limiter.limit(settings.write_rate_limit)
def recommend_coffee(
    request: Request,  # Required for rate limiter
    coffee_id: int,
    db: Session = Depends(get_db),
):
    return coffees_service.recommend(db, coffee_id)
