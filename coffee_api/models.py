"""SQLAlchemy ORM models for the Coffee API.

Tables:
- coffee: Coffee listings (name, brand, description, recommendation counter)
- flavor: Reusable flavor tags, referenced by name from the API
- coffee_flavors_flavor: Many-to-many join between coffee and flavor
- coffee_rating: Scores left for a coffee
- event: Domain events written alongside writes (e.g. recommendations)
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from sqlalchemy.types import JSON

from .db import Base


coffee_flavors = Table(
    "coffee_flavors_flavor",
    Base.metadata,
    Column(
        "coffeeId", Integer, ForeignKey("coffee.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column(
        "flavorId", Integer, ForeignKey("flavor.id", ondelete="CASCADE"),
        primary_key=True, index=True,
    ),
)


class Coffee(Base):
    """A coffee product listing."""
    __tablename__ = "coffee"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    brand: Mapped[str] = mapped_column(String(255), nullable=False)
    recommendations: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )

    # Flavors are shared: deleting a coffee only drops its join rows
    flavors: Mapped[list["Flavor"]] = relationship(
        "Flavor",
        secondary=coffee_flavors,
        back_populates="coffees",
        cascade="save-update, merge",
        order_by="Flavor.id",
    )
    ratings: Mapped[list["CoffeeRating"]] = relationship(
        "CoffeeRating", back_populates="coffee", cascade="all, delete-orphan",
        order_by="CoffeeRating.id",
    )


class Flavor(Base):
    """Flavor tag. `name` is the natural key callers use."""
    __tablename__ = "flavor"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)

    coffees: Mapped[list["Coffee"]] = relationship(
        "Coffee", secondary=coffee_flavors, back_populates="flavors"
    )


class CoffeeRating(Base):
    """A single score (1-5) left for a coffee."""
    __tablename__ = "coffee_rating"
    __table_args__ = (
        Index("ix_coffee_rating_coffee_id", "coffee_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    coffee_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("coffee.id", ondelete="CASCADE"), nullable=False
    )
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    coffee: Mapped["Coffee"] = relationship("Coffee", back_populates="ratings")


class Event(Base):
    """Append-only domain event, e.g. `recommend_coffee`."""
    __tablename__ = "event"
    __table_args__ = (
        Index("ix_event_name", "name"),
        Index("ix_event_name_type", "name", "type"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    payload: Mapped[dict] = mapped_column(
        JSON().with_variant(JSONB, "postgresql"), nullable=False, default=dict
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
