"""Pydantic schemas for the Coffee API.

Request/response models for:
- Coffees (with flavors referenced by name)
- Coffee ratings
- Error bodies
"""

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Unknown fields are rejected; lax mode coerces "5" -> 5 and 5 -> "5".
_INPUT_CONFIG = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

# Matches the String(255) columns on coffee and flavor
NAME_MAX_LENGTH = 255
FlavorName = Annotated[str, Field(max_length=NAME_MAX_LENGTH)]


# --- Flavor ---

class FlavorOut(BaseModel):
    id: int
    name: str

    class Config:
        from_attributes = True


# --- Coffee ---

class CoffeeCreate(BaseModel):
    model_config = _INPUT_CONFIG

    name: str = Field(..., max_length=NAME_MAX_LENGTH)
    brand: str = Field(..., max_length=NAME_MAX_LENGTH)
    description: Optional[str] = None
    flavors: list[FlavorName]


class CoffeeUpdate(BaseModel):
    """Partial update. `flavors`, when given, replaces the whole set."""
    model_config = _INPUT_CONFIG

    name: Optional[str] = Field(None, max_length=NAME_MAX_LENGTH)
    brand: Optional[str] = Field(None, max_length=NAME_MAX_LENGTH)
    description: Optional[str] = None
    flavors: Optional[list[FlavorName]] = None

    @model_validator(mode="after")
    def _reject_null_required(self):
        for field in ("name", "brand", "flavors"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} must not be null")
        return self


class CoffeeOut(BaseModel):
    id: int
    name: str
    description: Optional[str]
    brand: str
    recommendations: int
    flavors: list[FlavorOut] = []

    class Config:
        from_attributes = True


# --- Coffee Rating ---

class CoffeeRatingCreate(BaseModel):
    model_config = _INPUT_CONFIG

    score: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=1000)


class CoffeeRatingOut(BaseModel):
    id: int
    coffee_id: int
    score: int
    comment: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


# --- Errors ---

class ErrorOut(BaseModel):
    statusCode: int
    message: Any
    error: str
    timestamp: str
    path: str


def error_body(status_code: int, message: Any, error: str, path: str) -> dict:
    """Uniform JSON error payload used by every exception handler."""
    return ErrorOut(
        statusCode=status_code,
        message=message,
        error=error,
        timestamp=datetime.now(timezone.utc).isoformat(),
        path=path,
    ).model_dump()
