"""Domain exceptions raised by the service layer.

The HTTP layer (see `coffee_api.http`) maps these to status codes.
"""

from typing import Optional


class CoffeeAPIError(Exception):
    """Base exception for the Coffee API."""

    pass


class NotFoundError(CoffeeAPIError):
    """Raised when a requested record does not exist."""

    pass


class CoffeeNotFoundError(NotFoundError):
    """Raised when no coffee matches the given id."""

    def __init__(self, coffee_id: int, message: Optional[str] = None):
        self.coffee_id = coffee_id
        if message is None:
            message = f"Coffee #{coffee_id} not found"
        super().__init__(message)
