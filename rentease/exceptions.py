"""
Custom exception classes for the RentEase web app.

These exceptions provide precise error types that controllers can catch
to render friendly messages instead of generic 500 errors.
"""
from typing import Dict, Optional


class RentEaseError(Exception):
    """Base class; ``message`` is safe to show to the user."""

    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __str__(self) -> str:  # pragma: no cover
        return self.message


class CarNotFoundError(RentEaseError):
    """Raised when a car ID cannot be found in either catalog."""

    default_message = "Car not found"


class BookingNotFoundError(RentEaseError):
    """Raised when a booking cannot be found or is not visible to the user."""

    default_message = "Booking not found"


class ProfileNotFoundError(RentEaseError):
    """Raised when a profile row does not exist for a user id."""

    default_message = "Profile not found"


class InvalidDateRangeError(RentEaseError):
    """Raised when pickup is after return or a date cannot be parsed."""

    default_message = "Invalid date range"


class CarUnavailableError(RentEaseError):
    """Raised when a car is already booked on one of the requested days."""

    default_message = "The car is not available for the selected dates"


class ValidationError(RentEaseError):
    """Raised when a form fails validation; ``errors`` maps field -> message."""

    default_message = "Please correct the highlighted fields."

    def __init__(self, errors: Dict[str, str], message: Optional[str] = None) -> None:
        self.errors = dict(errors)
        super().__init__(message)


class AuthError(RentEaseError):
    """Raised on failed sign in, sign up or auth code exchange."""

    default_message = "Authentication failed"


class StorageError(RentEaseError):
    """Raised when an object storage operation fails."""

    default_message = "Storage operation failed"


class ContentAPIError(RentEaseError):
    """Raised when the headless content API cannot be reached or decoded."""

    default_message = "Content API request failed"
