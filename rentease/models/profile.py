from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass
class Profile:
    """
    Public profile of an account. Auth data (email, password hash) lives in
    the users table; everything shown on the profile page lives here.
    """
    id: str
    email: str = ""
    full_name: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    date_of_birth: Optional[str] = None
    avatar_url: Optional[str] = None
    is_verified: bool = False
    license_number: Optional[str] = None
    license_expiry: Optional[str] = None
    license_country: Optional[str] = None
    license_image_url: Optional[str] = None

    def display_name(self) -> str:
        """Full name, falling back to the local part of the email."""
        if self.full_name and self.full_name.strip():
            return self.full_name.strip()
        return (self.email or "").split("@", 1)[0]

    def license_is_current(self, today: date) -> bool:
        if not self.is_verified or not self.license_expiry:
            return False
        try:
            return date.fromisoformat(self.license_expiry[:10]) >= today
        except ValueError:
            return False
