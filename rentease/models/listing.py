from dataclasses import dataclass, field, asdict
from typing import List, Optional

from rentease.utils.constants import Source, PLACEHOLDER


@dataclass
class ListingBase:
    """
    Base listing model. The catalogs keep raw entries/rows; we wrap them into
    one shape so browse, detail and booking pages never care where a car lives.
    """
    id: str
    slug: str
    model: str
    price: float  # daily rate
    location: str
    transmission: str  # "Automatic" | "Manual"
    seats: int
    image: str = PLACEHOLDER
    type: str = "Car"
    owner_id: Optional[str] = None
    year: Optional[int] = None
    fuel: Optional[str] = None
    description: str = ""
    features: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    rating: float = 0.0
    reviews: int = 0

    source = ""
    source_label = ""

    def booking_ref(self) -> str:
        """Identifier the booking flow and booking rows use for this car."""
        return self.slug or self.id

    def review_keys(self) -> List[str]:
        """Values a review's ``car_id``/``car_model`` may carry for this car."""
        keys = [self.id, self.model]
        if self.slug and self.slug not in keys:
            keys.append(self.slug)
        return keys

    def is_owned_by(self, user_id: Optional[str]) -> bool:
        return bool(user_id and self.owner_id and self.owner_id == user_id)

    def to_dict(self) -> dict:
        data = asdict(self)
        data["source"] = self.source
        data["source_label"] = self.source_label
        return data


class FleetListing(ListingBase):
    """
    Cars managed by the RentEase team in the content API. Never owned by a user.
    """
    source = Source.FLEET
    source_label = "RentEase Fleet"


class HostedListing(ListingBase):
    """
    Cars listed by private hosts in the table store.
    """
    source = Source.HOSTED
    source_label = "Private Host"
