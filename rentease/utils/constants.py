# rentease/utils/constants.py

"""
Global constants for statuses, buckets, fees and form choices.
These constants are imported by models, services and templates.
"""

# Date format (used for booking start/end)
DATE_FMT = "%Y-%m-%d"


class BookingStatus:
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class RentalPhase:
    ACTIVE = "Active"
    UPCOMING = "Upcoming"
    PAST = "Past"
    COMPLETED = "Completed"


class Source:
    FLEET = "contentful"
    HOSTED = "supabase"


class Bucket:
    CAR_IMAGES = "car-images"
    AVATARS = "avatars"
    LICENSES = "licenses"


BUCKETS = {Bucket.CAR_IMAGES, Bucket.AVATARS, Bucket.LICENSES}

# --- Pricing ---
INSURANCE_FEE = 45
SERVICE_FEE = 15

# --- Browse ---
ITEMS_PER_PAGE = 6
DEFAULT_MIN_PRICE = 0
DEFAULT_MAX_PRICE = 500

# --- Reviews ---
REVIEW_PROMPT_WINDOW_HOURS = 48
SIDEBAR_REVIEW_LIMIT = 5

# --- Form choices ---
TRANSMISSIONS = ("automatic", "manual")
FUEL_TYPES = ("Diesel", "Petrol", "Electric", "Hybrid")
SEAT_OPTIONS = (2, 4, 5, 7, 8)
PAYMENT_METHODS = {
    "card": ("Credit/Debit Card", "Visa, Mastercard, American Express"),
    "paypal": ("PayPal", "Fast and secure online payment"),
    "bank": ("Bank Transfer", "Direct bank transfer"),
}
LICENSE_COUNTRIES = (
    "Croatia", "Slovenia", "Serbia", "Bosnia and Herzegovina", "Montenegro",
    "Germany", "Austria", "Italy", "France", "United Kingdom", "United States", "Other",
)
SUPPORT_TOPICS = {
    "booking": "Booking Modification",
    "payment": "Payment Issue",
    "insurance": "Insurance Claim",
    "account": "Account Help",
}

# --- Misc ---
PLACEHOLDER = "/static/images/placeholder-car.svg"
DEFAULT_LOCATION = "Unknown"
DEFAULT_SEATS = 5
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "webp", "gif"}
