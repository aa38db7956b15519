"""Form field checks shared by the profile and contact forms.

Each function returns a dict of field -> message; an empty dict means valid.
"""
import re
from datetime import date
from typing import Dict

from rentease.utils.constants import LICENSE_COUNTRIES, SUPPORT_TOPICS

PHONE_PATTERN = re.compile(r"^[0-9+\s-]*$")
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
MIN_NAME_LENGTH = 4
MIN_LOCATION_LENGTH = 3
MIN_LICENSE_LENGTH = 5


def validate_profile(full_name: str, phone: str = "", location: str = "") -> Dict[str, str]:
    errors = {}
    name = (full_name or "").strip()
    if len(name) < MIN_NAME_LENGTH:
        errors["full_name"] = f"Name must be at least {MIN_NAME_LENGTH} characters long."
    elif any(ch.isdigit() for ch in name):
        errors["full_name"] = "Name cannot contain numbers."
    elif " " not in name:
        errors["full_name"] = "Please enter both First and Last name."

    phone = phone or ""
    digits = re.sub(r"[\s-]", "", phone)
    if phone and not PHONE_PATTERN.match(phone):
        errors["phone"] = "Phone can only contain numbers, +, - and spaces."
    elif phone and len(digits) < 6:
        errors["phone"] = "Phone number is too short."
    elif phone and len(digits) > 15:
        errors["phone"] = "Phone number is too long."

    if location and len(location) < MIN_LOCATION_LENGTH:
        errors["location"] = "Location name is too short."
    return errors


def validate_license(number: str, expiry, country: str, has_file: bool, today: date) -> Dict[str, str]:
    errors = {}
    number = (number or "").strip()
    if len(number) < MIN_LICENSE_LENGTH:
        errors["license_number"] = f"License number must be at least {MIN_LICENSE_LENGTH} characters long."

    if not expiry:
        errors["license_expiry"] = "Expiry date is required."
    else:
        try:
            if date.fromisoformat(str(expiry)[:10]) < today:
                errors["license_expiry"] = "License has already expired."
        except ValueError:
            errors["license_expiry"] = "Expiry date is invalid."

    if country not in LICENSE_COUNTRIES:
        errors["license_country"] = "Please select a country."
    if not has_file:
        errors["file"] = "Please upload a photo of your license."
    return errors


def validate_contact(topic: str, name: str, email: str, message: str) -> Dict[str, str]:
    errors = {}
    if topic not in SUPPORT_TOPICS:
        errors["topic"] = "Please choose a topic."
    if not (name or "").strip():
        errors["name"] = "Name is required."
    if not EMAIL_PATTERN.match((email or "").strip()):
        errors["email"] = "Please enter a valid email address."
    if not (message or "").strip():
        errors["message"] = "Message is required."
    return errors
