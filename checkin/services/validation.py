import re
from typing import Optional

from checkin.config import settings
from checkin.schemas import AttendeeRegistration

EMAIL_REGEX = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

REQUIRED_FIELDS = (
    ("first_name", "First name is required."),
    ("last_name", "Last name is required."),
    ("school_name", "School name is required."),
    ("barangay", "Barangay is required."),
    ("city", "City is required."),
)


def contact_number_required(data: AttendeeRegistration, policy: str) -> bool:
    if policy == "optional":
        return data.has_mobile_number
    return True


def validate_contact_number(contact_number: str) -> Optional[str]:
    if not contact_number or not contact_number.strip():
        return "Contact number is required."
    if not re.match(settings.CONTACT_NUMBER_PATTERN, contact_number.strip()):
        return (
            f"Contact number must be in format {settings.CONTACT_NUMBER_FORMAT} "
            f"(e.g., {settings.CONTACT_NUMBER_EXAMPLE})"
        )
    return None


def validate_email(email: Optional[str]) -> Optional[str]:
    if not email or not email.strip():
        return None
    if not EMAIL_REGEX.match(email.strip()):
        return "Please enter a valid email address."
    return None


def validate_registration(
    data: AttendeeRegistration, policy: Optional[str] = None
) -> Optional[str]:
    """Returns the first problem with the form, or None when it is valid."""
    policy = policy or settings.CONTACT_NUMBER_POLICY

    for field_name, message in REQUIRED_FIELDS:
        if not (getattr(data, field_name) or "").strip():
            return message
    if not data.gender:
        return "Gender is required."

    if contact_number_required(data, policy):
        error = validate_contact_number(data.contact_number)
        if error:
            return error

    return validate_email(data.email)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


def registration_values(data: AttendeeRegistration, policy: Optional[str] = None) -> dict:
    """Column values for a new attendee row from a validated form."""
    policy = policy or settings.CONTACT_NUMBER_POLICY
    contact_number = (
        _clean(data.contact_number) if contact_number_required(data, policy) else None
    )
    return {
        "first_name": data.first_name.strip(),
        "last_name": data.last_name.strip(),
        "contact_number": contact_number,
        "email": _clean(data.email),
        "birthday": data.birthday,
        "school_name": data.school_name.strip(),
        "barangay": data.barangay.strip(),
        "city": data.city.strip(),
        "social_media_name": _clean(data.social_media_name),
        "gender": data.gender,
        "is_dgroup_member": data.is_dgroup_member,
        "dgroup_leader_name": (
            _clean(data.dgroup_leader_name) if data.is_dgroup_member else None
        ),
        "is_first_timer": True,
    }
