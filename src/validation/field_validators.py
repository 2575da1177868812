"""
Field validators - input checks shared by the step schemas

Provides reusable validation functions for:
- Social Insurance Number format and checksum
- Postal / ZIP code format by country
- Phone number and email format
- Date of birth validation
- Name validation and sanitization

Every validator returns (is_valid, error_message) and never raises on
user input.
"""

import re
from datetime import date
from typing import Optional, Tuple

CANADA_COUNTRY_CODE = "CAN"
USA_COUNTRY_CODE = "USA"

_POSTAL_CODE_CANADA = re.compile(r"^[ABCEGHJ-NPRSTVXY]\d[ABCEGHJ-NPRSTV-Z] ?\d[ABCEGHJ-NPRSTV-Z]\d$")
_ZIP_CODE_USA = re.compile(r"^\d{5}(-\d{4})?$")
_EMAIL = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_NAME = re.compile(r"^[^\d<>{}\[\]\\|^~`]+$")


# =============================================================================
# SIN Validation
# =============================================================================

def normalize_sin(sin: str) -> str:
    """Strip spaces and dashes from a SIN."""
    return re.sub(r"[\s-]", "", sin or "")


def format_sin(sin: str) -> str:
    """Format a SIN as 000 000 000."""
    clean = normalize_sin(sin)
    return f"{clean[:3]} {clean[3:6]} {clean[6:]}" if len(clean) == 9 else clean


def luhn_checksum_valid(digits: str) -> bool:
    total = 0
    for index, char in enumerate(reversed(digits)):
        value = int(char)
        if index % 2 == 1:
            value *= 2
            if value > 9:
                value -= 9
        total += value
    return total % 10 == 0


def validate_sin(sin: str) -> Tuple[bool, Optional[str]]:
    """
    Validate Social Insurance Number format.

    Examples:
        >>> validate_sin("800 000 002")
        (True, None)
        >>> validate_sin("800 000 003")
        (False, 'Invalid SIN: checksum failed')
    """
    if not sin or not sin.strip():
        return False, "SIN is required"

    clean_sin = normalize_sin(sin)

    if not clean_sin.isdigit() or len(clean_sin) != 9:
        return False, "Invalid SIN format: expected 9 digits"

    if clean_sin == "000000000":
        return False, "Invalid SIN: cannot be all zeros"

    if not luhn_checksum_valid(clean_sin):
        return False, "Invalid SIN: checksum failed"

    return True, None


def validate_sins_differ(sin: str, other_sin: str) -> Tuple[bool, Optional[str]]:
    """Two people on one application cannot share a SIN."""
    if normalize_sin(sin) == normalize_sin(other_sin):
        return False, "SIN must differ from the applicant's SIN"
    return True, None


# =============================================================================
# Address Validation
# =============================================================================

def normalize_postal_code(postal_code: str) -> str:
    clean = re.sub(r"\s", "", postal_code or "").upper()
    if len(clean) == 6 and not clean.isdigit():
        return f"{clean[:3]} {clean[3:]}"
    return clean


def validate_postal_code(postal_code: Optional[str], country: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a postal code against the country it belongs to.

    Canada and the USA require a code; other countries accept anything.
    """
    if country not in (CANADA_COUNTRY_CODE, USA_COUNTRY_CODE):
        return True, None

    if not postal_code or not postal_code.strip():
        return False, "Postal code is required"

    if country == CANADA_COUNTRY_CODE:
        if not _POSTAL_CODE_CANADA.match(normalize_postal_code(postal_code)):
            return False, "Invalid postal code: expected A1A 1A1"
    elif not _ZIP_CODE_USA.match(postal_code.strip()):
        return False, "Invalid ZIP code: expected 12345 or 12345-6789"

    return True, None


def validate_province(province: Optional[str], country: str) -> Tuple[bool, Optional[str]]:
    if country in (CANADA_COUNTRY_CODE, USA_COUNTRY_CODE) and not province:
        return False, "Province, territory or state is required"
    return True, None


# =============================================================================
# Contact Validation
# =============================================================================

def validate_phone_number(phone: str) -> Tuple[bool, Optional[str]]:
    """North American numbers need 10 digits (11 with a leading 1); international ones start with +."""
    if not phone or not phone.strip():
        return False, "Phone number is required"

    stripped = phone.strip()
    digits = re.sub(r"\D", "", stripped)

    if stripped.startswith("+"):
        if not 8 <= len(digits) <= 15:
            return False, "Invalid international phone number"
        return True, None

    if len(digits) == 11 and digits.startswith("1"):
        digits = digits[1:]
    if len(digits) != 10:
        return False, "Invalid phone number: expected 10 digits"

    return True, None


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    if not email or not email.strip():
        return False, "Email is required"
    if len(email) > 64 or not _EMAIL.match(email.strip()):
        return False, "Invalid email address"
    return True, None


# =============================================================================
# Date Validation
# =============================================================================

def validate_date_of_birth(
    value: date,
    today: Optional[date] = None,
    min_year: int = 1900,
) -> Tuple[bool, Optional[str]]:
    """A birth date must be real, after min_year and not in the future."""
    today = today or date.today()
    if value.year < min_year:
        return False, f"Date of birth cannot be before {min_year}"
    if value > today:
        return False, "Date of birth cannot be in the future"
    return True, None


# =============================================================================
# Name Validation
# =============================================================================

def validate_name(name: str, field_name: str, max_length: int = 100) -> Tuple[bool, Optional[str]]:
    if not name or not name.strip():
        return False, f"{field_name} is required"

    if len(name) > max_length:
        return False, f"{field_name} cannot exceed {max_length} characters"

    if not _NAME.match(name):
        return False, f"{field_name} contains invalid characters"

    return True, None


def sanitize_string(value: Optional[str], max_length: int = 1000) -> Optional[str]:
    """Trim and collapse whitespace; empty strings become None."""
    if value is None:
        return None
    cleaned = re.sub(r"\s+", " ", value).strip()[:max_length]
    return cleaned or None
