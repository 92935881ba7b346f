"""
Field validation for registration and loan application input.

Pure functions: each returns a bool, a parsed value (None on failure) or a
list of failing keys, so callers can collect every problem in one pass
instead of stopping at the first exception.
"""

import re
from datetime import date
from typing import Dict, List, Optional

from homeloan_gateway.domain.models import NumberInput
from homeloan_gateway.utils.date_utils import age_on

# re.ASCII keeps \d from matching Arabic-Indic and other Unicode digits
_EIGHT_DIGITS = re.compile(r"\d{8}", re.ASCII)
_SIX_DIGITS = re.compile(r"\d{6}", re.ASCII)
_FOUR_DIGITS = re.compile(r"\d{4}", re.ASCII)
_DMY = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})", re.ASCII)


def is_national_id(value: Optional[str]) -> bool:
    """National ID card number: exactly 8 digits"""
    return bool(value) and _EIGHT_DIGITS.fullmatch(value) is not None


def is_phone(value: Optional[str]) -> bool:
    """Local phone number: exactly 8 digits"""
    return bool(value) and _EIGHT_DIGITS.fullmatch(value) is not None


def is_postal_code(value: Optional[str]) -> bool:
    """Postal code is optional; when given it is exactly 4 digits"""
    if not value:
        return True
    return _FOUR_DIGITS.fullmatch(value) is not None


def is_employee_id(value: Optional[str]) -> bool:
    """Bank employee number: exactly 6 digits"""
    return bool(value) and _SIX_DIGITS.fullmatch(value) is not None


def parse_dmy(value: Optional[str], today: date | None = None) -> Optional[date]:
    """
    Parse a DD/MM/YYYY date of birth.

    Returns None for malformed strings, impossible dates (31/02/2000) and
    dates after today.
    """
    if not value:
        return None
    match = _DMY.fullmatch(value.strip())
    if match is None:
        return None

    day, month, year = (int(part) for part in match.groups())
    try:
        parsed = date(year, month, day)
    except ValueError:
        return None

    if parsed > (today or date.today()):
        return None
    return parsed


def age_at_least(birth_date: date, years: int, today: date | None = None) -> bool:
    """True when the person is at least `years` old on `today`"""
    return age_on(birth_date, today or date.today()) >= years


def required_non_empty(fields: Dict[str, Optional[str]]) -> List[str]:
    """Keys whose value is missing or blank after trimming, in input order"""
    return [key for key, value in fields.items() if value is None or not str(value).strip()]


def _to_float(value: NumberInput) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(value.strip().replace(",", ""))
        except (AttributeError, ValueError):
            return None
    # float() accepts "nan" and "inf"
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def parse_positive_number(value: NumberInput) -> Optional[float]:
    """Parse a strictly positive amount, e.g. "150" or 150.0"""
    number = _to_float(value)
    return number if number is not None and number > 0 else None


def parse_non_negative_number(value: NumberInput) -> Optional[float]:
    number = _to_float(value)
    return number if number is not None and number >= 0 else None


def parse_positive_int(value: NumberInput) -> Optional[int]:
    """Parse a whole, strictly positive count such as a loan term in years"""
    number = _to_float(value)
    if number is None or number <= 0 or not number.is_integer():
        return None
    return int(number)
