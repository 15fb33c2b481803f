"""
String Predicates and Date Codecs.

Pure functions consumed by the scalar field types: format recognizers for
e-mail, URL, IPv4 and file values, the phone sanitizer, and the date parsing /
formatting pair used by the DATE and DATEONLY types.
"""

import datetime
import re
from typing import Any, Optional
from urllib.parse import urlparse

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_email(value: str) -> bool:
    return bool(_EMAIL_RE.match(value))


def is_url(value: str) -> bool:
    """True for absolute http(s) URLs with a network location."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)


def is_ip(value: str) -> bool:
    """True for a dotted IPv4 address (four blocks in 0..255)."""
    blocks = value.split(".")
    if len(blocks) != 4:
        return False
    return all(block.isascii() and block.isdigit() and int(block) <= 255 for block in blocks)


def is_file(value: str) -> bool:
    """A file value is either a URL or a base64 data URI."""
    return is_url(value) or ("data:" in value and ";base64" in value)


def sanitize_phone(value: str) -> str:
    """Keeps the digits of a phone number and a single leading '+'."""
    sanitized = ""
    for char in value:
        if (sanitized == "" and char == "+") or (char.isascii() and char.isdigit()):
            sanitized += char
    return sanitized


def parse_datetime(value: Any) -> Optional[datetime.datetime]:
    """
    Parses an ISO-8601 string into a `datetime`.

    A trailing 'Z' is accepted. Strings without an offset give naive
    (local time) datetimes. Unparsable input returns None.
    """
    if isinstance(value, datetime.datetime):
        return value
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if not isinstance(value, str) or value == "":
        return None
    try:
        return datetime.datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def parse_date_only(value: Any) -> Optional[datetime.date]:
    """
    Parses a 'YYYY-MM-DD' string (or a full ISO-8601 datetime) into a `date`.

    Aware datetimes are converted to the local calendar day first.
    """
    if isinstance(value, datetime.datetime):
        return value.astimezone().date() if value.tzinfo else value.date()
    if isinstance(value, datetime.date):
        return value
    if not isinstance(value, str) or value == "":
        return None
    try:
        return datetime.date.fromisoformat(value)
    except ValueError:
        pass
    parsed = parse_datetime(value)
    if parsed is None:
        return None
    return parse_date_only(parsed)


def to_iso_string(value: datetime.datetime) -> str:
    """
    Formats a datetime as UTC ISO-8601 with millisecond precision and a 'Z' suffix.

    Naive datetimes are interpreted as local time.
    Example: 2024-03-01T08:30:00.000Z
    """
    utc = value.astimezone(datetime.timezone.utc)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"
