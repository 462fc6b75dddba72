"""
Public station IDs

Stations have an integer primary key plus an 8-character alphanumeric
public ID (62^8 combinations) that is safe to put in URLs. API routes
accept either form.
"""

import re
import secrets

PUBLIC_ID_ALPHABET = '0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz'
PUBLIC_ID_LENGTH = 8

_PUBLIC_ID_RE = re.compile(r'^[0-9A-Za-z]{8}$')


def generate_public_id():
    """Generate a random public station ID"""
    return ''.join(secrets.choice(PUBLIC_ID_ALPHABET) for _ in range(PUBLIC_ID_LENGTH))


def is_valid_public_id(value):
    return bool(value) and bool(_PUBLIC_ID_RE.match(value))


def parse_station_ref(value):
    """Classify a station reference from a URL

    An 8-character all-digit value classifies as a public ID.
    queries.find_station() falls back to the numeric ID when no station
    has that public ID.

    Args:
        value: Path parameter (public ID or numeric ID)

    Returns:
        tuple: ('public', str), ('numeric', int) or ('invalid', None)
    """
    value = (value or '').strip()

    if is_valid_public_id(value):
        return 'public', value

    if value.isdigit() and int(value) > 0:
        return 'numeric', int(value)

    return 'invalid', None
