"""
Access code generation.

Format: 8 characters drawn uniformly from A-Z and 0-9 (36^8 ≈ 2.8 * 10^12
codes). Codes are not checked for uniqueness across customers: login always
pairs the code with an email, so a shared code never grants access to the
wrong record.
"""

import re
import secrets

ACCESS_CODE_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ACCESS_CODE_LEN = 8

ACCESS_CODE_PATTERN = re.compile(f"^[A-Z0-9]{{{ACCESS_CODE_LEN}}}$")


def generate_access_code() -> str:
    """Generate a fresh access code from the system CSPRNG."""
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(ACCESS_CODE_LEN))


def normalize_access_code(code: str) -> str:
    """Canonicalize user input for comparison and storage."""
    return (code or "").strip().upper()


def is_well_formed(code: str) -> bool:
    return bool(code) and ACCESS_CODE_PATTERN.match(code) is not None
