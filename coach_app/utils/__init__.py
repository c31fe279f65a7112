"""Utility helpers (security, calendar helpers)."""

from .security import (
    ROLE_NUTRI,
    ROLE_PATIENT,
    generate_access_token,
    hash_password,
    is_patient,
    normalize_email,
    verify_password,
)
from .dates import format_date_iso, week_start_monday

__all__ = [
    "ROLE_NUTRI",
    "ROLE_PATIENT",
    "generate_access_token",
    "hash_password",
    "is_patient",
    "normalize_email",
    "verify_password",
    "format_date_iso",
    "week_start_monday",
]
