"""Credential helpers shared by the auth endpoints and the seed command."""

from __future__ import annotations

from flask_jwt_extended import create_access_token
from werkzeug.security import check_password_hash, generate_password_hash

ROLE_PATIENT = "patient"
ROLE_NUTRI = "nutri"


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def hash_password(plain_password: str) -> str:
    return generate_password_hash(plain_password)


def verify_password(plain_password: str, password_hash: str | None) -> bool:
    if not password_hash:
        return False
    return check_password_hash(password_hash, plain_password)


def generate_access_token(user) -> str:
    """Access token for `user`; identity is the stringified id, role/locale ride along as claims."""

    return create_access_token(
        identity=str(user.id),
        additional_claims={"role": user.role, "locale": user.locale or "es"},
    )


def is_patient(user) -> bool:
    return user is not None and user.role == ROLE_PATIENT
