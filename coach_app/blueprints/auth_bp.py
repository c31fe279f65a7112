"""Authentication endpoints (register/login/me)."""

from __future__ import annotations

from http import HTTPStatus

from flask import Blueprint, jsonify, request
from flask_jwt_extended import current_user, jwt_required
from marshmallow import ValidationError

from ..extensions import db
from ..models import User
from ..schemas import LoginSchema, RegisterSchema, UserSchema
from ..utils import generate_access_token, hash_password, normalize_email, verify_password

auth_bp = Blueprint("auth_bp", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
user_schema = UserSchema()


@auth_bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    return jsonify({"errors": err.messages}), HTTPStatus.BAD_REQUEST


@auth_bp.get("/ping")
def ping():
    return jsonify({"module": "auth", "status": "ok"})


@auth_bp.post("/register")
def register():
    payload = register_schema.load(request.get_json(silent=True) or {})
    email = normalize_email(payload["email"])
    if User.query.filter_by(email=email).first():
        return jsonify({"error": "Email already registered"}), HTTPStatus.CONFLICT

    user = User(
        email=email,
        password_hash=hash_password(payload["password"]),
        role=payload["role"],
        full_name=payload.get("full_name"),
        locale=payload["locale"],
    )
    db.session.add(user)
    db.session.commit()

    return (
        jsonify(
            {
                "access_token": generate_access_token(user),
                "user": user_schema.dump(user),
            }
        ),
        HTTPStatus.CREATED,
    )


@auth_bp.post("/login")
def login():
    payload = login_schema.load(request.get_json(silent=True) or {})
    email = normalize_email(payload["email"])
    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(payload["password"], user.password_hash):
        return jsonify({"error": "Invalid email or password"}), HTTPStatus.UNAUTHORIZED

    return jsonify({"access_token": generate_access_token(user), "user": user_schema.dump(user)})


@auth_bp.get("/me")
@jwt_required()
def me():
    return jsonify({"user": user_schema.dump(current_user)})
