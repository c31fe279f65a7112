"""Schemas for user-related payloads."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from ..utils import ROLE_NUTRI, ROLE_PATIENT

ROLE_CHOICES = (ROLE_PATIENT, ROLE_NUTRI)
LOCALE_CHOICES = ("es", "eu")


class RegisterSchema(Schema):
    email = fields.Email(required=True)
    password = fields.String(required=True, validate=validate.Length(min=8))
    full_name = fields.String(validate=validate.Length(max=255), allow_none=True)
    role = fields.String(load_default=ROLE_PATIENT, validate=validate.OneOf(ROLE_CHOICES))
    locale = fields.String(load_default="es", validate=validate.OneOf(LOCALE_CHOICES))

    class Meta:
        unknown = EXCLUDE


class LoginSchema(Schema):
    email = fields.String(required=True)
    password = fields.String(required=True)


class LocaleSchema(Schema):
    locale = fields.Raw(load_default=None, allow_none=True)

    class Meta:
        unknown = EXCLUDE


class UserSchema(Schema):
    id = fields.Integer(dump_only=True)
    email = fields.Email(dump_only=True)
    role = fields.String(dump_only=True)
    full_name = fields.String(dump_only=True, allow_none=True)
    locale = fields.String(dump_only=True)
    created_at = fields.DateTime(dump_only=True)
