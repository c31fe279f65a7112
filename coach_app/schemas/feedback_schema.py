"""Schemas for NPS feedback and client diagnostics payloads."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate

SEVERITY_CHOICES = ("warning", "error", "fatal")


class StrictNumber(fields.Float):
    """Float field that rejects strings and booleans instead of coercing them."""

    def _deserialize(self, value, attr, data, **kwargs):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValidationError("Not a valid number.")
        return super()._deserialize(value, attr, data, **kwargs)


class NpsSchema(Schema):
    score = StrictNumber(required=True, validate=validate.Range(min=0, max=10))
    comment = fields.String(load_default="", allow_none=True)
    context = fields.Dict(load_default=dict, allow_none=True)

    class Meta:
        unknown = EXCLUDE


class DiagnosticPayloadSchema(Schema):
    route = fields.String(validate=validate.Length(max=300))
    component = fields.String(validate=validate.Length(max=180))
    severity = fields.String(load_default="error", validate=validate.OneOf(SEVERITY_CHOICES))
    error_name = fields.String(
        data_key="errorName", required=True, validate=validate.Length(min=1, max=200)
    )
    error_message = fields.String(
        data_key="errorMessage", required=True, validate=validate.Length(min=1, max=4000)
    )
    error_code = fields.String(data_key="errorCode", validate=validate.Length(max=120))
    stack = fields.String(validate=validate.Length(max=30000))
    fingerprint = fields.String(validate=validate.Length(max=200))
    context = fields.Dict(keys=fields.String())
    environment = fields.Dict(keys=fields.String())

    class Meta:
        unknown = EXCLUDE
