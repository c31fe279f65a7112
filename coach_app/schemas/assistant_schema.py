"""Schemas for the plan assistant endpoint."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, post_load


class PlanAssistantRequestSchema(Schema):
    message = fields.String(load_default="", allow_none=True)

    class Meta:
        unknown = EXCLUDE

    @post_load
    def strip_message(self, data, **kwargs):
        data["message"] = (data.get("message") or "").strip()
        return data
