"""Serialization / validation schemas (Marshmallow)."""

from .user_schema import (
    LocaleSchema,
    LoginSchema,
    RegisterSchema,
    UserSchema,
)
from .assistant_schema import PlanAssistantRequestSchema
from .feedback_schema import DiagnosticPayloadSchema, NpsSchema

__all__ = [
    "LocaleSchema",
    "LoginSchema",
    "RegisterSchema",
    "UserSchema",
    "PlanAssistantRequestSchema",
    "DiagnosticPayloadSchema",
    "NpsSchema",
]
