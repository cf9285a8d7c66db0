from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required.")
    return str(value).strip()


def optional_text(value: Any) -> Optional[str]:
    text = (str(value) if value is not None else "").strip()
    return text or None


def require_enum(value: Any, enum_cls: Type[E], field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Invalid {field_name}: {value!r}.")


def require_decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number.")
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"{field_name} must be a number.")
    if not amount.is_finite():
        raise ValidationError(f"{field_name} must be a number.")
    return amount


def require_non_negative(value: Any, field_name: str) -> Decimal:
    amount = require_decimal(value, field_name)
    if amount < 0:
        raise ValidationError(f"{field_name} cannot be negative.")
    return amount


def require_positive(value: Any, field_name: str) -> Decimal:
    amount = require_decimal(value, field_name)
    if amount <= 0:
        raise ValidationError(f"{field_name} must be positive.")
    return amount


EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def require_email(value: Any, field_name: str = "Email") -> str:
    text = require_non_empty(value, field_name)
    if not EMAIL_RE.match(text):
        raise ValidationError("Invalid email address.")
    return text
