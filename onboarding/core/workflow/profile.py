"""Supplier profile fields that may be changed through update requests.

Values travel as strings on the request record and are coerced to the
column type when a request is proposed and again when it is approved.
Limits mirror the ``supplier_applications`` columns and the
``ApplicationUpdate`` schema.
"""

from typing import Annotated, Any, Callable, Dict, Optional

from pydantic import EmailStr, Field, StringConstraints, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from .errors import ValidationError

Converter = Callable[[str], Any]


def _text(max_length: Optional[int] = None) -> Converter:
    adapter = TypeAdapter(
        Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=max_length)]
    )
    return adapter.validate_python


_email_adapter = TypeAdapter(EmailStr)


def _email(max_length: int) -> Converter:
    text = _text(max_length)

    def convert(value: str) -> str:
        return _email_adapter.validate_python(text(value)).lower()

    return convert


_non_negative_int = TypeAdapter(Annotated[int, Field(ge=0)]).validate_python


PROFILE_UPDATABLE_FIELDS: Dict[str, Converter] = {
    "supplier_name": _text(255),
    "company_email": _email(255),
    "company_phone": _text(50),
    "physical_address": _text(),
    "contact_name": _text(200),
    "contact_email": _email(255),
    "contact_phone": _text(50),
    "credit_period": _non_negative_int,
}


def coerce_profile_value(field: str, value: str) -> Any:
    """Convert a proposed string value to the field's stored type."""
    converter = PROFILE_UPDATABLE_FIELDS.get(field)
    if converter is None:
        raise ValidationError(f"Field {field!r} cannot be updated through a profile request")
    try:
        return converter(value)
    except PydanticValidationError as e:
        reason = e.errors()[0]["msg"]
        raise ValidationError(f"Invalid value for {field}: {reason}")


def stringify(value: Any) -> Optional[str]:
    return None if value is None else str(value)
