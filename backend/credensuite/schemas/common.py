"""
Shared schema helpers - camelCase wire format and aggregated validation
"""

from typing import Any, Dict, List, Type, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from credensuite.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class CamelModel(BaseModel):
    """Base schema: snake_case in Python, camelCase on the wire"""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
        str_strip_whitespace=True,
    )


def blank_to_none(v: Any) -> Any:
    """Treat empty optional form fields as omitted"""
    if isinstance(v, str) and not v.strip():
        return None
    return v


def error_entries(exc) -> List[Dict[str, str]]:
    """Flatten pydantic (or FastAPI request) errors into ``{"field", "message"}`` entries"""
    entries = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query")]
        message = err.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        entries.append({"field": ".".join(loc) or "request", "message": message})
    return entries


def validate_payload(schema: Type[ModelT], data: Any) -> ModelT:
    """
    Validate ``data`` against ``schema``.

    Every violation is reported together in a single ValidationError.
    """
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(errors=error_entries(e))
