# social_api/core/validation.py
from typing import Any, Sequence, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from social_api.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def format_errors(errors: Sequence[dict]) -> str:
    """Ошибки pydantic одной строкой: 'title: Input should be a valid string; ...'"""
    parts = []
    for err in errors:
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def parse_payload(model: Type[ModelT], payload: Any) -> ModelT:
    """
    Валидация тела запроса внутри сервиса, когда сначала нужно проверить права.
    Ошибки pydantic превращаются в ValidationError (400).
    """
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        raise ValidationError(format_errors(e.errors()))
