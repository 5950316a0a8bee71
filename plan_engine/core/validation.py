"""Lenient pydantic validation for externally produced payloads."""

from typing import Any, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


def validate_lenient(model: type[ModelT], data: dict[str, Any], context: str) -> ModelT:
    """Validate data, dropping top-level fields that fail so their defaults apply.

    Only usable with models whose fields all have defaults.

    Args:
        model: Model class to build
        data: Candidate field values
        context: Short description for the log line

    Returns:
        Validated model instance
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        bad_fields = {str(error["loc"][0]) for error in e.errors() if error["loc"]}
        logger.warning(f"Dropping invalid field(s) on {context}: {', '.join(sorted(bad_fields))}")
        cleaned = {key: value for key, value in data.items() if key not in bad_fields}
        return model.model_validate(cleaned)
