# ecocred/utils/validation.py
import logging
from functools import wraps
from typing import Annotated, Callable, Type

from flask import g, jsonify, request
from pydantic import BaseModel, BeforeValidator, Field, ValidationError

logger = logging.getLogger(__name__)


def _parse_uint(value):
    """Amounts may arrive as JSON numbers or as decimal strings."""
    if isinstance(value, bool):
        raise ValueError("booleans are not amounts")
    if isinstance(value, str):
        text = value.strip()
        if not text.isdigit():
            raise ValueError("must be a non-negative integer or decimal string")
        return int(text)
    return value


Uint = Annotated[int, BeforeValidator(_parse_uint), Field(ge=0)]
Address = Annotated[str, Field(pattern=r"^0x[0-9a-fA-F]{40}$")]


def validate_with(schema: Type[BaseModel]) -> Callable:
    """
    Decorator for Flask routes that validates JSON request data against a Pydantic schema.

    Usage:
        @bp.route('/endpoint', methods=['POST'])
        @validate_with(MySchema)
        def endpoint():
            data = g.validated_data
            ...

    Args:
        schema: A Pydantic BaseModel class to validate against.

    Returns:
        A decorated function that injects validated data or returns JSON error on failure.
    """
    def decorator(f):
        @wraps(f)
        def wrapped(*args, **kwargs):
            json_data = request.get_json(silent=True)
            if json_data is None:
                return jsonify({"status": "error", "error": "InvalidArgument", "message": "Request body must be JSON"}), 400
            try:
                g.validated_data = schema.model_validate(json_data)
            except ValidationError as e:
                errors = e.errors(include_url=False, include_context=False)
                logger.warning(f"Request validation error: {errors}")
                return jsonify({"status": "error", "error": "InvalidArgument", "errors": errors}), 400
            return f(*args, **kwargs)
        return wrapped
    return decorator
