"""
Rabbit JSON Decoding

This module turns JSON response bodies into pydantic models. Any failure to
parse or validate a body is reported as a RabbitApiError with the
DECODE_FAILED code and the underlying exception attached.
"""

from __future__ import annotations
from functools import lru_cache
from typing import Any, List, Optional, Type, TypeVar

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from .errors import ErrorCode, RabbitApiError

M = TypeVar("M", bound=BaseModel)


@lru_cache(maxsize=None)
def _list_adapter(model: Type[BaseModel]) -> TypeAdapter:
    return TypeAdapter(List[model])  # type: ignore[valid-type]


def _json_body(response: requests.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise RabbitApiError(f"Invalid JSON response: {e}", ErrorCode.DECODE_FAILED,
                             http_status=response.status_code, response=response, cause=e) from e


def decode(data: Any, model: Type[M]) -> Optional[M]:
    """
    Validate already-parsed JSON data against a model.

    Args:
        data: Parsed JSON (a mapping), or None
        model: The pydantic model class

    Returns:
        The model instance, or None when data is None

    Raises:
        RabbitApiError: If the data does not match the model
    """
    if data is None:
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise RabbitApiError(f"Cannot decode {model.__name__}: {e.error_count()} validation error(s)",
                             ErrorCode.DECODE_FAILED, cause=e) from e


def decode_list(data: Any, model: Type[M]) -> List[M]:
    """Validate already-parsed JSON data as a list of models; None gives []."""
    if data is None:
        return []
    try:
        return _list_adapter(model).validate_python(data)
    except ValidationError as e:
        raise RabbitApiError(f"Cannot decode list of {model.__name__}: {e.error_count()} validation error(s)",
                             ErrorCode.DECODE_FAILED, cause=e) from e


def read_entity(response: requests.Response, model: Type[M]) -> Optional[M]:
    """Decode a response body into a single model instance."""
    try:
        return decode(_json_body(response), model)
    except RabbitApiError as e:
        if e.response is None:
            e.response = response
            e.http_status = response.status_code
        raise


def read_entities(response: requests.Response, model: Type[M]) -> List[M]:
    """Decode a response body into a list of model instances."""
    try:
        return decode_list(_json_body(response), model)
    except RabbitApiError as e:
        if e.response is None:
            e.response = response
            e.http_status = response.status_code
        raise


__all__ = ["decode", "decode_list", "read_entity", "read_entities"]
