"""Runtime helpers for the Rabbit Python client"""

from .errors import ErrorCode, RabbitApiError, InvalidArgumentError, EmptyResultError
from .form import ApiForm, PAGE_PARAM, PER_PAGE_PARAM
from .result import Result, Ok, Empty, Failed
from .url import url_encode

__all__ = [
    "ErrorCode",
    "RabbitApiError",
    "InvalidArgumentError",
    "EmptyResultError",
    "ApiForm",
    "PAGE_PARAM",
    "PER_PAGE_PARAM",
    "Result",
    "Ok",
    "Empty",
    "Failed",
    "url_encode",
]
