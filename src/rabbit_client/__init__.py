"""
Rabbit Python Client

This package provides a Python client for the Rabbit REST API: users, SSH
keys, impersonation tokens, emails and custom attributes, with typed models,
pagination and a single error type for failed calls.
"""

from .api_client import RabbitApi, ClientConfig, DEFAULT_PER_PAGE
from .client import HttpTransport, TokenType, ApiVersion, RequestExecutor, Pager, PagerState
from .user_api import UserApi
from .models import (
    CustomAttribute,
    Email,
    Identity,
    ImpersonationState,
    ImpersonationToken,
    Scope,
    SshKey,
    User,
    Version,
)
from .runtime.errors import ErrorCode, RabbitApiError, InvalidArgumentError, EmptyResultError
from .runtime.form import ApiForm
from .runtime.result import Result, Ok, Empty, Failed
from .monitoring import RequestResponseLogger, DEFAULT_MASKED_HEADER_NAMES

__version__ = "1.0.0"
__all__ = [
    # Client
    "RabbitApi",
    "ClientConfig",
    "DEFAULT_PER_PAGE",
    "TokenType",
    "ApiVersion",

    # Plumbing
    "HttpTransport",
    "RequestExecutor",
    "Pager",
    "PagerState",
    "ApiForm",

    # Resource groups
    "UserApi",

    # Models
    "CustomAttribute",
    "Email",
    "Identity",
    "ImpersonationState",
    "ImpersonationToken",
    "Scope",
    "SshKey",
    "User",
    "Version",

    # Errors and results
    "ErrorCode",
    "RabbitApiError",
    "InvalidArgumentError",
    "EmptyResultError",
    "Result",
    "Ok",
    "Empty",
    "Failed",

    # Logging
    "RequestResponseLogger",
    "DEFAULT_MASKED_HEADER_NAMES",
]
