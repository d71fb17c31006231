"""
Rabbit API Client

This module provides the entry point of the Rabbit Python client. RabbitApi
holds the configuration and the shared request executor, and exposes the
API divided into one resource group per concern (currently ``users``).
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from http import HTTPStatus
from typing import Iterable, Optional, Union

import requests

from .client.executor import RequestExecutor
from .client.transport import ApiVersion, HttpTransport, TokenType
from .models import Version
from .monitoring.request_logging import (
    DEFAULT_MASKED_HEADER_NAMES,
    RequestResponseLogger,
    install,
    uninstall,
)
from .runtime.errors import InvalidArgumentError
from .user_api import UserApi

logger = logging.getLogger("rabbit_client")

# The server ignores anything over 100
DEFAULT_PER_PAGE = 20


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the Rabbit API client."""

    host_url: str
    auth_token: Optional[str] = None
    token_type: TokenType = TokenType.PRIVATE
    secret_token: Optional[str] = None
    api_version: ApiVersion = ApiVersion.V4
    default_per_page: int = DEFAULT_PER_PAGE
    timeout: float = 30.0
    verify_ssl: bool = True
    user_agent: str = "rabbit-python-client/1.0.0"
    debug: bool = False

    def __post_init__(self):
        if not self.host_url or not self.host_url.strip():
            raise InvalidArgumentError("host_url cannot be empty or None")
        if isinstance(self.default_per_page, bool) or not isinstance(self.default_per_page, int) \
                or self.default_per_page < 1:
            raise InvalidArgumentError(f"default_per_page must be a positive integer, got {self.default_per_page!r}")
        if self.timeout is None or self.timeout <= 0:
            raise InvalidArgumentError(f"timeout must be positive, got {self.timeout!r}")


class RabbitApi:
    """
    Rabbit API Client

    Example:
        ```python
        with RabbitApi("https://rabbit.example.com", "my-private-token") as api:
            print(api.get_version().version)
            me = api.users.get_current_user()
        ```
    """

    def __init__(self, config: Union[str, ClientConfig], auth_token: Optional[str] = None,
                 session: Optional[requests.Session] = None, **overrides):
        """
        Initialize the Rabbit API client.

        Args:
            config: Either a server URL string or a ClientConfig object
            auth_token: Auth token, when config is a URL string
            session: Optional requests.Session for connection pooling
            **overrides: Other ClientConfig fields, when config is a URL string
        """
        if isinstance(config, str):
            self.config = ClientConfig(host_url=config, auth_token=auth_token, **overrides)
        else:
            if auth_token is not None or overrides:
                config = replace(config, **({"auth_token": auth_token} if auth_token is not None else {}),
                                 **overrides)
            self.config = config

        if self.config.debug:
            logger.setLevel(logging.DEBUG)

        self._transport = HttpTransport(
            self.config.host_url,
            self.config.auth_token,
            token_type=self.config.token_type,
            secret_token=self.config.secret_token,
            api_version=self.config.api_version,
            timeout=self.config.timeout,
            verify_ssl=self.config.verify_ssl,
            user_agent=self.config.user_agent,
            session=session,
        )
        self._executor = RequestExecutor(self._transport, self.config.default_per_page)
        self._users = UserApi(self._executor, self._transport.host_url)

    @classmethod
    def from_config(cls, config: ClientConfig, session: Optional[requests.Session] = None) -> RabbitApi:
        """Create a client from a ClientConfig."""
        return cls(config, session=session)

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def host_url(self) -> str:
        return self._transport.host_url

    @property
    def auth_token(self) -> Optional[str]:
        return self._transport.auth_token

    @property
    def secret_token(self) -> Optional[str]:
        return self._transport.secret_token

    @property
    def token_type(self) -> TokenType:
        return self._transport.token_type

    @property
    def api_version(self) -> ApiVersion:
        return self._transport.api_version

    @property
    def default_per_page(self) -> int:
        return self._executor.default_per_page

    @default_per_page.setter
    def default_per_page(self, value: int) -> None:
        self._executor.default_per_page = value

    @property
    def verify_ssl(self) -> bool:
        return self._transport.verify_ssl

    @verify_ssl.setter
    def verify_ssl(self, value: bool) -> None:
        self._transport.verify_ssl = bool(value)

    @property
    def executor(self) -> RequestExecutor:
        """The request executor shared by all resource groups."""
        return self._executor

    # =========================================================================
    # Resource groups
    # =========================================================================

    @property
    def users(self) -> UserApi:
        """The users API."""
        return self._users

    def get_version(self) -> Optional[Version]:
        """
        Get the version info of the server.

        Returns:
            The server version and revision

        Raises:
            RabbitApiError: If the request fails
        """
        response = self._executor.get(HTTPStatus.OK, None, "version")
        return self._executor.read_entity(response, Version)

    # =========================================================================
    # Request/response logging
    # =========================================================================

    def enable_request_response_logging(
        self,
        level: int = logging.DEBUG,
        max_entity_size: int = 0,
        masked_header_names: Iterable[str] = DEFAULT_MASKED_HEADER_NAMES,
        logger: Optional[logging.Logger] = None,
    ) -> RequestResponseLogger:
        """
        Log every request and response.

        Args:
            level: Logging level of the records
            max_entity_size: Truncate logged bodies to this many characters,
                0 for no limit
            masked_header_names: Headers whose values are masked
            logger: Logger to write to, the ``rabbit_client`` logger if None

        Returns:
            The installed hook
        """
        hook = RequestResponseLogger(logger=logger, level=level, max_entity_size=max_entity_size,
                                     masked_header_names=masked_header_names)
        return install(self._transport.session, hook)

    def with_request_response_logging(self, *args, **kwargs) -> RabbitApi:
        """Enable request/response logging and return this client, for chaining."""
        self.enable_request_response_logging(*args, **kwargs)
        return self

    def disable_request_response_logging(self) -> None:
        """Stop logging requests and responses."""
        uninstall(self._transport.session)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def close(self) -> None:
        """Close the HTTP session if owned by this client."""
        self._transport.close()

    def __enter__(self) -> RabbitApi:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"RabbitApi({self.host_url!r}, api_version={self.api_version.value})"


__all__ = ["RabbitApi", "ClientConfig", "DEFAULT_PER_PAGE"]
