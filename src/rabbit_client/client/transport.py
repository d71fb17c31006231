"""
HTTP transport for the Rabbit API.

Wraps a requests.Session: builds endpoint URLs from path segments, attaches
the credential header, applies the configured timeout and TLS verification,
and checks the secret token returned by the server.
"""

from __future__ import annotations
import hmac
import logging
import mimetypes
import os
from enum import Enum
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import requests

from ..runtime.url import join_path

logger = logging.getLogger(__name__)

PRIVATE_TOKEN_HEADER = "PRIVATE-TOKEN"
AUTHORIZATION_HEADER = "Authorization"
SECRET_TOKEN_HEADER = "X-Rabbit-Token"

Params = Optional[Sequence[Tuple[str, str]]]


class TokenType(Enum):
    """How the auth token is presented to the server."""

    PRIVATE = "private"
    ACCESS = "access"
    OAUTH2 = "oauth2"


class ApiVersion(Enum):
    """Version of the Rabbit API to talk to."""

    V4 = "v4"

    @property
    def api_namespace(self) -> str:
        return f"/api/{self.value}"


class HttpTransport:
    """
    Sends requests to a Rabbit server.

    The transport holds no per-call state; a single instance (and its
    session's connection pool) can be shared by concurrent callers.
    """

    def __init__(
        self,
        host_url: str,
        auth_token: Optional[str],
        token_type: TokenType = TokenType.PRIVATE,
        secret_token: Optional[str] = None,
        api_version: ApiVersion = ApiVersion.V4,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the transport.

        Args:
            host_url: Base URL of the server, e.g. ``https://rabbit.example.com``
            auth_token: Token used to authenticate every request
            token_type: Whether the token is sent as PRIVATE-TOKEN or Bearer
            secret_token: If set, responses must echo it in X-Rabbit-Token
            api_version: API version, selects the URL namespace
            timeout: Connect and read timeout in seconds
            verify_ssl: Verify TLS certificates
            user_agent: Value of the User-Agent header
            session: Optional requests.Session for connection pooling
        """
        self._host_url = host_url.rstrip("/")
        self._auth_token = auth_token
        self._token_type = token_type
        self._secret_token = secret_token
        self._api_version = api_version
        self._timeout = timeout
        self._session = session or requests.Session()
        self._owns_session = session is None
        self.verify_ssl = verify_ssl

        self._default_headers: Dict[str, str] = {"Accept": "application/json"}
        if user_agent:
            self._default_headers["User-Agent"] = user_agent

    @property
    def host_url(self) -> str:
        return self._host_url

    @property
    def base_url(self) -> str:
        """Host URL plus the API namespace."""
        return self._host_url + self._api_version.api_namespace

    @property
    def auth_token(self) -> Optional[str]:
        return self._auth_token

    @property
    def token_type(self) -> TokenType:
        return self._token_type

    @property
    def secret_token(self) -> Optional[str]:
        return self._secret_token

    @property
    def api_version(self) -> ApiVersion:
        return self._api_version

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def session(self) -> requests.Session:
        return self._session

    def url_for(self, *path_args: Any) -> str:
        """Build the full URL for the given path segments."""
        return f"{self.base_url}/{join_path(*path_args)}"

    def auth_headers(self) -> Dict[str, str]:
        """Headers carrying the credential for this transport's token type."""
        if not self._auth_token:
            return {}
        if self._token_type is TokenType.PRIVATE:
            return {PRIVATE_TOKEN_HEADER: self._auth_token}
        return {AUTHORIZATION_HEADER: f"Bearer {self._auth_token}"}

    def request(
        self,
        method: str,
        path_args: Sequence[Any],
        params: Params = None,
        data: Params = None,
        files: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> requests.Response:
        """
        Send one HTTP request.

        Args:
            method: HTTP method
            path_args: Path segments below the API namespace
            params: Query string parameters
            data: Form-encoded body parameters
            files: Multipart file fields
            headers: Extra request headers

        Returns:
            The response, whatever its status

        Raises:
            requests.RequestException: On transport failures
        """
        url = self.url_for(*path_args)
        request_headers = dict(self._default_headers)
        request_headers.update(self.auth_headers())
        if headers:
            request_headers.update(headers)

        logger.debug("%s %s", method, url)
        return self._session.request(
            method,
            url,
            params=list(params) if params else None,
            data=list(data) if data else None,
            files=files,
            headers=request_headers,
            timeout=self._timeout,
            verify=self.verify_ssl,
        )

    def upload(
        self,
        method: str,
        name: str,
        file_path: Union[str, os.PathLike],
        path_args: Sequence[Any],
        media_type: Optional[str] = None,
        data: Params = None,
    ) -> requests.Response:
        """Send a multipart request with a single file field."""
        file_name = os.path.basename(os.fspath(file_path))
        if media_type is None:
            media_type = mimetypes.guess_type(file_name)[0] or "application/octet-stream"

        with open(file_path, "rb") as f:
            return self.request(method, path_args, data=data, files={name: (file_name, f, media_type)})

    def validate_secret_token(self, response: requests.Response) -> bool:
        """
        Check the secret token echoed by the server.

        Returns:
            True when no secret token is configured or the header matches
        """
        if self._secret_token is None:
            return True

        token = response.headers.get(SECRET_TOKEN_HEADER)
        if token is None:
            return False
        return hmac.compare_digest(token.encode("utf-8"), self._secret_token.encode("utf-8"))

    def close(self) -> None:
        """Close the HTTP session if owned by this transport."""
        if self._owns_session:
            self._session.close()


__all__ = [
    "TokenType",
    "ApiVersion",
    "HttpTransport",
    "PRIVATE_TOKEN_HEADER",
    "AUTHORIZATION_HEADER",
    "SECRET_TOKEN_HEADER",
]
