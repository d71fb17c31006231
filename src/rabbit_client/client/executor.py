"""
Request execution for the Rabbit API.

RequestExecutor performs exactly one HTTP round-trip per call, checks the
status against the expected one and the secret token against the configured
secret, and turns every failure below it into a RabbitApiError. Resource
groups (users, ...) hold a reference to a shared executor.
"""

from __future__ import annotations
import logging
import os
from http import HTTPStatus
from typing import Any, List, Optional, Sequence, Tuple, Type, TypeVar, Union

import requests
from pydantic import BaseModel

from ..models import User
from ..runtime import codec
from ..runtime.errors import ErrorCode, InvalidArgumentError, RabbitApiError
from ..runtime.form import ApiForm, PAGE_PARAM, PER_PAGE_PARAM
from ..runtime.url import url_encode
from ..runtime.validation import require_positive
from .transport import HttpTransport

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Status = Union[HTTPStatus, int]
FormLike = Optional[Union[ApiForm, Sequence[Tuple[str, str]]]]

# Servers are not consistent about which 2xx code a successful call returns
SUCCESS_BAND = range(200, 205)


def _as_params(form: FormLike) -> Optional[List[Tuple[str, str]]]:
    if form is None:
        return None
    if isinstance(form, ApiForm):
        return form.as_params()
    return list(form)


def status_matches(actual: int, expected: int) -> bool:
    """
    Apply the status tolerance rule.

    A status equal to the expected one always matches. A different status
    still matches when both codes fall inside 200..204.
    """
    if actual == expected:
        return True
    return actual in SUCCESS_BAND and expected in SUCCESS_BAND


class RequestExecutor:
    """
    Executes validated requests against a Rabbit server.

    Holds no mutable per-call state, so one executor can be shared by all
    resource groups and by concurrent callers.
    """

    def __init__(self, transport: HttpTransport, default_per_page: int = 20):
        """
        Initialize the executor.

        Args:
            transport: The HTTP transport to send requests with
            default_per_page: Page size used when a caller does not give one
        """
        self._transport = transport
        self.default_per_page = default_per_page

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    @property
    def default_per_page(self) -> int:
        return self._default_per_page

    @default_per_page.setter
    def default_per_page(self, value: int) -> None:
        self._default_per_page = require_positive(value, "default_per_page")

    # =========================================================================
    # HTTP verbs
    # =========================================================================

    def get(self, expected: Status, query_params: FormLike, *path_args: Any) -> requests.Response:
        """
        Perform a GET and validate the response.

        Args:
            expected: The HTTP status that should be returned from the server
            query_params: Query string parameters
            *path_args: Path segments used to build the URL

        Returns:
            The validated response

        Raises:
            RabbitApiError: If the request fails or the response does not validate
        """
        return self._send("GET", expected, path_args, params=_as_params(query_params))

    def head(self, expected: Status, query_params: FormLike, *path_args: Any) -> requests.Response:
        """Perform a HEAD and validate the response."""
        return self._send("HEAD", expected, path_args, params=_as_params(query_params))

    def post(self, expected: Status, form: FormLike, *path_args: Any) -> requests.Response:
        """Perform a POST with a form-encoded body and validate the response."""
        return self._send("POST", expected, path_args, data=_as_params(form))

    def put(self, expected: Status, form: FormLike, *path_args: Any) -> requests.Response:
        """Perform a PUT with a form-encoded body and validate the response."""
        return self._send("PUT", expected, path_args, data=_as_params(form))

    def delete(self, expected: Status, query_params: FormLike, *path_args: Any) -> requests.Response:
        """Perform a DELETE and validate the response."""
        return self._send("DELETE", expected, path_args, params=_as_params(query_params))

    def upload(self, expected: Status, name: str, file_path: Union[str, os.PathLike], *path_args: Any,
               media_type: Optional[str] = None, form: FormLike = None) -> requests.Response:
        """
        Upload a file with a multipart POST.

        Args:
            expected: The HTTP status that should be returned from the server
            name: Name of the form field holding the file
            file_path: The file to upload
            *path_args: Path segments used to build the URL
            media_type: Content type of the file, guessed from the name if None
            form: Additional form fields

        Returns:
            The validated response
        """
        return self._upload("POST", expected, name, file_path, path_args, media_type, form)

    def put_upload(self, expected: Status, name: str, file_path: Union[str, os.PathLike], *path_args: Any,
                   media_type: Optional[str] = None) -> requests.Response:
        """Upload a file with a multipart PUT."""
        return self._upload("PUT", expected, name, file_path, path_args, media_type, None)

    def _send(self, method: str, expected: Status, path_args: Sequence[Any], **kwargs: Any) -> requests.Response:
        try:
            response = self._transport.request(method, path_args, **kwargs)
        except requests.RequestException as e:
            raise self.handle(e) from e

        logger.debug("%s %s -> %s", method, "/".join(str(a) for a in path_args), response.status_code)
        return self.validate(response, expected)

    def _upload(self, method: str, expected: Status, name: str, file_path: Union[str, os.PathLike],
                path_args: Sequence[Any], media_type: Optional[str], form: FormLike) -> requests.Response:
        if not name:
            raise InvalidArgumentError("name cannot be empty or None")
        if file_path is None:
            raise InvalidArgumentError("file_path cannot be None")

        try:
            response = self._transport.upload(method, name, file_path, path_args,
                                              media_type=media_type, data=_as_params(form))
        except (requests.RequestException, OSError) as e:
            raise self.handle(e) from e

        logger.debug("%s %s (upload %s) -> %s", method, "/".join(str(a) for a in path_args),
                     name, response.status_code)
        return self.validate(response, expected)

    # =========================================================================
    # Validation and error wrapping
    # =========================================================================

    def validate(self, response: requests.Response, expected: Status) -> requests.Response:
        """
        Validate a response against the expected status and the secret token.

        Args:
            response: The response to check
            expected: The expected HTTP status

        Returns:
            The response, unchanged

        Raises:
            RabbitApiError: STATUS_MISMATCH if the status is not acceptable,
                UNAUTHORIZED if the secret token does not match
        """
        if not status_matches(response.status_code, int(expected)):
            raise RabbitApiError.from_response(response)

        if not self._transport.validate_secret_token(response):
            raise RabbitApiError("Invalid secret token in response.", ErrorCode.UNAUTHORIZED,
                                 http_status=HTTPStatus.UNAUTHORIZED.value, response=response)

        return response

    @staticmethod
    def handle(thrown: BaseException) -> RabbitApiError:
        """
        Wrap an exception in a RabbitApiError if needed.

        Returns:
            The exception itself if already a RabbitApiError, otherwise a new
            TRANSPORT_FAILED error wrapping it
        """
        if isinstance(thrown, RabbitApiError):
            return thrown

        logger.debug("Transport failure: %r", thrown)
        return RabbitApiError(f"Request failed: {thrown}", ErrorCode.TRANSPORT_FAILED, cause=thrown)

    # =========================================================================
    # Decoding
    # =========================================================================

    @staticmethod
    def read_entity(response: requests.Response, model: Type[M]) -> Optional[M]:
        """Decode the response body into a model instance."""
        return codec.read_entity(response, model)

    @staticmethod
    def read_entities(response: requests.Response, model: Type[M]) -> List[M]:
        """Decode the response body into a list of model instances."""
        return codec.read_entities(response, model)

    # =========================================================================
    # Parameter helpers
    # =========================================================================

    @staticmethod
    def resolve_user(user: Union[int, str, User, None]) -> Union[int, str]:
        """
        Return the user ID or URL-escaped username for a path segment.

        Args:
            user: A numeric user ID, a username, or a User record

        Returns:
            The positive user ID, or the trimmed and escaped username

        Raises:
            InvalidArgumentError: If no ID or username can be determined
        """
        if user is None:
            raise InvalidArgumentError("Cannot determine ID or username from None")

        if isinstance(user, bool):
            raise InvalidArgumentError("Cannot determine ID or username from a bool")

        if isinstance(user, int):
            if user < 1:
                raise InvalidArgumentError(f"User ID must be positive, got {user}")
            return user

        if isinstance(user, str):
            username = user.strip()
            if not username:
                raise InvalidArgumentError("Username cannot be empty")
            return url_encode(username)

        if isinstance(user, User):
            if user.id is not None and user.id > 0:
                return user.id

            if user.username is not None and user.username.strip():
                return url_encode(user.username.strip())

            raise InvalidArgumentError("Cannot determine ID or username from provided User instance")

        raise InvalidArgumentError(
            f"Cannot determine ID or username from provided {type(user).__name__} instance, "
            "must be int, str, or a User instance"
        )

    def page_params(self, page: int, per_page: int, with_custom_attributes: bool = False) -> ApiForm:
        """
        Build ``page`` and ``per_page`` query parameters.

        Raises:
            InvalidArgumentError: If page or per_page is less than 1
        """
        form = ApiForm()
        if with_custom_attributes:
            form.with_param("with_custom_attributes", True)
        return (form
                .with_param(PAGE_PARAM, require_positive(page, "page"))
                .with_param(PER_PAGE_PARAM, require_positive(per_page, "per_page")))

    def per_page_params(self, per_page: Optional[int] = None, with_custom_attributes: bool = False) -> ApiForm:
        """Build a ``per_page`` query parameter, using the default page size if not given."""
        if per_page is None:
            per_page = self.default_per_page

        form = ApiForm()
        if with_custom_attributes:
            form.with_param("with_custom_attributes", True)
        return form.with_param(PER_PAGE_PARAM, require_positive(per_page, "per_page"))


__all__ = ["RequestExecutor", "status_matches", "SUCCESS_BAND"]
