"""
Request/response logging for the Rabbit client.

Installs a requests response hook that logs each exchange: request line,
headers and body, then response status, headers and body. Credential
headers are masked and bodies can be truncated.
"""

import logging
from typing import Any, Iterable, Mapping, Optional, Union

import requests

from ..runtime.errors import InvalidArgumentError

_default_logger = logging.getLogger("rabbit_client")

DEFAULT_MASKED_HEADER_NAMES = ("PRIVATE-TOKEN", "Authorization", "Sudo")
MASK = "********"
TRUNCATION_MARKER = "...more..."


class RequestResponseLogger:
    """
    Response hook that logs HTTP exchanges.

    Args:
        logger: Logger to write to (defaults to the ``rabbit_client`` logger)
        level: Logging level of the records
        max_entity_size: Truncate bodies longer than this many characters,
            0 to log bodies in full
        masked_header_names: Headers whose values are replaced by a mask
    """

    def __init__(
        self,
        logger: Optional[logging.Logger] = None,
        level: int = logging.DEBUG,
        max_entity_size: int = 0,
        masked_header_names: Iterable[str] = DEFAULT_MASKED_HEADER_NAMES,
    ):
        if max_entity_size < 0:
            raise InvalidArgumentError("max_entity_size cannot be negative")

        self.logger = logger or _default_logger
        self.level = level
        self.max_entity_size = max_entity_size
        self.masked_header_names = {name.lower() for name in masked_header_names}

    def __call__(self, response: requests.Response, *args: Any, **kwargs: Any) -> requests.Response:
        if self.logger.isEnabledFor(self.level):
            self.logger.log(self.level, self.format_request(response.request))
            self.logger.log(self.level, self.format_response(response))
        return response

    def mask_headers(self, headers: Mapping[str, str]) -> dict:
        """Return a copy of headers with sensitive values masked."""
        return {
            name: (MASK if name.lower() in self.masked_header_names else value)
            for name, value in headers.items()
        }

    def truncate(self, body: Union[str, bytes, None]) -> str:
        """Render a body for logging, truncated to max_entity_size."""
        if body is None:
            return ""
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        if self.max_entity_size and len(body) > self.max_entity_size:
            return body[:self.max_entity_size] + TRUNCATION_MARKER
        return body

    def format_request(self, request: requests.PreparedRequest) -> str:
        lines = [f"> {request.method} {request.url}"]
        lines.extend(f"> {name}: {value}" for name, value in self.mask_headers(request.headers).items())
        body = request.body
        if body and not isinstance(body, (str, bytes)):
            body = "<streamed body>"
        if body:
            lines.append(self.truncate(body))
        return "\n".join(lines)

    def format_response(self, response: requests.Response) -> str:
        lines = [f"< {response.status_code} {response.reason or ''}".rstrip()]
        lines.extend(f"< {name}: {value}" for name, value in self.mask_headers(response.headers).items())
        if response.content:
            lines.append(self.truncate(response.content))
        return "\n".join(lines)


def install(session: requests.Session, hook: RequestResponseLogger) -> RequestResponseLogger:
    """Attach the hook to the session, replacing any previously installed one."""
    uninstall(session)
    session.hooks.setdefault("response", []).append(hook)
    return hook


def uninstall(session: requests.Session) -> None:
    """Remove any RequestResponseLogger from the session."""
    hooks = session.hooks.get("response", [])
    session.hooks["response"] = [h for h in hooks if not isinstance(h, RequestResponseLogger)]


__all__ = [
    "RequestResponseLogger",
    "DEFAULT_MASKED_HEADER_NAMES",
    "MASK",
    "TRUNCATION_MARKER",
    "install",
    "uninstall",
]
