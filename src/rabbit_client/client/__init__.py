"""HTTP plumbing shared by all Rabbit API resource groups."""

from .transport import HttpTransport, TokenType, ApiVersion
from .executor import RequestExecutor
from .pager import Pager, PagerState

__all__ = [
    "HttpTransport",
    "TokenType",
    "ApiVersion",
    "RequestExecutor",
    "Pager",
    "PagerState",
]
