"""Builders for real requests.Response objects and paged side effects."""

import json
import math
from http import HTTPStatus

import requests

HOST_URL = "https://rabbit.example.com"
BASE_URL = HOST_URL + "/api/v4"
TOKEN = "test-private-token"


def make_response(status=200, json_body=None, headers=None, text=None, method="GET", url=BASE_URL):
    """Build a real requests.Response."""
    response = requests.Response()
    response.status_code = status
    try:
        response.reason = HTTPStatus(status).phrase
    except ValueError:
        response.reason = ""
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
        response.headers["Content-Type"] = "application/json"
    elif text is not None:
        response._content = text.encode("utf-8")
    else:
        response._content = b""
    response.headers.update(headers or {})
    response.encoding = "utf-8"
    response.url = url
    response.request = requests.Request(method, url).prepare()
    return response


def paged_responder(items, per_page, with_totals=True):
    """
    Side effect for session.request serving ``items`` page by page.

    Honors the ``page`` and ``per_page`` query parameters and reports
    X-Total / X-Total-Pages unless with_totals is False.
    """
    def respond(method, url, params=None, **kwargs):
        query = dict(params or [])
        page = int(query.get("page", 1))
        size = int(query.get("per_page", per_page))
        start = (page - 1) * size
        chunk = items[start:start + size]
        headers = {}
        if with_totals:
            headers = {
                "X-Total": str(len(items)),
                "X-Total-Pages": str(math.ceil(len(items) / size)),
                "X-Page": str(page),
                "X-Per-Page": str(size),
            }
        return make_response(200, chunk, headers=headers, url=url)

    return respond


def query_of(call):
    """Query parameters of a recorded session.request call, as a dict."""
    return dict(call.kwargs.get("params") or [])


def form_of(call):
    """Form body parameters of a recorded session.request call, as a dict."""
    return dict(call.kwargs.get("data") or [])
