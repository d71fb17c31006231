"""
Shared fixtures.

HTTP is faked at the requests.Session level: ``session.request`` is a Mock
that returns real requests.Response objects (see helpers.http).
"""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

sys.path.insert(0, str(Path(__file__).parent))
from helpers import HOST_URL, TOKEN, make_response

from rabbit_client import RabbitApi


@pytest.fixture
def session():
    """A real session whose request method is mocked."""
    s = requests.Session()
    s.request = Mock(name="request", return_value=make_response(200, {}))
    return s


@pytest.fixture
def api(session):
    """A client wired to the mocked session."""
    client = RabbitApi(HOST_URL, TOKEN, session=session)
    yield client
    client.close()


@pytest.fixture
def users(api):
    return api.users
