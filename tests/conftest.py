"""Pytest configuration for Beanstalk provider tests."""
import json
import sys
from pathlib import Path
from unittest.mock import Mock

import pytest

# Add project root to path so 'beanstalk_provider' can be imported
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from beanstalk_provider.client import BeanstalkClient
from beanstalk_provider.config import ProviderConfig


def make_response(status_code=200, payload=None, content=None):
    """Build a fake requests.Response."""
    response = Mock()
    response.status_code = status_code
    if content is None:
        content = json.dumps(payload).encode("utf-8") if payload is not None else b""
    response.content = content
    return response


@pytest.fixture
def provider_config():
    return ProviderConfig(account_name="acme", username="ops", access_token="secret-token")


@pytest.fixture
def session():
    """Mock requests.Session; queue responses via session.request.side_effect."""
    return Mock()


@pytest.fixture
def api_client(provider_config, session):
    """Real client over a mocked session, with tracing disabled."""
    return BeanstalkClient(provider_config, session=session, trace=None)


def sent_requests(session):
    """(method, url, json body or None) for every call made on the session."""
    calls = []
    for call in session.request.call_args_list:
        method, url = call.args[0], call.args[1]
        data = call.kwargs.get("data")
        calls.append((method, url, json.loads(data) if data else None))
    return calls
