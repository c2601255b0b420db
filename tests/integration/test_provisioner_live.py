"""
Round trip against a running provisioner.

Requires:
    PROVISIONER_URL, PROVISIONER_TEST_USER, PROVISIONER_TEST_PASSWORD

Run with: pytest -m integration
"""
import os

import pytest

from session_gateway.core.models import Credentials, SessionState
from session_gateway.core.provisioner import ProvisionerClient
from session_gateway.core.session_proxy import SessionProxy

USER = os.environ.get("PROVISIONER_TEST_USER")
PASSWORD = os.environ.get("PROVISIONER_TEST_PASSWORD")

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(
        not (os.environ.get("PROVISIONER_URL") and USER and PASSWORD),
        reason="Live provisioner not configured",
    ),
]


@pytest.fixture()
def live_proxy():
    with ProvisionerClient(timeout=10) as client:
        yield SessionProxy(client)


def test_session_lifecycle(live_proxy):
    created = live_proxy.create_session(Credentials(USER, PASSWORD))
    assert created.state is SessionState.AUTHENTICATED
    token = created.unwrap()

    assert live_proxy.validate(token).unwrap() is True
    assert live_proxy.get_identifier(token).unwrap() == USER

    assert live_proxy.logout(token).state is SessionState.INVALIDATED
    # Token-bound calls on a dead session come back as 401, not 500
    assert live_proxy.get_attributes(token).error.http_status == 401
