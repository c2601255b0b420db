"""Pytest shared fixtures for the session gateway."""
import os
import pathlib
import sys
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Unit tests never read the provisioner location from the real environment
os.environ.setdefault("DEMO_MODE", "true")

import pytest
import requests

from session_gateway.config import AppConfig
from session_gateway.core.provisioner import ProvisionerClient
from session_gateway.core.session_proxy import SessionProxy
from session_gateway.flask_app import create_app

PROVISIONER_URL = "http://provisioner.test/openam"
TOKEN = "AQIC5wM2LY4SfczIKuNd_hAtjrJgLaZmKCszk_Dsqh1QVT0.*AAJTSQACMDE.*"

ATTRIBUTES_REPLY = (
    f"userdetails.token.id={TOKEN}\n"
    "userdetails.role=id=Hello World Group,ou=group,dc=apius,dc=org\n"
    "userdetails.attribute.name=uid\n"
    "userdetails.attribute.value=pmorris\n"
    "userdetails.attribute.name=mail\n"
    "userdetails.attribute.value=pmorris@example.org\n"
    "userdetails.attribute.name=objectclass\n"
    "userdetails.attribute.value=organizationalPerson\n"
    "userdetails.attribute.value=person\n"
)


# ─────────────────────────────────────────────────────────────────────────────
# Provisioner Stub
# ─────────────────────────────────────────────────────────────────────────────
class StubResponse:
    def __init__(self, status_code: int = 200, text: str = ""):
        self.status_code = status_code
        self.text = text


class StubProvisioner:
    """Stand-in for ``requests.Session`` answering the ``/identity/*`` calls.

    Replies are scripted per operation name (``authenticate``,
    ``isTokenValid``...) as ``(status, body)`` tuples or exceptions to raise.
    Every call is recorded in ``calls``.
    """

    def __init__(self):
        self.replies = {}
        self.calls = []
        self.closed = False

    def reply(self, operation: str, status: int = 200, text: str = ""):
        self.replies[operation] = (status, text)

    def fail(self, operation: str, exc: Exception):
        self.replies[operation] = exc

    def request(self, method, url, params=None, data=None, timeout=None):
        operation = url.rsplit("/", 1)[-1]
        self.calls.append({
            "operation": operation,
            "method": method,
            "url": url,
            "params": params,
            "data": data,
            "timeout": timeout,
        })
        scripted = self.replies.get(operation)
        if scripted is None:
            raise RuntimeError(f"Unexpected provisioner call in unit test: {method} {url}")
        if isinstance(scripted, Exception):
            raise scripted
        status, text = scripted
        return StubResponse(status, text)

    def operations(self):
        return [call["operation"] for call in self.calls]

    def close(self):
        self.closed = True


@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """Keep unit tests off the network.

    Integration tests are marked with @pytest.mark.integration and may reach
    a real provisioner.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected network access in tests: {method} {url}")

    monkeypatch.setattr(requests.Session, "request", _refuse)


@pytest.fixture()
def provisioner():
    return StubProvisioner()


@pytest.fixture()
def provisioner_client(provisioner):
    return ProvisionerClient(PROVISIONER_URL, timeout=3, session=provisioner)


@pytest.fixture()
def proxy(provisioner_client):
    return SessionProxy(provisioner_client)


# ─────────────────────────────────────────────────────────────────────────────
# Flask Test Client
# ─────────────────────────────────────────────────────────────────────────────
def make_config(**overrides) -> AppConfig:
    base = dict(
        demo_mode=False,
        provisioner_url=PROVISIONER_URL,
        provisioner_timeout=3.0,
        challenge_realm="apius",
        cookie_secure=True,
        trusted_proxy_ips="127.0.0.1/32,::1/128",
        log_level="WARNING",
    )
    base.update(overrides)
    return AppConfig(**base)


@pytest.fixture()
def app_config():
    return make_config()


@pytest.fixture()
def flask_app(app_config, provisioner_client):
    app = create_app(config=app_config, client=provisioner_client)
    app.config.update(TESTING=True)
    return app


@pytest.fixture()
def client(flask_app):
    """Flask test client wired to the provisioner stub."""
    with flask_app.test_client() as client:
        yield client


def apius_header(token: Optional[str] = TOKEN) -> dict:
    return {"Authorization": f"APIUS token={token}"}
