"""Tests for health check endpoints."""
import pytest
from flask import Flask

from session_gateway.api.health import bp as health_bp
from tests.conftest import make_config


def _client(cfg):
    app = Flask(__name__)
    app.config["APP_CONFIG"] = cfg
    app.register_blueprint(health_bp)
    return app.test_client()


@pytest.fixture()
def client():
    with _client(make_config()) as client:
        yield client


def test_health_check(client):
    """Test basic health check endpoint."""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.data == b"ok"
    assert response.content_type.startswith("text/plain")


def test_readiness_check(client):
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.data == b"ready"


def test_readiness_without_provisioner():
    with _client(make_config(provisioner_url="")) as client:
        response = client.get("/ready")
    assert response.status_code == 503
