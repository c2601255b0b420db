"""Session provisioner HTTP client.

- client.py: one HTTP call per provisioner operation, raw status/body back

Usage:
    from session_gateway.core.provisioner import ProvisionerClient

    client = ProvisionerClient("http://openam:8080/openam")
    resp = client.authenticate("pmorris", "secret")
"""
from .client import (
    ProvisionerClient,
    ProvisionerResponse,
    client_from_config,
    REQUEST_TIMEOUT,
)

__all__ = [
    "ProvisionerClient",
    "ProvisionerResponse",
    "client_from_config",
    "REQUEST_TIMEOUT",
]
