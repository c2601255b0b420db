import pytest

from session_gateway.core.errors import bad_request
from session_gateway.core.models import (
    ProvisionerOperation,
    ProvisionerOutcome,
    SessionAttributes,
    SessionState,
    token_fingerprint,
)


def test_operation_paths():
    assert ProvisionerOperation.VALIDATE.path == "/identity/isTokenValid"
    assert ProvisionerOperation.LOGOUT.path == "/identity/logout"


def test_outcome_success():
    outcome = ProvisionerOutcome.success("tok", state=SessionState.AUTHENTICATED)
    assert outcome.ok
    assert outcome.unwrap() == "tok"


def test_outcome_failure_unwrap_raises():
    error = bad_request("missing")
    outcome = ProvisionerOutcome.failure(error)
    assert not outcome.ok
    with pytest.raises(type(error)) as exc:
        outcome.unwrap()
    assert exc.value is error


def test_session_attributes_helpers():
    bundle = SessionAttributes("t", {"uid": ["a", "b"], "empty": []}, ["r"])
    assert bundle.first_value("uid") == "a"
    assert bundle.first_value("empty") is None
    assert bundle.first_value("missing") is None
    assert bundle.to_dict() == {"token": "t", "attributes": {"uid": ["a", "b"], "empty": []}, "roles": ["r"]}


@pytest.mark.parametrize("token, expected", [
    (None, "<none>"),
    ("", "<none>"),
    ("short", "***"),
    ("AQIC5wM2LY4SfczIKuNd", "AQIC5wM2..."),
])
def test_token_fingerprint(token, expected):
    assert token_fingerprint(token) == expected
