import json
import sys

import pytest

import scripts.session_cli as session_cli
from session_gateway.core.provisioner import ProvisionerClient
from tests.conftest import ATTRIBUTES_REPLY, TOKEN


@pytest.fixture(autouse=True)
def restore_sys_argv():
    """Make sure every test sees a clean CLI invocation."""
    original = sys.argv[:]
    yield
    sys.argv = original


@pytest.fixture()
def stub_client(monkeypatch, provisioner):
    """Route the CLI's client through the provisioner stub."""
    built = {}

    def factory(url, timeout):
        built.update(url=url, timeout=timeout)
        return ProvisionerClient(url, timeout=timeout, session=provisioner)

    monkeypatch.setattr(session_cli, "ProvisionerClient", factory)
    return built


def run_cli(*argv):
    with pytest.raises(SystemExit) as exc:
        session_cli.main(["--url", "http://sso/openam", *argv])
    return exc.value.code


def test_login_prints_token(stub_client, provisioner, capsys):
    provisioner.reply("authenticate", 200, f"token.id={TOKEN}\n")

    assert run_cli("login", "--username", "pmorris", "--password", "s3cret") == 0

    assert capsys.readouterr().out.strip() == TOKEN
    assert stub_client["url"] == "http://sso/openam"
    assert provisioner.closed


def test_login_prompts_for_password(monkeypatch, stub_client, provisioner):
    monkeypatch.delenv("PROVISIONER_PASSWORD", raising=False)
    monkeypatch.setattr(session_cli.getpass, "getpass", lambda prompt: "typed")
    provisioner.reply("authenticate", 200, f"token.id={TOKEN}\n")

    assert run_cli("login", "--username", "pmorris") == 0

    assert provisioner.calls[0]["data"]["password"] == "typed"


def test_login_failure_reports_error(stub_client, provisioner, capsys):
    provisioner.reply("authenticate", 401, "")

    assert run_cli("login", "--username", "pmorris", "--password", "bad") == 1

    err = capsys.readouterr().err
    assert err.startswith("[login] Error: Unauthorized (401)")


@pytest.mark.parametrize("reply, code, text", [("boolean=true", 0, "valid"), ("boolean=false", 2, "invalid")])
def test_validate_exit_codes(stub_client, provisioner, capsys, reply, code, text):
    provisioner.reply("isTokenValid", 200, reply)
    assert run_cli("validate", "--token", TOKEN) == code
    assert capsys.readouterr().out.strip() == text


def test_authorize_uppercases_method(stub_client, provisioner, capsys):
    provisioner.reply("authorize", 200, "boolean=true")

    assert run_cli("authorize", "--token", TOKEN, "--uri", "/orders", "--method", "post") == 0

    assert provisioner.calls[0]["params"]["action"] == "POST"
    assert capsys.readouterr().out.strip() == "allowed"


def test_attributes_json(stub_client, provisioner, capsys):
    provisioner.reply("attributes", 200, ATTRIBUTES_REPLY)

    assert run_cli("attributes", "--token", TOKEN) == 0

    body = json.loads(capsys.readouterr().out)
    assert body["attributes"]["uid"] == ["pmorris"]


@pytest.mark.parametrize("fmt, marker", [("xml", "<session-attributes>"), ("atom", "http://www.w3.org/2005/Atom")])
def test_attributes_documents(stub_client, provisioner, capsys, fmt, marker):
    provisioner.reply("attributes", 200, ATTRIBUTES_REPLY)
    assert run_cli("attributes", "--token", TOKEN, "--format", fmt) == 0
    assert marker in capsys.readouterr().out


def test_identity(stub_client, provisioner, capsys):
    provisioner.reply("attributes", 200, ATTRIBUTES_REPLY)
    assert run_cli("identity", "--token", TOKEN) == 0
    assert capsys.readouterr().out.strip() == "pmorris"


def test_logout_expired_session(stub_client, provisioner, capsys):
    provisioner.reply("logout", 500, "Invalid session ID")
    assert run_cli("logout", "--token", TOKEN) == 1
    assert "[logout] Error: Unauthorized (401)" in capsys.readouterr().err


def test_no_command_prints_help(capsys):
    with pytest.raises(SystemExit) as exc:
        session_cli.main([])
    assert exc.value.code == 1
    assert "usage" in capsys.readouterr().out
