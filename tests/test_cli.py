"""
Tests for the vkontakte Flask CLI commands
"""
import json

import pytest

from conftest import FakeTransport
from dserver_token_generator_plugin_vkontakte.transport import OAuth2Transport


@pytest.fixture
def runner(app, monkeypatch, jwt_config):
    monkeypatch.setenv("VKONTAKTE_CLIENT_ID", "123456789")
    monkeypatch.setenv("VKONTAKTE_CLIENT_SECRET", "secret")
    monkeypatch.setenv("JWT_PRIVATE_KEY_FILE", jwt_config.private_key_file)
    monkeypatch.setenv("JWT_PUBLIC_KEY_FILE", jwt_config.public_key_file)
    return app.test_cli_runner()


def test_show_config(runner):
    result = runner.invoke(args=["vkontakte", "show-config"])

    assert result.exit_code == 0
    assert "Client ID: 12345678..." in result.output
    assert "Profile URL: https://api.vk.com/method/users.get" in result.output
    assert "Client Secret: Configured" in result.output


def test_validate_config(runner):
    result = runner.invoke(args=["vkontakte", "validate-config"])

    assert result.exit_code == 0
    assert "[OK] Configuration is valid!" in result.output


def test_validate_config_missing_keys(runner, monkeypatch, tmp_path):
    monkeypatch.setenv("JWT_PRIVATE_KEY_FILE", str(tmp_path / "missing"))

    result = runner.invoke(args=["vkontakte", "validate-config"])

    assert "JWT private key not found" in result.output
    assert "failed with 1 error(s)" in result.output


def test_fetch_profile(runner, monkeypatch, profile_body):
    fake = FakeTransport(body=profile_body)
    monkeypatch.setattr(OAuth2Transport, "get", lambda self, url, token: fake.get(url, token))

    result = runner.invoke(args=["vkontakte", "fetch-profile", "--access-token", "vk-token"])

    assert result.exit_code == 0
    data = json.loads(result.output)
    assert data["displayName"] == "Pavel Durov"
    assert "_raw" not in data
    assert fake.calls[0][1] == "vk-token"


def test_fetch_profile_provider_error(runner, monkeypatch):
    fake = FakeTransport(body='{"error": {"error_code": 5, "error_msg": "User authorization failed"}}')
    monkeypatch.setattr(OAuth2Transport, "get", lambda self, url, token: fake.get(url, token))

    result = runner.invoke(args=["vkontakte", "fetch-profile", "--access-token", "bad"])

    assert "Failed to load profile: User authorization failed" in result.output
