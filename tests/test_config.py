"""
Tests for configuration loading
"""
from dserver_token_generator_plugin_vkontakte.config import (
    DEFAULT_PROFILE_FIELDS,
    JwtConfig,
    PluginConfig,
    VKontakteConfig,
)


def test_vkontakte_defaults(monkeypatch):
    for name in ("VKONTAKTE_CLIENT_ID", "VKONTAKTE_PROFILE_FIELDS", "VKONTAKTE_API_VERSION"):
        monkeypatch.delenv(name, raising=False)

    config = VKontakteConfig.from_env()

    assert config.client_id == ""
    assert config.profile_url == "https://api.vk.com/method/users.get"
    assert config.api_version == "5.0"
    assert config.profile_fields == DEFAULT_PROFILE_FIELDS
    assert config.use_authorization_header is False


def test_vkontakte_from_env(monkeypatch):
    monkeypatch.setenv("VKONTAKTE_CLIENT_ID", "123456789")
    monkeypatch.setenv("VKONTAKTE_CLIENT_SECRET", "secret")
    monkeypatch.setenv("VKONTAKTE_PROFILE_FIELDS", "id, first_name ,last_name")
    monkeypatch.setenv("VKONTAKTE_API_VERSION", "5.131")
    monkeypatch.setenv("VKONTAKTE_ACCESS_TOKEN_FIELD", "vk_token")
    monkeypatch.setenv("VKONTAKTE_PASS_REQ_TO_CALLBACK", "True")

    config = VKontakteConfig.from_env()

    assert config.client_id == "123456789"
    assert config.client_secret == "secret"
    assert config.profile_fields == ["id", "first_name", "last_name"]
    assert config.api_version == "5.131"
    assert config.access_token_field == "vk_token"
    assert config.pass_req_to_callback is True


def test_from_mapping_ignores_unknown_and_empty():
    config = VKontakteConfig.from_mapping({
        "clientID": "123",
        "profileURL": "",
        "callbackURL": "https://example.com/callback",
    })

    assert config.client_id == "123"
    assert config.profile_url == "https://api.vk.com/method/users.get"


def test_default_fields_not_shared():
    first = VKontakteConfig()
    first.profile_fields.append("city")

    assert "city" not in VKontakteConfig().profile_fields


def test_plugin_config_from_env(monkeypatch):
    for name in ("JWT_PRIVATE_KEY_FILE", "JWT_PUBLIC_KEY_FILE", "JWT_ISSUER", "JWT_AUDIENCE"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VKONTAKTE_AUTO_PROVISION_USERS", "false")
    monkeypatch.setenv("VKONTAKTE_DEFAULT_USER_PERMISSIONS", "search")
    monkeypatch.setenv("VKONTAKTE_USERNAME_PREFIX", "vkontakte")
    monkeypatch.setenv("JWT_ALGORITHM", "HS256")
    monkeypatch.setenv("JWT_TOKEN_EXPIRY_HOURS", "2")

    config = PluginConfig.from_env()

    assert config.auto_provision_users is False
    assert config.default_user_permissions == ["search"]
    assert config.username_prefix == "vkontakte"
    assert config.jwt == JwtConfig(algorithm="HS256", token_expiry_hours=2)
