"""
Pytest configuration and shared fixtures for the VKontakte plugin tests
"""
import json

import httpx
import pytest
from flask import Flask

from dserver_token_generator_plugin_vkontakte.config import (
    JwtConfig,
    PluginConfig,
    VKontakteConfig,
)
from dserver_token_generator_plugin_vkontakte.plugin import VKontakteTokenGeneratorPlugin

JWT_SECRET = "a-test-signing-secret-that-is-long-enough-for-hs256-keys-0123456789"


class FakeTransport:
    """Stands in for OAuth2Transport and records every GET."""

    def __init__(self, body=None, exc=None):
        self.body = body
        self.exc = exc
        self.calls = []

    def get(self, url, access_token):
        self.calls.append((url, access_token))
        if self.exc is not None:
            raise self.exc
        return self.body, None


@pytest.fixture
def vk_user():
    return {
        "id": 1234,
        "first_name": "Pavel",
        "last_name": "Durov",
        "screen_name": "durov",
        "sex": 2,
        "photo": "https://vk.com/images/camera_50.png",
    }


@pytest.fixture
def profile_body(vk_user):
    return json.dumps({"response": [vk_user]})


@pytest.fixture
def fake_transport(profile_body):
    return FakeTransport(body=profile_body)


@pytest.fixture
def vk_config():
    return VKontakteConfig(client_id="123456789", client_secret="shhh-its-a-secret")


@pytest.fixture
def jwt_config(tmp_path):
    key_file = tmp_path / "jwt_key"
    key_file.write_text(JWT_SECRET)
    return JwtConfig(
        private_key_file=str(key_file),
        public_key_file=str(key_file),
        algorithm="HS256",
    )


@pytest.fixture
def plugin_config(vk_config, jwt_config):
    return PluginConfig(vkontakte=vk_config, jwt=jwt_config)


@pytest.fixture
def plugin(plugin_config):
    return VKontakteTokenGeneratorPlugin(config=plugin_config)


@pytest.fixture
def app(plugin, fake_transport):
    """Create a Flask application with the plugin installed"""
    flask_app = Flask(__name__)
    flask_app.config.update({
        "TESTING": True,
        "SECRET_KEY": "test-secret-key",
    })

    plugin.init_app(flask_app)
    flask_app.register_blueprint(plugin.get_blueprint())

    # No network access from tests
    plugin.authenticator.get("vkontakte-token")._oauth2 = fake_transport

    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mock_http():
    """Build an httpx MockTransport that records requests."""
    def factory(handler):
        requests = []

        def recording_handler(request):
            requests.append(request)
            return handler(request)

        transport = httpx.MockTransport(recording_handler)
        transport.requests = requests
        return transport

    return factory
