"""
Configuration management for VKontakte token authentication.

This module handles loading the VKontakte strategy, JWT and plugin
configuration from environment variables or option mappings.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Mapping


DEFAULT_AUTHORIZATION_URL = "https://oauth.vk.com/authorize"
DEFAULT_TOKEN_URL = "https://oauth.vk.com/access_token"
DEFAULT_PROFILE_URL = "https://api.vk.com/method/users.get"
DEFAULT_API_VERSION = "5.0"
DEFAULT_PROFILE_FIELDS = ["uid", "first_name", "last_name", "screen_name", "sex", "photo"]

# camelCase option names accepted by VKontakteConfig.from_mapping
OPTION_ALIASES = {
    "clientID": "client_id",
    "clientSecret": "client_secret",
    "authorizationURL": "authorization_url",
    "tokenURL": "token_url",
    "profileURL": "profile_url",
    "apiVersion": "api_version",
    "profileFields": "profile_fields",
    "accessTokenField": "access_token_field",
    "refreshTokenField": "refresh_token_field",
    "passReqToCallback": "pass_req_to_callback",
    "tokenFromHeaders": "token_from_headers",
    "skipUserProfile": "skip_user_profile",
    "useAuthorizationHeader": "use_authorization_header",
}


def _env_bool(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() == "true"


def _split_list(value: str) -> list:
    return [item.strip() for item in value.split(",") if item.strip()]


@dataclass
class VKontakteConfig:
    """VKontakte strategy configuration."""

    # Client credentials
    client_id: str = ""
    client_secret: str = ""

    # OAuth2 endpoints
    authorization_url: str = DEFAULT_AUTHORIZATION_URL
    token_url: str = DEFAULT_TOKEN_URL

    # Profile API
    profile_url: str = DEFAULT_PROFILE_URL
    api_version: str = DEFAULT_API_VERSION
    profile_fields: list = field(default_factory=lambda: list(DEFAULT_PROFILE_FIELDS))

    # Request fields carrying the tokens
    access_token_field: str = "access_token"
    refresh_token_field: str = "refresh_token"

    # Verify callback receives the request as first argument
    pass_req_to_callback: bool = False

    # Also look for tokens in request headers
    token_from_headers: bool = False

    skip_user_profile: bool = False

    # Send the token as Authorization header instead of query parameter
    use_authorization_header: bool = False

    @classmethod
    def from_env(cls) -> "VKontakteConfig":
        """Create configuration from environment variables."""
        profile_fields = os.environ.get("VKONTAKTE_PROFILE_FIELDS", "")

        return cls(
            client_id=os.environ.get("VKONTAKTE_CLIENT_ID", ""),
            client_secret=os.environ.get("VKONTAKTE_CLIENT_SECRET", ""),
            authorization_url=os.environ.get(
                "VKONTAKTE_AUTHORIZATION_URL", DEFAULT_AUTHORIZATION_URL
            ),
            token_url=os.environ.get("VKONTAKTE_TOKEN_URL", DEFAULT_TOKEN_URL),
            profile_url=os.environ.get("VKONTAKTE_PROFILE_URL", DEFAULT_PROFILE_URL),
            api_version=os.environ.get("VKONTAKTE_API_VERSION", DEFAULT_API_VERSION),
            profile_fields=(
                _split_list(profile_fields) if profile_fields
                else list(DEFAULT_PROFILE_FIELDS)
            ),
            access_token_field=os.environ.get(
                "VKONTAKTE_ACCESS_TOKEN_FIELD", "access_token"
            ),
            refresh_token_field=os.environ.get(
                "VKONTAKTE_REFRESH_TOKEN_FIELD", "refresh_token"
            ),
            pass_req_to_callback=_env_bool("VKONTAKTE_PASS_REQ_TO_CALLBACK"),
            token_from_headers=_env_bool("VKONTAKTE_TOKEN_FROM_HEADERS"),
            skip_user_profile=_env_bool("VKONTAKTE_SKIP_USER_PROFILE"),
            use_authorization_header=_env_bool("VKONTAKTE_USE_AUTHORIZATION_HEADER"),
        )

    @classmethod
    def from_mapping(cls, options: Mapping) -> "VKontakteConfig":
        """
        Create configuration from an options mapping.

        Both snake_case field names and their camelCase aliases are
        accepted. Unknown keys are ignored, empty values keep the default.
        """
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in options.items():
            key = OPTION_ALIASES.get(key, key)
            if key in known and value not in (None, ""):
                kwargs[key] = value

        if isinstance(kwargs.get("profile_fields"), str):
            kwargs["profile_fields"] = _split_list(kwargs["profile_fields"])

        return cls(**kwargs)


@dataclass
class JwtConfig:
    """JWT token configuration."""

    private_key_file: str = "/app/jwt/jwt_key"
    public_key_file: str = "/app/jwt/jwt_key.pub"
    algorithm: str = "RS256"
    issuer: str = "dserver"
    audience: str = "dserver"
    token_expiry_hours: int = 24

    @classmethod
    def from_env(cls) -> "JwtConfig":
        """Create configuration from environment variables."""
        return cls(
            private_key_file=os.environ.get(
                "JWT_PRIVATE_KEY_FILE", "/app/jwt/jwt_key"
            ),
            public_key_file=os.environ.get(
                "JWT_PUBLIC_KEY_FILE", "/app/jwt/jwt_key.pub"
            ),
            algorithm=os.environ.get("JWT_ALGORITHM", "RS256"),
            issuer=os.environ.get("JWT_ISSUER", "dserver"),
            audience=os.environ.get("JWT_AUDIENCE", "dserver"),
            token_expiry_hours=int(os.environ.get("JWT_TOKEN_EXPIRY_HOURS", "24")),
        )


@dataclass
class PluginConfig:
    """Overall plugin configuration."""

    vkontakte: VKontakteConfig = field(default_factory=VKontakteConfig.from_env)
    jwt: JwtConfig = field(default_factory=JwtConfig.from_env)

    # User provisioning settings
    auto_provision_users: bool = True
    default_user_permissions: list = field(default_factory=lambda: ["search", "retrieve"])

    # Usernames are built as "<prefix>:<vk user id>"
    username_prefix: str = "vk"

    @classmethod
    def from_env(cls) -> "PluginConfig":
        """Create configuration from environment variables."""
        return cls(
            vkontakte=VKontakteConfig.from_env(),
            jwt=JwtConfig.from_env(),
            auto_provision_users=_env_bool("VKONTAKTE_AUTO_PROVISION_USERS", "true"),
            default_user_permissions=_split_list(os.environ.get(
                "VKONTAKTE_DEFAULT_USER_PERMISSIONS", "search,retrieve"
            )),
            username_prefix=os.environ.get("VKONTAKTE_USERNAME_PREFIX", "vk"),
        )
