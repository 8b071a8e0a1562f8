"""
Flask blueprint for VKontakte token authentication.

This blueprint provides the following endpoints:
- GET|POST /auth/vkontakte/token - Exchange a VKontakte access token for a JWT
- POST /auth/refresh - Refresh an existing JWT token
- POST /auth/verify - Verify a JWT token
- GET /auth/info - Describe the configured provider
"""

import logging
from typing import Optional

from flask import jsonify, request
from flask_smorest import Blueprint

from .authenticator import Authenticator
from .config import PluginConfig
from .errors import InternalOAuthError, ProfileParseError
from .jwt_utils import JwtTokenGenerator
from .strategy import AuthRequest, AuthStatus
from .user_provisioning import UserProvisioner
from .vkontakte import VKontakteTokenStrategy

logger = logging.getLogger(__name__)

vkontakte_bp = Blueprint(
    "vkontakte_auth",
    __name__,
    url_prefix="/auth",
    description="VKontakte token authentication endpoints"
)

# Plugin state (initialized by the plugin or on first request)
_config: Optional[PluginConfig] = None
_authenticator: Optional[Authenticator] = None
_jwt_generator: Optional[JwtTokenGenerator] = None
_user_provisioner: Optional[UserProvisioner] = None


def configure(
    config: PluginConfig,
    authenticator: Optional[Authenticator] = None,
    user_provisioner: Optional[UserProvisioner] = None,
):
    """Set the configuration and collaborators used by the endpoints."""
    global _config, _authenticator, _jwt_generator, _user_provisioner
    _config = config
    _authenticator = authenticator
    _user_provisioner = user_provisioner
    _jwt_generator = None


def get_config() -> PluginConfig:
    """Get or initialize plugin configuration."""
    global _config
    if _config is None:
        _config = PluginConfig.from_env()
    return _config


def get_jwt_generator() -> JwtTokenGenerator:
    """Get or initialize JWT token generator."""
    global _jwt_generator
    if _jwt_generator is None:
        _jwt_generator = JwtTokenGenerator(get_config().jwt)
    return _jwt_generator


def get_user_provisioner() -> UserProvisioner:
    """Get or initialize user provisioner."""
    global _user_provisioner
    if _user_provisioner is None:
        config = get_config()
        _user_provisioner = UserProvisioner(
            auto_provision=config.auto_provision_users,
            default_permissions=config.default_user_permissions,
            username_prefix=config.username_prefix,
        )
    return _user_provisioner


def get_authenticator() -> Authenticator:
    """Get or initialize the authenticator with the VKontakte strategy."""
    global _authenticator
    if _authenticator is None:
        strategy = VKontakteTokenStrategy(get_config().vkontakte, get_user_provisioner().verify)
        _authenticator = Authenticator().use(strategy)
    return _authenticator


@vkontakte_bp.route("/vkontakte/token", methods=["GET", "POST"])
def vkontakte_token():
    """
    Exchange a VKontakte access token for a dserver JWT token.

    The access token (and optional refresh token) is read from the JSON or
    form body, then from the query string.
    """
    result = get_authenticator().authenticate(
        VKontakteTokenStrategy.name, AuthRequest.from_flask(request)
    )

    if result.status is AuthStatus.FAIL:
        logger.warning(f"VKontakte authentication rejected: {result.message}")
        return jsonify({
            "error": "Authentication failed",
            "message": result.message,
        }), result.status_code or 401

    if result.status is not AuthStatus.SUCCESS:
        if isinstance(result.error, (InternalOAuthError, ProfileParseError)):
            logger.error(f"VKontakte profile request failed: {result.error}")
            return jsonify({
                "error": "Failed to fetch VKontakte profile",
                "message": str(result.error),
            }), 502
        logger.error(f"Error during VKontakte authentication: {result.error}")
        return jsonify({"error": "Failed to authenticate"}), 500

    user = result.user
    token = get_jwt_generator().generate_token(
        username=user["username"],
        display_name=user.get("display_name"),
        permissions=user.get("permissions"),
        additional_claims={
            "provider": user.get("provider"),
            "provider_user_id": user.get("provider_user_id"),
        },
    )

    logger.info(f"User {user['username']} exchanged a VKontakte token")
    return jsonify({
        "token": token,
        "username": user["username"],
        "provider": user.get("provider"),
        "token_type": "Bearer",
    })


@vkontakte_bp.route("/refresh", methods=["POST"])
def refresh_token():
    """
    Refresh an existing JWT token.

    Request body:
        {
            "token": "existing_jwt_token"
        }
    """
    data = request.get_json(silent=True)

    if not data or "token" not in data:
        return jsonify({"error": "Missing token"}), 400

    new_token = get_jwt_generator().refresh_token(data["token"])

    if not new_token:
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({
        "token": new_token,
        "token_type": "Bearer",
    })


@vkontakte_bp.route("/verify", methods=["POST"])
def verify_token():
    """
    Verify a JWT token and return its claims.

    Request body:
        {
            "token": "jwt_token_to_verify"
        }
    """
    data = request.get_json(silent=True)

    if not data or "token" not in data:
        return jsonify({"error": "Missing token"}), 400

    claims = get_jwt_generator().verify_token(data["token"])

    if not claims:
        return jsonify({"error": "Invalid or expired token"}), 401

    return jsonify({
        "valid": True,
        "claims": claims,
    })


@vkontakte_bp.route("/info")
def auth_info():
    """Return information about the configured VKontakte application."""
    config = get_config()

    return jsonify({
        "provider": "vkontakte",
        "strategy": VKontakteTokenStrategy.name,
        "access_token_field": config.vkontakte.access_token_field,
        "configured": bool(config.vkontakte.client_id and config.vkontakte.client_secret),
    })
