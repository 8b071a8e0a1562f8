"""
dserver plugin registration for the VKontakte token generator.

This module provides the plugin class that integrates with dservercore's
plugin discovery system via the ExtensionABC interface.
"""

import logging
from typing import Callable, Optional

from flask import Flask

from . import blueprint
from .authenticator import Authenticator
from .blueprint import vkontakte_bp
from .cli import vkontakte_cli
from .config import PluginConfig
from .user_provisioning import UserProvisioner
from .vkontakte import VKontakteTokenStrategy

logger = logging.getLogger(__name__)


class VKontakteTokenGeneratorPlugin:
    """
    VKontakte Token Generator Plugin for dserver.

    Accepts VKontakte access tokens obtained by a client application,
    loads the owner's VK profile and issues dserver JWT tokens.

    Implements the dservercore ExtensionABC interface.
    """

    def __init__(
        self,
        app: Flask = None,
        config: Optional[PluginConfig] = None,
        user_lookup: Optional[Callable[[str], Optional[dict]]] = None,
    ):
        """
        Initialize the plugin.

        Args:
            app: Flask application instance (optional, can call init_app later)
            config: Plugin configuration, loaded from the environment if omitted
            user_lookup: Resolves registered users by username
        """
        self.app = app
        self.config = config
        self.user_lookup = user_lookup
        self.authenticator: Optional[Authenticator] = None
        self.user_provisioner: Optional[UserProvisioner] = None

        if app is not None:
            self.init_app(app)

    def init_app(self, app: Flask, *args, **kwargs):
        """
        Initialize the plugin with a Flask application.

        This is called by dservercore's app factory.
        """
        self.app = app

        if self.config is None:
            self.config = PluginConfig.from_env()

        self.user_provisioner = UserProvisioner(
            auto_provision=self.config.auto_provision_users,
            default_permissions=self.config.default_user_permissions,
            user_lookup=self.user_lookup,
            username_prefix=self.config.username_prefix,
        )

        strategy = VKontakteTokenStrategy(self.config.vkontakte, self.user_provisioner.verify)
        self.authenticator = Authenticator().use(strategy)

        blueprint.configure(self.config, self.authenticator, self.user_provisioner)
        app.cli.add_command(vkontakte_cli)

        logger.info("VKontakte Token Generator plugin initialized")
        logger.info(f"VKontakte profile URL: {self.config.vkontakte.profile_url} "
                    f"(API version {self.config.vkontakte.api_version})")
        if not self.config.vkontakte.client_id:
            logger.warning("VKontakte not fully configured - VKONTAKTE_CLIENT_ID not set")

    def get_blueprint(self):
        """
        Return the Flask blueprint for this extension.

        Required by dservercore ExtensionABC.
        """
        return vkontakte_bp

    def register_dataset(self, dataset_info):
        """
        Register a dataset (no-op for auth plugin).

        Required by dservercore PluginABC but not used for authentication.
        """
        pass

    def get_config(self):
        """
        Return plugin configuration dictionary.

        Required by dservercore PluginABC.
        """
        return {}

    def get_config_secrets_to_obfuscate(self):
        """Return config keys that should not be exposed."""
        return ["VKONTAKTE_CLIENT_SECRET"]

    @staticmethod
    def get_name() -> str:
        return "vkontakte-token-generator"

    @staticmethod
    def get_version() -> str:
        from . import __version__
        return __version__

    @staticmethod
    def get_description() -> str:
        return "VKontakte access token generator for dserver"
