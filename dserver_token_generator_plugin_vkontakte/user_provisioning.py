"""
User provisioning for VKontakte authenticated users.

This module maps a VKontakte profile to a dserver user and provides the
default verify callback for the token strategy.
"""

import logging
from typing import Callable, Optional

from .profile import Profile

logger = logging.getLogger(__name__)


class UserProvisioner:
    """
    Decide which dserver user a VKontakte profile belongs to.

    Known users are resolved through ``user_lookup``; unknown users are
    accepted only when auto-provisioning is enabled.
    """

    def __init__(
        self,
        auto_provision: bool = False,
        default_permissions: Optional[list] = None,
        user_lookup: Optional[Callable[[str], Optional[dict]]] = None,
        username_prefix: str = "vk",
    ):
        """
        Initialize the user provisioner.

        Args:
            auto_provision: Accept users that are not registered
            default_permissions: Permissions granted to auto-provisioned users
            user_lookup: Callable returning a dict of the registered user
                (``permissions``, ``display_name``) or None
            username_prefix: Prefix of generated usernames
        """
        self.auto_provision = auto_provision
        self.default_permissions = list(default_permissions or [])
        self.user_lookup = user_lookup
        self.username_prefix = username_prefix

    def username_for(self, profile: Profile) -> str:
        """Build the dserver username for a profile, e.g. ``vk:1234``."""
        return f"{self.username_prefix}:{profile.id}"

    def provision_user(self, profile: Profile) -> Optional[dict]:
        """
        Return user info for a VKontakte profile.

        Args:
            profile: Normalized VKontakte profile

        Returns:
            Dictionary with user info, or None if the user is not accepted
        """
        username = self.username_for(profile)

        registered = self.user_lookup(username) if self.user_lookup else None
        if registered is None and not self.auto_provision:
            logger.warning(f"User {username} is not registered")
            return None

        registered = registered or {}
        user_info = {
            "username": username,
            "display_name": registered.get("display_name") or profile.display_name,
            "given_name": profile.name.given_name,
            "surname": profile.name.family_name,
            "provider": profile.provider,
            "provider_user_id": profile.id,
            "vk_username": profile.username,
            "permissions": registered.get("permissions", self.default_permissions),
        }

        logger.info(f"User {username} authenticated via {profile.provider}")

        return user_info

    def verify(self, access_token, refresh_token, profile, done):
        """Verify callback for ``VKontakteTokenStrategy``."""
        if profile is None:
            return done(None, False, {"message": "No VKontakte profile available"})

        user = self.provision_user(profile)
        if user is None:
            return done(None, False, {
                "message": f"User {self.username_for(profile)} is not registered"
            })

        return done(None, user, {"refresh_token": refresh_token})
