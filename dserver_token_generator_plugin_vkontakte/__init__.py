"""
dserver-token-generator-plugin-vkontakte

A dserver token generator plugin that accepts VKontakte OAuth2 access
tokens obtained by a client application (mobile or single page app).

This plugin provides:
- VKontakte access token authentication strategy
- VK profile normalization via the users.get API
- JWT token generation after successful authentication
- User lookup / auto-provisioning from the VK profile
"""

__version__ = "0.1.0"

from .authenticator import Authenticator
from .errors import InternalOAuthError, ProfileParseError, ProviderAPIError
from .profile import Profile, ProfileName
from .strategy import AuthenticationResult, AuthRequest, AuthStatus, Strategy
from .vkontakte import VKontakteTokenStrategy
from .plugin import VKontakteTokenGeneratorPlugin
from .blueprint import vkontakte_bp

__all__ = [
    "Authenticator",
    "AuthenticationResult",
    "AuthRequest",
    "AuthStatus",
    "InternalOAuthError",
    "Profile",
    "ProfileName",
    "ProfileParseError",
    "ProviderAPIError",
    "Strategy",
    "VKontakteTokenGeneratorPlugin",
    "VKontakteTokenStrategy",
    "vkontakte_bp",
    "__version__",
]
