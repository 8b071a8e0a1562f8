"""
VKontakte token authentication strategy.

Authenticates requests that carry a VKontakte OAuth2 access token directly
(no redirect handshake). The token is used to load the user's profile from
the VK API, and the application supplied ``verify`` callback decides which
local user, if any, the profile belongs to.

Example:

    def verify(access_token, refresh_token, profile, done):
        user = find_user(vkontakte_id=profile.id)
        done(None, user)

    authenticator.use(VKontakteTokenStrategy({
        "client_id": "123456789",
        "client_secret": "shhh-its-a-secret",
    }, verify))
"""

import json
import logging
from typing import Callable, Mapping, Optional, Union
from urllib.parse import urlencode

import httpx

from .config import VKontakteConfig
from .errors import InternalOAuthError, ProfileParseError, ProviderAPIError
from .profile import Profile, ProfileName
from .strategy import AuthRequest, Strategy
from .transport import OAuth2Transport

logger = logging.getLogger(__name__)


class VKontakteTokenStrategy(Strategy):
    """
    Authenticate requests using VKontakte access tokens.

    The ``verify`` callback is called as
    ``verify(access_token, refresh_token, profile, done)``, or with the
    request prepended when ``pass_req_to_callback`` is set. It must call
    ``done(error, user, info)``; ``user`` should be falsy when the
    credentials are not valid.
    """

    name = "vkontakte-token"

    def __init__(
        self,
        options: Optional[Union[VKontakteConfig, Mapping]] = None,
        verify: Optional[Callable] = None,
        transport: Optional[OAuth2Transport] = None,
    ):
        if not callable(verify):
            raise TypeError("VKontakteTokenStrategy requires a verify callback")

        if options is None:
            config = VKontakteConfig()
        elif isinstance(options, VKontakteConfig):
            config = options
        else:
            config = VKontakteConfig.from_mapping(options)

        self.config = config
        self._verify = verify
        self._oauth2 = transport or OAuth2Transport(
            client_id=config.client_id,
            client_secret=config.client_secret,
            authorization_url=config.authorization_url,
            token_url=config.token_url,
            use_authorization_header_for_get=config.use_authorization_header,
        )

    def _lookup(self, request: AuthRequest, field: str) -> Optional[str]:
        """
        Find a token in the request.

        Body first, then query string, then (when enabled) headers. Only
        non-empty strings count; a JSON body may carry lists, objects or
        numbers under the field, and those are treated as missing.

        Args:
            request: Incoming request
            field: Name of the body/query field (header keys are
                normalized to the same underscore form)

        Returns:
            The token, or None
        """
        sources = [request.body, request.query]
        if self.config.token_from_headers:
            sources.append(request.headers)

        for source in sources:
            value = source.get(field) if source else None
            if isinstance(value, str) and value:
                return value
        return None

    def authenticate(self, request: AuthRequest, **options):
        """Authenticate a request carrying an access token."""
        access_token = self._lookup(request, self.config.access_token_field)
        refresh_token = self._lookup(request, self.config.refresh_token_field)

        if not access_token:
            return self.fail({"message": f"You should provide {self.config.access_token_field}"})

        try:
            profile = self._load_user_profile(access_token)
        except (InternalOAuthError, ProfileParseError) as e:
            logger.warning(f"Failed to load VKontakte profile: {e}")
            return self.error(e)

        def verified(error=None, user=None, info=None):
            if error:
                return self.error(error)
            if not user:
                return self.fail(info)
            return self.success(user, info)

        try:
            if self.config.pass_req_to_callback:
                self._verify(request, access_token, refresh_token, profile, verified)
            else:
                self._verify(access_token, refresh_token, profile, verified)
        except Exception as e:
            logger.exception(f"Verify callback raised: {e}")
            return self.error(e)

    def _load_user_profile(self, access_token: str) -> Optional[Profile]:
        """
        Load the profile unless ``skip_user_profile`` is set.

        Args:
            access_token: VKontakte OAuth2 access token

        Returns:
            Normalized profile, or None when the fetch is skipped
        """
        if self.config.skip_user_profile:
            return None
        return self.user_profile(access_token)

    def profile_request_url(self) -> str:
        """Build the ``users.get`` URL with requested fields and API version."""
        query = urlencode(
            {"fields": ",".join(self.config.profile_fields), "v": self.config.api_version},
            safe=",",
        )
        separator = "&" if "?" in self.config.profile_url else "?"
        return f"{self.config.profile_url}{separator}{query}"

    def user_profile(self, access_token: str) -> Profile:
        """
        Load and normalize the VKontakte profile of a token's owner.

        Args:
            access_token: VKontakte OAuth2 access token

        Returns:
            Normalized profile

        Raises:
            InternalOAuthError: The profile request failed
            ProviderAPIError: The VK API reported an error
            ProfileParseError: The response was not a usable profile
        """
        try:
            body, _ = self._oauth2.get(self.profile_request_url(), access_token)
        except httpx.HTTPError as e:
            raise InternalOAuthError("Failed to fetch user profile", e) from e

        try:
            data = json.loads(body)
        except ValueError as e:
            raise ProfileParseError(f"Profile response is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise ProfileParseError("Profile response is not a JSON object")

        error = data.get("error")
        if error:
            if isinstance(error, dict):
                raise ProviderAPIError(error.get("error_msg", "Unknown error"), error.get("error_code"))
            raise ProviderAPIError(str(error))

        try:
            record = data["response"][0]
        except (KeyError, IndexError, TypeError) as e:
            raise ProfileParseError("Profile response carries no user record") from e

        if not isinstance(record, dict):
            raise ProfileParseError("Profile user record is not a JSON object")

        first_name = record.get("first_name") or ""
        last_name = record.get("last_name") or ""

        return Profile(
            provider="vkontakte",
            id=record.get("id", record.get("uid")),
            username=record.get("screen_name"),
            display_name=" ".join(part for part in (first_name, last_name) if part),
            name=ProfileName(family_name=last_name, given_name=first_name),
            emails=[],
            photos=[],
            raw=body,
            json=record,
        )

    load_profile = user_profile
