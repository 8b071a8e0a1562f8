"""
OAuth2 transport used to call the provider API on behalf of a user.
"""

import logging
from typing import Optional

import httpx
from authlib.integrations.httpx_client import OAuth2Client

logger = logging.getLogger(__name__)


class OAuth2Transport:
    """
    Issue authenticated requests with an already obtained access token.

    The client credentials and endpoints are kept for reference by the
    strategy; the token handshake itself is not performed here.
    """

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        authorization_url: str,
        token_url: str,
        use_authorization_header_for_get: bool = False,
        client_kwargs: Optional[dict] = None,
    ):
        """
        Initialize the transport.

        Args:
            client_id: OAuth2 client identifier
            client_secret: OAuth2 client secret
            authorization_url: Provider authorization endpoint
            token_url: Provider token endpoint
            use_authorization_header_for_get: Send the token as an
                ``Authorization: Bearer`` header instead of the
                ``access_token`` query parameter
            client_kwargs: Extra keyword arguments for the httpx client
        """
        self.client_id = client_id
        self.client_secret = client_secret
        self.authorization_url = authorization_url
        self.token_url = token_url
        self.use_authorization_header_for_get = use_authorization_header_for_get
        self.client_kwargs = client_kwargs or {}

    def create_client(self, access_token: str) -> OAuth2Client:
        """Create an OAuth2 client bound to the given access token."""
        placement = "header" if self.use_authorization_header_for_get else "uri"
        return OAuth2Client(
            client_id=self.client_id,
            client_secret=self.client_secret,
            token={"access_token": access_token, "token_type": "bearer"},
            token_placement=placement,
            **self.client_kwargs,
        )

    def get(self, url: str, access_token: str) -> tuple[str, httpx.Response]:
        """
        GET a protected resource.

        Args:
            url: Resource URL, query string included
            access_token: Bearer token of the user

        Returns:
            Tuple of response body text and the response itself

        Raises:
            httpx.HTTPError: On transport failures and non-2xx responses
        """
        with self.create_client(access_token) as client:
            resp = client.get(url)
            logger.debug(f"GET {resp.request.url.copy_remove_param('access_token')} -> {resp.status_code}")
            resp.raise_for_status()
            return resp.text, resp
