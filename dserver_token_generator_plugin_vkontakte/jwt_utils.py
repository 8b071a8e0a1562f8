"""
JWT token generation utilities.

Issues the dserver token handed out after a VKontakte access token was
accepted.
"""

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Optional

import jwt

from .config import JwtConfig

logger = logging.getLogger(__name__)


class JwtTokenGenerator:
    """Generate and sign JWT tokens for authenticated users."""

    def __init__(self, config: JwtConfig):
        """
        Initialize the JWT token generator.

        Args:
            config: JWT configuration object
        """
        self.config = config
        self._private_key: Optional[str] = None
        self._public_key: Optional[str] = None

    @property
    def private_key(self) -> str:
        """Load and cache the private key."""
        if self._private_key is None:
            self._private_key = self._load_key(self.config.private_key_file)
        return self._private_key

    @property
    def public_key(self) -> str:
        """Load and cache the public key."""
        if self._public_key is None:
            self._public_key = self._load_key(self.config.public_key_file)
        return self._public_key

    @staticmethod
    def _load_key(path: str) -> str:
        """Load a key from file, stripping surrounding whitespace."""
        key_path = Path(path)
        if not key_path.exists():
            raise FileNotFoundError(f"Key file not found: {path}")
        return key_path.read_text().strip()

    def generate_token(
        self,
        username: str,
        display_name: Optional[str] = None,
        permissions: Optional[list] = None,
        additional_claims: Optional[dict] = None,
    ) -> str:
        """
        Generate a JWT token for an authenticated user.

        Args:
            username: dserver username, e.g. ``vk:1234``
            display_name: Name shown by the frontend
            permissions: List of permissions
            additional_claims: Extra claims such as the provider user id

        Returns:
            Signed JWT token string
        """
        now = datetime.now(timezone.utc)

        payload = {
            "iss": self.config.issuer,
            "aud": self.config.audience,
            "sub": username,
            "iat": now,
            "nbf": now,
            "exp": now + timedelta(hours=self.config.token_expiry_hours),
            "username": username,
        }
        if display_name:
            payload["name"] = display_name
        if permissions:
            payload["permissions"] = permissions
        if additional_claims:
            payload.update(
                {key: value for key, value in additional_claims.items() if value is not None}
            )

        token = jwt.encode(payload, self.private_key, algorithm=self.config.algorithm)

        logger.info(f"Generated JWT token for user: {username}")
        return token

    def verify_token(self, token: str) -> Optional[dict]:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            Decoded payload if valid, None otherwise
        """
        try:
            return jwt.decode(
                token,
                self.public_key,
                algorithms=[self.config.algorithm],
                audience=self.config.audience,
                issuer=self.config.issuer,
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid token: {e}")
        return None

    def refresh_token(self, token: str) -> Optional[str]:
        """
        Refresh an existing valid token.

        The provider claims of the original token are carried over.

        Args:
            token: Existing JWT token

        Returns:
            New token with extended expiry, or None if original is invalid
        """
        payload = self.verify_token(token)
        if payload is None:
            return None

        return self.generate_token(
            username=payload["username"],
            display_name=payload.get("name"),
            permissions=payload.get("permissions"),
            additional_claims={
                "provider": payload.get("provider"),
                "provider_user_id": payload.get("provider_user_id"),
            },
        )
