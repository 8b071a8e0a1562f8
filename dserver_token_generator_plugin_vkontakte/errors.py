"""
Exceptions raised while loading a VKontakte user profile.
"""

from typing import Optional


class InternalOAuthError(Exception):
    """
    A request made on behalf of an access token failed.

    Wraps the transport error (or provider error code) that caused the
    failure so callers can inspect it.
    """

    def __init__(self, message: str, oauth_error=None):
        super().__init__(message)
        self.message = message
        self.oauth_error = oauth_error

    def __str__(self) -> str:
        if self.oauth_error is None:
            return self.message
        return f"{self.message} ({self.oauth_error})"


class ProviderAPIError(InternalOAuthError):
    """The VK API answered with an ``error`` object."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message, code)
        self.code = code


class ProfileParseError(ValueError):
    """The profile response body could not be turned into a profile."""
