"""
Strategy registry and Flask integration.

The authenticator keeps the configured strategies by name, runs one
per-request attempt of a strategy and turns its outcome into a Flask
response when used as a view decorator.
"""

import functools
import logging
from typing import Optional

from flask import g, jsonify, redirect, request

from .strategy import AuthenticationResult, AuthRequest, AuthStatus, Strategy

logger = logging.getLogger(__name__)


class Authenticator:
    """Registry of authentication strategies."""

    def __init__(self):
        self._strategies: dict[str, Strategy] = {}

    def use(self, strategy: Strategy, name: Optional[str] = None) -> "Authenticator":
        """
        Register a strategy.

        Args:
            strategy: Configured strategy instance
            name: Registration name, defaults to ``strategy.name``
        """
        name = name or strategy.name
        if not name:
            raise ValueError("Authentication strategies must have a name")
        self._strategies[name] = strategy
        logger.debug(f"Registered authentication strategy {name}")
        return self

    def unuse(self, name: str) -> "Authenticator":
        self._strategies.pop(name, None)
        return self

    def get(self, name: str) -> Strategy:
        try:
            return self._strategies[name]
        except KeyError:
            raise KeyError(f"Unknown authentication strategy: {name}") from None

    def authenticate(self, name: str, auth_request: AuthRequest, **options) -> AuthenticationResult:
        """
        Run the named strategy against a request.

        Returns:
            The outcome the strategy signalled
        """
        attempt = self.get(name).attempt()
        attempt.authenticate(auth_request, **options)

        result = attempt.outcome
        if result is None:
            logger.error(f"Strategy {name} finished without signalling an outcome")
            return AuthenticationResult(
                AuthStatus.ERROR,
                error=RuntimeError(f"Strategy {name} did not complete authentication"),
            )
        return result

    def protect(self, name: str, **options):
        """
        Decorate a Flask view so it only runs for authenticated requests.

        On success the user and auxiliary info are stored as ``g.user`` and
        ``g.auth_info``.
        """
        def decorator(view):
            @functools.wraps(view)
            def wrapper(*args, **kwargs):
                result = self.authenticate(name, AuthRequest.from_flask(request), **options)

                if result.status is AuthStatus.SUCCESS:
                    g.user = result.user
                    g.auth_info = result.info
                    return view(*args, **kwargs)

                if result.status is AuthStatus.PASS:
                    return view(*args, **kwargs)

                if result.status is AuthStatus.REDIRECT:
                    return redirect(result.url, code=result.status_code or 302)

                if result.status is AuthStatus.FAIL:
                    logger.warning(f"Authentication via {name} rejected: {result.message}")
                    return jsonify({
                        "error": "Unauthorized",
                        "message": result.message or "Authentication failed",
                    }), result.status_code or 401

                logger.error(f"Authentication via {name} errored: {result.error}")
                return jsonify({"error": "Authentication error"}), 500

            return wrapper
        return decorator
