"""
Pluggable authentication strategy contract.

A strategy inspects a request and reports exactly one outcome through its
action methods: ``success``, ``fail``, ``error``, ``redirect`` or ``pass_``.
Each request runs against its own copy of the strategy (see
``Strategy.attempt``), so a configured strategy can be shared between
concurrent requests.
"""

import copy
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

logger = logging.getLogger(__name__)


class AuthStatus(enum.Enum):
    SUCCESS = "success"
    FAIL = "fail"
    ERROR = "error"
    REDIRECT = "redirect"
    PASS = "pass"


@dataclass
class AuthenticationResult:
    """Outcome of one authentication attempt."""

    status: AuthStatus
    user: Any = None
    info: Any = None
    error: Optional[BaseException] = None
    status_code: Optional[int] = None
    url: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status is AuthStatus.SUCCESS

    @property
    def message(self) -> Optional[str]:
        """Human readable message carried by the fail info, if any."""
        if isinstance(self.info, dict):
            return self.info.get("message")
        if isinstance(self.info, str):
            return self.info
        return None


@dataclass
class AuthRequest:
    """HTTP-like request exposing body, query and header maps."""

    body: dict = field(default_factory=dict)
    query: dict = field(default_factory=dict)
    headers: dict = field(default_factory=dict)

    # The framework request this one was built from
    original: Any = None

    @classmethod
    def from_flask(cls, request) -> "AuthRequest":
        """Create an AuthRequest from a Flask/werkzeug request."""
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            body = request.form.to_dict() if request.form else {}
        return cls(
            body=body,
            query=request.args.to_dict(),
            # Werkzeug reports "access_token" as "Access-Token"
            headers={
                key.lower().replace("-", "_"): value
                for key, value in request.headers.items()
            },
            original=request,
        )


class Strategy:
    """
    Base class for authentication strategies.

    Subclasses set ``name`` and implement ``authenticate``.
    """

    name: str = ""

    _outcome: Optional[AuthenticationResult] = None

    def authenticate(self, request: AuthRequest, **options):
        raise NotImplementedError

    def attempt(self) -> "Strategy":
        """Return a copy of this strategy for a single request."""
        attempt = copy.copy(self)
        attempt._outcome = None
        return attempt

    @property
    def outcome(self) -> Optional[AuthenticationResult]:
        return self._outcome

    def _record(self, result: AuthenticationResult):
        if self._outcome is not None:
            logger.warning(
                f"Strategy {self.name} signalled {result.status.value} "
                f"after {self._outcome.status.value}; ignoring"
            )
            return
        self._outcome = result

    def success(self, user, info=None):
        """Authentication succeeded for ``user``."""
        self._record(AuthenticationResult(AuthStatus.SUCCESS, user=user, info=info))

    def fail(self, info=None, status: Optional[int] = None):
        """Credentials were missing or rejected."""
        self._record(AuthenticationResult(AuthStatus.FAIL, info=info, status_code=status))

    def error(self, err: BaseException):
        """An internal error occurred while authenticating."""
        self._record(AuthenticationResult(AuthStatus.ERROR, error=err))

    def redirect(self, url: str, status: int = 302):
        self._record(AuthenticationResult(AuthStatus.REDIRECT, url=url, status_code=status))

    def pass_(self):
        """Skip authentication without failing the request."""
        self._record(AuthenticationResult(AuthStatus.PASS))
