"""
Normalized user profile.

The VK ``users.get`` response is mapped into this provider-independent
shape before it is handed to the verify callback.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Union


@dataclass
class ProfileName:
    """Structured name; missing parts are empty strings."""

    family_name: str = ""
    given_name: str = ""


@dataclass
class Profile:
    """
    Normalized user profile.

    ``display_name`` joins the given and family name with a space. An
    empty part is left out, so ``first_name="Ivan", last_name=""`` gives
    ``"Ivan"`` rather than ``"Ivan "``.
    """

    provider: str
    id: Optional[Union[int, str]] = None
    username: Optional[str] = None
    display_name: str = ""
    name: ProfileName = field(default_factory=ProfileName)
    emails: list = field(default_factory=list)
    photos: list = field(default_factory=list)

    # Original response body and the parsed user record
    raw: str = ""
    json: dict = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Render the profile with the conventional camelCase keys."""
        return {
            "provider": self.provider,
            "id": self.id,
            "username": self.username,
            "displayName": self.display_name,
            "name": {
                "familyName": self.name.family_name,
                "givenName": self.name.given_name,
            },
            "emails": list(self.emails),
            "photos": list(self.photos),
            "_raw": self.raw,
            "_json": self.json,
        }
