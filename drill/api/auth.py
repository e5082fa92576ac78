"""
Identity - Resolves bearer tokens to owners.

Token issuance (registration, login) lives outside this service; the
server is configured with a static token -> owner map.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import hmac


@dataclass
class TokenIdentityService:
    """Maps bearer tokens to owner ids."""
    tokens: dict[str, str] = field(default_factory=dict)

    def resolve(self, token: str | None) -> str | None:
        """Owner for token, or None if unknown."""
        if not token:
            return None
        for known, owner in self.tokens.items():
            if hmac.compare_digest(known, token):
                return owner
        return None
