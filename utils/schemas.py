"""
Pydantic schemas for provider responses.
"""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """
    Normalised OAuth2 token endpoint response (RFC 6749 §5.1).

    Used for both the authorization-code grant and the refresh grant.
    """

    access_token: str = Field(..., min_length=1)
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    refresh_token: Optional[str] = None
    scope: Optional[str] = None

    def scopes(self) -> List[str]:
        if not self.scope:
            return []
        # Hub answers space-separated, some providers use commas.
        return [s for s in self.scope.replace(",", " ").split() if s]


class TokenErrorResponse(BaseModel):
    """RFC 6749 §5.2 error body."""

    error: str
    error_description: Optional[str] = None
